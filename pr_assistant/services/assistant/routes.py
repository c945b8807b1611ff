"""Assistant inspection routes."""

from fastapi import APIRouter, Request

from pr_assistant.core.exceptions import AssistantNotFoundError
from pr_assistant.core.schemas.responses import ApiResponse
from pr_assistant.services.assistant.schemas import pull_request_process_id
from pr_assistant.services.assistant.state import AssistantState

router = APIRouter()


@router.get("/assistants/{org}/{repo}/{number}", response_model=ApiResponse[AssistantState])
async def get_assistant(org: str, repo: str, number: int, request: Request):
    """Return the latest snapshot of a pull request assistant."""
    process_id = pull_request_process_id(org, repo, number)
    state = request.app.state.runtime.get_state(process_id)
    if state is None:
        raise AssistantNotFoundError(process_id)
    return ApiResponse[AssistantState](data=state)
