"""Assistant service - routes webhook events to assistant instances."""

from typing import Literal, Optional

from pydantic import BaseModel, TypeAdapter

from pr_assistant.core.exceptions import ProcessAlreadyStartedError, ProcessNotFoundError
from pr_assistant.core.logging import get_logger
from pr_assistant.services.assistant.runtime import AssistantRuntime
from pr_assistant.services.assistant.schemas import (
    AssistantEvent,
    IssueCommentEvent,
    PullRequestEvent,
    pull_request_process_id,
)

logger = get_logger("assistant.service")

SUPPORTED_EVENTS = ("pull_request", "issue_comment")
START_ACTIONS = ("opened", "reopened")

_event_adapter = TypeAdapter(AssistantEvent)


class DispatchResult(BaseModel):
    outcome: Literal["started", "signalled", "ignored"]
    process_id: Optional[str] = None
    reason: Optional[str] = None


def parse_event(event_type: str, payload: dict) -> AssistantEvent:
    """Build the typed event of a webhook delivery."""
    return _event_adapter.validate_python({"kind": event_type, "payload": payload})


def event_process_id(event: AssistantEvent) -> str:
    repository = event.payload.repository
    if isinstance(event, PullRequestEvent):
        number = event.payload.pull_request.number
    else:
        number = event.payload.issue.number
    return pull_request_process_id(repository.owner.login, repository.name, number)


def dispatch_event(runtime: AssistantRuntime, event: AssistantEvent) -> DispatchResult:
    """Start or signal the assistant instance of the event's pull request.

    ``opened`` and ``reopened`` start an instance; every other event for a
    pull request is signalled to its running instance. Comments on issues
    that are not pull requests are ignored.
    """
    if isinstance(event, IssueCommentEvent) and event.payload.issue.pull_request is None:
        logger.info(f"Skip comment on issue #{event.payload.issue.number}: not a pull request")
        return DispatchResult(outcome="ignored", reason="Not a pull request")

    process_id = event_process_id(event)
    action = event.payload.action

    if isinstance(event, PullRequestEvent) and action in START_ACTIONS:
        try:
            runtime.start_assistant(event)
            return DispatchResult(outcome="started", process_id=process_id)
        except ProcessAlreadyStartedError:
            logger.info(f"Assistant {process_id} already running, signalling instead")

    try:
        runtime.signal(process_id, event)
    except ProcessNotFoundError:
        logger.info(f"[{event.kind}] No running assistant for {process_id} ({action}), ignored")
        return DispatchResult(
            outcome="ignored",
            process_id=process_id,
            reason="No running assistant",
        )

    logger.info(f"[{event.kind}] Event ({action}) sent to existing assistant: {process_id}")
    return DispatchResult(outcome="signalled", process_id=process_id)
