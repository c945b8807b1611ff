"""Change-log service - business logic layer."""

from pr_assistant.config import settings
from pr_assistant.core.logging import get_logger
from pr_assistant.services.changelog.client import ContentStoreClient
from pr_assistant.services.changelog.schemas import ChangeLogEntryRequest, ChangeLogEntryResult

logger = get_logger("changelog.service")


async def create_change_entry(
    client: ContentStoreClient,
    request: ChangeLogEntryRequest,
) -> ChangeLogEntryResult:
    """Store a change entry for a merged pull request."""
    payload = {
        "type": settings.change_entry_content_type,
        "name": request.title,
        "text": request.description,
        "properties": {
            "pull_request": request.pull_request.model_dump(),
            "author": {
                "user_id": request.author.user_id,
                "date": request.author.date,
            },
        },
        "tags": request.tags,
    }
    data = await client.create_object(payload)
    entry_id = str(data["id"])
    logger.info(
        f"Created change entry {entry_id} for "
        f"{request.pull_request.repository_full_name}#{request.pull_request.number}"
    )
    return ChangeLogEntryResult(entry_id=entry_id, entry_url=client.object_url(entry_id))
