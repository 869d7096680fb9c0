"""Outbound webhook notification for newly created todos."""

from typing import Optional
import httpx
from src.models.todo import Todo
from src.utils.config import get_webhook_timeout_seconds, get_webhook_url
from src.utils.logging import get_structured_logger, mask_sensitive_data

logger = get_structured_logger(__name__)

TODO_CREATED_EVENT = "todo.created"


def build_created_payload(todo: Todo) -> dict:
    return {"event": TODO_CREATED_EVENT, "data": todo.to_api()}


async def notify_todo_created(
    todo: Todo,
    *,
    url: Optional[str] = None,
    http_client: Optional[httpx.AsyncClient] = None,
) -> bool:
    """
    POST a todo.created event to the configured webhook.

    Returns True when the webhook accepted the event. Failures are logged
    and swallowed; they never reach the caller.
    """
    url = url or get_webhook_url()
    if not url:
        return False

    payload = build_created_payload(todo)
    try:
        if http_client is not None:
            response = await http_client.post(url, json=payload)
        else:
            async with httpx.AsyncClient(timeout=get_webhook_timeout_seconds()) as client:
                response = await client.post(url, json=payload)
        response.raise_for_status()
    except httpx.HTTPStatusError as e:
        logger.warning(
            "Webhook rejected todo.created event",
            todo_id=todo.id,
            status_code=e.response.status_code,
        )
        return False
    except Exception as e:
        logger.error(
            "Webhook delivery failed",
            todo_id=todo.id,
            error=mask_sensitive_data(str(e)),
            error_type=type(e).__name__,
        )
        return False

    logger.info("Webhook delivered", todo_id=todo.id, event=TODO_CREATED_EVENT)
    return True
