"""
Contract with the chat assistant that interprets free-text commands
"""

import json
from dataclasses import dataclass
from typing import Any, Optional, Tuple

from commands import Command, command_from_dict
from data_models import AppState
from log_setup import get_logger

logger = get_logger(__name__)


class CommandInterpretationError(ValueError):
    """The assistant reply does not have the expected shape"""


@dataclass(frozen=True)
class ChatResponse:
    response_text: str
    action: Optional[Command] = None
    raw_action: Optional[dict] = None

    @property
    def needs_confirmation(self) -> bool:
        return self.action is not None


def serialize_context(state: AppState) -> Tuple[str, str]:
    """Users and items as the JSON strings the assistant receives"""
    users = [{"id": user.id, "name": user.name} for user in state.users]
    items = []
    for receipt in state.receipts.values():
        for item in state.receipt_items(receipt.id):
            items.append({
                "id": item.id,
                "name": item.name,
                "description": item.description,
                "price": float(item.price),
                "userIds": list(item.user_ids),
                "storeName": receipt.store_name,
            })
    return json.dumps(users, ensure_ascii=False), json.dumps(items, ensure_ascii=False)


def parse_chat_response(data: Any) -> ChatResponse:
    """Validate an assistant reply of the form {response, actionToConfirm?}"""
    if isinstance(data, str):
        try:
            data = json.loads(data)
        except json.JSONDecodeError as e:
            raise CommandInterpretationError(f"Reply is not JSON: {e}") from e

    if not isinstance(data, dict):
        raise CommandInterpretationError(f"Reply must be an object, got {type(data).__name__}")

    text = data.get("response", data.get("responseText"))
    if not isinstance(text, str):
        raise CommandInterpretationError("Reply has no response text")

    raw_action = data.get("actionToConfirm")
    if raw_action is None:
        return ChatResponse(response_text=text)

    action = command_from_dict(raw_action)
    if action is None:
        raise CommandInterpretationError(f"Unrecognized action: {raw_action!r}")

    logger.debug("Assistant proposes %s", type(action).__name__)
    return ChatResponse(response_text=text, action=action, raw_action=raw_action)
