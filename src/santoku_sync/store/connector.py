"""Message envelope and connector bridging the engine and the store's host page."""

from __future__ import annotations

import logging
import uuid
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any, Callable

__all__ = ["Message", "MessageListener", "SantokuConnector"]

_LOGGER = logging.getLogger(__name__)


def _generate_message_id() -> str:
    return uuid.uuid4().hex


@dataclass(slots=True, frozen=True)
class Message:
    """JSON-serialisable envelope exchanged with the store."""

    type: str
    data: Any = None
    id: str = field(default_factory=_generate_message_id)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "type": self.type, "data": self.data}

    @classmethod
    def from_payload(cls, payload: Any) -> "Message":
        if isinstance(payload, Message):
            return payload
        if not isinstance(payload, Mapping):
            raise ValueError("Messages must be mappings")
        message_type = payload.get("type")
        if not isinstance(message_type, str) or not message_type:
            raise ValueError("Messages require a type")
        message_id = payload.get("id")
        if message_id is None:
            return cls(type=message_type, data=payload.get("data"))
        return cls(type=message_type, data=payload.get("data"), id=str(message_id))


MessageListener = Callable[[Message], None]


class SantokuConnector:
    """Two-way message channel.

    ``post`` delivers outbound payloads to the presentation layer (for a web
    panel this is its ``postMessage``). The host calls :meth:`receive` with
    every inbound payload, which is forwarded to subscribers.
    """

    def __init__(self, post: Callable[[dict[str, Any]], Any]) -> None:
        self._post = post
        self._listeners: list[MessageListener] = []

    def send_message(self, message: Message) -> None:
        self._post(message.to_dict())

    def subscribe(self, listener: MessageListener) -> Callable[[], None]:
        """Register ``listener``; returns a callback that unsubscribes it."""

        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    def receive(self, payload: Any) -> None:
        try:
            message = Message.from_payload(payload)
        except ValueError as exc:
            _LOGGER.warning("Dropping malformed message %r: %s", payload, exc)
            return
        for listener in list(self._listeners):
            try:
                listener(message)
            except Exception:  # pragma: no cover - subscriber isolation
                _LOGGER.exception("Message listener failed for %s", message.type)
