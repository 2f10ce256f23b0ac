"""Store adapter protocol and the message-driven adapter used by panels."""

from __future__ import annotations

import logging
from collections.abc import Mapping
from typing import Any, Callable, Protocol

from ..errors import InvalidStatePayloadError, StoreDispatchError
from .actions import Action
from .connector import Message, SantokuConnector
from .state import StoreState

__all__ = [
    "StoreAdapter",
    "StateListener",
    "FailureListener",
    "SantokuAdapter",
    "ACTION_MESSAGE",
    "STATE_MESSAGE",
    "ERROR_MESSAGE",
]

_LOGGER = logging.getLogger(__name__)

ACTION_MESSAGE = "action"
STATE_MESSAGE = "state"
ERROR_MESSAGE = "error"

StateListener = Callable[[StoreState], None]
FailureListener = Callable[[str, Mapping[str, Any]], None]


class StoreAdapter(Protocol):
    """Minimal interface the engine needs from the external store."""

    def dispatch(self, action: Action) -> None:
        ...

    def get_state(self) -> StoreState | None:
        ...

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        ...


class SantokuAdapter:
    """Store proxy speaking to the real store through a :class:`SantokuConnector`.

    Actions leave as ``action`` messages. ``state`` messages replace the
    cached snapshot and notify subscribers; ``error`` messages reach failure
    listeners so the panel can surface them.
    """

    def __init__(self, connector: SantokuConnector) -> None:
        self._connector = connector
        self._state: StoreState | None = None
        self._listeners: list[StateListener] = []
        self._failure_listeners: list[FailureListener] = []
        self._unsubscribe_connector: Callable[[], None] | None = connector.subscribe(
            self._handle_message
        )

    @property
    def connector(self) -> SantokuConnector:
        return self._connector

    # ------------------------------------------------------------------
    # StoreAdapter protocol
    # ------------------------------------------------------------------
    def dispatch(self, action: Action) -> None:
        message = Message(type=ACTION_MESSAGE, data=action.to_dict())
        try:
            self._connector.send_message(message)
        except Exception as exc:
            raise StoreDispatchError(
                f"Failed to dispatch {action.type}: {exc}",
                action_type=action.type,
            ) from exc
        _LOGGER.debug("Dispatched %s (message %s)", action.type, message.id)

    def get_state(self) -> StoreState | None:
        return self._state

    def subscribe(self, listener: StateListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            try:
                self._listeners.remove(listener)
            except ValueError:
                pass

        return unsubscribe

    # ------------------------------------------------------------------
    # Failure reporting
    # ------------------------------------------------------------------
    def add_failure_listener(self, listener: FailureListener) -> None:
        self._failure_listeners.append(listener)

    def remove_failure_listener(self, listener: FailureListener) -> None:
        try:
            self._failure_listeners.remove(listener)
        except ValueError:  # pragma: no cover - defensive guard
            pass

    def close(self) -> None:
        """Stop listening to the connector and drop all subscribers."""

        if self._unsubscribe_connector is not None:
            self._unsubscribe_connector()
            self._unsubscribe_connector = None
        self._listeners.clear()
        self._failure_listeners.clear()

    # ------------------------------------------------------------------
    # Internal helpers
    # ------------------------------------------------------------------
    def _handle_message(self, message: Message) -> None:
        if message.type == STATE_MESSAGE:
            try:
                state = StoreState.from_payload(message.data)
            except InvalidStatePayloadError as exc:
                _LOGGER.warning("Ignoring state message %s: %s", message.id, exc)
                return
            self._state = state
            for listener in list(self._listeners):
                try:
                    listener(state)
                except Exception:  # pragma: no cover - subscriber isolation
                    _LOGGER.exception("Store state listener failed")
        elif message.type == ERROR_MESSAGE:
            details = message.data if isinstance(message.data, Mapping) else {}
            text = str(details.get("message") or message.data or "Store reported an error")
            _LOGGER.warning("Store error: %s", text)
            for listener in list(self._failure_listeners):
                try:
                    listener(text, details)
                except Exception:
                    _LOGGER.exception("Store failure listener failed")
        else:
            _LOGGER.debug("Ignoring message of type %s", message.type)
