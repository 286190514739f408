"""
Handler registry and decorator for inbound message types.

Minimal decorator pattern - decorator only handles registration, no hidden behavior.
"""

from typing import Dict, Callable, Any, Optional
import functools
import logging

from placement_mock.core.messages import Envelope

logger = logging.getLogger(__name__)


class HandlerRegistry:
    """
    Registry for inbound message handlers.

    Handlers are registered using the @register_handler decorator.
    Each handler receives the Session and the envelope's message dict.
    """

    def __init__(self):
        self._handlers: Dict[str, Callable] = {}

    def register(self, msg_type: str, handler: Callable) -> None:
        """
        Register a handler.

        Args:
            msg_type: Inbound message type ("domain:action")
            handler: Function that handles the message
        """
        if msg_type in self._handlers:
            logger.warning(f"Handler for '{msg_type}' is being re-registered")
        self._handlers[msg_type] = handler
        logger.debug(f"Registered handler: {msg_type}")

    def get(self, msg_type: str) -> Optional[Callable]:
        """Get a handler by message type."""
        return self._handlers.get(msg_type)

    def dispatch(self, session: Any, envelope: Envelope) -> bool:
        """
        Run the handler for an envelope.

        Unknown types are ignored.

        Returns:
            True if a handler exists for the envelope's type
        """
        handler = self._handlers.get(envelope.type)
        if handler is None:
            return False

        try:
            handler(session, envelope.message)
        except (TypeError, ValueError) as e:
            # Bad payload for this handler; the session keeps going
            logger.warning(f"Handler for '{envelope.type}' rejected message: {e}")
        return True

    def list_types(self) -> list:
        """List all registered message types."""
        return list(self._handlers.keys())


# Global registry instance
_registry = HandlerRegistry()


def get_registry() -> HandlerRegistry:
    """Get the global handler registry."""
    return _registry


def register_handler(msg_type: str) -> Callable:
    """
    Decorator to register an inbound message handler.

    Usage:
        @register_handler(MessageType.CONFIGURE_OBJECTS)
        def configure_objects(session, message: dict):
            session.emit(ReconfiguredObjects())
    """
    key = getattr(msg_type, "value", msg_type)

    def decorator(fn: Callable) -> Callable:
        _registry.register(key, fn)

        @functools.wraps(fn)
        def wrapper(*args, **kwargs):
            return fn(*args, **kwargs)

        return wrapper

    return decorator
