"""
Configuration handlers.

Object types and objects are acknowledged at once; sizing takes
``configure_delay`` seconds, as a real device would while it measures.
"""

from placement_mock.core.messages import (
    MessageType,
    ReconfiguredObjectTypes,
    ReconfiguredObjects,
    ReconfiguredSizing,
)
from placement_mock.core.session import Phase
from placement_mock.handlers.base import register_handler


@register_handler(MessageType.CONFIGURE_OBJECT_TYPES)
def configure_object_types(session, message: dict) -> None:
    session.emit(ReconfiguredObjectTypes())


@register_handler(MessageType.CONFIGURE_OBJECTS)
def configure_objects(session, message: dict) -> None:
    session.emit(ReconfiguredObjects())


@register_handler(MessageType.CONFIGURE_SIZING)
def configure_sizing(session, message: dict) -> None:
    """
    Acknowledge sizing after the configured delay.

    An idle session waits in AWAITING_SIZING until every outstanding sizing
    request has been acknowledged.
    """
    if session.phase is Phase.IDLE:
        session.phase = Phase.AWAITING_SIZING
    session.sizing_pending += 1

    def sized():
        session.sizing_pending -= 1
        session.emit(ReconfiguredSizing())
        if session.phase is Phase.AWAITING_SIZING and session.sizing_pending == 0:
            session.phase = Phase.IDLE

    session.after(session.config.configure_delay, sized)
