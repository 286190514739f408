"""
Work phase handler.

work:start goes out immediately; the demo objects are created on the next
scheduler tick, then one is moved and one removed. Every delay counts from
the moment work:init was received.
"""

from placement_mock.core.messages import (
    MessageType,
    ObjectCreate,
    ObjectMove,
    ObjectRemove,
    WorkStart,
)
from placement_mock.core.session import Phase
from placement_mock.handlers.base import register_handler


@register_handler(MessageType.WORK_INIT)
def work_init(session, message: dict) -> None:
    config = session.config
    session.phase = Phase.WORKING
    session.emit(WorkStart())

    def create_objects():
        for obj in config.demo_objects:
            session.emit(ObjectCreate(name=obj.name, type=obj.type, top=obj.top, left=obj.left))

    session.after(0, create_objects)

    moved = config.moved_object
    session.emit_after(config.move_delay, ObjectMove(name=moved.name, top=moved.top, left=moved.left))
    session.emit_after(config.remove_delay, ObjectRemove(name=config.removed_object))
