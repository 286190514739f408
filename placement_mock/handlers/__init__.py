"""
Inbound message handlers for the placement mock.

Handlers are registered using the @register_handler decorator and
registered on import of this package.
"""

from placement_mock.handlers.base import (
    HandlerRegistry,
    register_handler,
    get_registry,
)

# Import handler modules to register them
from placement_mock.handlers import configure
from placement_mock.handlers import calibration
from placement_mock.handlers import work

__all__ = [
    "HandlerRegistry",
    "register_handler",
    "get_registry",
]
