"""Utility components for the placement mock."""

from placement_mock.utils.logging import setup_logging, get_logger

__all__ = [
    "setup_logging",
    "get_logger",
]
