"""
Calibration handler.

After the welcome screen the full marker list is announced, then every
marker but the first is presented ``marker_delay`` seconds apart. The whole
schedule is computed up front from the configured markers, so
calibration:done always lands ``marker_delay * (len(markers) - 1)`` seconds
after calibration:start.
"""

import logging

from placement_mock.core.messages import (
    CalibrationDone,
    CalibrationNextMarker,
    CalibrationStart,
    MessageType,
)
from placement_mock.core.session import Phase
from placement_mock.handlers.base import register_handler

logger = logging.getLogger(__name__)


@register_handler(MessageType.CALIBRATION_LISTEN_TO_START)
def listen_to_start(session, message: dict) -> None:
    session.phase = Phase.CALIBRATING
    session.after(session.config.welcome_delay, lambda: start_calibration(session))


def start_calibration(session) -> None:
    """Runs once the welcome screen is over."""
    config = session.config

    if config.skip_calibration:
        logger.debug(f"[session {session.id}] calibration skipped")
        session.emit(CalibrationDone())
        return

    markers = config.markers
    session.markers_remaining = list(markers)
    session.emit(CalibrationStart(markers=markers))
    # the start marker is shown by calibration:start itself
    session.markers_remaining.pop(0)

    for i, marker in enumerate(markers[1:], start=1):
        session.after(i * config.marker_delay, _next_marker_callback(session, marker))

    session.emit_after(config.calibration_duration, CalibrationDone())


def _next_marker_callback(session, marker: str):
    def next_marker():
        if session.markers_remaining:
            session.markers_remaining.pop(0)
        session.emit(CalibrationNextMarker(marker=marker))
    return next_marker
