"""Constants for the batchloader package."""

from __future__ import annotations

from typing import Final

# Default coordinator name used in log messages and stats
DEFAULT_NAME: Final = "batchloader"

# Option keys
CONF_NAME: Final = "name"
CONF_KEY_FN: Final = "key_fn"
CONF_SCHEDULE: Final = "schedule"
CONF_DELAY: Final = "delay"

# Scheduling modes
# "soon" runs the flush on the next event loop iteration (loop.call_soon).
# "timer" runs it after a delay (loop.call_later), widening the batch window.
SCHEDULE_SOON: Final = "soon"
SCHEDULE_TIMER: Final = "timer"
SCHEDULE_MODES: Final = (SCHEDULE_SOON, SCHEDULE_TIMER)
DEFAULT_SCHEDULE: Final = SCHEDULE_SOON

# Timer delay in seconds (only used with SCHEDULE_TIMER)
DEFAULT_DELAY: Final = 0.0
MIN_DELAY: Final = 0.0
MAX_DELAY: Final = 1.0
