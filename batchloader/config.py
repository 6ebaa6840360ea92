"""Option validation for batch coordinators."""

from __future__ import annotations

import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass
from typing import Any, Final

import voluptuous as vol

from .const import (
    CONF_DELAY,
    CONF_KEY_FN,
    CONF_NAME,
    CONF_SCHEDULE,
    DEFAULT_DELAY,
    DEFAULT_NAME,
    DEFAULT_SCHEDULE,
    MAX_DELAY,
    MIN_DELAY,
    SCHEDULE_MODES,
    SCHEDULE_SOON,
)
from .exceptions import InvalidOptionsError

_LOGGER = logging.getLogger(__name__)


def _callable_or_none(value: Any) -> Any:
    """Validate that value is a callable or None."""
    if value is None or callable(value):
        return value
    raise vol.Invalid(f"expected a callable, got {type(value).__name__}")


OPTIONS_SCHEMA: Final = vol.Schema(
    {
        vol.Optional(CONF_NAME, default=DEFAULT_NAME): vol.All(str, vol.Length(min=1)),
        vol.Optional(CONF_KEY_FN, default=None): _callable_or_none,
        vol.Optional(CONF_SCHEDULE, default=DEFAULT_SCHEDULE): vol.In(SCHEDULE_MODES),
        vol.Optional(CONF_DELAY, default=DEFAULT_DELAY): vol.All(
            vol.Coerce(float),
            vol.Range(min=MIN_DELAY, max=MAX_DELAY),
        ),
    }
)


@dataclass(frozen=True, slots=True)
class LoaderOptions:
    """Validated coordinator options.

    Attributes:
        name: Name used in log messages and stats.
        key_fn: Canonical key derivation, or None for the default.
        schedule: Flush scheduling mode ("soon" or "timer").
        delay: Timer delay in seconds, ignored in "soon" mode.
    """

    name: str = DEFAULT_NAME
    key_fn: Callable[[Any], Hashable] | None = None
    schedule: str = DEFAULT_SCHEDULE
    delay: float = DEFAULT_DELAY


def validate_options(options: dict[str, Any]) -> LoaderOptions:
    """Validate raw coordinator options.

    Args:
        options: Option mapping, keyed by the CONF_* constants.

    Returns:
        The validated options with defaults filled in.

    Raises:
        InvalidOptionsError: If an option is unknown, of the wrong type,
            or out of range.
    """
    try:
        validated = OPTIONS_SCHEMA(options)
    except vol.Invalid as err:
        option = str(err.path[0]) if err.path else None
        raise InvalidOptionsError(f"Invalid coordinator options: {err}", option=option) from err

    if validated[CONF_SCHEDULE] == SCHEDULE_SOON and validated[CONF_DELAY]:
        _LOGGER.debug(
            "Ignoring delay %.3fs for '%s': only used with timer scheduling",
            validated[CONF_DELAY],
            validated[CONF_NAME],
        )

    return LoaderOptions(
        name=validated[CONF_NAME],
        key_fn=validated[CONF_KEY_FN],
        schedule=validated[CONF_SCHEDULE],
        delay=validated[CONF_DELAY],
    )


__all__ = ["OPTIONS_SCHEMA", "LoaderOptions", "validate_options"]
