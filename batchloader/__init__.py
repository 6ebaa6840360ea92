"""Request batching and deduplication for asyncio key-based lookups."""

from __future__ import annotations

from .coordinator import BatchCoordinator, FetchFunc
from .exceptions import BatchLoaderError, InvalidOptionsError, LoaderContractError
from .keys import canonical_key
from .metrics import LoaderStats

__all__ = [
    "BatchCoordinator",
    "BatchLoaderError",
    "FetchFunc",
    "InvalidOptionsError",
    "LoaderContractError",
    "LoaderStats",
    "canonical_key",
]
