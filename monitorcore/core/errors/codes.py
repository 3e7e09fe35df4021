# monitorcore/core/errors/codes.py
from __future__ import annotations

from typing import Final


# ---- canonical error codes (stable public contract) ----
# generic
UNKNOWN: Final[str] = "UNKNOWN"
INTERNAL_ERROR: Final[str] = "INTERNAL_ERROR"
INVALID_STATE: Final[str] = "INVALID_STATE"
TIMEOUT: Final[str] = "TIMEOUT"

# session / protocol
HANDSHAKE_FAILED: Final[str] = "HANDSHAKE_FAILED"
TRANSPORT_FAILED: Final[str] = "TRANSPORT_FAILED"

# registry / step
STEP_NOT_FOUND: Final[str] = "STEP_NOT_FOUND"
STEP_ALREADY_REGISTERED: Final[str] = "STEP_ALREADY_REGISTERED"
REGISTRY_FROZEN: Final[str] = "REGISTRY_FROZEN"
STEP_RAISED: Final[str] = "STEP_RAISED"

# config
CONFIG_INVALID: Final[str] = "CONFIG_INVALID"


# ---- semantic groups (internal helpers) ----

SESSION_FATAL_CODES: Final[set[str]] = {
    HANDSHAKE_FAILED,
}

KNOWN_CODES: Final[set[str]] = {
    UNKNOWN,
    INTERNAL_ERROR,
    INVALID_STATE,
    TIMEOUT,
    HANDSHAKE_FAILED,
    TRANSPORT_FAILED,
    STEP_NOT_FOUND,
    STEP_ALREADY_REGISTERED,
    REGISTRY_FROZEN,
    STEP_RAISED,
    CONFIG_INVALID,
}
