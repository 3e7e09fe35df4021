# monitorcore/utils/loading.py
from __future__ import annotations

import importlib
from typing import Any

from ..core.errors import ConfigError


def import_object(path: str) -> Any:
    """
    Resolve ``"package.module:attr"`` (or ``"package.module.attr"``) to an object.

    Raises:
        ConfigError: malformed path, missing module or missing attribute
    """
    if not path or not isinstance(path, str):
        raise ConfigError(message=f"invalid import path: {path!r}")

    if ":" in path:
        module_name, _, attr = path.partition(":")
    else:
        module_name, _, attr = path.rpartition(".")

    if not module_name or not attr:
        raise ConfigError(message=f"invalid import path: {path!r}", details={"path": path})

    try:
        module = importlib.import_module(module_name)
    except ImportError as e:
        raise ConfigError(
            message=f"cannot import module '{module_name}': {e}",
            details={"path": path},
            cause=e,
        ) from e

    obj = module
    for part in attr.split("."):
        try:
            obj = getattr(obj, part)
        except AttributeError as e:
            raise ConfigError(
                message=f"'{module_name}' has no attribute '{attr}'",
                details={"path": path},
                cause=e,
            ) from e
    return obj
