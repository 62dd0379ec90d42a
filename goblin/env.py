"""Reading settings from environment variables."""

from __future__ import annotations

import os

_TRUE_VALUES = frozenset({"1", "t", "T", "TRUE", "true", "True"})
_FALSE_VALUES = frozenset({"0", "f", "F", "FALSE", "false", "False"})


def getenv_bool(key: str) -> bool:
    """Return True only if the variable is set to a recognised true value.

    Unset, empty and unrecognised values all count as False.
    """
    value = os.environ.get(key, "")
    if value in _TRUE_VALUES:
        return True
    if value in _FALSE_VALUES:
        return False
    return False