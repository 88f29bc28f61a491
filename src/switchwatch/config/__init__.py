from __future__ import annotations

from .settings import (
    CONFIG_ENV_VAR,
    expand_path,
    load_settings,
    read_document,
    read_token,
)
from .validation import validate_document

__all__ = [
    "CONFIG_ENV_VAR",
    "expand_path",
    "load_settings",
    "read_document",
    "read_token",
    "validate_document",
]
