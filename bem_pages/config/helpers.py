"""Utility helpers shared by the configuration loader."""

from __future__ import annotations

import json
import typing as typ
from pathlib import Path

from .models import SiteConfigError


def _optional_str(value: object | None) -> str | None:
    """Return a stripped string value or None when empty."""
    if value is None:
        return None
    text = str(value).strip()
    return text or None


def _resolve_path(base: Path, value: object | None, default: str) -> Path:
    """Return ``value`` as a path, relative ones anchored at ``base``."""
    path = Path(_optional_str(value) or default).expanduser()
    return path if path.is_absolute() else base / path


def _as_bool(key: str, value: object) -> bool:
    """Accept YAML booleans only, so ``"no"`` strings do not read as true."""
    match value:
        case bool():
            return value
        case None:
            return False
        case _:
            msg = f"'{key}' must be true or false, got {value!r}."
            raise SiteConfigError(msg)


def _base_url(value: object | None) -> str:
    """Validate the site origin and drop any trailing slash."""
    text = _optional_str(value)
    if not text:
        msg = "Site configuration is missing 'base_url'."
        raise SiteConfigError(msg)
    if not text.startswith(("http://", "https://")):
        msg = f"'base_url' must be an absolute http(s) URL, got '{text}'."
        raise SiteConfigError(msg)
    return text.rstrip("/")


def load_mapping_file(path: Path | None) -> dict[str, str]:
    """Load a JSON object of string keys to string values.

    A missing ``path`` (``None``) yields an empty mapping; a configured path
    that does not exist is an error.
    """
    if path is None:
        return {}
    if not path.exists():
        msg = f"Mapping file '{path}' not found."
        raise SiteConfigError(msg)
    loaded: typ.Any = json.loads(path.read_text(encoding="utf-8"))
    if not isinstance(loaded, dict):
        msg = f"Mapping file '{path}' must contain a JSON object."
        raise SiteConfigError(msg)
    return {str(key): str(value) for key, value in loaded.items()}


__all__ = [
    "_as_bool",
    "_base_url",
    "_optional_str",
    "_resolve_path",
    "load_mapping_file",
]
