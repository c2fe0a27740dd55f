from __future__ import annotations
from pathlib import Path


def cat(path: Path) -> str | None:
    """
    Return the contents of the given file with leading & trailing whitespace
    stripped.  If the file does not exist, return `None`.
    """
    try:
        return path.read_text(encoding="utf-8").strip()
    except FileNotFoundError:
        return None


def env_flag(value: str | None, default: bool = False) -> bool:
    """
    Interpret the value of an environment variable used as an on/off switch:
    ``0`` and the empty string are off, anything else is on, and an unset
    variable gives ``default``
    """
    if value is None:
        return default
    return value.strip() not in ("", "0")
