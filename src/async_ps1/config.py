from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass, field
import logging
import os
from .info import DEFAULT_DIRTRIM
from .scheduler import AsyncMethod
from .styles import Palette
from .util import env_flag

log = logging.getLogger(__name__)

#: Prefix of the environment variables that configure the prompt
ENV_PREFIX = "ASYNC_PS1_"


@dataclass
class Config:
    #: Asynchronous method to use instead of the automatically selected one
    force_async_method: AsyncMethod | None = None

    #: Number of trailing directory elements to show in the path
    dirtrim: int = DEFAULT_DIRTRIM

    palette: Palette = field(default_factory=Palette)

    #: Whether to put the prompt character on its own line
    multiline: bool = True

    #: Whether to print a blank line before every prompt but the first
    blank_lines: bool = False

    #: Whether to emit debugging diagnostics
    debug: bool = False

    #: Template to use instead of the default left prompt
    custom_prompt: str | None = None

    #: Template to use instead of the default right prompt
    custom_rprompt: str | None = None

    @classmethod
    def from_env(cls, environ: Mapping[str, str] | None = None) -> Config:
        """
        Construct a `Config` from the ``ASYNC_PS1_*`` environment variables.
        Invalid values are ignored in favor of the defaults.
        """
        if environ is None:
            environ = os.environ

        def get(name: str) -> str | None:
            return environ.get(ENV_PREFIX + name)

        force: AsyncMethod | None = None
        if forced := get("FORCE_ASYNC_METHOD"):
            try:
                force = AsyncMethod(forced)
            except ValueError:
                log.debug("Ignoring unknown asynchronous method %r", forced)

        palette = Palette()
        for role in ("exit_status", "user_host", "path", "branch_status"):
            if color := get(f"COLORS_{role.upper()}"):
                setattr(palette, role, color)

        return cls(
            force_async_method=force,
            dirtrim=parse_dirtrim(get("DIRTRIM")),
            palette=palette,
            multiline=env_flag(get("MULTILINE"), default=True),
            blank_lines=env_flag(get("BLANK_LINES")),
            debug=env_flag(get("DEBUG")),
            custom_prompt=get("CUSTOM_PROMPT"),
            custom_rprompt=get("CUSTOM_RPROMPT"),
        )


def parse_dirtrim(value: str | None) -> int:
    """
    Parse a path segment count, falling back to `DEFAULT_DIRTRIM` for missing,
    malformed, or non-positive values
    """
    if value is None or not value.strip():
        return DEFAULT_DIRTRIM
    try:
        n = int(value)
    except ValueError:
        log.debug("Ignoring invalid dirtrim value %r", value)
        return DEFAULT_DIRTRIM
    return n if n >= 1 else DEFAULT_DIRTRIM


def configure_logging(debug: bool) -> None:
    level = logging.DEBUG if debug else logging.WARNING
    logging.basicConfig(level=level, format="async-ps1: %(message)s")
