from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
import os
from pathlib import Path, PurePath
import socket

#: Default number of trailing directory elements to show in the abbreviated
#: path to the current working directory
DEFAULT_DIRTRIM = 2

#: The line editor keymap that is active in vi command mode
VI_COMMAND_KEYMAP = "vicmd"


@dataclass
class PromptState:
    """
    The slots of the prompt that are computed outside of rendering.  The exit
    status and vi mode are not stored here, as they are read fresh every time
    the prompt is rendered.
    """

    #: ``@`` followed by the short hostname when connected over SSH or running
    #: as the superuser; otherwise empty
    host_suffix: str = ""

    #: The abbreviated path to the current working directory
    path_display: str = ""

    #: The Git branch & change symbols for the current directory (see
    #: `GitStatus.display()`), or empty when not in a repository or while the
    #: status is still being computed
    branch_status: str = ""


def is_ssh(environ: Mapping[str, str]) -> bool:
    """Is the user connected via SSH?"""
    return any(
        environ.get(var) for var in ("SSH_CONNECTION", "SSH_CLIENT", "SSH_TTY")
    )


def host_suffix(
    environ: Mapping[str, str] | None = None,
    euid: int | None = None,
    hostname: str | None = None,
) -> str:
    """
    Return ``@`` followed by the hostname up to the first dot if the user is
    connected via SSH or is the superuser; otherwise, return an empty string
    """
    if environ is None:
        environ = os.environ
    if euid is None:
        euid = os.geteuid()
    if is_ssh(environ) or euid == 0:
        if hostname is None:
            hostname = socket.gethostname()
        return "@" + hostname.split(".")[0]
    else:
        return ""


def current_dir() -> Path:
    # Prefer $PWD to os.getcwd() as the former does not resolve symlinks
    return Path(os.environ.get("PWD") or os.getcwd())


def dirtrim(
    cwd: PurePath, home: PurePath | None = None, n: int | None = DEFAULT_DIRTRIM
) -> str:
    """
    Abbreviate the path ``cwd`` in the manner of Bash's ``PROMPT_DIRTRIM``.  If
    ``cwd`` is at or under ``home`` (default: the user's home directory), the
    home directory is replaced with ``~``.  If more than ``n`` directory
    elements (not counting the home directory) remain, all but the last ``n``
    are replaced with ``...``; for example, with ``n=2``,
    ``$HOME/dotfiles/polyglot/img`` becomes ``~/.../polyglot/img``.

    ``n`` must be a positive integer; any other value is treated as
    `DEFAULT_DIRTRIM`.
    """
    if not isinstance(n, int) or isinstance(n, bool) or n < 1:
        n = DEFAULT_DIRTRIM
    if home is None:
        home = Path.home()
    if cwd == home:
        return "~"
    try:
        rel = cwd.relative_to(home)
    except ValueError:
        parts = cwd.parts[1:] if cwd.is_absolute() else cwd.parts
        if len(parts) > n:
            return "/".join(("...", *parts[-n:]))
        return str(cwd)
    else:
        if len(rel.parts) > n:
            return "/".join(("~", "...", *rel.parts[-n:]))
        return "/".join(("~", *rel.parts))


def vi_mode_indicator(keymap: str | None, default: str) -> str:
    """
    Return the prompt character to show for the line editor keymap
    ``keymap``: a colon in vi command mode, ``default`` otherwise
    """
    return ":" if keymap == VI_COMMAND_KEYMAP else default


def exit_status_segment(exit_status: int) -> str:
    """
    Return the exit status of the last command in parentheses (followed by a
    space) if it is nonzero; otherwise, return an empty string
    """
    return f"({exit_status}) " if exit_status != 0 else ""
