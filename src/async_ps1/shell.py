"""
A minimal interactive shell that displays the prompt using prompt_toolkit.
Commands are passed to ``/bin/sh``; only ``cd`` and ``exit`` are handled
here.
"""

from __future__ import annotations
import asyncio
import os
from pathlib import Path
import shlex
import subprocess
import sys
from prompt_toolkit import PromptSession
from prompt_toolkit.application.current import get_app_or_none
from prompt_toolkit.formatted_text import ANSI
from prompt_toolkit.key_binding.vi_state import InputMode
from .config import Config
from .info import VI_COMMAND_KEYMAP
from .session import Session
from .styles import ANSIStyler


class ExitShell(Exception):
    def __init__(self, status: int) -> None:
        super().__init__(status)
        self.status = status


def redraw() -> None:
    """Ask the running prompt (if any) to redisplay itself"""
    if (app := get_app_or_none()) is not None:
        app.invalidate()


def current_keymap() -> str:
    app = get_app_or_none()
    if app is not None and app.vi_state.input_mode is InputMode.NAVIGATION:
        return VI_COMMAND_KEYMAP
    return "main"


def change_dir(args: list[str]) -> int:
    """
    Change the working directory, keeping :envvar:`PWD` up to date with the
    unresolved path so that symlinks are shown as such in the prompt
    """
    target = args[0] if args else str(Path.home())
    base = os.environ.get("PWD") or os.getcwd()
    newdir = os.path.normpath(os.path.join(base, os.path.expanduser(target)))
    try:
        os.chdir(newdir)
    except OSError as e:
        print(f"cd: {target}: {e.strerror}", file=sys.stderr)
        return 1
    os.environ["PWD"] = newdir
    return 0


def run_command(line: str) -> int:
    """Run a command line and return its exit status"""
    try:
        words = shlex.split(line)
    except ValueError:
        words = line.split()
    if not words:
        return 0
    if words[0] == "cd":
        return change_dir(words[1:])
    elif words[0] == "exit":
        try:
            status = int(words[1]) if len(words) > 1 else 0
        except ValueError:
            status = 2
        raise ExitShell(status)
    r = subprocess.run(line, shell=True)
    if r.returncode < 0:
        # Killed by a signal
        return 128 - r.returncode
    return r.returncode


async def repl(config: Config, has_colors: bool) -> int:
    session = Session(config, ANSIStyler(), redraw, has_colors=has_colors)
    session.start()
    ptsession: PromptSession[str] = PromptSession(vi_mode=True)
    exit_status = 0
    while True:
        if session.precmd():
            print()
        try:
            line = await ptsession.prompt_async(
                lambda: ANSI(session.render(exit_status, current_keymap())[0]),
                rprompt=lambda: ANSI(session.render(exit_status, current_keymap())[1]),
            )
        except KeyboardInterrupt:
            continue
        except EOFError:
            return exit_status
        try:
            exit_status = run_command(line)
        except ExitShell as e:
            return e.status


def run_shell(config: Config, has_colors: bool) -> int:
    return asyncio.run(repl(config, has_colors))
