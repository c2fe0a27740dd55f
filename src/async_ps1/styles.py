from __future__ import annotations
from dataclasses import dataclass
from enum import Enum
from typing import ClassVar, Protocol


class Color(Enum):
    """
    An enumeration of the named colors understood in ``%F{...}`` and
    ``%K{...}`` directives.  Each color's value equals its xterm number.
    """

    BLACK = 0
    RED = 1
    GREEN = 2
    YELLOW = 3
    BLUE = 4
    MAGENTA = 5
    CYAN = 6
    WHITE = 7

    def asfg(self) -> int:
        """
        Return the ANSI SGR parameter for setting the color as the foreground
        color
        """
        return self.value + 30

    def asbg(self) -> int:
        """
        Return the ANSI SGR parameter for setting the color as the background
        color
        """
        return self.value + 40


def color_params(spec: str, background: bool = False) -> str | None:
    """
    Convert a color as written in a ``%F{...}``/``%K{...}`` directive (a color
    name, ``default``, or an xterm color number from 0 to 255) to ANSI SGR
    parameters.  Returns `None` for colors that cannot be converted.
    """
    spec = spec.strip().lower()
    if spec == "default":
        return "49" if background else "39"
    try:
        c = Color[spec.upper()]
    except KeyError:
        pass
    else:
        return str(c.asbg() if background else c.asfg())
    if not spec.isdigit() or int(spec) > 255:
        return None
    n = int(spec)
    if n < 8:
        return str(n + (40 if background else 30))
    elif n < 16:
        return str(n + (92 if background else 82))
    else:
        return f"{48 if background else 38};5;{n}"


#: SGR parameters for the directives that take no argument
ATTRIBUTE_PARAMS = {
    "f": "39",
    "k": "49",
    "B": "1",
    "b": "22",
    "S": "7",
    "s": "27",
    "U": "4",
    "u": "24",
}


def sgr_params(code: str, arg: str | None) -> str | None:
    """
    Return the ANSI SGR parameters for the prompt directive ``%<code>`` (with
    argument ``arg`` for ``%F{...}`` and ``%K{...}``), or `None` if the
    directive has no ANSI equivalent
    """
    if code in ("F", "K"):
        return color_params(arg or "", background=code == "K")
    return ATTRIBUTE_PARAMS.get(code)


class Styler(Protocol):
    prompt_suffix: ClassVar[str]

    def escape(self, s: str) -> str: ...

    def directive(self, code: str, arg: str | None) -> str: ...


class BashStyler:
    """Class for escaping & styling strings for use in Bash's PS1 variable"""

    #: The prompt character shown at the end of the prompt when not in vi
    #: command mode
    prompt_suffix: ClassVar[str] = r"\$"

    def directive(self, code: str, arg: str | None) -> str:
        r"""
        Return the escape sequence for the prompt directive ``%<code>``,
        wrapped in ``\[ ... \]`` so that Bash does not count it towards the
        prompt's width.  Directives without an ANSI equivalent produce an
        empty string.

        :param str code: the directive letter (``F``, ``f``, ``B``, etc.)
        :param arg: the directive's braced argument, if any
        """
        if (params := sgr_params(code, arg)) is None:
            return ""
        return rf"\[\e[{params}m\]"

    def escape(self, s: str) -> str:
        """
        Escape characters in the string ``s`` that have special meaning in a
        PS1 variable.

        Bash first decodes the backslash escapes in PS1 and then (with the
        ``promptvars`` option, which is on by default) expands the result as
        though it were double-quoted, so backslashes, ``$``, and backticks
        need escaping for both passes.
        """
        return s.replace("\\", r"\\\\").replace("$", r"\\$").replace("`", r"\\`")


class ANSIStyler:
    """Class for styling strings for display immediately in the terminal"""

    #: The prompt character shown at the end of the prompt when not in vi
    #: command mode
    prompt_suffix: ClassVar[str] = "$"

    def directive(self, code: str, arg: str | None) -> str:
        """
        Return the ANSI escape sequence for the prompt directive ``%<code>``,
        or an empty string if there is none.

        :param str code: the directive letter (``F``, ``f``, ``B``, etc.)
        :param arg: the directive's braced argument, if any
        """
        if (params := sgr_params(code, arg)) is None:
            return ""
        return f"\x1B[{params}m"

    def escape(self, s: str) -> str:
        return s


class ZshStyler:
    """Class for escaping & styling strings for use in zsh's PS1 variable"""

    #: The prompt character shown at the end of the prompt when not in vi
    #: command mode
    prompt_suffix: ClassVar[str] = "%#"

    def directive(self, code: str, arg: str | None) -> str:
        """
        zsh understands the directives natively, so they are written back out
        unchanged
        """
        if arg is None:
            return f"%{code}"
        return f"%{code}{{{arg}}}"

    def escape(self, s: str) -> str:
        return s.replace("%", "%%")


@dataclass
class Palette:
    """The colors of the four parts of the default prompt"""

    exit_status: str = "red"
    user_host: str = "green"
    path: str = "blue"
    branch_status: str = "yellow"
