"""
Prompt templates

A template is written in a small subset of zsh's prompt syntax:

- ``%F{color}`` & ``%f`` turn a foreground color on & off; ``%K{color}`` &
  ``%k`` do the same for the background color
- ``%B``/``%b`` (bold), ``%S``/``%s`` (standout), and ``%U``/``%u``
  (underline) turn text attributes on & off
- ``%%`` is a literal percent sign
- ``${name}`` is replaced by the value of the named slot; see `PLACEHOLDERS`

Anything else is literal text.
"""

from __future__ import annotations
from collections.abc import Mapping
from dataclasses import dataclass
from typing import Union
from .styles import Palette, Styler

#: The names that may be used in ``${name}`` placeholders
PLACEHOLDERS = frozenset({"exit", "user", "host", "path", "branch", "vimode", "sep"})

#: Placeholders whose values are already in the target's prompt syntax and so
#: are not escaped
RAW_PLACEHOLDERS = frozenset({"vimode"})

#: Directive letters that take no argument
SIMPLE_DIRECTIVES = "fkBbSsUu"

#: The prompt used in terminals that cannot handle colors or a right prompt,
#: such as Emacs's shell mode
DUMB_PROMPT = "${exit}${user}${host} ${path}${branch} ${vimode} "


@dataclass(frozen=True)
class Literal:
    text: str


@dataclass(frozen=True)
class Directive:
    #: The letter after the ``%``
    code: str
    #: The contents of the braces for ``%F{...}`` and ``%K{...}``
    arg: str | None = None


@dataclass(frozen=True)
class Placeholder:
    name: str


Segment = Union[Literal, Directive, Placeholder]


@dataclass(frozen=True)
class Template:
    segments: tuple[Segment, ...]

    @classmethod
    def parse(cls, s: str) -> Template:
        """
        Split a template string into literal text, directives, and
        placeholders.  As with `strip_colors()`, an unterminated ``%F{`` or
        ``%K{`` causes the rest of the string to be discarded.
        """
        segments: list[Segment] = []
        buf = ""
        i = 0
        while i < len(s):
            if s.startswith("%%", i):
                buf += "%"
                i += 2
                continue
            elif s.startswith(("%F{", "%K{"), i):
                end = closing_brace(s, i + 2)
                if buf:
                    segments.append(Literal(buf))
                    buf = ""
                if end is None:
                    i = len(s)
                    break
                segments.append(Directive(s[i + 1], s[i + 3 : end]))
                i = end + 1
                continue
            elif s[i] == "%" and i + 1 < len(s) and s[i + 1] in SIMPLE_DIRECTIVES:
                if buf:
                    segments.append(Literal(buf))
                    buf = ""
                segments.append(Directive(s[i + 1]))
                i += 2
                continue
            elif s.startswith("${", i):
                end = s.find("}", i + 2)
                if end != -1 and (name := s[i + 2 : end]) in PLACEHOLDERS:
                    if buf:
                        segments.append(Literal(buf))
                        buf = ""
                    segments.append(Placeholder(name))
                    i = end + 1
                    continue
            buf += s[i]
            i += 1
        if buf:
            segments.append(Literal(buf))
        return cls(tuple(segments))

    def render(self, styler: Styler, values: Mapping[str, str]) -> str:
        """
        Produce the final prompt string for the target of ``styler``,
        substituting ``values`` for the placeholders.  Placeholders without a
        value render as empty strings.
        """
        s = ""
        for seg in self.segments:
            if isinstance(seg, Literal):
                s += styler.escape(seg.text)
            elif isinstance(seg, Directive):
                s += styler.directive(seg.code, seg.arg)
            else:
                value = values.get(seg.name, "")
                if seg.name not in RAW_PLACEHOLDERS:
                    value = styler.escape(value)
                s += value
        return s


def closing_brace(s: str, start: int) -> int | None:
    """
    Given that ``s[start]`` is an opening brace, return the index of the brace
    that closes it, taking nested braces into account.  Returns `None` if the
    braces are unbalanced.
    """
    depth = 0
    for i in range(start, len(s)):
        if s[i] == "{":
            depth += 1
        elif s[i] == "}":
            depth -= 1
            if depth == 0:
                return i
    return None


def strip_colors(s: str) -> str:
    """
    Remove all color directives (``%F{...}``, ``%K{...}``, ``%f``, and
    ``%k``) from the prompt string ``s``, leaving everything else as-is.  If
    the string ends inside a ``%F{`` or ``%K{`` directive, the remainder is
    discarded.
    """
    out = ""
    i = 0
    while i < len(s):
        if s.startswith("%%", i):
            out += "%%"
            i += 2
        elif s.startswith(("%F{", "%K{"), i):
            end = closing_brace(s, i + 2)
            if end is None:
                break
            i = end + 1
        elif s.startswith(("%f", "%k"), i):
            i += 2
        else:
            out += s[i]
            i += 1
    return out


def default_prompt(palette: Palette, superuser: bool = False) -> str:
    """
    Return the template for the standard left prompt.  The superuser's name &
    host are shown in reverse video instead of in color.
    """
    p = f"%B%F{{{palette.exit_status}}}${{exit}}%f%b"
    if superuser:
        p += "%S%B${user}${host}%b%s "
    else:
        p += f"%B%F{{{palette.user_host}}}${{user}}${{host}}%f%b "
    p += f"%B%F{{{palette.path}}}${{path}}%f%b${{sep}}"
    p += "${vimode} "
    return p


def default_rprompt(palette: Palette) -> str:
    """Return the template for the standard right prompt"""
    return f"%F{{{palette.branch_status}}}${{branch}}%f"
