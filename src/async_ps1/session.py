from __future__ import annotations
from collections.abc import Callable, Mapping
import curses
import getpass
import logging
import os
from pathlib import Path
from .config import Config
from .info import (
    PromptState,
    current_dir,
    dirtrim,
    exit_status_segment,
    host_suffix,
    vi_mode_indicator,
)
from .scheduler import (
    AsyncMethod,
    Environment,
    StatusScheduler,
    select_async_method,
)
from .styles import Styler
from .template import (
    DUMB_PROMPT,
    Template,
    default_prompt,
    default_rprompt,
    strip_colors,
)

log = logging.getLogger(__name__)


def terminal_has_colors() -> bool:
    """Does the terminal on standard output support at least eight colors?"""
    try:
        curses.setupterm()
    except (curses.error, OSError, ValueError):
        return False
    return curses.tigetnum("colors") >= 8


class Session:
    """
    The prompt for one interactive session: holds the `PromptState`, refreshes
    it before each prompt, and renders the left & right prompts
    """

    def __init__(
        self,
        config: Config,
        styler: Styler,
        redraw: Callable[[], None] = lambda: None,
        has_colors: bool = True,
        environ: Mapping[str, str] | None = None,
        euid: int | None = None,
        home: Path | None = None,
        environment: Environment | None = None,
        scheduler_factory: Callable[..., StatusScheduler] = StatusScheduler,
    ) -> None:
        self.config = config
        self.styler = styler
        self.redraw = redraw
        self.has_colors = has_colors
        self.environ = environ if environ is not None else os.environ
        self.euid = euid if euid is not None else os.geteuid()
        self.home = home
        self.environment = environment
        self.scheduler_factory = scheduler_factory
        self.state = PromptState()
        self.method = AsyncMethod.NONE
        self.scheduler: StatusScheduler | None = None
        self.user = ""
        self.prompt = Template(())
        self.rprompt = Template(())
        self._prompted = False

    def start(self) -> None:
        """
        Fill in the parts of the prompt that do not change during the session,
        pick the asynchronous method, and build the templates
        """
        self.state.host_suffix = host_suffix(self.environ, self.euid)
        try:
            self.user = getpass.getuser()
        except (KeyError, OSError):
            self.user = ""
        environment = self.environment or Environment.probe(
            force=self.config.force_async_method,
            term=self.environ.get("TERM", ""),
        )
        self.method = select_async_method(environment)
        log.debug("Using async method: %s", self.method.value)
        self.scheduler = self.scheduler_factory(self.method, self.state, self.redraw)
        self.scheduler.install()
        if self.environ.get("TERM") == "dumb":
            prompt = DUMB_PROMPT
            rprompt = ""
        else:
            if self.config.custom_prompt is not None:
                prompt = self.config.custom_prompt
            else:
                prompt = default_prompt(self.config.palette, superuser=self.euid == 0)
            if self.config.custom_rprompt is not None:
                rprompt = self.config.custom_rprompt
            else:
                rprompt = default_rprompt(self.config.palette)
        if not self.has_colors:
            prompt = strip_colors(prompt)
            rprompt = strip_colors(rprompt)
        self.prompt = Template.parse(prompt)
        self.rprompt = Template.parse(rprompt)

    def precmd(self, cwd: Path | None = None) -> bool:
        """
        Run before each prompt is displayed: abbreviate the working directory
        and start refreshing the Git status.  Returns `True` if a blank line
        should be printed before the prompt.
        """
        assert self.scheduler is not None, "Session.start() not called"
        if cwd is None:
            cwd = current_dir()
        self.state.path_display = dirtrim(cwd, self.home, self.config.dirtrim)
        self.state.branch_status = ""
        self.scheduler.refresh(str(cwd))
        blank = self.config.blank_lines and self._prompted
        self._prompted = True
        return blank

    def render(
        self, exit_status: int = 0, keymap: str | None = None
    ) -> tuple[str, str]:
        """Return the left & right prompt strings"""
        values = {
            "exit": exit_status_segment(exit_status),
            "user": self.user,
            "host": self.state.host_suffix,
            "path": self.state.path_display,
            "branch": self.state.branch_status,
            "vimode": vi_mode_indicator(keymap, self.styler.prompt_suffix),
            "sep": "\n" if self.config.multiline else " ",
        }
        return (
            self.prompt.render(self.styler, values),
            self.rprompt.render(self.styler, values),
        )

    def keymap_select(self) -> None:
        """Called when the line editor switches keymaps"""
        self.redraw()
