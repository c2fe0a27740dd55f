from __future__ import annotations
import argparse
from pathlib import Path
import sys
from . import __url__, __version__
from .config import Config, configure_logging, parse_dirtrim
from .git import git_status
from .scheduler import AsyncMethod, Environment
from .session import Session, terminal_has_colors
from .shell import run_shell
from .styles import ANSIStyler, BashStyler, ZshStyler
from .template import strip_colors
from .worker import run_worker


def main(argv: list[str] | None = None) -> None:
    if argv is None:
        argv = sys.argv[1:]
    parser = argparse.ArgumentParser(
        prog="async-ps1",
        description=(
            "Asynchronous Git-aware shell prompt."
            f"  Visit <{__url__}> for more information."
        ),
    )
    parser.add_argument(
        "-d",
        "--debug",
        action="store_true",
        help="Show debugging diagnostics on stderr",
    )
    parser.add_argument(
        "-V",
        "--version",
        action="version",
        version=f"%(prog)s {__version__}",
    )
    subparsers = parser.add_subparsers(title="commands", dest="command")

    prompt = subparsers.add_parser(
        "prompt", help="Print the prompt once, computing everything synchronously"
    )
    prompt.add_argument(
        "--ansi",
        action="store_const",
        dest="stylecls",
        const=ANSIStyler,
        help="Format prompt for direct display",
    )
    prompt.add_argument(
        "--bash",
        action="store_const",
        dest="stylecls",
        const=BashStyler,
        help="Format prompt for Bash's PS1",
    )
    prompt.add_argument(
        "--zsh",
        action="store_const",
        dest="stylecls",
        const=ZshStyler,
        help="Format prompt for zsh's PROMPT (default)",
    )
    prompt.add_argument(
        "-e",
        "--exit-status",
        type=int,
        default=0,
        metavar="N",
        help="Exit status of the last command  [default: 0]",
    )
    prompt.add_argument(
        "-k",
        "--keymap",
        help='Current line editor keymap; "vicmd" shows the vi command mode indicator',
    )
    prompt.add_argument(
        "--dirtrim",
        metavar="N",
        help="Number of trailing directory elements to show",
    )
    prompt.add_argument(
        "--color",
        action=argparse.BooleanOptionalAction,
        default=None,
        help="Force colors on or off  [default: detect from the terminal]",
    )
    prompt.add_argument(
        "--single-line",
        action="store_true",
        help="Keep the prompt character on the same line as the path",
    )
    prompt.add_argument(
        "-R",
        "--right",
        action="store_true",
        help="Print the right prompt instead of the left",
    )

    subparsers.add_parser("git-status", help="Print only the Git branch status")

    strip = subparsers.add_parser(
        "strip-colors", help="Remove color directives from a prompt template"
    )
    strip.add_argument("template")

    subparsers.add_parser(
        "shell", help="Run an interactive shell showing the asynchronous prompt"
    )

    worker = subparsers.add_parser("worker", help=argparse.SUPPRESS)
    worker.add_argument("--output", type=Path, required=True)
    worker.add_argument("--notify", type=int, required=True)

    args = parser.parse_args(argv)
    if args.command is None:
        args = parser.parse_args([*argv, "prompt"])

    config = Config.from_env()
    configure_logging(config.debug or args.debug)

    if args.command == "worker":
        run_worker(args.output, args.notify)
    elif args.command == "git-status":
        gs = git_status()
        print(gs.display() if gs is not None else "")
    elif args.command == "strip-colors":
        print(strip_colors(args.template))
    elif args.command == "shell":
        sys.exit(run_shell(config, has_colors=terminal_has_colors()))
    else:
        if args.dirtrim is not None:
            config.dirtrim = parse_dirtrim(args.dirtrim)
        if args.single_line:
            config.multiline = False
        has_colors = args.color if args.color is not None else terminal_has_colors()
        session = Session(
            config,
            (args.stylecls or ZshStyler)(),
            has_colors=has_colors,
            environment=Environment.probe(force=AsyncMethod.NONE),
        )
        session.start()
        session.precmd()
        left, right = session.render(args.exit_status, args.keymap)
        print(right if args.right else left)


if __name__ == "__main__":
    main()
