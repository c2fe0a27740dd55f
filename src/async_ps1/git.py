from __future__ import annotations
from dataclasses import dataclass
import os
import subprocess

#: Substrings of the output of ``git status`` paired with the symbol shown in
#: the prompt when the substring is present.  Matching symbols are shown in
#: the order given here.
STATUS_SYMBOLS: list[tuple[str, str]] = [
    ("renamed:", ">"),
    ("Your branch is ahead of", "*"),
    ("new file:", "+"),
    ("Untracked files", "?"),
    ("deleted", "x"),
    ("modified:", "!"),
    ("behind", "&"),
    ("diverged", "&*"),
]

#: Exit status with which ``git symbolic-ref`` reports that the current
#: directory is not in a Git repository
NOT_A_REPOSITORY = 128


@dataclass
class GitStatus:
    #: The name of the current branch, or the short form of the current commit
    #: hash if ``HEAD`` is detached
    branch: str

    #: Symbols describing changes to the working copy (see `STATUS_SYMBOLS`);
    #: empty if there are none
    symbols: str = ""

    def display(self) -> str:
        """
        Return the status as shown in the prompt: a leading space followed by
        the branch and change symbols in parentheses
        """
        if self.symbols:
            return f" ({self.branch} {self.symbols})"
        else:
            return f" ({self.branch})"


def git_status(cwd: str | os.PathLike[str] | None = None) -> GitStatus | None:
    """
    If ``cwd`` (default: the current directory) is in a Git repository,
    ``git_status()`` returns a `GitStatus` instance describing the current
    branch and the state of the working copy.

    If the directory is not in a Git repository, or if Git is not installed,
    ``git_status()`` returns `None`.
    """
    try:
        r = subprocess.run(
            ["git", "symbolic-ref", "--quiet", "HEAD"],
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            text=True,
            cwd=cwd,
        )
    except FileNotFoundError:
        # Git is not installed
        return None
    if r.returncode == 0:
        ref = r.stdout.strip()
    elif r.returncode == NOT_A_REPOSITORY:
        return None
    else:
        # HEAD is detached
        short = git("rev-parse", "--short", "HEAD", cwd=cwd)
        if short is None:
            return None
        ref = short
    branch = ref.removeprefix("refs/heads/")
    if not branch:
        return None
    return GitStatus(branch=branch, symbols=branch_changes(cwd))


def branch_changes(cwd: str | os.PathLike[str] | None = None) -> str:
    """
    Run ``git status`` in the C locale and return the symbols for the changes
    it reports
    """
    try:
        r = subprocess.run(
            ["git", "status"],
            stdout=subprocess.PIPE,
            stderr=subprocess.STDOUT,
            text=True,
            cwd=cwd,
            env={**os.environ, "LC_ALL": "C"},
        )
    except FileNotFoundError:
        return ""
    return status_symbols(r.stdout)


def status_symbols(status_text: str) -> str:
    """
    Return the concatenated symbols of every `STATUS_SYMBOLS` entry whose
    substring occurs in ``status_text``
    """
    return "".join(sym for needle, sym in STATUS_SYMBOLS if needle in status_text)


def git(*args: str, cwd: str | os.PathLike[str] | None = None) -> str | None:
    """
    Run a Git command (suppressing stderr) and return its stdout with leading &
    trailing whitespace stripped.  If the command fails, return `None`.
    """
    try:
        return subprocess.run(
            ["git", *args],
            check=True,
            text=True,
            stdout=subprocess.PIPE,
            stderr=subprocess.DEVNULL,
            cwd=cwd,
        ).stdout.strip()
    except (subprocess.CalledProcessError, FileNotFoundError):
        return None
