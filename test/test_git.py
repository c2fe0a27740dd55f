from __future__ import annotations
from collections.abc import Callable
import subprocess
from typing import Any
import pytest
from async_ps1.git import GitStatus, git_status, status_symbols

AHEAD_MODIFIED_UNTRACKED = """\
On branch main
Your branch is ahead of 'origin/main' by 1 commit.

Changes not staged for commit:
\tmodified:   foo.py

Untracked files:
\tbar.py
"""

STAGED = """\
On branch main
Changes to be committed:
\tnew file:   baz.py
\trenamed:    old.py -> new.py
\tdeleted:    gone.py
"""

BEHIND = """\
On branch main
Your branch is behind 'origin/main' by 3 commits, and can be fast-forwarded.

nothing to commit, working tree clean
"""

DIVERGED = """\
On branch main
Your branch and 'origin/main' have diverged,
and have 1 and 2 different commits each, respectively.
"""

CLEAN = """\
On branch main
nothing to commit, working tree clean
"""


@pytest.mark.parametrize(
    "text,symbols",
    [
        (CLEAN, ""),
        (AHEAD_MODIFIED_UNTRACKED, "*?!"),
        (STAGED, ">+x"),
        (BEHIND, "&"),
        (DIVERGED, "&*"),
    ],
)
def test_status_symbols(text: str, symbols: str) -> None:
    assert status_symbols(text) == symbols


def test_status_symbols_stable() -> None:
    results = {status_symbols(AHEAD_MODIFIED_UNTRACKED + STAGED) for _ in range(10)}
    assert results == {">*+?x!"}


@pytest.mark.parametrize(
    "status,shown",
    [
        (GitStatus("main"), " (main)"),
        (GitStatus("main", "*?!"), " (main *?!)"),
        (GitStatus("1a2b3c4", "!"), " (1a2b3c4 !)"),
    ],
)
def test_display(status: GitStatus, shown: str) -> None:
    assert status.display() == shown


def fake_run(
    responses: dict[tuple[str, ...], tuple[int, str]],
    calls: list[tuple[str, ...]],
) -> Callable[..., subprocess.CompletedProcess[str]]:
    def run(args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        key = tuple(args[1:])
        calls.append(key)
        rc, out = responses[key]
        if kwargs.get("check") and rc != 0:
            raise subprocess.CalledProcessError(rc, args)
        return subprocess.CompletedProcess(args, rc, stdout=out)

    return run


def test_git_status_branch(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, ...]] = []
    monkeypatch.setattr(
        subprocess,
        "run",
        fake_run(
            {
                ("symbolic-ref", "--quiet", "HEAD"): (0, "refs/heads/feature/x\n"),
                ("status",): (0, AHEAD_MODIFIED_UNTRACKED),
            },
            calls,
        ),
    )
    assert git_status() == GitStatus("feature/x", "*?!")
    assert calls == [("symbolic-ref", "--quiet", "HEAD"), ("status",)]


def test_git_status_not_a_repository(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, ...]] = []
    monkeypatch.setattr(
        subprocess,
        "run",
        fake_run({("symbolic-ref", "--quiet", "HEAD"): (128, "")}, calls),
    )
    assert git_status() is None
    assert calls == [("symbolic-ref", "--quiet", "HEAD")]


def test_git_status_detached_head(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, ...]] = []
    monkeypatch.setattr(
        subprocess,
        "run",
        fake_run(
            {
                ("symbolic-ref", "--quiet", "HEAD"): (1, ""),
                ("rev-parse", "--short", "HEAD"): (0, "1a2b3c4\n"),
                ("status",): (0, CLEAN),
            },
            calls,
        ),
    )
    assert git_status() == GitStatus("1a2b3c4", "")


def test_git_status_detached_head_unresolvable(monkeypatch: pytest.MonkeyPatch) -> None:
    calls: list[tuple[str, ...]] = []
    monkeypatch.setattr(
        subprocess,
        "run",
        fake_run(
            {
                ("symbolic-ref", "--quiet", "HEAD"): (1, ""),
                ("rev-parse", "--short", "HEAD"): (128, ""),
            },
            calls,
        ),
    )
    assert git_status() is None


def test_git_status_no_git(monkeypatch: pytest.MonkeyPatch) -> None:
    def run(*_args: Any, **_kwargs: Any) -> None:
        raise FileNotFoundError("git")

    monkeypatch.setattr(subprocess, "run", run)
    assert git_status() is None


def test_git_status_uses_c_locale_and_cwd(monkeypatch: pytest.MonkeyPatch) -> None:
    seen: list[dict[str, Any]] = []

    def run(args: list[str], **kwargs: Any) -> subprocess.CompletedProcess[str]:
        seen.append(kwargs)
        if args[1] == "symbolic-ref":
            return subprocess.CompletedProcess(args, 0, stdout="refs/heads/main\n")
        return subprocess.CompletedProcess(args, 0, stdout=CLEAN)

    monkeypatch.setattr(subprocess, "run", run)
    assert git_status("/srv/repo") == GitStatus("main")
    assert all(kw["cwd"] == "/srv/repo" for kw in seen)
    assert seen[-1]["env"]["LC_ALL"] == "C"
    assert seen[-1]["stderr"] == subprocess.STDOUT
