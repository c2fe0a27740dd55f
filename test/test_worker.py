from __future__ import annotations
import os
from pathlib import Path
import signal
import pytest
from async_ps1 import worker
from async_ps1.git import GitStatus
from async_ps1.worker import (
    StatusPayload,
    payload_path,
    read_payload,
    run_worker,
    write_payload,
)


def test_payload_path() -> None:
    assert payload_path(4242).name == "async_ps1_4242"
    assert payload_path().name == f"async_ps1_{os.getpid()}"


def test_write_payload_overwrites(tmp_path: Path) -> None:
    p = tmp_path / "payload"
    write_payload(p, StatusPayload(pid=1, status=GitStatus("main", "!")))
    write_payload(p, StatusPayload(pid=2, status=None))
    assert read_payload(p) == StatusPayload(pid=2, status=None)
    assert sorted(q.name for q in tmp_path.iterdir()) == ["payload"]


@pytest.mark.parametrize(
    "content",
    [
        "",
        "{not json",
        '{"pid": 1}',
        '{"pid": 1, "status": {"head": "main"}}',
        "[]",
    ],
)
def test_read_payload_malformed(tmp_path: Path, content: str) -> None:
    p = tmp_path / "payload"
    p.write_text(content, encoding="utf-8")
    assert read_payload(p) is None


def test_read_payload_missing(tmp_path: Path) -> None:
    assert read_payload(tmp_path / "nonexistent") is None


def test_run_worker(tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
    killed: list[tuple[int, int]] = []
    monkeypatch.setattr(worker, "git_status", lambda: GitStatus("main", "*"))
    monkeypatch.setattr(os, "kill", lambda pid, sig: killed.append((pid, sig)))
    p = tmp_path / "payload"
    run_worker(p, 4242)
    assert read_payload(p) == StatusPayload(
        pid=os.getpid(), status=GitStatus("main", "*")
    )
    assert killed == [(4242, signal.SIGUSR1)]


def test_run_worker_parent_gone(
    tmp_path: Path, monkeypatch: pytest.MonkeyPatch
) -> None:
    def kill(pid: int, sig: int) -> None:
        raise ProcessLookupError(pid)

    monkeypatch.setattr(worker, "git_status", lambda: None)
    monkeypatch.setattr(os, "kill", kill)
    p = tmp_path / "payload"
    run_worker(p, 4242)
    assert read_payload(p) == StatusPayload(pid=os.getpid(), status=None)
