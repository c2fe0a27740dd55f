"""
The background process used by the signal-based asynchronous method.  The
process computes the Git status of its working directory, hands the result to
the parent process through a temporary file, and then sends the parent
``SIGUSR1``.
"""

from __future__ import annotations
from dataclasses import asdict, dataclass
import json
import os
from pathlib import Path
import signal
import subprocess
import sys
import tempfile
from .git import GitStatus, git_status
from .util import cat


@dataclass
class StatusPayload:
    #: The process ID of the worker that computed the status
    pid: int

    #: The computed status, or `None` if the worker's directory is not in a
    #: Git repository
    status: GitStatus | None

    def to_json(self) -> str:
        return json.dumps(asdict(self))

    @classmethod
    def from_json(cls, s: str) -> StatusPayload:
        data = json.loads(s)
        status = data["status"]
        return cls(
            pid=int(data["pid"]),
            status=GitStatus(**status) if status is not None else None,
        )


def payload_path(parent_pid: int | None = None) -> Path:
    """
    Return the path of the temporary file through which workers hand their
    results to the process with ID ``parent_pid`` (default: the current
    process)
    """
    if parent_pid is None:
        parent_pid = os.getpid()
    return Path(tempfile.gettempdir(), f"async_ps1_{parent_pid}")


def write_payload(path: Path, payload: StatusPayload) -> None:
    """
    Write ``payload`` to ``path``.  The data is first written to a sibling file
    which is then renamed into place so that readers never see a partial
    write.
    """
    tmp = path.with_name(f"{path.name}.{payload.pid}")
    tmp.write_text(payload.to_json(), encoding="utf-8")
    os.replace(tmp, path)


def read_payload(path: Path) -> StatusPayload | None:
    """
    Read the payload most recently written to ``path``.  Returns `None` if the
    file does not exist or cannot be parsed.
    """
    try:
        content = cat(path)
    except OSError:
        return None
    if not content:
        return None
    try:
        return StatusPayload.from_json(content)
    except (ValueError, KeyError, TypeError):
        return None


def spawn_worker(output: Path, notify: int, cwd: str | None = None) -> int:
    """
    Start a detached worker process in ``cwd`` that will write its result to
    ``output`` and then signal the process with ID ``notify``.  Returns the
    worker's process ID.

    :raises OSError: if the process could not be started
    """
    p = subprocess.Popen(
        [
            sys.executable,
            "-m",
            "async_ps1",
            "worker",
            "--output",
            str(output),
            "--notify",
            str(notify),
        ],
        cwd=cwd,
        stdin=subprocess.DEVNULL,
        stdout=subprocess.DEVNULL,
        stderr=subprocess.DEVNULL,
        start_new_session=True,
    )
    return p.pid


def run_worker(output: Path, notify: int) -> None:
    """
    Body of the worker process: compute the Git status of the current
    directory, write it to ``output``, and send ``SIGUSR1`` to ``notify``.
    Nobody sees the worker's output, so failures are ignored.
    """
    payload = StatusPayload(pid=os.getpid(), status=git_status())
    try:
        write_payload(output, payload)
        os.kill(notify, signal.SIGUSR1)
    except OSError:
        pass
