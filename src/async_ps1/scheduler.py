"""
Asynchronous computation of the Git status

Running ``git status`` in a large repository can take long enough to make the
prompt noticeably sluggish, so the status is normally computed in the
background while the prompt is shown without it; once the status is ready,
it is filled in and the prompt is redrawn.  There are three ways of doing
this, selected once per session by `select_async_method()`:

``library``
    The status is computed on a worker thread attached to the running asyncio
    event loop, and the result is delivered by a callback on the loop.

``usr1``
    The status is computed by a separate detached process, which writes the
    result to a temporary file and then sends the session ``SIGUSR1``.

``none``
    The status is computed synchronously before the prompt is shown.
"""

from __future__ import annotations
import asyncio
from collections.abc import Callable
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, field
from enum import Enum
from functools import partial
import logging
import os
from pathlib import Path
import platform
import signal
from types import FrameType
from .git import GitStatus, git_status
from .info import PromptState
from .worker import payload_path, read_payload, spawn_worker

log = logging.getLogger(__name__)

#: Name given to the thread used by the library worker
WORKER_NAME = "git_status_worker"


class AsyncMethod(Enum):
    LIBRARY = "library"
    USR1 = "usr1"
    NONE = "none"


def event_loop_running() -> bool:
    """Can the library worker be used, i.e., is an asyncio event loop running?"""
    try:
        asyncio.get_running_loop()
    except RuntimeError:
        log.debug("No asyncio event loop is running")
        return False
    return True


def usr1_free() -> bool:
    """
    Is ``SIGUSR1`` available on this system and not already handled by
    something else in this process?
    """
    signum = getattr(signal, "SIGUSR1", None)
    if signum is None:
        log.debug("SIGUSR1 not available")
        return False
    if signal.getsignal(signum) is not signal.SIG_DFL:
        log.debug("SIGUSR1 handler already installed")
        return False
    return True


@dataclass
class Environment:
    """The facts about the session that determine the asynchronous method"""

    #: Operating system name, as reported by ``uname``
    uname: str = ""

    #: The value of :envvar:`TERM`
    term: str = ""

    #: An asynchronous method to use regardless of anything else
    force: AsyncMethod | None = None

    library_available: Callable[[], bool] = field(default=event_loop_running)

    signal_free: Callable[[], bool] = field(default=usr1_free)

    @classmethod
    def probe(
        cls, force: AsyncMethod | None = None, term: str | None = None
    ) -> Environment:
        return cls(
            uname=platform.system(),
            term=term if term is not None else os.environ.get("TERM", ""),
            force=force,
        )


@dataclass(frozen=True)
class Quirk:
    """
    A kind of environment in which the normal choice of asynchronous method
    is known not to work
    """

    description: str
    matches: Callable[[Environment], bool]
    #: The method to use instead.  `AsyncMethod.USR1` is only used if the
    #: signal is free; otherwise, `AsyncMethod.NONE` is used.
    method: AsyncMethod


QUIRKS: tuple[Quirk, ...] = (
    Quirk(
        "MSYS2 and Cygwin cannot run background worker threads reliably",
        lambda env: any(s in env.uname.lower() for s in ("msys", "cygwin")),
        AsyncMethod.USR1,
    ),
    Quirk(
        "Asynchronous redraws do not work in dumb terminals",
        lambda env: env.term == "dumb",
        AsyncMethod.NONE,
    ),
)


def select_async_method(
    env: Environment, quirks: tuple[Quirk, ...] = QUIRKS
) -> AsyncMethod:
    """
    Decide how the Git status should be computed:

    1. If ``env.force`` is set, use it.
    2. If ``env`` matches one of ``quirks``, use the quirk's method.
    3. If the library worker can be used, use it.
    4. If ``SIGUSR1`` is free, use the signal worker.
    5. Otherwise, compute the status synchronously.
    """
    if env.force is not None:
        return env.force
    for q in quirks:
        if q.matches(env):
            log.debug("%s", q.description)
            if q.method is AsyncMethod.USR1 and not env.signal_free():
                return AsyncMethod.NONE
            return q.method
    if env.library_available():
        return AsyncMethod.LIBRARY
    elif env.signal_free():
        return AsyncMethod.USR1
    else:
        return AsyncMethod.NONE


class LibraryWorker:
    """
    Runs jobs one at a time on a named single-thread executor attached to the
    running asyncio event loop
    """

    def __init__(self, name: str = WORKER_NAME) -> None:
        self.name = name
        #: The future for the job currently in flight, if any
        self.pending: asyncio.Future[GitStatus | None] | None = None

    def start(
        self,
        job: Callable[[], GitStatus | None],
        callback: Callable[[GitStatus | None], None],
    ) -> bool:
        """
        Run ``job`` in the background and pass its result to ``callback`` on
        the event loop.  A job that is still pending is cancelled first, and
        its result will not be delivered.  Returns `False` if no event loop is
        running.
        """
        try:
            loop = asyncio.get_running_loop()
        except RuntimeError:
            return False
        if self.pending is not None:
            self.pending.cancel()
        executor = ThreadPoolExecutor(max_workers=1, thread_name_prefix=self.name)
        fut = loop.run_in_executor(executor, job)
        self.pending = fut

        def done(f: asyncio.Future[GitStatus | None]) -> None:
            executor.shutdown(wait=False)
            if f is self.pending:
                self.pending = None
            if f.cancelled():
                return
            if (e := f.exception()) is not None:
                log.debug("Git status job failed: %s", e)
                callback(None)
            else:
                callback(f.result())

        fut.add_done_callback(done)
        return True


@dataclass
class WorkerHandle:
    #: Process ID of the worker
    pid: int


class SignalWorker:
    """
    Computes the Git status in a detached child process that reports back by
    writing a `StatusPayload` to a temporary file and sending ``SIGUSR1``
    """

    def __init__(
        self,
        path: Path | None = None,
        spawn: Callable[[Path, int, str | None], int] = spawn_worker,
        kill: Callable[[int, int], None] = os.kill,
    ) -> None:
        self.path = path if path is not None else payload_path()
        self.spawn = spawn
        self.kill = kill
        #: Called with the status received from a worker
        self.deliver: Callable[[GitStatus | None], None] = lambda _: None
        #: The worker currently in flight, if any
        self.handle: WorkerHandle | None = None
        # getsignal() returns the very object that was installed, so keep a
        # single bound method around for comparison
        self._handler = self._on_signal

    def install(self) -> None:
        signal.signal(signal.SIGUSR1, self._handler)

    def intact(self) -> bool:
        """Is this worker's ``SIGUSR1`` handler still the one installed?"""
        return signal.getsignal(signal.SIGUSR1) is self._handler

    def launch(self, cwd: str | None = None) -> None:
        """
        Terminate the worker in flight (if any) and start a new one in
        ``cwd``.  If the new worker cannot be started, nothing happens until
        the next launch.
        """
        if self.handle is not None:
            try:
                self.kill(self.handle.pid, signal.SIGHUP)
            except OSError:
                # It has probably exited already.
                pass
            self.handle = None
        try:
            pid = self.spawn(self.path, os.getpid(), cwd)
        except OSError as e:
            log.debug("Could not start Git status worker: %s", e)
            return
        self.handle = WorkerHandle(pid)

    def _on_signal(self, _signum: int, _frame: FrameType | None) -> None:
        self.receive()

    def receive(self) -> None:
        """
        Read the result of the worker in flight and deliver it.  Results from
        superseded workers are ignored; an unreadable result is delivered as
        `None`.
        """
        if self.handle is None:
            log.debug("Received SIGUSR1 with no Git status worker running")
            return
        payload = read_payload(self.path)
        if payload is not None and payload.pid != self.handle.pid:
            log.debug("Ignoring Git status from superseded worker %d", payload.pid)
            return
        self.handle = None
        self.deliver(payload.status if payload is not None else None)


class StatusScheduler:
    """
    Refreshes the ``branch_status`` slot of a `PromptState` using an
    `AsyncMethod`, calling ``redraw`` whenever a status arrives in the
    background
    """

    def __init__(
        self,
        method: AsyncMethod,
        state: PromptState,
        redraw: Callable[[], None],
        probe: Callable[[str | None], GitStatus | None] = git_status,
        library: LibraryWorker | None = None,
        signal_worker: SignalWorker | None = None,
    ) -> None:
        self.method = method
        self.state = state
        self.redraw = redraw
        self.probe = probe
        self.library = library if library is not None else LibraryWorker()
        self.signal_worker = (
            signal_worker if signal_worker is not None else SignalWorker()
        )
        self.signal_worker.deliver = self.complete

    def install(self) -> None:
        """Prepare the selected method for use"""
        if self.method is AsyncMethod.USR1:
            self.signal_worker.install()

    def refresh(self, cwd: str | None = None) -> None:
        """
        Start computing the Git status for ``cwd``.  With the synchronous
        method, the status is in place when this returns.
        """
        if self.method is AsyncMethod.LIBRARY:
            if not self.library.start(partial(self.probe, cwd), self.complete):
                log.debug("No event loop running; Git status skipped")
        elif self.method is AsyncMethod.USR1:
            if self.signal_worker.intact():
                self.signal_worker.launch(cwd)
            else:
                log.warning(
                    "SIGUSR1 handler has been redefined."
                    "  Disabling asynchronous mode."
                )
                self.method = AsyncMethod.NONE
                self.complete(self.probe(cwd), redraw=False)
        else:
            self.complete(self.probe(cwd), redraw=False)

    def complete(self, status: GitStatus | None, redraw: bool = True) -> None:
        self.state.branch_status = status.display() if status is not None else ""
        if redraw:
            self.redraw()

    @property
    def outstanding(self) -> bool:
        """Is a background computation in flight?"""
        return (
            self.library.pending is not None or self.signal_worker.handle is not None
        )
