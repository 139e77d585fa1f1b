"""
Job Orchestrator
================

Runs one print request end to end:

    1. reject empty content                     -> NoContent
    2. enumerate printers                       -> NoPrintersFound
    3. resolve the requested index              -> PrinterNotFound
    4. build the command sequence
    5. take the printer's gate
    6. open the session                         -> OpenFailed
    7. send the sequence                        -> TransferFailed
    8. close the session (after any open)       -> CloseFailed
    Deadline over steps 5-8                     -> PrintTimeout

Steps 6-8 run on a job thread; the request thread waits for it until the
deadline. When the deadline passes the caller gets PrintTimeout right away
while a release thread aborts the session and then frees the gate.

Each printer identity has its own gate, so at most one session is open per
printer; jobs for different printers run in parallel. Jobs are attempted
once, never retried.
"""

import functools
import logging
import threading
import time
from typing import Callable, Dict, Optional, Tuple

from . import builder
from .config import CLOSE_GRACE, PRINT_TIMEOUT
from .exceptions import (
    CloseFailed,
    EnumerationError,
    EnumerationFailed,
    NoContent,
    OpenFailed,
    PrintError,
    PrintTimeout,
    TransferFailed,
    TransportError,
)
from .models import DeviceDescriptor, PrintJob, ReceiptContent
from .registry import DeviceRegistry
from .transport import SessionFactory, TransportSession, UsbSession

logger = logging.getLogger(__name__)


class _Gate:
    """Printer lock plus the number of jobs holding or waiting for it."""

    def __init__(self):
        self.lock = threading.Lock()
        self.users = 0


class _GateRelease:
    """Releases a printer gate exactly once, from whichever thread gets there first."""

    def __init__(self, gate: threading.Lock, on_release: Callable[[], None]):
        self._gate = gate
        self._on_release = on_release
        self._lock = threading.Lock()
        self._released = False

    def __call__(self) -> None:
        with self._lock:
            if self._released:
                return
            self._released = True
        self._gate.release()
        self._on_release()


class _JobRun:
    """Outcome of steps 6-8, handed from the job thread to the request thread."""

    def __init__(self):
        self.done = threading.Event()
        self.error: Optional[BaseException] = None


class JobOrchestrator:
    """Coordinates print jobs against attached printers."""

    def __init__(self, registry: Optional[DeviceRegistry] = None,
                 session_factory: Optional[SessionFactory] = None,
                 timeout: float = PRINT_TIMEOUT,
                 close_grace: float = CLOSE_GRACE,
                 build: Callable = builder.build):
        """
        Args:
            registry: Printer lookup
            session_factory: Returns a fresh TransportSession per job
            timeout: Seconds from job start until PrintTimeout
            close_grace: Seconds a timed-out job gets to release its printer
                         before the gate is freed anyway
            build: ReceiptContent -> command sequence
        """
        self.registry = registry or DeviceRegistry()
        self.session_factory = session_factory or UsbSession
        self.timeout = timeout
        self.close_grace = close_grace
        self._build = build

        self._gates: Dict[Tuple, _Gate] = {}
        self._gates_lock = threading.Lock()

        # Track job threads for shutdown
        self._active_threads: Dict[str, threading.Thread] = {}
        self._threads_lock = threading.Lock()

    # =========================================================================
    # Public API
    # =========================================================================

    def list_printers(self):
        """Current enumeration (may be empty). Raises EnumerationError."""
        return self.registry.enumerate()

    def print_job(self, content: Optional[ReceiptContent],
                  printer_index: Optional[int] = None) -> PrintJob:
        """
        Print a receipt.

        Args:
            content: Receipt document
            printer_index: Enumeration index of the target printer (default 0)

        Returns:
            The completed PrintJob

        Raises:
            PrintError: subclass naming the failure
        """
        job = PrintJob(deadline=time.monotonic() + self.timeout)

        try:
            self._run(job, content, printer_index)
        except PrintError as e:
            job.fail(e.kind, e.message)
            logger.warning("Job %s failed [%s]: %s", job.id, e.kind, e.message)
            raise

        job.complete()
        logger.info("Job %s printed on %s", job.id, job.device)
        return job

    def gate(self, descriptor: DeviceDescriptor) -> threading.Lock:
        """Mutual-exclusion gate of a printer identity."""
        with self._gates_lock:
            return self._gate_entry(descriptor.identity).lock

    def gate_count(self) -> int:
        """Number of printer gates currently kept."""
        with self._gates_lock:
            return len(self._gates)

    def shutdown(self, timeout_per_thread: float = 5.0) -> None:
        """Wait for job threads still running (call at process exit)."""
        with self._threads_lock:
            active = list(self._active_threads.items())

        for job_id, thread in active:
            if thread.is_alive():
                thread.join(timeout=timeout_per_thread)
                if thread.is_alive():
                    logger.warning("Job thread %s did not complete in time", job_id)

    # =========================================================================
    # Gates
    # =========================================================================

    def _gate_entry(self, identity: Tuple) -> _Gate:
        entry = self._gates.get(identity)
        if entry is None:
            entry = self._gates[identity] = _Gate()
        return entry

    def _enter_gate(self, identity: Tuple) -> threading.Lock:
        with self._gates_lock:
            entry = self._gate_entry(identity)
            entry.users += 1
            return entry.lock

    def _leave_gate(self, identity: Tuple) -> None:
        # Drop idle gates; a re-plugged printer comes back under a new address
        with self._gates_lock:
            entry = self._gates.get(identity)
            if entry is None:
                return
            entry.users -= 1
            if entry.users <= 0 and not entry.lock.locked():
                del self._gates[identity]

    # =========================================================================
    # Steps
    # =========================================================================

    def _run(self, job: PrintJob, content: Optional[ReceiptContent],
             printer_index: Optional[int]) -> None:
        if content is None or content.is_empty():
            raise NoContent()

        try:
            devices = self.registry.enumerate()
        except EnumerationError as e:
            raise EnumerationFailed(e) from e

        job.device = self.registry.resolve_from(devices, printer_index)
        job.commands = self._build(content)

        session = self.session_factory()
        identity = job.device.identity
        gate = self._enter_gate(identity)
        if not gate.acquire(timeout=job.remaining()):
            self._leave_gate(identity)
            logger.warning("Job %s: printer %s still busy at deadline", job.id, job.device)
            raise PrintTimeout()
        release = _GateRelease(gate, functools.partial(self._leave_gate, identity))

        run = _JobRun()
        job.start()
        thread = threading.Thread(
            target=self._job_thread_main,
            args=(job, session, run, release),
            name=job.id,
            daemon=True,
        )
        with self._threads_lock:
            self._active_threads[job.id] = thread

        thread.start()

        if not run.done.wait(timeout=job.remaining()):
            self._release_after_timeout(job, session, run, release)
            raise PrintTimeout()

        if run.error is not None:
            raise run.error

    def _job_thread_main(self, job: PrintJob, session: TransportSession,
                         run: _JobRun, release: _GateRelease) -> None:
        try:
            self._execute(job, session)
        except Exception as e:
            run.error = e
        finally:
            release()
            run.done.set()
            with self._threads_lock:
                self._active_threads.pop(job.id, None)

    def _execute(self, job: PrintJob, session: TransportSession) -> None:
        """Open, send, close. Close runs after any successful open."""
        try:
            session.open(job.device)
        except TransportError as e:
            raise OpenFailed(e) from e

        transfer_error = None
        close_error = None
        try:
            session.send(job.commands)
        except TransportError as e:
            transfer_error = e
        finally:
            try:
                session.close()
            except TransportError as e:
                close_error = e
                if transfer_error is not None:
                    logger.warning("Job %s: close after failed transfer also failed: %s",
                                   job.id, e)

        if transfer_error is not None:
            raise TransferFailed(transfer_error) from transfer_error
        if close_error is not None:
            raise CloseFailed(close_error) from close_error

    def _release_after_timeout(self, job: PrintJob, session: TransportSession,
                               run: _JobRun, release: _GateRelease) -> None:
        """Abort the session and free the gate without blocking the caller."""
        logger.error("Job %s timed out after %.1fs on %s", job.id, self.timeout, job.device)

        def release_main():
            aborter = threading.Thread(target=session.abort,
                                       name=f"{job.id}-abort", daemon=True)
            aborter.start()
            started = time.monotonic()
            aborter.join(self.close_grace)
            run.done.wait(max(0.0, self.close_grace - (time.monotonic() - started)))

            if aborter.is_alive() or not run.done.is_set():
                logger.error("Job %s: printer %s not released within %.1fs, freeing gate",
                             job.id, job.device, self.close_grace)
            if run.error is not None and run.done.is_set():
                logger.info("Job %s finished after timeout: %s", job.id, run.error)
            release()

        threading.Thread(target=release_main, name=f"{job.id}-release", daemon=True).start()
