"""
Module: mathtext.monitor

Purpose:
    Track whether the math backend is available and tell subscribers,
    exactly once, when it becomes ready.

    The first check happens lazily. If the backend is already present the
    monitor is ready immediately and never polls. Otherwise it polls every
    ``interval`` seconds until the backend appears or ``timeout`` seconds
    elapse; after a timeout readiness stays False for the monitor's lifetime.

Key Classes:
    - BackendMonitor: Readiness flag + subscription service
    - Scheduler: Timer protocol the monitor polls through
    - ThreadingScheduler: Real timers (threading.Timer)
    - ManualScheduler: Fake clock advanced explicitly

Key Functions:
    - default_monitor(): Process-wide monitor probing the backend registry

Dependencies:
    - threading (std)
    - time (std)
    - mathtext.backend: Registry probe

Used By:
    - mathtext.span: Readiness gate before rendering
"""

from __future__ import annotations

import heapq
import itertools
import logging
import threading
import time
from typing import Callable, Dict, List, Optional, Protocol, Tuple

from .backend import MathBackend, installed_backend

logger = logging.getLogger(__name__)

DEFAULT_POLL_INTERVAL = 0.1  # seconds
DEFAULT_TIMEOUT = 30.0  # seconds

Probe = Callable[[], Optional[MathBackend]]
ReadyCallback = Callable[[], None]
Unsubscribe = Callable[[], None]


class TimerHandle(Protocol):
    def cancel(self) -> None:
        ...


class Scheduler(Protocol):
    """Minimal timer service: a monotonic clock and one-shot callbacks."""

    def now(self) -> float:
        ...

    def call_later(self, delay: float, fn: Callable[[], None]) -> TimerHandle:
        ...


class ThreadingScheduler:
    """Scheduler backed by daemon ``threading.Timer`` objects."""

    def now(self) -> float:
        return time.monotonic()

    def call_later(self, delay: float, fn: Callable[[], None]) -> threading.Timer:
        timer = threading.Timer(delay, fn)
        timer.daemon = True
        timer.start()
        return timer


class _ManualHandle:
    __slots__ = ("cancelled",)

    def __init__(self) -> None:
        self.cancelled = False

    def cancel(self) -> None:
        self.cancelled = True


class ManualScheduler:
    """
    Fake clock for driving timers by hand.

    Nothing runs until ``advance()`` is called; callbacks then run on the
    calling thread in due-time order.

    Example:
        >>> sched = ManualScheduler()
        >>> fired = []
        >>> _ = sched.call_later(0.5, lambda: fired.append(sched.now()))
        >>> sched.advance(1.0)
        >>> fired
        [0.5]
    """

    def __init__(self, start: float = 0.0) -> None:
        self._now = start
        self._queue: List[Tuple[float, int, _ManualHandle, Callable[[], None]]] = []
        self._seq = itertools.count()

    def now(self) -> float:
        return self._now

    def call_later(self, delay: float, fn: Callable[[], None]) -> _ManualHandle:
        handle = _ManualHandle()
        heapq.heappush(self._queue, (self._now + delay, next(self._seq), handle, fn))
        return handle

    @property
    def pending(self) -> int:
        """Number of scheduled, non-cancelled callbacks."""
        return sum(1 for _, _, handle, _ in self._queue if not handle.cancelled)

    def advance(self, seconds: float) -> None:
        """Move the clock forward, running every callback that falls due."""
        target = self._now + seconds
        while self._queue and self._queue[0][0] <= target:
            due, _, handle, fn = heapq.heappop(self._queue)
            if handle.cancelled:
                continue
            self._now = due
            fn()
        self._now = target


class BackendMonitor:
    """
    Readiness flag and one-shot ready notification for a math backend.

    Args:
        probe: Returns the backend if present, else None
        interval: Poll interval in seconds
        timeout: Give up polling after this many seconds
        scheduler: Timer service (defaults to ThreadingScheduler)

    Example:
        >>> sched = ManualScheduler()
        >>> found = []
        >>> monitor = BackendMonitor(lambda: found[0] if found else None, scheduler=sched)
        >>> monitor.ready()
        False
        >>> found.append(object())
        >>> sched.advance(0.1)
        >>> monitor.ready()
        True
    """

    def __init__(
        self,
        probe: Probe,
        *,
        interval: float = DEFAULT_POLL_INTERVAL,
        timeout: float = DEFAULT_TIMEOUT,
        scheduler: Optional[Scheduler] = None,
    ) -> None:
        if interval <= 0:
            raise ValueError(f"interval must be positive: {interval}")
        if timeout < 0:
            raise ValueError(f"timeout must be non-negative: {timeout}")

        self._probe = probe
        self._interval = interval
        self._timeout = timeout
        self._scheduler: Scheduler = scheduler or ThreadingScheduler()

        self._lock = threading.RLock()
        self._started = False
        self._ready = False
        self._expired = False
        self._backend: Optional[MathBackend] = None
        self._deadline = 0.0
        self._timer: Optional[TimerHandle] = None
        self._listeners: Dict[int, ReadyCallback] = {}
        self._tokens = itertools.count()

    # ─────────────────────────────────────────────────────────────────────────
    # Public API
    # ─────────────────────────────────────────────────────────────────────────

    def ready(self) -> bool:
        """True once the backend has been detected."""
        self._ensure_started()
        return self._ready

    def backend(self) -> Optional[MathBackend]:
        """The detected backend, or None while not ready."""
        self._ensure_started()
        return self._backend

    @property
    def polling(self) -> bool:
        """True while a poll is scheduled."""
        return self._timer is not None

    @property
    def expired(self) -> bool:
        """True if polling gave up without finding a backend."""
        return self._expired

    def on_ready(self, callback: ReadyCallback) -> Unsubscribe:
        """
        Subscribe to the ready transition.

        The callback runs at most once, synchronously from the poll that
        detects the backend. Subscribing when already ready (or expired)
        registers nothing; read ``ready()`` instead.

        Returns:
            Callable removing the subscription; safe to call repeatedly
        """
        self._ensure_started()
        with self._lock:
            if self._ready or self._expired:
                return _noop
            token = next(self._tokens)
            self._listeners[token] = callback

        def unsubscribe() -> None:
            with self._lock:
                self._listeners.pop(token, None)

        return unsubscribe

    subscribe = on_ready

    @property
    def subscriber_count(self) -> int:
        with self._lock:
            return len(self._listeners)

    # ─────────────────────────────────────────────────────────────────────────
    # Polling
    # ─────────────────────────────────────────────────────────────────────────

    def _ensure_started(self) -> None:
        with self._lock:
            if self._started:
                return
            self._started = True
            backend = self._check()
            if backend is not None:
                self._ready = True
                self._backend = backend
                logger.debug("Math backend present on first check")
                return
            self._deadline = self._scheduler.now() + self._timeout
            logger.debug(
                f"Math backend not present, polling every {self._interval}s for {self._timeout}s"
            )
            self._timer = self._scheduler.call_later(self._interval, self._poll)

    def _poll(self) -> None:
        with self._lock:
            self._timer = None
            if self._ready or self._expired:
                return
            backend = self._check()
            if backend is None:
                if self._scheduler.now() >= self._deadline:
                    self._expired = True
                    self._listeners.clear()
                    logger.warning(
                        f"Math backend not available after {self._timeout}s; "
                        "math will be shown as plain text"
                    )
                    return
                self._timer = self._scheduler.call_later(self._interval, self._poll)
                return

            self._ready = True
            self._backend = backend
            listeners = list(self._listeners.values())
            self._listeners.clear()

        logger.info(f"Math backend ready, notifying {len(listeners)} subscriber(s)")
        for callback in listeners:
            try:
                callback()
            except Exception:
                logger.exception("Math backend ready callback failed")

    def _check(self) -> Optional[MathBackend]:
        try:
            return self._probe()
        except Exception as e:
            logger.warning(f"Math backend probe failed: {e}")
            return None


def _noop() -> None:
    pass


_default: Optional[BackendMonitor] = None
_default_lock = threading.Lock()


def default_monitor() -> BackendMonitor:
    """Process-wide monitor probing the installed-backend registry."""
    global _default
    with _default_lock:
        if _default is None:
            _default = BackendMonitor(installed_backend)
        return _default
