"""Process-wide emergency hooks that restore files on abnormal termination.

Signal handlers, sys.excepthook, threading.excepthook and atexit are global
state, so a process should arm at most one set at a time. Use
get_hook_manager() for the shared instance.

Every hook runs the cleanup callback and then hands control back to whatever
was installed before it, so the default termination behavior still happens:
SIGINT still raises KeyboardInterrupt, SIGTERM still terminates, and uncaught
exceptions are still printed.
"""

from __future__ import annotations

import atexit
import dataclasses
import enum
import logging
import signal
import sys
import threading
from typing import TYPE_CHECKING, Any

if TYPE_CHECKING:
    import types
    from collections.abc import Callable

logger = logging.getLogger(__name__)

type CleanupFn = Callable[[str], None]

_SIGNALS = (signal.SIGINT, signal.SIGTERM)


class HookEvent(enum.StrEnum):
    """Process event an emergency hook is attached to."""

    SIGINT = "SIGINT"
    SIGTERM = "SIGTERM"
    EXIT = "exit"
    UNCAUGHT_EXCEPTION = "uncaught_exception"
    THREAD_EXCEPTION = "thread_exception"


@dataclasses.dataclass(frozen=True)
class HandlerRef:
    """An installed hook and what it replaced, for removal by reference."""

    event: HookEvent
    handler: Callable[..., Any]
    previous: Any = None


def _chain_signal(signum: int, frame: types.FrameType | None, previous: Any) -> None:
    """Continue with the disposition that was active before ours."""
    if callable(previous):
        previous(signum, frame)
    elif previous == signal.SIG_IGN:
        return
    else:
        # SIG_DFL, or a handler installed outside Python (reported as None)
        signal.signal(signum, signal.SIG_DFL)
        signal.raise_signal(signum)


class EmergencyHookManager:
    """Arms and disarms the process hooks that trigger emergency cleanup."""

    _handlers: list[HandlerRef]
    _registered: bool
    _log: logging.Logger

    def __init__(self, log: logging.Logger | None = None) -> None:
        self._handlers = []
        self._registered = False
        self._log = log or logger

    @property
    def is_registered(self) -> bool:
        return self._registered

    @property
    def handlers(self) -> tuple[HandlerRef, ...]:
        return tuple(self._handlers)

    def arm(self, cleanup_fn: CleanupFn) -> None:
        """Install emergency hooks calling cleanup_fn(reason). No-op if already armed."""
        if self._registered:
            return
        self._registered = True

        def run_cleanup(reason: str) -> None:
            try:
                cleanup_fn(reason)
            except Exception as e:
                self._log.error(f"Emergency cleanup raised: {e!r}")

        handlers = list[HandlerRef]()

        if threading.current_thread() is threading.main_thread():
            for sig in _SIGNALS:
                handlers.append(self._install_signal(sig, run_cleanup))
        else:
            self._log.warning("Not on the main thread, signal handlers for cleanup not installed")

        def exit_handler() -> None:
            run_cleanup("Process exit")

        atexit.register(exit_handler)
        handlers.append(HandlerRef(HookEvent.EXIT, exit_handler))

        previous_excepthook = sys.excepthook

        def excepthook(
            exc_type: type[BaseException],
            exc: BaseException,
            tb: types.TracebackType | None,
        ) -> None:
            self._log.error(f"Uncaught exception: {exc!r}")
            run_cleanup("Uncaught exception")
            previous_excepthook(exc_type, exc, tb)

        sys.excepthook = excepthook
        handlers.append(HandlerRef(HookEvent.UNCAUGHT_EXCEPTION, excepthook, previous_excepthook))

        previous_thread_hook = threading.excepthook

        def thread_excepthook(args: threading.ExceptHookArgs) -> None:
            if args.exc_type is not SystemExit:
                self._log.error(f"Uncaught exception in thread: {args.exc_value!r}")
                run_cleanup("Uncaught thread exception")
            previous_thread_hook(args)

        threading.excepthook = thread_excepthook
        handlers.append(
            HandlerRef(HookEvent.THREAD_EXCEPTION, thread_excepthook, previous_thread_hook)
        )

        self._handlers = handlers

    def _install_signal(self, sig: signal.Signals, run_cleanup: CleanupFn) -> HandlerRef:
        previous = signal.getsignal(sig)

        def handler(signum: int, frame: types.FrameType | None) -> None:
            run_cleanup(f"Process {signal.Signals(signum).name}")
            _chain_signal(signum, frame, previous)

        signal.signal(sig, handler)
        return HandlerRef(HookEvent(sig.name), handler, previous)

    def disarm(self) -> None:
        """Remove every installed hook. Safe to call repeatedly or before arm()."""
        if not self._handlers:
            self._registered = False
            return

        self._log.info("Cleaning up process event handlers")
        for ref in self._handlers:
            self._remove(ref)
        self._handlers = []
        self._registered = False

    def _remove(self, ref: HandlerRef) -> None:
        """Reinstate what ref replaced, unless something else replaced ref since."""
        match ref.event:
            case HookEvent.SIGINT | HookEvent.SIGTERM:
                sig = signal.Signals[ref.event.value]
                if threading.current_thread() is not threading.main_thread():
                    self._log.warning(f"Not on the main thread, {sig.name} handler left in place")
                elif signal.getsignal(sig) is ref.handler:
                    signal.signal(sig, ref.previous if ref.previous is not None else signal.SIG_DFL)
            case HookEvent.EXIT:
                atexit.unregister(ref.handler)
            case HookEvent.UNCAUGHT_EXCEPTION:
                if sys.excepthook is ref.handler:
                    sys.excepthook = ref.previous
            case HookEvent.THREAD_EXCEPTION:
                if threading.excepthook is ref.handler:
                    threading.excepthook = ref.previous


_manager: EmergencyHookManager | None = None


def get_hook_manager() -> EmergencyHookManager:
    """Get the process-wide hook manager (created on first call)."""
    global _manager
    if _manager is None:
        _manager = EmergencyHookManager()
    return _manager
