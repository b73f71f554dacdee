"""Session lifecycle: swap on begin, restore on end, restore on abnormal exit.

    INACTIVE ──begin()──► ACTIVE ──end() / setup failure / emergency──► INACTIVE

Only one session may be active per SwapSession; teardown runs on every exit
path, including a setup failure halfway through the directory list.
"""

from __future__ import annotations

import contextlib
import enum
import logging
import pathlib
from typing import TYPE_CHECKING

from confswap import cleanup, exceptions, hooks, registry, swap, workspace

if TYPE_CHECKING:
    from collections.abc import Generator

    from confswap.cleanup import ValidationResult
    from confswap.config.models import ConfswapConfig

logger = logging.getLogger(__name__)

# Session that armed each hook manager; hooks call back into that session only
_hook_owners: dict[hooks.EmergencyHookManager, SwapSession] = {}


class SessionState(enum.StrEnum):
    INACTIVE = "inactive"
    ACTIVE = "active"


class SwapSession:
    """Swaps the target file in the root (and workspaces) for one build session."""

    _config: ConfswapConfig
    _root: pathlib.Path
    _state: SessionState
    _registry: registry.SwapRegistry
    _cleanup: cleanup.CleanupManager
    _hooks: hooks.EmergencyHookManager
    _owns_hooks: bool
    _log: logging.Logger
    result: ValidationResult | None

    def __init__(
        self,
        config: ConfswapConfig,
        root: pathlib.Path,
        *,
        hook_manager: hooks.EmergencyHookManager | None = None,
        log: logging.Logger | None = None,
    ) -> None:
        self._config = config
        self._root = root.absolute()
        self._state = SessionState.INACTIVE
        self._registry = registry.SwapRegistry()
        self._log = log or logger
        self._cleanup = cleanup.CleanupManager(config.target, self._log)
        self._hooks = hook_manager if hook_manager is not None else hooks.get_hook_manager()
        self._owns_hooks = False
        self.result = None

    @property
    def state(self) -> SessionState:
        return self._state

    @property
    def records(self) -> tuple[swap.SwapRecord, ...]:
        return self._registry.snapshot()

    def begin(self) -> None:
        """Swap the target in every directory. Tears down and re-raises on failure."""
        if self._state is SessionState.ACTIVE:
            raise exceptions.ConcurrentSessionError()
        owner = _hook_owners.get(self._hooks)
        if owner is not None and owner is not self and owner.state is SessionState.ACTIVE:
            raise exceptions.ConcurrentSessionError()
        filename = self._config.filename
        if filename is None:
            raise exceptions.ConfigError("No replacement filename configured")

        self._state = SessionState.ACTIVE
        self.result = None
        self._arm_hooks()

        try:
            self._log.info(f"Starting {self._config.target} swap process")
            for directory in self._target_directories():
                try:
                    record = swap.swap(
                        filename, directory, target=self._config.target, log=self._log
                    )
                except exceptions.ConfswapError as e:
                    self._log.error(f"Failed to swap {self._config.target} in {directory}: {e}")
                    raise
                self._registry.append(record)
            count = len(self._registry)
            self._log.info(f"Successfully swapped {count} {self._config.target} files")
        except BaseException as e:
            self._log.error(f"Session setup failed: {e!r}")
            self._finish("Session setup failure")
            raise

    def _target_directories(self) -> list[pathlib.Path]:
        """Workspaces first (only at the monorepo root), then the root itself."""
        directories = list[pathlib.Path]()
        if self._config.workspaces and workspace.is_monorepo_root(self._root):
            directories.extend(workspace.resolve_workspaces(self._root, self._config.workspaces))
        directories.append(self._root.resolve())
        return list(dict.fromkeys(directories))

    def end(self, error: BaseException | None = None) -> ValidationResult | None:
        """Restore every swapped directory. Returns None if no session was active."""
        if error is not None:
            reason = f"Session failed with error: {error!r}"
        else:
            reason = "Session completed successfully"
        return self._finish(reason)

    def _finish(self, reason: str) -> ValidationResult | None:
        # Drained up front so an emergency hook firing mid-teardown finds nothing to redo
        records = self._registry.drain()
        try:
            if self._state is SessionState.INACTIVE:
                self._log.info("Session not active, skipping cleanup")
                return None

            self._log.info(f"{reason}. Performing cleanup.")
            if not records:
                self._log.info(f"No {self._config.target} files to revert")
                self.result = cleanup.ValidationResult()
            else:
                self.result = self._cleanup.run_complete(records, reason)
            return self.result
        except BaseException as e:
            self._log.error(f"Critical error during session cleanup: {e!r}")
            self._salvage(records)
            if not isinstance(e, Exception):
                raise
            return None
        finally:
            self._state = SessionState.INACTIVE
            self._release_hooks()
            self._log.info("Session state reset")

    def _salvage(self, records: tuple[swap.SwapRecord, ...]) -> None:
        """Manual pass and audit after teardown itself crashed or was interrupted."""
        if not records:
            return
        try:
            self._cleanup.run_emergency(records)
            self.result = self._cleanup.validate(records)
        except Exception as e:
            self._log.error(f"Emergency cleanup failed: {e!r}")

    def _arm_hooks(self) -> None:
        owner = _hook_owners.get(self._hooks)
        if owner is not None and owner is not self:
            # Armed by a session that was emergency-cleaned but never ended
            owner._release_hooks()
        if not self._hooks.is_registered:
            self._hooks.arm(self.emergency_cleanup)
            self._owns_hooks = True
            _hook_owners[self._hooks] = self

    def _release_hooks(self) -> None:
        if not self._owns_hooks:
            return
        self._hooks.disarm()
        self._owns_hooks = False
        if _hook_owners.get(self._hooks) is self:
            del _hook_owners[self._hooks]

    def emergency_cleanup(self, reason: str) -> None:
        """Restore files on abnormal termination. No-op when nothing is swapped."""
        if self._state is SessionState.INACTIVE or not self._registry:
            return

        records = self._registry.drain()
        self._log.warning(f"Performing emergency cleanup: {reason}")
        try:
            self.result = self._cleanup.run_complete(records, reason)
        except Exception as e:
            self._log.error(f"Emergency cleanup failed: {e!r}")
        finally:
            self._state = SessionState.INACTIVE


@contextlib.contextmanager
def swapped(
    config: ConfswapConfig,
    root: pathlib.Path,
    *,
    hook_manager: hooks.EmergencyHookManager | None = None,
    log: logging.Logger | None = None,
) -> Generator[SwapSession]:
    """Context manager running the body with the target file swapped.

    Usage:
        with swapped(config, root) as session:
            subprocess.run(["tsc", "-b"], check=True)
        if session.result and session.result.has_errors:
            ...
    """
    session = SwapSession(config, root, hook_manager=hook_manager, log=log)
    session.begin()
    try:
        yield session
    except BaseException as e:
        session.end(error=e)
        raise
    session.end()
