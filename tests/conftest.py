from __future__ import annotations

import logging
import pathlib
import sys
from collections.abc import Generator

import click.testing
import pytest

from confswap import hooks, session
from confswap.config import io as config_io

# Add tests directory to sys.path so helpers.py can be imported
_tests_dir = pathlib.Path(__file__).parent
if str(_tests_dir) not in sys.path:
    sys.path.insert(0, str(_tests_dir))


@pytest.fixture(autouse=True)
def reset_confswap_state(
    tmp_path_factory: pytest.TempPathFactory, monkeypatch: pytest.MonkeyPatch
) -> Generator[None]:
    """Reset global confswap state between tests.

    Points HOME at an empty directory so a developer's global config never
    leaks in, clears the merged config cache, and disarms the process-wide
    hook manager so no signal handler outlives its test. Root logger
    handlers are put back after CLI invocations reconfigure logging.
    """
    monkeypatch.setenv("HOME", str(tmp_path_factory.mktemp("home")))
    root_logger = logging.getLogger()
    saved_handlers, saved_level = root_logger.handlers[:], root_logger.level
    config_io.clear_config_cache()
    logging.getLogger("confswap").setLevel(logging.NOTSET)
    yield
    if hooks._manager is not None:
        hooks._manager.disarm()
        hooks._manager = None
    session._hook_owners.clear()
    config_io.clear_config_cache()
    logging.getLogger("confswap").setLevel(logging.NOTSET)
    root_logger.handlers[:] = saved_handlers
    root_logger.setLevel(saved_level)


@pytest.fixture
def hook_manager() -> Generator[hooks.EmergencyHookManager]:
    """Provide a private hook manager that is always disarmed afterwards."""
    manager = hooks.EmergencyHookManager()
    yield manager
    manager.disarm()


@pytest.fixture
def project_dir(tmp_path: pathlib.Path) -> pathlib.Path:
    """A project root with an original tsconfig.json and a replacement."""
    root = tmp_path / "project"
    root.mkdir()
    (root / ".git").mkdir()
    (root / "tsconfig.json").write_text('{"a":1}')
    (root / "tsconfig.build.json").write_text('{"b":2}')
    return root


@pytest.fixture
def runner() -> click.testing.CliRunner:
    """Create a CLI runner for testing."""
    return click.testing.CliRunner()
