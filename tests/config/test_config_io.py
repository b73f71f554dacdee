import logging
import pathlib

import pytest

from confswap import exceptions
from confswap.config import LogLevel, apply_overrides, clear_config_cache, get_merged_config
from confswap.config import io as config_io


def _write_local(root: pathlib.Path, content: str) -> None:
    (root / ".confswap.yaml").write_text(content)


def _write_global(content: str) -> None:
    path = config_io.get_global_config_path()
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(content)


# --- loading and merging ---


def test_defaults_when_no_config(tmp_path: pathlib.Path) -> None:
    config = get_merged_config(tmp_path)

    assert config.filename is None
    assert config.target == "tsconfig.json"
    assert config.workspaces == []
    assert config.log_level == LogLevel.WARN


def test_local_config_is_read(tmp_path: pathlib.Path) -> None:
    _write_local(
        tmp_path,
        "filename: tsconfig.build.json\nworkspaces:\n  - packages/a\nlog_level: info\n",
    )

    config = get_merged_config(tmp_path)

    assert config.filename == "tsconfig.build.json"
    assert config.workspaces == ["packages/a"]
    assert config.log_level == LogLevel.INFO


def test_local_overrides_global(tmp_path: pathlib.Path) -> None:
    _write_global("filename: tsconfig.global.json\nlog_level: error\n")
    _write_local(tmp_path, "filename: tsconfig.local.json\n")

    config = get_merged_config(tmp_path)

    assert config.filename == "tsconfig.local.json"
    assert config.log_level == LogLevel.ERROR, "unset local keys fall through to global"


def test_empty_config_file_uses_defaults(tmp_path: pathlib.Path) -> None:
    _write_local(tmp_path, "")

    assert get_merged_config(tmp_path).target == "tsconfig.json"


def test_merged_config_is_cached(tmp_path: pathlib.Path) -> None:
    _write_local(tmp_path, "filename: first.json\n")
    assert get_merged_config(tmp_path).filename == "first.json"

    _write_local(tmp_path, "filename: second.json\n")
    assert get_merged_config(tmp_path).filename == "first.json"

    clear_config_cache()
    assert get_merged_config(tmp_path).filename == "second.json"


# --- errors ---


@pytest.mark.parametrize(
    ("content", "match"),
    [
        pytest.param("filename: [unclosed\n", "Invalid YAML", id="invalid_yaml"),
        pytest.param("- a\n- b\n", "Expected a mapping", id="not_a_mapping"),
        pytest.param("unknown_key: 1\n", "Invalid configuration", id="unknown_key"),
        pytest.param("target: sub/tsconfig.json\n", "file name", id="target_with_dir"),
        pytest.param("filename: ../tsconfig.json\n", "file name", id="filename_with_dir"),
        pytest.param("workspaces:\n  - ../other\n", "Invalid workspace", id="workspace_escape"),
        pytest.param("workspaces:\n  - /abs\n", "Invalid workspace", id="workspace_absolute"),
        pytest.param("filename: tsconfig.json\n", "must differ", id="filename_is_target"),
        pytest.param("log_level: loud\n", "Invalid configuration", id="bad_log_level"),
    ],
)
def test_invalid_config_raises_config_error(
    tmp_path: pathlib.Path, content: str, match: str
) -> None:
    _write_local(tmp_path, content)

    with pytest.raises(exceptions.ConfigError, match=match):
        get_merged_config(tmp_path)


def test_config_error_has_suggestion(tmp_path: pathlib.Path) -> None:
    _write_local(tmp_path, "- a\n")

    with pytest.raises(exceptions.ConfigError) as exc_info:
        get_merged_config(tmp_path)

    assert ".confswap.yaml" in (exc_info.value.get_suggestion() or "")


# --- overrides ---


def test_apply_overrides_ignores_none(tmp_path: pathlib.Path) -> None:
    _write_local(tmp_path, "filename: tsconfig.build.json\n")
    config = get_merged_config(tmp_path)

    result = apply_overrides(config, {"filename": None, "target": None})

    assert result is config


def test_apply_overrides_wins_over_files(tmp_path: pathlib.Path) -> None:
    _write_local(tmp_path, "filename: tsconfig.build.json\nworkspaces: [a]\n")
    config = get_merged_config(tmp_path)

    result = apply_overrides(config, {"filename": "tsconfig.ci.json", "workspaces": ["b"]})

    assert result.filename == "tsconfig.ci.json"
    assert result.workspaces == ["b"]
    assert config.filename == "tsconfig.build.json", "original config is not mutated"


def test_apply_overrides_validates(tmp_path: pathlib.Path) -> None:
    config = get_merged_config(tmp_path)

    with pytest.raises(exceptions.ConfigError, match="command line"):
        apply_overrides(config, {"filename": "tsconfig.json"})


# --- helpers ---


def test_deep_merge_nested() -> None:
    base = {"a": {"x": 1, "y": 2}, "b": 1}
    result = config_io.deep_merge(base, {"a": {"y": 3}, "c": 4})

    assert result == {"a": {"x": 1, "y": 3}, "b": 1, "c": 4}
    assert base == {"a": {"x": 1, "y": 2}, "b": 1}


def test_log_level_mapping() -> None:
    assert LogLevel.WARN.to_logging_level() == logging.WARNING
    assert LogLevel.SILENT.to_logging_level() > logging.CRITICAL
