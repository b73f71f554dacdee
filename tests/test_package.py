import pathlib
import tomllib

import confswap


def test_version_matches_project_metadata() -> None:
    pyproject = pathlib.Path(__file__).parents[1] / "pyproject.toml"
    with pyproject.open("rb") as f:
        metadata = tomllib.load(f)

    assert confswap.__version__ == metadata["project"]["version"]
