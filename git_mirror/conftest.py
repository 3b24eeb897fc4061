from collections.abc import Generator
import os
from pathlib import Path
import sys
import textwrap

from loguru import logger
import pytest
from pytest import FixtureRequest, LogCaptureFixture, MonkeyPatch
import yaml
from yaml import Node

from .typed_path import AbsDir


@pytest.fixture
def typed_tmp_path(tmp_path: Path) -> AbsDir:
    return AbsDir(tmp_path)


@pytest.fixture
def in_tmp_path(typed_tmp_path: AbsDir, request: FixtureRequest) -> Generator[AbsDir]:
    os.chdir(typed_tmp_path)
    yield typed_tmp_path
    os.chdir(request.config.invocation_params.dir)


@pytest.fixture(autouse=True)
def isolated_git(monkeypatch: MonkeyPatch) -> None:
    # Ignore the user's git config and give commits a stable identity.
    monkeypatch.setenv("GIT_CONFIG_GLOBAL", os.devnull)
    monkeypatch.setenv("GIT_CONFIG_NOSYSTEM", "1")
    monkeypatch.setenv("GIT_CONFIG_COUNT", "1")
    monkeypatch.setenv("GIT_CONFIG_KEY_0", "init.defaultBranch")
    monkeypatch.setenv("GIT_CONFIG_VALUE_0", "master")
    for role in ("AUTHOR", "COMMITTER"):
        monkeypatch.setenv(f"GIT_{role}_NAME", "Mirror Tester")
        monkeypatch.setenv(f"GIT_{role}_EMAIL", "mirror@example.com")


@pytest.fixture(autouse=True)
def log_everything() -> None:
    logger.remove()
    logger.add(
        sys.stderr,
        level="TRACE",
        format="<green>{time:YYYY-MM-DD HH:mm:ss.SSS}</green> | <level>{level: <8}</level> | <cyan>{file.path}</cyan>:<cyan>{line}</cyan> - <level>{message}</level>",
    )


@pytest.fixture
def log_level() -> str:
    return "INFO"


@pytest.fixture
def log_cleanly(caplog: LogCaptureFixture, log_level: str) -> None:
    logger.remove()
    logger.add(caplog.handler, level=log_level, colorize=False, format="{message}")


@pytest.fixture
def yaml_node(raw_yaml: str) -> Node:
    raw_yaml = textwrap.dedent(raw_yaml).strip()
    return yaml.compose(raw_yaml, Loader=yaml.SafeLoader)
