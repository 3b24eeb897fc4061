import os
import shlex
import textwrap

from inline_snapshot import snapshot
import pytest
from pytest import CaptureFixture, MonkeyPatch

from .constants import GIT_MIRROR_NAME, SETTINGS_FILE
from .main import main
from .test_utils import add_commit, branch_commits, create_remote, push_branch
from .typed_path import AbsDir, RelDir


def normalize_message(message: str, *, config_dir: AbsDir) -> str:
    return " ".join(message.replace(os.fspath(config_dir), "CONFIG_DIR").split())


def run_main(args: str) -> int | str | None:
    with pytest.raises(SystemExit) as e:
        main.main(shlex.split(args), prog_name=GIT_MIRROR_NAME)
    return e.value.code


@pytest.fixture
def config_dir(typed_tmp_path: AbsDir) -> AbsDir:
    config_dir = typed_tmp_path / RelDir("config")
    config_dir.mkdir()
    return config_dir


@pytest.fixture
def remotes_dir(typed_tmp_path: AbsDir) -> AbsDir:
    remotes_dir = typed_tmp_path / RelDir("remotes")
    seed = typed_tmp_path / RelDir("seed")
    upstream = create_remote(remotes_dir / RelDir("upstream"), "manageiq-foo")
    create_remote(remotes_dir / RelDir("downstream"), "product-foo")
    add_commit(seed, dict(README="readme"))
    push_branch(seed, upstream, "master")
    return remotes_dir


def write_settings(config_dir: AbsDir, remotes_dir: AbsDir, repos: str = "manageiq-foo:") -> None:
    settings = f"""
        git_mirror:
          working_directory: {os.fspath(config_dir)}/work
          productization_name: product
          remotes:
            upstream: {os.fspath(remotes_dir)}/upstream
            downstream: {os.fspath(remotes_dir)}/downstream
          branch_mirror_defaults:
            master: master
          repos_to_mirror:
            {repos}
    """
    with open(config_dir / SETTINGS_FILE, "w") as f:
        f.write(textwrap.dedent(settings))


@pytest.mark.slow
def test_mirror(config_dir: AbsDir, remotes_dir: AbsDir) -> None:
    write_settings(config_dir, remotes_dir)
    assert run_main(f"-q mirror --config-dir {os.fspath(config_dir)}") == 0
    downstream = remotes_dir / RelDir("downstream") / RelDir("product-foo.git")
    upstream = remotes_dir / RelDir("upstream") / RelDir("manageiq-foo.git")
    assert branch_commits(downstream) == branch_commits(upstream)


@pytest.mark.slow
def test_mirror_dry_run(config_dir: AbsDir, remotes_dir: AbsDir) -> None:
    write_settings(config_dir, remotes_dir)
    assert run_main(f"-q mirror --dry-run --config-dir {os.fspath(config_dir)}") == 0
    assert not (config_dir / RelDir("work") / RelDir("product-foo")).exists()
    assert branch_commits(remotes_dir / RelDir("downstream") / RelDir("product-foo.git")) == {}


@pytest.mark.slow
def test_mirror_errors(config_dir: AbsDir, remotes_dir: AbsDir, capsys: CaptureFixture) -> None:
    write_settings(config_dir, remotes_dir, repos="manageiq-missing:")
    assert run_main(f"-q mirror --config-dir {os.fspath(config_dir)}") == 1
    out, _err = capsys.readouterr()
    assert out.rstrip().endswith("Errors occurred while mirroring.")


@pytest.mark.parametrize(
    "settings, expected",
    [
        (
            # no settings
            None,
            snapshot(
                "Parsing config [failed] Mirroring all repos [failed] FileNotFoundError: [Errno 2] No such file or directory: 'CONFIG_DIR/settings.yml'"
            ),
        ),
        (
            # invalid settings
            "git_mirror: []",
            snapshot(
                "Parsing config [failed] Mirroring all repos [failed] ParserError: An unexpected error occurred during parsing @ CONFIG_DIR/settings.yml:1:13: expected git_mirror mapping, got sequence."
            ),
        ),
    ],
)
def test_mirror_bad_settings(
    settings: str | None, expected: str, config_dir: AbsDir, capsys: CaptureFixture
) -> None:
    if settings is not None:
        with open(config_dir / SETTINGS_FILE, "w") as f:
            f.write(settings)
    assert run_main(f"-q mirror --config-dir {os.fspath(config_dir)}") == 1
    out, _err = capsys.readouterr()
    assert normalize_message(out, config_dir=config_dir) == expected


def test_reenable_workflows_requires_token(monkeypatch: MonkeyPatch) -> None:
    monkeypatch.delenv("GITHUB_TOKEN", raising=False)
    assert run_main("reenable-workflows --dry-run") == 2
