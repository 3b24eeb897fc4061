from __future__ import annotations

from collections.abc import Callable
import functools
import os
import sys
import traceback

import click
from loguru import logger

from .constants import CONFIG_DIR
from .logger import setup_logger
from .manager import MirrorManager
from .typed_path import AbsDir
from .types import ExitCode
from .workflows import WorkflowReenabler


def check_for_errors[**P](fn: Callable[P, ExitCode | None]) -> Callable[P, None]:
    @functools.wraps(fn)
    def main(*args: P.args, **kwargs: P.kwargs) -> None:
        try:
            exitcode = fn(*args, **kwargs)
        except BaseException as e:
            logger.debug(f"Threw {type(e)}!")
            logger.trace(traceback.format_exc())
            logger.error(f"{type(e).__name__}: {e}")
            sys.exit(1)
        if exitcode is not None:
            sys.exit(exitcode)

    return main


@click.group(context_settings=dict(show_default=True))
@click.option(
    "-v",
    "--verbose",
    count=True,
    help="Display more output (repeat up to 2 times).",
    show_default=False,
)
@click.option(
    "-q",
    "--quiet",
    count=True,
    help="Display less output (repeat up to 3 times).",
    show_default=False,
)
@check_for_errors
def main(quiet: int, verbose: int) -> None:
    setup_logger(quiet, verbose)


@main.command()
@click.option("--dry-run", is_flag=True, help="Echo git commands instead of running them.")
@click.option(
    "--config-dir",
    default=os.fspath(CONFIG_DIR),
    help="Directory containing settings.yml (and optionally settings.local.yml).",
)
@check_for_errors
def mirror(dry_run: bool, config_dir: str) -> ExitCode:
    """Mirror the branches and tags of every configured repo.

    \b
    Examples:
    # Mirror using the default settings.
    git-mirror mirror

    \b
    # Show what would be run without changing anything.
    git-mirror mirror --dry-run --config-dir ./config
    """
    manager = MirrorManager(AbsDir.expand(config_dir), dry_run=dry_run)
    return int(not manager.mirror_all())


@main.command("reenable-workflows")
@click.option("--dry-run", is_flag=True, help="List disabled workflows without enabling them.")
@click.option("--org", default="ManageIQ", help="Organization whose repos are checked.")
@click.option(
    "--extra-repo",
    "extra_repos",
    multiple=True,
    default=["ManageIQ/rbvmomi2"],
    help="Additional repo (owner/name) to check, repeatable.",
)
@click.option("--token", envvar="GITHUB_TOKEN", required=True, help="GitHub API token.")
@check_for_errors
def reenable_workflows(dry_run: bool, org: str, extra_repos: tuple[str, ...], token: str) -> ExitCode:
    """Re-enable disabled GitHub Actions workflows across an organization.

    \b
    Example:
    # Re-enable workflows on every ManageIQ repo.
    GITHUB_TOKEN=... git-mirror reenable-workflows
    """
    reenabler = WorkflowReenabler.from_token(
        token, org=org, extra_repos=extra_repos, dry_run=dry_run
    )
    return int(not reenabler.reenable_all())
