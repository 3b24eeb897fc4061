from collections.abc import Generator
import contextlib
from dataclasses import dataclass
import os
from typing import Self

from loguru import logger

from .githelper import GitHelper, ProcessResult
from .logger import describe, header
from .repo import MirrorRepo
from .result import MirrorResult
from .typed_path import AbsDir, RelDir
from .types import RemoteName

HEADS_PREFIX = "refs/heads/"


@dataclass
class CloneError(Exception):
    url: str
    path: AbsDir

    def __str__(self) -> str:
        return f"unable to clone {self.url!r} into {self.path}."


@dataclass(frozen=True)
class Workspace:
    repo: MirrorRepo
    path: AbsDir
    git: GitHelper
    result: MirrorResult

    @classmethod
    @contextlib.contextmanager
    def open(
        cls, repo: MirrorRepo, *, working_directory: AbsDir, git: GitHelper, result: MirrorResult
    ) -> Generator[Self]:
        header(f"Mirroring {repo.downstream_name}", color="cyan")
        working_directory.mkdir()
        workspace = cls(repo, working_directory / RelDir(repo.downstream_name), git, result)
        try:
            if not workspace.path.is_folder():
                workspace.clone(working_directory)
            workspace.attach_remotes()
            workspace.fetch_all()
            yield workspace
        finally:
            logger.debug(f"Finished with {workspace.path}")

    def run(self, *args: str, allow_failure: bool = False) -> bool:
        success = self.git.run(self.path, *args, report_failure=not allow_failure)
        if allow_failure:
            return True
        return self.result.record(success)

    def query(self, *args: str) -> ProcessResult:
        return self.git.query(self.path, *args)

    def clone(self, working_directory: AbsDir) -> None:
        url = self.repo.source_url
        with describe(f"Cloning {url} into {self.path}", level="DEBUG", error_level="DEBUG"):
            success = self.git.run(
                working_directory, "clone", "-o", "upstream", url, os.fspath(self.path)
            )
            if not self.result.record(success):
                raise CloneError(url, self.path)

    def attach_remotes(self) -> None:
        remotes = self.remotes()
        if "downstream" not in remotes:
            self.run("remote", "add", "downstream", self.repo.mirror_url("downstream"))
        if self.repo.has_backup and "backup" not in remotes:
            self.run("remote", "add", "backup", self.repo.mirror_url("backup"))

    def fetch_all(self) -> None:
        header(f"Fetching for {self.repo.downstream_name}")
        # Upstream is fetched last so that moved tags end up where upstream has them.
        if self.repo.has_backup and self.remote_exists("backup"):
            self.fetch("backup")
        self.fetch("downstream")
        if self.repo.fetches_upstream:
            self.fetch("upstream")

    def fetch(self, remote: RemoteName) -> bool:
        return self.run("fetch", remote, "--prune", "--tags")

    def remotes(self) -> set[str]:
        result = self.query("remote")
        if not result.ok:
            return set()
        return set(result.stdout.split())

    def remote_exists(self, remote: RemoteName) -> bool:
        return self.query("ls-remote", remote).ok

    def remote_branch_exists(self, ref: str) -> bool:
        return self.query("rev-parse", "--verify", "--quiet", f"refs/remotes/{ref}").ok

    def remote_heads(self, remote: RemoteName) -> list[str]:
        result = self.query("ls-remote", "--heads", remote)
        if not result.ok:
            return []
        heads = []
        for line in result.stdout.splitlines():
            _, _, ref = line.partition("\t")
            if ref.startswith(HEADS_PREFIX):
                heads.append(ref.removeprefix(HEADS_PREFIX))
        return heads
