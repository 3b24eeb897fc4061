from collections.abc import Iterator, Sequence
from dataclasses import dataclass
from typing import Self

from loguru import logger

from .config import MirrorConfig
from .githelper import GitHelper
from .repo import MirrorRepo, MissingRemoteError
from .result import MirrorResult
from .strategy import MirrorStrategy
from .typed_path import AbsDir
from .workspace import CloneError, Workspace


@dataclass(frozen=True)
class Mirror:
    repos: Sequence[MirrorRepo]
    working_directory: AbsDir
    git: GitHelper

    @classmethod
    def from_config(cls, config: MirrorConfig, git: GitHelper) -> Self:
        return cls(
            [MirrorRepo.from_config(name, config) for name in config.repos_to_mirror],
            config.working_directory,
            git,
        )

    def __iter__(self) -> Iterator[MirrorRepo]:
        return iter(self.repos)

    def mirror_all(self) -> bool:
        result = MirrorResult()
        for repo in self:
            self.mirror(repo, result)
        return result.succeeded

    def mirror(self, repo: MirrorRepo, result: MirrorResult) -> bool:
        strategy = MirrorStrategy.for_source(repo.source)
        try:
            with Workspace.open(
                repo, working_directory=self.working_directory, git=self.git, result=result
            ) as workspace:
                return result.record(strategy.run(workspace))
        except (MissingRemoteError, CloneError) as e:
            logger.error(f"!!! Unable to mirror {repo.name}: {type(e).__name__}: {e}")
            return result.record(False)
