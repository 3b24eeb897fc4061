from dataclasses import dataclass
from typing import Self

from .config import MirrorConfig, MirrorRepoConfig, RemotesConfig
from .constants import ALWAYS_MIRRORED_BRANCH
from .types import BranchMapping, RemoteName, RemoteSource


@dataclass
class MissingRemoteError(Exception):
    remote: RemoteName

    def __str__(self) -> str:
        return f"remote {self.remote!r} not found in settings."


@dataclass(frozen=True, kw_only=True)
class MirrorRepo:
    name: str
    downstream_name: str
    source: RemoteSource
    branches: BranchMapping
    remotes: RemotesConfig

    @classmethod
    def from_config(cls, name: str, config: MirrorConfig) -> Self:
        options = config.repos_to_mirror.get(name) or MirrorRepoConfig()
        return cls(
            name=name,
            downstream_name=cls.downstream_name_for(name, options, config),
            source=options.remote_source,
            branches=cls.branches_for(name, config),
            remotes=config.remotes,
        )

    @classmethod
    def branches_for(cls, name: str, config: MirrorConfig) -> BranchMapping:
        return {**config.branch_mirror_defaults, **config.branch_mirror_overrides.get(name, {})}

    @classmethod
    def downstream_name_for(cls, name: str, options: MirrorRepoConfig, config: MirrorConfig) -> str:
        if options.downstream_repo_name is not None:
            return options.downstream_repo_name
        if config.productization_name is None or not name.startswith(config.product_prefix):
            return name
        return config.productization_name + name.removeprefix(config.product_prefix)

    @property
    def has_backup(self) -> bool:
        return self.remotes.backup is not None

    @property
    def fetches_upstream(self) -> bool:
        return self.source == "upstream"

    def remote_base(self, remote: RemoteName) -> str:
        base: str | None = getattr(self.remotes, remote)
        if base is None:
            raise MissingRemoteError(remote)
        return base.rstrip("/")

    @property
    def source_url(self) -> str:
        return f"{self.remote_base(self.source)}/{self.name}.git"

    def mirror_url(self, remote: RemoteName) -> str:
        return f"{self.remote_base(remote)}/{self.downstream_name}.git"

    def is_upstream_branch(self, branch: str) -> bool:
        return branch in self.branches or branch == ALWAYS_MIRRORED_BRANCH

    def is_renamed_target(self, branch: str) -> bool:
        return any(
            dest_name == branch and source_name != branch
            for source_name, dest_name in self.branches.items()
        )
