from dataclasses import dataclass, field

from .constants import DEFAULT_PRODUCT_PREFIX, DEFAULT_WORKING_DIRECTORY
from .typed_path import AbsDir
from .types import BranchMapping, RemoteSource


@dataclass(frozen=True, kw_only=True, slots=True)
class RemotesConfig:
    upstream: str | None = None
    downstream: str | None = None
    backup: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class MirrorRepoConfig:
    remote_source: RemoteSource = "upstream"
    downstream_repo_name: str | None = None


@dataclass(frozen=True, kw_only=True, slots=True)
class MirrorConfig:
    remotes: RemotesConfig
    repos_to_mirror: dict[str, MirrorRepoConfig]
    branch_mirror_defaults: BranchMapping = field(default_factory=dict)
    branch_mirror_overrides: dict[str, BranchMapping] = field(default_factory=dict)
    working_directory: AbsDir = DEFAULT_WORKING_DIRECTORY
    productization_name: str | None = None
    product_prefix: str = DEFAULT_PRODUCT_PREFIX
