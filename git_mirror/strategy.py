from __future__ import annotations

import abc
from dataclasses import dataclass
from typing import ClassVar

from .refs import RefMirror
from .syncer import BranchSyncer
from .types import RemoteSource
from .workspace import Workspace


@dataclass(frozen=True)
class MirrorStrategy(abc.ABC):
    source: ClassVar[RemoteSource]

    @abc.abstractmethod
    def run(self, workspace: Workspace) -> bool: ...

    @classmethod
    def for_source(cls, source: RemoteSource) -> MirrorStrategy:
        match source:
            case "upstream":
                return UpstreamMirror()
            case "downstream":
                return DownstreamMirror()
        raise TypeError()

    def mirror_to_backup(self, workspace: Workspace) -> list[bool]:
        if not workspace.repo.has_backup:
            return []
        return [RefMirror(workspace).mirror("downstream", "backup")]


@dataclass(frozen=True)
class UpstreamMirror(MirrorStrategy):
    source: ClassVar[RemoteSource] = "upstream"

    def run(self, workspace: Workspace) -> bool:
        steps = [
            RefMirror(workspace).mirror("upstream", "downstream"),
            BranchSyncer(workspace).sync_all("upstream", "downstream"),
        ]
        steps.extend(self.mirror_to_backup(workspace))
        return all(steps)


@dataclass(frozen=True)
class DownstreamMirror(MirrorStrategy):
    source: ClassVar[RemoteSource] = "downstream"

    def run(self, workspace: Workspace) -> bool:
        # The repo only lives downstream, so branches are synced within it.
        steps = [BranchSyncer(workspace).sync_all("downstream", "downstream")]
        steps.extend(self.mirror_to_backup(workspace))
        return all(steps)
