from dataclasses import dataclass

from loguru import logger

from .logger import header
from .types import RemoteName
from .workspace import Workspace


@dataclass(frozen=True)
class RefMirror:
    workspace: Workspace

    def refspecs(self, source_remote: RemoteName, dest_remote: RemoteName) -> list[str]:
        return [
            f"{source_remote}/{branch}:refs/heads/{branch}"
            for branch in self.workspace.remote_heads(source_remote)
            if self.includes(branch, source_remote, dest_remote)
        ]

    def includes(self, branch: str, source_remote: RemoteName, dest_remote: RemoteName) -> bool:
        if source_remote != "upstream":
            return True
        repo = self.workspace.repo
        if not repo.is_upstream_branch(branch):
            return False
        # Once it exists, a branch fed from another upstream branch belongs to the branch sync.
        return not (
            repo.is_renamed_target(branch)
            and self.workspace.remote_branch_exists(f"{dest_remote}/{branch}")
        )

    def mirror(self, source_remote: RemoteName, dest_remote: RemoteName) -> bool:
        header(f"Mirroring {source_remote} to {dest_remote}")
        if not self.workspace.remote_exists(dest_remote):
            logger.warning(
                f"! Skipping mirror of {source_remote} to {dest_remote} since {dest_remote} does not exist"
            )
            return True

        refspecs = self.refspecs(source_remote, dest_remote)
        if not refspecs:
            logger.warning(
                f"! Skipping mirror of {source_remote} to {dest_remote} since there are no refs to mirror"
            )
            return True

        # Tags are forced so that tags moved upstream replace the old ones.
        return self.workspace.run("push", dest_remote, *refspecs) and self.workspace.run(
            "push", "-f", dest_remote, "--tags"
        )
