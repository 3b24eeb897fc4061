from dataclasses import dataclass

from loguru import logger

from .logger import header
from .types import RemoteName
from .workspace import Workspace


@dataclass(frozen=True)
class BranchSyncer:
    workspace: Workspace

    def sync_all(self, source_remote: RemoteName, dest_remote: RemoteName) -> bool:
        return all(
            [
                self.sync(source_remote, source_name, dest_remote, dest_name)
                for source_name, dest_name in self.workspace.repo.branches.items()
            ]
        )

    def sync(
        self,
        source_remote: RemoteName,
        source_name: str,
        dest_remote: RemoteName | None,
        dest_name: str | None,
    ) -> bool:
        if dest_remote is None or dest_name is None:
            return True

        source_ref = f"{source_remote}/{source_name}"
        dest_ref = f"{dest_remote}/{dest_name}"

        header(f"Syncing {source_name} to {dest_name}")
        if not self.workspace.remote_branch_exists(source_ref):
            logger.warning(
                f"! Skipping sync of {source_name} to {dest_name} since {source_ref} branch does not exist"
            )
            return True

        start_point = dest_ref if self.workspace.remote_branch_exists(dest_ref) else source_ref
        # Fails when there is no rebase in progress.
        self.workspace.run("rebase", "--abort", allow_failure=True)
        self.workspace.run("reset", "--hard")

        success = (
            self.workspace.run("checkout", "-B", dest_name, start_point)
            and self.workspace.run("pull", "--no-rebase", source_remote, source_name)
            and self.workspace.run("push", "-f", dest_remote, dest_name)
        )
        if success and self.workspace.repo.has_backup:
            success = self.push_to_backup(source_name, dest_name)
        return success

    def push_to_backup(self, source_name: str, dest_name: str) -> bool:
        if not self.workspace.remote_exists("backup"):
            logger.warning(
                f"! Skipping sync of {source_name} to backup/{dest_name} since backup remote does not exist"
            )
            return True
        return self.workspace.run("push", "-f", "backup", dest_name)
