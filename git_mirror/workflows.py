from collections.abc import Sequence
from dataclasses import dataclass
from typing import Self

from github import Auth, Github, GithubException
from github.Workflow import Workflow
from loguru import logger

from .logger import describe, header

DISABLED_WORKFLOW_STATES: frozenset[str] = frozenset({"disabled_manually", "disabled_inactivity"})


@dataclass(frozen=True)
class WorkflowReenabler:
    client: Github
    org: str
    extra_repos: Sequence[str] = ()
    dry_run: bool = False

    @classmethod
    def from_token(
        cls, token: str, *, org: str, extra_repos: Sequence[str] = (), dry_run: bool = False
    ) -> Self:
        return cls(Github(auth=Auth.Token(token)), org, extra_repos, dry_run)

    def repo_names(self) -> list[str]:
        with describe(f"Listing repos in {self.org}", level="DEBUG"):
            names = {repo.full_name for repo in self.client.get_organization(self.org).get_repos()}
        return sorted(names.union(self.extra_repos))

    def disabled_workflows(self, repo_name: str) -> list[Workflow]:
        repo = self.client.get_repo(repo_name)
        return [
            workflow
            for workflow in repo.get_workflows()
            if workflow.state in DISABLED_WORKFLOW_STATES
        ]

    def reenable_all(self) -> bool:
        return all([self.reenable(repo_name) for repo_name in self.repo_names()])

    def reenable(self, repo_name: str) -> bool:
        header(repo_name, color="cyan")
        try:
            workflows = self.disabled_workflows(repo_name)
        except GithubException as e:
            logger.error(f"!!! Unable to reenable workflows for {repo_name}: {e}")
            return False
        if not workflows:
            logger.info("** No disabled workflows found")
            return True
        return all([self.enable(workflow) for workflow in workflows])

    def enable(self, workflow: Workflow) -> bool:
        prefix = "dry_run: " if self.dry_run else ""
        logger.info(f"** {prefix}Enabling {workflow.html_url} ({workflow.id})")
        if self.dry_run:
            return True
        try:
            return workflow.enable()
        except GithubException as e:
            logger.error(f"!!! Unable to enable {workflow.html_url}: {e}")
            return False
