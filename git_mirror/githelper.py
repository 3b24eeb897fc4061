from collections.abc import Sequence
from dataclasses import dataclass
import os
import shlex
from typing import cast

from git import Git
from loguru import logger

from .typed_path import AbsDir

# Never block on a credential prompt.
GIT_ENVIRONMENT: dict[str, str] = {"GIT_TERMINAL_PROMPT": "0"}
MISSING_DIRECTORY_RETURNCODE = 128


@dataclass(frozen=True, slots=True, kw_only=True)
class ProcessResult:
    stdout: str
    stderr: str
    returncode: int
    args: Sequence[str]

    @property
    def ok(self) -> bool:
        return self.returncode == 0

    @property
    def output(self) -> str:
        return "\n".join(stream for stream in (self.stdout, self.stderr) if stream)

    def log(self, level: str) -> None:
        logger.log(level, f"Running: {self.args}")
        logger.log(level, f"stdout:\n{self.stdout}")
        logger.log(level, f"stderr:\n{self.stderr}")
        logger.log(level, f"returncode = {self.returncode}")


@dataclass(frozen=True)
class GitHelper:
    dry_run: bool = False

    def run(self, cwd: AbsDir, *args: str, report_failure: bool = True) -> bool:
        prefix = "dry_run: " if self.dry_run else ""
        logger.info(f"+ {prefix}{shlex.join(['git', *args])}")
        if self.dry_run:
            return True
        result = self.execute(cwd, *args)
        if not result.ok and report_failure:
            result.log(level="DEBUG")
            logger.error(f"!!! An error has occurred:\n{result.output}")
        return result.ok

    def query(self, cwd: AbsDir, *args: str) -> ProcessResult:
        return self.execute(cwd, *args)

    def execute(self, cwd: AbsDir, *args: str) -> ProcessResult:
        command = ("git", *args)
        if not cwd.is_folder():
            result = ProcessResult(
                stdout="",
                stderr=f"{cwd} is not a directory.",
                returncode=MISSING_DIRECTORY_RETURNCODE,
                args=command,
            )
        else:
            returncode, stdout, stderr = cast(
                tuple[int, str, str],
                Git(os.fspath(cwd)).execute(
                    list(command),
                    with_extended_output=True,
                    with_exceptions=False,
                    env=GIT_ENVIRONMENT,
                ),
            )
            result = ProcessResult(stdout=stdout, stderr=stderr, returncode=returncode, args=command)
        result.log(level="TRACE")
        return result
