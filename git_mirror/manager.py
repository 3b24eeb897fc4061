from dataclasses import dataclass
import functools

from loguru import logger

from .config import MirrorConfig
from .config_parser import Parser
from .constants import LOCAL_SETTINGS_FILE, SETTINGS_FILE
from .githelper import GitHelper
from .logger import describe
from .mirror import Mirror
from .typed_path import AbsDir


@dataclass(frozen=True)
class MirrorManager:
    config_dir: AbsDir
    dry_run: bool = False

    @functools.cached_property
    def config(self) -> MirrorConfig:
        return Parser.parse_file(
            self.config_dir / SETTINGS_FILE, self.config_dir / LOCAL_SETTINGS_FILE
        )

    @functools.cached_property
    def mirror(self) -> Mirror:
        return Mirror.from_config(self.config, GitHelper(dry_run=self.dry_run))

    @describe("Mirroring all repos", level="DEBUG")
    def mirror_all(self) -> bool:
        succeeded = self.mirror.mirror_all()
        if succeeded:
            logger.info("All repos mirrored!")
        else:
            logger.error("Errors occurred while mirroring.")
        return succeeded
