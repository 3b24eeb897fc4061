from pathlib import Path

import platformdirs

from .typed_path import AbsDir, RelFile

GIT_MIRROR_NAME: str = "git-mirror"

SETTINGS_FILE: RelFile = RelFile(Path("settings.yml"))
LOCAL_SETTINGS_FILE: RelFile = RelFile(Path("settings.local.yml"))
CONFIG_DIR: AbsDir = AbsDir(Path(platformdirs.user_config_dir(GIT_MIRROR_NAME)))
DEFAULT_WORKING_DIRECTORY: AbsDir = AbsDir(Path(platformdirs.user_cache_dir(GIT_MIRROR_NAME)))

DEFAULT_PRODUCT_PREFIX: str = "manageiq"
# Always mirrored from upstream, whatever the branch mapping says.
ALWAYS_MIRRORED_BRANCH: str = "master"

LOADING_SUFFIX: str = "..."
DONE_SUFFIX: str = "[done]"
FAILURE_SUFFIX: str = "[failed]"
