"""Names, extensions and environment variables shared across the package."""

import os

DOOT_CRYPT_EXT_WITHOUT_DOT = "doot-crypt"
DOOT_CRYPT_EXT = "." + DOOT_CRYPT_EXT_WITHOUT_DOT
DOOT_BACKUP_EXT = ".doot-backup"
HOOKS_DIR = os.path.join("doot", "hooks")
CUSTOM_COMMANDS_DIR = os.path.join("doot", "commands")

IGNORE_HIDDEN_FILES_GLOB = "**/.*"

ENV_DOOT_DIR = "DOOT_DIR"
ENV_DOOT_CACHE_DIR = "DOOT_CACHE_DIR"
ENV_XDG_DATA_HOME = "XDG_DATA_HOME"