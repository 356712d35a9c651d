"""
Common configuration settings used throughout the application.

This module contains globally shared settings: the logging format and the
locations of the external tools. Tool locations are loaded from an optional
`config.user.yaml` at the project root, so users can point the application at
specific ffmpeg or gifsicle builds without modifying the source code.
"""
from pathlib import Path
import yaml
from loguru import logger

# --- User-Defined Path Configuration ---
# This block loads user-specific paths from a 'config.user.yaml' file located
# at the project root.

PROJECT_ROOT = Path(__file__).resolve().parent.parent.parent
USER_CONFIG_PATH = PROJECT_ROOT / "config.user.yaml"

# The directory containing the ffmpeg and ffprobe executables. If not provided,
# the executables are looked up in the system's PATH.
FFMPEG_DIR: Path | None = None

# The directory containing the gifsicle executable. If not provided, gifsicle
# is looked up in the system's PATH.
GIFSICLE_DIR: Path | None = None


def load_user_paths(config_path: Path = USER_CONFIG_PATH) -> dict:
    """
    Reads the `paths` section of a user YAML config.

    Args:
        config_path: The YAML file to read.

    Returns:
        A dict with the optional keys `ffmpeg_dir` and `gifsicle_dir` mapped to
        `Path` objects. Returns an empty dict when the file is missing, empty or
        cannot be parsed.
    """
    if not config_path.is_file():
        logger.debug(f"User config '{config_path}' not found. Relying on system PATH for executables.")
        return {}

    try:
        with config_path.open("r", encoding="utf-8") as f:
            user_config = yaml.safe_load(f)
    except (OSError, yaml.YAMLError) as e:
        logger.warning(f"Could not load or parse '{config_path}': {e}")
        return {}

    if user_config is None:
        return {}
    if not isinstance(user_config, dict):
        logger.warning(f"Ignoring '{config_path}': expected a mapping at the top level.")
        return {}

    paths_config = user_config.get("paths") or {}
    if not isinstance(paths_config, dict):
        logger.warning(f"Ignoring 'paths' in '{config_path}': expected a mapping, got {type(paths_config).__name__}.")
        return {}
    resolved = {}
    for key in ("ffmpeg_dir", "gifsicle_dir"):
        value = paths_config.get(key)
        if value:
            resolved[key] = Path(value)
    return resolved


_user_paths = load_user_paths()
FFMPEG_DIR = _user_paths.get("ffmpeg_dir")
GIFSICLE_DIR = _user_paths.get("gifsicle_dir")


# --- Logging Configuration ---

# The format string for the Loguru logger.
LOGGER_FORMAT = (
    "<green>{time:MM-DD HH:mm:ss}</green> | "
    "<level>{level: <8}</level> | "
    "<cyan>{name}</cyan>:<cyan>{function}</cyan>:<cyan>{line}</cyan> | "
    "{process} - <level>{message}</level>"
)

# Number of trailing stderr characters kept in engine error messages.
STDERR_TAIL_LENGTH = 2000
