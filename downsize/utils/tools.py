"""
This module provides the Tools class, which locates and verifies the external
executables the application delegates to: ffmpeg and gifsicle.
"""
import subprocess
import sys
from pathlib import Path
from typing import Optional

from loguru import logger

from ..config import common


class Tools:
    """
    Resolves external executables.

    Locations come from the user's `config.user.yaml` (`ffmpeg_dir`,
    `gifsicle_dir`). When a directory is not configured, or the executable is
    missing from it, the bare command name is returned so the system's PATH is
    used.
    """

    @staticmethod
    def _resolve(name: str, configured_dir: Optional[Path]) -> str:
        exe_name = f"{name}.exe" if sys.platform == "win32" else name

        if configured_dir and configured_dir.is_dir():
            configured_path = configured_dir / exe_name
            if configured_path.is_file():
                logger.trace(f"Using {name} from configured path: '{configured_path}'")
                return str(configured_path)
            logger.warning(f"'{configured_dir}' is configured for {name}, but '{exe_name}' was not found there. Falling back to system PATH.")

        return exe_name

    @staticmethod
    def ffmpeg() -> str:
        """Returns the command or absolute path used to run ffmpeg."""
        return Tools._resolve("ffmpeg", common.FFMPEG_DIR)

    @staticmethod
    def ffprobe() -> str:
        """Returns the command or absolute path used to run ffprobe."""
        return Tools._resolve("ffprobe", common.FFMPEG_DIR)

    @staticmethod
    def gifsicle() -> str:
        """Returns the command or absolute path used to run gifsicle."""
        return Tools._resolve("gifsicle", common.GIFSICLE_DIR)

    @staticmethod
    def verify(cmd: str, version_flag: str = "--version") -> bool:
        """
        Checks that an executable can be started and reports its version.

        Runs `<cmd> <version_flag>` and logs the first line of the output.

        Returns:
            True if the command ran and exited with status 0, False otherwise.
        """
        try:
            result = subprocess.run(
                [cmd, version_flag],
                check=True,
                capture_output=True,
                text=True,
                encoding="utf-8",
            )
        except subprocess.CalledProcessError as e:
            logger.error(f"'{cmd} {version_flag}' failed (return code {e.returncode}):\n{e.stderr}")
            return False
        except FileNotFoundError:
            logger.error(
                f"'{cmd}' not found. Install it, add it to your system's PATH "
                "or set its directory in 'config.user.yaml'."
            )
            return False

        version_lines = (result.stdout or result.stderr).splitlines()
        logger.info(f"{cmd}: {version_lines[0] if version_lines else 'version unknown'}")
        return True

    @staticmethod
    def verify_all() -> bool:
        """Verifies every external tool. Returns True only if all of them work."""
        results = [
            Tools.verify(Tools.ffmpeg(), "-version"),
            Tools.verify(Tools.ffprobe(), "-version"),
            Tools.verify(Tools.gifsicle(), "--version"),
        ]
        return all(results)
