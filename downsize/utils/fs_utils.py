"""
Filesystem helpers shared by the conversion entry points.
"""

from pathlib import Path

from loguru import logger

from ..domain.exceptions import FilesystemException


def ensure_parent_dir(target: Path) -> Path:
    """
    Creates the parent directory of `target`, including missing ancestors.

    Calling it again for the same target is a no-op.

    Returns:
        The parent directory.

    Raises:
        FilesystemException: If the directory cannot be created.
    """
    parent = Path(target).parent
    try:
        parent.mkdir(parents=True, exist_ok=True)
    except OSError as e:
        logger.error(f"Could not create output directory '{parent}': {e}")
        raise FilesystemException(f"Could not create output directory '{parent}': {e}") from e
    return parent
