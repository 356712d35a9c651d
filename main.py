"""
Main entry point for the Smart Downsize application.

This script parses the command-line arguments, configures logging and runs the
requested conversion (image, video or still frame), or verifies the external
tools.
"""

import sys
from typing import List, Optional

from loguru import logger

from downsize.cli import get_args, options_from_args
from downsize.config.common import LOGGER_FORMAT
from downsize.domain.exceptions import DownsizeException
from downsize.pipeline.conversion import image, still, video
from downsize.utils.tools import Tools


# Configure the logger for initial setup.
# The level is overridden once the command-line arguments are parsed.
logger.remove()
logger.add(sys.stderr, level="INFO", format=LOGGER_FORMAT)


def main(argv: Optional[List[str]] = None) -> int:
    """
    Runs one command and returns the process exit status.

    Returns:
        0 on success, 1 if the conversion failed or a tool check failed.
    """
    args = get_args(argv)

    logger.remove()
    logger.add(sys.stderr, level=args.log_level, format=LOGGER_FORMAT)
    logger.debug(f"Parsed arguments: {args}")

    if args.command == "check-tools":
        return 0 if Tools.verify_all() else 1

    try:
        options = options_from_args(args)
        if args.command == "image":
            image(args.source, args.target, options)
        elif args.command == "still":
            still(args.source, args.target, options)
        else:
            job = video(
                args.source,
                args.target,
                options,
                on_progress=lambda percent: logger.info(f"{args.source}: {percent}%"),
            )
            job.wait()
    except DownsizeException as e:
        logger.error(f"{args.command} failed: {e}")
        return 1

    logger.success(f"{args.command} finished: {args.target}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
