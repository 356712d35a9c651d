"""
Utilities Package for Smart Downsize.

Modules:
    - ffmpeg_utils.py: Runs external commands and reads media durations.
    - format_utils.py: Formats sizes and durations for logs, parses ffmpeg timecodes.
    - fs_utils.py: Creates output directories.
    - tools.py: Locates and verifies the ffmpeg and gifsicle executables.
"""
