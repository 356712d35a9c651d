"""
Configuration settings related to video processing.

This module defines the ffmpeg defaults applied when transcoding: frame rate,
bitrate, codec profiles per output format, the interlaced-source handling and
the still-frame extraction offset.
"""

# --- General Video Settings ---
DEFAULT_VIDEO_FORMAT = "mp4"
DEFAULT_VIDEO_BITRATE = "1200k"
DEFAULT_FRAME_RATE = 25

# --- Codec Profiles ---
# Codec arguments for each output format. Formats missing from this table are
# left to ffmpeg's own defaults for the container.
_H264_AAC = ["-c:v", "libx264", "-pix_fmt", "yuv420p", "-c:a", "aac"]
VIDEO_CODEC_ARGS = {
    "mp4": _H264_AAC,
    "m4v": _H264_AAC,
    "mov": _H264_AAC,
    "webm": ["-c:v", "libvpx-vp9", "-c:a", "libopus"],
}

# Container names passed to `-f` when they differ from the format name.
VIDEO_CONTAINERS = {"m4v": "mp4"}

# Formats that get the fast-start flag (moov atom before media data).
FASTSTART_FORMATS = {"mp4", "m4v", "mov"}

# --- Interlaced Sources ---
# AVCHD (.mts) sources are deinterlaced and encoded at a fixed quality scale
# instead of the default bitrate.
INTERLACED_EXTENSIONS = (".mts",)
DEINTERLACE_FILTER = "yadif=1"
INTERLACED_QUALITY_SCALE = "4"

# --- Still Frame Extraction ---
# Timestamp (seconds) of the first extraction attempt, skipping a possible
# blank leading frame.
STILL_FRAME_OFFSET = "0.1"

# --- Progress Reporting ---
# Global ffmpeg options placed before the translated arguments so that
# machine-readable progress is written to stdout.
FFMPEG_PROGRESS_ARGS = ["-hide_banner", "-loglevel", "error", "-progress", "pipe:1", "-nostats"]

# --- Constant-Quality Encoding ---
# Used instead of the bitrate when `quality` (0-100) is set. Each entry maps a
# format to (crf at quality 0, crf at quality 100, extra arguments); quality is
# interpolated linearly between the two CRF values. libvpx-vp9 only honours
# CRF as a constant-quality target when the bitrate is 0.
_X264_CRF = (51, 0, [])
VIDEO_QUALITY_CRF = {
    "mp4": _X264_CRF,
    "m4v": _X264_CRF,
    "mov": _X264_CRF,
    "webm": (63, 0, ["-b:v", "0"]),
}
