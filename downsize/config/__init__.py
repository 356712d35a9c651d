"""
Configuration Package for Smart Downsize.

This package centralizes the static configuration settings for the application.

This package includes settings for:
- Common application settings like the logging format and the user-overridable
  locations of external tools (ffmpeg, gifsicle).
- Image defaults: GIF detection, watermark placement table, default quality.
- Video defaults: frame rate, bitrate, codec profiles per output format and the
  still-frame extraction offset.
"""
