"""
Smart Downsize: image, video and still-frame conversion on top of Pillow,
gifsicle and ffmpeg.

    from downsize import image, video, still

    image("photo.jpg", "thumbs/photo.jpg", {"width": 400})
    video("clip.mts", "web/clip.mp4").wait()
    still("clip.mp4", "thumbs/clip.jpg", {"height": 200})
"""
from .domain.exceptions import (
    DownsizeException,
    EngineInvocationException,
    EngineProcessException,
    FilesystemException,
    ImageReadException,
    InvalidOptionsException,
    ToolNotFoundException,
    UnsupportedDirectiveException,
)
from .domain.options import ConversionOptions, WatermarkOptions
from .pipeline.conversion import image, still, video
from .services.video_converter import VideoJob

__all__ = [
    "ConversionOptions",
    "DownsizeException",
    "EngineInvocationException",
    "EngineProcessException",
    "FilesystemException",
    "ImageReadException",
    "InvalidOptionsException",
    "ToolNotFoundException",
    "UnsupportedDirectiveException",
    "VideoJob",
    "WatermarkOptions",
    "image",
    "still",
    "video",
]
