"""
Defines custom exception types for Smart Downsize.

Every failure surfaced by the `image`, `video` and `still` entry points is one
of these exceptions, so callers can tell engine failures (bad input, unsupported
codec, nonzero exit) apart from filesystem failures and invalid options.

All custom exceptions inherit from the base `DownsizeException`.
"""


class DownsizeException(Exception):
    """Base class for all custom exceptions in Smart Downsize."""

    pass


# --- Option Validation ---
class InvalidOptionsException(DownsizeException):
    """Raised when a `ConversionOptions` value is out of range or malformed."""

    pass


class UnsupportedDirectiveException(InvalidOptionsException):
    """
    Raised when a post-processing directive in `options.args` is unknown or
    carries a value that cannot be parsed.
    """

    pass


# --- Engine Failures ---
class EngineInvocationException(DownsizeException):
    """
    Base class for failures reported by an external engine.

    Covers bad input files, unsupported formats or codecs and processes that
    exit with a nonzero status. These are surfaced to the caller and never
    retried, apart from the still-frame extraction fallback.
    """

    pass


class ImageReadException(EngineInvocationException):
    """Raised when the image engine cannot open or decode a source image."""

    pass


class ToolNotFoundException(EngineInvocationException):
    """Raised when an external executable (ffmpeg, gifsicle) cannot be started."""

    pass


class EngineProcessException(EngineInvocationException):
    """
    Raised when an engine process exits with a nonzero status or crashes.

    Attributes:
        returncode: The exit status of the process.
        stderr: The captured standard error output (possibly truncated).
    """

    def __init__(self, message: str, returncode: int | None = None, stderr: str = ""):
        super().__init__(message)
        self.returncode = returncode
        self.stderr = stderr


# --- Filesystem Failures ---
class FilesystemException(DownsizeException):
    """Raised when the output directory cannot be created or a file cannot be written."""

    pass
