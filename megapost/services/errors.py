"""
Error types raised by the Megapost services.

Every error is per-operation and non-fatal: the orchestrator stores the
message on the failing category and leaves the other categories alone.
"""


class MegapostError(Exception):
    """Base class for all Megapost errors"""


class MissingCredential(MegapostError, ValueError):
    """No API key configured for the image-generation provider"""


class UnsupportedMediaType(MegapostError, ValueError):
    """The source filename has no supported image extension"""


class NoImageInResponse(MegapostError, RuntimeError):
    """The provider answered without any image part"""


class UpstreamFailure(MegapostError, RuntimeError):
    """Transport or API error from the provider, message preserved"""

    def __init__(self, message: str):
        super().__init__(f"Failed to generate image: {message}")
        self.upstream_message = message


class InvalidSourceUrl(MegapostError, ValueError):
    """The image URL is not an absolute http(s) URL"""


class FetchFailed(MegapostError, RuntimeError):
    """Fetching an image by URL failed or returned something that is not an image"""


class NoSourceImage(MegapostError, ValueError):
    """Generation was requested before an image was selected"""
