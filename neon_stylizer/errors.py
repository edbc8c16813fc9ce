"""Exception types raised by the stylization pipeline."""


class StylizerError(Exception):
    """Base class for every error raised by neon_stylizer."""


class InvalidImageData(StylizerError, ValueError):
    """The bitmap is missing, malformed or its buffer has the wrong length."""


class InvalidSettings(StylizerError, ValueError):
    """A setting is out of range or the style is unknown."""


class ResourceExhaustion(StylizerError, MemoryError):
    """The image is too large to process within the configured limits."""
