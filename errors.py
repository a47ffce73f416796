# errors.py


class ViewerError(Exception):
    """Base class for failures that abort a single render or call."""


class SingularTransformError(ViewerError):
    """A transform could not be inverted (zero scale on an axis)."""


class RasterizationError(ViewerError):
    """The page rasterizer could not open or render the source."""


class InvalidContainerSizeError(ViewerError):
    """The container has a zero or negative dimension."""


class SourceUnavailableError(ViewerError):
    """No document source has been configured."""
