class WallQuoteError(Exception):
    """Base class for failures raised by the estimation services."""


class InvalidArgumentError(WallQuoteError):
    """Input rejected before any remote call was made."""


class UpstreamError(WallQuoteError):
    """A remote inference service failed or answered with a non-success status."""


class ParseError(WallQuoteError):
    """The remote answer could not be read as the expected shape."""

    def __init__(self, message: str, raw_text: str = ""):
        super().__init__(message)
        self.raw_text = raw_text
