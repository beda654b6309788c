class HufpackError(Exception):
    """Base class for errors raised by the hufpack codec."""


class MalformedInputError(HufpackError, ValueError):
    """Compressed data is truncated or inconsistent with its header.

    Raised when the header declares more records than the buffer holds,
    when the payload runs out before every symbol is decoded, or when
    bytes remain that no symbol accounts for.
    """
