"""Exceptions raised by the RAT codec."""


class RatError(RuntimeError):
    pass


class RatFormatError(RatError):
    """A file or bitstream does not match the RAT layout (bad magic, truncation)."""


class RatConfigError(RatError, ValueError):
    """Inputs or settings that cannot produce a valid RAT file set."""
