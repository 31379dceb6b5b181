"""Exception types raised while reading and writing audio metadata.

Every error raised by the engine derives from AudioTagError so callers can
catch the whole family at once, while still matching the builtin category
(OSError, ValueError) each problem naturally belongs to.
"""


class AudioTagError(Exception):
    """Base class for all audiotag errors."""


class IoError(AudioTagError, OSError):
    """A read, seek or write failed, or the data ended unexpectedly."""


class UnknownFormatError(AudioTagError, ValueError):
    """The probe could not classify the file."""


class UnsupportedTagError(AudioTagError, ValueError):
    """A tag type was requested that the file type cannot carry."""


class MalformedHeaderError(AudioTagError, ValueError):
    """A header, chunk or frame violates the layout of its format."""


class EncodingError(AudioTagError, ValueError):
    """Text that does not respect the charset its container declares."""
