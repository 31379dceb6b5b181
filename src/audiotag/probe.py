"""File type detection and the read entry points."""

import logging
import os
import struct
from typing import BinaryIO, Optional

from .constants import ID3V2_HEADER_SIZE, ID3V2_MAGIC, SIGNATURE_PROBE_SIZE
from .containers import read_file
from .errors import IoError, UnknownFormatError
from .file import FileType, TaggedFile
from .utils import stream_length, unsynch_u32

logger = logging.getLogger(__name__)


class Probe:
    """
    Determines the FileType of a stream before it is parsed.

    The extension gives the type up front (``Probe.open``); a signature check
    (``guess_file_type``) overrides it when the first bytes are recognised.
    """

    def __init__(self, f: BinaryIO, file_type: Optional[FileType] = None):
        self.f = f
        self.file_type = file_type
        self._owned = False

    @classmethod
    def open(cls, path) -> "Probe":
        """Open ``path`` for reading, taking the FileType from its extension.

        Raises:
            IoError: If the file cannot be opened
        """
        try:
            f = open(path, "rb")
        except OSError as e:
            raise IoError(f"Cannot open {os.fspath(path)}: {e}") from e
        probe = cls(f, FileType.from_path(path))
        probe._owned = True
        return probe

    def __enter__(self):
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        self.close()

    def close(self):
        if self._owned:
            self.f.close()

    def guess_file_type(self) -> "Probe":
        """Check the first bytes against the known signatures.

        A recognised signature replaces the current FileType. The stream
        position is left where it was.
        """
        position = self.f.tell()
        try:
            self.f.seek(0)
            buf = self.f.read(SIGNATURE_PROBE_SIZE)
            # A leading ID3v2 tag hides the real signature, look past it
            if buf.startswith(ID3V2_MAGIC) and len(buf) >= ID3V2_HEADER_SIZE:
                guessed = self._guess_after_id3v2(buf)
            else:
                guessed = FileType.from_buffer(buf)
        finally:
            self.f.seek(position)

        if guessed is not None:
            if self.file_type is not None and guessed != self.file_type:
                logger.debug(
                    f"Signature says {guessed.value}, extension said {self.file_type.value}"
                )
            self.file_type = guessed
        return self

    def _guess_after_id3v2(self, buf: bytes) -> Optional[FileType]:
        guessed = FileType.from_buffer(buf)
        if guessed != FileType.MP3:
            return guessed
        (size,) = struct.unpack(">I", buf[6:10])
        end = ID3V2_HEADER_SIZE + unsynch_u32(size)
        if buf[5] & 0x10:
            end += ID3V2_HEADER_SIZE
        self.f.seek(end)
        return FileType.from_buffer(self.f.read(SIGNATURE_PROBE_SIZE)) or FileType.MP3

    def read(self, read_tags: bool = True) -> TaggedFile:
        """Parse the stream as the detected FileType.

        Args:
            read_tags: False skips every tag block, reading properties only

        Raises:
            UnknownFormatError: If no FileType is known or the stream is empty
        """
        if self.file_type is None:
            raise UnknownFormatError("Unable to determine the file type")
        if stream_length(self.f) == 0:
            raise UnknownFormatError("Cannot read the file type of an empty stream")
        logger.debug(f"Reading {self.file_type.value} file (read_tags={read_tags})")
        return read_file(self.f, self.file_type, read_tags)


def guess_from_ext(path) -> Optional[FileType]:
    return FileType.from_path(path)


def read_from_path(path, read_tags: bool = True) -> TaggedFile:
    """Read a file, typed by its extension and then by its signature.

    Raises:
        IoError: If the file cannot be opened or is truncated
        UnknownFormatError: If neither the extension nor the content is recognised
    """
    with Probe.open(path) as probe:
        return probe.guess_file_type().read(read_tags)


def read_from(f: BinaryIO, read_tags: bool = True) -> TaggedFile:
    """Read an open file, typed by its signature alone."""
    return Probe(f).guess_file_type().read(read_tags)
