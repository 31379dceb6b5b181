"""File types and the TaggedFile aggregate returned by a read."""

import os
import struct
from enum import Enum
from typing import Dict, List, Optional

from .constants import (
    AIFF_FORMS,
    FLAC_MAGIC,
    FORM_MAGIC,
    ID3V2_HEADER_SIZE,
    ID3V2_MAGIC,
    MAC_MAGIC,
    MP4_FTYP,
    OGG_MAGIC,
    OPUS_HEAD,
    RIFF_MAGIC,
    WAVE_MAGIC,
)
from .errors import UnsupportedTagError
from .properties import FileProperties
from .tag import Tag, TagType
from .utils import unsynch_u32


class FileType(Enum):
    """Supported audio containers."""

    APE = "APE"
    AIFF = "AIFF"
    FLAC = "FLAC"
    MP3 = "MP3"
    MP4 = "MP4"
    OPUS = "Opus"
    VORBIS = "Vorbis"
    WAV = "WAV"

    def primary_tag_type(self) -> TagType:
        """The tag type a file of this type is normally tagged with."""
        return _PRIMARY_TAG_TYPES[self]

    def supported_tag_types(self) -> List[TagType]:
        """Every tag type this file type can carry, primary first."""
        return list(_SUPPORTED_TAG_TYPES[self])

    def supports_tag_type(self, tag_type: TagType) -> bool:
        return tag_type in _SUPPORTED_TAG_TYPES[self]

    @staticmethod
    def from_ext(ext: str) -> Optional["FileType"]:
        """Return the FileType for an extension (with or without the dot)."""
        return EXTENSION_MAPPING.get(ext.lower().lstrip("."))

    @staticmethod
    def from_path(path) -> Optional["FileType"]:
        return FileType.from_ext(os.path.splitext(os.fspath(path))[1])

    @staticmethod
    def from_buffer(buf: bytes) -> Optional["FileType"]:
        """Identify a file from its first bytes.

        A leading ID3v2 tag is skipped when the buffer extends past it,
        otherwise the file is assumed to be MP3.
        """
        if len(buf) < 1:
            return None

        if buf.startswith(ID3V2_MAGIC) and len(buf) >= ID3V2_HEADER_SIZE:
            (size,) = struct.unpack(">I", buf[6:10])
            end = ID3V2_HEADER_SIZE + unsynch_u32(size)
            if buf[5] & 0x10:
                end += ID3V2_HEADER_SIZE
            if len(buf) > end + 4:
                return FileType.from_buffer(buf[end:])
            return FileType.MP3

        if buf.startswith(MAC_MAGIC):
            return FileType.APE
        if len(buf) >= 2 and buf[0] == 0xFF and buf[1] & 0xE0 == 0xE0:
            return FileType.MP3
        if buf.startswith(FORM_MAGIC) and buf[8:12] in AIFF_FORMS:
            return FileType.AIFF
        if buf.startswith(OGG_MAGIC):
            if buf[29:35] == b"vorbis":
                return FileType.VORBIS
            if buf[28:36] == OPUS_HEAD:
                return FileType.OPUS
            return None
        if buf.startswith(FLAC_MAGIC):
            return FileType.FLAC
        if buf.startswith(RIFF_MAGIC) and buf[8:12] == WAVE_MAGIC:
            return FileType.WAV
        if buf[4:8] == MP4_FTYP:
            return FileType.MP4
        return None


_PRIMARY_TAG_TYPES = {
    FileType.AIFF: TagType.ID3V2,
    FileType.MP3: TagType.ID3V2,
    FileType.WAV: TagType.ID3V2,
    FileType.APE: TagType.APE,
    FileType.FLAC: TagType.VORBIS_COMMENTS,
    FileType.OPUS: TagType.VORBIS_COMMENTS,
    FileType.VORBIS: TagType.VORBIS_COMMENTS,
    FileType.MP4: TagType.MP4_ILST,
}

# Priority order used to pick the primary tag of a TaggedFile
_SUPPORTED_TAG_TYPES = {
    FileType.AIFF: (TagType.ID3V2, TagType.AIFF_TEXT),
    FileType.APE: (TagType.APE, TagType.ID3V2, TagType.ID3V1),
    FileType.FLAC: (TagType.VORBIS_COMMENTS,),
    FileType.MP3: (TagType.ID3V2, TagType.APE, TagType.ID3V1),
    FileType.MP4: (TagType.MP4_ILST,),
    FileType.OPUS: (TagType.VORBIS_COMMENTS,),
    FileType.VORBIS: (TagType.VORBIS_COMMENTS,),
    FileType.WAV: (TagType.ID3V2, TagType.RIFF_INFO),
}

EXTENSION_MAPPING = {
    "ape": FileType.APE,
    "aiff": FileType.AIFF,
    "aif": FileType.AIFF,
    "aifc": FileType.AIFF,
    "mp3": FileType.MP3,
    "mp2": FileType.MP3,
    "mp1": FileType.MP3,
    "wav": FileType.WAV,
    "wave": FileType.WAV,
    "opus": FileType.OPUS,
    "flac": FileType.FLAC,
    "ogg": FileType.VORBIS,
    "oga": FileType.VORBIS,
    "mp4": FileType.MP4,
    "m4a": FileType.MP4,
    "m4b": FileType.MP4,
    "m4p": FileType.MP4,
    "m4r": FileType.MP4,
    "m4v": FileType.MP4,
    "3gp": FileType.MP4,
}

SUPPORTED_EXTENSIONS = set(EXTENSION_MAPPING.keys())


class TaggedFile:
    """The result of reading a file: its type, stream properties and tags.

    ``read_errors`` maps a TagType to the exception raised while parsing a
    tag block of that type. Such tags are missing from ``tags``.
    """

    def __init__(
        self,
        file_type: FileType,
        properties: Optional[FileProperties] = None,
        tags: Optional[List[Tag]] = None,
    ):
        self.file_type = file_type
        self.properties = properties if properties is not None else FileProperties.unknown()
        self._tags: List[Tag] = []
        self.read_errors: Dict[TagType, Exception] = {}
        for tag in tags or []:
            self.insert_tag(tag)

    def __repr__(self):
        types = ", ".join(tag.tag_type.value for tag in self._tags)
        return f"TaggedFile({self.file_type.value}, tags=[{types}])"

    @property
    def tags(self) -> List[Tag]:
        return list(self._tags)

    def tag(self, tag_type: TagType) -> Optional[Tag]:
        for tag in self._tags:
            if tag.tag_type == tag_type:
                return tag
        return None

    def primary_tag(self) -> Optional[Tag]:
        """The tag of this file type's primary tag type, if present."""
        return self.tag(self.file_type.primary_tag_type())

    def first_tag(self) -> Optional[Tag]:
        """The first present tag in priority order, else the first tag, else None."""
        for tag_type in _SUPPORTED_TAG_TYPES[self.file_type]:
            tag = self.tag(tag_type)
            if tag is not None:
                return tag
        return self._tags[0] if self._tags else None

    def contains_tag_type(self, tag_type: TagType) -> bool:
        return self.tag(tag_type) is not None

    def insert_tag(self, tag: Tag) -> Optional[Tag]:
        """Add a tag, replacing (and returning) any tag of the same type.

        Raises:
            UnsupportedTagError: If this file type cannot carry the tag type
        """
        if not self.file_type.supports_tag_type(tag.tag_type):
            raise UnsupportedTagError(
                f"{self.file_type.value} files cannot carry {tag.tag_type.value} tags"
            )
        for i, existing in enumerate(self._tags):
            if existing.tag_type == tag.tag_type:
                self._tags[i] = tag
                return existing
        self._tags.append(tag)
        return None

    def remove_tag(self, tag_type: TagType) -> Optional[Tag]:
        for i, existing in enumerate(self._tags):
            if existing.tag_type == tag_type:
                return self._tags.pop(i)
        return None

    def save_to(self, f, padding: int = 0):
        """Write every held tag to an open file, one tag at a time."""
        from .containers import write_tag

        for tag in self._tags:
            f.seek(0)
            write_tag(f, self.file_type, tag, padding)

    def save_to_path(self, path, padding: int = 0):
        with open(path, "r+b") as f:
            self.save_to(f, padding)
