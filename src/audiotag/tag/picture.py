"""Embedded pictures and their per-format binary layouts."""

import base64
import binascii
import struct
from dataclasses import dataclass
from enum import IntEnum
from typing import Optional

from ..errors import MalformedHeaderError


class PictureType(IntEnum):
    """ID3v2 APIC / FLAC picture types."""

    OTHER = 0
    ICON = 1
    OTHER_ICON = 2
    COVER_FRONT = 3
    COVER_BACK = 4
    LEAFLET = 5
    MEDIA = 6
    LEAD_ARTIST = 7
    ARTIST = 8
    CONDUCTOR = 9
    BAND = 10
    COMPOSER = 11
    LYRICIST = 12
    RECORDING_LOCATION = 13
    DURING_RECORDING = 14
    DURING_PERFORMANCE = 15
    SCREEN_CAPTURE = 16
    BRIGHT_FISH = 17
    ILLUSTRATION = 18
    BAND_LOGO = 19
    PUBLISHER_LOGO = 20

    @classmethod
    def from_int(cls, value: int) -> "PictureType":
        try:
            return cls(value)
        except ValueError:
            return cls.OTHER


# APEv2 stores the picture type in the item key
APE_PICTURE_KEYS = {
    PictureType.OTHER: "Cover Art (Other)",
    PictureType.ICON: "Cover Art (Png Icon)",
    PictureType.OTHER_ICON: "Cover Art (Icon)",
    PictureType.COVER_FRONT: "Cover Art (Front)",
    PictureType.COVER_BACK: "Cover Art (Back)",
    PictureType.LEAFLET: "Cover Art (Leaflet)",
    PictureType.MEDIA: "Cover Art (Media)",
    PictureType.LEAD_ARTIST: "Cover Art (Lead Artist)",
    PictureType.ARTIST: "Cover Art (Artist)",
    PictureType.CONDUCTOR: "Cover Art (Conductor)",
    PictureType.BAND: "Cover Art (Band)",
    PictureType.COMPOSER: "Cover Art (Composer)",
    PictureType.LYRICIST: "Cover Art (Lyricist)",
    PictureType.RECORDING_LOCATION: "Cover Art (Recording Location)",
    PictureType.DURING_RECORDING: "Cover Art (During Recording)",
    PictureType.DURING_PERFORMANCE: "Cover Art (During Performance)",
    PictureType.SCREEN_CAPTURE: "Cover Art (Video Capture)",
    PictureType.BRIGHT_FISH: "Cover Art (Fish)",
    PictureType.ILLUSTRATION: "Cover Art (Illustration)",
    PictureType.BAND_LOGO: "Cover Art (Band Logotype)",
    PictureType.PUBLISHER_LOGO: "Cover Art (Publisher Logotype)",
}
APE_PICTURE_TYPES = {key.lower(): pic_type for pic_type, key in APE_PICTURE_KEYS.items()}


def guess_mime_type(data: bytes) -> str:
    """Guess an image mime type from its magic bytes, or return ''."""
    if data.startswith(b"\x89PNG"):
        return "image/png"
    if data.startswith(b"\xff\xd8"):
        return "image/jpeg"
    if data.startswith(b"GIF"):
        return "image/gif"
    if data.startswith(b"BM"):
        return "image/bmp"
    if data.startswith((b"II", b"MM")):
        return "image/tiff"
    return ""


@dataclass
class Picture:
    """An embedded image."""

    data: bytes
    mime_type: str = ""
    pic_type: PictureType = PictureType.COVER_FRONT
    description: str = ""
    width: int = 0
    height: int = 0
    color_depth: int = 0
    num_colors: int = 0

    def __post_init__(self):
        self.pic_type = PictureType.from_int(int(self.pic_type))
        if not self.mime_type:
            self.mime_type = guess_mime_type(self.data)

    def __eq__(self, other):
        # Dimensions are informational only, several formats cannot store them
        if not isinstance(other, Picture):
            return NotImplemented
        return (
            self.data == other.data
            and self.mime_type == other.mime_type
            and self.pic_type == other.pic_type
            and self.description == other.description
        )

    def __repr__(self):
        return (
            f"Picture(pic_type={self.pic_type.name}, mime_type={self.mime_type!r}, "
            f"description={self.description!r}, {len(self.data)} bytes)"
        )

    # -----------------------------------------------------------------------
    # FLAC PICTURE block / METADATA_BLOCK_PICTURE
    # -----------------------------------------------------------------------
    def as_flac_bytes(self, encode: bool = False) -> bytes:
        """Return the FLAC picture block body, base64 encoded if ``encode``."""
        mime = self.mime_type.encode("ascii", "replace")
        desc = self.description.encode("utf-8")
        data = b"".join((
            struct.pack(">II", int(self.pic_type), len(mime)),
            mime,
            struct.pack(">I", len(desc)),
            desc,
            struct.pack(
                ">IIIII",
                self.width,
                self.height,
                self.color_depth,
                self.num_colors,
                len(self.data),
            ),
            self.data,
        ))
        return base64.b64encode(data) if encode else data

    @staticmethod
    def from_flac_bytes(data: bytes, encoded: bool = False) -> "Picture":
        """Parse a FLAC picture block body.

        Raises:
            MalformedHeaderError: If the block is truncated or not base64
        """
        if encoded:
            try:
                data = base64.b64decode(data, validate=True)
            except (binascii.Error, ValueError) as e:
                raise MalformedHeaderError(f"Picture is not valid base64: {e}") from e
        try:
            pos = 0
            pic_type, mime_len = struct.unpack_from(">II", data, pos)
            pos += 8
            mime = data[pos:pos + mime_len].decode("ascii", "replace")
            pos += mime_len
            (desc_len,) = struct.unpack_from(">I", data, pos)
            pos += 4
            description = data[pos:pos + desc_len].decode("utf-8", "replace")
            pos += desc_len
            width, height, depth, colors, size = struct.unpack_from(">IIIII", data, pos)
            pos += 20
        except struct.error as e:
            raise MalformedHeaderError(f"Truncated picture block: {e}") from e
        pic_data = data[pos:pos + size]
        if len(pic_data) != size:
            raise MalformedHeaderError(
                f"Picture data truncated: expected {size} bytes, got {len(pic_data)}"
            )
        return Picture(pic_data, mime, PictureType.from_int(pic_type), description,
                       width, height, depth, colors)

    # -----------------------------------------------------------------------
    # APEv2 cover art
    # -----------------------------------------------------------------------
    @property
    def ape_key(self) -> str:
        return APE_PICTURE_KEYS[self.pic_type]

    def as_ape_bytes(self) -> bytes:
        return self.description.encode("utf-8") + b"\x00" + self.data

    @staticmethod
    def from_ape_bytes(key: str, data: bytes) -> "Picture":
        description, sep, pic_data = data.partition(b"\x00")
        if not sep:
            # Some writers omit the description entirely
            description, pic_data = b"", data
        pic_type = APE_PICTURE_TYPES.get(key.lower(), PictureType.OTHER)
        return Picture(pic_data, "", pic_type, description.decode("utf-8", "replace"))


def is_ape_picture_key(key: str) -> bool:
    return key.lower() in APE_PICTURE_TYPES


def mime_from_image_format(fmt: str) -> Optional[str]:
    """Map an ID3v2.2 three letter image format to a mime type."""
    return {
        "JPG": "image/jpeg",
        "PNG": "image/png",
        "GIF": "image/gif",
        "BMP": "image/bmp",
        "TIF": "image/tiff",
    }.get(fmt.upper())
