import math
import struct
from datetime import timedelta
from typing import BinaryIO, Optional, Tuple

from .errors import EncodingError, IoError, MalformedHeaderError


def read_exact(f: BinaryIO, size: int) -> bytes:
    """Read exactly ``size`` bytes from a file object.

    Args:
        f: Binary file object
        size: Number of bytes wanted

    Returns:
        The bytes read

    Raises:
        IoError: If the stream ends before ``size`` bytes could be read
    """
    data = f.read(size)
    if len(data) != size:
        raise IoError(
            f"Unexpected end of file: expected {size} bytes, got {len(data)}"
        )
    return data


def stream_length(f: BinaryIO) -> int:
    """Return the total length of a seekable stream, keeping its position."""
    current = f.tell()
    end = f.seek(0, 2)
    f.seek(current)
    return end


def unsynch_u32(value: int) -> int:
    """Decode a 28-bit synchsafe integer (7 bits used per byte)."""
    result = 0
    for shift in (24, 16, 8, 0):
        byte = (value >> shift) & 0xFF
        result = (result << 7) | (byte & 0x7F)
    return result


def synch_u32(value: int) -> int:
    """Encode an integer as a 28-bit synchsafe integer.

    Raises:
        MalformedHeaderError: If the value does not fit in 28 bits
    """
    if value > 0x0FFFFFFF:
        raise MalformedHeaderError(f"Value {value} is too large for a synchsafe integer")
    return (
        ((value & 0x0FE00000) << 3)
        | ((value & 0x001FC000) << 2)
        | ((value & 0x00003F80) << 1)
        | (value & 0x0000007F)
    )


def remove_unsynchronisation(data: bytes) -> bytes:
    """Undo ID3v2 unsynchronisation ($FF $00 -> $FF)."""
    return data.replace(b"\xff\x00", b"\xff")


def read_extended_float(data: bytes) -> float:
    """Decode an 80-bit IEEE 754 extended precision float (big endian)."""
    if len(data) != 10:
        raise MalformedHeaderError(f"Extended float needs 10 bytes, got {len(data)}")
    exponent, mantissa = struct.unpack(">HQ", data)
    sign = -1.0 if exponent & 0x8000 else 1.0
    exponent &= 0x7FFF
    if exponent == 0 and mantissa == 0:
        return 0.0
    if exponent == 0x7FFF:
        return sign * math.inf
    return sign * math.ldexp(mantissa, exponent - 16383 - 63)


def write_extended_float(value: float) -> bytes:
    """Encode a positive float as an 80-bit IEEE 754 extended float."""
    if value <= 0:
        return b"\x00" * 10
    mantissa, exponent = math.frexp(value)
    return struct.pack(">HQ", exponent + 16382, int(mantissa * (1 << 64)))


# ID3v2 text encodings, indexed by the encoding byte
TEXT_ENCODINGS = ("latin-1", "utf-16", "utf-16-be", "utf-8")


def text_terminator(encoding: int) -> bytes:
    return b"\x00\x00" if encoding in (1, 2) else b"\x00"


def decode_text(data: bytes, encoding: int, terminated: bool = False) -> Tuple[str, int]:
    """Decode ID3v2 style text.

    Args:
        data: Raw bytes beginning with the text
        encoding: The ID3v2 encoding byte (0-3)
        terminated: Stop at the first NUL terminator

    Returns:
        The decoded text and the number of bytes consumed

    Raises:
        EncodingError: If the encoding byte is unknown or the bytes are invalid
    """
    if encoding not in range(len(TEXT_ENCODINGS)):
        raise EncodingError(f"Unknown text encoding byte: {encoding}")

    end = len(data)
    consumed = end
    if terminated:
        terminator = text_terminator(encoding)
        step = len(terminator)
        pos = 0
        while pos + step <= len(data):
            if data[pos:pos + step] == terminator:
                break
            pos += step
        else:
            pos = len(data)
        end = pos
        consumed = min(pos + step, len(data))

    raw = data[:end]
    if encoding == 1 and raw and raw[:2] not in (b"\xff\xfe", b"\xfe\xff"):
        # A missing BOM is common in the wild, assume little endian
        codec = "utf-16-le"
    else:
        codec = TEXT_ENCODINGS[encoding]
    try:
        text = raw.decode(codec)
    except UnicodeDecodeError as e:
        raise EncodingError(f"Invalid {codec} text: {e}") from e
    return text.rstrip("\x00") if not terminated else text, consumed


def encode_text(text: str, encoding: int, terminated: bool = False) -> bytes:
    """Encode text for an ID3v2 frame, optionally NUL terminated."""
    if encoding == 1:
        data = b"\xff\xfe" + text.encode("utf-16-le")
    else:
        try:
            data = text.encode(TEXT_ENCODINGS[encoding])
        except UnicodeEncodeError as e:
            raise EncodingError(f"Cannot encode {text!r} as {TEXT_ENCODINGS[encoding]}") from e
    if terminated:
        data += text_terminator(encoding)
    return data


def split_pair(value: str) -> Tuple[Optional[str], Optional[str]]:
    """Split "number/total" values as stored by ID3v2, APE and similar.

    Returns:
        Tuple of (number, total), each None when absent or empty
    """
    number, _, total = value.partition("/")
    number = number.strip() or None
    total = total.strip() or None
    return number, total


def to_int(value) -> Optional[int]:
    """Parse the leading integer of a value, or return None."""
    if isinstance(value, int):
        return value
    if value is None:
        return None
    text = str(value).strip()
    digits = ""
    for c in text:
        if not c.isdigit():
            break
        digits += c
    return int(digits) if digits else None


def millis(duration_ms: int) -> timedelta:
    return timedelta(milliseconds=duration_ms)


def bitrate_kbps(byte_count: int, duration_ms: int) -> Optional[int]:
    """Bitrate in kbps for ``byte_count`` bytes played over ``duration_ms``."""
    if duration_ms <= 0:
        return None
    return byte_count * 8 // duration_ms
