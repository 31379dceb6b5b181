"""MP4 "ilst" item lists: one atom per field, each holding "data" atoms."""

import io
import logging
import struct
from typing import Dict, List

from ..constants import (
    ID3V1_GENRES,
    MP4_TYPE_BMP,
    MP4_TYPE_GIF,
    MP4_TYPE_IMPLICIT,
    MP4_TYPE_JPEG,
    MP4_TYPE_PNG,
    MP4_TYPE_SIGNED,
    MP4_TYPE_UNSIGNED,
    MP4_TYPE_UTF8,
    MP4_TYPE_UTF16,
)
from ..containers.atoms import Atom, iter_atoms, render_atom
from ..errors import EncodingError, MalformedHeaderError
from ..tag import ItemKey, Picture, PictureType, Tag, TagItem, TagType, item_key_from, map_key
from ..tag.keys import PAIRED_KEYS
from ..utils import to_int

logger = logging.getLogger(__name__)

FREEFORM = "----"

# Atoms holding integers, with their width in bytes
INTEGER_ATOMS: Dict[str, int] = {
    "cpil": 1,
    "pcst": 1,
    "pgap": 1,
    "hdvd": 1,
    "shwm": 1,
    "stik": 1,
    "rtng": 1,
    "akID": 1,
    "tmpo": 2,
    "tves": 4,
    "tvsn": 4,
    "cnID": 4,
    "atID": 4,
    "geID": 4,
    "sfID": 4,
    "cmID": 4,
    "plID": 8,
}

_PICTURE_TYPES = {
    MP4_TYPE_JPEG: "image/jpeg",
    MP4_TYPE_PNG: "image/png",
    MP4_TYPE_BMP: "image/bmp",
    MP4_TYPE_GIF: "image/gif",
}
_PICTURE_CODES = {mime: code for code, mime in _PICTURE_TYPES.items()}


def _data_atoms(f, atom: Atom) -> List[tuple]:
    """Return (type code, value) for each "data" child of an item atom."""
    values = []
    for child in iter_atoms(f, atom.data_start, atom.end):
        if child.ident != "data":
            continue
        payload = child.read(f)
        if len(payload) < 8:
            raise MalformedHeaderError(f"Truncated data atom in {atom.ident!r} at offset {child.start}")
        (type_code,) = struct.unpack(">I", payload[:4])
        values.append((type_code & 0xFFFFFF, payload[8:]))
    return values


def _freeform_key(f, atom: Atom) -> str:
    parts = {}
    for child in iter_atoms(f, atom.data_start, atom.end):
        if child.ident in ("mean", "name"):
            parts[child.ident] = child.read(f)[4:].decode("utf-8", "replace")
    if "mean" not in parts or "name" not in parts:
        raise MalformedHeaderError(f"Freeform atom at offset {atom.start} lacks mean or name")
    return f"{FREEFORM}:{parts['mean']}:{parts['name']}"


def _decode_value(ident: str, type_code: int, value: bytes):
    if type_code == MP4_TYPE_UTF8:
        try:
            return value.decode("utf-8")
        except UnicodeDecodeError as e:
            raise EncodingError(f"Atom {ident!r} is not valid UTF-8: {e}") from e
    if type_code == MP4_TYPE_UTF16:
        try:
            return value.decode("utf-16-be")
        except UnicodeDecodeError as e:
            raise EncodingError(f"Atom {ident!r} is not valid UTF-16: {e}") from e
    if type_code in (MP4_TYPE_SIGNED, MP4_TYPE_UNSIGNED) or (
        type_code == MP4_TYPE_IMPLICIT and ident in INTEGER_ATOMS and value
    ):
        return str(int.from_bytes(value, "big", signed=type_code == MP4_TYPE_SIGNED))
    return value


def parse(data: bytes) -> Tag:
    """Parse the payload of an "ilst" atom."""
    f = io.BytesIO(data)
    tag = Tag(TagType.MP4_ILST)
    for atom in iter_atoms(f, 0, len(data)):
        ident = _freeform_key(f, atom) if atom.ident == FREEFORM else atom.ident
        values = _data_atoms(f, atom)
        if not values:
            logger.debug(f"Atom {ident!r} has no data, skipping it")
            continue

        if ident == "covr":
            for type_code, value in values:
                mime = _PICTURE_TYPES.get(type_code, "")
                tag.push_picture(Picture(value, mime, PictureType.COVER_FRONT))
            continue

        if len(values) > 1:
            logger.debug(f"Atom {ident!r} holds {len(values)} values, keeping the first")
        type_code, value = values[0]

        key = item_key_from(TagType.MP4_ILST, ident)
        if key in PAIRED_KEYS:
            if len(value) < 6:
                raise MalformedHeaderError(f"{ident!r} value is {len(value)} bytes, expected at least 6")
            _, number, total = struct.unpack(">HHH", value[:6])
            if number:
                tag.insert_item(TagItem(key, str(number)))
            if total:
                tag.insert_item(TagItem(PAIRED_KEYS[key], str(total)))
            continue

        if ident == "gnre":
            if len(value) >= 2:
                (index,) = struct.unpack(">H", value[:2])
                if 1 <= index <= len(ID3V1_GENRES):
                    tag.insert_item(TagItem(ItemKey.GENRE, ID3V1_GENRES[index - 1]))
            continue

        tag.insert_item(TagItem(key, _decode_value(ident, type_code, value)))
    return tag


def render_data(type_code: int, value: bytes) -> bytes:
    return render_atom("data", struct.pack(">II", type_code, 0) + value)


def _render_item(ident: str, payload: bytes) -> bytes:
    if ident.startswith(FREEFORM + ":"):
        _, mean, name = ident.split(":", 2)
        payload = (
            render_atom("mean", b"\x00" * 4 + mean.encode("utf-8"))
            + render_atom("name", b"\x00" * 4 + name.encode("utf-8"))
            + payload
        )
        ident = FREEFORM
    return render_atom(ident, payload)


def _render_value(ident: str, value) -> bytes:
    if isinstance(value, bytes):
        return render_data(MP4_TYPE_IMPLICIT, value)
    width = INTEGER_ATOMS.get(ident)
    if width is not None:
        number = to_int(value)
        if number is None:
            return b""
        try:
            raw = number.to_bytes(width, "big", signed=number < 0)
        except OverflowError:
            logger.warning(f"Value {number} does not fit in {width} bytes, skipping {ident!r}")
            return b""
        return render_data(MP4_TYPE_SIGNED, raw)
    return render_data(MP4_TYPE_UTF8, value.encode("utf-8"))


def render(tag: Tag) -> bytes:
    """Serialize as a complete "ilst" atom, or b"" for an empty tag."""
    if tag.is_empty():
        return b""

    pairs = {}
    for item in tag:
        for number_key, total_key in PAIRED_KEYS.items():
            if item.key == number_key:
                pairs.setdefault(number_key, [0, 0])[0] = to_int(item.value) or 0
            elif item.key == total_key:
                pairs.setdefault(number_key, [0, 0])[1] = to_int(item.value) or 0

    written = set()
    children = []
    pictures = tag.pictures()
    for item in tag:
        if isinstance(item.value, Picture):
            if "covr" in written:
                continue
            written.add("covr")
            data = b"".join(
                render_data(_PICTURE_CODES.get(p.mime_type, MP4_TYPE_IMPLICIT), p.data)
                for p in pictures
            )
            children.append(render_atom("covr", data))
            continue

        ident = map_key(item.key, TagType.MP4_ILST) if isinstance(item.key, ItemKey) else item.key
        if ident is None or ident in written:
            continue
        written.add(ident)

        number_key = item_key_from(TagType.MP4_ILST, ident)
        if number_key in PAIRED_KEYS:
            number, total = (min(v, 0xFFFF) for v in pairs[number_key])
            value = struct.pack(">HHH", 0, number, total)
            if ident == "trkn":
                value += b"\x00\x00"
            children.append(_render_item(ident, render_data(MP4_TYPE_IMPLICIT, value)))
            continue

        payload = _render_value(ident, item.value)
        if payload:
            children.append(_render_item(ident, payload))

    return render_atom("ilst", b"".join(children))
