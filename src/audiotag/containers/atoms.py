"""MP4 atom (box) headers and tree traversal."""

import struct
from dataclasses import dataclass
from typing import BinaryIO, Dict, Iterator, Optional, Sequence, Tuple

from ..errors import MalformedHeaderError
from ..utils import read_exact

# Atoms with children, and the bytes to skip before the first child
CONTAINER_ATOMS: Dict[str, int] = {
    "moov": 0,
    "trak": 0,
    "mdia": 0,
    "minf": 0,
    "stbl": 0,
    "udta": 0,
    "edts": 0,
    "dinf": 0,
    "meta": 4,
    "ilst": 0,
    "stsd": 8,
    "mp4a": 28,
    "alac": 28,
}


@dataclass
class Atom:
    ident: str
    start: int
    size: int
    header_size: int

    @property
    def end(self) -> int:
        return self.start + self.size

    @property
    def data_start(self) -> int:
        return self.start + self.header_size

    @property
    def data_size(self) -> int:
        return self.size - self.header_size

    def read(self, f: BinaryIO) -> bytes:
        f.seek(self.data_start)
        return read_exact(f, self.data_size)


def read_atom(f: BinaryIO, offset: int, limit: int) -> Atom:
    """Read the atom header at ``offset``.

    Size 1 means a 64-bit size follows the identifier, size 0 means the atom
    runs to ``limit``.

    Raises:
        MalformedHeaderError: For sizes smaller than the header or past ``limit``
    """
    f.seek(offset)
    size, ident = struct.unpack(">I4s", read_exact(f, 8))
    header_size = 8
    if size == 1:
        (size,) = struct.unpack(">Q", read_exact(f, 8))
        header_size = 16
    elif size == 0:
        size = limit - offset
    name = ident.decode("latin-1")
    if size < header_size:
        raise MalformedHeaderError(f"Atom {name!r} at offset {offset} has invalid size {size}")
    if offset + size > limit:
        raise MalformedHeaderError(
            f"Atom {name!r} at offset {offset} extends past its parent ({offset + size} > {limit})"
        )
    return Atom(name, offset, size, header_size)


def iter_atoms(f: BinaryIO, start: int, end: int) -> Iterator[Atom]:
    """Yield the atoms of one level between ``start`` and ``end``."""
    offset = start
    while offset + 8 <= end:
        atom = read_atom(f, offset, end)
        yield atom
        offset = atom.end


def walk_atoms(
    f: BinaryIO,
    start: int,
    end: int,
    containers: Dict[str, int] = CONTAINER_ATOMS,
) -> Iterator[Tuple[Tuple[Atom, ...], Atom]]:
    """Depth-first walk of an atom tree, yielding (parents, atom).

    Uses an explicit stack of (offset, limit, parents) frames, so the nesting
    depth of the file does not affect the Python stack.
    """
    stack = [(start, end, ())]
    while stack:
        offset, limit, parents = stack.pop()
        if offset + 8 > limit:
            continue
        atom = read_atom(f, offset, limit)
        stack.append((atom.end, limit, parents))
        yield parents, atom
        skip = containers.get(atom.ident)
        if skip is not None and atom.data_start + skip <= atom.end:
            stack.append((atom.data_start + skip, atom.end, parents + (atom,)))


def find_atom(f: BinaryIO, start: int, end: int, path: Sequence[str]) -> Optional[Tuple[Tuple[Atom, ...], Atom]]:
    """Find the first atom at ``path`` (e.g. ("moov", "udta", "meta")).

    Returns:
        (parents, atom), or None when the path does not exist
    """
    parents: Tuple[Atom, ...] = ()
    for depth, ident in enumerate(path):
        for atom in iter_atoms(f, start, end):
            if atom.ident == ident:
                break
        else:
            return None
        if depth == len(path) - 1:
            return parents, atom
        parents += (atom,)
        start = atom.data_start + CONTAINER_ATOMS.get(ident, 0)
        end = atom.end
    return None


def atom_header(ident: str, payload_size: int) -> bytes:
    """Build an atom header, switching to a 64-bit size when needed."""
    size = payload_size + 8
    if size > 0xFFFFFFFF:
        return struct.pack(">I4sQ", 1, ident.encode("latin-1"), payload_size + 16)
    return struct.pack(">I4s", size, ident.encode("latin-1"))


def render_atom(ident: str, payload: bytes) -> bytes:
    return atom_header(ident, len(payload)) + payload
