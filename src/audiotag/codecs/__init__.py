"""
Tag codecs - one module per physical tag format.

Every codec exposes ``parse(data) -> Tag`` and ``render(tag) -> bytes``.
Rendering an empty tag yields the bytes that remove the block (usually b"").
"""
