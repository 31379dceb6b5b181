"""Pydantic schemas for JSON output validation.

This module defines the data structures for all JSON outputs from the CLI.
Every --json document is built from these models and printed with
``model_dump_json(exclude_none=True)``, so unknown properties are simply
absent from the output.

Commands using Pydantic validation:
- inspect: InspectResponse | ErrorResponse
- set, remove, convert: WriteSuccessResponse | ErrorResponse
"""

from typing import List, Literal, Optional

from pydantic import BaseModel, Field

from ..file import TaggedFile
from ..properties import FileProperties
from ..tag import Picture, Tag, TagItem


# ============================================================================
# Base Response Models
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response for all commands.

    Attributes:
        status: Always "error" for error responses
        error: Machine-readable error code (e.g., "unknown_format", "unsupported_tag")
        message: Human-readable error message
    """

    status: Literal["error"] = "error"
    error: str = Field(
        description="Machine-readable error code",
        examples=["unknown_format", "unsupported_tag", "malformed_header", "io_error"],
    )
    message: str = Field(description="Human-readable error description")


# ============================================================================
# Inspect Command Response
# ============================================================================


class PropertiesModel(BaseModel):
    """Audio stream properties; bitrates in kbps."""

    duration_ms: int = Field(ge=0, description="Duration in milliseconds")
    overall_bitrate: Optional[int] = Field(default=None, ge=0, description="File bitrate (kbps)")
    audio_bitrate: Optional[int] = Field(default=None, ge=0, description="Audio bitrate (kbps)")
    sample_rate: Optional[int] = Field(default=None, ge=0, description="Sample rate (Hz)")
    channels: Optional[int] = Field(default=None, ge=0, description="Channel count")

    @classmethod
    def from_properties(cls, properties: FileProperties) -> "PropertiesModel":
        return cls(
            duration_ms=int(properties.duration.total_seconds() * 1000),
            overall_bitrate=properties.overall_bitrate,
            audio_bitrate=properties.audio_bitrate,
            sample_rate=properties.sample_rate,
            channels=properties.channels,
        )


class TagItemModel(BaseModel):
    """One tag item.

    Text values go in ``value``; binary values and pictures are summarised by
    ``size`` (and ``mime_type``/``picture_type`` for pictures).
    """

    key: str = Field(description="ItemKey name, or the raw key of unmapped fields")
    kind: Literal["text", "locator", "binary", "picture"]
    value: Optional[str] = Field(default=None, description="Text value")
    size: Optional[int] = Field(default=None, ge=0, description="Size of binary data in bytes")
    mime_type: Optional[str] = None
    picture_type: Optional[str] = None
    read_only: Optional[bool] = Field(default=None, description="APE read-only flag, when set")

    @classmethod
    def from_item(cls, item: TagItem) -> "TagItemModel":
        value = item.value
        read_only = True if item.read_only else None
        if isinstance(value, Picture):
            return cls(
                key=item.key_name,
                kind="picture",
                size=len(value.data),
                mime_type=value.mime_type or None,
                picture_type=value.pic_type.name,
                read_only=read_only,
            )
        if isinstance(value, bytes):
            return cls(key=item.key_name, kind="binary", size=len(value), read_only=read_only)
        kind = "text" if type(value) is str else "locator"
        return cls(key=item.key_name, kind=kind, value=str(value), read_only=read_only)


class TagModel(BaseModel):
    """A tag block and its items, in file order."""

    tag_type: str = Field(description="TagType value, e.g. Id3v2")
    items: List[TagItemModel] = Field(default_factory=list)

    @classmethod
    def from_tag(cls, tag: Tag) -> "TagModel":
        return cls(tag_type=tag.tag_type.value, items=[TagItemModel.from_item(i) for i in tag])


class InspectResponse(BaseModel):
    """Response for a successful inspect.

    Attributes:
        status: Always "success"
        path: Path to the inspected file
        file_type: Detected FileType value
        properties: Stream properties
        tags: Tags found, primary first when --all is not given
        read_errors: Tag types that failed to parse, with the reason
    """

    status: Literal["success"] = "success"
    path: str = Field(description="Path to the inspected file")
    file_type: str = Field(description="Detected file type")
    properties: PropertiesModel
    tags: List[TagModel] = Field(default_factory=list)
    read_errors: Optional[dict] = Field(
        default=None, description="Tag type -> error message for tags that failed to parse"
    )

    @classmethod
    def from_tagged_file(cls, path: str, tagged: TaggedFile, tags: List[Tag]) -> "InspectResponse":
        errors = {t.value: str(e) for t, e in tagged.read_errors.items()}
        return cls(
            path=path,
            file_type=tagged.file_type.value,
            properties=PropertiesModel.from_properties(tagged.properties),
            tags=[TagModel.from_tag(tag) for tag in tags],
            read_errors=errors or None,
        )


# ============================================================================
# Write Command Response
# ============================================================================


class WriteSuccessResponse(BaseModel):
    """Response for a successful set, remove or convert.

    Attributes:
        status: Always "success"
        path: Path to the written file
        tag_type: TagType value that was written (or removed)
        items: Number of items in the written tag, 0 for a removal
    """

    status: Literal["success"] = "success"
    path: str = Field(description="Path to the written file")
    tag_type: str = Field(description="Tag type written")
    items: int = Field(ge=0, description="Items in the written tag")


# ============================================================================
# Type Unions for Each Command
# ============================================================================

InspectResult = InspectResponse | ErrorResponse
WriteResult = WriteSuccessResponse | ErrorResponse
