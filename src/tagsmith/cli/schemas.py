"""Pydantic schemas for JSON output validation.

This module defines the data structures for all JSON outputs from the CLI.
Every --json response is one of these models, so each command reports a
consistent, validated structure and failures share a single error shape.

Commands using Pydantic validation:
- detect: DetectResponse | ErrorResponse
- read: ReadResponse | ErrorResponse
- write: WriteResponse | ErrorResponse
- info: InfoResponse | ErrorResponse
- cover: CoverResponse | ErrorResponse
"""

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field


# ============================================================================
# Base Response Models
# ============================================================================


class ErrorResponse(BaseModel):
    """Standard error response for all commands.

    Attributes:
        status: Always "error" for error responses
        error: Machine-readable error code (e.g., "unsupported_format")
        message: Human-readable error message
        exit_code: Process exit status that accompanies the response
    """

    status: Literal["error"] = "error"
    error: str = Field(
        description="Machine-readable error code",
        examples=["unsupported_format", "parse_error", "io_error", "invalid_input"],
    )
    message: str = Field(description="Human-readable error description")
    exit_code: int = Field(ge=0, description="Process exit status")


# ============================================================================
# Detect Command Response
# ============================================================================


class DetectedFile(BaseModel):
    """Detection result for one file.

    Attributes:
        path: File that was examined
        format: Detected format name, absent on failure
        version: Tag version, absent on failure
        error: Why detection failed
    """

    path: str
    format: Optional[str] = None
    version: Optional[str] = None
    error: Optional[str] = None


class DetectResponse(BaseModel):
    status: Literal["success", "completed_with_errors"]
    files: List[DetectedFile] = Field(description="One entry per file argument")


# ============================================================================
# Read / Write Command Responses
# ============================================================================


class ReadResponse(BaseModel):
    """Response for a successful read.

    Attributes:
        status: Always "success"
        path: File that was read
        format: Detected format name
        metadata: Present fields, cover data base64-encoded
    """

    status: Literal["success"] = "success"
    path: str
    format: str
    metadata: Dict[str, Any] = Field(description="Fields present in the tag")


class WriteResponse(BaseModel):
    """Response for a successful write.

    Attributes:
        status: "success" when the file was rewritten, "unchanged" otherwise
        path: File that was updated
        format: Detected format name
        updated: Fields that were set
        removed: Fields that were removed
    """

    status: Literal["success", "unchanged"]
    path: str
    format: str
    updated: List[str] = Field(default_factory=list)
    removed: List[str] = Field(default_factory=list)


# ============================================================================
# Info / Cover Command Responses
# ============================================================================


class InfoResponse(BaseModel):
    """Technical information about a file.

    Attributes:
        status: Always "success"
        path: File that was examined
        format: Detected format name
        version: Tag version
        file_size: Size of the file in bytes
        details: Format specific details (stream info, tag size, ...)
    """

    status: Literal["success"] = "success"
    path: str
    format: str
    version: str
    file_size: int = Field(ge=0)
    details: Dict[str, Any] = Field(default_factory=dict)


class CoverResponse(BaseModel):
    """Response for cover export, set and remove.

    Attributes:
        status: "success", or "not_found" when there was no cover to export
        action: export, set or remove
        path: Audio file
        image: Image file written or read
        mime_type: MIME type of the image
        size: Image size in bytes
        changed: Whether the audio file was rewritten
    """

    status: Literal["success", "not_found"] = "success"
    action: Literal["export", "set", "remove"]
    path: str
    image: Optional[str] = None
    mime_type: Optional[str] = None
    size: Optional[int] = Field(default=None, ge=0)
    changed: Optional[bool] = None
