from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from typing import Optional, List, Literal
from datetime import datetime

from filemanager.core.config import settings

ORDER_BY_FIELDS = ("name", "size", "uploaded_at")
DIRECTIONS = ("ASC", "DESC")

# Largest signed 64-bit integer, the widest integer the store accepts for ids and offsets
MAX_DB_INTEGER = 2 ** 63 - 1

# =================================================================
# 1. Input Schemas (data sent by the client)
# =================================================================

class FileUpload(BaseModel):
    """Metadata and payload of an uploaded file, validated before storage."""

    name: str
    mimetype: str
    size: int
    data: bytes

    @field_validator("name", mode="before")
    @classmethod
    def check_name(cls, value):
        if not isinstance(value, str) or len(value) < 1:
            raise ValueError("Filename is required")
        if len(value) > 255:
            raise ValueError("Filename too long")
        return value

    @field_validator("mimetype", mode="before")
    @classmethod
    def check_mimetype(cls, value):
        if not isinstance(value, str) or len(value) < 1:
            raise ValueError("MIME type is required")
        return value

    @field_validator("size", mode="before")
    @classmethod
    def check_size(cls, value):
        if isinstance(value, bool) or not isinstance(value, int):
            raise ValueError("File size must be a number")
        if value <= 0:
            raise ValueError("File size must be positive")
        if value > settings.MAX_FILE_SIZE:
            raise ValueError(
                f"File size cannot exceed {settings.MAX_FILE_SIZE // (1024 * 1024)}MB"
            )
        return value

    @field_validator("data", mode="before")
    @classmethod
    def check_data(cls, value):
        if not isinstance(value, (bytes, bytearray)):
            raise ValueError("File data must be a buffer")
        return bytes(value)


class PaginationQuery(BaseModel):
    """Query string of the paginated listing, coerced from raw strings."""

    model_config = ConfigDict(populate_by_name=True)

    page: int = 1
    limit: int = 10
    order_by: Literal["name", "size", "uploaded_at"] = Field("uploaded_at", alias="orderBy")
    direction: Literal["ASC", "DESC"] = "DESC"

    @field_validator("page", mode="before")
    @classmethod
    def check_page(cls, value):
        try:
            page = int(str(value).strip())
        except ValueError:
            raise ValueError("Page must be a positive integer")
        if page < 1:
            raise ValueError("Page must be a positive integer")
        return page

    @field_validator("limit", mode="before")
    @classmethod
    def check_limit(cls, value):
        try:
            limit = int(str(value).strip())
        except ValueError:
            raise ValueError("Limit must be an integer between 1 and 100")
        if not 1 <= limit <= 100:
            raise ValueError("Limit must be an integer between 1 and 100")
        return limit

    @field_validator("order_by", mode="before")
    @classmethod
    def check_order_by(cls, value):
        value = str(value).strip()
        if value not in ORDER_BY_FIELDS:
            raise ValueError(f"orderBy must be one of: {', '.join(ORDER_BY_FIELDS)}")
        return value

    @field_validator("direction", mode="before")
    @classmethod
    def check_direction(cls, value):
        value = str(value).strip().upper()
        if value not in DIRECTIONS:
            raise ValueError("direction must be ASC or DESC")
        return value

    @model_validator(mode="after")
    def check_offset(self):
        if (self.page - 1) * self.limit > MAX_DB_INTEGER:
            raise ValueError("Page is out of range")
        return self

# =================================================================
# 2. Output Schemas (data returned by the server)
# =================================================================

class FileMeta(BaseModel):
    id: int
    name: str
    mimetype: str
    size: int

    model_config = ConfigDict(from_attributes=True)

# Same record shape for the paginated and unpaginated listing
class FileOut(FileMeta):
    uploaded_at: datetime
    download_url: str = Field(alias="downloadUrl")
    preview_url: str = Field(alias="previewUrl")

    model_config = ConfigDict(from_attributes=True, populate_by_name=True)

class PageMeta(BaseModel):
    model_config = ConfigDict(populate_by_name=True)

    total_files: int = Field(alias="totalFiles")
    current_page: int = Field(alias="currentPage")
    limit: int
    total_pages: int = Field(alias="totalPages")

class FileListResponse(BaseModel):
    amount: int
    data: List[FileOut]
    pagination: Optional[PageMeta] = None

class FileUploadResponse(BaseModel):
    message: str
    data: FileMeta
