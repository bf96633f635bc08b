
from datetime import datetime
from typing import Any
from pydantic import AliasChoices, BaseModel, ConfigDict, EmailStr, Field, field_validator, model_validator
from docarchive.models.document import FileType, UploadSource

MAX_PAGE_SIZE = 100
DEFAULT_PAGE_SIZE = 20


class DocumentCreate(BaseModel):
    filename: str = Field(min_length=1, max_length=255)
    original_filename: str = Field(min_length=1, max_length=255)
    file_type: FileType
    file_size: int = Field(gt=0)
    file_path: str = Field(min_length=1)
    content_text: str | None = None
    metadata: dict[str, Any] | None = None
    upload_source: UploadSource
    external_service_id: str | None = None

    @model_validator(mode="after")
    def _external_id_only_for_external(self):
        if self.external_service_id is not None and self.upload_source != UploadSource.EXTERNAL_SERVICE:
            raise ValueError("external_service_id is only allowed for EXTERNAL_SERVICE uploads")
        return self


class DocumentUpdate(BaseModel):
    """Partial update. Only fields present in the payload are applied;
    an explicit ``null`` clears ``content_text`` or ``metadata``."""

    filename: str | None = Field(default=None, min_length=1, max_length=255)
    content_text: str | None = None
    metadata: dict[str, Any] | None = None

    @field_validator("filename")
    @classmethod
    def _filename_not_null(cls, v):
        if v is None:
            raise ValueError("filename cannot be null")
        return v

    def changes(self) -> dict[str, Any]:
        return self.model_dump(exclude_unset=True)


class DocumentOut(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    user_id: int
    filename: str
    original_filename: str
    file_type: FileType
    file_size: int
    file_path: str
    content_text: str | None
    metadata: dict[str, Any] | None = Field(default=None, validation_alias=AliasChoices("meta", "metadata"))
    upload_source: UploadSource
    external_service_id: str | None
    created_at: datetime
    updated_at: datetime


class DocumentListOut(BaseModel):
    documents: list[DocumentOut]
    total: int
    has_more: bool


class ListParams(BaseModel):
    limit: int = Field(DEFAULT_PAGE_SIZE, gt=0, le=MAX_PAGE_SIZE)
    offset: int = Field(0, ge=0)
    file_type: FileType | None = None


class SearchParams(ListParams):
    query: str = Field(min_length=1)


class ExternalUploadIn(BaseModel):
    user_email: EmailStr
    filename: str = Field(min_length=1, max_length=255)
    original_filename: str = Field(min_length=1, max_length=255)
    file_type: FileType
    file_size: int = Field(gt=0)
    file_path: str = Field(min_length=1)
    content_text: str | None = None
    metadata: dict[str, Any] | None = None
    external_service_id: str = Field(min_length=1)
    service_name: str = Field(min_length=1)
