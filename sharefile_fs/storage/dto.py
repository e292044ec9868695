# storage/dto.py
from enum import Enum
from typing import Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, ConfigDict, Field, field_validator

ODATA_TYPE_FILE = "ShareFile.Api.Models.File"
ODATA_TYPE_FOLDER = "ShareFile.Api.Models.Folder"


class ItemType(str, Enum):
    FILE = ODATA_TYPE_FILE
    FOLDER = ODATA_TYPE_FOLDER
    OTHER = "Other"


class ParentRef(BaseModel):
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(alias="Id")

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return str(value)


class RemoteItem(BaseModel):
    """
    A ShareFile item record (file, folder or anything else the API returns).
    Built fresh for every call from the raw JSON dictionary; the untouched
    dictionary is kept in ``raw`` so it can be passed through to callers.
    """

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field("", alias="Id")
    type: ItemType = Field(ItemType.OTHER, alias="odata.type")
    file_name: str = Field("", alias="FileName")
    size_bytes: int = Field(0, alias="FileSizeBytes")
    client_modified_date: Optional[str] = Field(None, alias="ClientModifiedDate")
    client_created_date: Optional[str] = Field(None, alias="ClientCreatedDate")
    creation_date: Optional[str] = Field(None, alias="CreationDate")
    progeny_edit_date: Optional[str] = Field(None, alias="ProgenyEditDate")
    parent: Optional[ParentRef] = Field(None, alias="Parent")
    info: Dict[str, Any] = Field(default_factory=dict, alias="Info")
    children: Optional[List[Dict[str, Any]]] = Field(None, alias="Children")
    raw: Dict[str, Any] = Field(default_factory=dict, exclude=True)

    @field_validator("id", mode="before")
    @classmethod
    def _coerce_id(cls, value):
        return "" if value is None else str(value)

    @field_validator("type", mode="before")
    @classmethod
    def _known_type_or_other(cls, value):
        if value in (ODATA_TYPE_FILE, ODATA_TYPE_FOLDER):
            return value
        return ItemType.OTHER

    @field_validator("size_bytes", mode="before")
    @classmethod
    def _size_or_zero(cls, value):
        return value or 0

    @field_validator("info", mode="before")
    @classmethod
    def _info_or_empty(cls, value):
        return value or {}

    @classmethod
    def from_api(cls, raw: Dict[str, Any]) -> "RemoteItem":
        """Parses a raw ShareFile JSON record, keeping the original dictionary."""
        item = cls.model_validate(raw)
        item.raw = dict(raw)
        return item

    @property
    def is_file(self) -> bool:
        return self.type is ItemType.FILE

    @property
    def is_folder(self) -> bool:
        return self.type is ItemType.FOLDER


class FileMetadata(BaseModel):
    """
    A standardized Data Transfer Object for file and directory metadata,
    independent of the ShareFile item representation.
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    timestamp: Optional[int] = None
    path: str
    mimetype: str
    dirname: str
    extension: str
    filename: str
    basename: str
    type: Literal["file", "dir"]
    size: int = 0
    contents: Optional[Union[bytes, str]] = None
    stream: Optional[Any] = None
    sharefile_item: Optional[Dict[str, Any]] = None

    @property
    def is_dir(self) -> bool:
        return self.type == "dir"
