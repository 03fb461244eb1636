"""File-handling models: file kinds, uploads and storage owner tagging."""

from __future__ import annotations

from enum import Enum
from typing import NewType, Protocol

from pydantic import BaseModel, ConfigDict, Field

# Opaque reference returned by the storage service for a stored file
StorageLocator = NewType("StorageLocator", str)


class FileKind(str, Enum):
    """File category sent to the storage service as ``Kindfile``.

    UNKNOWN is an expected outcome and is forwarded as an empty category.
    """

    IMAGE = "Images"
    DOCUMENT = "Documents"
    UNKNOWN = ""


class OwnerField(str, Enum):
    """Name under which the owner tag is sent to the storage service."""

    ACL = "Acl"
    EMAIL = "Email"


class StorageOwner(BaseModel):
    """Owner tag attached to a stored file.

    The caller picks the semantic (access-control list or owner e-mail);
    the storage client only forwards ``{field: value}``.
    """

    field: OwnerField
    value: str

    model_config = ConfigDict(frozen=True)

    def as_form_field(self) -> dict[str, str]:
        return {self.field.value: self.value}


class FileDetection(BaseModel):
    """Result of classifying an upload."""

    kind: FileKind
    content_type: str

    model_config = ConfigDict(frozen=True)


class StorageSaveResponse(BaseModel):
    """Response body of the storage service save endpoints."""

    file_path: str = Field(..., description="Locator of the stored file")


class UploadedFileProtocol(Protocol):
    """Request-scoped upload that can be rewound and read again.

    Starlette's ``UploadFile`` satisfies this protocol.
    """

    filename: str | None
    size: int | None

    async def read(self, size: int = -1) -> bytes: ...

    async def seek(self, offset: int) -> None: ...


class SaveFromUrlRequest(BaseModel):
    """Body of a save-from-URL request; exactly one of ``acl``/``email`` is expected."""

    url: str = Field(..., min_length=1, description="Third-party URL of the image")
    acl: str | None = Field(default=None, description="Access-control list owner tag")
    email: str | None = Field(default=None, description="Owner e-mail tag")


class FileLocatorResponse(BaseModel):
    """Response returned to clients after a successful save or update."""

    file_path: str
