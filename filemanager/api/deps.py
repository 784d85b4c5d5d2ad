import logging
from typing import Optional, Type, TypeVar

from fastapi import Depends, File, Query, UploadFile, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from pydantic import BaseModel, ValidationError as PydanticValidationError

from filemanager.core.errors import AuthError, ValidationError, first_error_message
from filemanager.core.security import decode_token
from filemanager.core.config import settings
from filemanager.schemas.file import MAX_DB_INTEGER, FileUpload, PaginationQuery
from filemanager.schemas.user import TokenClaims
from filemanager.services.pagination import ListingPlan, Unpaginated, resolve

logger = logging.getLogger(__name__)

M = TypeVar("M", bound=BaseModel)


# Reads "Authorization: Bearer <token>"; missing headers are handled below
bearer_scheme = HTTPBearer(auto_error=False)


def validate_input(model: Type[M], data: dict) -> M:
    """Validate and normalize raw input, failing with the first rule violated."""
    try:
        return model.model_validate(data)
    except PydanticValidationError as exc:
        raise ValidationError(first_error_message(exc.errors()))


def get_current_user(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> TokenClaims:
    """
    Dependency returning the claims of a valid bearer token.
    Used by every protected route; no session lookup is needed.
    """
    if credentials is None or not credentials.credentials:
        raise AuthError("invalid headers", status_code=status.HTTP_400_BAD_REQUEST)

    payload = decode_token(credentials.credentials)
    try:
        return TokenClaims.model_validate(payload)
    except PydanticValidationError:
        logger.warning("Token carries incomplete claims")
        raise AuthError("Invalid token")


def valid_file_id(file_id: str) -> int:
    """Path id must be a positive decimal integer."""
    if not (file_id.isascii() and file_id.isdigit()) or not 0 < int(file_id) <= MAX_DB_INTEGER:
        raise ValidationError("Invalid file ID. ID must be a positive integer.")
    return int(file_id)


def validated_upload(file: Optional[UploadFile] = File(None)) -> FileUpload:
    """Read the multipart ``file`` field and validate it as a FileUpload."""
    if file is None:
        raise ValidationError("Missing file")

    file.file.seek(0)
    # one byte past the limit is enough to fail the size rule
    data = file.file.read(settings.MAX_FILE_SIZE + 1)

    # size always reflects the bytes actually received
    return validate_input(FileUpload, {
        "name": file.filename or "",
        "mimetype": file.content_type or "",
        "size": len(data),
        "data": data,
    })


def listing_plan(
    page: Optional[str] = Query(None),
    limit: Optional[str] = Query(None),
    order_by: Optional[str] = Query(None, alias="orderBy"),
    direction: Optional[str] = Query(None),
) -> ListingPlan:
    """Unpaginated when no pagination parameter is given, otherwise a page plan."""
    raw = {
        key: value
        for key, value in (("page", page), ("limit", limit), ("orderBy", order_by), ("direction", direction))
        if value is not None
    }
    if not raw:
        return Unpaginated()
    return resolve(validate_input(PaginationQuery, raw))
