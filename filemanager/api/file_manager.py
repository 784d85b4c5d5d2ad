import logging
from urllib.parse import quote

from fastapi import APIRouter, Depends, Request, Response, status
from sqlalchemy import delete, func
from sqlalchemy.orm import Session

from filemanager.api.deps import get_current_user, listing_plan, valid_file_id, validated_upload
from filemanager.core.errors import NotFoundError
from filemanager.db.session import get_db
from filemanager.models.file import File as FileModel
from filemanager.schemas.common import ErrorResponse, MessageResponse
from filemanager.schemas.file import FileListResponse, FileMeta, FileOut, FileUpload, FileUploadResponse, PageMeta
from filemanager.schemas.user import TokenClaims
from filemanager.services import pagination
from filemanager.services.pagination import ListingPlan, Paginated

logger = logging.getLogger(__name__)

router = APIRouter(responses={
    400: {"model": ErrorResponse},
    401: {"model": ErrorResponse},
    404: {"model": ErrorResponse},
})

FILE_NOT_FOUND = "File not Found make sure to send correct id"


def content_disposition(disposition: str, filename: str) -> str:
    """Build a Content-Disposition value, RFC 5987 encoding non-latin names."""
    quoted = quote(filename)
    if quoted != filename:
        return f"{disposition}; filename*=utf-8''{quoted}"
    return f'{disposition}; filename="{filename}"'


def _get_file_or_404(db: Session, file_id: int) -> FileModel:
    file_record = db.query(FileModel).filter(FileModel.id == file_id).first()
    if file_record is None:
        raise NotFoundError(FILE_NOT_FOUND)
    return file_record


def _send_file(file_record: FileModel, disposition: str) -> Response:
    return Response(
        content=file_record.data,
        media_type=file_record.mimetype,
        headers={"Content-Disposition": content_disposition(disposition, file_record.name)},
    )

# ============================================================================
# UPLOAD FILE
# ============================================================================

@router.post("/", response_model=FileUploadResponse, status_code=status.HTTP_201_CREATED)
def upload_file(
    upload: FileUpload = Depends(validated_upload),
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Store an uploaded file as a blob.

    - multipart field `file`, at most 5MB
    - size is taken from the received bytes
    """
    new_file = FileModel(
        name=upload.name,
        mimetype=upload.mimetype,
        size=upload.size,
        data=upload.data,
    )

    db.add(new_file)
    db.commit()
    db.refresh(new_file)

    logger.info("File %s (%d bytes) uploaded by user %s", new_file.id, new_file.size, current_user.id)

    return FileUploadResponse(
        message="File uploaded successfully",
        data=FileMeta.model_validate(new_file),
    )

# ============================================================================
# LIST FILES
# ============================================================================

@router.get("/", response_model=FileListResponse, response_model_exclude_none=True)
def list_files(
    request: Request,
    plan: ListingPlan = Depends(listing_plan),
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    List file metadata, either everything or one sorted page.

    Pagination kicks in as soon as any of page, limit, orderBy or
    direction is given; the record shape is the same either way.
    """
    query = db.query(
        FileModel.id,
        FileModel.name,
        FileModel.mimetype,
        FileModel.size,
        FileModel.uploaded_at,
    )
    rows = pagination.apply(query, plan).all()

    records = [
        FileOut(
            id=row.id,
            name=row.name,
            mimetype=row.mimetype,
            size=row.size,
            uploaded_at=row.uploaded_at,
            download_url=str(request.url_for("download_file", file_id=str(row.id))),
            preview_url=str(request.url_for("preview_file", file_id=str(row.id))),
        )
        for row in rows
    ]

    page_meta = None
    if isinstance(plan, Paginated):
        total = db.query(func.count(FileModel.id)).scalar()
        page_meta = PageMeta(
            total_files=total,
            current_page=plan.page,
            limit=plan.limit,
            total_pages=pagination.total_pages(total, plan.limit),
        )

    return FileListResponse(amount=len(records), data=records, pagination=page_meta)

# ============================================================================
# DOWNLOAD / PREVIEW FILE
# ============================================================================

@router.get("/download/{file_id}", response_class=Response)
def download_file(
    file_id: int = Depends(valid_file_id),
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Send the stored bytes as an attachment."""
    return _send_file(_get_file_or_404(db, file_id), "attachment")


@router.get("/preview/{file_id}", response_class=Response)
def preview_file(
    file_id: int = Depends(valid_file_id),
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """Send the stored bytes for inline display."""
    return _send_file(_get_file_or_404(db, file_id), "inline")

# ============================================================================
# DELETE FILE
# ============================================================================

@router.delete("/{file_id}", response_model=MessageResponse)
def delete_file(
    file_id: int = Depends(valid_file_id),
    current_user: TokenClaims = Depends(get_current_user),
    db: Session = Depends(get_db)
):
    """
    Delete a file in one statement; the affected row count decides 404.
    """
    result = db.execute(delete(FileModel).where(FileModel.id == file_id))
    db.commit()

    if result.rowcount == 0:
        raise NotFoundError(FILE_NOT_FOUND)

    logger.info("File %s deleted by user %s", file_id, current_user.id)

    return MessageResponse(message=f"File deleted {file_id} successfully")
