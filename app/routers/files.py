import mimetypes

from fastapi import APIRouter, Depends, Query, status
from fastapi.responses import StreamingResponse
from sqlalchemy.orm import Session
from starlette.background import BackgroundTask

from app.core.config import get_settings
from app.core.exceptions import ValidationError
from app.db.session import get_db
from app.models.file import IMAGE, THUMBNAIL_WIDTHS
from app.routers.deps import get_current_user_id, get_token
from app.schemas.file import FileCreate, FileRead
from app.services import catalog
from app.services.access import authorize_owner_or_public
from app.services.jobs import enqueue_thumbnail_job
from app.services.sessions import SessionStore, get_session_store
from app.services.storage import BlobStore, get_blob_store

router = APIRouter(prefix="/files", tags=["files"])


@router.post("", response_model=FileRead, status_code=status.HTTP_201_CREATED)
def upload_file(
    payload: FileCreate,
    db: Session = Depends(get_db),
    blobs: BlobStore = Depends(get_blob_store),
    user_id: str = Depends(get_current_user_id),
) -> FileRead:
    node = catalog.create_node(
        db,
        blobs,
        owner_id=user_id,
        name=payload.name,
        kind=payload.type,
        parent=payload.parent_id,
        is_public=payload.is_public,
        content=payload.data,
    )
    if node.kind == IMAGE:
        enqueue_thumbnail_job(user_id, node.id)
    return FileRead.from_node(node)


@router.get("", response_model=list[FileRead])
def list_files(
    parent_id: str = Query("0", alias="parentId"),
    page: int = Query(0),
    db: Session = Depends(get_db),
    user_id: str = Depends(get_current_user_id),
) -> list[FileRead]:
    nodes = catalog.list_nodes(
        db,
        user_id,
        parent=catalog.parse_parent_ref(parent_id),
        page=page,
        page_size=get_settings().page_size,
    )
    return [FileRead.from_node(node) for node in nodes]


@router.get("/{file_id}", response_model=FileRead)
def get_file(file_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)) -> FileRead:
    return FileRead.from_node(catalog.get_node(db, file_id, owner_id=user_id))


@router.put("/{file_id}/publish", response_model=FileRead)
def publish_file(file_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)) -> FileRead:
    return FileRead.from_node(catalog.set_public(db, file_id, user_id, True))


@router.put("/{file_id}/unpublish", response_model=FileRead)
def unpublish_file(file_id: str, db: Session = Depends(get_db), user_id: str = Depends(get_current_user_id)) -> FileRead:
    return FileRead.from_node(catalog.set_public(db, file_id, user_id, False))


@router.get("/{file_id}/data")
def get_file_data(
    file_id: str,
    size: str | None = Query(default=None),
    token: str | None = Depends(get_token),
    db: Session = Depends(get_db),
    sessions: SessionStore = Depends(get_session_store),
    blobs: BlobStore = Depends(get_blob_store),
) -> StreamingResponse:
    width = _parse_size(size)
    grant = authorize_owner_or_public(db, sessions, token, file_id)
    chunks = catalog.open_content(blobs, grant.node, width)
    media_type = mimetypes.guess_type(grant.node.name)[0] or "application/octet-stream"
    return StreamingResponse(chunks, media_type=media_type, background=BackgroundTask(chunks.close))


def _parse_size(size: str | None) -> int | None:
    if size is None:
        return None
    if not size.isdigit() or int(size) not in THUMBNAIL_WIDTHS:
        raise ValidationError("Invalid size")
    return int(size)
