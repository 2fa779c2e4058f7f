"""Hierarchical file metadata: creation, scoped lookups, listing and visibility.

Every operation here is a single-row read or write so it stays correct without
multi-statement transactions.
"""

import base64
import binascii
import logging
import uuid
from dataclasses import dataclass

from sqlalchemy import func, select, update
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import NotFoundError, ValidationError
from app.models.common import utcnow
from app.models.file import FILE_KINDS, FOLDER, THUMBNAIL_WIDTHS, FileNode, Thumbnail
from app.services.storage import BlobStore, BlobStream

logger = logging.getLogger(__name__)

PARENT_INVALID = "Parent invalid"


@dataclass(frozen=True, slots=True)
class Root:
    pass


@dataclass(frozen=True, slots=True)
class NodeRef:
    id: str


ROOT = Root()
ParentRef = Root | NodeRef


def parse_node_id(value: object) -> str | None:
    try:
        return str(uuid.UUID(str(value)))
    except ValueError:
        return None


def parse_parent_ref(value: int | str | None) -> ParentRef:
    if value is None or value == 0 or value == "0" or value == "":
        return ROOT
    node_id = parse_node_id(value) if isinstance(value, str) else None
    if node_id is None:
        raise ValidationError(PARENT_INVALID)
    return NodeRef(node_id)


def parent_column_value(parent: ParentRef) -> str | None:
    return parent.id if isinstance(parent, NodeRef) else None


def decode_content(data: str | None) -> bytes | None:
    if not data:
        return None
    try:
        return base64.b64decode(data, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise ValidationError("Invalid data") from exc


def _check_parent(db: Session, parent: ParentRef) -> None:
    if isinstance(parent, Root):
        return
    # Parent ownership is not checked; only that it is an existing folder.
    folder = db.scalar(select(FileNode).where(FileNode.id == parent.id))
    if folder is None or folder.kind != FOLDER:
        raise ValidationError(PARENT_INVALID)


def create_node(
    db: Session,
    blobs: BlobStore,
    owner_id: str,
    name: str | None,
    kind: str | None,
    parent: ParentRef | int | str | None = ROOT,
    is_public: bool = False,
    content: bytes | str | None = None,
) -> FileNode:
    """Validate and persist a node.

    ``parent`` may be a wire value (``0``, a UUID string) and ``content`` may be
    base64 text; both are decoded only after the name, type and data checks, so
    the first failing check decides the reason.
    """
    if not name or not name.strip():
        raise ValidationError("Missing name")
    if kind not in FILE_KINDS:
        raise ValidationError("Missing type")
    if isinstance(content, str) and not content:
        content = None
    if kind == FOLDER and content is not None:
        raise ValidationError("Folder cannot have data")
    if kind != FOLDER and content is None:
        raise ValidationError("Missing data")
    if isinstance(content, str):
        content = decode_content(content)
    if not isinstance(parent, (Root, NodeRef)):
        parent = parse_parent_ref(parent)
    _check_parent(db, parent)

    # Blob first, metadata second: a committed node never points at a missing blob.
    blob_ref = blobs.put(content) if content is not None else None
    node = FileNode(
        owner_id=owner_id,
        name=name,
        kind=kind,
        parent_id=parent_column_value(parent),
        is_public=is_public,
        blob_ref=blob_ref,
    )
    db.add(node)
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        if blob_ref:
            blobs.delete(blob_ref)
        raise
    db.refresh(node)
    logger.info("file_created", extra={"file_id": node.id, "owner_id": owner_id, "kind": kind})
    return node


def get_node(db: Session, node_id: str, owner_id: str | None = None) -> FileNode:
    """Fetch a node; with ``owner_id`` foreign nodes are reported as absent."""
    parsed = parse_node_id(node_id)
    if parsed is None:
        raise NotFoundError()
    stmt = select(FileNode).where(FileNode.id == parsed)
    if owner_id is not None:
        stmt = stmt.where(FileNode.owner_id == owner_id)
    node = db.scalar(stmt)
    if node is None:
        raise NotFoundError()
    return node


def list_nodes(db: Session, owner_id: str, parent: ParentRef = ROOT, page: int = 0, page_size: int = 20) -> list[FileNode]:
    if page < 0:
        raise ValidationError("Invalid page")
    parent_id = parent_column_value(parent)
    stmt = select(FileNode).where(FileNode.owner_id == owner_id)
    if parent_id is None:
        stmt = stmt.where(FileNode.parent_id.is_(None))
    else:
        stmt = stmt.where(FileNode.parent_id == parent_id)
    stmt = stmt.order_by(FileNode.created_at, FileNode.id).offset(page * page_size).limit(page_size)
    return list(db.scalars(stmt).all())


def set_public(db: Session, node_id: str, owner_id: str, value: bool) -> FileNode:
    parsed = parse_node_id(node_id)
    if parsed is None:
        raise NotFoundError()
    result = db.execute(
        update(FileNode)
        .where(FileNode.id == parsed, FileNode.owner_id == owner_id)
        .values(is_public=value, updated_at=utcnow())
    )
    db.commit()
    if result.rowcount == 0:
        raise NotFoundError()
    return get_node(db, parsed, owner_id=owner_id)


def record_thumbnail(db: Session, file_id: str, width: int, blob_ref: str) -> None:
    existing = db.scalar(select(Thumbnail).where(Thumbnail.file_id == file_id, Thumbnail.width == width))
    if existing:
        existing.blob_ref = blob_ref
    else:
        db.add(Thumbnail(file_id=file_id, width=width, blob_ref=blob_ref))
    try:
        db.commit()
    except IntegrityError:
        # A concurrent delivery of the same job inserted the row first.
        db.rollback()
        db.execute(
            update(Thumbnail)
            .where(Thumbnail.file_id == file_id, Thumbnail.width == width)
            .values(blob_ref=blob_ref, updated_at=utcnow())
        )
        db.commit()


def open_content(blobs: BlobStore, node: FileNode, width: int | None = None) -> BlobStream:
    if node.is_folder:
        raise ValidationError("A folder doesn't have content")
    if width is None:
        ref = node.blob_ref
    elif width in THUMBNAIL_WIDTHS:
        # Pending or partially generated thumbnails read as absent.
        ref = node.derived_blob_refs.get(width)
    else:
        raise ValidationError("Invalid size")
    if not ref:
        raise NotFoundError()
    return blobs.stream(ref)


def count_nodes(db: Session) -> int:
    return db.scalar(select(func.count(FileNode.id))) or 0
