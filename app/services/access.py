from dataclasses import dataclass

from sqlalchemy.orm import Session

from app.core.exceptions import AuthenticationError, NotFoundError
from app.models.file import FileNode
from app.services import catalog
from app.services.sessions import SessionStore


@dataclass(slots=True)
class ContentGrant:
    node: FileNode
    as_owner: bool


def authorize(sessions: SessionStore, token: str | None) -> str:
    user_id = sessions.resolve(token)
    if not user_id:
        raise AuthenticationError()
    return user_id


def authorize_owner_or_public(db: Session, sessions: SessionStore, token: str | None, node_id: str) -> ContentGrant:
    """Grant read access to the owner, or to anyone when the node is public.

    Invisible private nodes raise the same ``NotFoundError`` as absent ids.
    A missing or expired token is treated as an anonymous caller.
    """
    user_id = sessions.resolve(token)
    node = catalog.get_node(db, node_id)
    as_owner = user_id is not None and node.owner_id == user_id
    if not node.is_public and not as_owner:
        raise NotFoundError()
    return ContentGrant(node=node, as_owner=as_owner)
