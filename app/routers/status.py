from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.db.redis import redis_is_alive
from app.db.session import database_is_alive, get_db
from app.services.catalog import count_nodes
from app.services.users import count_users

router = APIRouter(tags=["status"])


@router.get("/status")
def get_status() -> dict:
    return {"redis": redis_is_alive(), "db": database_is_alive()}


@router.get("/stats")
def get_stats(db: Session = Depends(get_db)) -> dict:
    return {"users": count_users(db), "files": count_nodes(db)}
