import logging
from datetime import datetime, timezone

from fastapi import APIRouter, Depends
from pymongo.database import Database
from pymongo.errors import PyMongoError

from database import get_db

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/status", tags=["System Status"])


@router.get("")
def get_system_status(db: Database = Depends(get_db)):
    """
    Checks whether the backend can still reach its database.
    """
    backend_status = "Operational"
    try:
        db.command("ping")
        db_status = "Connected"
    except PyMongoError as e:
        logger.warning(f"Database ping failed: {e}")
        db_status = "Unreachable"
        backend_status = "Degraded"

    return {
        "status": backend_status,
        "database": db_status,
        "timestamp": datetime.now(timezone.utc).isoformat(),
    }
