from datetime import datetime, timezone
import logging

from fastapi import APIRouter, Depends

from app.api.dependencies import require_admin, require_db
from app.db.connection import Database
from app.models.schemas import MigrationRunResponse

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/migrations", tags=["migrations"])


@router.post("/run", response_model=MigrationRunResponse)
def run_migrations(db: Database = Depends(require_db), _=Depends(require_admin)):
    db.migrate()
    logger.info("Schema migration applied")
    return {"status": "ok", "applied_at": datetime.now(timezone.utc)}
