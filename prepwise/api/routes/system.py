from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from prepwise.core.auth_dependency import get_db

router = APIRouter(prefix="/system", tags=["System"])


@router.get("/health")
def system_health(db: Session = Depends(get_db)):
    db_ok = True
    try:
        db.execute(text("SELECT 1"))
    except Exception:
        db_ok = False

    return {
        "status": "ok",
        "database": "connected" if db_ok else "error",
        "api_version": "1.0.0",
        "service": "PrepWise API"
    }
