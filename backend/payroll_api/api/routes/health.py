from fastapi import APIRouter, Depends
from sqlalchemy import text
from sqlalchemy.orm import Session

from payroll_api.db.session import get_session

router = APIRouter(prefix="/health", tags=["health"])


@router.get("", summary="Liveness probe with a database round trip")
def healthcheck(db: Session = Depends(get_session)) -> dict[str, str]:
    db.execute(text("SELECT 1"))
    return {"status": "ok", "database": "ok"}
