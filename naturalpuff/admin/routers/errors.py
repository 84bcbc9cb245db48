"""Error log: rows written by the unhandled-exception handler."""
from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from naturalpuff.core.database import get_db
from naturalpuff.models import ErrorLog

router = APIRouter()


@router.get("")
def errors_list(limit: int = Query(100, ge=1, le=500), db: Session = Depends(get_db)):
    logs = db.exec(select(ErrorLog).order_by(ErrorLog.id.desc()).limit(limit)).all()
    return [
        {
            "id": e.id,
            "endpoint": e.endpoint or "-",
            "method": e.method or "-",
            "request_id": e.request_id,
            "error_message": (e.error_message or "-")[:200],
            "created_at": e.created_at,
        }
        for e in logs
    ]


@router.get("/{error_id}")
def error_detail(error_id: int, db: Session = Depends(get_db)):
    e = db.get(ErrorLog, error_id)
    if not e:
        raise HTTPException(404, "Log not found.")
    return e
