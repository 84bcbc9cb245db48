"""Contact / sales inquiries inbox."""
from datetime import datetime

from fastapi import APIRouter, Depends, HTTPException, Query
from sqlmodel import Session, select

from naturalpuff.core.database import get_db
from naturalpuff.models import ContactMessage
from naturalpuff.schemas import ContactUpdate

router = APIRouter()


@router.get("")
def messages_list(
    responded: bool | None = None,
    limit: int = Query(200, ge=1, le=500),
    db: Session = Depends(get_db),
):
    stmt = select(ContactMessage).order_by(ContactMessage.created_at.desc(), ContactMessage.id.desc()).limit(limit)
    if responded is not None:
        stmt = stmt.where(ContactMessage.responded == responded)
    return db.exec(stmt).all()


@router.patch("/{message_id}")
def message_update(message_id: int, body: ContactUpdate, db: Session = Depends(get_db)):
    msg = db.get(ContactMessage, message_id)
    if not msg:
        raise HTTPException(status_code=404, detail="Message not found.")
    if body.responded is not None:
        msg.responded = body.responded
        msg.responded_at = datetime.utcnow() if body.responded else None
    if body.notes is not None:
        msg.notes = body.notes.strip() or None
    db.add(msg)
    db.commit()
    db.refresh(msg)
    return msg


@router.delete("/{message_id}")
def message_delete(message_id: int, db: Session = Depends(get_db)):
    msg = db.get(ContactMessage, message_id)
    if not msg:
        raise HTTPException(status_code=404, detail="Message not found.")
    db.delete(msg)
    db.commit()
    return {"success": True}
