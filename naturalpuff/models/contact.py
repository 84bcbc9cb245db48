"""Contact form messages: anonymous insert, admin read/update."""
from datetime import datetime

from sqlmodel import Field, SQLModel


class ContactMessage(SQLModel, table=True):
    __tablename__ = "contact_messages"

    id: int | None = Field(default=None, primary_key=True)
    name: str = Field(max_length=200)
    email: str = Field(max_length=320)
    phone: str | None = None
    subject: str = Field(max_length=300)
    message: str
    responded: bool = False
    responded_at: datetime | None = None
    notes: str | None = None
    created_at: datetime = Field(default_factory=datetime.utcnow)
