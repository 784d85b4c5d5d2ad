from sqlalchemy import Column, Integer, String, LargeBinary, DateTime
from sqlalchemy.orm import deferred
from datetime import datetime, timezone
from filemanager.db.session import Base


def _utcnow():
    return datetime.now(timezone.utc)


class File(Base):
    __tablename__ = "files"

    id = Column(Integer, primary_key=True, index=True)
    name = Column(String(255), nullable=False)
    mimetype = Column(String(255), nullable=False)
    size = Column(Integer, nullable=False)  # Size in bytes, equals len(data)

    # Blob payload, only loaded when explicitly accessed
    data = deferred(Column(LargeBinary, nullable=False))

    # Timestamps
    uploaded_at = Column(DateTime, default=_utcnow, nullable=False)
