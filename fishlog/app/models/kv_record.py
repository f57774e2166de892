# fishlog/app/models/kv_record.py
from sqlalchemy import Column, String, DateTime, LargeBinary
from sqlalchemy.sql import func

from fishlog.app.db.session import Base


class KeyValueRecord(Base):
    __tablename__ = "kv_store"

    key = Column(String(255), primary_key=True)  # E.g., 'fishing-log-entries'
    value = Column(LargeBinary, nullable=False)  # Opaque serialized blob

    # When this key was last written
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now())

    def __repr__(self):
        return f"<KeyValueRecord(key='{self.key}', bytes={len(self.value or b'')})>"
