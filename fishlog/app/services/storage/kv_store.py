# fishlog/app/services/storage/kv_store.py
import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import sessionmaker

from fishlog.app.core.config import STORE_QUOTA_BYTES
from fishlog.app.core.errors import PersistenceError
from fishlog.app.db.session import SessionLocal
from fishlog.app.models.kv_record import KeyValueRecord

logger = logging.getLogger(__name__)


class KeyValueStore:
    """
    Named-blob storage on top of a single SQLAlchemy table.

    Every set() runs in its own transaction, so a failed write leaves the
    previous value in place.
    """

    def __init__(self, session_factory: sessionmaker = SessionLocal, quota_bytes: int | None = STORE_QUOTA_BYTES):
        self.session_factory = session_factory
        self.quota_bytes = quota_bytes

    def get(self, key: str) -> bytes | None:
        db = self.session_factory()
        try:
            record = db.execute(select(KeyValueRecord).where(KeyValueRecord.key == key)).scalars().first()
            return bytes(record.value) if record is not None else None
        finally:
            db.close()

    def set(self, key: str, value: bytes) -> None:
        if self.quota_bytes is not None and len(value) > self.quota_bytes:
            logger.error("Refusing to write %d bytes under '%s' (quota %d)", len(value), key, self.quota_bytes)
            raise PersistenceError(
                f"Value for '{key}' is {len(value)} bytes, quota is {self.quota_bytes} bytes"
            )

        db = self.session_factory()
        try:
            db.merge(KeyValueRecord(key=key, value=value))
            db.commit()
            logger.debug("Stored %d bytes under '%s'", len(value), key)
        except SQLAlchemyError as e:
            db.rollback()
            logger.error("Failed to write key '%s': %s", key, e)
            raise PersistenceError(f"Failed to write key '{key}'") from e
        finally:
            db.close()

    def delete(self, key: str) -> None:
        db = self.session_factory()
        try:
            record = db.get(KeyValueRecord, key)
            if record is not None:
                db.delete(record)
                db.commit()
        except SQLAlchemyError as e:
            db.rollback()
            raise PersistenceError(f"Failed to delete key '{key}'") from e
        finally:
            db.close()
