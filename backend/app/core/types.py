"""Column types and defaults shared by the models"""
from datetime import datetime
import uuid

from sqlalchemy import TypeDecorator, String


def generate_uuid() -> str:
    return str(uuid.uuid4())


def utcnow() -> datetime:
    """Naive UTC timestamp, matching how DateTime columns are stored"""
    return datetime.utcnow()


class GUID(TypeDecorator):
    """
    Identifier column stored as VARCHAR(36).

    Chat session ids are generated by the browser, so values are accepted as
    any string and always read back as ``str``.
    """
    impl = String(36)
    cache_ok = True

    def process_bind_param(self, value, dialect):
        return str(value) if value is not None else value

    def process_result_value(self, value, dialect):
        return str(value) if value is not None else value
