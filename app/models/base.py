from datetime import datetime, timezone
from typing import Any

from bson.objectid import ObjectId
from mongoengine import DateTimeField, Document


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


def sanitize_value(value: Any) -> Any:
    """Convert stored values (documents, ObjectId, datetime, raw `_id` keys) to JSON-safe ones."""
    if isinstance(value, Document):
        return value.to_output() if hasattr(value, "to_output") else str(value.id)
    if isinstance(value, list):
        return [sanitize_value(v) for v in value]
    if isinstance(value, dict):
        return {("id" if k == "_id" else k): sanitize_value(v) for k, v in value.items()}
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, ObjectId):
        return str(value)
    return value


class BaseDocument(Document):
    created_at = DateTimeField(default=utcnow, null=False)
    updated_at = DateTimeField(default=utcnow, null=False)

    meta = {
        "abstract": True,
    }

    def save(self, *args, **kwargs):
        self.updated_at = utcnow()
        return super().save(*args, **kwargs)

    def to_output(self, fields=None, exclude=None) -> dict[str, Any]:
        data: dict[str, Any] = {}
        exclude = exclude or []
        fields = fields or self._fields.keys()

        for field in fields:
            if field in exclude:
                continue
            data[field] = sanitize_value(getattr(self, field))

        data["id"] = str(self.id)
        return data
