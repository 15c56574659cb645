from datetime import timezone
from marshmallow import fields


class NaiveUTCDateTime(fields.DateTime):
    """ISO datetime in, naive UTC out (the database stores naive UTC)."""

    def _deserialize(self, value, attr, data, **kwargs):
        dt = super()._deserialize(value, attr, data, **kwargs)
        if dt.tzinfo is not None:
            dt = dt.astimezone(timezone.utc).replace(tzinfo=None)
        return dt
