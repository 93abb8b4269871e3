from datetime import datetime
from zoneinfo import ZoneInfo
from pydantic import BaseModel, ConfigDict, field_serializer

from .config import settings


class CustomModel(BaseModel):
    """
    Base model shared by every Pydantic schema in the project.
    Keeps the API data policy in one place.
    """
    model_config = ConfigDict(
        populate_by_name=True,
        # build schemas straight from SQLAlchemy objects
        from_attributes=True,
        extra="forbid",
    )

    @field_serializer('*', check_fields=False)
    def serialize_datetime(self, value, _info):
        """Render datetimes in the newsroom timezone using the format agreed with the frontend."""
        if isinstance(value, datetime):
            local_tz = ZoneInfo(settings.TIMEZONE)
            if value.tzinfo is None:
                value = value.replace(tzinfo=local_tz)
            else:
                value = value.astimezone(local_tz)
            return value.strftime("%Y-%m-%d %H:%M:%S")
        return value
