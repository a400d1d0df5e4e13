from datetime import time

from pydantic import BaseModel, ConfigDict, field_serializer

SLOT_TIME_FORMAT = '%H:%M'


class SlotInfo(BaseModel):
    """Сгенерированный слот агенды на конкретную дату."""

    start: time
    end: time
    available: bool

    model_config = ConfigDict(from_attributes=True)

    @field_serializer('start', 'end')
    def format_time(self, value: time) -> str:
        """Отдаёт время слота в формате ЧЧ:ММ."""
        return value.strftime(SLOT_TIME_FORMAT)
