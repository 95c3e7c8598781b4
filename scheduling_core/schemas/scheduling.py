from pydantic import BaseModel


class TimeSlot(BaseModel):
    time: str
    available: bool
