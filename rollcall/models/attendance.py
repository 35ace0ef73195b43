from datetime import datetime
from beanie import Document, Indexed
from pydantic import Field, BaseModel
import pymongo

class AttendanceEntry(Document):
    """Present/absent mark for one student on one date."""
    student_id: Indexed(str)
    class_id: Indexed(str)
    date: str  # YYYY-MM-DD
    present: bool
    record_date: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "attendance_records"
        use_state_management = True
        # One visible mark per student and date; writes are upserts.
        indexes = [
            pymongo.IndexModel(
                [("student_id", pymongo.ASCENDING), ("date", pymongo.ASCENDING)],
                unique=True,
            ),
        ]


class AttendanceEntryCreate(BaseModel):
    student_id: str
    present: bool
    date: str
