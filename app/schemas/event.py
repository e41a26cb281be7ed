from pydantic import BaseModel, model_validator
from datetime import datetime
from typing import Optional


class EventRecord(BaseModel):
    event_id: int
    event_type: str
    subject: str
    data: str
    event_time: datetime
    processed: bool
    process_time: Optional[datetime] = None
    attempts: int
    error_message: Optional[str] = None
    status: str
    claimed_by: Optional[str] = None
    claimed_at: Optional[datetime] = None

    class Config:
        from_attributes = True


class EventProcessedReport(BaseModel):
    """Outcome of one processing attempt"""
    success: bool
    error_message: Optional[str] = None

    @model_validator(mode="after")
    def _error_required_on_failure(self):
        if not self.success and not self.error_message:
            raise ValueError("error_message is required when success is false")
        return self
