from pydantic import BaseModel
from typing import Optional, Literal
from datetime import datetime

JobKind = Literal["file_extraction", "report_generation"]
JobStatus = Literal["queued", "running", "complete", "failed"]


class JobCreate(BaseModel):
    kind: JobKind
    target_id: str  # offer_files or sales_reports id the job works on
    status: JobStatus = "queued"
    task_id: Optional[str] = None
    error: Optional[str] = None
    attempts: int = 0
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
