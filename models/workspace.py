from pydantic import BaseModel, Field
from datetime import datetime


class WorkspaceCreate(BaseModel):
    user_id: str  # Foreign Key to the users collection
    name: str = Field(min_length=1)
    created_at: datetime
    updated_at: datetime

    class Config:
        from_attributes = True
