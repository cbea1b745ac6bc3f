from pydantic import BaseModel, ConfigDict
from datetime import datetime
import uuid

class UserRecord(BaseModel):
    """User as seen outside the store, never carries the hash"""
    id: uuid.UUID
    username: str
    role: str
    created_at: datetime
    updated_at: datetime

    model_config = ConfigDict(from_attributes=True)
