from pydantic import BaseModel
from datetime import datetime

class ErrorResponse(BaseModel):
    error: str
    detail: str | None = None
    timestamp: datetime
