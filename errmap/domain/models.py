from datetime import datetime
from typing import Any, Dict, Optional

from pydantic import BaseModel, ConfigDict, Field


class ErrorResponse(BaseModel):
    """Structured result of translating one error condition."""

    model_config = ConfigDict(frozen=True)

    status: int = Field(ge=100, le=599)
    code: str = Field(min_length=1)
    message: str = Field(min_length=1)
    details: Optional[Dict[str, Any]] = None
    timestamp: datetime

    def comparable(self) -> dict:
        # everything but the translation time
        return self.model_dump(exclude={'timestamp'})
