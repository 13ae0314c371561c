# ramblings/schemas/common.py
"""Common schemas used across multiple modules."""
from pydantic import BaseModel, Field
from typing import Optional


class SuccessResponse(BaseModel):
    """Standard success response for operations that don't return data."""
    success: bool = Field(True, description="Operation success status")
    message: str = Field(..., description="Success message")
    data: Optional[dict] = Field(None, description="Optional additional data")
