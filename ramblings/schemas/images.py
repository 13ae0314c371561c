# ramblings/schemas/images.py
from pydantic import BaseModel, Field
from typing import Optional, Dict


class ImageUpdate(BaseModel):
    """Editable image metadata; everything else is fixed at upload."""
    alt: Optional[str] = Field(None, max_length=300)
    description: Optional[str] = Field(None, max_length=1000)


class ImageStats(BaseModel):
    total_images: int = 0
    total_size: int = Field(0, description="Total bytes across all images")
    total_size_mb: str = Field("0.00", description="Total size in MB, two decimals")
    by_type: Dict[str, int] = {}
