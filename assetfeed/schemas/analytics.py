"""Usage analytics response schemas."""

from pydantic import BaseModel
from typing import Dict, List


class DailyUploads(BaseModel):
    date: str
    count: int


class AnalyticsOverview(BaseModel):
    total_files: int
    total_folders: int
    total_feed_items: int
    total_size: int
    total_size_human: str
    avg_size: float
    unique_uploaders: int
    type_breakdown: Dict[str, int]
    recent_activity: List[DailyUploads]


class MonthlyUploads(BaseModel):
    """Files uploaded in one calendar month (``YYYY-MM``)."""
    month: str
    count: int
    total_size: int


class MonthlyUploadsResponse(BaseModel):
    months: List[MonthlyUploads]
