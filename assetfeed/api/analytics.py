"""Analytics API: library totals and upload activity over time."""

from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from ..database import get_db
from ..schemas.analytics import AnalyticsOverview, MonthlyUploadsResponse
from ..services.asset_service import AssetService

router = APIRouter(prefix="/api/analytics", tags=["analytics"])


@router.get("/overview", response_model=AnalyticsOverview)
def get_overview(db: Session = Depends(get_db)):
    """Totals, type breakdown and daily uploads over the last 30 days."""
    return AssetService(db).analytics_overview()


@router.get("/monthly-uploads", response_model=MonthlyUploadsResponse)
def get_monthly_uploads(db: Session = Depends(get_db)):
    return AssetService(db).monthly_uploads()
