"""User report endpoints: filing reports and the admin review queue."""

from typing import List, Literal, Optional

from fastapi import APIRouter, Depends, Request
from sqlalchemy.orm import Session

import authentication.auth as auth
import models.schemas as schemas
import repositories.db_models as db_models
from helpers.pagination import PaginationLimitLarge, PaginationSkip
from helpers.rate_limiter import limiter
from repositories.database import get_db
from services import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])


@router.post("", response_model=schemas.Report, status_code=201)
@limiter.limit("10/minute")
def create_report(
    request: Request,
    report: schemas.ReportCreate,
    db: Session = Depends(get_db),
    current_user: Optional[db_models.User] = Depends(auth.get_current_user_optional),
) -> db_models.UserReport:
    """
    Report another user.

    One report per reported user every 20 minutes; a report inside that
    window is rejected with 429 and the remaining milliseconds.
    """
    return ReportService.create_report(db, current_user, report)


@router.get("/cooldown/{username}", response_model=schemas.ReportCooldown)
def get_report_cooldown(
    username: str,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_current_user),
) -> schemas.ReportCooldown:
    """Whether the current user may report `username` now, and how long to wait."""
    return ReportService.cooldown_status(db, current_user, username)


@router.get("", response_model=List[schemas.Report])
def list_reports(
    skip: PaginationSkip = 0,
    limit: PaginationLimitLarge = 100,
    reason: Optional[db_models.ReportReason] = None,
    status: Optional[db_models.ReportStatus] = None,
    search: Optional[str] = None,
    window: Literal["today", "week", "month", "all"] = "all",
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> List[db_models.UserReport]:
    """List reports, newest first (admin only)."""
    return ReportService.list_reports(
        db,
        reason=reason,
        status=status,
        search=search,
        window=window,
        skip=skip,
        limit=limit,
    )


@router.get("/counts", response_model=dict[str, schemas.ReportStatusCounts])
def get_report_counts(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> dict[str, schemas.ReportStatusCounts]:
    """Report counts per reported user (admin only)."""
    return ReportService.report_counts_by_user(db)


@router.get("/stats", response_model=schemas.ReportStats)
def get_report_stats(
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> schemas.ReportStats:
    return ReportService.get_stats(db)


@router.put("/{report_id}/review", response_model=schemas.Report)
def review_report(
    report_id: int,
    review: schemas.ReportReview,
    db: Session = Depends(get_db),
    current_user: db_models.User = Depends(auth.get_admin_user),
) -> db_models.UserReport:
    """Mark a pending report reviewed or dismissed (admin only)."""
    return ReportService.review_report(db, report_id, current_user, review)
