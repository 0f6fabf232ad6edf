"""
Report Service - user reports and the admin review queue.

A reporter may file one report against a given user per cooldown window
(REPORT_COOLDOWN_SECONDS, 20 minutes by default). The window is measured
from the latest report filed by the same reporter against the same user.
"""

from datetime import datetime
from typing import Optional

from loguru import logger
from sqlalchemy.orm import Session

import models.schemas as schemas
import repositories.db_models as db_models
from helpers.sanitization import sanitize_plain_text
from helpers.time_utils import elapsed_ms, format_cooldown, utc_now, window_start
from models.config import settings
from models.exceptions import (
    ReportAlreadyReviewedException,
    ReportCooldownActiveException,
    ReportNotFoundException,
    SelfReportDeniedException,
    UserNotFoundException,
)
from repositories.report_repository import ReportRepository
from repositories.user_repository import UserRepository
from services.permission_service import Capability, PermissionService


class ReportService:
    """Service for filing, listing and reviewing user reports."""

    @staticmethod
    def create_report(
        db: Session,
        reporter: Optional[db_models.User],
        data: schemas.ReportCreate,
        now: Optional[datetime] = None,
    ) -> db_models.UserReport:
        """
        File a report against another user.

        Args:
            db: Database session
            reporter: Current user, None if anonymous
            data: Report payload
            now: Report time (defaults to the current time)

        Returns:
            The stored report, status pending

        Raises:
            UnauthenticatedException: If nobody is logged in
            UserBlockedException: If the reporter is blocked
            SelfReportDeniedException: If reporter and reported are the same user
            UserNotFoundException: If the reported user does not exist
            ReportCooldownActiveException: If the pair is still in cooldown
        """
        reporter = PermissionService.require(db, reporter, Capability.REPORT_USERS)
        now = now or utc_now()

        reported_username = (sanitize_plain_text(data.reported_username) or "").strip()
        if reported_username.lower() == reporter.username.lower():
            logger.warning(f"Self-report attempt by {reporter.username}")
            raise SelfReportDeniedException()

        reported = UserRepository(db).get_by_username_ci(reported_username)
        if reported is None:
            raise UserNotFoundException(f"User {reported_username} not found")

        remaining = ReportService.cooldown_remaining(
            db, reporter.username, reported.username, now=now
        )
        if remaining > 0:
            logger.warning(
                f"Report by {reporter.username} against {reported.username} "
                f"rejected, cooldown {remaining}ms"
            )
            raise ReportCooldownActiveException(
                reported.username, remaining, format_cooldown(remaining)
            )

        report = db_models.UserReport(
            reporter_username=reporter.username,
            reported_username=reported.username,
            reason=data.reason,
            description=sanitize_plain_text(data.description) or "",
            post_id=data.post_id,
            topic_id=data.topic_id,
            content_type=data.content_type,
            reply_content=sanitize_plain_text(data.reply_content),
            status=db_models.ReportStatus.PENDING,
            created_at=now,
        )
        report = ReportRepository(db).create(report)

        logger.info(
            f"Report {report.id} filed by {reporter.username} "
            f"against {reported.username} ({report.reason.value})"
        )
        return report

    @staticmethod
    def cooldown_remaining(
        db: Session,
        reporter_username: str,
        reported_username: str,
        now: Optional[datetime] = None,
    ) -> int:
        """
        Milliseconds left before reporter may report reported_username again.

        Returns:
            0 when a report is allowed
        """
        latest = ReportRepository(db).get_latest_between(
            reporter_username, reported_username
        )
        if latest is None:
            return 0
        waited = elapsed_ms(latest.created_at, now or utc_now())
        return max(0, settings.report_cooldown_ms - waited)

    @staticmethod
    def can_report(
        db: Session,
        reporter_username: str,
        reported_username: str,
        now: Optional[datetime] = None,
    ) -> bool:
        if reporter_username.lower() == reported_username.lower():
            return False
        return (
            ReportService.cooldown_remaining(
                db, reporter_username, reported_username, now=now
            )
            == 0
        )

    @staticmethod
    def cooldown_status(
        db: Session,
        reporter: db_models.User,
        reported_username: str,
        now: Optional[datetime] = None,
    ) -> schemas.ReportCooldown:
        """Cooldown state shown next to the report button."""
        reported = UserRepository(db).get_by_username_ci(reported_username)
        if reported is not None:
            reported_username = reported.username

        remaining = ReportService.cooldown_remaining(
            db, reporter.username, reported_username, now=now
        )
        return schemas.ReportCooldown(
            reported_username=reported_username,
            can_report=ReportService.can_report(
                db, reporter.username, reported_username, now=now
            ),
            remaining_ms=remaining,
            formatted=format_cooldown(remaining),
        )

    @staticmethod
    def reports_for(db: Session, username: str) -> list[db_models.UserReport]:
        """Reports targeting a user, newest first."""
        return ReportRepository(db).get_for_reported(username)

    @staticmethod
    def report_counts_by_user(db: Session) -> dict[str, schemas.ReportStatusCounts]:
        """
        Count reports per reported user, split by status.

        Returns:
            {username: ReportStatusCounts}
        """
        counts: dict[str, schemas.ReportStatusCounts] = {}
        rows = ReportRepository(db).get_counts_by_reported_and_status()
        for username, status, count in rows:
            entry = counts.setdefault(username, schemas.ReportStatusCounts())
            entry.total += count
            setattr(entry, status.value, getattr(entry, status.value) + count)
        return counts

    @staticmethod
    def list_reports(
        db: Session,
        reason: Optional[db_models.ReportReason] = None,
        status: Optional[db_models.ReportStatus] = None,
        search: Optional[str] = None,
        window: str = "all",
        skip: int = 0,
        limit: int = 100,
        now: Optional[datetime] = None,
    ) -> list[db_models.UserReport]:
        """
        List reports for the admin panel.

        Args:
            db: Database session
            reason: Optional reason filter
            status: Optional status filter
            search: Substring of usernames or description
            window: "today", "week", "month" or "all"
            skip: Pagination offset
            limit: Pagination limit
            now: Reference time for the window

        Returns:
            Matching reports, newest first
        """
        return ReportRepository(db).list_reports(
            reason=reason,
            status=status,
            search=search.strip() if search else None,
            since=window_start(window, now),
            skip=skip,
            limit=limit,
        )

    @staticmethod
    def review_report(
        db: Session,
        report_id: int,
        admin: db_models.User,
        review: schemas.ReportReview,
        now: Optional[datetime] = None,
    ) -> db_models.UserReport:
        """
        Resolve a pending report.

        Raises:
            ReportNotFoundException: If the report does not exist
            ReportAlreadyReviewedException: If the report is not pending
        """
        repo = ReportRepository(db)
        report = repo.get_by_id(report_id)
        if report is None:
            raise ReportNotFoundException(report_id)
        if report.status != db_models.ReportStatus.PENDING:
            raise ReportAlreadyReviewedException()

        action = review.action
        if action is None and review.status == db_models.ReportStatus.DISMISSED:
            action = db_models.ReportAction.DISMISSED

        report.status = review.status
        report.action = action
        report.reviewed_by = admin.username
        report.reviewed_at = now or utc_now()
        report = repo.update(report)

        logger.info(
            f"Report {report_id} marked {report.status.value} by {admin.username}",
            extra={"action": action.value if action else None},
        )
        return report

    @staticmethod
    def get_stats(db: Session) -> schemas.ReportStats:
        repo = ReportRepository(db)
        by_status = repo.get_counts_by_status()
        return schemas.ReportStats(
            total=sum(by_status.values()),
            by_status=by_status,
            by_reason=repo.get_counts_by_reason(),
        )
