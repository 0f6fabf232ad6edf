"""
Repository for user report operations.
"""

from datetime import datetime
from typing import Optional

from sqlalchemy import func, or_
from sqlalchemy.orm import Session

from repositories.base import BaseRepository
from repositories.db_models import ReportReason, ReportStatus, UserReport


class ReportRepository(BaseRepository[UserReport]):
    """Repository for user report data access."""

    def __init__(self, db: Session):
        """
        Initialize report repository.

        Args:
            db: Database session
        """
        super().__init__(UserReport, db)

    def get_latest_between(
        self, reporter_username: str, reported_username: str
    ) -> UserReport | None:
        """
        Get the most recent report filed by reporter against reported.

        Args:
            reporter_username: Username of the reporting user
            reported_username: Username of the reported user

        Returns:
            Latest report for the pair, None if there is none
        """
        return (
            self.db.query(UserReport)
            .filter(
                UserReport.reporter_username == reporter_username,
                UserReport.reported_username == reported_username,
            )
            .order_by(UserReport.created_at.desc(), UserReport.id.desc())
            .first()
        )

    def rename_user(self, old_username: str, new_username: str) -> None:
        """
        Point every report that names a user at their new username.

        Changes are staged; the caller commits.
        """
        for column in (
            UserReport.reporter_username,
            UserReport.reported_username,
            UserReport.reviewed_by,
        ):
            self.db.query(UserReport).filter(column == old_username).update(
                {column: new_username}, synchronize_session=False
            )

    def get_for_reported(self, reported_username: str) -> list[UserReport]:
        """Get every report targeting a user, newest first."""
        return (
            self.db.query(UserReport)
            .filter(UserReport.reported_username == reported_username)
            .order_by(UserReport.created_at.desc(), UserReport.id.desc())
            .all()
        )

    def count_for_reported(self, reported_username: str) -> int:
        """Count reports targeting a user."""
        return (
            self.db.query(UserReport)
            .filter(UserReport.reported_username == reported_username)
            .count()
        )

    def list_reports(
        self,
        reason: Optional[ReportReason] = None,
        status: Optional[ReportStatus] = None,
        search: Optional[str] = None,
        since: Optional[datetime] = None,
        skip: int = 0,
        limit: int = 100,
    ) -> list[UserReport]:
        """
        List reports for the admin panel, newest first.

        Args:
            reason: Optional reason filter
            status: Optional status filter
            search: Case-insensitive substring of reported/reporter username or description
            since: Only reports created at or after this time
            skip: Pagination offset
            limit: Pagination limit

        Returns:
            List of reports
        """
        query = self.db.query(UserReport)
        if reason is not None:
            query = query.filter(UserReport.reason == reason)
        if status is not None:
            query = query.filter(UserReport.status == status)
        if search:
            pattern = f"%{search.lower()}%"
            query = query.filter(
                or_(
                    func.lower(UserReport.reported_username).like(pattern),
                    func.lower(UserReport.reporter_username).like(pattern),
                    func.lower(UserReport.description).like(pattern),
                )
            )
        if since is not None:
            query = query.filter(UserReport.created_at >= since)
        return (
            query.order_by(UserReport.created_at.desc(), UserReport.id.desc())
            .offset(skip)
            .limit(limit)
            .all()
        )

    def get_counts_by_reported_and_status(self) -> list[tuple[str, ReportStatus, int]]:
        """
        Count reports grouped by target and status.

        Returns:
            List of (reported_username, status, count) rows
        """
        rows = (
            self.db.query(
                UserReport.reported_username,
                UserReport.status,
                func.count(UserReport.id),
            )
            .group_by(UserReport.reported_username, UserReport.status)
            .order_by(UserReport.reported_username.asc())
            .all()
        )
        return [(username, status, count) for username, status, count in rows]

    def get_counts_by_status(self) -> dict[str, int]:
        """Count reports per status."""
        rows = (
            self.db.query(UserReport.status, func.count(UserReport.id))
            .group_by(UserReport.status)
            .all()
        )
        return {status.value: count for status, count in rows}

    def get_counts_by_reason(self) -> dict[str, int]:
        """Count reports per reason."""
        rows = (
            self.db.query(UserReport.reason, func.count(UserReport.id))
            .group_by(UserReport.reason)
            .all()
        )
        return {reason.value: count for reason, count in rows}
