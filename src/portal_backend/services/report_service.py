"""Admin dashboard statistics."""

from datetime import timedelta
from typing import Any, Dict, List

from sqlalchemy.orm import Session, joinedload

from portal_backend.auth.models import User
from portal_backend.core.custom_types import utcnow
from portal_backend.core.enums import JobStatus, UserStatus
from portal_backend.models.application import Application
from portal_backend.models.job import Job
from portal_backend.repositories.job import JobRepository
from portal_backend.repositories.user import UserRepository

MONTH_NAMES = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]

RECENT_PER_KIND = 5
ACTIVITY_LIMIT = 10


class ReportService:
    def __init__(self):
        self.user_repository = UserRepository()
        self.job_repository = JobRepository()

    def stats(self, db: Session) -> Dict[str, Any]:
        """Totals for users, jobs and applications."""
        users_by_role = self.user_repository.count_by_role(db)
        jobs_by_type = self.job_repository.count_by_type(db)
        return {
            "users": {
                "total": db.query(User).count(),
                "active": db.query(User).filter(User.status == UserStatus.ACTIVE.value).count(),
                "byRole": [{"role": role, "count": count} for role, count in sorted(users_by_role.items())],
            },
            "jobs": {
                "total": db.query(Job).count(),
                "active": db.query(Job).filter(Job.status == JobStatus.OPEN.value).count(),
                "byType": [{"type": job_type, "count": count} for job_type, count in sorted(jobs_by_type.items())],
            },
            "applications": {
                "total": db.query(Application).count(),
            },
        }

    def recent_activity(self, db: Session) -> List[Dict[str, Any]]:
        """The newest users, jobs and applications merged into one feed, newest first."""
        users = db.query(User).order_by(User.created_at.desc()).limit(RECENT_PER_KIND).all()
        jobs = (
            db.query(Job)
            .options(joinedload(Job.company))
            .order_by(Job.created_at.desc())
            .limit(RECENT_PER_KIND)
            .all()
        )
        applications = (
            db.query(Application)
            .options(joinedload(Application.job))
            .order_by(Application.created_at.desc())
            .limit(RECENT_PER_KIND)
            .all()
        )

        activities = [
            {"id": user.id, "type": "user", "message": f"New {user.role} joined: {user.name}", "time": user.created_at}
            for user in users
        ]
        activities.extend(
            {
                "id": job.id,
                "type": "job",
                "message": f"New job posted: {job.title} at {job.company.name if job.company else 'Unknown'}",
                "time": job.created_at,
            }
            for job in jobs
        )
        activities.extend(
            {
                "id": application.id,
                "type": "application",
                "message": f"New application for: {application.job.title if application.job else 'Job'}",
                "time": application.created_at,
            }
            for application in applications
        )

        activities.sort(key=lambda item: item["time"], reverse=True)
        return activities[:ACTIVITY_LIMIT]

    def user_growth(self, db: Session, months: int = 6) -> List[Dict[str, Any]]:
        """Signups per calendar month over roughly the last ``months`` months, oldest first."""
        since = utcnow() - timedelta(days=30 * months)
        created = db.query(User.created_at).filter(User.created_at >= since).all()

        buckets: Dict[tuple, int] = {}
        for (created_at,) in created:
            key = (created_at.year, created_at.month)
            buckets[key] = buckets.get(key, 0) + 1

        return [
            {"name": MONTH_NAMES[month - 1], "users": count}
            for (year, month), count in sorted(buckets.items())
        ]
