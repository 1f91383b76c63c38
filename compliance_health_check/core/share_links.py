"""
Shareable report links.

A shareable link exposes a snapshot of one health check record under a
public URL of the form ``<frontend_url>/shared-report/<company-slug>/<hash>``.
Links expire after a configurable number of days and can be revoked by
their owner. Links are held in memory for the lifetime of the process.
"""

import logging
import re
import secrets
import threading
from datetime import datetime, timedelta
from typing import Callable, Dict, List

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from ..models.compliance_result import HealthCheckRecord
from .exceptions import ShareLinkExpiredError, ShareLinkNotFoundError

logger = logging.getLogger(__name__)

MIN_EXPIRY_DAYS = 1
MAX_EXPIRY_DAYS = 365


def slugify(company_name: str) -> str:
    """Lowercase a company name and collapse everything else into single dashes."""
    slug = re.sub(r"[^a-z0-9]+", "-", (company_name or "").lower())
    return slug.strip("-")


class ShareableReport(BaseModel):
    """A public, expiring snapshot of a health check record."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)

    id: str = Field(..., description="Random report hash used in the URL")
    record_id: str = Field(..., description="Health check record the link was made from")
    owner_id: str = Field(..., description="Owner of the record")
    company_name: str = Field(..., description="Company name shown on the shared report")
    company_slug: str = Field(..., description="URL slug derived from the company name")
    created_at: datetime = Field(..., description="When the link was created")
    expires_at: datetime = Field(..., description="When the link stops resolving")
    is_active: bool = Field(True, description="False once revoked")
    view_count: int = Field(0, ge=0, description="Number of successful views")
    record: HealthCheckRecord = Field(..., description="Snapshot of the shared record")

    def is_available(self, now: datetime) -> bool:
        return self.is_active and now <= self.expires_at


class ShareRegistry:
    """In-memory registry of shareable report links."""

    def __init__(self, frontend_url: str, clock: Callable[[], datetime] = datetime.now):
        """Initialize the registry with the base URL links point at."""
        self.frontend_url = frontend_url.rstrip("/")
        self.clock = clock
        self.logger = logging.getLogger(__name__)
        self._reports: Dict[str, ShareableReport] = {}
        self._lock = threading.Lock()

    def url_for(self, report: ShareableReport) -> str:
        return f"{self.frontend_url}/shared-report/{report.company_slug}/{report.id}"

    def create(
        self,
        record: HealthCheckRecord,
        owner_id: str,
        company_name: str,
        expires_in_days: int = 30,
    ) -> ShareableReport:
        """
        Create a shareable link for a record.

        Args:
            record: The health check record to share
            owner_id: Owner creating the link
            company_name: Company name for the slug and the shared page
            expires_in_days: Link lifetime, 1-365 days

        Returns:
            The registered ShareableReport
        """
        if not MIN_EXPIRY_DAYS <= expires_in_days <= MAX_EXPIRY_DAYS:
            raise ValueError(
                f"Expires in days must be between {MIN_EXPIRY_DAYS} and {MAX_EXPIRY_DAYS}"
            )

        company_slug = slugify(company_name)
        if not company_slug:
            raise ValueError("Company name must contain at least one ASCII letter or digit")

        now = self.clock()
        report = ShareableReport(
            id=secrets.token_hex(32),
            record_id=record.id,
            owner_id=owner_id,
            company_name=company_name,
            company_slug=company_slug,
            created_at=now,
            expires_at=now + timedelta(days=expires_in_days),
            record=record,
        )

        with self._lock:
            self._reports[report.id] = report

        self.logger.info(f"Created shareable report for {record.id}, expires {report.expires_at.isoformat()}")
        return report

    def get(self, company_slug: str, report_hash: str) -> ShareableReport:
        """Resolve a public link and count the view."""
        with self._lock:
            report = self._reports.get(report_hash)

            if report is None or report.company_slug != company_slug:
                raise ShareLinkNotFoundError(report_hash)

            if not report.is_available(self.clock()):
                self.logger.warning(f"Rejected view of expired shareable report {report_hash}")
                raise ShareLinkExpiredError(report_hash)

            report.view_count += 1
            return report.model_copy(deep=True)

    def list_for_owner(self, owner_id: str) -> List[ShareableReport]:
        """Get every link an owner created, newest first."""
        with self._lock:
            reports = [r for r in self._reports.values() if r.owner_id == owner_id]
        return sorted(reports, key=lambda r: r.created_at, reverse=True)

    def revoke(self, report_hash: str, owner_id: str) -> ShareableReport:
        """Deactivate one of the owner's links."""
        with self._lock:
            report = self._reports.get(report_hash)
            if report is None or report.owner_id != owner_id:
                raise ShareLinkNotFoundError(report_hash)
            report.is_active = False

        self.logger.info(f"Revoked shareable report {report_hash}")
        return report
