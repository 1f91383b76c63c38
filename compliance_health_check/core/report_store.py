"""
Report Store for scored health checks.

This module persists HealthCheckRecords as one JSON file per record,
grouped in one subdirectory per owner under a data directory, and
answers the history, latest-report and statistics queries the service
exposes. It is the storage collaborator the scoring engine hands its
results to; the engine never calls it.
"""

import hashlib
import logging
import math
import os
import re
import tempfile
import threading
import uuid
from datetime import datetime
from pathlib import Path
from typing import Any, Callable, Dict, List, Mapping, Optional

from ..models.compliance_result import ComplianceResult, HealthCheckRecord, RiskLevel, risk_level_for
from .exceptions import ReportNotFoundError
from .question_catalog import CATALOG_VERSION
from .scoring_engine import round_half_up

logger = logging.getLogger(__name__)

_RECORD_ID = re.compile(r"^[0-9a-f]{32}$")


def _stringify(values: Optional[Mapping[Any, Any]]) -> Dict[str, str]:
    return {str(key): "" if value is None else str(value) for key, value in (values or {}).items()}


class ReportStore:
    """
    File-backed store for health check records.

    Each record lives in ``<data_directory>/<owner_key>/<record_id>.json``,
    where the owner key is a digest of the opaque owner id supplied by the
    caller, so owner queries only read that owner's files.
    """

    def __init__(self, data_directory: str, clock: Callable[[], datetime] = datetime.now):
        """Initialize the store rooted at a data directory."""
        self.data_directory = Path(data_directory)
        self.clock = clock
        self.logger = logging.getLogger(__name__)
        self._lock = threading.Lock()

    def _owner_directory(self, owner_id: str) -> Path:
        owner_key = hashlib.sha256(owner_id.encode("utf-8")).hexdigest()[:32]
        return self.data_directory / owner_key

    def _locate(self, record_id: str) -> Optional[Path]:
        if not _RECORD_ID.match(record_id or ""):
            raise ReportNotFoundError(record_id)
        return next(self.data_directory.glob(f"*/{record_id}.json"), None)

    def _write_atomic(self, path: Path, text: str):
        path.parent.mkdir(parents=True, exist_ok=True)
        fd, temp_name = tempfile.mkstemp(dir=path.parent, prefix=".", suffix=".tmp")
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                f.write(text)
            os.replace(temp_name, path)
        except BaseException:
            os.unlink(temp_name)
            raise

    def save_result(
        self,
        owner_id: str,
        result: ComplianceResult,
        answers: Mapping[Any, Any],
        follow_up_answers: Optional[Mapping[Any, Any]] = None,
    ) -> str:
        """
        Persist a computed result with the raw answers it came from.

        Args:
            owner_id: Identity of the caller the record belongs to
            result: ComplianceResult produced by the scoring engine
            answers: Raw primary answers
            follow_up_answers: Raw follow-up answers

        Returns:
            The new record id
        """
        record = HealthCheckRecord(
            id=uuid.uuid4().hex,
            owner_id=owner_id,
            assessment_date=self.clock(),
            answers=_stringify(answers),
            follow_up_answers=_stringify(follow_up_answers),
            result=result,
            version=CATALOG_VERSION,
        )
        path = self._owner_directory(owner_id) / f"{record.id}.json"

        try:
            with self._lock:
                self._write_atomic(path, record.model_dump_json(by_alias=True, indent=2))
        except OSError as e:
            self.logger.error(f"Error saving health check for {owner_id}: {e}")
            raise

        self.logger.info(f"Saved health check {record.id} for {owner_id} (score {result.overall_score})")
        return record.id

    def load_record(self, record_id: str) -> HealthCheckRecord:
        """Load a stored record by id."""
        with self._lock:
            path = self._locate(record_id)
            if path is None:
                raise ReportNotFoundError(record_id)
            content = path.read_bytes()

        try:
            return HealthCheckRecord.model_validate_json(content)
        except ValueError as e:
            self.logger.warning(f"Unreadable health check file {path}: {e}")
            raise ReportNotFoundError(record_id)

    def load_result(self, record_id: str) -> ComplianceResult:
        """Load the ComplianceResult of a stored record."""
        return self.load_record(record_id).result

    def load_record_for_owner(self, record_id: str, owner_id: str) -> HealthCheckRecord:
        """Load a record, treating another owner's record as not found."""
        record = self.load_record(record_id)
        if record.owner_id != owner_id:
            raise ReportNotFoundError(record_id)
        return record

    def records_for(self, owner_id: str) -> List[HealthCheckRecord]:
        """Get every record of an owner, newest first. Unreadable files are skipped."""
        owner_directory = self._owner_directory(owner_id)
        with self._lock:
            if not owner_directory.is_dir():
                return []
            contents = [(path, path.read_bytes()) for path in sorted(owner_directory.glob("*.json"))]

        records = []
        for path, content in contents:
            try:
                record = HealthCheckRecord.model_validate_json(content)
            except ValueError as e:
                self.logger.warning(f"Skipping unreadable health check file {path}: {e}")
                continue
            if record.owner_id == owner_id:
                records.append(record)

        records.sort(key=lambda r: r.assessment_date, reverse=True)
        return records

    def latest(self, owner_id: str) -> Optional[HealthCheckRecord]:
        """Get the newest record of an owner, or None."""
        records = self.records_for(owner_id)
        return records[0] if records else None

    def history(self, owner_id: str, limit: int = 10, page: int = 1) -> Dict[str, Any]:
        """Get one page of an owner's records, newest first, with pagination info."""
        limit = max(1, limit)
        page = max(1, page)
        records = self.records_for(owner_id)
        total_results = len(records)
        skip = (page - 1) * limit

        return {
            "history": records[skip:skip + limit],
            "pagination": {
                "current_page": page,
                "total_results": total_results,
                "total_pages": math.ceil(total_results / limit),
                "has_next": skip + limit < total_results,
                "has_prev": page > 1,
            },
        }

    def improvement(self, record: HealthCheckRecord) -> Optional[Dict[str, Any]]:
        """Compare a record with the owner's previous one; None if it is the first."""
        previous = None
        for candidate in self.records_for(record.owner_id):
            if candidate.assessment_date < record.assessment_date:
                previous = candidate
                break

        if previous is None:
            return None

        elapsed = record.assessment_date - previous.assessment_date
        return {
            "score_change": record.score - previous.score,
            "previous_score": previous.score,
            "current_score": record.score,
            "days_between": math.ceil(elapsed.total_seconds() / 86400),
        }

    def stats(self, owner_id: str) -> Dict[str, Any]:
        """Summarise an owner's assessments: averages, extremes, trend and risk spread."""
        risk_distribution = {level.value: 0 for level in RiskLevel}
        records = list(reversed(self.records_for(owner_id)))

        if not records:
            return {
                "total_assessments": 0,
                "average_score": 0,
                "highest_score": 0,
                "lowest_score": 0,
                "last_assessment": None,
                "trend": "no-data",
                "risk_distribution": risk_distribution,
            }

        scores = [record.score for record in records]

        trend = "stable"
        if len(scores) >= 2:
            if scores[-1] > scores[-2]:
                trend = "improving"
            elif scores[-1] < scores[-2]:
                trend = "declining"

        for value in scores:
            risk_distribution[risk_level_for(value).value] += 1

        return {
            "total_assessments": len(scores),
            "average_score": round_half_up(sum(scores) / len(scores) * 100) / 100,
            "highest_score": max(scores),
            "lowest_score": min(scores),
            "last_assessment": records[-1].assessment_date,
            "trend": trend,
            "risk_distribution": risk_distribution,
        }
