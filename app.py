#!/usr/bin/env python3
"""
Startup Compliance Health Check - Production Microservice
Scores compliance questionnaires and stores, shares and exports the reports
"""

import os
import logging
from typing import Optional, Dict, Any, List

import uvicorn
from fastapi import Depends, FastAPI, Header, HTTPException, Query
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import FileResponse
from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel
from datetime import datetime

from compliance_health_check.core.exceptions import (
    ReportNotFoundError,
    ShareLinkExpiredError,
    ShareLinkNotFoundError,
    UnsupportedExportFormatError,
)
from compliance_health_check.core.question_catalog import CATALOG_VERSION, all_questions
from compliance_health_check.core.report_exporter import ReportExporter
from compliance_health_check.core.report_store import ReportStore
from compliance_health_check.core.result_formatter import format_result
from compliance_health_check.core.scoring_engine import ScoringEngine
from compliance_health_check.core.share_links import ShareRegistry, ShareableReport
from compliance_health_check.models.compliance_result import HealthCheckRecord
from compliance_health_check.utils.config import get_config

config = get_config()

# Configure logging
logging.basicConfig(
    level=getattr(logging, config.log_level, logging.INFO),
    filename=config.log_file,
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title="Startup Compliance Health Check",
    description="Weighted compliance scoring with strengths, red flags and a 6-month risk forecast",
    version=config.version,
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

# Global components
scoring_engine = ScoringEngine()
report_store = ReportStore(config.data_directory)
share_registry = ShareRegistry(config.frontend_url)
report_exporter = ReportExporter(config.output_directory)

EXPORT_MEDIA_TYPES = {
    "json": "application/json",
    "excel": "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet",
}


# Pydantic models
class _RequestModel(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class HealthCheckRequest(_RequestModel):
    answers: Dict[str, Any]
    follow_up_answers: Dict[str, Any] = Field(default_factory=dict)


class ShareRequest(_RequestModel):
    health_check_id: str
    company_name: str = Field(..., min_length=1)
    expires_in_days: Optional[int] = Field(None, ge=1, le=365)


# Dependencies
def get_scoring_engine() -> ScoringEngine:
    return scoring_engine


def get_report_store() -> ReportStore:
    return report_store


def get_share_registry() -> ShareRegistry:
    return share_registry


def get_report_exporter() -> ReportExporter:
    return report_exporter


def get_owner_id(x_user_id: Optional[str] = Header(None, alias="X-User-Id")) -> str:
    """Identity of the already-authenticated caller."""
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Missing X-User-Id header")
    return x_user_id


def _camel_keys(value):
    if isinstance(value, dict):
        return {to_camel(k): _camel_keys(v) for k, v in value.items()}
    if isinstance(value, list):
        return [_camel_keys(v) for v in value]
    return value


def _record_payload(record: HealthCheckRecord) -> Dict[str, Any]:
    payload = record.model_dump(mode="json", by_alias=True)
    payload["formatted"] = format_result(record.result).model_dump(mode="json", by_alias=True)
    return payload


def _share_payload(report: ShareableReport, registry: ShareRegistry) -> Dict[str, Any]:
    return {
        "reportHash": report.id,
        "healthCheckId": report.record_id,
        "companyName": report.company_name,
        "companySlug": report.company_slug,
        "createdAt": report.created_at.isoformat(),
        "expiresAt": report.expires_at.isoformat(),
        "isActive": report.is_available(registry.clock()),
        "viewCount": report.view_count,
        "shareableUrl": registry.url_for(report),
    }


@app.on_event("startup")
async def startup_event():
    """Check configuration and report readiness"""
    logger.info("Initializing Startup Compliance Health Check...")

    config.ensure_directories()

    issues = config.validate_configuration()
    for issue in issues:
        logger.warning(f"Configuration issue: {issue}")

    logger.info(f"✅ Health check service ready with {len(all_questions())} questions (catalog v{CATALOG_VERSION})")


@app.get("/")
async def root():
    """Root endpoint"""
    return {
        "service": config.project_name,
        "version": config.version,
        "description": "Weighted compliance scoring with strengths, red flags and a 6-month risk forecast",
        "status": "operational",
        "endpoints": {
            "health": "/health",
            "questions": "/api/questions",
            "score": "/api/health-check/score",
            "save_results": "/api/health-check/save-results",
            "history": "/api/health-check/history",
            "shareable_reports": "/api/shareable-reports/create",
        },
    }


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {
        "status": "healthy",
        "timestamp": datetime.now().isoformat(),
        "service": config.project_name,
        "catalog_version": CATALOG_VERSION,
    }


@app.get("/api/questions")
async def list_questions():
    """Get the questionnaire"""
    return {
        "version": CATALOG_VERSION,
        "questions": [question.model_dump(mode="json") for question in all_questions()],
    }


@app.post("/api/health-check/score")
def score_answers(request: HealthCheckRequest, engine: ScoringEngine = Depends(get_scoring_engine)):
    """Score answers without saving them"""
    result = engine.score(request.answers, request.follow_up_answers)
    return {
        "result": result.model_dump(mode="json", by_alias=True),
        "formatted": format_result(result).model_dump(mode="json", by_alias=True),
    }


@app.post("/api/health-check/save-results", status_code=201)
def save_results(
    request: HealthCheckRequest,
    owner_id: str = Depends(get_owner_id),
    engine: ScoringEngine = Depends(get_scoring_engine),
    store: ReportStore = Depends(get_report_store),
):
    """Score answers and save the report for the caller"""
    try:
        result = engine.score(request.answers, request.follow_up_answers)
        record_id = store.save_result(owner_id, result, request.answers, request.follow_up_answers)
        record = store.load_record(record_id)
        total_assessments = len(store.records_for(owner_id))

        return {
            "id": record.id,
            "assessmentDate": record.assessment_date.isoformat(),
            "score": record.score,
            "riskLevel": record.risk_level,
            "result": record.result.model_dump(mode="json", by_alias=True),
            "totalAssessments": total_assessments,
        }

    except Exception as e:
        logger.error(f"Failed to save health check results: {e}")
        raise HTTPException(status_code=500, detail=f"Failed to save health check results: {str(e)}")


@app.get("/api/health-check/history")
def get_history(
    limit: Optional[int] = Query(None, ge=1, le=100),
    page: int = Query(1, ge=1),
    owner_id: str = Depends(get_owner_id),
    store: ReportStore = Depends(get_report_store),
):
    """Get the caller's health check history, newest first"""
    page_data = store.history(owner_id, limit=limit or config.history_page_size, page=page)
    history = [
        {
            "id": record.id,
            "assessmentDate": record.assessment_date.isoformat(),
            "score": record.score,
            "riskLevel": record.risk_level,
            "strengths": list(record.result.strengths),
            "redFlags": list(record.result.red_flags),
            "answersCount": len(record.answers),
            "followUpAnswersCount": len(record.follow_up_answers),
        }
        for record in page_data["history"]
    ]
    return {"history": history, "pagination": _camel_keys(page_data["pagination"])}


@app.get("/api/health-check/latest")
def get_latest(owner_id: str = Depends(get_owner_id), store: ReportStore = Depends(get_report_store)):
    """Get the caller's latest health check with the change since the previous one"""
    record = store.latest(owner_id)
    if record is None:
        raise HTTPException(status_code=404, detail="No health check results found")

    payload = _record_payload(record)
    payload["improvement"] = _camel_keys(store.improvement(record))
    return payload


@app.get("/api/health-check/stats")
def get_stats(owner_id: str = Depends(get_owner_id), store: ReportStore = Depends(get_report_store)):
    """Get statistics over the caller's health checks"""
    stats = store.stats(owner_id)
    if stats["last_assessment"] is not None:
        stats["last_assessment"] = stats["last_assessment"].isoformat()
    return _camel_keys(stats)


@app.get("/api/health-check/{record_id}")
def get_health_check(
    record_id: str,
    owner_id: str = Depends(get_owner_id),
    store: ReportStore = Depends(get_report_store),
):
    """Get one of the caller's health checks"""
    try:
        record = store.load_record_for_owner(record_id, owner_id)
    except ReportNotFoundError:
        raise HTTPException(status_code=404, detail="Health check not found")
    return _record_payload(record)


@app.get("/api/health-check/{record_id}/export")
def export_health_check(
    record_id: str,
    format: str = Query("json"),
    owner_id: str = Depends(get_owner_id),
    store: ReportStore = Depends(get_report_store),
    exporter: ReportExporter = Depends(get_report_exporter),
):
    """Export one of the caller's health checks as JSON or Excel"""
    export_format = format.lower()
    if export_format not in config.export_formats:
        raise HTTPException(status_code=400, detail=f"Unsupported export format: {format}")

    try:
        record = store.load_record_for_owner(record_id, owner_id)
        path = exporter.export_report(record, format=export_format)
    except ReportNotFoundError:
        raise HTTPException(status_code=404, detail="Health check not found")
    except UnsupportedExportFormatError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Export of {record_id} failed: {e}")
        raise HTTPException(status_code=500, detail=f"Export failed: {str(e)}")

    return FileResponse(path, media_type=EXPORT_MEDIA_TYPES[export_format], filename=path.name)


@app.post("/api/shareable-reports/create", status_code=201)
def create_shareable_report(
    request: ShareRequest,
    owner_id: str = Depends(get_owner_id),
    store: ReportStore = Depends(get_report_store),
    registry: ShareRegistry = Depends(get_share_registry),
):
    """Create a public, expiring link to one of the caller's health checks"""
    try:
        record = store.load_record_for_owner(request.health_check_id, owner_id)
    except ReportNotFoundError:
        raise HTTPException(status_code=404, detail="Health check not found")

    try:
        report = registry.create(
            record,
            owner_id,
            request.company_name,
            expires_in_days=request.expires_in_days or config.share_expiry_days,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return _share_payload(report, registry)


@app.get("/api/shareable-reports/user/list")
def list_shareable_reports(
    owner_id: str = Depends(get_owner_id),
    registry: ShareRegistry = Depends(get_share_registry),
):
    """List the caller's shareable links"""
    reports = registry.list_for_owner(owner_id)
    return {"reports": [_share_payload(report, registry) for report in reports]}


@app.get("/api/shareable-reports/{company_slug}/{report_hash}")
def get_shareable_report(
    company_slug: str,
    report_hash: str,
    registry: ShareRegistry = Depends(get_share_registry),
):
    """Public view of a shared report"""
    try:
        report = registry.get(company_slug, report_hash)
    except ShareLinkNotFoundError:
        raise HTTPException(status_code=404, detail="Shareable report not found")
    except ShareLinkExpiredError:
        raise HTTPException(status_code=410, detail="This report has expired or is no longer available")

    return {
        "companyName": report.company_name,
        "healthCheck": _record_payload(report.record),
        "reportInfo": {
            "createdAt": report.created_at.isoformat(),
            "expiresAt": report.expires_at.isoformat(),
            "viewCount": report.view_count,
        },
    }


@app.delete("/api/shareable-reports/{report_hash}")
def revoke_shareable_report(
    report_hash: str,
    owner_id: str = Depends(get_owner_id),
    registry: ShareRegistry = Depends(get_share_registry),
):
    """Deactivate one of the caller's shareable links"""
    try:
        registry.revoke(report_hash, owner_id)
    except ShareLinkNotFoundError:
        raise HTTPException(status_code=404, detail="Shareable report not found")
    return {"status": "success", "message": "Shareable report deactivated"}


if __name__ == "__main__":
    port = int(os.getenv("PORT", 8000))
    uvicorn.run(app, host="0.0.0.0", port=port)
