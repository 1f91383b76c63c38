"""Exceptions raised by the report store, share links and exporter."""


class HealthCheckError(Exception):
    """Base class for health check errors."""


class ReportNotFoundError(HealthCheckError):
    def __init__(self, record_id: str):
        self.record_id = record_id
        super().__init__(f"Health check report not found: {record_id}")


class ShareLinkNotFoundError(HealthCheckError):
    def __init__(self, report_hash: str):
        self.report_hash = report_hash
        super().__init__(f"Shareable report not found: {report_hash}")


class ShareLinkExpiredError(HealthCheckError):
    def __init__(self, report_hash: str):
        self.report_hash = report_hash
        super().__init__(f"Shareable report has expired or is no longer available: {report_hash}")


class UnsupportedExportFormatError(HealthCheckError, ValueError):
    def __init__(self, export_format: str):
        self.export_format = export_format
        super().__init__(f"Unsupported export format: {export_format}")
