"""
Report Exporter for stored health checks.

Writes a HealthCheckRecord to disk as JSON (the camelCase shape stored
reports use) or as an Excel workbook with one sheet per report section.
"""

import json
import logging
from pathlib import Path

import pandas as pd

from ..models.compliance_result import HealthCheckRecord
from .exceptions import UnsupportedExportFormatError
from .question_catalog import get_question

logger = logging.getLogger(__name__)

EXPORT_EXTENSIONS = {
    "json": ".json",
    "excel": ".xlsx",
}


class ReportExporter:
    """Exports health check records to JSON or Excel files."""

    def __init__(self, output_directory: str = "./output"):
        self.output_directory = Path(output_directory)
        self.logger = logging.getLogger(__name__)

    def default_path(self, record: HealthCheckRecord, format: str = "json") -> Path:
        """Path an export lands at when the caller does not choose one."""
        extension = EXPORT_EXTENSIONS.get(format.lower())
        if extension is None:
            raise UnsupportedExportFormatError(format)
        return self.output_directory / f"health-check-{record.id}{extension}"

    def export_report(self, record: HealthCheckRecord, output_path: str = None, format: str = "json") -> Path:
        """Export a health check record to file."""
        output_path = Path(output_path) if output_path else self.default_path(record, format)
        output_path.parent.mkdir(parents=True, exist_ok=True)

        if format.lower() == "json":
            with open(output_path, "w", encoding="utf-8") as f:
                json.dump(record.model_dump(mode="json", by_alias=True), f, indent=2, ensure_ascii=False)
        elif format.lower() == "excel":
            self._export_report_to_excel(record, output_path)
        else:
            raise UnsupportedExportFormatError(format)

        self.logger.info(f"Report exported to {output_path}")
        return output_path

    def _export_report_to_excel(self, record: HealthCheckRecord, output_path: Path):
        """Export report to Excel format."""
        result = record.result

        with pd.ExcelWriter(output_path, engine="openpyxl") as writer:
            # Summary sheet
            summary_data = {
                "Metric": [
                    "Report ID",
                    "Assessment Date",
                    "Overall Score",
                    "Risk Level",
                    "Questions Answered",
                    "Strengths",
                    "Red Flags",
                    "Forecast Risks",
                ],
                "Value": [
                    record.id,
                    record.assessment_date.isoformat(),
                    result.overall_score,
                    record.risk_level,
                    len(record.answers),
                    len(result.strengths),
                    len(result.red_flags),
                    len(result.risk_forecast.risks),
                ],
            }
            pd.DataFrame(summary_data).to_excel(writer, sheet_name="Summary", index=False)

            # Category scores sheet
            category_rows = [
                {
                    "Category": c.category,
                    "Score": c.score,
                    "Status": c.status,
                    "Insight": c.insight,
                }
                for c in result.category_scores
            ]
            pd.DataFrame(category_rows).to_excel(writer, sheet_name="Category Scores", index=False)

            # Answers sheet
            answer_rows = []
            for question_id, answer in record.answers.items():
                question = get_question(int(question_id)) if question_id.isdigit() else None
                answer_rows.append({
                    "Question ID": question_id,
                    "Question": question.prompt if question else "",
                    "Answer": answer,
                    "Follow-up": record.follow_up_answers.get(question_id, ""),
                })
            if answer_rows:
                pd.DataFrame(answer_rows).to_excel(writer, sheet_name="Answers", index=False)

            if result.strengths:
                pd.DataFrame({"Strength": result.strengths}).to_excel(writer, sheet_name="Strengths", index=False)

            if result.red_flags:
                pd.DataFrame({"Red Flag": result.red_flags}).to_excel(writer, sheet_name="Red Flags", index=False)

            if result.risk_forecast.risks:
                risks_df = pd.DataFrame([
                    {"Risk": r.type, "Penalty": r.penalty, "Probability": r.probability}
                    for r in result.risk_forecast.risks
                ])
                risks_df.to_excel(writer, sheet_name="Risk Forecast", index=False)
