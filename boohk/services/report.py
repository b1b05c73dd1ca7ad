"""
Report Service

Handles:
- Report numbering (RP- + epoch ms)
- Creation and posting of logistics service reports
- Attachment cleanup and partial updates
- Listing filters and per-booking lookups
- Search indexing of reports and of report emails
"""

import logging
import uuid
from typing import Dict, List, Optional

from sqlalchemy import or_
from sqlalchemy.orm import Session

from boohk.models import Report
from boohk.services import search
from boohk.timeutil import epoch_ms, isoformat, utc_now

logger = logging.getLogger(__name__)

REPORT_FIELDS = [
    "product_id",
    "site_name",
    "site_code",
    "booking_id",
    "service_assignment_id",
    "reservation_number",
    "job_order_number",
    "job_order_type",
    "client_id",
    "client_name",
    "client_email",
    "seller_id",
    "sales",
    "booking_start",
    "booking_end",
    "breakdate",
    "report_date",
    "category",
    "subcategory",
    "priority",
    "completion_percentage",
    "installation_status",
    "installation_timeline",
    "delay_reason",
    "delay_days",
    "description_of_work",
    "location",
    "assigned_to",
    "requested_by",
    "product",
    "tags",
]

# Blank values for these are dropped rather than stored
TRIMMED_FIELDS = [
    "installation_status",
    "installation_timeline",
    "delay_reason",
    "delay_days",
    "description_of_work",
    "reservation_number",
    "booking_id",
]


def generate_report_number() -> str:
    return f"RP-{epoch_ms()}"


def clean_attachments(attachments: Optional[list]) -> List[dict]:
    """Keep only uploaded attachments (with a URL and file name) and fill defaults."""
    cleaned = []
    for attachment in attachments or []:
        if not attachment or not attachment.get("fileUrl") or not attachment.get("fileName"):
            continue
        item = {
            "note": attachment.get("note") or "",
            "fileName": attachment["fileName"],
            "fileType": attachment.get("fileType") or "unknown",
            "fileUrl": attachment["fileUrl"],
        }
        if attachment.get("label"):
            item["label"] = attachment["label"]
        cleaned.append(item)
    return cleaned


def _clean_value(field: str, value):
    if field in TRIMMED_FIELDS and isinstance(value, str):
        value = value.strip()
        return value or None
    return value


def create_report(db: Session, data: dict, user, status: Optional[str] = None) -> Report:
    """
    Create a report, dropping unuploaded attachments and blank optional fields.

    Raises:
        ValueError: If report_type or status is invalid
    """
    report_type = data.get("report_type")
    if report_type not in Report.REPORT_TYPES:
        raise ValueError(f"Invalid report type: {report_type}")
    status = status or data.get("status") or "draft"
    if status not in Report.STATUSES:
        raise ValueError(f"Invalid report status: {status}")

    report = Report(
        report_number=generate_report_number(),
        company_id=data.get("company_id") or user.company_id,
        report_type=report_type,
        status=status,
        attachments=clean_attachments(data.get("attachments")),
        tags=[],
        created_by=user.id,
        created_by_name=data.get("created_by_name") or user.full_name,
    )
    for field in REPORT_FIELDS:
        value = _clean_value(field, data.get(field))
        if value is not None:
            setattr(report, field, value)

    db.add(report)
    db.commit()
    db.refresh(report)
    logger.info(f"Created {report.report_type} {report.report_number} ({report.status})")

    index_report(report)
    return report


def post_report(db: Session, data: dict, user) -> Report:
    """Create a report that is published immediately."""
    return create_report(db, data, user, status="posted")


def update_report(db: Session, report: Report, data: dict) -> Report:
    """
    Apply a partial update. None and empty-string values leave the field unchanged.

    Raises:
        ValueError: If status is invalid
    """
    status = data.get("status")
    if status:
        if status not in Report.STATUSES:
            raise ValueError(f"Invalid report status: {status}")
        report.status = status

    for field in REPORT_FIELDS:
        if field not in data:
            continue
        value = _clean_value(field, data[field])
        if value is None or value == "":
            continue
        setattr(report, field, value)

    if data.get("attachments") is not None:
        report.attachments = clean_attachments(data["attachments"])

    report.updated_at = utc_now()
    db.commit()
    db.refresh(report)

    index_report(report)
    return report


def filter_reports(query, status: Optional[str] = None, report_type: Optional[str] = None,
                   search_query: Optional[str] = None):
    """
    Narrow a Report query.

    status "published" matches every non-draft report; "all" and "All"
    disable the status and report_type filters respectively.
    """
    if status and status != "all":
        if status == "published":
            query = query.filter(Report.status != "draft")
        else:
            query = query.filter(Report.status == status)

    if report_type and report_type != "All":
        query = query.filter(Report.report_type == report_type)

    term = (search_query or "").strip()
    if term:
        pattern = f"%{term}%"
        query = query.filter(or_(
            Report.site_name.ilike(pattern),
            Report.report_type.ilike(pattern),
            Report.created_by_name.ilike(pattern),
            Report.id.ilike(pattern),
            Report.report_number.ilike(pattern),
            Report.client_name.ilike(pattern),
        ))
    return query


def latest_reports_by_booking(db: Session, booking_ids: List[str]) -> Dict[str, Optional[Report]]:
    """Most recent report per booking id, None where a booking has none."""
    latest = {}
    for booking_id in booking_ids:
        latest[booking_id] = (
            db.query(Report)
            .filter(Report.booking_id == booking_id, Report.deleted == False)
            .order_by(Report.created_at.desc())
            .first()
        )
    return latest


def reports_per_booking(db: Session, company_id: str) -> Dict[str, List[Report]]:
    """Group a company's reports by booking, newest first. Reports without a booking are skipped."""
    grouped = {}
    rows = (
        db.query(Report)
        .filter(Report.company_id == company_id, Report.deleted == False)
        .order_by(Report.created_at.desc())
        .all()
    )
    for report in rows:
        if report.booking_id:
            grouped.setdefault(report.booking_id, []).append(report)
    return grouped


def completion_percentage(report: Report) -> int:
    """
    Progress shown on a report.

    installation_status carries the percentage when set; otherwise
    completion_percentage is used, then 0 for installation reports and
    100 for everything else.
    """
    if report.installation_status is not None:
        try:
            return int(str(report.installation_status).strip())
        except ValueError:
            return 0
    if report.completion_percentage is not None:
        return report.completion_percentage
    return 0 if report.report_type == "installation-report" else 100


def report_type_display(report_type: Optional[str]) -> str:
    """'installation-report' -> 'Installation Report'."""
    if not report_type:
        return "Report"
    return " ".join(word.capitalize() for word in report_type.split("-"))


def default_email_subject(report: Report, company_name: Optional[str] = None) -> str:
    return f"Report: {report_type_display(report.report_type)} - {company_name or 'Company'}"


def report_search_record(report: Report) -> dict:
    return {
        "objectID": report.id,
        "report_id": report.report_number,
        "siteName": report.site_name,
        "reportType": report.report_type,
        "client": report.client_name,
        "createdByName": report.created_by_name,
        "status": report.status,
        "booking_id": report.booking_id,
        "company_id": report.company_id,
        "created": isoformat(report.created_at) or "",
    }


def index_report(report: Report) -> bool:
    return search.try_save_object("reports", report_search_record(report))


def record_report_email(report: Report, to: str, subject: str, user, cc: Optional[List[str]] = None,
                        body: str = "", attachment_names: Optional[List[str]] = None) -> bool:
    """Index a sent report email so it shows up in the company's sent mail."""
    now = isoformat(utc_now())
    return search.try_save_object("emails", {
        "objectID": uuid.uuid4().hex,
        "email_type": "report",
        "reportId": report.id,
        "to": [to],
        "cc": cc or None,
        "replyTo": user.email,
        "subject": subject,
        "body": body,
        "attachments": attachment_names or [],
        "status": "sent",
        "userId": user.email,
        "company_id": report.company_id,
        "sentAt": now,
        "created": now,
    })
