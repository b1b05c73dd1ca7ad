from typing import List, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel
from sqlalchemy.orm import Session

from boohk.auth import require_role
from boohk.database import get_db
from boohk.models import Report, User
from boohk.routes.helpers import (
    ensure_company_access,
    get_or_404,
    require_company_id,
    parse_date_param,
    paginate,
    pdf_response,
)
from boohk.services import mailer, search
from boohk.services import report as report_service
from boohk.services.pdf import generate_report_pdf

router = APIRouter(prefix="/api/reports", tags=["reports"])

DATE_FIELDS = ("booking_start", "booking_end", "breakdate", "report_date")


class ReportRequest(BaseModel):
    company_id: Optional[str] = None
    report_type: Optional[str] = None
    status: Optional[str] = None
    product_id: Optional[str] = None
    site_name: Optional[str] = None
    site_code: Optional[str] = None
    booking_id: Optional[str] = None
    service_assignment_id: Optional[str] = None
    reservation_number: Optional[str] = None
    job_order_number: Optional[str] = None
    job_order_type: Optional[str] = None
    client_id: Optional[str] = None
    client_name: Optional[str] = None
    client_email: Optional[str] = None
    seller_id: Optional[str] = None
    sales: Optional[str] = None
    booking_start: Optional[str] = None
    booking_end: Optional[str] = None
    breakdate: Optional[str] = None
    report_date: Optional[str] = None
    category: Optional[str] = None
    subcategory: Optional[str] = None
    priority: Optional[str] = None
    completion_percentage: Optional[int] = None
    installation_status: Optional[str] = None
    installation_timeline: Optional[str] = None
    delay_reason: Optional[str] = None
    delay_days: Optional[str] = None
    description_of_work: Optional[str] = None
    location: Optional[str] = None
    assigned_to: Optional[str] = None
    requested_by: Optional[dict] = None
    product: Optional[dict] = None
    attachments: Optional[list] = None
    tags: Optional[List[str]] = None
    post: bool = False


class LatestByBookingRequest(BaseModel):
    bookingIds: List[str] = []


class SendEmailRequest(BaseModel):
    to: Optional[str] = None
    cc: Optional[List[str]] = None
    subject: Optional[str] = None
    body: Optional[str] = None
    replyTo: Optional[str] = None
    companyName: Optional[str] = None


def _payload(data: ReportRequest) -> dict:
    payload = data.dict(exclude_unset=True)
    payload.pop("post", None)
    for field in DATE_FIELDS:
        if field in payload:
            payload[field] = parse_date_param(payload[field], field)
    return payload


@router.post("")
async def create_report(
    data: ReportRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    """Create a draft report, or publish it straight away when post is true."""
    payload = _payload(data)
    ensure_company_access(user, payload.get("company_id") or user.company_id)
    try:
        if data.post:
            report = report_service.post_report(db, payload, user)
        else:
            report = report_service.create_report(db, payload, user)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "report": report.to_dict()}


@router.get("")
async def list_reports(
    companyId: Optional[str] = None,
    status: Optional[str] = None,
    reportType: Optional[str] = None,
    searchQuery: Optional[str] = None,
    productId: Optional[str] = None,
    page: int = 1,
    pageSize: int = 10,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics", "sales")),
):
    require_company_id(companyId, user)
    query = db.query(Report).filter(Report.company_id == companyId, Report.deleted == False)
    if productId:
        query = query.filter(Report.product_id == productId)
    query = report_service.filter_reports(query, status=status, report_type=reportType, search_query=searchQuery)

    result = paginate(query.order_by(Report.created_at.desc()), page, pageSize)
    result["reports"] = [r.to_dict() for r in result.pop("items")]
    return result


@router.get("/by-booking")
async def list_reports_per_booking(
    companyId: Optional[str] = None,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics", "sales")),
):
    require_company_id(companyId, user)
    grouped = report_service.reports_per_booking(db, companyId)
    return {
        "reports": {booking_id: [r.to_dict() for r in rows] for booking_id, rows in grouped.items()}
    }


@router.post("/latest-by-booking")
async def latest_reports_by_booking(
    data: LatestByBookingRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics", "sales")),
):
    latest = report_service.latest_reports_by_booking(db, data.bookingIds)
    reports = {}
    for booking_id, report in latest.items():
        if report is not None and not user.is_admin and report.company_id != user.company_id:
            report = None
        reports[booking_id] = report.to_dict() if report else None
    return {"reports": reports}


@router.get("/{report_id}")
async def get_report(
    report_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics", "sales")),
):
    report = get_or_404(db, Report, report_id, "Report", user=user)
    data = report.to_dict()
    data["completion"] = report_service.completion_percentage(report)
    return data


@router.patch("/{report_id}")
async def update_report(
    report_id: str,
    data: ReportRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    report = get_or_404(db, Report, report_id, "Report", user=user)
    payload = _payload(data)
    payload.pop("company_id", None)
    payload.pop("report_type", None)
    try:
        report = report_service.update_report(db, report, payload)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return {"success": True, "report": report.to_dict()}


@router.delete("/{report_id}")
async def delete_report(
    report_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics")),
):
    report = get_or_404(db, Report, report_id, "Report", user=user)
    report.deleted = True
    db.commit()

    search.try_delete_object("reports", report.id)
    return {"success": True}


@router.get("/{report_id}/pdf")
async def download_report_pdf(
    report_id: str,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics", "sales")),
):
    report = get_or_404(db, Report, report_id, "Report", user=user)
    return pdf_response(generate_report_pdf(report), f"Report_{report.report_number}.pdf")


@router.post("/{report_id}/send-email")
async def send_report_email(
    report_id: str,
    data: SendEmailRequest,
    db: Session = Depends(get_db),
    user: User = Depends(require_role("logistics", "sales")),
):
    """Email the report PDF to the client. The recipient defaults to the report's client email."""
    report = get_or_404(db, Report, report_id, "Report", user=user)

    to = (data.to or report.client_email or "").strip()
    if not to:
        raise HTTPException(status_code=400, detail="Missing report or client email address")
    if not mailer.is_valid_email(to):
        raise HTTPException(status_code=400, detail="Invalid 'To' email address format")
    cc = [address.strip() for address in data.cc or [] if address and address.strip()]
    for address in cc:
        if not mailer.is_valid_email(address):
            raise HTTPException(status_code=400, detail=f"Invalid 'CC' email address format: {address}")

    subject = (data.subject or "").strip() or report_service.default_email_subject(report, data.companyName)
    body = (data.body or "").strip() or (
        f"Please find attached the {report_service.report_type_display(report.report_type).lower()} "
        f"for {report.site_name or 'your site'}."
    )
    filename = f"Report_{report.report_number}.pdf"

    try:
        mailer.send_email(
            to,
            subject,
            mailer.text_to_html(body),
            cc=cc or None,
            reply_to=(data.replyTo or "").strip() or user.email,
            attachments=[mailer.pdf_attachment(filename, generate_report_pdf(report))],
        )
    except mailer.EmailServiceError as e:
        raise HTTPException(status_code=500, detail=str(e))

    report_service.record_report_email(
        report, to, subject, user, cc=cc, body=body, attachment_names=[filename]
    )
    return {"success": True, "message": "Email sent successfully with 1 attachment(s)"}
