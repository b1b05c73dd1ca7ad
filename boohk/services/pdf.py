"""
PDF Generation Service

Renders quotations, cost estimates, proposals, service assignments and
service reports with ReportLab. Every generator returns the PDF as bytes
so callers can stream it, attach it to an email or hand it to the temp
PDF store.
"""

import os
from io import BytesIO

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import inch
from reportlab.platypus import (
    SimpleDocTemplate,
    Paragraph,
    Spacer,
    Table,
    TableStyle,
    HRFlowable,
)
from reportlab.lib.enums import TA_CENTER

from boohk.models import Quotation, CostEstimate, Proposal, ServiceAssignment, Report
from boohk.services.pricing import format_currency
from boohk.services.report import completion_percentage, report_type_display
from boohk.timeutil import localdate, utc_now

COMPANY_NAME = os.getenv("COMPANY_NAME", "Boohk")
COMPANY_CONTACT = os.getenv("COMPANY_CONTACT", "sales@boohk.ph")

HEADER_BG = colors.HexColor("#e2e8f0")
TEXT_DARK = colors.HexColor("#2d3748")
TEXT_MUTED = colors.HexColor("#718096")
ACCENT = colors.HexColor("#3182ce")


def _styles() -> dict:
    styles = getSampleStyleSheet()
    return {
        "title": ParagraphStyle(
            "DocTitle",
            parent=styles["Heading1"],
            fontSize=22,
            spaceAfter=6,
            textColor=colors.HexColor("#1a365d"),
            alignment=TA_CENTER,
        ),
        "subtitle": ParagraphStyle(
            "DocSubtitle",
            parent=styles["Normal"],
            fontSize=12,
            textColor=colors.HexColor("#4a5568"),
            alignment=TA_CENTER,
        ),
        "section": ParagraphStyle(
            "SectionHeader",
            parent=styles["Heading2"],
            fontSize=13,
            spaceBefore=16,
            spaceAfter=8,
            textColor=TEXT_DARK,
        ),
        "body": ParagraphStyle(
            "DocBody",
            parent=styles["Normal"],
            fontSize=10,
            leading=14,
            textColor=TEXT_DARK,
        ),
        "small": ParagraphStyle(
            "DocSmall",
            parent=styles["Normal"],
            fontSize=9,
            textColor=TEXT_MUTED,
        ),
        "footer": ParagraphStyle(
            "DocFooter",
            parent=styles["Normal"],
            fontSize=9,
            textColor=TEXT_MUTED,
            alignment=TA_CENTER,
        ),
    }


def _grid_style(total_row: bool = False) -> TableStyle:
    commands = [
        # Header
        ("BACKGROUND", (0, 0), (-1, 0), HEADER_BG),
        ("TEXTCOLOR", (0, 0), (-1, 0), TEXT_DARK),
        ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
        ("FONTSIZE", (0, 0), (-1, 0), 10),
        ("ALIGN", (0, 0), (-1, 0), "CENTER"),
        # Body
        ("FONTSIZE", (0, 1), (-1, -1), 9),
        ("ALIGN", (1, 1), (-1, -1), "RIGHT"),
        ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ("TOPPADDING", (0, 0), (-1, -1), 6),
        ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
    ]
    if total_row:
        commands += [
            ("GRID", (0, 0), (-1, -2), 0.5, HEADER_BG),
            ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
            ("LINEABOVE", (0, -1), (-1, -1), 1, colors.HexColor("#a0aec0")),
        ]
    else:
        commands.append(("GRID", (0, 0), (-1, -1), 0.5, HEADER_BG))
    return TableStyle(commands)


def _info_table(rows, styles) -> Table:
    data = [
        [Paragraph(f"<b>{label}:</b> {value}", styles["body"]) for label, value in row]
        for row in rows
    ]
    table = Table(data, colWidths=[3.5 * inch, 3.5 * inch])
    table.setStyle(
        TableStyle(
            [
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
                ("TOPPADDING", (0, 0), (-1, -1), 3),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 3),
            ]
        )
    )
    return table


def _rule(thickness=1, color=HEADER_BG) -> HRFlowable:
    return HRFlowable(width="100%", thickness=thickness, color=color, spaceBefore=5, spaceAfter=15)


def _header(story, styles, document_title: str):
    story.append(Paragraph(COMPANY_NAME, styles["title"]))
    story.append(Paragraph(document_title, styles["subtitle"]))
    story.append(Spacer(1, 0.25 * inch))
    story.append(_rule(thickness=2, color=ACCENT))


def _client_block(story, styles, name, company=None, email=None, phone=None, address=None, designation=None):
    story.append(Paragraph("PREPARED FOR", styles["section"]))
    client_info = f"<b>{company or name or 'N/A'}</b><br/>"
    if address:
        client_info += f"{address}<br/>"
    if name and company:
        client_info += f"<br/><b>Attn:</b> {name}"
        if designation:
            client_info += f", {designation}"
        client_info += "<br/>"
    if email:
        client_info += f"<b>Email:</b> {email}<br/>"
    if phone:
        client_info += f"<b>Phone:</b> {phone}<br/>"
    story.append(Paragraph(client_info, styles["body"]))


def _footer(story, styles):
    story.append(Spacer(1, 0.4 * inch))
    story.append(_rule())
    story.append(Paragraph(f"{COMPANY_NAME} | {COMPANY_CONTACT}", styles["footer"]))


def _build(story) -> bytes:
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        rightMargin=0.75 * inch,
        leftMargin=0.75 * inch,
        topMargin=0.75 * inch,
        bottomMargin=0.75 * inch,
    )
    doc.build(story)
    return buffer.getvalue()


def generate_quotation_pdf(quotation: Quotation) -> bytes:
    """Render a quotation for one site with its rental period and total."""
    styles = _styles()
    story = []
    _header(story, styles, "QUOTATION")

    story.append(_info_table(
        [
            [("Quotation #", quotation.quotation_number), ("Date", localdate(quotation.created_at or utc_now()))],
            [("Valid Until", localdate(quotation.valid_until) or "N/A"), ("Status", (quotation.status or "").title())],
        ],
        styles,
    ))
    _client_block(
        story, styles,
        quotation.client_name,
        company=quotation.client_company_name,
        email=quotation.client_email,
        phone=quotation.client_phone,
        address=quotation.client_address,
        designation=quotation.client_designation,
    )

    item = quotation.items or {}
    story.append(Paragraph("SITE", styles["section"]))
    site_data = [
        ["Site", "Location", "Period", "Monthly Rate", "Total"],
        [
            Paragraph(item.get("name") or "N/A", styles["body"]),
            Paragraph(item.get("location") or "N/A", styles["body"]),
            f"{localdate(quotation.start_date) or 'N/A'} - {localdate(quotation.end_date) or 'N/A'}",
            format_currency(item.get("price")),
            format_currency(quotation.total_amount),
        ],
    ]
    site_table = Table(site_data, colWidths=[1.6 * inch, 1.6 * inch, 1.5 * inch, 1.1 * inch, 1.2 * inch])
    site_table.setStyle(_grid_style())
    story.append(site_table)

    summary_data = [
        ["Duration:", f"{quotation.duration_days or 0} day(s)"],
        [f"VAT ({quotation.vat_rate or 0}%):", format_currency(quotation.vat_amount)],
        ["TOTAL:", format_currency(quotation.total_amount)],
    ]
    story.append(Spacer(1, 0.2 * inch))
    story.append(_summary_table(summary_data))

    if quotation.notes:
        story.append(Paragraph("NOTES", styles["section"]))
        story.append(Paragraph(quotation.notes, styles["body"]))

    story.append(Paragraph("TERMS & CONDITIONS", styles["section"]))
    terms = """
    <b>1. Validity:</b> This quotation is valid until the date stated above.<br/><br/>
    <b>2. Booking:</b> Sites are reserved only upon written acceptance and receipt of the signed quotation.<br/><br/>
    <b>3. Materials:</b> Final artwork must be submitted before the installation date.
    """
    story.append(Paragraph(terms, styles["small"]))

    _footer(story, styles)
    return _build(story)


def _summary_table(rows) -> Table:
    table = Table(rows, colWidths=[5 * inch, 1.5 * inch])
    table.setStyle(
        TableStyle(
            [
                ("ALIGN", (0, 0), (0, -1), "RIGHT"),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
                ("FONTSIZE", (0, 0), (-1, -1), 11),
                ("TOPPADDING", (0, 0), (-1, -1), 6),
                ("BOTTOMPADDING", (0, 0), (-1, -1), 6),
                # Total row styling
                ("FONTNAME", (0, -1), (-1, -1), "Helvetica-Bold"),
                ("FONTSIZE", (0, -1), (-1, -1), 13),
                ("TEXTCOLOR", (0, -1), (-1, -1), colors.HexColor("#1a365d")),
                ("LINEABOVE", (0, -1), (-1, -1), 2, ACCENT),
                ("TOPPADDING", (0, -1), (-1, -1), 10),
            ]
        )
    )
    return table


def generate_cost_estimate_pdf(estimate: CostEstimate) -> bytes:
    """Render a cost estimate with its line items grouped in one table."""
    styles = _styles()
    story = []
    _header(story, styles, "COST ESTIMATE")

    story.append(_info_table(
        [
            [("Estimate #", estimate.cost_estimate_number), ("Date", localdate(estimate.created_at or utc_now()))],
            [("Title", estimate.title), ("Valid Until", localdate(estimate.valid_until) or "N/A")],
        ],
        styles,
    ))

    client = estimate.client or {}
    _client_block(
        story, styles,
        client.get("name"),
        company=client.get("company"),
        email=client.get("email"),
        phone=client.get("phone"),
        address=client.get("address"),
        designation=client.get("designation"),
    )

    story.append(Paragraph("COST BREAKDOWN", styles["section"]))
    line_data = [["Description", "Category", "Qty", "Unit Price", "Total"]]
    for item in estimate.line_items or []:
        line_data.append(
            [
                Paragraph(item.get("description") or "", styles["body"]),
                Paragraph(item.get("category") or "", styles["small"]),
                f"{float(item.get('quantity') or 0):,.2f}",
                format_currency(item.get("unit_price")),
                format_currency(item.get("total")),
            ]
        )
    line_data.append(["", "", "", "Total:", format_currency(estimate.total_amount)])

    line_table = Table(line_data, colWidths=[2.4 * inch, 1.5 * inch, 0.6 * inch, 1.1 * inch, 1.2 * inch])
    line_table.setStyle(_grid_style(total_row=True))
    story.append(line_table)

    if estimate.custom_message:
        story.append(Spacer(1, 0.2 * inch))
        story.append(Paragraph(estimate.custom_message, styles["body"]))

    _footer(story, styles)
    return _build(story)


def generate_proposal_pdf(proposal: Proposal) -> bytes:
    """Render a proposal listing each proposed site and the total."""
    styles = _styles()
    story = []
    _header(story, styles, "PROPOSAL")

    story.append(_info_table(
        [
            [("Proposal", proposal.title), ("Date", localdate(proposal.created_at or utc_now()))],
            [("Valid Until", localdate(proposal.valid_until) or "N/A"), ("Status", (proposal.status or "").title())],
        ],
        styles,
    ))

    client = proposal.client or {}
    _client_block(
        story, styles,
        client.get("contactPerson") or client.get("name"),
        company=client.get("company"),
        email=client.get("email"),
        phone=client.get("phone"),
        address=client.get("address"),
    )

    if proposal.custom_message:
        story.append(Spacer(1, 0.15 * inch))
        story.append(Paragraph(proposal.custom_message, styles["body"]))

    story.append(Paragraph("PROPOSED SITES", styles["section"]))
    site_data = [["Site", "Location", "Type", "Monthly Rate"]]
    for product in proposal.products or []:
        site_data.append(
            [
                Paragraph(product.get("name") or "N/A", styles["body"]),
                Paragraph(product.get("location") or "N/A", styles["body"]),
                (product.get("type") or "").title(),
                format_currency(product.get("price")),
            ]
        )
    site_data.append(["", "", "Total:", format_currency(proposal.total_amount)])

    site_table = Table(site_data, colWidths=[2.2 * inch, 2.4 * inch, 1 * inch, 1.3 * inch])
    site_table.setStyle(_grid_style(total_row=True))
    story.append(site_table)

    _footer(story, styles)
    return _build(story)


def generate_service_assignment_pdf(assignment: ServiceAssignment) -> bytes:
    styles = _styles()
    story = []
    _header(story, styles, "SERVICE ASSIGNMENT")

    story.append(_info_table(
        [
            [("SA #", assignment.sa_number), ("Date", localdate(assignment.created_at or utc_now()))],
            [("Service Type", assignment.service_type), ("Status", assignment.status)],
            [("Site", assignment.site_name or "N/A"), ("Assigned To", assignment.assigned_to or "N/A")],
            [
                ("Start", localdate(assignment.start_date) or "N/A"),
                ("End", localdate(assignment.end_date) or "N/A"),
            ],
        ],
        styles,
    ))

    crew = assignment.crew or []
    if crew:
        story.append(Paragraph("CREW", styles["section"]))
        crew_data = [["Name", "Role"]]
        for member in crew:
            if isinstance(member, dict):
                crew_data.append([member.get("name") or "", member.get("role") or ""])
            else:
                crew_data.append([str(member), ""])
        crew_table = Table(crew_data, colWidths=[3.5 * inch, 3 * inch])
        crew_table.setStyle(_grid_style())
        story.append(crew_table)

    if assignment.remarks:
        story.append(Paragraph("REMARKS", styles["section"]))
        story.append(Paragraph(assignment.remarks, styles["body"]))

    _footer(story, styles)
    return _build(story)


def _attachment_label(attachment: dict, index: int) -> str:
    label = attachment.get("label") or attachment.get("fileName") or f"Attachment {index}"
    note = attachment.get("note")
    return f"{label} - {note}" if note else label


def generate_report_pdf(report: Report) -> bytes:
    """Render a service report: site, booking, progress and attachment list."""
    styles = _styles()
    story = []
    _header(story, styles, report_type_display(report.report_type).upper())

    product = report.product or {}
    story.append(_info_table(
        [
            [("Report #", report.report_number), ("Date", localdate(report.report_date or report.created_at or utc_now()))],
            [("Site", report.site_name or "N/A"), ("Location", report.location or product.get("location") or "N/A")],
            [("Client", report.client_name or "N/A"), ("Job Order", report.job_order_number or "N/A")],
            [
                ("Booking", f"{localdate(report.booking_start) or 'N/A'} - {localdate(report.booking_end) or 'N/A'}"),
                ("Prepared By", report.created_by_name or "N/A"),
            ],
        ],
        styles,
    ))

    completion = completion_percentage(report)
    story.append(Paragraph("STATUS", styles["section"]))
    status_lines = [f"<b>Completion:</b> {completion}%"]
    if report.installation_timeline:
        status_lines.append(f"<b>Timeline:</b> {report.installation_timeline}")
    if report.delay_reason:
        delay = f"{report.delay_days} day(s): " if report.delay_days else ""
        status_lines.append(f"<b>Delay:</b> {delay}{report.delay_reason}")
    story.append(Paragraph("<br/>".join(status_lines), styles["body"]))

    if report.description_of_work:
        story.append(Paragraph("DESCRIPTION OF WORK", styles["section"]))
        story.append(Paragraph(report.description_of_work, styles["body"]))

    attachments = report.attachments or []
    if attachments:
        story.append(Paragraph("ATTACHMENTS", styles["section"]))
        attachment_data = [["#", "File", "Type"]]
        for index, attachment in enumerate(attachments, start=1):
            attachment_data.append([
                str(index),
                Paragraph(_attachment_label(attachment, index), styles["body"]),
                attachment.get("fileType") or "unknown",
            ])
        attachment_table = Table(attachment_data, colWidths=[0.5 * inch, 4.7 * inch, 1.7 * inch])
        attachment_table.setStyle(_grid_style())
        story.append(attachment_table)

    _footer(story, styles)
    return _build(story)
