"""
Khata statement export.

One rendering model (``KhataStatement``) is built from a customer and its
entries; both the PDF and the plaintext email body are produced from it, so
totals are computed exactly once per export.
"""
from dataclasses import dataclass
from decimal import Decimal
from io import BytesIO
from typing import List, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet, ParagraphStyle
from reportlab.lib.units import mm
from reportlab.platypus import SimpleDocTemplate, Table, TableStyle, Paragraph, Spacer

from app.models.customer import Customer
from app.models.entry import Entry
from app.services.ledger_service import LedgerTotals, compute_totals

STATEMENT_TITLE = "Khata Summary"
DATE_FORMAT = "%Y-%m-%d %H:%M"
TABLE_HEADER = ("Date", "Type", "Amount", "Note")


def format_amount(value) -> str:
    return f"{Decimal(str(value)):.2f}"


@dataclass(frozen=True)
class StatementRow:
    date: str
    kind: str
    amount: str
    note: str


@dataclass(frozen=True)
class KhataStatement:
    title: str
    customer_id: int
    customer_name: str
    identity_lines: Tuple[str, ...]
    totals: LedgerTotals
    rows: Tuple[StatementRow, ...]

    @property
    def total_lines(self) -> Tuple[str, str, str]:
        return (
            f"Total Debit : {format_amount(self.totals.debit)}",
            f"Total Credit: {format_amount(self.totals.credit)}",
            f"Balance     : {format_amount(self.totals.balance)}",
        )


def build_statement(customer: Customer, entries: Sequence[Entry]) -> KhataStatement:
    """Rendering model for a customer's ledger. Entries are expected oldest first."""
    rows = tuple(
        StatementRow(
            date=e.created_at.strftime(DATE_FORMAT) if e.created_at else "",
            kind=e.kind.value,
            amount=format_amount(e.amount),
            note=e.note or "",
        )
        for e in entries
    )
    return KhataStatement(
        title=STATEMENT_TITLE,
        customer_id=customer.id,
        customer_name=customer.name,
        identity_lines=(
            f"Customer: {customer.name}",
            f"Phone: {customer.phone or ''}",
            f"Email: {customer.email or ''}",
        ),
        totals=compute_totals(entries),
        rows=rows,
    )


def pdf_filename(customer_id: int) -> str:
    return f"khata-customer-{customer_id}.pdf"


def render_khata_pdf(statement: KhataStatement) -> bytes:
    """
    Render the statement as an A4 PDF.

    The entry table splits across pages with its header repeated. The
    document is built in invariant mode, so identical statements produce
    identical bytes.
    """
    buffer = BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=15 * mm,
        bottomMargin=15 * mm,
        leftMargin=10 * mm,
        rightMargin=10 * mm,
        title=statement.title,
        invariant=1,
    )

    styles = getSampleStyleSheet()
    title_style = ParagraphStyle(
        'KhataTitle',
        parent=styles['Heading1'],
        fontName='Helvetica-Bold',
        fontSize=16,
        spaceAfter=8,
    )
    normal_style = ParagraphStyle(
        'KhataNormal',
        parent=styles['Normal'],
        fontName='Helvetica',
        fontSize=12,
        leading=15,
    )
    cell_style = ParagraphStyle(
        'KhataCell',
        parent=styles['Normal'],
        fontName='Helvetica',
        fontSize=11,
        leading=13,
    )

    elements = [Paragraph(escape(statement.title), title_style)]
    for line in statement.identity_lines:
        elements.append(Paragraph(escape(line), normal_style))
    elements.append(Spacer(1, 4 * mm))
    for line in statement.total_lines:
        # Keep the aligned colons of the total lines
        elements.append(Paragraph(escape(line).replace(" ", "&nbsp;"), normal_style))
    elements.append(Spacer(1, 4 * mm))

    data: List[list] = [list(TABLE_HEADER)]
    for row in statement.rows:
        data.append([row.date, row.kind, row.amount, Paragraph(escape(row.note), cell_style)])

    table = Table(data, colWidths=[35 * mm, 25 * mm, 30 * mm, 100 * mm], repeatRows=1)
    table.setStyle(TableStyle([
        ('FONTNAME', (0, 0), (-1, 0), 'Helvetica-Bold'),
        ('FONTSIZE', (0, 0), (-1, 0), 12),
        ('FONTNAME', (0, 1), (-1, -1), 'Helvetica'),
        ('FONTSIZE', (0, 1), (-1, -1), 11),
        ('BACKGROUND', (0, 0), (-1, 0), colors.HexColor('#f3f4f6')),
        ('GRID', (0, 0), (-1, -1), 0.5, colors.black),
        ('ALIGN', (2, 1), (2, -1), 'RIGHT'),
        ('VALIGN', (0, 0), (-1, -1), 'TOP'),
        ('TOPPADDING', (0, 0), (-1, -1), 3),
        ('BOTTOMPADDING', (0, 0), (-1, -1), 3),
    ]))
    elements.append(table)

    doc.build(elements)
    return buffer.getvalue()


def format_email_body(statement: KhataStatement, sender_name: str) -> str:
    """Plaintext summary sent alongside the PDF attachment."""
    debit_line, credit_line, balance_line = statement.total_lines
    return (
        f"Assalam o Alaikum {statement.customer_name},\n\n"
        "Here is your khata summary:\n\n"
        f"{debit_line}\n"
        f"{credit_line}\n"
        f"{balance_line}\n\n"
        "The detailed khata is attached as a PDF.\n\n"
        "JazakAllah,\n"
        f"{sender_name}"
    )
