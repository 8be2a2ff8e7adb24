"""
Payment receipts - printable HTML and downloadable PDF.

Receipt numbers come from a process-local counter. They restart at 1 when
the service restarts and are not unique across sessions.
"""
from __future__ import annotations

import io
import logging
from dataclasses import dataclass
from datetime import date
from xml.sax.saxutils import escape

from jinja2 import Template
from reportlab.lib import colors
from reportlab.lib.enums import TA_CENTER, TA_RIGHT
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle
from reportlab.lib.units import cm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from visa_fees.domain.entities import Application
from visa_fees.domain.value_objects import ReceiptNumber

logger = logging.getLogger(__name__)

ISSUER_NAME = "People's Democratic Republic of Algeria"
ISSUER_LINES = (
    "Embassy of Algeria in Slovenia",
    "Opekarska cesta 35, 1000 Ljubljana",
    "Tel: 083 83 1700",
)
FEE_DESCRIPTION = "Visa Application Fee"
PDF_FONT_NAME = "Times-Roman"
PDF_BOLD_FONT_NAME = "Times-Bold"


class ReceiptCounter:
    """In-memory receipt sequence, reset on restart"""

    def __init__(self, start: int = 1):
        self._next = start

    def next(self) -> ReceiptNumber:
        number = ReceiptNumber(self._next)
        self._next += 1
        return number


@dataclass
class Receipt:
    number: ReceiptNumber
    application: Application
    generated_on: date

    @property
    def filename(self) -> str:
        return receipt_filename(self.application)


def receipt_filename(application: Application) -> str:
    return f"visa-receipt-{application.passport_number}.pdf"


def format_usd(amount: float) -> str:
    """US currency format: $1,234.50"""
    return f"${amount:,.2f}"


def format_long_date(day: date) -> str:
    """Oct 19, 2026"""
    return f"{day:%b} {day.day}, {day.year}"


RECEIPT_TEMPLATE = Template(
    """<!DOCTYPE html>
<html lang="en">
<head>
  <meta charset="utf-8">
  <title>Receipt for Application {{ application.id }}</title>
  <style>
    body { font-family: Georgia, serif; background: #f3f4f6; margin: 0; padding: 2rem; }
    .receipt { background: #fff; max-width: 56rem; margin: 0 auto; padding: 3rem; color: #000; }
    header { display: flex; justify-content: space-between; }
    .parties { display: grid; grid-template-columns: 1fr 1fr; gap: 2rem; border: 1px solid #000; padding: 1rem; }
    table { width: 100%; border-collapse: collapse; margin-top: 1rem; }
    th, td { border: 1px solid #000; padding: .5rem; text-align: left; }
    footer { margin-top: 6rem; text-align: right; }
    @media print { .no-print { display: none; } body { background: #fff; padding: 0; } }
  </style>
</head>
<body>
  <nav class="no-print">
    <a href="/">Back to Dashboard</a>
    <button onclick="window.print()">Print</button>
    <a href="{{ pdf_url }}">Download PDF</a>
  </nav>
  <div class="receipt">
    <header>
      <span><strong>{{ issuer_name }}</strong></span>
      <div>
        <h2>Receipt</h2>
        <p>No. {{ number }}</p>
        <p>Date: {{ generated_on }}</p>
      </div>
    </header>
    <h1 style="text-align:center;text-decoration:underline">PAYMENT RECEIPT</h1>
    <section class="parties">
      <div>
        <p><strong>Received from:</strong></p>
        <p>Name and Surname: <strong>{{ application.full_name }}</strong></p>
        <p>Document No.: <strong>{{ application.passport_number }}</strong></p>
        <p>Address: {{ application.address }}</p>
      </div>
      <div>
        <p><strong>Issued by:</strong></p>
        {% for line in issuer_lines %}<p>{{ line }}</p>
        {% endfor %}
      </div>
    </section>
    <table>
      <thead><tr><th>Description</th><th>Amount</th></tr></thead>
      <tbody>
        <tr><td>{{ fee_description }}</td><td><strong>{{ amount }}</strong></td></tr>
        <tr><td style="height:4rem"></td><td></td></tr>
      </tbody>
    </table>
    <footer><p>Stamp and Signature: ____________________</p></footer>
  </div>
</body>
</html>
""",
    autoescape=True,
)


def render_receipt_html(receipt: Receipt, pdf_url: str) -> str:
    """Printable receipt page (user values are HTML-escaped)"""
    return RECEIPT_TEMPLATE.render(
        application=receipt.application,
        number=str(receipt.number),
        generated_on=format_long_date(receipt.generated_on),
        issuer_name=ISSUER_NAME,
        issuer_lines=ISSUER_LINES,
        fee_description=FEE_DESCRIPTION,
        amount=format_usd(receipt.application.amount_paid),
        pdf_url=pdf_url,
    )


def render_receipt_pdf(receipt: Receipt) -> bytes:
    """Build the receipt as an A4 PDF document"""
    application = receipt.application
    logger.debug(f"Generating PDF receipt {receipt.number} for {application.id}")

    buffer = io.BytesIO()
    doc = SimpleDocTemplate(
        buffer,
        pagesize=A4,
        topMargin=2 * cm,
        bottomMargin=2 * cm,
        leftMargin=2 * cm,
        rightMargin=2 * cm,
        title=f"Receipt for Application {application.id}",
    )

    styles = {
        "title": ParagraphStyle(
            name="Title",
            fontName=PDF_BOLD_FONT_NAME,
            fontSize=16,
            leading=20,
            alignment=TA_CENTER,
            spaceBefore=18,
            spaceAfter=18,
        ),
        "right": ParagraphStyle(
            name="Right",
            fontName=PDF_FONT_NAME,
            fontSize=12,
            leading=14,
            alignment=TA_RIGHT,
        ),
        "normal": ParagraphStyle(
            name="Normal",
            fontName=PDF_FONT_NAME,
            fontSize=12,
            leading=14,
            spaceAfter=4,
        ),
    }

    story = []

    header = Table(
        [[
            Paragraph(f"<b>{escape(ISSUER_NAME)}</b>", styles["normal"]),
            Paragraph(
                f"<b>Receipt</b><br/>No. {receipt.number}<br/>"
                f"Date: {format_long_date(receipt.generated_on)}",
                styles["right"],
            ),
        ]],
        colWidths=[9 * cm, 8 * cm],
    )
    story.append(header)
    story.append(Paragraph("<u>PAYMENT RECEIPT</u>", styles["title"]))

    received_from = [
        Paragraph("<b>Received from:</b>", styles["normal"]),
        Paragraph(f"Name and Surname: <b>{escape(application.full_name)}</b>", styles["normal"]),
        Paragraph(f"Document No.: <b>{escape(application.passport_number)}</b>", styles["normal"]),
        Paragraph(f"Address: {escape(application.address)}", styles["normal"]),
    ]
    issued_by = [Paragraph("<b>Issued by:</b>", styles["normal"])]
    issued_by.extend(Paragraph(escape(line), styles["normal"]) for line in ISSUER_LINES)

    parties = Table([[received_from, issued_by]], colWidths=[8.5 * cm, 8.5 * cm])
    parties.setStyle(
        TableStyle(
            [
                ("BOX", (0, 0), (-1, -1), 1, colors.black),
                ("VALIGN", (0, 0), (-1, -1), "TOP"),
            ]
        )
    )
    story.append(parties)
    story.append(Spacer(1, 12))

    fee_table = Table(
        [
            ["Description", "Amount"],
            [FEE_DESCRIPTION, format_usd(application.amount_paid)],
            ["", ""],
        ],
        colWidths=[11 * cm, 6 * cm],
        rowHeights=[None, None, 1.5 * cm],
    )
    fee_table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 1, colors.black),
                ("FONT", (0, 0), (-1, -1), PDF_FONT_NAME, 12),
                ("FONT", (0, 0), (-1, 0), PDF_BOLD_FONT_NAME, 12),
                ("FONT", (1, 1), (1, 1), PDF_BOLD_FONT_NAME, 12),
            ]
        )
    )
    story.append(fee_table)
    story.append(Spacer(1, 3 * cm))
    story.append(Paragraph("Stamp and Signature: ____________________", styles["right"]))

    doc.build(story)
    return buffer.getvalue()
