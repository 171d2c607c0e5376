"""Invoice PDF generation for rental orders."""

from __future__ import annotations

from datetime import datetime
from pathlib import Path
from typing import Optional
from xml.sax.saxutils import escape

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import ParagraphStyle, getSampleStyleSheet
from reportlab.lib.units import mm
from reportlab.platypus import Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle

from rental_orders.config import CURRENCY_SYMBOL, INVOICE_ISSUER, InvoiceIssuerInfo
from rental_orders.domain.models import Customer, Order
from rental_orders.services.timestamps import try_parse_timestamp


def format_currency(value: Optional[float]) -> str:
    return f"{CURRENCY_SYMBOL}{(value or 0.0):,.2f}"


def format_timestamp(value: Optional[str]) -> str:
    parsed = try_parse_timestamp(value)
    if parsed is None:
        return value or "-"
    return parsed.strftime("%d %b %Y, %I:%M %p")


def _grid_style(header_background: object) -> TableStyle:
    return TableStyle(
        [
            ("BACKGROUND", (0, 0), (-1, 0), header_background),
            ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
            ("VALIGN", (0, 0), (-1, -1), "MIDDLE"),
        ]
    )


def generate_invoice_pdf(
    order: Order,
    customer: Customer,
    output_path: Path,
    *,
    issuer: InvoiceIssuerInfo = INVOICE_ISSUER,
) -> Path:
    """Write an A4 invoice for ``order`` and return its path."""
    output_path.parent.mkdir(parents=True, exist_ok=True)
    title = f"Invoice {order.invoice_number}"
    doc = SimpleDocTemplate(
        str(output_path),
        pagesize=A4,
        rightMargin=20 * mm,
        leftMargin=20 * mm,
        topMargin=18 * mm,
        bottomMargin=18 * mm,
        title=title,
        author=issuer.name,
    )

    styles = getSampleStyleSheet()
    styles.add(
        ParagraphStyle(
            name="SectionTitle",
            parent=styles["Heading3"],
            spaceBefore=12,
            spaceAfter=6,
        )
    )
    styles.add(
        ParagraphStyle(
            name="SmallText",
            parent=styles["Normal"],
            fontSize=9,
            leading=12,
        )
    )

    elements: list[object] = [
        Paragraph(f"<b>{escape(issuer.name)}</b>", styles["Title"]),
        Paragraph(escape(title), styles["Heading2"]),
        Spacer(1, 8),
    ]

    issuer_lines = [
        f"<b>Phone:</b> {escape(issuer.phone)}",
        f"<b>Address:</b> {escape(issuer.address)}",
    ]
    if issuer.tax_number:
        issuer_lines.append(f"<b>Tax number:</b> {escape(issuer.tax_number)}")
    elements.append(Paragraph("<br/>".join(issuer_lines), styles["Normal"]))
    elements.append(Spacer(1, 10))

    customer_lines = [
        "<b>Bill to</b>",
        f"Name: {escape(customer.name)}",
        f"Phone: {escape(customer.phone or '-')}",
    ]
    if customer.customer_number:
        customer_lines.append(f"Customer no.: {escape(customer.customer_number)}")
    elements.append(Paragraph("<br/>".join(customer_lines), styles["Normal"]))

    period_table = Table(
        [
            ["Rental period", ""],
            ["Start", format_timestamp(order.start_datetime or order.start_date)],
            ["End", format_timestamp(order.end_datetime or order.end_date)],
            ["Status", order.status.value.replace("_", " ").title()],
        ],
        colWidths=[40 * mm, 120 * mm],
    )
    period_table.setStyle(_grid_style(colors.whitesmoke))
    elements.append(Paragraph("Order details", styles["SectionTitle"]))
    elements.append(period_table)

    items_data = [["Item", "Qty", "Price/day", "Days", "Total"]]
    for item in order.items:
        items_data.append(
            [
                item.product_name or "Item",
                str(item.quantity),
                format_currency(item.price_per_day),
                str(item.days),
                format_currency(item.line_total),
            ]
        )
    items_table = Table(
        items_data,
        colWidths=[70 * mm, 15 * mm, 30 * mm, 15 * mm, 35 * mm],
    )
    items_style = _grid_style(colors.lightgrey)
    items_style.add("ALIGN", (1, 1), (-1, -1), "RIGHT")
    items_table.setStyle(items_style)
    elements.append(Paragraph("Items", styles["SectionTitle"]))
    elements.append(items_table)

    value_rows = [
        ["Subtotal", format_currency(order.subtotal)],
        ["Tax", format_currency(order.tax_amount)],
    ]
    if order.late_fee:
        value_rows.append(["Late fee", format_currency(order.late_fee)])
    value_rows.append(["Total", format_currency(order.total_amount)])
    if order.security_deposit:
        value_rows.append(
            ["Security deposit", format_currency(order.security_deposit)]
        )
    values_table = Table(value_rows, colWidths=[40 * mm, 50 * mm])
    values_table.setStyle(
        TableStyle(
            [
                ("GRID", (0, 0), (-1, -1), 0.25, colors.grey),
                ("ALIGN", (1, 0), (1, -1), "RIGHT"),
            ]
        )
    )
    elements.append(Paragraph("Amounts", styles["SectionTitle"]))
    elements.append(values_table)

    footer = f"{issuer.name} - generated on {datetime.now().strftime('%d %b %Y %H:%M')}"
    elements.append(Spacer(1, 18))
    elements.append(Paragraph(escape(footer), styles["SmallText"]))

    doc.build(elements)
    return output_path
