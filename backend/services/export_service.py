"""
export_service.py — Expense exports
CSV and PDF downloads for a date range, and a JSON monthly report.
"""

import csv
import io
from datetime import date, datetime, timezone

from reportlab.lib import colors
from reportlab.lib.pagesizes import A4
from reportlab.lib.styles import getSampleStyleSheet
from reportlab.lib.units import inch
from reportlab.platypus import SimpleDocTemplate, Paragraph, Spacer, Table, TableStyle
from sqlalchemy.orm import Session

from errors import BadRequest
from models.expense import Expense
from services.analytics_service import month_window, utc_today, ZERO

CSV_COLUMNS = ["Date", "Description", "Category", "Amount", "Payment Method", "Notes"]


def resolve_range(start_date: date | None, end_date: date | None) -> tuple[date, date]:
    """Default window: first day of the current month through today."""
    today = utc_today()
    start = start_date or today.replace(day=1)
    end = end_date or today
    if start > end:
        raise BadRequest("start_date must not be after end_date")
    return start, end


def _category_name(expense: Expense) -> str:
    return expense.category.name if expense.category else "Unknown"


class ExportService:
    @staticmethod
    def get_expenses(db: Session, user_id: int, start: date, end: date) -> list[Expense]:
        return db.query(Expense).filter(
            Expense.user_id == user_id,
            Expense.date >= start,
            Expense.date <= end,
        ).order_by(Expense.date.desc(), Expense.id.desc()).all()

    @staticmethod
    def to_csv(expenses: list[Expense]) -> str:
        buf = io.StringIO()
        writer = csv.writer(buf)
        writer.writerow(CSV_COLUMNS)
        for e in expenses:
            writer.writerow([
                e.date.isoformat(),
                e.description,
                _category_name(e),
                f"{e.amount:.2f}",
                e.payment_method,
                e.notes or "",
            ])
        return buf.getvalue()

    @staticmethod
    def to_pdf(expenses: list[Expense], start: date, end: date, currency: str = "INR") -> bytes:
        buf = io.BytesIO()
        doc = SimpleDocTemplate(buf, pagesize=A4, leftMargin=0.7 * inch, rightMargin=0.7 * inch)
        styles = getSampleStyleSheet()
        total = sum((e.amount for e in expenses), ZERO)

        story = [
            Paragraph("Expense Report", styles["Title"]),
            Paragraph(f"Period: {start.isoformat()} - {end.isoformat()}", styles["Normal"]),
            Spacer(1, 0.3 * inch),
            Paragraph("Summary", styles["Heading2"]),
            Paragraph(f"Total Expenses: {len(expenses)}", styles["Normal"]),
            Paragraph(f"Total Amount: {currency} {total:,.2f}", styles["Normal"]),
            Spacer(1, 0.3 * inch),
            Paragraph("Expense Details", styles["Heading2"]),
        ]

        rows = [["Date", "Description", "Category", "Amount", "Payment"]]
        for e in expenses:
            rows.append([
                e.date.isoformat(),
                e.description[:25],
                _category_name(e)[:15],
                f"{e.amount:,.2f}",
                (e.payment_method or "").replace("_", " "),
            ])
        table = Table(rows, repeatRows=1, colWidths=[0.9 * inch, 2.2 * inch, 1.4 * inch, 1.0 * inch, 1.1 * inch])
        table.setStyle(TableStyle([
            ("FONTNAME", (0, 0), (-1, 0), "Helvetica-Bold"),
            ("FONTSIZE", (0, 0), (-1, -1), 9),
            ("LINEBELOW", (0, 0), (-1, 0), 1, colors.black),
            ("ALIGN", (3, 1), (3, -1), "RIGHT"),
        ]))
        story.append(table)
        story.append(Spacer(1, 0.4 * inch))
        story.append(Paragraph(
            f"Generated on {datetime.now(timezone.utc).strftime('%Y-%m-%d %H:%M UTC')}", styles["Italic"]
        ))

        doc.build(story)
        return buf.getvalue()

    @staticmethod
    def monthly_report(db: Session, user_id: int, year: int, month: int) -> dict:
        start, end = month_window(year, month)
        expenses = ExportService.get_expenses(db, user_id, start, end)

        by_category: dict[int, dict] = {}
        total_amount = ZERO
        for e in expenses:
            entry = by_category.setdefault(e.category_id, {
                "name": _category_name(e),
                "color": e.category.color if e.category else None,
                "total": ZERO,
                "count": 0,
            })
            entry["total"] += e.amount
            entry["count"] += 1
            total_amount += e.amount

        return {
            "period": {"year": year, "month": month},
            "total_expenses": len(expenses),
            "total_amount": total_amount,
            "category_breakdown": list(by_category.values()),
            "expenses": [
                {
                    "id": e.id,
                    "date": e.date.isoformat(),
                    "description": e.description,
                    "amount": e.amount,
                    "category": _category_name(e),
                    "payment_method": e.payment_method,
                }
                for e in expenses
            ],
        }
