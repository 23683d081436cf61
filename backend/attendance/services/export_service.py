"""Attendance export: name x date presence matrix, one sheet per year."""
import io
import logging
from dataclasses import dataclass, field
from datetime import date
from typing import Iterable, Optional

from openpyxl import Workbook
from sqlalchemy.orm import Session

from attendance.models.attendance import Attendance
from attendance.models.event import Event
from attendance.services import roster_service
from attendance.services.attendance_service import local_today

logger = logging.getLogger(__name__)

PRESENT = "O"
ABSENT = "-"
NAME_HEADER = "Name"
MONTH_LABELS = ["Jan", "Feb", "Mar", "Apr", "May", "Jun", "Jul", "Aug", "Sep", "Oct", "Nov", "Dec"]
XLSX_MEDIA_TYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"


@dataclass
class PivotSheet:
    """One year of the export; ``rows`` pairs each name with one marker per date."""

    title: str
    dates: list[date] = field(default_factory=list)
    rows: list[tuple[str, list[str]]] = field(default_factory=list)


def build_attendance_pivot(
    records: Iterable[tuple[date, str]],
    roster_names: Iterable[str],
    today: Optional[date] = None,
) -> list[PivotSheet]:
    """Group (check-in date, attendee name) pairs by year and date.

    Every roster member gets a row on every sheet, absent or not. With no
    records at all a single sheet for the current year is returned, holding
    only the name column.
    """
    by_year: dict[int, dict[date, set[str]]] = {}
    for day, name in records:
        by_year.setdefault(day.year, {}).setdefault(day, set()).add(name)

    names = sorted(set(roster_names))
    years = sorted(by_year) or [(today or local_today()).year]

    sheets = []
    for year in years:
        present_by_date = by_year.get(year, {})
        dates = sorted(present_by_date)
        rows = [
            (name, [PRESENT if name in present_by_date[day] else ABSENT for day in dates])
            for name in names
        ]
        sheets.append(PivotSheet(title=str(year), dates=dates, rows=rows))
    return sheets


def render_workbook(sheets: list[PivotSheet]) -> io.BytesIO:
    """Write the sheets to an in-memory xlsx: month row, day row, then one row per name."""
    wb = Workbook()
    wb.remove(wb.active)

    for sheet in sheets:
        ws = wb.create_sheet(title=sheet.title)
        ws.append([NAME_HEADER] + [MONTH_LABELS[day.month - 1] for day in sheet.dates])
        ws.append([None] + [day.day for day in sheet.dates])
        for name, markers in sheet.rows:
            ws.append([name] + markers)

    bio = io.BytesIO()
    wb.save(bio)
    bio.seek(0)
    return bio


def export_event(db: Session, event: Event) -> tuple[str, io.BytesIO]:
    """Build the workbook for every attendance record of ``event``."""
    attendances = (
        db.query(Attendance)
        .filter(Attendance.event_id == event.event_id)
        .order_by(Attendance.checked_in_at)
        .all()
    )
    records = [(a.check_in_date, a.user_name) for a in attendances]
    roster_names = [user.name for user in roster_service.list_roster(db, event.event_id)]

    sheets = build_attendance_pivot(records, roster_names)
    logger.info(
        "Exported %d attendance records for event %s across %d sheet(s)",
        len(records), event.event_id, len(sheets),
    )
    return f"{event.name}_attendance.xlsx", render_workbook(sheets)
