"""Excel export of a weekly plan."""

from __future__ import annotations

import re
from io import BytesIO
from typing import Dict, List, Tuple

from openpyxl import Workbook
from openpyxl.styles import Alignment, Font

from rotaplan.domain.dates import iso, iter_days, parse_iso_date
from rotaplan.domain.employee import normalize_employee
from rotaplan.domain.plan import plan_from_response
from rotaplan.domain.shift import SHIFT_ORDER, spec_for

from ..dao import employees_dao
from . import plan_service

HEADER_FONT = Font(bold=True)
CENTER = Alignment(horizontal="center", vertical="center", wrap_text=True)
XLSX_MIMETYPE = "application/vnd.openxmlformats-officedocument.spreadsheetml.sheet"
SHEET_TITLE_FORBIDDEN = re.compile(r"[\[\]:*?/\\]")


def sheet_title(name: str) -> str:
    """Excel rejects some characters in sheet titles and caps them at 31."""
    return SHEET_TITLE_FORBIDDEN.sub("-", name).strip()[:31] or "Plan"


def export_plan(plan_id: int) -> Tuple[BytesIO, str]:
    """Render a plan as a workbook: one row per shift type, one column per day."""
    data = plan_service.get_plan(plan_id)
    plan = plan_from_response(data["plan"], data["shifts"])
    names: Dict[int, str] = {}
    for row in employees_dao.list_employees(department_id=plan.scope.department_id):
        employee = normalize_employee(row)
        names[employee.id] = employee.display_name

    cells: Dict[Tuple[str, str], List[str]] = {}
    for shift in plan.shifts:
        key = (iso(shift.date), shift.shift_type.value)
        cells.setdefault(key, []).append(names.get(shift.employee_id, str(shift.employee_id)))

    wb = Workbook()
    ws = wb.active
    ws.title = sheet_title(plan.name)

    days = iter_days(plan.start_date, plan.end_date)
    ws.cell(row=1, column=1, value="Shift").font = HEADER_FONT
    for col_idx, day in enumerate(days, start=2):
        cell = ws.cell(row=1, column=col_idx, value=f"{day.strftime('%a')} {iso(day)}")
        cell.font = HEADER_FONT
        cell.alignment = CENTER

    for row_idx, shift_type in enumerate(SHIFT_ORDER, start=2):
        spec = spec_for(shift_type)
        ws.cell(row=row_idx, column=1, value=f"{spec.label} ({spec.start}-{spec.end})").font = HEADER_FONT
        for col_idx, day in enumerate(days, start=2):
            value = ", ".join(sorted(cells.get((iso(day), shift_type.value), [])))
            ws.cell(row=row_idx, column=col_idx, value=value).alignment = CENTER

    if plan.notes:
        ws.cell(row=len(SHIFT_ORDER) + 3, column=1, value="Notes").font = HEADER_FONT
        ws.cell(row=len(SHIFT_ORDER) + 3, column=2, value=plan.notes)

    stream = BytesIO()
    wb.save(stream)
    stream.seek(0)
    start = parse_iso_date(data["plan"]["startDate"])
    filename = f"shift_plan_{iso(start) if start else plan_id}.xlsx"
    return stream, filename
