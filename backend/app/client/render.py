"""Pure functions turning API payloads into view model pieces."""

from __future__ import annotations

from datetime import datetime
from typing import Any, Mapping, Sequence

from .view import Card, ChartSeries, PageButton, PaginationView

PAGE_WINDOW = 2


def format_count(value: Any) -> str:
    """Format an integer with thousands separators (``1234`` -> ``"1,234"``)."""

    return f"{int(value or 0):,}"


def render_pagination(section: str, pagination: Mapping[str, Any]) -> PaginationView:
    page = int(pagination["page"])
    pages = int(pagination["pages"])
    total = int(pagination["total"])

    start = max(1, page - PAGE_WINDOW)
    end = min(pages, page + PAGE_WINDOW)
    return PaginationView(
        section=section,
        previous=PageButton(label="Previous", page=page - 1, disabled=page <= 1),
        pages=[
            PageButton(label=str(number), page=number, active=number == page)
            for number in range(start, end + 1)
        ],
        next=PageButton(label="Next", page=page + 1, disabled=page >= pages),
        total_label=f"Total: {format_count(total)}",
    )


def render_school_rows(schools: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "school_code": school["school_code"],
            "name": school["name"],
            "district": school.get("district_name") or "",
            "students": school.get("total_students", 0),
            "teachers": school.get("total_teachers", 0),
            "status": school.get("status", ""),
        }
        for school in schools
    ]


def render_student_rows(students: Sequence[Mapping[str, Any]]) -> list[dict[str, Any]]:
    return [
        {
            "admission_no": student["admission_no"],
            "name": f"{student['first_name']} {student['last_name']}",
            "class": f"{student['class_number']}{student.get('section') or ''}",
            "school": student.get("school_name") or "",
            "guardian": student.get("guardian_name") or "N/A",
            "status": student.get("status", ""),
        }
        for student in students
    ]


def render_kpi_cards(stats: Mapping[str, Any]) -> list[Card]:
    totals = stats["totals"]
    return [
        Card(value=format_count(totals["schools"]), label="Total Schools"),
        Card(
            value=format_count(totals["students"]),
            label="Active Students",
            trend=f"+{format_count(stats.get('recent_enrollments'))} this month",
        ),
        Card(value=format_count(totals["teachers"]), label="Teaching Staff"),
        Card(value=str(totals["districts"]), label="Districts Covered"),
    ]


def render_system_status(stats: Mapping[str, Any], kpis: Mapping[str, Any]) -> list[Card]:
    attendance = stats.get("today_attendance") or {}
    return [
        Card(value=format_count(stats["totals"]["schools"]), label="Active Schools"),
        Card(value=format_count(attendance.get("present")), label="Present Today"),
        Card(value=format_count(attendance.get("absent")), label="Absent Today"),
        Card(value=f"{float(kpis.get('attendance_rate') or 0):.1f}%", label="Attendance Rate (30d)"),
    ]


def month_label(bucket: str) -> str:
    """Turn a ``YYYY-MM`` bucket into ``"Jan 2026"``."""

    return datetime.strptime(bucket, "%Y-%m").strftime("%b %Y")


def render_enrollment_chart(kpis: Mapping[str, Any]) -> ChartSeries:
    trend = kpis.get("enrollment_trend") or []
    return ChartSeries(
        title="New Enrollments",
        labels=[month_label(point["month"]) for point in trend],
        values=[point["enrollments"] for point in trend],
    )


def render_district_chart(stats: Mapping[str, Any]) -> ChartSeries:
    breakdown = stats.get("district_breakdown") or []
    return ChartSeries(
        title="Student Distribution by District",
        labels=[row["district_name"] for row in breakdown],
        values=[row["students"] for row in breakdown],
    )


def render_analytics(kpis: Mapping[str, Any], health: Mapping[str, Any]) -> dict[str, list[Card]]:
    metrics = kpis.get("school_metrics") or {}
    uptime_hours = float(health.get("uptime") or 0) / 3600
    return {
        "performance": [
            Card(value=f"{uptime_hours:.1f}h", label="API Uptime"),
            Card(value=str(health.get("status", "unknown")), label="API Status"),
        ],
        "school_metrics": [
            Card(
                value=f"{float(metrics.get('avg_students_per_school') or 0):.1f}",
                label="Avg Students per School",
            ),
            Card(
                value=f"{float(metrics.get('avg_teachers_per_school') or 0):.1f}",
                label="Avg Teachers per School",
            ),
            Card(value=format_count(metrics.get("large_schools")), label="Schools over 500 Students"),
        ],
    }
