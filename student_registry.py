#!/usr/bin/env python3
"""
Student Registry
=====================================================
In-memory student roster with validation, filtering and reporting:

- Student records with case-insensitive unique IDs
- Ordered registry that notifies observers after every change
- Form validation with a fixed, user-visible rule order
- Search / programme / level / status filtering
- Dashboard statistics (counts, average GPA, chart series)
- Eight tabular report types with percentage and TOTAL rows
- CSV import/export of the roster, plain-text report export

Usage:
    python student_registry.py --sample
    python student_registry.py --import students.csv --status Active
    python student_registry.py --sample --search smith --programme Engineering
    python student_registry.py --sample --report gpa
    python student_registry.py --sample --report date-range --start 2024-02-01 --end 2024-03-31
    python student_registry.py --sample --export students_export.csv
    python student_registry.py --sample --report programme-stats --report-out report.csv
"""

from __future__ import annotations

import argparse
import calendar
import logging
import math
import statistics
import sys
from collections import defaultdict
from dataclasses import dataclass, field, fields
from datetime import date, datetime
from enum import Enum
from pathlib import Path
from typing import Callable, Iterable, Iterator, Sequence

__all__ = [
    "StudentRegistry",
    "Student",
    "StudentForm",
    "StudentStatus",
    "FilterCriteria",
    "ReportRow",
    "ReportType",
    "DashboardStats",
    "ImportResult",
    "RegistryError",
    "ValidationError",
    "DuplicateIdError",
    "StudentNotFoundError",
    "CsvParseError",
    "parse_gpa",
    "validate_form",
    "submit_new",
    "submit_update",
    "filter_students",
    "compute_dashboard",
    "generate_report",
    "generate_programme_report",
    "generate_level_report",
    "generate_gpa_distribution",
    "generate_status_report",
    "generate_date_range_report",
    "generate_programme_statistics",
    "generate_level_statistics",
    "generate_gpa_range_analysis",
    "parse_csv_line",
    "import_lines",
    "import_csv",
    "export_csv",
    "format_report_lines",
    "export_report",
]

logger = logging.getLogger(__name__)


# ──────────────────────────────────────────────────────────────────────────────
# ENUMS (str, Enum: compare equal to their plain-text values)
# ──────────────────────────────────────────────────────────────────────────────

class StudentStatus(str, Enum):
    ACTIVE = "Active"
    INACTIVE = "Inactive"

    @classmethod
    def parse(cls, raw: str) -> StudentStatus:
        """Exact, case-sensitive lookup. Anything unknown falls back to ACTIVE."""
        for status in cls:
            if status.value == raw:
                return status
        return cls.ACTIVE


class ReportType(str, Enum):
    BY_PROGRAMME = "Student List by Programme"
    BY_LEVEL = "Student List by Level"
    GPA_DISTRIBUTION = "GPA Distribution"
    STATUS = "Active/Inactive Students"
    DATE_RANGE = "Students Added This Month"
    PROGRAMME_STATISTICS = "Programme-wise Statistics"
    LEVEL_STATISTICS = "Level-wise Statistics"
    GPA_RANGE_ANALYSIS = "GPA Range Analysis"


# ──────────────────────────────────────────────────────────────────────────────
# CONFIGURATION
# ──────────────────────────────────────────────────────────────────────────────

ALL = "All"                       # filter sentinel: no restriction
DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
GPA_MIN = 0.0
GPA_MAX = 4.0
MIN_CSV_FIELDS = 8

CSV_HEADER = "ID,Name,Programme,Level,GPA,Email,Phone,Date Added,Status"
REPORT_HEADER = "Category,Value,Percentage"
TOTAL_LABEL = "TOTAL"
FULL_SHARE = "100%"

# (label, lower bound inclusive, upper bound exclusive)
GPA_DISTRIBUTION_BANDS: list[tuple[str, float, float]] = [
    ("Excellent (3.5 - 4.0)", 3.5, float("inf")),
    ("Good (3.0 - 3.49)", 3.0, 3.5),
    ("Average (2.5 - 2.99)", 2.5, 3.0),
    ("Fair (2.0 - 2.49)", 2.0, 2.5),
    ("Poor (Below 2.0)", float("-inf"), 2.0),
]

# Half-open (low, high] bins, highest first. GPA 0.0 falls into none of them.
GPA_RANGE_EDGES = [4.0, 3.5, 3.0, 2.5, 2.0, 1.5, 1.0, 0.5, 0.0]

REPORT_SLUGS: dict[str, ReportType] = {
    "programme": ReportType.BY_PROGRAMME,
    "level": ReportType.BY_LEVEL,
    "gpa": ReportType.GPA_DISTRIBUTION,
    "status": ReportType.STATUS,
    "date-range": ReportType.DATE_RANGE,
    "programme-stats": ReportType.PROGRAMME_STATISTICS,
    "level-stats": ReportType.LEVEL_STATISTICS,
    "gpa-range": ReportType.GPA_RANGE_ANALYSIS,
}

SAMPLE_STUDENTS: list[tuple[str, str, str, str, float, str, str, str, str]] = [
    ("S001", "John Doe", "Computer Science", "300", 3.8,
     "john.doe@email.com", "123-456-7890", "2024-01-15 10:30:00", "Active"),
    ("S002", "Jane Smith", "Engineering", "200", 3.5,
     "jane.smith@email.com", "234-567-8901", "2024-01-20 14:20:00", "Active"),
    ("S003", "Bob Johnson", "Business", "400", 3.2,
     "bob.johnson@email.com", "345-678-9012", "2024-02-01 09:15:00", "Active"),
    ("S004", "Alice Brown", "Medicine", "500", 3.9,
     "alice.brown@email.com", "456-789-0123", "2024-02-10 11:45:00", "Active"),
    ("S005", "Charlie Wilson", "Arts", "100", 2.8,
     "charlie.wilson@email.com", "567-890-1234", "2024-02-15 16:30:00", "Inactive"),
    ("S006", "Diana Prince", "Computer Science", "200", 3.7,
     "diana.prince@email.com", "678-901-2345", "2024-02-20 13:15:00", "Active"),
    ("S007", "Bruce Wayne", "Business", "300", 3.1,
     "bruce.wayne@email.com", "789-012-3456", "2024-03-01 10:00:00", "Active"),
    ("S008", "Clark Kent", "Engineering", "400", 3.4,
     "clark.kent@email.com", "890-123-4567", "2024-03-05 15:30:00", "Inactive"),
    ("S009", "Peter Parker", "Computer Science", "100", 3.6,
     "peter.parker@email.com", "901-234-5678", "2024-03-10 09:45:00", "Active"),
    ("S010", "Tony Stark", "Engineering", "500", 3.2,
     "tony.stark@email.com", "012-345-6789", "2024-03-15 14:00:00", "Active"),
]


# ──────────────────────────────────────────────────────────────────────────────
# ERRORS
# ──────────────────────────────────────────────────────────────────────────────

class RegistryError(Exception):
    """Base class for every roster error shown to the user."""


class ValidationError(RegistryError, ValueError):
    """A form field broke a validation rule. Nothing was changed."""

    def __init__(self, field_name: str, reason: str):
        super().__init__(reason)
        self.field = field_name
        self.reason = reason


class DuplicateIdError(RegistryError):
    def __init__(self, student_id: str):
        super().__init__(f"Student ID already exists: {student_id}")
        self.student_id = student_id


class StudentNotFoundError(RegistryError, LookupError):
    def __init__(self, student_id: str):
        super().__init__(f"No student with ID: {student_id}")
        self.student_id = student_id


class CsvParseError(RegistryError, ValueError):
    """One CSV line could not be decoded into a student."""

    def __init__(self, line: str, reason: str):
        super().__init__(reason)
        self.line = line
        self.reason = reason


# ──────────────────────────────────────────────────────────────────────────────
# DATA MODELS
# ──────────────────────────────────────────────────────────────────────────────

@dataclass
class Student:
    """Roster entry. ``date_added`` is stamped once and survives every update."""
    student_id: str
    full_name: str
    programme: str
    level: str
    gpa: float
    email: str
    phone: str = ""
    date_added: str = ""
    status: StudentStatus = StudentStatus.ACTIVE

    def __post_init__(self):
        self.gpa = float(self.gpa)
        if not isinstance(self.status, StudentStatus):
            self.status = StudentStatus.parse(self.status)

    @property
    def is_active(self) -> bool:
        return self.status == StudentStatus.ACTIVE

    @property
    def date_added_day(self) -> date | None:
        """Calendar day of ``date_added``, or None when it does not parse."""
        try:
            return datetime.strptime(self.date_added[:10], "%Y-%m-%d").date()
        except ValueError:
            return None

    def has_id(self, student_id: str) -> bool:
        return self.student_id.casefold() == student_id.casefold()

    def __str__(self) -> str:
        return (
            f"ID: {self.student_id} | Name: {self.full_name} | "
            f"Programme: {self.programme} | Level: {self.level} | "
            f"GPA: {self.gpa:.2f} | Email: {self.email} | Status: {self.status.value}"
        )

    def to_csv_line(self) -> str:
        # No quoting: a comma inside any field shifts every column after it.
        return ",".join([
            self.student_id, self.full_name, self.programme, self.level,
            repr(self.gpa), self.email, self.phone, self.date_added,
            self.status.value,
        ])


@dataclass
class StudentForm:
    """Raw text of the add/edit form, before validation."""
    student_id: str = ""
    full_name: str = ""
    programme: str = ""
    level: str = ""
    gpa: str = ""
    email: str = ""
    phone: str = ""
    status: str = StudentStatus.ACTIVE.value

    @classmethod
    def from_student(cls, student: Student) -> StudentForm:
        return cls(
            student_id=student.student_id,
            full_name=student.full_name,
            programme=student.programme,
            level=student.level,
            gpa=repr(student.gpa),
            email=student.email,
            phone=student.phone,
            status=student.status.value,
        )

    def to_student(self, date_added: str = "") -> Student:
        """Validate, then build a trimmed Student. Raises ValidationError."""
        validate_form(self)
        return Student(
            student_id=self.student_id.strip(),
            full_name=self.full_name.strip(),
            programme=self.programme.strip(),
            level=self.level.strip(),
            gpa=parse_gpa(self.gpa),
            email=self.email.strip(),
            phone=self.phone.strip(),
            date_added=date_added,
            status=StudentStatus.parse(self.status.strip()),
        )


@dataclass(frozen=True)
class FilterCriteria:
    """Listing filter. ``ALL`` on a field means no restriction on it."""
    search_text: str = ""
    programme: str = ALL
    level: str = ALL
    status: str = ALL

    @property
    def is_unrestricted(self) -> bool:
        return not self.search_text and self.programme == self.level == self.status == ALL

    def matches(self, student: Student) -> bool:
        if self.search_text:
            term = self.search_text.casefold()
            searchable = (student.student_id, student.full_name, student.email, student.programme)
            if not any(term in text.casefold() for text in searchable):
                return False

        if self.programme != ALL and student.programme != self.programme:
            return False
        if self.level != ALL and student.level != self.level:
            return False
        if self.status != ALL and student.status != self.status:
            return False
        return True


@dataclass(frozen=True)
class ReportRow:
    category: str
    value: str
    percentage: str = ""

    @property
    def is_total(self) -> bool:
        return self.category.startswith(TOTAL_LABEL)

    def to_csv_line(self) -> str:
        return f"{self.category},{self.value},{self.percentage}"


@dataclass
class DashboardStats:
    """Home-screen numbers plus the pie (programme) and bar (level) series."""
    total: int = 0
    active: int = 0
    inactive: int = 0
    average_gpa: float = 0.0
    programme_counts: dict[str, int] = field(default_factory=dict)
    level_counts: dict[str, int] = field(default_factory=dict)

    def status_line(self) -> str:
        return (
            f"Total: {self.total} | Active: {self.active} | "
            f"Inactive: {self.inactive} | Avg GPA: {self.average_gpa:.2f}"
        )


@dataclass
class ImportResult:
    imported: int = 0
    skipped: int = 0

    @property
    def message(self) -> str:
        text = f"{self.imported} students imported successfully."
        if self.skipped > 0:
            text += f" {self.skipped} entries skipped (duplicates or errors)."
        return text


# ──────────────────────────────────────────────────────────────────────────────
# VALIDATION (fixed order: the first failing rule is the one reported)
# ──────────────────────────────────────────────────────────────────────────────

_REQUIRED_FIELDS: list[tuple[str, str]] = [
    ("student_id", "Student ID"),
    ("full_name", "Full Name"),
    ("programme", "Programme"),
    ("level", "Level"),
    ("gpa", "GPA"),
    ("email", "Email"),
]


def parse_gpa(text: str) -> float:
    """
    Decimal GPA text to float. Raises ValueError for digit separators
    ("1_0") and for non-finite values ("inf", "nan"), which float() accepts.
    """
    text = text.strip()
    if "_" in text:
        raise ValueError(f"not a decimal number: {text!r}")
    gpa = float(text)
    if not math.isfinite(gpa):
        raise ValueError(f"not a finite number: {text!r}")
    return gpa


def validate_form(form: StudentForm) -> None:
    """Raise ValidationError for the first broken rule. Phone is optional."""
    for name, label in _REQUIRED_FIELDS:
        if not getattr(form, name).strip():
            raise ValidationError(name, f"{label} is required")

    try:
        gpa = parse_gpa(form.gpa)
    except ValueError:
        raise ValidationError("gpa", "GPA must be a valid number") from None
    if not (GPA_MIN <= gpa <= GPA_MAX):
        raise ValidationError("gpa", f"GPA must be between {GPA_MIN} and {GPA_MAX}")

    email = form.email.strip()
    if "@" not in email or "." not in email:
        raise ValidationError("email", "Please enter a valid email address")


# ──────────────────────────────────────────────────────────────────────────────
# FILTERING
# ──────────────────────────────────────────────────────────────────────────────

def filter_students(students: Iterable[Student], criteria: FilterCriteria) -> list[Student]:
    """Order-preserving subsequence of students that pass every criterion."""
    if criteria.is_unrestricted:
        return list(students)
    return [s for s in students if criteria.matches(s)]


def format_filter_status(shown: int, total: int) -> str:
    return f"Showing {shown} of {total} students"


# ──────────────────────────────────────────────────────────────────────────────
# REGISTRY
# ──────────────────────────────────────────────────────────────────────────────

Observer = Callable[[tuple[Student, ...]], None]


class StudentRegistry:
    """
    Ordered in-memory roster:
    - Insertion order is kept; updates keep a record in place
    - IDs are unique, compared case-insensitively
    - Observers get the full roster after every successful change
    """

    def __init__(self, students: Iterable[Student] = ()):
        self._students: list[Student] = []
        self._observers: list[Observer] = []
        for student in students:
            self.add(student)

    # ── Queries ───────────────────────────────────────────────────────────

    def __len__(self) -> int:
        return len(self._students)

    def __iter__(self) -> Iterator[Student]:
        return iter(list(self._students))

    def __contains__(self, student_id: object) -> bool:
        return isinstance(student_id, str) and self._index_of(student_id) is not None

    def all(self) -> list[Student]:
        return list(self._students)

    def get(self, student_id: str) -> Student:
        idx = self._index_of(student_id)
        if idx is None:
            raise StudentNotFoundError(student_id)
        return self._students[idx]

    def filtered(self, criteria: FilterCriteria) -> list[Student]:
        return filter_students(self._students, criteria)

    # ── Mutations ─────────────────────────────────────────────────────────

    def add(self, student: Student) -> Student:
        if self._index_of(student.student_id) is not None:
            raise DuplicateIdError(student.student_id)
        self._students.append(student)
        logger.info("Added student %s (%s)", student.student_id, student.full_name)
        self._notify()
        return student

    def update(self, student_id: str, replacement: Student) -> Student:
        """Copy every field except ``date_added`` onto the stored record."""
        idx = self._index_of(student_id)
        if idx is None:
            raise StudentNotFoundError(student_id)
        clash = self._index_of(replacement.student_id)
        if clash is not None and clash != idx:
            raise DuplicateIdError(replacement.student_id)

        current = self._students[idx]
        for f in fields(Student):
            if f.name != "date_added":
                setattr(current, f.name, getattr(replacement, f.name))

        logger.info("Updated student %s", current.student_id)
        self._notify()
        return current

    def remove(self, student_id: str) -> Student:
        idx = self._index_of(student_id)
        if idx is None:
            raise StudentNotFoundError(student_id)
        removed = self._students.pop(idx)
        logger.info("Removed student %s (%s)", removed.student_id, removed.full_name)
        self._notify()
        return removed

    def load_sample_data(self) -> int:
        """Seed the ten-student demo roster. Returns how many were added."""
        for row in SAMPLE_STUDENTS:
            self.add(Student(*row))
        return len(SAMPLE_STUDENTS)

    # ── Observers ─────────────────────────────────────────────────────────

    def subscribe(self, observer: Observer) -> None:
        self._observers.append(observer)

    def unsubscribe(self, observer: Observer) -> None:
        self._observers.remove(observer)

    def _notify(self):
        snapshot = tuple(self._students)
        for observer in list(self._observers):
            observer(snapshot)

    def _index_of(self, student_id: str) -> int | None:
        for idx, student in enumerate(self._students):
            if student.has_id(student_id):
                return idx
        return None


def submit_new(
    registry: StudentRegistry,
    form: StudentForm,
    now: datetime | None = None,
) -> Student:
    """Validated Add: stamps ``date_added`` with the current time."""
    stamp = (now or datetime.now()).strftime(DATE_FORMAT)
    return registry.add(form.to_student(date_added=stamp))


def submit_update(registry: StudentRegistry, student_id: str, form: StudentForm) -> Student:
    """Validated Update of the record currently stored under ``student_id``."""
    return registry.update(student_id, form.to_student())


# ──────────────────────────────────────────────────────────────────────────────
# AGGREGATION HELPERS
# ──────────────────────────────────────────────────────────────────────────────

def level_sort_key(level: str) -> tuple[int, int, str]:
    """Numeric level order; non-numeric levels go last, lexically."""
    try:
        return (0, int(level), level)
    except ValueError:
        return (1, 0, level)


def _count_by(students: Iterable[Student], attr: str) -> dict[str, int]:
    counts: dict[str, int] = defaultdict(int)
    for s in students:
        counts[getattr(s, attr)] += 1
    return dict(counts)


def _percent(count: int, total: int) -> str:
    return f"{count * 100.0 / total:.1f}%" if total > 0 else "0.0%"


def _total_row(total: int) -> ReportRow:
    return ReportRow(TOTAL_LABEL, str(total), FULL_SHARE)


def _one_month_before(day: date) -> date:
    year, month = (day.year, day.month - 1) if day.month > 1 else (day.year - 1, 12)
    last_day = calendar.monthrange(year, month)[1]
    return day.replace(year=year, month=month, day=min(day.day, last_day))


def compute_dashboard(students: Iterable[Student]) -> DashboardStats:
    """Recompute the dashboard from scratch. Nothing is cached."""
    students = list(students)
    active = sum(1 for s in students if s.is_active)
    inactive = len(students) - active
    levels = _count_by(students, "level")

    return DashboardStats(
        total=len(students),
        active=active,
        inactive=inactive,
        average_gpa=statistics.mean(s.gpa for s in students) if students else 0.0,
        programme_counts=_count_by(students, "programme"),
        level_counts={lvl: levels[lvl] for lvl in sorted(levels, key=level_sort_key)},
    )


# ──────────────────────────────────────────────────────────────────────────────
# REPORTS (pure functions: each returns rows ready for display or export)
# ──────────────────────────────────────────────────────────────────────────────

def generate_programme_report(students: Sequence[Student], programme: str = ALL) -> list[ReportRow]:
    """Headcount per programme, largest first. A named programme restricts to it."""
    if programme == ALL:
        counts = _count_by(students, "programme")
    else:
        counts = {programme: sum(1 for s in students if s.programme == programme)}

    total = sum(counts.values())
    rows = [
        ReportRow(prog, str(count), _percent(count, total))
        for prog, count in sorted(counts.items(), key=lambda kv: -kv[1])
    ]
    if total > 0:
        rows.append(_total_row(total))
    return rows


def generate_level_report(students: Sequence[Student], level: str = ALL) -> list[ReportRow]:
    """Headcount per level in numeric order."""
    if level == ALL:
        counts = _count_by(students, "level")
    else:
        counts = {level: sum(1 for s in students if s.level == level)}

    total = sum(counts.values())
    rows = [
        ReportRow(f"Level {lvl}", str(counts[lvl]), _percent(counts[lvl], total))
        for lvl in sorted(counts, key=level_sort_key)
    ]
    if total > 0:
        rows.append(_total_row(total))
    return rows


def generate_gpa_distribution(students: Sequence[Student]) -> list[ReportRow]:
    """Five named GPA bands over the whole roster. Empty roster -> no rows."""
    total = len(students)
    if total == 0:
        return []

    rows = []
    for label, low, high in GPA_DISTRIBUTION_BANDS:
        count = sum(1 for s in students if low <= s.gpa < high)
        rows.append(ReportRow(label, str(count), _percent(count, total)))
    rows.append(_total_row(total))
    return rows


def generate_status_report(students: Sequence[Student], status: str = ALL) -> list[ReportRow]:
    """
    Active/inactive headcount. Shares are always of the whole roster.
    Any other status text gets its own row, which counts nobody.
    """
    total = len(students)
    wanted = [s.value for s in StudentStatus] if status == ALL else [status]

    rows = []
    for label in wanted:
        count = sum(1 for s in students if s.status == label)
        rows.append(ReportRow(f"{label} Students", str(count), _percent(count, total)))
    if total > 0:
        rows.append(_total_row(total))
    return rows


def generate_date_range_report(
    students: Sequence[Student],
    start: date | None = None,
    end: date | None = None,
    today: date | None = None,
) -> list[ReportRow]:
    """
    Students added per day inside [start, end], oldest day first.
    Defaults to the month up to today. Records whose date does not parse
    are left out.
    """
    today = today or date.today()
    start = start or _one_month_before(today)
    end = end or today

    daily: dict[date, int] = defaultdict(int)
    for s in students:
        day = s.date_added_day
        if day is not None and start <= day <= end:
            daily[day] += 1

    total = sum(daily.values())
    rows = [
        ReportRow(day.isoformat(), str(count), _percent(count, total))
        for day, count in sorted(daily.items())
    ]
    if total > 0:
        rows.append(ReportRow(
            f"{TOTAL_LABEL} ({start.isoformat()} to {end.isoformat()})",
            str(total), FULL_SHARE,
        ))
    return rows


def generate_programme_statistics(students: Sequence[Student]) -> list[ReportRow]:
    """Count / avg / max / min GPA per programme, alphabetical."""
    gpas_by_programme: dict[str, list[float]] = defaultdict(list)
    for s in students:
        gpas_by_programme[s.programme].append(s.gpa)

    rows = []
    for programme in sorted(gpas_by_programme):
        gpas = gpas_by_programme[programme]
        rows.extend([
            ReportRow(f"{programme} - Count", str(len(gpas))),
            ReportRow(f"{programme} - Avg GPA", f"{statistics.mean(gpas):.2f}"),
            ReportRow(f"{programme} - Max GPA", f"{max(gpas):.2f}"),
            ReportRow(f"{programme} - Min GPA", f"{min(gpas):.2f}"),
        ])
    return rows


def generate_level_statistics(students: Sequence[Student]) -> list[ReportRow]:
    """Per-level headcount with share. Unlike the level report: no TOTAL row."""
    counts = _count_by(students, "level")
    total = sum(counts.values())
    return [
        ReportRow(f"Level {lvl}", str(counts[lvl]), _percent(counts[lvl], total))
        for lvl in sorted(counts, key=level_sort_key)
    ]


def generate_gpa_range_analysis(students: Sequence[Student]) -> list[ReportRow]:
    """Eight half-steps, ``low < gpa <= high``. Blank shares on an empty roster."""
    total = len(students)
    rows = []
    for high, low in zip(GPA_RANGE_EDGES, GPA_RANGE_EDGES[1:]):
        count = sum(1 for s in students if low < s.gpa <= high)
        rows.append(ReportRow(
            f"{low:.1f} - {high:.1f}", str(count),
            _percent(count, total) if total > 0 else "",
        ))
    return rows


def generate_report(
    report_type: ReportType | str,
    students: Iterable[Student],
    *,
    programme: str = ALL,
    level: str = ALL,
    status: str = ALL,
    start: date | None = None,
    end: date | None = None,
    today: date | None = None,
) -> list[ReportRow]:
    """Run one report type, passing it only the filters it understands."""
    report_type = ReportType(report_type)
    students = list(students)

    if report_type is ReportType.BY_PROGRAMME:
        rows = generate_programme_report(students, programme)
    elif report_type is ReportType.BY_LEVEL:
        rows = generate_level_report(students, level)
    elif report_type is ReportType.GPA_DISTRIBUTION:
        rows = generate_gpa_distribution(students)
    elif report_type is ReportType.STATUS:
        rows = generate_status_report(students, status)
    elif report_type is ReportType.DATE_RANGE:
        rows = generate_date_range_report(students, start, end, today)
    elif report_type is ReportType.PROGRAMME_STATISTICS:
        rows = generate_programme_statistics(students)
    elif report_type is ReportType.LEVEL_STATISTICS:
        rows = generate_level_statistics(students)
    else:
        rows = generate_gpa_range_analysis(students)

    logger.debug("%s: %d rows over %d students", report_type.value, len(rows), len(students))
    return rows


# ──────────────────────────────────────────────────────────────────────────────
# CSV IMPORT / EXPORT
# ──────────────────────────────────────────────────────────────────────────────

def _split_fields(line: str) -> list[str]:
    """Comma split that drops trailing empty fields before they are counted."""
    parts = line.split(",")
    while parts and parts[-1] == "":
        parts.pop()
    return parts


def parse_csv_line(line: str, now: datetime | None = None) -> Student:
    """
    Decode ``id,name,programme,level,gpa,email,phone,date_added[,status]``.
    Raises CsvParseError on short lines or a non-numeric GPA.
    """
    parts = _split_fields(line.rstrip("\r\n"))
    if len(parts) < MIN_CSV_FIELDS:
        raise CsvParseError(line, f"expected at least {MIN_CSV_FIELDS} fields, got {len(parts)}")

    values = [p.strip() for p in parts]
    try:
        gpa = parse_gpa(values[4])
    except ValueError:
        raise CsvParseError(line, f"GPA is not a number: {values[4]!r}") from None

    date_added = values[7] or (now or datetime.now()).strftime(DATE_FORMAT)
    status = StudentStatus.parse(values[8]) if len(values) > 8 else StudentStatus.ACTIVE

    return Student(
        student_id=values[0],
        full_name=values[1],
        programme=values[2],
        level=values[3],
        gpa=gpa,
        email=values[5],
        phone=values[6],
        date_added=date_added,
        status=status,
    )


def import_lines(
    registry: StudentRegistry,
    lines: Iterable[str],
    now: datetime | None = None,
) -> ImportResult:
    """
    Add one student per non-blank line. Unparsable lines and IDs already
    in the registry are skipped and counted; earlier lines stay committed.
    """
    result = ImportResult()
    for lineno, raw in enumerate(lines, start=1):
        line = raw.rstrip("\r\n")
        if not line.strip():
            continue
        try:
            registry.add(parse_csv_line(line, now=now))
        except (CsvParseError, DuplicateIdError) as e:
            logger.debug("Skipping line %d: %s", lineno, e)
            result.skipped += 1
            continue
        result.imported += 1

    logger.info("Import finished: %d imported, %d skipped", result.imported, result.skipped)
    return result


def import_csv(registry: StudentRegistry, path: str | Path) -> ImportResult:
    """Import a roster CSV. OSError propagates and aborts the whole import."""
    with open(path, encoding="utf-8", errors="replace") as f:
        return import_lines(registry, f)


def export_csv(students: Iterable[Student], path: str | Path) -> int:
    """Write header + one line per student. Returns the number written."""
    students = list(students)
    lines = [CSV_HEADER, *(s.to_csv_line() for s in students)]
    Path(path).write_text("\n".join(lines) + "\n", encoding="utf-8")
    logger.info("Exported %d students to %s", len(students), path)
    return len(students)


def format_report_lines(
    report_type: ReportType | str,
    rows: Iterable[ReportRow],
    generated_at: datetime | None = None,
) -> list[str]:
    title = report_type.value if isinstance(report_type, ReportType) else str(report_type)
    generated_at = generated_at or datetime.now()
    return [
        f"Report: {title}",
        f"Generated: {generated_at.strftime(DATE_FORMAT)}",
        "",
        REPORT_HEADER,
        *(row.to_csv_line() for row in rows),
    ]


def export_report(
    path: str | Path,
    report_type: ReportType | str,
    rows: Iterable[ReportRow],
    generated_at: datetime | None = None,
) -> str:
    """Write a report as plain text (two metadata lines, blank, table)."""
    path = Path(path)
    path.write_text("\n".join(format_report_lines(report_type, rows, generated_at)) + "\n", encoding="utf-8")
    logger.info("Exported report to %s", path)
    return str(path)


# ──────────────────────────────────────────────────────────────────────────────
# CONSOLE OUTPUT
# ──────────────────────────────────────────────────────────────────────────────

def print_dashboard(stats: DashboardStats):
    print(f"\n{'=' * 72}")
    print("  STUDENT REGISTRY — DASHBOARD")
    print(f"{'=' * 72}")
    print(f"  {stats.status_line()}")

    if stats.programme_counts:
        print(f"\n  {'Programme':<28} {'Students':>10}")
        print(f"  {'─' * 40}")
        for prog, count in stats.programme_counts.items():
            print(f"  {prog:<28} {count:>10}")

    if stats.level_counts:
        print(f"\n  {'Level':<28} {'Students':>10}")
        print(f"  {'─' * 40}")
        for lvl, count in stats.level_counts.items():
            print(f"  {lvl:<28} {count:>10}")


def print_listing(students: Sequence[Student], total: int):
    print(f"\n{'─' * 72}")
    print(f"  STUDENTS ({format_filter_status(len(students), total)})")
    print(f"  {'─' * 60}")
    for s in students:
        print(f"  {s}")


def print_report_table(report_type: ReportType, rows: Sequence[ReportRow]):
    print(f"\n{'─' * 72}")
    print(f"  REPORT: {report_type.value.upper()}")
    print(f"  {'Category':<36} {'Value':>10} {'Percentage':>12}")
    print(f"  {'─' * 60}")
    if not rows:
        print("  (no data)")
    for row in rows:
        print(f"  {row.category:<36} {row.value:>10} {row.percentage:>12}")
    print(f"\n{'=' * 72}\n")


# ──────────────────────────────────────────────────────────────────────────────
# CLI
# ──────────────────────────────────────────────────────────────────────────────

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(description="In-memory Student Registry")
    parser.add_argument("--sample", action="store_true", help="Load the demo roster")
    parser.add_argument("--import", dest="import_path", help="CSV file to import")
    parser.add_argument("--search", default="", help="Match ID, name, email or programme")
    parser.add_argument("--programme", default=ALL, help="Exact programme filter")
    parser.add_argument("--level", default=ALL, help="Exact level filter")
    parser.add_argument(
        "--status", choices=[ALL] + [s.value for s in StudentStatus],
        default=ALL, help="Status filter",
    )
    parser.add_argument("--report", choices=list(REPORT_SLUGS), help="Report to generate")
    parser.add_argument("--report-programme", default=ALL, help="Programme for the programme report")
    parser.add_argument("--report-level", default=ALL, help="Level for the level report")
    parser.add_argument(
        "--report-status", choices=[ALL] + [s.value for s in StudentStatus],
        default=ALL, help="Status for the status report",
    )
    parser.add_argument("--start", type=date.fromisoformat, help="Date-range start (YYYY-MM-DD)")
    parser.add_argument("--end", type=date.fromisoformat, help="Date-range end (YYYY-MM-DD)")
    parser.add_argument("--export", help="Write the roster to this CSV file")
    parser.add_argument("--report-out", help="Write the generated report to this file")
    parser.add_argument("--verbose", "-v", action="store_true", help="Enable debug logging")
    return parser


def main(argv: Sequence[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.report_out and not args.report:
        parser.error("--report-out requires --report")

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
        datefmt="%H:%M:%S",
    )

    registry = StudentRegistry()
    registry.subscribe(lambda roster: logger.debug("Roster now holds %d students", len(roster)))

    try:
        if args.sample:
            registry.load_sample_data()
        if args.import_path:
            result = import_csv(registry, args.import_path)
            print(f"  {result.message}")

        criteria = FilterCriteria(
            search_text=args.search,
            programme=args.programme,
            level=args.level,
            status=args.status,
        )
        print_dashboard(compute_dashboard(registry))
        print_listing(registry.filtered(criteria), len(registry))

        if args.report:
            report_type = REPORT_SLUGS[args.report]
            rows = generate_report(
                report_type, registry,
                programme=args.report_programme,
                level=args.report_level,
                status=args.report_status,
                start=args.start,
                end=args.end,
            )
            print_report_table(report_type, rows)
            if args.report_out:
                path = export_report(args.report_out, report_type, rows)
                print(f"  Report -> {path}")

        if args.export:
            count = export_csv(registry, args.export)
            print(f"  CSV    -> {args.export} ({count} students)")

    except (RegistryError, OSError) as e:
        print(f"ERROR: {e}", file=sys.stderr)
        return 1

    return 0


if __name__ == "__main__":
    sys.exit(main())
