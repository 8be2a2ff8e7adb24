"""
Applications report - filtering, sorting, pagination and CSV export.

Backs the dashboard table: filter by name, sort by a column, page through
results, and download everything as CSV.
"""
import logging
import math
from dataclasses import dataclass, field
from typing import Callable, Dict, Iterable, List, Optional

from visa_fees.domain.entities import Application

logger = logging.getLogger(__name__)

DEFAULT_PAGE_SIZE = 10

CSV_FILENAME = "visa_applications.csv"
CSV_HEADER = ("Full Name", "Passport Number", "Application Date", "Amount Paid")

SORT_KEYS: Dict[str, Callable[[Application], object]] = {
    "fullName": lambda application: application.full_name.casefold(),
    "applicationDate": lambda application: application.application_date,
    "amountPaid": lambda application: application.amount_paid,
}


@dataclass
class ReportQuery:
    """Table state sent by the dashboard"""
    search: str = ""
    sort: Optional[str] = None  # one of SORT_KEYS
    descending: bool = False
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    def __post_init__(self):
        if self.sort is not None and self.sort not in SORT_KEYS:
            raise ValueError(
                f"Invalid sort column: {self.sort}. "
                f"Must be one of {sorted(SORT_KEYS)}"
            )
        if self.page < 1:
            raise ValueError(f"page must be >= 1, got {self.page}")
        if self.page_size < 1:
            raise ValueError(f"page_size must be >= 1, got {self.page_size}")


@dataclass
class ReportPage:
    """One page of the filtered, sorted report"""
    rows: List[Application] = field(default_factory=list)
    total: int = 0
    page: int = 1
    page_size: int = DEFAULT_PAGE_SIZE

    @property
    def page_count(self) -> int:
        return max(1, math.ceil(self.total / self.page_size))

    @property
    def has_previous(self) -> bool:
        return self.page > 1

    @property
    def has_next(self) -> bool:
        return self.page < self.page_count


def build_report(applications: Iterable[Application], query: ReportQuery) -> ReportPage:
    """
    Apply filter, sort and pagination.

    Without a sort column the store order (newest first) is kept.
    A page past the end comes back empty.
    """
    rows = list(applications)

    needle = query.search.strip().casefold()
    if needle:
        rows = [application for application in rows if needle in application.full_name.casefold()]

    if query.sort:
        rows.sort(key=SORT_KEYS[query.sort], reverse=query.descending)

    start = (query.page - 1) * query.page_size
    return ReportPage(
        rows=rows[start:start + query.page_size],
        total=len(rows),
        page=query.page,
        page_size=query.page_size,
    )


def format_amount(amount: float) -> str:
    """Print an amount the way a JS number prints: 250, 180.5, 320.75"""
    if float(amount).is_integer():
        return str(int(amount))
    return repr(float(amount))


def render_csv(applications: Iterable[Application]) -> str:
    """
    Render all applications as CSV.

    Known limitation: values are joined with "," and never quoted or
    escaped, so a comma inside a name or passport number shifts the row's
    columns. Address is not an exported column.
    """
    lines = [
        ",".join([
            application.full_name,
            application.passport_number,
            application.application_date.isoformat(),
            format_amount(application.amount_paid),
        ])
        for application in applications
    ]
    logger.info(f"Exporting {len(lines)} application(s) to CSV")
    return ",".join(CSV_HEADER) + "\n" + "\n".join(lines)
