"""Pattern-based extraction of key dates and budget range."""

import re
from datetime import date, datetime

from rfp_intake.models.records import BudgetRange, KeyDate

_DATE = r"([A-Za-z]+ \d{1,2},? \d{4})"

DATE_PATTERNS = [
    ("submission_deadline", re.compile(rf"submission\s+(?:date|deadline)[:\s]+{_DATE}", re.IGNORECASE)),
    ("due_date", re.compile(rf"due\s+(?:date|by)[:\s]+{_DATE}", re.IGNORECASE)),
    ("proposal_due", re.compile(rf"proposal\s+due[:\s]+{_DATE}", re.IGNORECASE)),
    ("questions_due", re.compile(rf"questions?\s+due[:\s]+{_DATE}", re.IGNORECASE)),
]

BUDGET_PATTERN = re.compile(
    r"budget[:\s]+\$?(\d[\d,]*(?:\.\d{2})?)\s*(?:to|-)\s*\$?(\d[\d,]*(?:\.\d{2})?)",
    re.IGNORECASE,
)

_DATE_FORMATS = ("%B %d, %Y", "%B %d %Y", "%b %d, %Y", "%b %d %Y")


def parse_date(value: str) -> date | None:
    """Parse ``March 15, 2025`` style dates."""
    value = " ".join(value.split())
    for fmt in _DATE_FORMATS:
        try:
            return datetime.strptime(value, fmt).date()
        except ValueError:
            continue
    return None


def extract_key_dates(text: str) -> list[KeyDate]:
    key_dates = []
    seen = set()
    for event, pattern in DATE_PATTERNS:
        for match in pattern.finditer(text):
            parsed = parse_date(match.group(1))
            if parsed is None or (event, parsed) in seen:
                continue
            seen.add((event, parsed))
            key_dates.append(KeyDate(event=event, event_date=parsed))
    return key_dates


def extract_budget_range(text: str) -> BudgetRange | None:
    match = BUDGET_PATTERN.search(text)
    if not match:
        return None
    try:
        low, high = (float(group.replace(",", "")) for group in match.groups())
    except ValueError:
        return None
    return BudgetRange(min=low, max=high, currency="USD")
