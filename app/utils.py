import math
import re
from datetime import datetime
from typing import Iterable, Optional

from dateutil.parser import isoparse

from app.schemas.blog import ContentBlock
from app.services.rich_text import as_text

_WHITESPACE = re.compile(r"\s+")

# date-fns pt-BR "MMM" abbreviations
PT_BR_MONTHS = (
    "jan", "fev", "mar", "abr", "mai", "jun",
    "jul", "ago", "set", "out", "nov", "dez",
)


def count_words(text: str) -> int:
    collapsed = _WHITESPACE.sub(" ", text or "").strip()
    if not collapsed:
        return 0
    return len(collapsed.split(" "))


def estimate_reading_time(
    content: Optional[Iterable[ContentBlock]], words_per_minute: int = 200
) -> int:
    """Minutes needed to read every content block's body, rounded up."""
    if not content:
        return 0
    total_words = sum(count_words(as_text(block.body)) for block in content)
    return math.ceil(total_words / words_per_minute)


def format_reading_time(minutes: int) -> str:
    return f"{minutes} min"


def parse_timestamp(value: Optional[str]) -> Optional[datetime]:
    """Prismic timestamps look like 2021-03-25T19:25:28+0000."""
    if not value:
        return None
    try:
        return isoparse(value)
    except (ValueError, OverflowError):
        return None


def format_publication_date(value: Optional[str]) -> str:
    parsed = parse_timestamp(value)
    if parsed is None:
        return ""
    return f"{parsed.day:02d} {PT_BR_MONTHS[parsed.month - 1]} {parsed.year}"
