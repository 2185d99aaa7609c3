"""Season and mode filters for rankings."""

from enum import Enum
from typing import Union

from .errors import InvalidFilterError
from .models import MODALITY_3X3, MODALITY_5X5, Event


class RankingMode(str, Enum):
    """What a ranking measures.

    The two modality modes sum points over events of that format. SHOOTERS
    counts long-range makes across both formats.
    """

    THREE = MODALITY_3X3
    FIVE = MODALITY_5X5
    SHOOTERS = "shooters"

    @property
    def counts_points(self) -> bool:
        return self is not RankingMode.SHOOTERS


def parse_mode(mode: Union[str, RankingMode]) -> RankingMode:
    """Parse a mode name into a RankingMode."""
    try:
        return RankingMode(str(getattr(mode, "value", mode)).strip().lower())
    except ValueError:
        raise InvalidFilterError("mode", mode, "'3x3', '5x5' or 'shooters'") from None


def parse_year(year: Union[str, int]) -> str:
    """Validate a season year and return it as a 4-digit string."""
    text = str(year).strip()
    if len(text) != 4 or not text.isdigit():
        raise InvalidFilterError("year", year, "a 4-digit year")
    return text


def matches_season(raw_date: object, year: str) -> bool:
    """Check whether a stored date string falls in ``year``.

    Dates are not stored in one format. ISO dates match on the 4-digit year;
    short dates such as ``15/06/25`` or ``15-06-25`` match on the 2-digit
    suffix.
    """
    text = str(raw_date or "")
    if year in text:
        return True
    if len(year) == 4:
        short_year = year[2:]
        return text.endswith("/" + short_year) or text.endswith("-" + short_year)
    return False


def event_in_scope(event: Event, year: str, mode: RankingMode) -> bool:
    """Check whether an event contributes to a ranking for ``year`` and ``mode``."""
    if not matches_season(event.date, year):
        return False
    if mode is RankingMode.SHOOTERS:
        return True
    return event.modality == mode.value
