"""
Due-date resolution for the rule-based extractor.

Turns relative phrases ("next Monday", "in two weeks", "end of semester") and
explicit date tokens ("March 15th", "15 March", "15/03/2024") into calendar
dates relative to a reference day. Nothing in here raises on bad input; an
unusable expression resolves to None.
"""

from __future__ import annotations

import calendar
import logging
import re
from dataclasses import dataclass
from datetime import date, timedelta
from typing import Iterable, Optional

from extraction.rule_table import RuleTable

logger = logging.getLogger(__name__)

MONTHS = {
    name: i
    for i, name in enumerate(
        (
            "january", "february", "march", "april", "may", "june", "july",
            "august", "september", "october", "november", "december",
        ),
        start=1,
    )
}
WEEKDAYS = {
    name: i
    for i, name in enumerate(
        ("monday", "tuesday", "wednesday", "thursday", "friday", "saturday", "sunday")
    )
}

_MONTH_RE = "|".join(MONTHS)
_ORDINAL = r"(?:st|nd|rd|th)?"

DATE_TOKEN_RE = re.compile(
    rf"\b(?P<md_month>{_MONTH_RE})\s+(?P<md_day>\d{{1,2}}){_ORDINAL}\b(?:,?\s+(?P<md_year>\d{{4}})\b)?"
    rf"|\b(?P<dm_day>\d{{1,2}}){_ORDINAL}\s+(?:of\s+)?(?P<dm_month>{_MONTH_RE})\b(?:,?\s+(?P<dm_year>\d{{4}})\b)?"
    rf"|\b(?P<n_day>\d{{1,2}})/(?P<n_month>\d{{1,2}})/(?P<n_year>\d{{4}}|\d{{2}})\b",
    re.IGNORECASE,
)

_OFFSET_RE = re.compile(r"^\+(\d+)d$")


@dataclass(frozen=True)
class DueDateTarget:
    """Either a symbolic relative target ("weekday:friday", "+7d", ...) or a raw date token."""

    symbol: Optional[str] = None
    token: Optional[str] = None


class DateResolver:
    def __init__(self, rules: RuleTable):
        self.rules = rules

    def find_target(self, lines: Iterable[str]) -> Optional[DueDateTarget]:
        lowered = [line.lower() for line in lines]

        for line in lowered:
            for phrase, symbol in self.rules.relative_phrases.items():
                if phrase in line:
                    return DueDateTarget(symbol=symbol)

        for line in lowered:
            if not any(cue in line for cue in self.rules.due_cues):
                continue
            match = DATE_TOKEN_RE.search(line)
            if match:
                return DueDateTarget(token=match.group(0))

        return None

    def resolve(self, target: DueDateTarget, today: date) -> Optional[date]:
        if target.symbol is not None:
            return self._resolve_symbol(target.symbol, today)
        if target.token is not None:
            return parse_date_token(target.token, today)
        return None

    def resolve_window(self, lines: Iterable[str], today: date) -> Optional[date]:
        target = self.find_target(lines)
        if target is None:
            return None
        return self.resolve(target, today)

    def _resolve_symbol(self, symbol: str, today: date) -> Optional[date]:
        if symbol.startswith("weekday:"):
            weekday = WEEKDAYS.get(symbol.split(":", 1)[1])
            if weekday is None:
                return None
            return next_weekday(today, weekday)

        offset = _OFFSET_RE.match(symbol)
        if offset:
            return today + timedelta(days=int(offset.group(1)))

        if symbol == "end_of_month":
            return end_of_month(today)

        if symbol == "end_of_semester":
            month, day = (int(p) for p in self.rules.semester_end.split("-"))
            return _safe_date(today.year, month, day)

        logger.warning(f"Unknown relative date target: {symbol}")
        return None


def next_weekday(today: date, weekday: int) -> date:
    """Next occurrence of `weekday` strictly after `today` (Monday=0)."""
    days = (weekday - today.weekday()) % 7
    return today + timedelta(days=days or 7)


def end_of_month(today: date) -> date:
    return today.replace(day=calendar.monthrange(today.year, today.month)[1])


def parse_date_token(token: str, today: date) -> Optional[date]:
    """Parse an explicit date token; a missing year means `today`'s year."""
    match = DATE_TOKEN_RE.fullmatch(token.strip()) or DATE_TOKEN_RE.search(token)
    if match is None:
        return None

    g = match.groupdict()
    if g["md_month"]:
        return _safe_date(_year(g["md_year"], today), MONTHS[g["md_month"].lower()], int(g["md_day"]))
    if g["dm_month"]:
        return _safe_date(_year(g["dm_year"], today), MONTHS[g["dm_month"].lower()], int(g["dm_day"]))
    return _safe_date(_year(g["n_year"], today), int(g["n_month"]), int(g["n_day"]))


def _year(raw: Optional[str], today: date) -> int:
    if not raw:
        return today.year
    year = int(raw)
    return 2000 + year if year < 100 else year


def _safe_date(year: int, month: int, day: int) -> Optional[date]:
    try:
        return date(year, month, day)
    except ValueError:
        return None
