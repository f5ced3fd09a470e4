"""
Camp search and filter engine.

Pure functions over already-fetched camps. Each criterion is optional and
all given criteria must match. Sorting and pagination are applied after
filtering, always on the full result set.
"""

from __future__ import annotations

import math
from dataclasses import dataclass, replace
from datetime import date
from enum import Enum
from typing import Iterable, List, Optional, Sequence, Tuple

from campanion.status import DisplayStatus, created_at_key, display_status, sort_by_lifecycle

DEFAULT_PAGE_SIZE = 15
DEFAULT_PRICE_CEILING = 5000
MIN_PRICE_CEILING = 100


class SortOrder(str, Enum):
    """Result orderings used by the different listing views."""
    SOONEST = 'soonest'      # public discovery: earliest start first
    NEWEST = 'newest'        # creation time, newest first
    LIFECYCLE = 'lifecycle'  # Active, Draft, Archived; newest first within a status


class StatusFilter(str, Enum):
    """Status selector of the administrative camp list."""
    ALL = 'all'
    ACTIVE = 'active'
    DRAFT = 'draft'
    ARCHIVE = 'archive'

    @classmethod
    def parse(cls, value):
        """Read a selector from a query string, defaulting to ALL."""
        try:
            return cls(value)
        except ValueError:
            return cls.ALL


_STATUS_FILTER_DISPLAY = {
    StatusFilter.ACTIVE: DisplayStatus.ACTIVE,
    StatusFilter.DRAFT: DisplayStatus.DRAFT,
    StatusFilter.ARCHIVE: DisplayStatus.ARCHIVED,
}


@dataclass(frozen=True)
class CampCriteria:
    """
    Filter criteria for camp listings.

    Attributes:
        search: Case-insensitive substring matched against name,
            description and each activity.
        organizer_id: Exact organizer match.
        location: Exact location match.
        price_range: Inclusive (min, max) bounds.
        date_from / date_to: Overlap window; either bound may be omitted.
    """

    search: Optional[str] = None
    organizer_id: Optional[int] = None
    location: Optional[str] = None
    price_range: Optional[Tuple[float, float]] = None
    date_from: Optional[date] = None
    date_to: Optional[date] = None

    @property
    def has_date_bound(self):
        return self.date_from is not None or self.date_to is not None

    @property
    def is_empty(self):
        return self == CampCriteria()


def matches_search(camp, needle):
    if not needle:
        return True
    needle = needle.lower()
    haystacks = [camp.name or '', camp.description or '']
    haystacks.extend(camp.activities or [])
    return any(needle in str(text).lower() for text in haystacks)


def matches_organizer(camp, organizer_id):
    return organizer_id is None or camp.organizer_id == organizer_id


def matches_location(camp, location):
    return not location or camp.location == location


def matches_price(camp, price_range):
    if price_range is None:
        return True
    low, high = price_range
    return low <= camp.price <= high


def matches_dates(camp, date_from, date_to):
    """
    Interval overlap between the camp's dates and the filter window.

    A camp missing either date is excluded whenever any bound is given.
    """
    if date_from is None and date_to is None:
        return True
    if camp.start_date is None or camp.end_date is None:
        return False
    if date_to is not None and camp.start_date > date_to:
        return False
    if date_from is not None and camp.end_date < date_from:
        return False
    return True


def matches(camp, criteria: CampCriteria) -> bool:
    """True when the camp satisfies every given criterion."""
    return (
        matches_search(camp, criteria.search)
        and matches_organizer(camp, criteria.organizer_id)
        and matches_dates(camp, criteria.date_from, criteria.date_to)
        and matches_location(camp, criteria.location)
        and matches_price(camp, criteria.price_range)
    )


def filter_camps(camps: Iterable, criteria: CampCriteria) -> List:
    return [camp for camp in camps if matches(camp, criteria)]


def filter_by_status(camps: Iterable, status_filter: StatusFilter) -> List:
    """Keep camps whose display status matches the selector."""
    if status_filter is StatusFilter.ALL:
        return list(camps)
    wanted = _STATUS_FILTER_DISPLAY[status_filter]
    return [camp for camp in camps if display_status(camp) is wanted]


def sort_camps(camps: Iterable, order: SortOrder = SortOrder.SOONEST) -> List:
    """
    Order camps for a listing view.

    Camps without a start date sort first in SOONEST order; camps without a
    creation time sort last in NEWEST order.
    """
    if order is SortOrder.LIFECYCLE:
        return sort_by_lifecycle(camps)
    if order is SortOrder.NEWEST:
        return sorted(camps, key=created_at_key, reverse=True)
    return sorted(camps, key=lambda camp: camp.start_date or date.min)


def filter_and_sort(camps: Iterable, criteria: CampCriteria,
                    order: SortOrder = SortOrder.SOONEST) -> List:
    """Filter the full collection, then sort it."""
    return sort_camps(filter_camps(camps, criteria), order)


@dataclass(frozen=True)
class Page:
    """One page of a result set."""

    items: Sequence
    number: int
    per_page: int
    total: int

    @property
    def pages(self):
        return max(1, math.ceil(self.total / self.per_page)) if self.per_page else 1

    @property
    def has_prev(self):
        return self.number > 1

    @property
    def has_next(self):
        return self.number < self.pages

    @property
    def prev_num(self):
        return self.number - 1 if self.has_prev else None

    @property
    def next_num(self):
        return self.number + 1 if self.has_next else None


def paginate(items: Sequence, page: int = 1, per_page: int = DEFAULT_PAGE_SIZE) -> Page:
    """
    Slice a sorted result set into a page.

    Out-of-range page numbers are clamped to the first or last page.
    """
    items = list(items)
    total = len(items)
    last_page = max(1, math.ceil(total / per_page))
    number = min(max(1, page or 1), last_page)
    start = (number - 1) * per_page
    return Page(items=items[start:start + per_page], number=number, per_page=per_page, total=total)


@dataclass(frozen=True)
class ListingState:
    """
    Criteria plus page index of a listing view.

    Changing the criteria always goes back to page 1; changing the page
    leaves the criteria alone.
    """

    criteria: CampCriteria = CampCriteria()
    status_filter: StatusFilter = StatusFilter.ALL
    page: int = 1

    def with_criteria(self, criteria: CampCriteria) -> 'ListingState':
        return replace(self, criteria=criteria, page=1)

    def with_status_filter(self, status_filter: StatusFilter) -> 'ListingState':
        return replace(self, status_filter=status_filter, page=1)

    def with_page(self, page: int) -> 'ListingState':
        return replace(self, page=page)


def unique_locations(camps: Iterable) -> List[str]:
    """Sorted distinct locations, used to populate the location selector."""
    return sorted({camp.location for camp in camps if camp.location})


def price_ceiling(camps: Sequence) -> float:
    """Upper bound offered by the price filter."""
    prices = [camp.price for camp in camps]
    if not prices:
        return DEFAULT_PRICE_CEILING
    return max(max(prices), MIN_PRICE_CEILING)


def split_by_end_date(camps: Iterable, today: date):
    """
    Split camps into current (ending today or later) and past.

    Camps without an end date count as past.

    Returns:
        tuple: (current, past) lists in input order.
    """
    current, past = [], []
    for camp in camps:
        if camp.end_date is not None and camp.end_date >= today:
            current.append(camp)
        else:
            past.append(camp)
    return current, past
