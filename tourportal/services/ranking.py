# tourportal/services/ranking.py
"""
Popularity ranking.

Popularity is the number of COMPLETED orders attributed to a tour, summed over
the tours of a destination. Both rankings are stable: ties keep input order.
"""

from dataclasses import dataclass
from typing import Any, Iterable, List


@dataclass(frozen=True)
class PopularityEntry:
    item: Any
    order_count: int
    tour_count: int = 0


def rank_destinations(entries: Iterable[PopularityEntry]) -> List[PopularityEntry]:
    """Descending by order count, ties broken by descending tour count."""
    return sorted(entries, key=lambda e: (-e.order_count, -e.tour_count))


def rank_tours(entries: Iterable[PopularityEntry]) -> List[PopularityEntry]:
    """Descending by order count only."""
    return sorted(entries, key=lambda e: -e.order_count)


def top(entries: List[PopularityEntry], limit: int) -> List[PopularityEntry]:
    if limit is None or limit <= 0:
        return list(entries)
    return list(entries[:limit])
