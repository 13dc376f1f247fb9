"""Search trends: term frequency in a recent window vs the window before it.

Only terms searched in the recent window are reported. A term that
disappeared entirely is not listed as declining.
"""

from collections import Counter
from dataclasses import dataclass
from typing import Iterable

from tripscope.services.metrics import calculate_growth_rate


@dataclass(frozen=True)
class SearchTrend:
    term: str
    count: int
    trend: str   # "rising" | "stable" | "declining"
    change: int  # growth rate vs the previous window, percent

    def to_dict(self) -> dict:
        return {"term": self.term, "count": self.count, "trend": self.trend, "change": self.change}


def normalize_term(term: str) -> str:
    return term.strip().lower()


def count_terms(searches: Iterable[str]) -> Counter:
    """Case-folded, trimmed term counts. Blank searches are dropped."""
    counts = Counter()
    for search in searches:
        term = normalize_term(search)
        if term:
            counts[term] += 1
    return counts


def classify_change(change: float, threshold: float = 20) -> str:
    if change > threshold:
        return "rising"
    if change < -threshold:
        return "declining"
    return "stable"


def analyze_search_trends(
    recent_searches: Iterable[str],
    previous_searches: Iterable[str],
    threshold: float = 20,
    limit: int = 15,
) -> list[SearchTrend]:
    """Top `limit` recent terms by count, each with its change vs the previous window."""
    recent = count_terms(recent_searches)
    previous = count_terms(previous_searches)

    trends = []
    # Counter preserves first-seen order, so ties keep the order terms were searched
    for term, count in recent.items():
        change = calculate_growth_rate(count, previous.get(term, 0))
        trends.append(SearchTrend(
            term=term,
            count=count,
            trend=classify_change(change, threshold),
            change=change,
        ))

    trends.sort(key=lambda t: t.count, reverse=True)
    return trends[:max(0, limit)]
