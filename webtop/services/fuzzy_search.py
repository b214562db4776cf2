from __future__ import annotations

import math
from dataclasses import dataclass
from typing import Any, Callable, Dict, Generic, Iterable, List, Optional, Sequence, Tuple, TypeVar

from rapidfuzz import fuzz
from rapidfuzz.utils import default_process

T = TypeVar("T")

EPSILON = 0.001

# field -> weight
DEFAULT_KEYS: Dict[str, float] = {"name": 2.0, "description": 1.0, "categories": 0.5}


@dataclass(slots=True)
class Match(Generic[T]):
    item: T
    score: float  # 0 is a perfect match, 1 is no match


def _field_values(item: Any, key: str) -> List[str]:
    value = item.get(key) if isinstance(item, dict) else getattr(item, key, None)
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return [str(v) for v in value if v]
    return [str(value)] if value else []


def field_score(query: str, values: Iterable[str]) -> Optional[float]:
    """Best distance of ``query`` against any of ``values``; None when empty.

    The query is aligned inside a field only when it fits; a query longer
    than the field is compared whole, so short fields such as a category
    "AI" do not match every query that happens to contain them.
    """
    query = default_process(query)
    best: Optional[float] = None
    for value in values:
        value = default_process(value)
        if not value:
            continue
        if len(query) <= len(value):
            similarity = fuzz.partial_ratio(query, value)
        else:
            similarity = fuzz.ratio(query, value)
        score = round(1.0 - similarity / 100.0, 6)
        if best is None or score < best:
            best = score
    return best


class FuzzyIndex(Generic[T]):
    """Weighted fuzzy matcher over a fixed list of records.

    Each field is scored independently; a record matches when at least one
    field scores below ``threshold``. The total score multiplies the field
    scores raised to their normalized weights, so heavier fields dominate.
    """

    def __init__(
        self,
        items: Sequence[T],
        keys: Optional[Dict[str, float]] = None,
        threshold: float = 0.4,
        get_value: Optional[Callable[[T, str], List[str]]] = None,
    ) -> None:
        self.items = list(items)
        self.keys = dict(keys or DEFAULT_KEYS)
        total = sum(self.keys.values()) or 1.0
        self._norm = {k: w / total for k, w in self.keys.items()}
        self.threshold = threshold
        self._get_value = get_value or _field_values

    def _score(self, query: str, item: T) -> Tuple[bool, float]:
        matched = False
        total = 1.0
        for key, norm in self._norm.items():
            score = field_score(query, self._get_value(item, key))
            if score is None or score >= self.threshold:
                continue
            matched = True
            total *= math.pow(max(score, EPSILON), norm)
        return matched, total

    def search(self, query: str, limit: Optional[int] = None) -> List[Match[T]]:
        query = query.strip()
        if not query:
            return [Match(item, 1.0) for item in self.items]
        matches = []
        for item in self.items:
            matched, score = self._score(query, item)
            if matched:
                matches.append(Match(item, score))
        # sorted() is stable, equal scores keep list order
        matches = sorted(matches, key=lambda m: m.score)
        if limit is not None:
            matches = matches[:limit]
        return matches
