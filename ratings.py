"""Average ratings over a college's embedded reviews."""

from typing import Any, Dict, Iterable, List


def average_rating(reviews: Iterable[Dict[str, Any]]) -> float:
    """Mean of the ``rating`` values; a college with no reviews averages 0."""
    ratings = [float(r.get("rating", 0)) for r in reviews or []]
    if not ratings:
        return 0.0
    return sum(ratings) / len(ratings)


def with_average(college: Dict[str, Any]) -> Dict[str, Any]:
    d = {**college}
    d["average_rating"] = round(average_rating(d.get("reviews", [])), 2)
    return d


def top_rated(colleges: Iterable[Dict[str, Any]], count: int = 3) -> List[Dict[str, Any]]:
    # sorted() is stable, so equal averages keep store order
    ranked = sorted(colleges, key=lambda c: average_rating(c.get("reviews", [])), reverse=True)
    return [with_average(c) for c in ranked[:count]]
