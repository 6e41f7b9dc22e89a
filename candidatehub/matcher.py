"""
Candidate filtering and head-to-head comparison.

Pure functions over in-memory data, no I/O.
"""

from dataclasses import dataclass
from typing import Callable, Dict, Iterable, List, Optional, Tuple

from .cache import CandidateCache
from .models import Candidate

HIGH_SCORE = 85
MEDIUM_SCORE = 70

COMPARED_METRICS: List[Tuple[str, Callable[[Candidate], float]]] = [
    ("match_score", lambda c: c.match_score),
    ("code_quality", lambda c: c.commit_metrics.code_quality_score),
    ("consistency", lambda c: c.commit_metrics.consistency_score),
    ("collaboration", lambda c: c.commit_metrics.collaboration_score),
    ("technical_diversity", lambda c: c.commit_metrics.technical_diversity_score),
    ("overall_score", lambda c: c.commit_metrics.overall_score),
    ("total_commits", lambda c: c.commit_metrics.total_commits),
]


def score_bucket(match_score: float) -> str:
    if match_score >= HIGH_SCORE:
        return "high"
    if match_score >= MEDIUM_SCORE:
        return "medium"
    return "low"


def filter_candidates(
    candidates: Iterable[Candidate],
    search_term: str = "",
    status_filter: str = "all",
    position_filter: str = "all",
    score_filter: str = "all",
) -> List[Candidate]:
    """
    Candidates passing every filter.

    search_term matches name or github_username, case-insensitively. The
    other filters accept "all" or an exact value; score_filter takes "high"
    (>= 85), "medium" (70 to 85) or "low" (< 70). Unknown score filters
    match everything.
    """
    term = search_term.lower()
    result = []
    for candidate in candidates:
        if term not in candidate.name.lower() and term not in candidate.github_username.lower():
            continue
        if status_filter != "all" and candidate.status != status_filter:
            continue
        if position_filter != "all" and candidate.position != position_filter:
            continue
        if score_filter in ("high", "medium", "low") and score_bucket(candidate.match_score) != score_filter:
            continue
        result.append(candidate)
    return result


@dataclass
class MetricComparison:
    difference: float
    winner: str


@dataclass
class Comparison:
    candidate1: Candidate
    candidate2: Candidate
    metrics: Dict[str, MetricComparison]
    candidate1_wins: int
    candidate2_wins: int
    overall_winner: Candidate


def compare_candidates(candidate1: Candidate, candidate2: Candidate) -> Comparison:
    """
    Metric-by-metric comparison, candidate1 minus candidate2.

    Ties go to candidate2, both per metric and overall.
    """
    metrics: Dict[str, MetricComparison] = {}
    for name, value in COMPARED_METRICS:
        first, second = value(candidate1), value(candidate2)
        metrics[name] = MetricComparison(
            difference=first - second,
            winner=candidate1.id if first > second else candidate2.id,
        )

    candidate1_wins = 0
    candidate2_wins = 0
    for metric in metrics.values():
        if metric.winner == candidate1.id:
            candidate1_wins += 1
        elif metric.winner == candidate2.id:
            candidate2_wins += 1

    return Comparison(
        candidate1=candidate1,
        candidate2=candidate2,
        metrics=metrics,
        candidate1_wins=candidate1_wins,
        candidate2_wins=candidate2_wins,
        overall_winner=candidate1 if candidate1_wins > candidate2_wins else candidate2,
    )


def compare(cache: CandidateCache, candidate1_id: str, candidate2_id: str) -> Optional[Comparison]:
    """Compare two cached candidates by id. None if either is not cached."""
    candidate1 = cache.find(candidate1_id)
    candidate2 = cache.find(candidate2_id)
    if candidate1 is None or candidate2 is None:
        return None
    return compare_candidates(candidate1, candidate2)
