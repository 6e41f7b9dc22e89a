"""
In-memory candidate cache.

Degraded-mode fallback owned by a repository. Never authoritative while the
store is reachable. Writes swap in a new list so readers never see a
half-applied change.
"""

from dataclasses import replace
from typing import Iterable, List, Optional

from .models import Candidate


class CandidateCache:

    def __init__(self, candidates: Optional[Iterable[Candidate]] = None):
        self._items: List[Candidate] = list(candidates or [])

    def __len__(self) -> int:
        return len(self._items)

    def all(self) -> List[Candidate]:
        return list(self._items)

    def replace_all(self, candidates: Iterable[Candidate]) -> None:
        self._items = list(candidates)

    def find(self, candidate_id: str) -> Optional[Candidate]:
        return next((c for c in self._items if c.id == candidate_id), None)

    def find_by_username(self, github_username: str) -> Optional[Candidate]:
        return next((c for c in self._items if c.github_username == github_username), None)

    def prepend(self, candidate: Candidate) -> None:
        self._items = [candidate] + self._items

    def put_by_username(self, candidate: Candidate) -> None:
        """Replace entries sharing the candidate's username, or prepend it."""
        if self.find_by_username(candidate.github_username) is None:
            self.prepend(candidate)
            return
        self._items = [
            candidate if c.github_username == candidate.github_username else c
            for c in self._items
        ]

    def update(self, candidate_id: str, **changes) -> Optional[Candidate]:
        """Apply field changes to the cached record. Returns it, or None if absent."""
        current = self.find(candidate_id)
        if current is None:
            return None
        updated = replace(current, **changes)
        self._items = [updated if c.id == candidate_id else c for c in self._items]
        return updated

    def remove(self, candidate_id: str) -> bool:
        before = len(self._items)
        self._items = [c for c in self._items if c.id != candidate_id]
        return len(self._items) < before
