"""
Pytest configuration and shared fixtures.
"""

import itertools

import pytest
from typing import Any, Dict

from candidatehub.cache import CandidateCache
from candidatehub.logger import StructuredLogger
from candidatehub.models import AnalysisResult, Candidate, CandidateProfile, CommitMetrics
from candidatehub.repository import CandidateRepository
from candidatehub.store import InMemoryRecordStore, StoreUnavailable


class FailingRecordStore(InMemoryRecordStore):
    """In-memory store whose calls all raise StoreUnavailable while offline."""

    def __init__(self, offline: bool = True):
        super().__init__()
        self.offline = offline

    def _check(self):
        if self.offline:
            raise StoreUnavailable("store offline")

    def list_all(self, collection):
        self._check()
        return super().list_all(collection)

    def get_by_id(self, collection, doc_id):
        self._check()
        return super().get_by_id(collection, doc_id)

    def query_equals(self, collection, field, value):
        self._check()
        return super().query_equals(collection, field, value)

    def insert(self, collection, fields, doc_id=None):
        self._check()
        return super().insert(collection, fields, doc_id)

    def update_fields(self, collection, doc_id, partial):
        self._check()
        return super().update_fields(collection, doc_id, partial)

    def delete_by_id(self, collection, doc_id):
        self._check()
        return super().delete_by_id(collection, doc_id)


def make_candidate(
    candidate_id: str,
    username: str,
    match_score: float = 80,
    status: str = "pending",
    position: str = "backend",
    **metrics,
) -> Candidate:
    values = dict(
        code_quality_score=70,
        consistency_score=70,
        collaboration_score=70,
        technical_diversity_score=70,
        overall_score=70,
        total_commits=100,
    )
    values.update(metrics)
    return Candidate(
        id=candidate_id,
        name=username.title(),
        email=f"{username}@mail.test",
        github_username=username,
        avatar_url=f"https://avatars.example.com/{username}",
        match_score=match_score,
        status=status,
        commit_metrics=CommitMetrics(**values),
        position=position,
        created_at="2024-05-01T12:00:00.000Z",
    )


def make_analysis(username: str, match_score: float = 75, benchmark: str = "backend", email=None, name=None) -> AnalysisResult:
    return AnalysisResult(
        profile=CandidateProfile(
            github_username=username,
            name=name,
            email=email,
            avatar_url=f"https://avatars.example.com/{username}",
        ),
        metrics=CommitMetrics(
            code_quality_score=match_score,
            consistency_score=60,
            collaboration_score=65,
            technical_diversity_score=55,
            overall_score=match_score - 5,
            total_commits=240,
        ),
        match_score=match_score,
        benchmark=benchmark,
    )


@pytest.fixture
def quiet_logger(tmp_path) -> StructuredLogger:
    """Logger writing only to a temporary directory."""
    return StructuredLogger(name="candidatehub-test", log_dir=tmp_path / "logs", enable_console=False)


@pytest.fixture
def sequential_ids():
    counter = itertools.count(1)
    return lambda: f"cand-{next(counter)}"


@pytest.fixture
def memory_store() -> InMemoryRecordStore:
    return InMemoryRecordStore()


@pytest.fixture
def failing_store() -> FailingRecordStore:
    return FailingRecordStore()


@pytest.fixture
def repo(memory_store, quiet_logger, sequential_ids) -> CandidateRepository:
    return CandidateRepository(memory_store, id_generator=sequential_ids, logger=quiet_logger)


@pytest.fixture
def offline_repo(failing_store, quiet_logger, sequential_ids) -> CandidateRepository:
    return CandidateRepository(failing_store, cache=CandidateCache(), id_generator=sequential_ids, logger=quiet_logger)


@pytest.fixture
def valid_analysis() -> Dict[str, Any]:
    """Valid analysis result JSON."""
    return {
        "profile": {
            "githubUsername": "octocat",
            "name": "The Octocat",
            "email": "octocat@github.test",
            "avatarUrl": "https://avatars.githubusercontent.com/u/583231",
        },
        "metrics": {
            "codeQualityScore": 88,
            "consistencyScore": 72.5,
            "collaborationScore": 64,
            "technicalDiversityScore": 91,
            "overallScore": 80,
            "totalCommits": 412,
        },
        "matchScore": 86,
        "benchmark": "senior-backend",
    }
