"""
Candidate Repository.

Responsibilities:
- Candidate CRUD against a RecordStore.
- Keep the owned CandidateCache in step with every read and write.
- Upsert analysis results keyed on github_username.

Invariant:
Store failures never propagate. Reads fall back to the cache and writes
report a degraded WriteResult after updating the cache anyway.
"""

from dataclasses import dataclass, replace
from typing import Generic, List, Optional, TypeVar

from . import matcher
from .cache import CandidateCache
from .identifiers import IdentifierGenerator, uuid_identifier
from .logger import StructuredLogger, get_logger
from .models import CANDIDATE_STATUSES, AnalysisResult, Candidate, utc_timestamp
from .store import RecordStore

CANDIDATES_COLLECTION = "candidates"

T = TypeVar("T")


@dataclass
class WriteResult(Generic[T]):
    """Outcome of a write. cause is set when the store rejected it (cache-only)."""

    value: T
    cause: Optional[Exception] = None

    @property
    def ok(self) -> bool:
        return self.cause is None

    @property
    def degraded(self) -> bool:
        return self.cause is not None


class CandidateRepository:

    def __init__(
        self,
        store: RecordStore,
        cache: Optional[CandidateCache] = None,
        id_generator: Optional[IdentifierGenerator] = None,
        collection: str = CANDIDATES_COLLECTION,
        logger: Optional[StructuredLogger] = None,
    ):
        self.store = store
        self.cache = cache if cache is not None else CandidateCache()
        self.collection = collection
        self._new_id = id_generator or uuid_identifier
        self._log = logger or get_logger()

    def _store_failed(self, operation: str, error: Exception, **context):
        self._log.record_store_failure(operation, type(error).__name__)
        self._log.error(f"Record store {operation} failed", error=str(error), **context)

    def _write_failed(self, operation: str, error: Exception, **context):
        self._store_failed(operation, error, **context)
        self._log.record_degraded_write()

    def _fallback(self, operation: str):
        self._log.record_cache_fallback()
        self._log.debug("Serving from cache", operation=operation)

    # Reads

    def list(self) -> List[Candidate]:
        """All candidates. The cache is replaced only by a non-empty store result."""
        self._log.record_store_call("list")
        try:
            docs = self.store.list_all(self.collection)
        except Exception as e:
            self._store_failed("list", e)
            self._fallback("list")
            return self.cache.all()

        if not docs:
            self._fallback("list")
            return self.cache.all()

        candidates = [Candidate.from_document(doc_id, fields) for doc_id, fields in docs]
        self.cache.replace_all(candidates)
        return candidates

    def get_by_id(self, candidate_id: str) -> Optional[Candidate]:
        self._log.record_store_call("get")
        try:
            doc = self.store.get_by_id(self.collection, candidate_id)
        except Exception as e:
            self._store_failed("get", e, candidate_id=candidate_id)
            self._fallback("get")
            return self.cache.find(candidate_id)

        if doc is not None:
            return Candidate.from_document(*doc)
        return self.cache.find(candidate_id)

    def _query_username(self, github_username: str) -> Optional[Candidate]:
        self._log.record_store_call("query")
        docs = self.store.query_equals(self.collection, "githubUsername", github_username)
        if not docs:
            return None
        return Candidate.from_document(*docs[0])

    def get_by_username(self, github_username: str) -> Optional[Candidate]:
        """First candidate with this GitHub username, or None."""
        try:
            return self._query_username(github_username)
        except Exception as e:
            self._store_failed("query", e, github_username=github_username)
            self._fallback("query")
            return self.cache.find_by_username(github_username)

    # Writes

    def upsert_from_analysis(self, result: AnalysisResult) -> WriteResult[Candidate]:
        """
        Insert or update the candidate for result.profile.github_username.

        An existing record (cache first, then store) gets the new score,
        metrics and position. Otherwise a new pending candidate is created.
        Both paths update the cache even when the store write fails.
        """
        username = result.profile.github_username

        existing = self.cache.find_by_username(username)
        if existing is None:
            try:
                existing = self._query_username(username)
            except Exception as e:
                self._log.record_store_failure("query", type(e).__name__)
                self._log.warning("Could not check for existing candidate", github_username=username, error=str(e))

        if existing is not None:
            merged = replace(
                existing,
                match_score=result.match_score,
                commit_metrics=result.metrics,
                position=result.benchmark,
            )
            cause = None
            self._log.record_store_call("update")
            try:
                self.store.update_fields(self.collection, merged.id, merged.to_document())
            except Exception as e:
                self._write_failed("update", e, candidate_id=merged.id)
                cause = e
            self.cache.put_by_username(merged)
            self._log.info("Updated candidate from analysis", candidate_id=merged.id, github_username=username)
            return WriteResult(merged, cause)

        profile = result.profile
        candidate = Candidate(
            id=self._new_id(),
            name=profile.name or username,
            email=profile.email or f"{username}@example.com",
            github_username=username,
            avatar_url=profile.avatar_url,
            match_score=result.match_score,
            status="pending",
            commit_metrics=result.metrics,
            position=result.benchmark,
            created_at=utc_timestamp(),
        )
        cause = None
        self._log.record_store_call("insert")
        try:
            self.store.insert(self.collection, candidate.to_document(), doc_id=candidate.id)
        except Exception as e:
            self._write_failed("insert", e, candidate_id=candidate.id)
            cause = e
        self.cache.prepend(candidate)
        self._log.info("Created candidate from analysis", candidate_id=candidate.id, github_username=username)
        return WriteResult(candidate, cause)

    def update_status(self, candidate_id: str, status: str) -> WriteResult[Optional[Candidate]]:
        """Set the status in the store and the cache. Prefers the store's copy."""
        if status not in CANDIDATE_STATUSES:
            raise ValueError(f"Unknown status '{status}'. Expected one of: {', '.join(CANDIDATE_STATUSES)}")

        stored = None
        cause = None
        self._log.record_store_call("update")
        try:
            self.store.update_fields(self.collection, candidate_id, {"status": status})
        except Exception as e:
            self._write_failed("update", e, candidate_id=candidate_id)
            cause = e

        if cause is None:
            # The write landed; a failed re-read only costs us the store's copy.
            self._log.record_store_call("get")
            try:
                doc = self.store.get_by_id(self.collection, candidate_id)
                if doc is not None:
                    stored = Candidate.from_document(*doc)
            except Exception as e:
                self._store_failed("get", e, candidate_id=candidate_id)

        cached = self.cache.update(candidate_id, status=status)
        return WriteResult(stored or cached, cause)

    def delete(self, candidate_id: str) -> WriteResult[bool]:
        """
        Delete from the store and the cache.

        The value reports whether the store deletion succeeded. The cache
        entry is removed either way.
        """
        cause = None
        self._log.record_store_call("delete")
        try:
            self.store.delete_by_id(self.collection, candidate_id)
        except Exception as e:
            self._write_failed("delete", e, candidate_id=candidate_id)
            cause = e
        self.cache.remove(candidate_id)
        return WriteResult(cause is None, cause)

    def compare(self, candidate1_id: str, candidate2_id: str) -> Optional[matcher.Comparison]:
        """Compare two cached candidates. None unless both are cached."""
        return matcher.compare(self.cache, candidate1_id, candidate2_id)
