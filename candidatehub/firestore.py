"""
Firestore document store.

Wraps google-cloud-firestore. The client library's own retries are turned
off so that RetryPolicy decides what is retried and the circuit breaker
sees every failure. A missing document on update becomes DocumentNotFound;
every other API, auth or retry failure becomes StoreUnavailable.
"""

from pathlib import Path
from typing import Any, Callable, Dict, List, Optional

from google.api_core import exceptions as api_exceptions
from google.auth.exceptions import GoogleAuthError
from google.cloud import firestore
from google.cloud.firestore_v1.base_query import FieldFilter
from google.oauth2 import service_account

from .logger import StructuredLogger, get_logger
from .retry import CircuitBreaker, CircuitOpenError, RetryError, RetryPolicy
from .store import Document, DocumentNotFound, RecordStore, StoreUnavailable

# Failures that count against the circuit breaker.
BACKEND_ERRORS = (api_exceptions.GoogleAPICallError, GoogleAuthError, RetryError)


def _document(snapshot) -> Document:
    return (snapshot.id, snapshot.to_dict() or {})


class FirestoreStore(RecordStore):
    """RecordStore backed by a Firestore database."""

    def __init__(
        self,
        project_id: Optional[str] = None,
        credentials_path: Optional[Path] = None,
        timeout: float = 15,
        retry_policy: Optional[RetryPolicy] = None,
        failure_threshold: int = 5,
        recovery_timeout: float = 60,
        client: Optional[firestore.Client] = None,
        logger: Optional[StructuredLogger] = None,
        sleep: Optional[Callable[[float], None]] = None,
    ):
        self.project_id = project_id
        self.credentials_path = credentials_path
        self.timeout = timeout
        self.retry_policy = retry_policy or RetryPolicy()
        self._client = client
        self._logger = logger
        self._sleep = sleep
        self._breaker = CircuitBreaker(
            failure_threshold=failure_threshold,
            recovery_timeout=recovery_timeout,
            counts=BACKEND_ERRORS,
        )

    @property
    def client(self) -> firestore.Client:
        """The Firestore client, created on first use."""
        if self._client is None:
            credentials = None
            if self.credentials_path:
                credentials = service_account.Credentials.from_service_account_file(str(self.credentials_path))
            self._client = firestore.Client(project=self.project_id, credentials=credentials)
        return self._client

    @property
    def logger(self) -> StructuredLogger:
        return self._logger or get_logger()

    def _on_retry(self, attempt: int, error: Exception, delay: float):
        self.logger.warning("Retrying Firestore call", attempt=attempt, error=str(error), delay=delay)

    def _call(self, operation: str, func: Callable, *args):
        def attempt():
            try:
                return func(*args)
            except api_exceptions.NotFound as e:
                raise DocumentNotFound(f"Firestore {operation}: {e.message}") from e

        try:
            return self._breaker.call(self.retry_policy.call, attempt, on_retry=self._on_retry, sleep=self._sleep)
        except CircuitOpenError as e:
            raise StoreUnavailable(str(e)) from e
        except BACKEND_ERRORS as e:
            raise StoreUnavailable(f"Firestore {operation} failed: {e}") from e

    def _options(self) -> Dict[str, Any]:
        return {"retry": None, "timeout": self.timeout}

    def list_all(self, collection: str) -> List[Document]:
        def fetch():
            stream = self.client.collection(collection).stream(**self._options())
            return [_document(snapshot) for snapshot in stream]

        return self._call("list", fetch)

    def get_by_id(self, collection: str, doc_id: str) -> Optional[Document]:
        def fetch():
            snapshot = self.client.collection(collection).document(doc_id).get(**self._options())
            return _document(snapshot) if snapshot.exists else None

        return self._call("get", fetch)

    def query_equals(self, collection: str, field: str, value: Any) -> List[Document]:
        def fetch():
            query = self.client.collection(collection).where(filter=FieldFilter(field, "==", value))
            return [_document(snapshot) for snapshot in query.stream(**self._options())]

        return self._call("query", fetch)

    def insert(self, collection: str, fields: Dict[str, Any], doc_id: Optional[str] = None) -> str:
        def write():
            ref = self.client.collection(collection).document(doc_id)
            ref.set(fields, **self._options())
            return ref.id

        return self._call("insert", write)

    def update_fields(self, collection: str, doc_id: str, partial: Dict[str, Any]) -> None:
        def write():
            self.client.collection(collection).document(doc_id).update(partial, **self._options())

        self._call("update", write)

    def delete_by_id(self, collection: str, doc_id: str) -> None:
        def write():
            self.client.collection(collection).document(doc_id).delete(**self._options())

        self._call("delete", write)
