"""
Runtime configuration read from the environment.

Call load_env() first to pick up a local .env file.
"""

import os
from dataclasses import dataclass
from pathlib import Path
from typing import Mapping, Optional

from .database import SqlRecordStore
from .firestore import FirestoreStore
from .logger import StructuredLogger
from .repository import CANDIDATES_COLLECTION
from .store import InMemoryRecordStore, RecordStore

BACKENDS = ("memory", "sqlite", "firestore")


class ConfigError(ValueError):
    """Raised when the environment describes an unusable setup."""
    pass


def _optional_path(value: Optional[str]) -> Optional[Path]:
    return Path(value) if value else None


@dataclass
class Settings:
    backend: str = "sqlite"
    db_path: Path = Path("data/candidates.db")
    collection: str = CANDIDATES_COLLECTION
    firebase_project_id: Optional[str] = None
    firebase_credentials: Optional[Path] = None
    timeout: float = 15
    log_level: str = "INFO"
    log_dir: Path = Path("logs")

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        backend = env.get("CANDIDATEHUB_BACKEND", "sqlite").strip().lower()
        if backend not in BACKENDS:
            raise ConfigError(f"CANDIDATEHUB_BACKEND must be one of {', '.join(BACKENDS)}, got '{backend}'")

        timeout = env.get("CANDIDATEHUB_TIMEOUT", "15")
        try:
            timeout_value = float(timeout)
        except ValueError:
            raise ConfigError(f"CANDIDATEHUB_TIMEOUT must be a number, got '{timeout}'")

        return cls(
            backend=backend,
            db_path=Path(env.get("CANDIDATEHUB_DB_PATH", "data/candidates.db")),
            collection=env.get("CANDIDATEHUB_COLLECTION", CANDIDATES_COLLECTION),
            firebase_project_id=env.get("FIREBASE_PROJECT_ID") or None,
            firebase_credentials=_optional_path(env.get("FIREBASE_CREDENTIALS")),
            timeout=timeout_value,
            log_level=env.get("CANDIDATEHUB_LOG_LEVEL", "INFO").upper(),
            log_dir=Path(env.get("CANDIDATEHUB_LOG_DIR", "logs")),
        )


def build_store(settings: Settings, logger: Optional[StructuredLogger] = None) -> RecordStore:
    """Instantiate the record store selected by settings.backend."""
    if settings.backend == "memory":
        return InMemoryRecordStore()
    if settings.backend == "firestore":
        if not settings.firebase_project_id:
            raise ConfigError("FIREBASE_PROJECT_ID is required for the firestore backend")
        if settings.firebase_credentials and not settings.firebase_credentials.is_file():
            raise ConfigError(f"FIREBASE_CREDENTIALS file not found: {settings.firebase_credentials}")
        return FirestoreStore(
            project_id=settings.firebase_project_id,
            credentials_path=settings.firebase_credentials,
            timeout=settings.timeout,
            logger=logger,
        )
    return SqlRecordStore(settings.db_path)
