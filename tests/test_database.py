"""
Tests for database.py - SQLite document store.
"""

import pytest
from sqlalchemy import create_engine, inspect
from sqlalchemy.exc import OperationalError

from candidatehub.database import SqlRecordStore, StoredDocument, init_database
from candidatehub.repository import CandidateRepository
from candidatehub.store import DocumentNotFound, StoreUnavailable

from conftest import make_analysis


class TestDatabaseInit:
    """Test database initialization."""

    def test_init_creates_database_file(self, tmp_path):
        """Test that init_database creates the database file."""
        db_path = tmp_path / "test.db"
        assert not db_path.exists()

        init_database(db_path)

        assert db_path.exists()

    def test_init_creates_tables(self, tmp_path):
        """Test that init_database creates the documents table."""
        db_path = tmp_path / "test.db"
        init_database(db_path)

        engine = create_engine(f"sqlite:///{db_path}")
        assert inspect(engine).has_table(StoredDocument.__tablename__)
        engine.dispose()

    def test_init_creates_parent_directories(self, tmp_path):
        """Test that init_database creates parent directories if missing."""
        db_path = tmp_path / "nested" / "dir" / "test.db"
        assert not db_path.parent.exists()

        init_database(db_path)

        assert db_path.exists()


class TestSqlRecordStore:
    """Test CRUD through the RecordStore interface."""

    @pytest.fixture
    def store(self, tmp_path):
        store = SqlRecordStore(tmp_path / "candidates.db")
        yield store
        store.close()

    def test_insert_with_id_and_get(self, store):
        doc_id = store.insert("candidates", {"githubUsername": "alice", "matchScore": 90}, doc_id="a")

        assert doc_id == "a"
        assert store.get_by_id("candidates", "a") == ("a", {"githubUsername": "alice", "matchScore": 90})

    def test_insert_assigns_id(self, store):
        doc_id = store.insert("candidates", {"githubUsername": "bob"})

        assert doc_id
        assert store.get_by_id("candidates", doc_id)[1]["githubUsername"] == "bob"

    def test_get_missing_returns_none(self, store):
        assert store.get_by_id("candidates", "nope") is None

    def test_collections_are_separate(self, store):
        store.insert("candidates", {"name": "x"}, doc_id="same")
        store.insert("archive", {"name": "y"}, doc_id="same")

        assert store.get_by_id("candidates", "same")[1] == {"name": "x"}
        assert len(store.list_all("archive")) == 1

    def test_list_all(self, store):
        store.insert("candidates", {"githubUsername": "alice"}, doc_id="a")
        store.insert("candidates", {"githubUsername": "bob"}, doc_id="b")

        docs = store.list_all("candidates")

        assert sorted(doc_id for doc_id, _ in docs) == ["a", "b"]

    def test_query_equals(self, store):
        store.insert("candidates", {"githubUsername": "alice"}, doc_id="a")
        store.insert("candidates", {"githubUsername": "bob"}, doc_id="b")

        assert store.query_equals("candidates", "githubUsername", "bob") == [("b", {"githubUsername": "bob"})]
        assert store.query_equals("candidates", "githubUsername", "carol") == []

    def test_update_fields_merges(self, store):
        store.insert("candidates", {"githubUsername": "alice", "status": "pending"}, doc_id="a")

        store.update_fields("candidates", "a", {"status": "hired"})

        assert store.get_by_id("candidates", "a")[1] == {"githubUsername": "alice", "status": "hired"}

    def test_update_missing_raises(self, store):
        with pytest.raises(DocumentNotFound):
            store.update_fields("candidates", "ghost", {"status": "hired"})

    def test_delete(self, store):
        store.insert("candidates", {"githubUsername": "alice"}, doc_id="a")

        store.delete_by_id("candidates", "a")
        store.delete_by_id("candidates", "a")

        assert store.get_by_id("candidates", "a") is None

    def test_sqlalchemy_errors_become_store_unavailable(self, store, monkeypatch):
        def broken_session():
            raise OperationalError("SELECT 1", {}, Exception("database is locked"))

        monkeypatch.setattr(store, "_Session", broken_session)

        with pytest.raises(StoreUnavailable):
            store.list_all("candidates")

    def test_repository_round_trip(self, store, quiet_logger):
        """Upsert, status change and reload through a fresh repository."""
        repo = CandidateRepository(store, logger=quiet_logger)
        created = repo.upsert_from_analysis(make_analysis("octo", match_score=81)).value
        repo.update_status(created.id, "reviewed")

        reloaded = CandidateRepository(store, logger=quiet_logger).get_by_id(created.id)

        assert reloaded.github_username == "octo"
        assert reloaded.status == "reviewed"
        assert reloaded.match_score == 81
        assert reloaded.commit_metrics == created.commit_metrics
