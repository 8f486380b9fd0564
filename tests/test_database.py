"""
Tests for the database handle and its startup retry policy.
"""
import pytest

from socialnet import database
from socialnet.database import Database


class TestDatabaseBootstrap:
    def test_connects_to_reachable_store(self):
        db = Database("sqlite://", retries=1, retry_delay=0)
        db.connect()
        db.create_all()
        assert db.ping()
        db.dispose()

    def test_exits_after_bounded_retries(self, monkeypatch):
        delays = []
        monkeypatch.setattr(database.time, "sleep", delays.append)

        db = Database("sqlite:////nonexistent-dir/socialnet.db", retries=3, retry_delay=2.5)
        with pytest.raises(SystemExit) as exc:
            db.connect()

        assert exc.value.code == 1
        # Fixed delay between attempts, none after the last
        assert delays == [2.5, 2.5]

    def test_retries_must_be_positive(self):
        with pytest.raises(ValueError):
            Database("sqlite://", retries=0)

    def test_session_is_bound_to_engine(self):
        db = Database("sqlite://", retries=1, retry_delay=0)
        session = db.session()
        try:
            assert session.get_bind() is db.engine
        finally:
            session.close()
            db.dispose()


class TestHealth:
    def test_health(self, client):
        response = client.get("/api/health")
        assert response.status_code == 200
        data = response.json()
        assert data["status"] == "healthy"
        assert data["checks"]["database"] == "healthy"

    def test_security_headers(self, client):
        response = client.get("/")
        assert response.headers["x-content-type-options"] == "nosniff"
        assert response.headers["x-frame-options"] == "DENY"
