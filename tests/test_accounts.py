"""
Tests for patient accounts, sessions and self-report submission.
"""

import sys
from pathlib import Path

# Add project root to path
sys.path.insert(0, str(Path(__file__).parent.parent))

import asyncio
import json
import threading

import pytest


@pytest.fixture
def store():
    from mediscout.db import MemoryStore
    return MemoryStore()


@pytest.fixture
def service(store):
    from mediscout.auth import AccountService
    from mediscout.db import UserRepository
    from mediscout.predictor import SymptomMatcher

    return AccountService(UserRepository(store), matcher=SymptomMatcher(delay_seconds=0))


def _register(service, username="asha", password="secret", **extra):
    from mediscout.models import RegistrationRequest

    fields = {"name": "Asha", "age": 29, "gender": "Female", "location": "Lahore"}
    fields.update(extra)
    return service.register(RegistrationRequest(username=username, password=password, **fields))


class TestRegistration:
    """Test account registration."""

    def test_register_creates_account_and_session(self, service, store):
        from mediscout.models import USERS_STORAGE_KEY

        result = _register(service)
        assert result.success
        assert result.user.username == "asha"
        assert result.user.id.startswith("user_")
        assert result.user.health_records == []
        assert result.session.user == result.user
        assert service.sessions.get(result.session.token) is not None

        stored = json.loads(store.get(USERS_STORAGE_KEY))
        assert stored[0]["username"] == "asha"
        assert stored[0]["healthRecords"] == []

    def test_duplicate_username_leaves_store_untouched(self, service, store):
        from mediscout.auth import USERNAME_TAKEN
        from mediscout.models import USERS_STORAGE_KEY

        _register(service)
        before = store.get(USERS_STORAGE_KEY)

        result = _register(service, password="another")
        assert not result.success
        assert result.message == USERNAME_TAKEN
        assert result.session is None
        assert store.get(USERS_STORAGE_KEY) == before

    def test_user_ids_are_unique(self, service):
        first = _register(service, username="a")
        second = _register(service, username="b")
        assert first.user.id != second.user.id

    def test_empty_registry_is_used(self):
        from mediscout.auth import AccountService, SessionRegistry
        from mediscout.db import MemoryStore, UserRepository

        registry = SessionRegistry()
        service = AccountService(UserRepository(MemoryStore()), sessions=registry)
        assert service.sessions is registry

        result = _register(service)
        assert registry.get(result.session.token) is not None

    def test_register_mirrors_current_user(self, service):
        result = _register(service)
        assert service.users.get_current() == result.user


class TestLogin:
    """Test login and logout."""

    def test_login_returns_stored_account(self, service):
        registered = _register(service).user
        result = service.login("asha", "secret")
        assert result.success
        assert result.user == registered
        assert result.message == "Welcome back, Asha!"

    @pytest.mark.parametrize("username,password", [
        ("asha", "wrong"),
        ("nobody", "secret"),
    ])
    def test_login_failure_is_generic(self, service, username, password):
        from mediscout.auth import INVALID_CREDENTIALS

        _register(service)
        result = service.login(username, password)
        assert not result.success
        assert result.message == INVALID_CREDENTIALS
        assert result.user is None

    def test_logout_closes_session(self, service):
        session = _register(service).session
        service.logout(session)
        assert service.sessions.get(session.token) is None
        assert service.users.get_current() is None

    def test_logout_keeps_other_users_mirror(self, service):
        first = _register(service, username="a").session
        second = _register(service, username="b").user
        service.logout(first)
        assert service.users.get_current() == second

    def test_sessions_are_independent(self, service):
        _register(service, username="a")
        _register(service, username="b")
        first = service.login("a", "secret").session
        second = service.login("b", "secret").session
        assert len(service.sessions) == 4
        service.logout(first)
        assert service.sessions.get(second.token).user.username == "b"


class TestSubmission:
    """Test health-record submission."""

    def test_empty_symptoms_rejected(self, service):
        from mediscout.auth import EMPTY_SYMPTOMS

        session = _register(service).session
        result = asyncio.run(service.submit_health_record(session, "   "))
        assert not result.success
        assert result.message == EMPTY_SYMPTOMS
        assert service.users.get_by_id(session.user_id).health_records == []

    def test_submission_appends_record(self, service):
        from mediscout.models import ImageDescriptor

        session = _register(service).session
        image = ImageDescriptor(name="rash.jpg", type="image/jpeg", size=2048)
        result = asyncio.run(service.submit_health_record(
            session,
            "High fever, headache, rash for 3 days",
            temperature="39.1",
            weight="52",
            image=image,
        ))

        assert result.success
        assert result.prediction.prediction == "Febrile Illness (Suspected Vector-borne)"
        assert result.record.ai_prediction.risk_score == 7.0
        assert result.record.vitals.temperature == "39.1"
        assert result.record.image_file == image

        stored = service.users.get_by_id(session.user_id)
        assert stored.health_records == [result.record]
        # The open session sees the new record too
        assert service.sessions.get(session.token).user.health_records == [result.record]

    def test_records_keep_submission_order(self, service):
        session = _register(service).session
        for symptoms in ("cough", "loose motion", "fever"):
            asyncio.run(service.submit_health_record(session, symptoms))

        stored = service.users.get_by_id(session.user_id)
        assert [r.symptoms for r in stored.health_records] == ["cough", "loose motion", "fever"]

    def test_stored_record_shape(self, service, store):
        from mediscout.models import USERS_STORAGE_KEY

        session = _register(service).session
        asyncio.run(service.submit_health_record(session, "cough"))

        record = json.loads(store.get(USERS_STORAGE_KEY))[0]["healthRecords"][0]
        assert set(record) == {"date", "symptoms", "vitals", "imageFile", "aiPrediction"}
        assert record["imageFile"] is None
        assert set(record["aiPrediction"]) == {
            "prediction", "advice", "confidence", "imageAnalysis", "riskScore",
        }

    def test_unknown_user(self, service):
        from mediscout.auth import Session
        from mediscout.auth.service import UNKNOWN_USER
        from mediscout.models import UserAccount

        ghost = Session(token="t", user=UserAccount(id="user_0", username="ghost", password="x"))
        result = asyncio.run(service.submit_health_record(ghost, "cough"))
        assert not result.success
        assert result.message == UNKNOWN_USER


class TestUserRepository:
    """Test the user repository directly."""

    def test_malformed_user_list_reads_as_empty(self):
        from mediscout.db import MemoryStore, UserRepository
        from mediscout.models import USERS_STORAGE_KEY

        repo = UserRepository(MemoryStore({USERS_STORAGE_KEY: "{oops"}))
        assert repo.list_all() == []

    def test_invalid_entries_are_skipped(self, service, store):
        from mediscout.auth import INVALID_CREDENTIALS
        from mediscout.models import USERS_STORAGE_KEY

        store.set(USERS_STORAGE_KEY, json.dumps([
            {"id": "user_1", "username": "old"},
            {"id": "user_2", "username": "kept", "password": "pw"},
        ]))
        assert [u.username for u in service.users.list_all()] == ["kept"]

        result = service.login("old", "x")
        assert not result.success
        assert result.message == INVALID_CREDENTIALS
        assert service.login("kept", "pw").success

    def test_create_assigns_unique_ids_concurrently(self, store):
        from mediscout.db import UserRepository
        from mediscout.models import UserAccount

        repo = UserRepository(store)
        created = []

        def add(n):
            created.append(repo.create(UserAccount(id="", username=f"u{n}", password="pw")))

        threads = [threading.Thread(target=add, args=(n,)) for n in range(8)]
        for t in threads:
            t.start()
        for t in threads:
            t.join()

        ids = [u.id for u in created]
        assert all(i.startswith("user_") for i in ids)
        assert len(set(ids)) == 8
        assert sorted(u.id for u in repo.list_all()) == sorted(ids)

    def test_create_rejects_taken_username(self, store):
        from mediscout.db import UserRepository
        from mediscout.models import UserAccount

        repo = UserRepository(store)
        assert repo.create(UserAccount(id="user_1", username="asha", password="a")) is not None
        assert repo.create(UserAccount(id="user_2", username="asha", password="b")) is None
        assert len(repo.list_all()) == 1

    def test_append_to_missing_user(self, store):
        from mediscout.db import UserRepository
        from mediscout.models import SubmittedHealthRecord, AiPrediction

        record = SubmittedHealthRecord(
            date="2024-01-01T00:00:00",
            symptoms="cough",
            ai_prediction=AiPrediction(
                prediction="General Checkup",
                advice="See a doctor.",
                confidence=0.4,
                image_analysis="No image submitted for analysis.",
                risk_score=4.0,
            ),
        )
        assert UserRepository(store).append_health_record("user_404", record) is None


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
