"""Tests for UserService: create/update/delete/search on the JSON store."""
import pytest

from clever_sis.db.store import USERS
from clever_sis.errors import ValidationError

ANN = {"student_id": "S1", "first_name": "Ann", "last_name": "Lee"}


class TestCreateUser:
    def test_create_assigns_id_and_defaults(self, user_service):
        user = user_service.create_user(ANN)
        assert user.id
        assert user.student_id == "S1"
        assert user.status == "active"
        assert user.email == ""
        assert user.grade == ""

    def test_create_persists(self, user_service, store):
        user = user_service.create_user(ANN)
        stored = store.load(USERS)
        assert len(stored) == 1
        assert stored[0]["id"] == user.id

    def test_ids_are_unique(self, user_service):
        a = user_service.create_user(ANN)
        b = user_service.create_user({**ANN, "student_id": "S2"})
        assert a.id != b.id

    def test_duplicate_student_id_rejected(self, user_service, store):
        user_service.create_user(ANN)
        with pytest.raises(ValidationError, match="User with this student_id already exists"):
            user_service.create_user({**ANN, "first_name": "Other"})
        assert len(store.load(USERS)) == 1

    @pytest.mark.parametrize("missing", ["student_id", "first_name", "last_name"])
    def test_missing_required_field(self, user_service, store, missing):
        data = {k: v for k, v in ANN.items() if k != missing}
        with pytest.raises(ValidationError, match="Missing required fields"):
            user_service.create_user(data)
        assert store.load(USERS) == []

    def test_numeric_grade_stored_as_text(self, user_service):
        user = user_service.create_user({**ANN, "grade": 9})
        assert user.grade == "9"

    def test_explicit_status_kept(self, user_service):
        user = user_service.create_user({**ANN, "status": "inactive"})
        assert user.status == "inactive"


class TestReadUsers:
    def test_get_user(self, user_service):
        created = user_service.create_user(ANN)
        assert user_service.get_user(created.id).student_id == "S1"

    def test_get_unknown_user_returns_none(self, user_service):
        assert user_service.get_user("nope") is None

    def test_count(self, user_service):
        assert user_service.count_users() == 0
        user_service.create_user(ANN)
        assert user_service.count_users() == 1


class TestUpdateUser:
    def test_update_merges_fields(self, user_service):
        user = user_service.create_user({**ANN, "email": "ann@example.edu"})
        updated = user_service.update_user(user.id, {"grade": "10"})
        assert updated.grade == "10"
        assert updated.email == "ann@example.edu"
        assert updated.first_name == "Ann"

    def test_update_refreshes_updated_at_only(self, user_service):
        user = user_service.create_user(ANN)
        updated = user_service.update_user(user.id, {"last_name": "Park"})
        assert updated.created_at == user.created_at
        assert updated.updated_at >= user.updated_at

    def test_update_unknown_returns_none(self, user_service):
        assert user_service.update_user("nope", {"grade": "10"}) is None

    def test_update_cannot_change_id(self, user_service):
        user = user_service.create_user(ANN)
        updated = user_service.update_user(user.id, {"id": "hijack"})
        assert updated.id == user.id

    def test_update_to_taken_student_id_rejected(self, user_service):
        user_service.create_user(ANN)
        other = user_service.create_user({**ANN, "student_id": "S2"})
        with pytest.raises(ValidationError):
            user_service.update_user(other.id, {"student_id": "S1"})
        assert user_service.get_user(other.id).student_id == "S2"

    def test_update_keeping_same_student_id_allowed(self, user_service):
        user = user_service.create_user(ANN)
        updated = user_service.update_user(user.id, {"student_id": "S1", "grade": "11"})
        assert updated.grade == "11"

    def test_blank_student_id_rejected(self, user_service):
        a = user_service.create_user(ANN)
        b = user_service.create_user({**ANN, "student_id": "S2"})
        with pytest.raises(ValidationError, match="Missing required fields: student_id"):
            user_service.update_user(a.id, {"student_id": ""})
        with pytest.raises(ValidationError):
            user_service.update_user(b.id, {"student_id": ""})
        keys = [u.student_id for u in user_service.list_users()]
        assert sorted(keys) == ["S1", "S2"]

    @pytest.mark.parametrize("field", ["first_name", "last_name"])
    def test_blank_name_rejected(self, user_service, field):
        user = user_service.create_user(ANN)
        with pytest.raises(ValidationError, match=field):
            user_service.update_user(user.id, {field: ""})
        assert getattr(user_service.get_user(user.id), field) == ANN[field]

    def test_update_unknown_leaves_file_alone(self, user_service, store):
        assert user_service.update_user("nope", {"grade": "10"}) is None
        assert not store.path_for(USERS).exists()

    def test_null_values_ignored(self, user_service):
        user = user_service.create_user({**ANN, "email": "ann@example.edu"})
        updated = user_service.update_user(user.id, {"email": None})
        assert updated.email == "ann@example.edu"


class TestDeleteUser:
    def test_delete(self, user_service):
        user = user_service.create_user(ANN)
        assert user_service.delete_user(user.id) is True
        assert user_service.get_user(user.id) is None

    def test_delete_unknown(self, user_service):
        assert user_service.delete_user("nope") is False


class TestSearchUsers:
    @pytest.fixture(autouse=True)
    def roster(self, user_service):
        user_service.create_user({**ANN, "email": "ann.lee@school.edu"})
        user_service.create_user({"student_id": "S2", "first_name": "Bob", "last_name": "Stone"})
        user_service.create_user({"student_id": "X77", "first_name": "Cara", "last_name": "Annex"})

    def test_matches_first_name_case_insensitive(self, user_service):
        ids = {u.student_id for u in user_service.search_users("bob")}
        assert ids == {"S2"}

    def test_matches_across_fields(self, user_service):
        ids = {u.student_id for u in user_service.search_users("ANN")}
        assert ids == {"S1", "X77"}

    def test_matches_student_id(self, user_service):
        ids = {u.student_id for u in user_service.search_users("x7")}
        assert ids == {"X77"}

    def test_matches_email(self, user_service):
        ids = {u.student_id for u in user_service.search_users("school.edu")}
        assert ids == {"S1"}

    def test_no_match(self, user_service):
        assert user_service.search_users("zzz") == []
