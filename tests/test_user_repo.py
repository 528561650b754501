from datetime import datetime

import psycopg2
import pytest

from db.errors import (
    EmailTakenError,
    ReadError,
    StoreConnectionError,
    UsernameTakenError,
    WriteError,
)
from models.user import User
from repositories.credential_repo import CredentialRepository
from repositories.user_repo import UserRepository
from tests.fakes import Result, unique_violation

CREATED = datetime(2026, 1, 2, 3, 4, 5)


class TestRegister:

    def test_inserts_user_then_credential(self, fake_pool):
        conn = fake_pool.script(Result(rows=[(42, CREATED)]), Result(rowcount=1))
        user = UserRepository().register(User(username="bob", email="bob@x.com"), "s3cret")

        assert user.id == 42
        assert user.created_at == CREATED
        assert conn.statements[0].startswith("INSERT INTO users")
        assert conn.statements[1].startswith("INSERT INTO passwords")
        assert conn.executed[1][1] == (42, "bob", "s3cret")
        assert conn.commits == 1

    @pytest.mark.parametrize("constraint, error_cls", [
        ("users_username_key", UsernameTakenError),
        ("users_email_key", EmailTakenError),
    ])
    def test_user_conflict(self, fake_pool, constraint, error_cls):
        conn = fake_pool.script(unique_violation(constraint))
        with pytest.raises(error_cls):
            UserRepository().register(User(username="bob", email="bob@x.com"), "pw")
        assert conn.commits == 0
        assert len(conn.executed) == 1

    def test_credential_conflict_rolls_back_user_insert(self, fake_pool):
        conn = fake_pool.script(
            Result(rows=[(42, CREATED)]),
            unique_violation("passwords_username_key"),
        )
        user = User(username="bob", email="bob@x.com")
        with pytest.raises(UsernameTakenError):
            UserRepository().register(user, "pw")
        assert conn.commits == 0
        assert conn.rollbacks >= 1
        assert user.id is None


class TestChangeUsername:

    def test_updates_both_tables(self, fake_pool):
        conn = fake_pool.script(Result(rowcount=1), Result(rowcount=1))
        UserRepository().change_username(7, "alice2")
        assert conn.statements == [
            "UPDATE users SET username = %s WHERE user_id = %s;",
            "UPDATE passwords SET username = %s WHERE user_id = %s;",
        ]
        assert all(params == ("alice2", 7) for _, params in conn.executed)
        assert conn.commits == 1

    def test_missing_user(self, fake_pool):
        conn = fake_pool.script(Result(rowcount=0))
        with pytest.raises(WriteError):
            UserRepository().change_username(7, "alice2")
        assert len(conn.executed) == 1
        assert conn.commits == 0

    def test_taken(self, fake_pool):
        fake_pool.script(unique_violation("users_username_key"))
        with pytest.raises(UsernameTakenError):
            UserRepository().change_username(7, "carol")


class TestReadAndSingleStatementWrites:

    def test_get_by_id(self, fake_pool):
        fake_pool.script(Result(rows=[(3, "bob", "bob@x.com", None, CREATED)]))
        user = UserRepository().get_by_id(3)
        assert user == User(id=3, username="bob", email="bob@x.com", created_at=CREATED)

    def test_get_missing_returns_none(self, fake_pool):
        assert UserRepository().get_by_username("ghost") is None

    def test_query_failure_is_read_error(self, fake_pool):
        fake_pool.script(psycopg2.ProgrammingError("column does not exist"))
        with pytest.raises(ReadError):
            UserRepository().get_by_email("bob@x.com")

    def test_change_email_conflict(self, fake_pool):
        fake_pool.script(unique_violation("users_email_key"))
        with pytest.raises(EmailTakenError):
            UserRepository().change_email(3, "alice@x.com")

    def test_change_phone_missing_user(self, fake_pool):
        fake_pool.script(Result(rowcount=0))
        with pytest.raises(WriteError):
            UserRepository().change_phone(3, "+100")

    def test_delete_is_idempotent(self, fake_pool):
        fake_pool.script(Result(rowcount=1))
        fake_pool.script(Result(rowcount=0))
        repo = UserRepository()
        assert repo.delete(3) is True
        assert repo.delete(3) is False

    def test_connection_lost(self, fake_pool):
        fake_pool.script(psycopg2.OperationalError("server closed the connection"))
        with pytest.raises(StoreConnectionError):
            UserRepository().delete(3)
        assert fake_pool.all_returned


class TestCredentials:

    def test_lookup_by_username(self, fake_pool):
        conn = fake_pool.script(Result(rows=[(3, "bob", "s3cret")]))
        cred = CredentialRepository().get_by_username("bob")
        assert (cred.user_id, cred.username, cred.password) == (3, "bob", "s3cret")
        assert "FROM passwords" in conn.statements[0]
        assert "JOIN" not in conn.statements[0]
        assert "s3cret" not in repr(cred)

    def test_change_password(self, fake_pool):
        conn = fake_pool.script(Result(rowcount=1))
        CredentialRepository().change_password(3, "new")
        assert conn.executed[0][1] == ("new", 3)
        assert conn.commits == 1

    def test_change_password_missing_user(self, fake_pool):
        fake_pool.script(Result(rowcount=0))
        with pytest.raises(WriteError):
            CredentialRepository().change_password(3, "new")
