import sqlite3

import pytest

from backend.repository import user_repo


class TestUserRepo:

    def test_create_and_read_back(self, conn):
        uid = user_repo.create_user(conn, "a@x.com", "p", "A")
        assert uid == 1

        by_id = user_repo.get_user_by_id(conn, uid)
        by_email = user_repo.get_user_by_email(conn, "a@x.com")
        assert by_id == by_email
        assert by_id["name"] == "A"
        assert by_id["password"] == "p"
        assert by_id["created_at"]

    def test_duplicate_email_rejected(self, conn):
        user_repo.create_user(conn, "a@x.com", "p", "A")
        with pytest.raises(sqlite3.IntegrityError):
            user_repo.create_user(conn, "a@x.com", "other", "B")
        cnt = conn.execute("SELECT COUNT(1) AS c FROM users WHERE email=?", ("a@x.com",)).fetchone()["c"]
        assert cnt == 1

    def test_email_lookup_is_case_sensitive(self, conn):
        user_repo.create_user(conn, "a@x.com", "p", "A")
        assert user_repo.get_user_by_email(conn, "A@X.COM") is None

    def test_missing_user_returns_none(self, conn):
        assert user_repo.get_user_by_email(conn, "nobody@x.com") is None
        assert user_repo.get_user_by_id(conn, 42) is None
