from datetime import datetime, timedelta, timezone

import pytest
from sqlalchemy import text

from db_users import _hash_password, _verify_password


def test_password_hash_roundtrip():
    h = _hash_password("segredo1")
    assert "$" in h and h != _hash_password("segredo1")
    assert _verify_password("segredo1", h)
    assert not _verify_password("outra", h)
    assert not _verify_password("segredo1", "lixo")


class TestUsers:
    def test_first_user_is_admin_then_viewer(self, auth):
        assert auth.create_user("Ana", "Ana@Ex.com ", "123456") == (True, None)
        assert auth.create_user("Bia", "bia@ex.com", "123456") == (True, None)
        assert auth.get_user("ana@ex.com")["role"] == "admin"
        assert auth.get_user("BIA@ex.com")["role"] == "viewer"

    def test_validation(self, auth):
        assert auth.create_user("", "a@ex.com", "123456")[0] is False
        assert auth.create_user("Ana", "sem-arroba", "123456")[0] is False
        ok, err = auth.create_user("Ana", "a@ex.com", "123")
        assert not ok and "6" in err

    def test_duplicate_email(self, auth):
        auth.create_user("Ana", "a@ex.com", "123456")
        ok, err = auth.create_user("Outra", "A@EX.COM", "123456")
        assert not ok and err == "Usuário já existe."

    def test_authenticate(self, auth):
        auth.create_user("Ana", "a@ex.com", "123456")
        assert auth.authenticate("a@ex.com", "123456")["name"] == "Ana"
        assert auth.authenticate("a@ex.com", "errada") is None
        assert auth.authenticate("x@ex.com", "123456") is None

    def test_roles(self, auth):
        auth.create_user("Ana", "a@ex.com", "123456")
        uid = auth.get_user("a@ex.com")["id"]
        assert auth.update_role(uid, "mensalista")
        assert auth.get_user_by_id(uid)["role"] == "mensalista"
        with pytest.raises(ValueError):
            auth.update_role(uid, "dono")

    def test_list_and_delete(self, auth):
        auth.create_user("Ana", "a@ex.com", "123456")
        auth.create_user("Bia", "b@ex.com", "123456")
        users = auth.list_users()
        assert set(users["email"]) == {"a@ex.com", "b@ex.com"}
        assert "password_hash" not in users.columns
        uid = auth.get_user("b@ex.com")["id"]
        assert auth.delete_user(uid)
        assert auth.get_user("b@ex.com") is None
        assert not auth.delete_user(uid)

    def test_reset_password(self, auth):
        auth.create_user("Ana", "a@ex.com", "123456")
        uid = auth.get_user("a@ex.com")["id"]
        token = auth.token_insert("a@ex.com")
        assert auth.reset_password(uid, "12")[0] is False
        assert auth.reset_password(999, "novasenha")[0] is False
        assert auth.reset_password(uid, "novasenha") == (True, None)
        assert auth.authenticate("a@ex.com", "novasenha")
        assert auth.authenticate("a@ex.com", "123456") is None
        assert auth.token_get_email(token) is None


class TestTokens:
    def test_insert_and_lookup(self, auth):
        t = auth.token_insert("A@ex.com")
        assert auth.token_get_email(t) == "a@ex.com"
        assert auth.token_get_email("nao-existe") is None
        assert auth.token_get_email("") is None

    def test_expired_token_is_removed(self, auth):
        t = auth.token_insert("a@ex.com")
        past = (datetime.now(timezone.utc) - timedelta(days=1)).isoformat()
        with auth.engine.begin() as conn:
            conn.execute(text("UPDATE auth_tokens SET expires_at=:x WHERE token=:t"), {"x": past, "t": t})
        assert auth.token_get_email(t) is None
        with auth.engine.begin() as conn:
            n = conn.execute(text("SELECT COUNT(*) FROM auth_tokens")).scalar_one()
        assert n == 0

    def test_expiry_is_stored_in_utc(self, auth):
        t = auth.token_insert("a@ex.com")
        with auth.engine.begin() as conn:
            exp = conn.execute(text("SELECT expires_at FROM auth_tokens WHERE token=:t"), {"t": t}).scalar_one()
        assert datetime.fromisoformat(exp).utcoffset() == timedelta(0)

    @pytest.mark.parametrize("delta,valid", [(timedelta(days=1), True), (timedelta(days=-1), False)])
    def test_naive_expiry_read_as_utc(self, auth, delta, valid):
        t = auth.token_insert("a@ex.com")
        naive = (datetime.now(timezone.utc) + delta).replace(tzinfo=None).isoformat()
        with auth.engine.begin() as conn:
            conn.execute(text("UPDATE auth_tokens SET expires_at=:x WHERE token=:t"), {"x": naive, "t": t})
        assert (auth.token_get_email(t) == "a@ex.com") is valid

    def test_logout_deletes_user_tokens(self, auth):
        t1 = auth.token_insert("a@ex.com")
        t2 = auth.token_insert("a@ex.com")
        auth.token_delete_user("a@ex.com")
        assert auth.token_get_email(t1) is None and auth.token_get_email(t2) is None


class TestAccountRequests:
    def test_approved_request_sets_role_on_signup(self, auth):
        auth.create_user("Admin", "adm@ex.com", "123456")
        assert auth.create_account_request("Caio", "caio@ex.com", "viewer") == (True, None)
        rid = int(auth.list_account_requests("pending").iloc[0]["id"])
        assert auth.approve_account_request(rid, "mensalista", "adm@ex.com")

        auth.create_user("Caio", "caio@ex.com", "123456")
        assert auth.get_user("caio@ex.com")["role"] == "mensalista"
        req = auth.list_account_requests().iloc[0]
        assert (req["status"], req["approved_by"]) == ("approved", "adm@ex.com")

    def test_approve_updates_existing_user(self, auth):
        auth.create_user("Admin", "adm@ex.com", "123456")
        auth.create_user("Bia", "bia@ex.com", "123456")
        auth.create_account_request("Bia", "bia@ex.com", "mensalista")
        rid = int(auth.list_account_requests().iloc[0]["id"])
        auth.approve_account_request(rid, "mensalista", "adm@ex.com")
        assert auth.get_user("bia@ex.com")["role"] == "mensalista"

    def test_duplicate_pending_and_deny(self, auth):
        auth.create_account_request("Caio", "caio@ex.com")
        ok, err = auth.create_account_request("Caio", "CAIO@ex.com")
        assert not ok and "pendente" in err
        rid = int(auth.list_account_requests().iloc[0]["id"])
        assert auth.deny_account_request(rid, "adm@ex.com")
        assert auth.list_account_requests("pending").empty
        assert auth.create_account_request("Caio", "caio@ex.com")[0]

    def test_invalid_requests(self, auth):
        assert auth.create_account_request("", "x@ex.com")[0] is False
        assert auth.create_account_request("X", "x@ex.com", "dono")[0] is False
        with pytest.raises(ValueError):
            auth.deny_account_request(42, "adm@ex.com")
