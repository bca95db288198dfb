# db_users.py
import os
import hashlib
import binascii
import secrets
import logging
from datetime import datetime, timedelta, timezone

import pandas as pd
from sqlalchemy import create_engine, text

from config import get_secret
from models import ROLES, REQUEST_STATUS

logger = logging.getLogger(__name__)

MIN_PASSWORD_LEN = 6
TOKEN_DAYS = 30


def _default_auth_engine():
    url = get_secret("AUTH_DATABASE_URL", "")
    if url:
        return create_engine(url, pool_pre_ping=True, future=True)
    # Diretório do banco de autenticação (fora da pasta do app para evitar conflitos de permissão)
    auth_dir = os.path.join(os.path.expanduser("~"), ".pelada")
    os.makedirs(auth_dir, exist_ok=True)
    return create_engine(f"sqlite:///{os.path.join(auth_dir, 'auth.sqlite')}",
                         connect_args={"check_same_thread": False}, future=True)


def _ensure_auth_tables(engine):
    pk = "SERIAL PRIMARY KEY" if engine.dialect.name == "postgresql" else "INTEGER PRIMARY KEY AUTOINCREMENT"
    with engine.begin() as conn:
        conn.execute(text(f"""
            CREATE TABLE IF NOT EXISTS users (
              id {pk},
              name TEXT NOT NULL,
              email TEXT UNIQUE NOT NULL,
              password_hash TEXT NOT NULL,
              role TEXT NOT NULL DEFAULT 'viewer',
              created_at TEXT NOT NULL
            )
        """))
        conn.execute(text("""
            CREATE TABLE IF NOT EXISTS auth_tokens (
              token TEXT PRIMARY KEY,
              email TEXT NOT NULL,
              created_at TEXT NOT NULL,
              expires_at TEXT NOT NULL
            )
        """))
        conn.execute(text(f"""
            CREATE TABLE IF NOT EXISTS account_requests (
              id {pk},
              name TEXT NOT NULL,
              email TEXT NOT NULL,
              role TEXT NOT NULL DEFAULT 'viewer',
              status TEXT NOT NULL DEFAULT 'pending',
              requested_at TEXT NOT NULL,
              approved_by TEXT,
              approved_at TEXT
            )
        """))


# ---------- helpers ----------
def _email_canonical(e: str) -> str:
    """normaliza e-mail para unicidade (lower + strip)"""
    return (e or "").strip().casefold()


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


def _parse_utc(s):
    """ISO -> datetime em UTC; registros antigos sem fuso são tratados como UTC."""
    try:
        dt = datetime.fromisoformat(str(s))
    except ValueError:
        return None
    return dt if dt.tzinfo else dt.replace(tzinfo=timezone.utc)


def _now() -> str:
    return _utcnow().isoformat(timespec="seconds")


def _hash_password(password: str) -> str:
    """PBKDF2-SHA256 com salt (mais forte que sha256 simples)"""
    salt = secrets.token_bytes(16)
    dk = hashlib.pbkdf2_hmac("sha256", password.encode("utf-8"), salt, 200_000)
    return binascii.hexlify(salt).decode() + "$" + binascii.hexlify(dk).decode()


def _verify_password(password: str, stored: str) -> bool:
    try:
        salt_hex, hash_hex = stored.split("$", 1)
        salt = binascii.unhexlify(salt_hex)
        expected = binascii.unhexlify(hash_hex)
    except (ValueError, AttributeError, binascii.Error):
        return False
    test = hashlib.pbkdf2_hmac("sha256", (password or "").encode("utf-8"), salt, 200_000)
    return secrets.compare_digest(test, expected)


def _password_error(password: str):
    if not password or len(password) < MIN_PASSWORD_LEN:
        return f"A senha deve ter pelo menos {MIN_PASSWORD_LEN} caracteres."
    return None


# ---------- classe pública usada pelo app.py ----------
class AuthManager:
    """
    Usuários, papéis e sessões "lembrar-me":
      - create_user(name, email, password) -> (ok: bool, err: str|None)
      - get_user(email) -> dict | None (com 'password_hash' e 'role')
      - verify_password(password, stored_hash) -> bool
      - reset_password(user_id, new_password) -> (ok, err)
      - token_insert / token_get_email / token_delete_user
      - solicitações de conta: create/list/approve/deny
    """

    def __init__(self, engine=None):
        self.engine = engine if engine is not None else _default_auth_engine()
        _ensure_auth_tables(self.engine)

    def _query(self, sql, params=None) -> pd.DataFrame:
        with self.engine.begin() as conn:
            return pd.read_sql(text(sql), conn, params=params or {})

    def _exec(self, sql, params=None) -> int:
        with self.engine.begin() as conn:
            return conn.execute(text(sql), params or {}).rowcount

    @staticmethod
    def _row(df):
        if df.empty:
            return None
        d = df.iloc[0].to_dict()
        d["id"] = int(d["id"])
        return d

    # ---- usuários ----
    def get_user(self, email: str):
        return self._row(self._query(
            "SELECT id, name, email, password_hash, role, created_at FROM users WHERE email = :e",
            {"e": _email_canonical(email)},
        ))

    def get_user_by_id(self, user_id):
        try:
            uid = int(user_id)
        except (TypeError, ValueError):
            return None
        return self._row(self._query(
            "SELECT id, name, email, password_hash, role, created_at FROM users WHERE id = :i",
            {"i": uid},
        ))

    def list_users(self) -> pd.DataFrame:
        return self._query("SELECT id, name, email, role, created_at FROM users ORDER BY created_at DESC, id DESC")

    def _initial_role(self, email: str) -> str:
        n = self._query("SELECT COUNT(*) AS n FROM users")
        if int(n.iloc[0]["n"]) == 0:
            return "admin"  # primeiro usuário administra a pelada
        req = self._query(
            "SELECT role FROM account_requests WHERE email=:e AND status='approved' "
            "ORDER BY approved_at DESC, id DESC",
            {"e": email},
        )
        if not req.empty and req.iloc[0]["role"] in ROLES:
            return str(req.iloc[0]["role"])
        return "viewer"

    def create_user(self, name: str, email: str, password: str):
        """
        Cria usuário novo.
        Retorna (True, None) em sucesso, (False, "mensagem") em erro.
        """
        name = (name or "").strip()
        e = _email_canonical(email)
        if not name or not e or not password:
            return False, "Nome, e-mail e senha são obrigatórios."
        if "@" not in e:
            return False, "E-mail inválido."
        err = _password_error(password)
        if err:
            return False, err
        if self.get_user(e):
            return False, "Usuário já existe."

        role = self._initial_role(e)
        self._exec(
            "INSERT INTO users(name, email, password_hash, role, created_at) VALUES(:n,:e,:p,:r,:c)",
            {"n": name, "e": e, "p": _hash_password(password), "r": role, "c": _now()},
        )
        logger.info("usuário criado: %s (%s)", e, role)
        return True, None

    def verify_password(self, password: str, stored_hash: str) -> bool:
        return _verify_password(password, stored_hash)

    def authenticate(self, email: str, password: str):
        user = self.get_user(email)
        if user and self.verify_password(password, user["password_hash"]):
            return user
        return None

    def update_role(self, user_id, role: str) -> bool:
        if role not in ROLES:
            raise ValueError(f"Papel inválido: {role!r}")
        return self._exec("UPDATE users SET role=:r WHERE id=:i", {"r": role, "i": int(user_id)}) > 0

    def delete_user(self, user_id) -> bool:
        user = self.get_user_by_id(user_id)
        if not user:
            return False
        self.token_delete_user(user["email"])
        return self._exec("DELETE FROM users WHERE id=:i", {"i": user["id"]}) > 0

    def reset_password(self, user_id, new_password: str):
        if user_id in (None, "") or not new_password:
            return False, "Usuário e nova senha são obrigatórios."
        err = _password_error(new_password)
        if err:
            return False, err
        user = self.get_user_by_id(user_id)
        if not user:
            return False, "Usuário não encontrado."
        self._exec("UPDATE users SET password_hash=:p WHERE id=:i",
                   {"p": _hash_password(new_password), "i": user["id"]})
        # sessões antigas deixam de valer
        self.token_delete_user(user["email"])
        logger.info("senha redefinida para o usuário #%s", user["id"])
        return True, None

    # ---- "lembrar-me" (link de acesso rápido) ----
    def token_insert(self, email: str, days: int = TOKEN_DAYS) -> str:
        token = secrets.token_urlsafe(32)
        now = _utcnow()
        exp = now + timedelta(days=days)
        self._exec(
            "INSERT INTO auth_tokens(token, email, created_at, expires_at) VALUES(:t,:e,:c,:x)",
            {"t": token, "e": _email_canonical(email), "c": now.isoformat(), "x": exp.isoformat()},
        )
        return token

    def token_get_email(self, token: str):
        if not token:
            return None
        df = self._query("SELECT email, expires_at FROM auth_tokens WHERE token=:t", {"t": token})
        if df.empty:
            return None
        exp = _parse_utc(df.iloc[0]["expires_at"])
        if exp is None or _utcnow() > exp:
            # expirou: limpa
            self.token_delete(token)
            return None
        return str(df.iloc[0]["email"])

    def token_delete(self, token: str):
        if token:
            self._exec("DELETE FROM auth_tokens WHERE token=:t", {"t": token})

    def token_delete_user(self, email: str):
        self._exec("DELETE FROM auth_tokens WHERE email=:e", {"e": _email_canonical(email)})

    # ---- solicitações de conta ----
    def create_account_request(self, name: str, email: str, role: str = "viewer"):
        name = (name or "").strip()
        e = _email_canonical(email)
        if not name or "@" not in e:
            return False, "Informe nome e um e-mail válido."
        if role not in ROLES:
            return False, f"Papel inválido: {role}"
        pend = self._query("SELECT id FROM account_requests WHERE email=:e AND status='pending'", {"e": e})
        if not pend.empty:
            return False, "Já existe uma solicitação pendente para este e-mail."
        self._exec(
            "INSERT INTO account_requests(name, email, role, status, requested_at) "
            "VALUES(:n,:e,:r,'pending',:t)",
            {"n": name, "e": e, "r": role, "t": _now()},
        )
        return True, None

    def list_account_requests(self, status: str = None) -> pd.DataFrame:
        sql = ("SELECT id, name, email, role, status, requested_at, approved_by, approved_at "
               "FROM account_requests")
        params = {}
        if status:
            if status not in REQUEST_STATUS:
                raise ValueError(f"Status inválido: {status!r}")
            sql += " WHERE status=:s"
            params["s"] = status
        return self._query(sql + " ORDER BY requested_at DESC, id DESC", params)

    def _decide_request(self, request_id, status: str, by: str, role: str = None) -> bool:
        df = self._query("SELECT id, email FROM account_requests WHERE id=:i", {"i": int(request_id)})
        if df.empty:
            raise ValueError("Solicitação não encontrada")
        sets = "status=:s, approved_by=:b, approved_at=:t" + (", role=:r" if role else "")
        n = self._exec(f"UPDATE account_requests SET {sets} WHERE id=:i",
                       {"s": status, "b": str(by or ""), "t": _now(), "r": role, "i": int(request_id)})
        return n > 0

    def approve_account_request(self, request_id, role: str, approved_by: str) -> bool:
        if role not in ROLES:
            raise ValueError(f"Papel inválido: {role!r}")
        ok = self._decide_request(request_id, "approved", approved_by, role)
        # se a pessoa já tem conta, aplica o papel aprovado
        req = self._query("SELECT email FROM account_requests WHERE id=:i", {"i": int(request_id)})
        user = self.get_user(str(req.iloc[0]["email"]))
        if user:
            self.update_role(user["id"], role)
        return ok

    def deny_account_request(self, request_id, denied_by: str) -> bool:
        return self._decide_request(request_id, "denied", denied_by)
