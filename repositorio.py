# repositorio.py: acesso aos dados da pelada
"""
Repositórios com CRUD explícito.

Toda leitura devolve listas novas de entidades imutáveis (models.py); nenhum
chamador compartilha estado mutável com o repositório.

- SqlRepositorio: banco via SQLAlchemy (SQLite local ou Postgres).
- MemoriaRepositorio: dados de demonstração em memória.
- carregar_snapshot: busca todas as listas em paralelo; uma falha vira lista vazia.
"""
import itertools
import logging
import threading
from concurrent.futures import ThreadPoolExecutor
from dataclasses import replace
from datetime import date
from typing import Protocol, Optional

import pandas as pd
from sqlalchemy import text

from models import (
    Player, Game, Goal, Transaction, Championship, Snapshot,
    POSITIONS, RUNNING, to_date,
)

logger = logging.getLogger(__name__)


class Repositorio(Protocol):
    def list_players(self) -> list: ...
    def get_player(self, player_id) -> Optional[Player]: ...
    def create_player(self, name, position="flexivel", running="medio", rating=5.0, photo=None) -> Player: ...
    def update_player(self, player_id, **changes) -> Optional[Player]: ...
    def delete_player(self, player_id) -> bool: ...

    def list_games(self) -> list: ...
    def get_game(self, game_id) -> Optional[Game]: ...
    def create_game(self, date, type="pelada", player_ids=(), photo=None) -> Game: ...
    def update_game(self, game_id, **changes) -> Optional[Game]: ...
    def delete_game(self, game_id) -> bool: ...
    def game_players(self, game_id) -> list: ...
    def set_game_players(self, game_id, player_ids) -> int: ...
    def remap_game_dates(self, mappings) -> list: ...

    def list_goals(self) -> list: ...
    def add_goal(self, game_id, player_id, count) -> Goal: ...
    def update_goal(self, goal_id, count) -> Optional[Goal]: ...
    def delete_goal(self, goal_id) -> bool: ...

    def list_transactions(self) -> list: ...
    def create_transaction(self, date, type, amount, description="") -> Transaction: ...
    def delete_transaction(self, transaction_id) -> bool: ...
    def clear_transactions(self) -> int: ...

    def list_championships(self) -> list: ...
    def create_championship(self, player_id, year=None, date=None, game_id=None) -> Championship: ...
    def delete_championship(self, championship_id) -> bool: ...

    def get_setting(self, key, default="") -> str: ...
    def set_setting(self, key, value) -> None: ...


# -------------- Regras comuns ---------------
def _championship_fields(game: Optional[Game], year, d):
    """
    Ano/data do título. Com jogo: ano vem da data do jogo (ou tem que bater com ela).
    """
    d = to_date(d)
    if game is not None:
        if year not in (None, "") and int(year) != game.date.year:
            raise ValueError(f"Ano {year} não confere com a data do jogo ({game.date.isoformat()}).")
        return game.date.year, d or game.date
    if year in (None, ""):
        if d is None:
            raise ValueError("Informe o ano ou a data do título.")
        return d.year, d
    return int(year), d or date(int(year), 12, 31)


def _date_mappings(mappings):
    out = []
    for m in mappings:
        src = to_date(m.get("from")); dst = to_date(m.get("to"))
        if src is None or dst is None:
            raise ValueError(f"Mapeamento de datas inválido: {m!r}")
        out.append((src, dst))
    return out


def _int_id(v):
    try:
        return int(v)
    except (TypeError, ValueError):
        return None


def _opt(v):
    return None if v is None or (not isinstance(v, str) and pd.isna(v)) else v


# -----------------------------------------------------------------------------------
#  SQL (SQLAlchemy)
# -----------------------------------------------------------------------------------
class SqlRepositorio:
    def __init__(self, engine):
        self.engine = engine

    # ---- helpers ----
    def _query(self, sql, params=None) -> pd.DataFrame:
        with self.engine.begin() as conn:
            return pd.read_sql(text(sql), conn, params=params or {})

    def _exec(self, sql, params=None) -> int:
        with self.engine.begin() as conn:
            return conn.execute(text(sql), params or {}).rowcount

    def _insert(self, sql, params=None) -> str:
        with self.engine.begin() as conn:
            return str(conn.execute(text(sql + " RETURNING id"), params or {}).scalar_one())

    @staticmethod
    def _player(r) -> Player:
        return Player(id=str(int(r["id"])), name=r["name"], position=r["position"],
                      running=r["running"], rating=float(r["rating"]), photo=_opt(r["photo"]))

    @staticmethod
    def _game(r) -> Game:
        return Game(id=str(int(r["id"])), date=r["date"], type=r["type"], photo=_opt(r["photo"]))

    @staticmethod
    def _goal(r) -> Goal:
        return Goal(id=str(int(r["id"])), game_id=str(int(r["game_id"])),
                    player_id=str(int(r["player_id"])), count=int(r["count"]))

    @staticmethod
    def _transaction(r) -> Transaction:
        return Transaction(id=str(int(r["id"])), date=r["date"], type=r["type"],
                           amount=float(r["amount"]), description=_opt(r["description"]) or "")

    @staticmethod
    def _championship(r) -> Championship:
        gid = _opt(r["game_id"])
        return Championship(id=str(int(r["id"])), player_id=str(int(r["player_id"])), year=int(r["year"]),
                            date=r["date"], game_id=str(int(gid)) if gid is not None else None)

    def _one(self, sql, pid, build):
        i = _int_id(pid)
        if i is None:
            return None
        df = self._query(sql, {"id": i})
        return None if df.empty else build(df.iloc[0])

    # ---- jogadores ----
    def list_players(self):
        df = self._query("SELECT id, name, position, running, rating, photo FROM players ORDER BY lower(name), id")
        return [self._player(r) for _, r in df.iterrows()]

    def get_player(self, player_id):
        return self._one("SELECT id, name, position, running, rating, photo FROM players WHERE id=:id",
                         player_id, self._player)

    def _check_unique_name(self, name, exclude_id=None):
        dup = self._query(
            "SELECT id FROM players WHERE lower(name) = lower(:n) AND id <> :x",
            {"n": name, "x": -1 if exclude_id is None else exclude_id},
        )
        if not dup.empty:
            raise ValueError(f"Jogador já cadastrado: {name}")

    def create_player(self, name, position="flexivel", running="medio", rating=5.0, photo=None):
        p = Player(id="novo", name=name, position=position, running=running, rating=rating, photo=photo)
        self._check_unique_name(p.name)
        new_id = self._insert(
            "INSERT INTO players(name, position, running, rating, photo) VALUES(:n,:pos,:run,:r,:ph)",
            {"n": p.name, "pos": p.position, "run": p.running, "r": p.rating, "ph": p.photo},
        )
        logger.info("jogador criado: %s (#%s)", p.name, new_id)
        return replace(p, id=new_id)

    def update_player(self, player_id, **changes):
        cur = self.get_player(player_id)
        if cur is None:
            return None
        p = replace(cur, **changes)
        self._check_unique_name(p.name, exclude_id=int(p.id))
        self._exec(
            "UPDATE players SET name=:n, position=:pos, running=:run, rating=:r, photo=:ph WHERE id=:id",
            {"n": p.name, "pos": p.position, "run": p.running, "r": p.rating, "ph": p.photo, "id": int(p.id)},
        )
        return p

    def delete_player(self, player_id):
        i = _int_id(player_id)
        if i is None:
            return False
        self._exec("DELETE FROM game_players WHERE player_id=:id", {"id": i})
        return self._exec("DELETE FROM players WHERE id=:id", {"id": i}) > 0

    # ---- jogos ----
    def list_games(self):
        df = self._query("SELECT id, date, type, photo FROM games ORDER BY date DESC, id DESC")
        return [self._game(r) for _, r in df.iterrows()]

    def get_game(self, game_id):
        return self._one("SELECT id, date, type, photo FROM games WHERE id=:id", game_id, self._game)

    def create_game(self, date, type="pelada", player_ids=(), photo=None):
        g = Game(id="novo", date=date, type=type, photo=photo)
        new_id = self._insert(
            "INSERT INTO games(date, type, photo) VALUES(:d,:t,:ph)",
            {"d": g.date.isoformat(), "t": g.type, "ph": g.photo},
        )
        g = replace(g, id=new_id)
        if player_ids:
            self.set_game_players(g.id, player_ids)
        logger.info("jogo criado: %s %s (#%s)", g.type, g.date.isoformat(), g.id)
        return g

    def update_game(self, game_id, **changes):
        cur = self.get_game(game_id)
        if cur is None:
            return None
        g = replace(cur, **changes)
        self._exec("UPDATE games SET date=:d, type=:t, photo=:ph WHERE id=:id",
                   {"d": g.date.isoformat(), "t": g.type, "ph": g.photo, "id": int(g.id)})
        return g

    def delete_game(self, game_id):
        i = _int_id(game_id)
        if i is None:
            return False
        with self.engine.begin() as conn:
            conn.execute(text("DELETE FROM goals WHERE game_id=:id"), {"id": i})
            conn.execute(text("DELETE FROM game_players WHERE game_id=:id"), {"id": i})
            conn.execute(text("UPDATE championships SET game_id=NULL WHERE game_id=:id"), {"id": i})
            return conn.execute(text("DELETE FROM games WHERE id=:id"), {"id": i}).rowcount > 0

    def game_players(self, game_id):
        i = _int_id(game_id)
        if i is None:
            return []
        df = self._query("""
            SELECT p.id, p.name, p.position, p.running, p.rating, p.photo
              FROM game_players gp
              JOIN players p ON p.id = gp.player_id
             WHERE gp.game_id = :g
             ORDER BY lower(p.name), p.id
        """, {"g": i})
        return [self._player(r) for _, r in df.iterrows()]

    def set_game_players(self, game_id, player_ids):
        gid = int(game_id)
        ids = sorted({i for i in (_int_id(p) for p in player_ids) if i is not None})
        with self.engine.begin() as conn:
            conn.execute(text("DELETE FROM game_players WHERE game_id=:g"), {"g": gid})
            for pid in ids:
                conn.execute(text("INSERT INTO game_players(game_id, player_id) VALUES(:g,:p)"),
                             {"g": gid, "p": pid})
        return len(ids)

    def remap_game_dates(self, mappings):
        results = []
        for src, dst in _date_mappings(mappings):
            n = self._exec("UPDATE games SET date=:to WHERE date=:fr",
                           {"to": dst.isoformat(), "fr": src.isoformat()})
            results.append({"from": src.isoformat(), "to": dst.isoformat(), "updated": int(n)})
        return results

    # ---- gols ----
    def list_goals(self):
        df = self._query("SELECT id, game_id, player_id, count FROM goals ORDER BY game_id, player_id")
        return [self._goal(r) for _, r in df.iterrows()]

    def add_goal(self, game_id, player_id, count):
        Goal(id="novo", game_id=game_id, player_id=player_id, count=count)
        if self.get_game(game_id) is None:
            raise ValueError("Jogo não encontrado.")
        if self.get_player(player_id) is None:
            raise ValueError("Jogador não encontrado.")
        new_id = self._insert(
            "INSERT INTO goals(game_id, player_id, count) VALUES(:g,:p,:c) "
            "ON CONFLICT(game_id, player_id) DO UPDATE SET count = goals.count + excluded.count",
            {"g": int(game_id), "p": int(player_id), "c": int(count)},
        )
        return self._one("SELECT id, game_id, player_id, count FROM goals WHERE id=:id", new_id, self._goal)

    def update_goal(self, goal_id, count):
        cur = self._one("SELECT id, game_id, player_id, count FROM goals WHERE id=:id", goal_id, self._goal)
        if cur is None:
            return None
        g = replace(cur, count=count)
        self._exec("UPDATE goals SET count=:c WHERE id=:id", {"c": g.count, "id": int(g.id)})
        return g

    def delete_goal(self, goal_id):
        i = _int_id(goal_id)
        return i is not None and self._exec("DELETE FROM goals WHERE id=:id", {"id": i}) > 0

    # ---- caixa ----
    def list_transactions(self):
        df = self._query("SELECT id, date, type, amount, description FROM transactions ORDER BY date DESC, id DESC")
        return [self._transaction(r) for _, r in df.iterrows()]

    def create_transaction(self, date, type, amount, description=""):
        t = Transaction(id="novo", date=date, type=type, amount=amount, description=description)
        new_id = self._insert(
            "INSERT INTO transactions(date, type, amount, description) VALUES(:d,:t,:a,:ds)",
            {"d": t.date.isoformat(), "t": t.type, "a": t.amount, "ds": t.description},
        )
        return replace(t, id=new_id)

    def delete_transaction(self, transaction_id):
        i = _int_id(transaction_id)
        return i is not None and self._exec("DELETE FROM transactions WHERE id=:id", {"id": i}) > 0

    def clear_transactions(self):
        n = self._exec("DELETE FROM transactions")
        logger.warning("caixa zerado: %s transações removidas", n)
        return int(n)

    # ---- campeonatos ----
    def list_championships(self):
        df = self._query("SELECT id, player_id, year, date, game_id FROM championships ORDER BY date DESC, id DESC")
        return [self._championship(r) for _, r in df.iterrows()]

    def create_championship(self, player_id, year=None, date=None, game_id=None):
        game = self.get_game(game_id) if game_id else None
        if game_id and game is None:
            raise ValueError("Jogo não encontrado.")
        yr, d = _championship_fields(game, year, date)
        c = Championship(id="novo", player_id=player_id, year=yr, date=d, game_id=game.id if game else None)
        new_id = self._insert(
            "INSERT INTO championships(player_id, year, date, game_id) VALUES(:p,:y,:d,:g)",
            {"p": int(c.player_id), "y": c.year, "d": c.date.isoformat(),
             "g": int(c.game_id) if c.game_id else None},
        )
        return replace(c, id=new_id)

    def delete_championship(self, championship_id):
        i = _int_id(championship_id)
        return i is not None and self._exec("DELETE FROM championships WHERE id=:id", {"id": i}) > 0

    # ---- settings ----
    def get_setting(self, key, default=""):
        df = self._query("SELECT value FROM settings WHERE key=:k", {"k": key})
        return default if df.empty or df.iloc[0]["value"] is None else str(df.iloc[0]["value"])

    def set_setting(self, key, value):
        self._exec(
            "INSERT INTO settings(key,value) VALUES(:k,:v) "
            "ON CONFLICT(key) DO UPDATE SET value=:v",
            {"k": key, "v": str(value)},
        )


# -----------------------------------------------------------------------------------
#  Memória (demo)
# -----------------------------------------------------------------------------------
DEMO_PLAYERS = [
    ("Ronaldo", "atacante", "sim", 9, "https://images.unsplash.com/photo-1493962853295-0fd70327578a?w=150"),
    ("Roberto Carlos", "defensor", "sim", 8.5, None),
    ("Zidane", "meia", "medio", 9.5, "https://images.unsplash.com/photo-1466721591366-2d5fba72006d?w=150"),
    ("Cafu", "defensor", "sim", 8, None),
    ("Rivaldo", "atacante", "medio", 8.7, None),
    ("Ronaldinho", "flexivel", "sim", 9.8, None),
    ("Adriano", "atacante", "nao", 8.2, None),
    ("Júnior", "defensor", "medio", 7.5, None),
    ("Denílson", "meia", "sim", 8.1, None),
    ("Kaká", "meia", "sim", 9.2, None),
]
DEMO_GAMES = [
    ("2023-04-15", "pelada"), ("2023-04-22", "pelada"), ("2023-04-29", "pelada"),
    ("2023-05-06", "campeonato"), ("2023-05-13", "campeonato"),
]
# (jogo, jogador, gols), índices 1-based como os ids
DEMO_GOALS = [(1, 1, 3), (1, 3, 1), (1, 6, 2), (2, 1, 2), (2, 5, 1),
              (3, 6, 3), (3, 7, 1), (4, 1, 2), (4, 10, 2), (5, 6, 4)]
DEMO_TRANSACTIONS = [
    ("2023-04-01", "entrada", 500, "Mensalidade de Abril"),
    ("2023-04-05", "saida", 200, "Aluguel do campo"),
    ("2023-04-12", "entrada", 100, "Convidados"),
    ("2023-04-19", "saida", 150, "Novas bolas"),
    ("2023-05-01", "entrada", 500, "Mensalidade de Maio"),
]


class MemoriaRepositorio:
    def __init__(self, seed: bool = True):
        self._lock = threading.Lock()
        self._seq = itertools.count(1)
        self._players, self._games, self._goals = {}, {}, {}
        self._transactions, self._championships = {}, {}
        self._game_players = set()
        self._settings = {}
        if seed:
            self._seed()

    def _seed(self):
        pids = [self.create_player(n, pos, run, r, ph).id for n, pos, run, r, ph in DEMO_PLAYERS]
        gids = [self.create_game(d, t).id for d, t in DEMO_GAMES]
        for gi, pi, c in DEMO_GOALS:
            self.add_goal(gids[gi-1], pids[pi-1], c)
        for d, t, a, ds in DEMO_TRANSACTIONS:
            self.create_transaction(d, t, a, ds)
        self.create_championship(pids[5], game_id=gids[4])

    def _next_id(self) -> str:
        return str(next(self._seq))

    @staticmethod
    def _copy(items, key=None):
        return [replace(i) for i in sorted(items, key=key)] if key else [replace(i) for i in items]

    # ---- jogadores ----
    def list_players(self):
        with self._lock:
            return self._copy(self._players.values(), key=lambda p: p.name.casefold())

    def get_player(self, player_id):
        with self._lock:
            p = self._players.get(str(player_id))
            return replace(p) if p else None

    def _check_unique_name(self, name, exclude_id=None):
        if any(o.name.casefold() == name.casefold() and o.id != exclude_id for o in self._players.values()):
            raise ValueError(f"Jogador já cadastrado: {name}")

    def create_player(self, name, position="flexivel", running="medio", rating=5.0, photo=None):
        with self._lock:
            p = Player(id=self._next_id(), name=name, position=position, running=running, rating=rating, photo=photo)
            self._check_unique_name(p.name)
            self._players[p.id] = p
            return replace(p)

    def update_player(self, player_id, **changes):
        with self._lock:
            cur = self._players.get(str(player_id))
            if cur is None:
                return None
            p = replace(cur, **changes)
            self._check_unique_name(p.name, exclude_id=p.id)
            self._players[p.id] = p
            return replace(p)

    def delete_player(self, player_id):
        with self._lock:
            pid = str(player_id)
            self._game_players = {gp for gp in self._game_players if gp[1] != pid}
            return self._players.pop(pid, None) is not None

    # ---- jogos ----
    def list_games(self):
        with self._lock:
            return self._copy(sorted(self._games.values(), key=lambda g: (g.date, int(g.id)), reverse=True))

    def get_game(self, game_id):
        with self._lock:
            g = self._games.get(str(game_id))
            return replace(g) if g else None

    def create_game(self, date, type="pelada", player_ids=(), photo=None):
        with self._lock:
            g = Game(id=self._next_id(), date=date, type=type, photo=photo)
            self._games[g.id] = g
        if player_ids:
            self.set_game_players(g.id, player_ids)
        return replace(g)

    def update_game(self, game_id, **changes):
        with self._lock:
            cur = self._games.get(str(game_id))
            if cur is None:
                return None
            g = replace(cur, **changes)
            self._games[g.id] = g
            return replace(g)

    def delete_game(self, game_id):
        with self._lock:
            gid = str(game_id)
            if self._games.pop(gid, None) is None:
                return False
            self._goals = {k: v for k, v in self._goals.items() if v.game_id != gid}
            self._game_players = {gp for gp in self._game_players if gp[0] != gid}
            for k, c in list(self._championships.items()):
                if c.game_id == gid:
                    self._championships[k] = replace(c, game_id=None)
            return True

    def game_players(self, game_id):
        with self._lock:
            gid = str(game_id)
            ps = [self._players[pid] for g, pid in self._game_players if g == gid and pid in self._players]
            return self._copy(ps, key=lambda p: p.name.casefold())

    def set_game_players(self, game_id, player_ids):
        with self._lock:
            gid = str(game_id)
            ids = {str(p) for p in player_ids}
            self._game_players = {gp for gp in self._game_players if gp[0] != gid} | {(gid, p) for p in ids}
            return len(ids)

    def remap_game_dates(self, mappings):
        results = []
        for src, dst in _date_mappings(mappings):
            with self._lock:
                hits = [g for g in self._games.values() if g.date == src]
                for g in hits:
                    self._games[g.id] = replace(g, date=dst)
            results.append({"from": src.isoformat(), "to": dst.isoformat(), "updated": len(hits)})
        return results

    # ---- gols ----
    def list_goals(self):
        with self._lock:
            return self._copy(self._goals.values(), key=lambda g: (int(g.game_id), int(g.player_id)))

    def add_goal(self, game_id, player_id, count):
        with self._lock:
            gid, pid = str(game_id), str(player_id)
            Goal(id="novo", game_id=gid, player_id=pid, count=count)
            if gid not in self._games:
                raise ValueError("Jogo não encontrado.")
            if pid not in self._players:
                raise ValueError("Jogador não encontrado.")
            for k, g in self._goals.items():
                if g.game_id == gid and g.player_id == pid:
                    self._goals[k] = replace(g, count=g.count + int(count))
                    return replace(self._goals[k])
            g = Goal(id=self._next_id(), game_id=gid, player_id=pid, count=count)
            self._goals[g.id] = g
            return replace(g)

    def update_goal(self, goal_id, count):
        with self._lock:
            cur = self._goals.get(str(goal_id))
            if cur is None:
                return None
            self._goals[cur.id] = replace(cur, count=count)
            return replace(self._goals[cur.id])

    def delete_goal(self, goal_id):
        with self._lock:
            return self._goals.pop(str(goal_id), None) is not None

    # ---- caixa ----
    def list_transactions(self):
        with self._lock:
            return self._copy(sorted(self._transactions.values(), key=lambda t: (t.date, int(t.id)), reverse=True))

    def create_transaction(self, date, type, amount, description=""):
        with self._lock:
            t = Transaction(id=self._next_id(), date=date, type=type, amount=amount, description=description)
            self._transactions[t.id] = t
            return replace(t)

    def delete_transaction(self, transaction_id):
        with self._lock:
            return self._transactions.pop(str(transaction_id), None) is not None

    def clear_transactions(self):
        with self._lock:
            n = len(self._transactions)
            self._transactions.clear()
            return n

    # ---- campeonatos ----
    def list_championships(self):
        with self._lock:
            return self._copy(sorted(self._championships.values(), key=lambda c: (c.date, int(c.id)), reverse=True))

    def create_championship(self, player_id, year=None, date=None, game_id=None):
        game = self.get_game(game_id) if game_id else None
        if game_id and game is None:
            raise ValueError("Jogo não encontrado.")
        yr, d = _championship_fields(game, year, date)
        with self._lock:
            c = Championship(id=self._next_id(), player_id=player_id, year=yr, date=d,
                             game_id=game.id if game else None)
            self._championships[c.id] = c
            return replace(c)

    def delete_championship(self, championship_id):
        with self._lock:
            return self._championships.pop(str(championship_id), None) is not None

    # ---- settings ----
    def get_setting(self, key, default=""):
        with self._lock:
            return self._settings.get(key, default)

    def set_setting(self, key, value):
        with self._lock:
            self._settings[key] = str(value)


# -----------------------------------------------------------------------------------
#  Snapshot (leituras em paralelo)
# -----------------------------------------------------------------------------------
FEEDS = ("players", "games", "goals", "transactions", "championships")


def carregar_snapshot(repo: Repositorio, feeds=FEEDS) -> Snapshot:
    loaders = {name: getattr(repo, f"list_{name}") for name in feeds}
    data = {}
    with ThreadPoolExecutor(max_workers=len(loaders) or 1) as ex:
        futures = {name: ex.submit(fn) for name, fn in loaders.items()}
        for name, fut in futures.items():
            try:
                data[name] = fut.result()
            except Exception:
                logger.exception("falha ao carregar %s; seguindo com lista vazia", name)
                data[name] = []
    return Snapshot(**data)


# -----------------------------------------------------------------------------------
#  Importação de jogadores (CSV/Excel)
# -----------------------------------------------------------------------------------
_POSITION_ALIASES = {
    "ata": "atacante", "ate": "atacante", "def": "defensor", "zag": "defensor",
    "lat": "defensor", "mei": "meia", "vol": "meia", "fle": "flexivel",
}
_RUNNING_ALIASES = {"sim": "sim", "s": "sim", "nao": "nao", "não": "nao", "n": "nao",
                    "medio": "medio", "médio": "medio", "m": "medio"}


def _norm_position(v) -> str:
    s = str(v or "").strip().lower()
    if s in POSITIONS:
        return s
    return _POSITION_ALIASES.get(s[:3], "flexivel")


def _norm_running(v) -> str:
    s = str(v or "").strip().lower()
    return s if s in RUNNING else _RUNNING_ALIASES.get(s, "medio")


def import_players_df(repo: Repositorio, df: pd.DataFrame):
    """
    Importa jogadores (upsert pelo nome, sem diferenciar maiúsculas).
    Cabeçalhos aceitos: Nome, Posição, Corrida, Nota, Foto (qualquer ordem).
    """
    cmap = {}
    for c in df.columns:
        s = str(c).strip().lower()
        if s.startswith("nome"):
            cmap[c] = "name"
        elif "posi" in s:
            cmap[c] = "position"
        elif "corr" in s:
            cmap[c] = "running"
        elif s.startswith("nota") or "rating" in s:
            cmap[c] = "rating"
        elif "foto" in s:
            cmap[c] = "photo"
    df = df.rename(columns=cmap)

    existing = {p.name.casefold(): p for p in repo.list_players()}
    total, ok, erros = len(df), 0, []
    for idx, r in df.iterrows():
        name = str(_opt(r.get("name")) or "").strip()
        if not name:
            continue
        rating = pd.to_numeric(r.get("rating", 5), errors="coerce")
        fields = {
            "position": _norm_position(_opt(r.get("position"))),
            "running": _norm_running(_opt(r.get("running"))),
            "rating": 5.0 if pd.isna(rating) else float(rating),
            "photo": str(_opt(r.get("photo")) or "").strip() or None,
        }
        try:
            cur = existing.get(name.casefold())
            if cur:
                existing[name.casefold()] = repo.update_player(cur.id, **fields)
            else:
                existing[name.casefold()] = repo.create_player(name, **fields)
            ok += 1
        except ValueError as e:
            erros.append(f"linha {idx + 2}: {e}")
    if erros:
        logger.warning("importação de jogadores com %s erro(s)", len(erros))
    return {"linhas": total, "gravadas": ok, "erros": erros}
