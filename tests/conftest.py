"""Fixtures comuns: elenco pequeno, jogos e bancos SQLite temporários."""
from datetime import date

import pytest

from models import Player, Game, Goal, Transaction, Championship
from db import init_db
from db_users import AuthManager
from repositorio import SqlRepositorio, MemoriaRepositorio


@pytest.fixture
def players():
    return [
        Player(id="1", name="Ana", position="atacante", running="sim", rating=8),
        Player(id="2", name="bruno", position="defensor", running="medio", rating=7),
        Player(id="3", name="Caio", position="meia", running="nao", rating=6),
    ]


@pytest.fixture
def games():
    return [
        Game(id="g1", date=date(2024, 2, 10), type="pelada"),
        Game(id="g2", date=date(2024, 8, 1), type="campeonato"),
        Game(id="g3", date=date(2023, 11, 5), type="pelada"),
    ]


@pytest.fixture
def goals():
    return [
        Goal(id="1", game_id="g1", player_id="1", count=2),
        Goal(id="2", game_id="g1", player_id="2", count=1),
        Goal(id="3", game_id="g2", player_id="2", count=3),
        Goal(id="4", game_id="g3", player_id="3", count=4),
    ]


@pytest.fixture
def transactions():
    return [
        Transaction(id="1", date="2024-01-05", type="entrada", amount=100, description="Mensalidade"),
        Transaction(id="2", date="2024-01-10", type="saida", amount=40, description="Bolas"),
    ]


@pytest.fixture
def championships():
    return [
        Championship(id="1", player_id="1", year=2024, date="2024-08-01"),
        Championship(id="2", player_id="2", year=2024, date="2024-09-01"),
        Championship(id="3", player_id="2", year=2024, date="2024-10-01"),
        Championship(id="4", player_id="3", year=2023, date="2023-10-01"),
    ]


@pytest.fixture
def engine(tmp_path):
    return init_db(f"sqlite:///{tmp_path / 'pelada.db'}")


@pytest.fixture(params=["sql", "memoria"])
def repo(request, tmp_path):
    if request.param == "sql":
        return SqlRepositorio(init_db(f"sqlite:///{tmp_path / 'repo.db'}"))
    return MemoriaRepositorio(seed=False)


@pytest.fixture
def auth(tmp_path):
    from sqlalchemy import create_engine
    eng = create_engine(f"sqlite:///{tmp_path / 'auth.sqlite'}",
                        connect_args={"check_same_thread": False}, future=True)
    return AuthManager(eng)
