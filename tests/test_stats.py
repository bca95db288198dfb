import copy
import logging
from datetime import date

import pytest

from models import Player, Game, Goal, Transaction, Championship, DateRange
from periods import generate_quarter_periods, find_period
from stats import (
    top_scorers, balance_summary, balance, championship_ranking, championship_years,
    scorers_table, ranking_table, transactions_table, brl,
)


class TestTopScorers:
    def test_empty_inputs(self, players, games):
        assert top_scorers([], games, players) == []
        assert top_scorers([], [], []) == []

    def test_sums_per_player_ranked(self, goals, games, players):
        res = top_scorers(goals, games, players)
        assert [(s.player.name, s.goals) for s in res] == [("bruno", 4), ("Caio", 4), ("Ana", 2)]

    def test_tie_broken_by_name_case_insensitive(self, games):
        ps = [Player(id="1", name="zeca"), Player(id="2", name="Abel")]
        gs = [Goal(id="1", game_id="g1", player_id="1", count=2),
              Goal(id="2", game_id="g1", player_id="2", count=2)]
        res = top_scorers(gs, games, ps)
        assert [s.player.name for s in res] == ["Abel", "zeca"]

    def test_period_filter(self, goals, games, players):
        periods = generate_quarter_periods(games)
        res = top_scorers(goals, games, players, period=find_period(periods, "2024-q1"))
        assert [(s.player.id, s.goals) for s in res] == [("1", 2), ("2", 1)]

    def test_period_as_dict(self, goals, games, players):
        res = top_scorers(goals, games, players, period={"start": "2023-01-01", "end": "2023-12-31"})
        assert [(s.player.id, s.goals) for s in res] == [("3", 4)]

    def test_game_type_filter(self, goals, games, players):
        res = top_scorers(goals, games, players, game_type="campeonato")
        assert [(s.player.id, s.goals) for s in res] == [("2", 3)]

    def test_game_type_filter_inside_matching_period(self, goals, games, players):
        year = find_period(generate_quarter_periods(games), "year-2024")
        assert [(s.player.id, s.goals) for s in top_scorers(goals, games, players, period=year)] == \
            [("2", 4), ("1", 2)]
        res = top_scorers(goals, games, players, period=year, game_type="campeonato")
        assert [(s.player.id, s.goals) for s in res] == [("2", 3)]

    @pytest.mark.parametrize("period,expected", [
        ({"start": "2024-01-01", "end": None}, [("2", 4), ("1", 2)]),
        ({"start": None, "end": "2023-12-31"}, [("3", 4)]),
        ({"start": "", "end": "nunca"}, [("2", 4), ("3", 4), ("1", 2)]),
        ({}, [("2", 4), ("3", 4), ("1", 2)]),
    ])
    def test_missing_period_bounds_are_open(self, goals, games, players, period, expected):
        res = top_scorers(goals, games, players, period=period)
        assert [(s.player.id, s.goals) for s in res] == expected

    def test_specific_game(self, goals, games, players):
        res = top_scorers(goals, games, players, period=DateRange(date(2024, 2, 10), date(2024, 2, 10)),
                          game_id="g1")
        assert [s.player.id for s in res] == ["1", "2"]

    def test_orphan_player_and_game_are_skipped(self, games, players):
        gs = [Goal(id="1", game_id="g1", player_id="99", count=5),
              Goal(id="2", game_id="nope", player_id="1", count=5),
              Goal(id="3", game_id="g1", player_id="1", count=1)]
        res = top_scorers(gs, games, players)
        assert [(s.player.id, s.goals) for s in res] == [("1", 1)]

    def test_orphans_are_logged(self, games, players, caplog):
        gs = [Goal(id="1", game_id="apagado", player_id="1", count=5),
              Goal(id="2", game_id="g1", player_id="99", count=5)]
        with caplog.at_level(logging.DEBUG, logger="stats"):
            assert top_scorers(gs, games, players) == []
        text = caplog.text
        assert "jogo apagado" in text and "jogador 99" in text

    def test_pure_and_idempotent(self, goals, games, players):
        before = copy.deepcopy((goals, games, players))
        assert top_scorers(goals, games, players) == top_scorers(goals, games, players)
        assert (goals, games, players) == before


class TestBalance:
    def test_in_minus_out(self, transactions):
        s = balance_summary(transactions)
        assert (s.total_in, s.total_out, s.balance) == (100, 40, 60)

    def test_empty_is_zero(self):
        assert balance([]) == 0

    def test_can_go_negative(self):
        ts = [Transaction(id="1", date="2024-01-01", type="saida", amount=50)]
        assert balance(ts) == -50

    def test_invalid_amount_rejected(self):
        with pytest.raises(ValueError):
            Transaction(id="1", date="2024-01-01", type="entrada", amount=0)


class TestChampionships:
    def test_ranking_for_year(self, championships, players):
        res = championship_ranking(championships, players, 2024)
        assert [(r.player.name, r.titles) for r in res] == [("bruno", 2), ("Ana", 1)]

    def test_equal_titles_broken_by_name_case_insensitive(self):
        ps = [Player(id="1", name="zeca"), Player(id="2", name="Abel"), Player(id="3", name="bia")]
        cs = [Championship(id=str(i), player_id=pid, year=2024, date="2024-01-01")
              for i, pid in enumerate(["1", "2", "3", "1", "2", "3"])]
        res = championship_ranking(cs, ps, 2024)
        assert [(r.player.name, r.titles) for r in res] == [("Abel", 2), ("bia", 2), ("zeca", 2)]

    def test_equal_names_broken_by_id(self):
        ps = [Player(id="b", name="Caio"), Player(id="a", name="caio")]
        cs = [Championship(id="1", player_id="b", year=2024, date="2024-01-01"),
              Championship(id="2", player_id="a", year=2024, date="2024-02-01")]
        assert [r.player.id for r in championship_ranking(cs, ps, 2024)] == ["a", "b"]

    def test_year_without_titles(self, championships, players):
        assert championship_ranking(championships, players, 2020) == []

    def test_limit(self, players):
        cs = [Championship(id=str(i), player_id=p.id, year=2024, date="2024-01-01")
              for i, p in enumerate(players)]
        assert len(championship_ranking(cs, players, 2024, limit=2)) == 2

    def test_orphans_skipped(self, players):
        cs = [Championship(id="1", player_id="404", year=2024, date="2024-01-01")]
        assert championship_ranking(cs, players, 2024) == []

    def test_years_descending(self, championships):
        assert championship_years(championships) == [2024, 2023]


def test_tables(goals, games, players, championships, transactions):
    t = scorers_table(top_scorers(goals, games, players))
    assert list(t["Posição"]) == ["1º", "2º", "3º"]
    assert list(t["Gols"]) == [4, 4, 2]
    assert scorers_table([]).empty

    r = ranking_table(championship_ranking(championships, players, 2024))
    assert list(r["Títulos"]) == [2, 1]

    tx = transactions_table(transactions)
    assert list(tx["Valor"]) == [-40.0, 100.0]


def test_brl():
    assert brl(1234.5) == "R$ 1.234,50"
    assert brl(-50) == "R$ -50,00"
