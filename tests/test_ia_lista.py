import json
from datetime import date
from unittest import mock

import pytest
import requests

from models import Player
from ia_lista import processar_lista, parse_lista_local, IAListaError, TOOL_NAME


ELENCO = [
    Player(id="1", name="Ronaldo"),
    Player(id="2", name="Roberto Carlos"),
    Player(id="3", name="Júnior"),
    Player(id="4", name="Kaká"),
]


def _response(status=200, body=None):
    resp = mock.Mock()
    resp.status_code = status
    resp.ok = 200 <= status < 300
    resp.text = json.dumps(body or {})
    resp.json.return_value = body or {}
    return resp


def _tool_body(args):
    return {"choices": [{"message": {"tool_calls": [
        {"function": {"name": TOOL_NAME, "arguments": json.dumps(args)}}
    ]}}]}


class TestProcessarLista:
    def test_maps_names_to_ids(self):
        session = mock.Mock()
        session.post.return_value = _response(200, _tool_body({
            "players": [
                {"name": "Ronaldinho?", "matchedName": "ronaldo", "confidence": "medium", "goals": 2},
                {"name": "Fulano", "matchedName": "Fulano", "confidence": "low", "goals": 0},
            ],
            "date": "2024-05-04",
            "gameType": "campeonato",
        }))
        res = processar_lista("lista", ELENCO, api_key="k", url="http://gw", model="m", session=session)

        assert res.date == date(2024, 5, 4)
        assert res.game_type == "campeonato"
        assert (res.total_players, res.matched_count) == (2, 1)
        assert res.players[0].player_id == "1" and res.players[0].goals == 2
        assert res.to_dict()["players"][1]["playerId"] is None

        url = session.post.call_args.args[0]
        payload = session.post.call_args.kwargs["json"]
        assert url == "http://gw"
        assert payload["model"] == "m"
        assert payload["tool_choice"]["function"]["name"] == TOOL_NAME
        assert "Roberto Carlos" in payload["messages"][0]["content"]
        assert session.post.call_args.kwargs["headers"]["Authorization"] == "Bearer k"

    @pytest.mark.parametrize("status", [429, 402])
    def test_gateway_limits_keep_status(self, status):
        session = mock.Mock()
        session.post.return_value = _response(status)
        with pytest.raises(IAListaError) as exc:
            processar_lista("lista", ELENCO, api_key="k", session=session)
        assert exc.value.status == status

    def test_other_errors_are_500(self):
        session = mock.Mock()
        session.post.return_value = _response(503, {"error": "down"})
        with pytest.raises(IAListaError) as exc:
            processar_lista("lista", ELENCO, api_key="k", session=session)
        assert exc.value.status == 500

    def test_network_failure(self):
        session = mock.Mock()
        session.post.side_effect = requests.ConnectionError("sem rede")
        with pytest.raises(IAListaError):
            processar_lista("lista", ELENCO, api_key="k", session=session)

    def test_response_without_tool_call(self):
        session = mock.Mock()
        session.post.return_value = _response(200, {"choices": [{"message": {"content": "oi"}}]})
        with pytest.raises(IAListaError):
            processar_lista("lista", ELENCO, api_key="k", session=session)

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("AI_API_KEY", raising=False)
        with mock.patch("ia_lista.get_secret", return_value=""):
            with pytest.raises(IAListaError):
                processar_lista("lista", ELENCO, session=mock.Mock())


class TestParseListaLocal:
    TEXTO = """Pelada de quinta 04/05
1. Ronaldo ⚽⚽
2 - roberto carlos
3) Junior 🥅
4. Zé Ninguém
Valeu galera!"""

    def test_players_goals_and_date(self):
        res = parse_lista_local(self.TEXTO, ELENCO, today=date(2024, 6, 1))
        got = [(p.original_name, p.player_id, p.goals, p.confidence) for p in res.players]
        assert got == [
            ("Ronaldo", "1", 2, "high"),
            ("roberto carlos", "2", 0, "high"),
            ("Junior", "3", 1, "high"),
            ("Zé Ninguém", None, 0, "low"),
        ]
        assert res.date == date(2024, 5, 4)
        assert res.game_type == "pelada"
        assert res.matched_count == 3

    def test_partial_first_name(self):
        res = parse_lista_local("1. Roberto", ELENCO)
        assert res.players[0].player_id == "2"
        assert res.players[0].confidence == "medium"

    def test_championship_and_iso_date(self):
        res = parse_lista_local("Campeonato 2024-03-09\nKaká ⚽", ELENCO)
        assert res.game_type == "campeonato"
        assert res.date == date(2024, 3, 9)
        assert [(p.player_id, p.goals) for p in res.players] == [("4", 1)]

    def test_empty_text(self):
        res = parse_lista_local("", ELENCO)
        assert res.players == [] and res.date is None
