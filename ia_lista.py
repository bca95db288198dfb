# ia_lista.py: lê a lista do jogo (texto do WhatsApp) e acha jogadores/gols
"""
Dois caminhos:
- processar_lista: pede a um modelo (API compatível com chat/completions)
  que extraia jogadores, data, tipo e gols via tool call `extract_game_info`.
- parse_lista_local: leitura linha a linha, sem rede.

Os dois devolvem ListaProcessada com os nomes casados aos ids da base.
"""
import json
import logging
import re
import unicodedata
from dataclasses import dataclass, field
from datetime import date
from typing import Optional

import requests

from config import get_secret
from models import to_date

logger = logging.getLogger(__name__)

DEFAULT_GATEWAY_URL = "https://api.openai.com/v1/chat/completions"
DEFAULT_MODEL = "gpt-4o-mini"
TIMEOUT = 60

GOAL_EMOJIS = ("⚽", "🥅")

TOOL_NAME = "extract_game_info"
TOOL = {
    "type": "function",
    "function": {
        "name": TOOL_NAME,
        "description": "Extrai informações do jogo a partir do texto",
        "parameters": {
            "type": "object",
            "properties": {
                "players": {
                    "type": "array",
                    "items": {
                        "type": "object",
                        "properties": {
                            "name": {"type": "string", "description": "Nome do jogador como aparece no texto"},
                            "matchedName": {"type": "string", "description": "Nome do jogador que melhor corresponde na base de dados"},
                            "confidence": {"type": "string", "enum": ["high", "medium", "low"], "description": "Confiança no match"},
                            "goals": {"type": "number", "description": "Quantidade de gols (contar emojis ⚽ ou 🥅)", "default": 0},
                        },
                        "required": ["name", "matchedName", "confidence", "goals"],
                    },
                },
                "date": {"type": "string", "description": "Data do jogo no formato YYYY-MM-DD, ou null se não mencionada"},
                "gameType": {"type": "string", "enum": ["pelada", "campeonato"], "description": "Tipo do jogo identificado no texto"},
            },
            "required": ["players", "gameType"],
            "additionalProperties": False,
        },
    },
}


class IAListaError(Exception):
    def __init__(self, message: str, status: int = 500):
        super().__init__(message)
        self.status = status


@dataclass
class JogadorEncontrado:
    original_name: str
    matched_name: str
    player_id: Optional[str]
    confidence: str
    goals: int = 0


@dataclass
class ListaProcessada:
    players: list = field(default_factory=list)
    date: Optional[date] = None
    game_type: str = "pelada"

    @property
    def total_players(self) -> int:
        return len(self.players)

    @property
    def matched_count(self) -> int:
        return sum(1 for p in self.players if p.player_id)

    def to_dict(self) -> dict:
        return {
            "players": [{"originalName": p.original_name, "matchedName": p.matched_name,
                         "playerId": p.player_id, "confidence": p.confidence, "goals": p.goals}
                        for p in self.players],
            "date": self.date.isoformat() if self.date else None,
            "gameType": self.game_type,
            "totalPlayers": self.total_players,
            "matchedCount": self.matched_count,
        }


def system_prompt(jogadores) -> str:
    nomes = ", ".join(p.name for p in jogadores)
    return f"""Você é um assistente especializado em processar listas de jogadores de futebol.
Você receberá um texto com informações sobre um jogo e deve extrair:
1. Lista de jogadores mencionados
2. Data do jogo (se mencionada)
3. Tipo de jogo (pelada ou campeonato)
4. Quantidade de gols de cada jogador (contar emojis ⚽ ou 🥅 antes do nome)

Os jogadores disponíveis no sistema são: {nomes}

Para cada jogador mencionado no texto, tente fazer match com os jogadores da base.
Retorne apenas jogadores que você conseguir identificar com certeza.
Os emojis ⚽ ou 🥅 indicam quantidade de gols - conte-os para cada jogador."""


def _match_ids(extracted: dict, jogadores) -> ListaProcessada:
    by_name = {p.name.casefold(): p for p in jogadores}
    found = []
    for item in extracted.get("players") or []:
        matched = str(item.get("matchedName") or "")
        p = by_name.get(matched.casefold())
        try:
            goals = max(0, int(item.get("goals") or 0))
        except (TypeError, ValueError):
            goals = 0
        found.append(JogadorEncontrado(
            original_name=str(item.get("name") or matched),
            matched_name=matched,
            player_id=p.id if p else None,
            confidence=str(item.get("confidence") or "low"),
            goals=goals,
        ))
    game_type = extracted.get("gameType")
    return ListaProcessada(
        players=found,
        date=to_date(extracted.get("date")),
        game_type=game_type if game_type in ("pelada", "campeonato") else "pelada",
    )


def processar_lista(texto: str, jogadores, api_key: str = None, url: str = None,
                    model: str = None, session=None) -> ListaProcessada:
    api_key = api_key or get_secret("AI_API_KEY", "")
    if not api_key:
        raise IAListaError("AI_API_KEY não configurada")
    url = url or get_secret("AI_GATEWAY_URL", DEFAULT_GATEWAY_URL)
    model = model or get_secret("AI_MODEL", DEFAULT_MODEL)
    http = session or requests

    logger.info("processando lista do jogo (%s jogadores na base)", len(jogadores))
    payload = {
        "model": model,
        "messages": [
            {"role": "system", "content": system_prompt(jogadores)},
            {"role": "user", "content": texto},
        ],
        "tools": [TOOL],
        "tool_choice": {"type": "function", "function": {"name": TOOL_NAME}},
    }
    try:
        resp = http.post(url, json=payload, timeout=TIMEOUT,
                         headers={"Authorization": f"Bearer {api_key}", "Content-Type": "application/json"})
    except requests.RequestException as e:
        logger.error("falha de rede no gateway de IA: %s", e)
        raise IAListaError(f"Falha ao contactar o gateway de IA: {e}") from e

    if resp.status_code == 429:
        raise IAListaError("Limite de requisições excedido, tente novamente mais tarde.", 429)
    if resp.status_code == 402:
        raise IAListaError("Créditos esgotados no gateway de IA.", 402)
    if not resp.ok:
        logger.error("erro do gateway de IA: %s %s", resp.status_code, resp.text[:500])
        raise IAListaError("Erro no gateway de IA")

    data = resp.json()
    try:
        call = data["choices"][0]["message"]["tool_calls"][0]
        extracted = json.loads(call["function"]["arguments"])
    except (KeyError, IndexError, TypeError, ValueError) as e:
        raise IAListaError("Resposta da IA sem tool call") from e
    logger.debug("informações extraídas: %s", extracted)
    return _match_ids(extracted, jogadores)


# -------------- parser local ---------------
_NUMBERING = re.compile(r"^\s*(\d+\s*[-.)º°]?\s*)")
_BR_DATE = re.compile(r"\b(\d{1,2})/(\d{1,2})(?:/(\d{2,4}))?\b")
_ISO_DATE = re.compile(r"\b(\d{4}-\d{2}-\d{2})\b")


def _plain(s: str) -> str:
    nfkd = unicodedata.normalize("NFKD", s or "")
    return "".join(c for c in nfkd if not unicodedata.combining(c)).casefold().strip()


def _find_date(texto: str, today: date):
    m = _ISO_DATE.search(texto)
    if m:
        return to_date(m.group(1))
    m = _BR_DATE.search(texto)
    if not m:
        return None
    d, mth, y = int(m.group(1)), int(m.group(2)), m.group(3)
    year = today.year if not y else (2000 + int(y) if len(y) == 2 else int(y))
    try:
        return date(year, mth, d)
    except ValueError:
        return None


def _match_player(nome: str, jogadores):
    alvo = _plain(nome)
    if not alvo:
        return None, "low"
    for p in jogadores:
        if _plain(p.name) == alvo:
            return p, "high"
    parciais = [p for p in jogadores
                if _plain(p.name).startswith(alvo) or alvo.startswith(_plain(p.name).split(" ")[0] + " ")
                or _plain(p.name).split(" ")[0] == alvo]
    if len(parciais) == 1:
        return parciais[0], "medium"
    return None, "low"


def parse_lista_local(texto: str, jogadores, today: date = None) -> ListaProcessada:
    today = today or date.today()
    found = []
    for raw in (texto or "").splitlines():
        line = raw.strip()
        if not line or _BR_DATE.search(line) or _ISO_DATE.search(line):
            continue
        goals = sum(line.count(e) for e in GOAL_EMOJIS)
        nome = line
        for e in GOAL_EMOJIS:
            nome = nome.replace(e, " ")
        nome = _NUMBERING.sub("", nome)
        nome = re.sub(r"[^\w\s'.-]", " ", nome)
        nome = re.sub(r"\s+", " ", nome).strip(" .-")
        if not nome or not any(c.isalpha() for c in nome):
            continue
        p, conf = _match_player(nome, jogadores)
        if p is None and goals == 0 and not _NUMBERING.match(line):
            # linha de título/comentário, não de jogador
            continue
        found.append(JogadorEncontrado(
            original_name=nome,
            matched_name=p.name if p else nome,
            player_id=p.id if p else None,
            confidence=conf,
            goals=goals,
        ))
    game_type = "campeonato" if "campeonato" in _plain(texto) else "pelada"
    return ListaProcessada(players=found, date=_find_date(texto or "", today), game_type=game_type)
