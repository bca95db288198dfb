# stats.py: artilharia, saldo do caixa e ranking de campeões
"""
Agregações puras sobre snapshots já carregados.

Nenhuma função aqui altera as listas recebidas nem lança exceção por
referência quebrada: gols/títulos de jogadores (ou jogos) que não existem
mais são descartados pela política `skip_orphans` (via `_resolve`).
Período com um dos lados ausente fica em aberto desse lado.

Empates são desfeitos pelo nome do jogador (sem diferenciar maiúsculas) e,
por último, pelo id.
"""
import logging

import pandas as pd

from models import ScorerTotal, ChampionRank, BalanceSummary, to_date, POSITION_LABELS

logger = logging.getLogger(__name__)

CHAMPIONS_TOP_N = 10


def _bounds(period):
    """(início, fim) inclusivos; um lado ausente/inválido fica em aberto."""
    if period is None:
        return None
    if isinstance(period, dict):
        return to_date(period.get("start")), to_date(period.get("end"))
    return to_date(getattr(period, "start", None)), to_date(getattr(period, "end", None))


def _in_bounds(d, bounds) -> bool:
    if not bounds:
        return True
    lo, hi = bounds
    return (lo is None or lo <= d) and (hi is None or d <= hi)


def _rank_key(player, total):
    return (-total, player.name.casefold(), player.id)


def _resolve(by_id: dict, ref, kind: str):
    """Entidade referenciada ou None (referência órfã, registrada em debug)."""
    found = by_id.get(ref)
    if found is None:
        logger.debug("ignorando referência órfã ao %s %s", kind, ref)
    return found


def skip_orphans(totals: dict, players) -> list:
    """
    Resolve {player_id: total} para [(Player, total)].
    Ids sem jogador correspondente ficam de fora (referência órfã).
    """
    by_id = {p.id: p for p in players}
    resolved = []
    for pid, total in totals.items():
        p = _resolve(by_id, pid, "jogador")
        if p is not None:
            resolved.append((p, total))
    return resolved


def top_scorers(goals, games, players, period=None, game_type:str=None, game_id:str=None) -> list:
    games_by_id = {g.id: g for g in games}
    bounds = _bounds(period)

    totals = {}
    for goal in goals:
        # gols de jogos apagados seguem a mesma política de órfãos
        game = _resolve(games_by_id, goal.game_id, "jogo")
        if game is None:
            continue
        if game_type and game.type != game_type:
            continue
        if game_id and game.id != str(game_id):
            continue
        if not _in_bounds(game.date, bounds):
            continue
        totals[goal.player_id] = totals.get(goal.player_id, 0) + goal.count

    ranked = sorted(skip_orphans(totals, players), key=lambda pt: _rank_key(*pt))
    return [ScorerTotal(player=p, goals=t) for p, t in ranked]


def balance_summary(transactions) -> BalanceSummary:
    tin = sum(t.amount for t in transactions if t.type == "entrada")
    tout = sum(t.amount for t in transactions if t.type == "saida")
    return BalanceSummary(total_in=float(tin), total_out=float(tout))


def balance(transactions) -> float:
    return balance_summary(transactions).balance


def championship_years(championships) -> list:
    return sorted({c.year for c in championships}, reverse=True)


def championship_ranking(championships, players, year:int, limit:int=CHAMPIONS_TOP_N) -> list:
    totals = {}
    for c in championships:
        if c.year != int(year):
            continue
        totals[c.player_id] = totals.get(c.player_id, 0) + 1

    ranked = sorted(skip_orphans(totals, players), key=lambda pt: _rank_key(*pt))
    if limit is not None:
        ranked = ranked[:limit]
    return [ChampionRank(player=p, titles=t) for p, t in ranked]


# -------------- Tabelas p/ exibição ---------------
def _with_position(df: pd.DataFrame) -> pd.DataFrame:
    df = df.reset_index(drop=True)
    df.insert(0, "Posição", [f"{i}º" for i in range(1, len(df)+1)])
    return df


def scorers_table(scorers) -> pd.DataFrame:
    if not scorers:
        return pd.DataFrame(columns=["Posição", "Jogador", "Posição em campo", "Gols"])
    df = pd.DataFrame([
        {"Jogador": s.player.name,
         "Posição em campo": POSITION_LABELS.get(s.player.position, s.player.position),
         "Gols": int(s.goals)}
        for s in scorers
    ])
    return _with_position(df)


def ranking_table(ranking) -> pd.DataFrame:
    if not ranking:
        return pd.DataFrame(columns=["Posição", "Jogador", "Títulos"])
    df = pd.DataFrame([{"Jogador": r.player.name, "Títulos": int(r.titles)} for r in ranking])
    return _with_position(df)


def transactions_table(transactions) -> pd.DataFrame:
    cols = ["Data", "Tipo", "Descrição", "Valor"]
    if not transactions:
        return pd.DataFrame(columns=cols)
    rows = sorted(transactions, key=lambda t: (t.date, t.id), reverse=True)
    return pd.DataFrame([
        {"Data": t.date.strftime("%d/%m/%Y"),
         "Tipo": "Entrada" if t.type == "entrada" else "Saída",
         "Descrição": t.description,
         "Valor": t.signed_amount}
        for t in rows
    ], columns=cols)


def brl(v: float) -> str:
    return f"R$ {v:,.2f}".replace(",", "X").replace(".", ",").replace("X", ".")
