# models.py: entidades da pelada (snapshots imutáveis)
from dataclasses import dataclass, field
from datetime import date, datetime
from typing import Optional
import re

POSITIONS = ("atacante", "defensor", "meia", "flexivel")
RUNNING = ("sim", "nao", "medio")
GAME_TYPES = ("pelada", "campeonato")
TRANSACTION_TYPES = ("entrada", "saida")
ROLES = ("viewer", "mensalista", "admin")
REQUEST_STATUS = ("pending", "approved", "denied")

RATING_MIN, RATING_MAX = 0.0, 10.0

POSITION_LABELS = {"atacante": "Atacante", "defensor": "Defensor", "meia": "Meia", "flexivel": "Flexível"}
RUNNING_LABELS = {"sim": "Sim", "nao": "Não", "medio": "Médio"}
GAME_TYPE_LABELS = {"pelada": "Pelada", "campeonato": "Campeonato"}
TRANSACTION_LABELS = {"entrada": "Entrada", "saida": "Saída"}
ROLE_LABELS = {"admin": "Admin", "mensalista": "Mensalista", "viewer": "Viewer"}


def to_date(v) -> Optional[date]:
    """
    Converte para date (só o dia importa).
    Aceita date, datetime, '2024-02-10', '2024-02-10T18:00:00Z' e '10/02/2024'.
    Retorna None para vazio/inválido.
    """
    if v is None:
        return None
    if isinstance(v, datetime):
        return v.date()
    if isinstance(v, date):
        return v
    s = str(v).strip()
    if not s:
        return None
    for fmt in ["%d/%m/%Y", "%d-%m-%Y"]:
        try:
            return datetime.strptime(s, fmt).date()
        except ValueError:
            pass
    m = re.match(r"^(\d{4})-(\d{2})-(\d{2})", s)
    if m:
        try:
            return date(int(m.group(1)), int(m.group(2)), int(m.group(3)))
        except ValueError:
            return None
    return None


def _set(obj, name, value):
    object.__setattr__(obj, name, value)


def _require_date(obj, name="date"):
    d = to_date(getattr(obj, name))
    if d is None:
        raise ValueError(f"Data inválida: {getattr(obj, name)!r}")
    _set(obj, name, d)


@dataclass(frozen=True)
class Player:
    id: str
    name: str
    position: str = "flexivel"
    running: str = "medio"
    rating: float = 5.0
    photo: Optional[str] = None

    def __post_init__(self):
        _set(self, "id", str(self.id))
        _set(self, "name", str(self.name or "").strip())
        if not self.name:
            raise ValueError("Nome do jogador é obrigatório.")
        if self.position not in POSITIONS:
            raise ValueError(f"Posição inválida: {self.position!r}")
        if self.running not in RUNNING:
            raise ValueError(f"Corrida inválida: {self.running!r}")
        rating = float(self.rating)
        if not (RATING_MIN <= rating <= RATING_MAX):
            raise ValueError(f"Nota deve estar entre {RATING_MIN:g} e {RATING_MAX:g}.")
        _set(self, "rating", rating)
        _set(self, "photo", self.photo or None)


@dataclass(frozen=True)
class Game:
    id: str
    date: date
    type: str = "pelada"
    photo: Optional[str] = None

    def __post_init__(self):
        _set(self, "id", str(self.id))
        _require_date(self)
        if self.type not in GAME_TYPES:
            raise ValueError(f"Tipo de jogo inválido: {self.type!r}")
        _set(self, "photo", self.photo or None)


@dataclass(frozen=True)
class Goal:
    id: str
    game_id: str
    player_id: str
    count: int = 0

    def __post_init__(self):
        _set(self, "id", str(self.id))
        _set(self, "game_id", str(self.game_id))
        _set(self, "player_id", str(self.player_id))
        if int(self.count) < 0:
            raise ValueError("Quantidade de gols não pode ser negativa.")
        _set(self, "count", int(self.count))


@dataclass(frozen=True)
class Transaction:
    id: str
    date: date
    type: str
    amount: float
    description: str = ""

    def __post_init__(self):
        _set(self, "id", str(self.id))
        _require_date(self)
        if self.type not in TRANSACTION_TYPES:
            raise ValueError(f"Tipo de transação inválido: {self.type!r}")
        amount = float(self.amount)
        if amount <= 0:
            raise ValueError("Valor deve ser maior que zero.")
        _set(self, "amount", amount)
        _set(self, "description", str(self.description or "").strip())

    @property
    def signed_amount(self) -> float:
        return self.amount if self.type == "entrada" else -self.amount


@dataclass(frozen=True)
class Championship:
    id: str
    player_id: str
    year: int
    date: date
    game_id: Optional[str] = None

    def __post_init__(self):
        _set(self, "id", str(self.id))
        _set(self, "player_id", str(self.player_id))
        _require_date(self)
        _set(self, "year", int(self.year))
        _set(self, "game_id", str(self.game_id) if self.game_id not in (None, "") else None)


@dataclass(frozen=True)
class QuarterPeriod:
    id: str
    label: str
    year: int
    start: date
    end: date
    quarter: Optional[int] = None
    is_year: bool = False

    def contains(self, d) -> bool:
        d = to_date(d)
        return d is not None and self.start <= d <= self.end


@dataclass(frozen=True)
class DateRange:
    start: date
    end: date

    def __post_init__(self):
        _require_date(self, "start")
        _require_date(self, "end")

    def contains(self, d) -> bool:
        d = to_date(d)
        return d is not None and self.start <= d <= self.end


@dataclass(frozen=True)
class ScorerTotal:
    player: Player
    goals: int


@dataclass(frozen=True)
class ChampionRank:
    player: Player
    titles: int


@dataclass(frozen=True)
class BalanceSummary:
    total_in: float = 0.0
    total_out: float = 0.0

    @property
    def balance(self) -> float:
        return self.total_in - self.total_out


@dataclass(frozen=True)
class Snapshot:
    """Dados de uma leitura completa do banco (um por renderização)."""
    players: list = field(default_factory=list)
    games: list = field(default_factory=list)
    goals: list = field(default_factory=list)
    transactions: list = field(default_factory=list)
    championships: list = field(default_factory=list)
