# access.py: quem pode ver o quê
from models import ROLES

# viewer < mensalista < admin
ROLE_LEVEL = {r: i for i, r in enumerate(ROLES)}

# recurso -> papel mínimo
RESOURCES = {
    "inicio": "viewer",
    "artilharia": "viewer",
    "financeiro": "mensalista",
    "financeiro.editar": "admin",
    "jogadores": "admin",
    "jogos": "admin",
    "campeonatos": "admin",
    "alimentacao": "admin",
    "admin": "admin",
}

# páginas do menu, na ordem
PAGES = [
    ("inicio", "🏠 Início"),
    ("artilharia", "⚽ Artilharia"),
    ("financeiro", "💰 Financeiro"),
    ("jogadores", "👤 Jogadores"),
    ("jogos", "📆 Jogos"),
    ("campeonatos", "🏆 Campeonatos"),
    ("alimentacao", "🤖 Alimentação Inteligente"),
    ("admin", "🛠 Administração"),
]


def can_access(role: str, resource: str) -> bool:
    if role not in ROLE_LEVEL or resource not in RESOURCES:
        return False
    return ROLE_LEVEL[role] >= ROLE_LEVEL[RESOURCES[resource]]


def visible_pages(role: str) -> list:
    return [(key, label) for key, label in PAGES if can_access(role, key)]
