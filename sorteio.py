# sorteio.py: times equilibrados pela nota
def generate_balanced_teams(players, num_teams:int) -> list:
    """
    Distribui os jogadores em `num_teams` times:
    - ordena por nota (maior primeiro);
    - cada time recebe primeiro um defensor (enquanto houver);
    - o restante vai em "snake draft" (1,2,3,3,2,1,...).
    """
    num_teams = int(num_teams)
    if num_teams < 1:
        raise ValueError("Quantidade de times deve ser pelo menos 1.")

    ordered = sorted(players, key=lambda p: (-p.rating, p.name.casefold(), p.id))
    teams = [[] for _ in range(num_teams)]

    defenders = [p for p in ordered if p.position == "defensor"][:num_teams]
    for i, d in enumerate(defenders):
        teams[i].append(d)
    seeded = {d.id for d in defenders}

    direction, current = 1, 0
    for p in ordered:
        if p.id in seeded:
            continue
        teams[current].append(p)
        current += direction
        if current == num_teams:
            direction, current = -1, num_teams - 1
        elif current < 0:
            direction, current = 1, 0
    return teams


def team_rating(team) -> float:
    return round(sum(p.rating for p in team), 2)
