# periods.py: períodos selecionáveis (trimestres / total do ano)
import calendar
from datetime import date

from models import QuarterPeriod, DateRange, to_date

BR_MONTHS = {
    1:"Janeiro",2:"Fevereiro",3:"Março",4:"Abril",5:"Maio",6:"Junho",
    7:"Julho",8:"Agosto",9:"Setembro",10:"Outubro",11:"Novembro",12:"Dezembro"
}

# (trimestre, mês inicial, mês final)
QUARTERS = ((1, 1, 3), (2, 4, 6), (3, 7, 9), (4, 10, 12))


def item_date(item):
    """Lê a data de um objeto (atributo .date) ou dict ('date')."""
    if isinstance(item, dict):
        return to_date(item.get("date"))
    return to_date(getattr(item, "date", None))


def month_range(year:int, month:int) -> DateRange:
    last = calendar.monthrange(int(year), int(month))[1]
    return DateRange(date(int(year), int(month), 1), date(int(year), int(month), last))


def year_range(year:int) -> DateRange:
    return DateRange(date(int(year), 1, 1), date(int(year), 12, 31))


def game_range(game) -> DateRange:
    d = item_date(game)
    return DateRange(d, d)


def quarter_of(d) -> int:
    return (to_date(d).month - 1) // 3 + 1


def generate_quarter_periods(items) -> list:
    """
    Gera os períodos que têm dados: para cada ano (mais recente primeiro),
    o 'Total AAAA' seguido dos trimestres com pelo menos um item (4º..1º).
    """
    dates = [d for d in (item_date(i) for i in items) if d is not None]
    if not dates:
        return []

    periods = []
    for year in sorted({d.year for d in dates}, reverse=True):
        yr = year_range(year)
        periods.append(QuarterPeriod(
            id=f"year-{year}", label=f"Total {year}", year=year,
            start=yr.start, end=yr.end, quarter=None, is_year=True,
        ))
        for q, m1, m2 in reversed(QUARTERS):
            start = date(year, m1, 1)
            end = month_range(year, m2).end
            if any(start <= d <= end for d in dates):
                periods.append(QuarterPeriod(
                    id=f"{year}-q{q}", label=f"{q}º Trimestre {year}", year=year,
                    start=start, end=end, quarter=q, is_year=False,
                ))
    return periods


def find_period(periods, period_id:str):
    for p in periods:
        if p.id == period_id:
            return p
    return None


def month_label(year:int, month:int) -> str:
    return f"{BR_MONTHS.get(int(month), f'M{month}')}/{year}"
