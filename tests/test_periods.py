from datetime import date

from models import Game
from periods import generate_quarter_periods, find_period, month_range, game_range, quarter_of, month_label


def test_empty_input_gives_no_periods():
    assert generate_quarter_periods([]) == []


def test_year_total_then_quarters_with_data():
    items = [{"date": "2024-02-10"}, {"date": "2024-08-01"}]
    periods = generate_quarter_periods(items)
    assert [p.id for p in periods] == ["year-2024", "2024-q3", "2024-q1"]
    assert [p.label for p in periods] == ["Total 2024", "3º Trimestre 2024", "1º Trimestre 2024"]

    total = periods[0]
    assert total.is_year and total.quarter is None
    assert (total.start, total.end) == (date(2024, 1, 1), date(2024, 12, 31))

    q3 = periods[1]
    assert (q3.start, q3.end, q3.quarter) == (date(2024, 7, 1), date(2024, 9, 30), 3)


def test_years_descending_and_quarters_q4_first(games):
    periods = generate_quarter_periods(games)
    assert [p.id for p in periods] == ["year-2024", "2024-q3", "2024-q1", "year-2023", "2023-q4"]


def test_ids_are_deterministic(games):
    assert generate_quarter_periods(games) == generate_quarter_periods(list(reversed(games)))


def test_items_without_date_are_ignored():
    assert generate_quarter_periods([{"date": None}, {"date": ""}]) == []


def test_period_bounds_are_inclusive():
    p = generate_quarter_periods([{"date": "2024-03-31"}])[1]
    assert p.id == "2024-q1"
    assert p.contains("2024-01-01") and p.contains(date(2024, 3, 31))
    assert not p.contains("2024-04-01")


def test_find_period(games):
    periods = generate_quarter_periods(games)
    assert find_period(periods, "2023-q4").label == "4º Trimestre 2023"
    assert find_period(periods, "2022-q1") is None


def test_helpers():
    assert month_range(2024, 2).end == date(2024, 2, 29)
    assert quarter_of("2024-10-01") == 4
    assert month_label(2024, 3) == "Março/2024"
    r = game_range(Game(id="1", date="10/02/2024"))
    assert r.start == r.end == date(2024, 2, 10)
