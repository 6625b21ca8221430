from datetime import date, datetime, time

import pytest

from consultorio.core.timeutils import (
    add_minutes, clinic_now, combine, format_date_long, format_time_12h,
    is_time_in_past, is_within, month_range, parse_date, parse_time, week_range,
)
from consultorio.types.scheduling_types import InvalidAppointmentRequest


def test_combine_is_naive_local_time():
    instante = combine(date(2024, 6, 10), time(23, 45))
    assert instante == datetime(2024, 6, 10, 23, 45)
    assert instante.tzinfo is None


def test_add_minutes_accepts_negative():
    base = datetime(2024, 6, 10, 9, 0)
    assert add_minutes(base, 90) == datetime(2024, 6, 10, 10, 30)
    assert add_minutes(base, -15) == datetime(2024, 6, 10, 8, 45)


def test_add_minutes_out_of_calendar_is_invalid_input():
    with pytest.raises(InvalidAppointmentRequest):
        add_minutes(datetime(2024, 6, 10, 10, 0), 10 ** 10)
    with pytest.raises(InvalidAppointmentRequest):
        add_minutes(datetime(9999, 12, 31, 20, 0), 30)


def test_is_within_is_closed_on_both_ends():
    inicio = datetime(2024, 6, 10, 10, 0)
    fim = datetime(2024, 6, 10, 10, 30)
    assert is_within(inicio, inicio, fim)
    assert is_within(fim, inicio, fim)
    assert not is_within(datetime(2024, 6, 10, 10, 31), inicio, fim)


@pytest.mark.parametrize("hora, esperado", [
    (time(0, 5), "12:05 a.m."),
    (time(9, 0), "9:00 a.m."),
    (time(12, 0), "12:00 p.m."),
    (time(16, 30), "4:30 p.m."),
    (time(20, 15), "8:15 p.m."),
])
def test_format_time_12h(hora, esperado):
    assert format_time_12h(hora) == esperado


def test_format_date_long():
    assert format_date_long(date(2024, 6, 10)) == "10 de junho de 2024"
    assert format_date_long(date(2025, 3, 1)) == "1 de março de 2025"


def test_parse_date_and_time():
    assert parse_date("2024-06-10") == date(2024, 6, 10)
    assert parse_time("09:15") == time(9, 15)
    assert parse_time("16:30:00") == time(16, 30)


@pytest.mark.parametrize("valor", ["10/06/2024", "2024-13-01", "", None])
def test_parse_date_rejects_malformed(valor):
    with pytest.raises(InvalidAppointmentRequest):
        parse_date(valor)


@pytest.mark.parametrize("valor", ["25:00", "10h30", "", None])
def test_parse_time_rejects_malformed(valor):
    with pytest.raises(InvalidAppointmentRequest):
        parse_time(valor)


def test_week_range_starts_on_monday():
    assert week_range(date(2024, 6, 12)) == (date(2024, 6, 10), date(2024, 6, 16))
    assert week_range(date(2024, 6, 16)) == (date(2024, 6, 10), date(2024, 6, 16))


def test_month_range_handles_leap_year():
    assert month_range(date(2024, 2, 10)) == (date(2024, 2, 1), date(2024, 2, 29))


def test_clinic_now_has_no_tzinfo():
    agora = clinic_now("America/Sao_Paulo")
    assert agora.tzinfo is None
    assert agora.second == 0


def test_is_time_in_past():
    agora = datetime(2024, 6, 10, 12, 0)
    assert is_time_in_past(date(2024, 6, 10), time(11, 59), agora)
    assert not is_time_in_past(date(2024, 6, 10), time(12, 0), agora)
