from datetime import date, datetime, time

from consultorio.core.overlap import find_collisions, has_overlap, intervals_overlap
from consultorio.types.scheduling_types import AppointmentStatus

from conftest import make_appointment

DIA = date(2024, 6, 10)


def _dt(h, m=0):
    return datetime(2024, 6, 10, h, m)


class TestIntervalsOverlap:

    def test_partial_overlap(self):
        assert intervals_overlap(_dt(10, 15), _dt(10, 45), _dt(10), _dt(10, 30))

    def test_touching_boundaries_count_as_overlap(self):
        # Termina exatamente quando a outra começa: conservador, choca
        assert intervals_overlap(_dt(10, 30), _dt(11), _dt(10), _dt(10, 30))
        assert intervals_overlap(_dt(9, 30), _dt(10), _dt(10), _dt(10, 30))

    def test_containment_both_ways(self):
        assert intervals_overlap(_dt(9), _dt(12), _dt(10), _dt(10, 30))
        assert intervals_overlap(_dt(10, 5), _dt(10, 10), _dt(10), _dt(10, 30))

    def test_disjoint(self):
        assert not intervals_overlap(_dt(10, 45), _dt(11, 15), _dt(10), _dt(10, 30))
        assert not intervals_overlap(_dt(9), _dt(9, 45), _dt(10), _dt(10, 30))


def test_candidate_touching_existing_end_is_flagged():
    existentes = [make_appointment(id=1, hora=time(10, 0), duracao=30)]
    assert has_overlap(DIA, time(10, 30), 30, existentes)
    assert not has_overlap(DIA, time(10, 45), 30, existentes)


def test_other_day_never_collides():
    existentes = [make_appointment(id=1, hora=time(10, 0), duracao=30)]
    assert not has_overlap(date(2024, 6, 11), time(10, 0), 30, existentes)


def test_excluding_self_allows_same_slot():
    existentes = [make_appointment(id=7, hora=time(10, 0), duracao=60)]
    assert has_overlap(DIA, time(10, 0), 60, existentes)
    assert not has_overlap(DIA, time(10, 0), 60, existentes, exclude_id=7)


def test_cancelled_appointments_are_ignored():
    existentes = [make_appointment(id=1, hora=time(10, 0), status=AppointmentStatus.CANCELLED)]
    assert not has_overlap(DIA, time(10, 0), 30, existentes)


def test_find_collisions_returns_evidence():
    a = make_appointment(id=1, hora=time(9, 0), duracao=30)
    b = make_appointment(id=2, hora=time(10, 0), duracao=30)
    c = make_appointment(id=3, hora=time(12, 0), duracao=30)
    conflitos = find_collisions(DIA, time(9, 15), 60, [a, b, c])
    assert [ap.id for ap in conflitos] == [1, 2]


def test_long_appointment_spanning_lunch_blocks_afternoon():
    existentes = [make_appointment(id=1, hora=time(12, 30), duracao=240)]
    assert has_overlap(DIA, time(16, 30), 30, existentes)
