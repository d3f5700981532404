# test_records.py
"""
Test input records and observation normalization.

Run with: pytest observador/core/test_records.py -v
"""
import pytest

from observador.core.records import (
    PERIODS, EnrollmentStatus, PeriodObservation, Student,
    normalize_observations, normalize_period_key,
)


@pytest.mark.parametrize('raw, expected', [
    ('Nuevo', EnrollmentStatus.NEW),
    ('antiguo', EnrollmentStatus.RETURNING),
    ('REPITENTE', EnrollmentStatus.REPEATING),
    ('returning', EnrollmentStatus.RETURNING),
    (EnrollmentStatus.REPEATING, EnrollmentStatus.REPEATING),
])
def test_enrollment_parse(raw, expected):
    assert EnrollmentStatus.parse(raw) is expected


@pytest.mark.parametrize('raw', [None, '', 'Transferido', 42])
def test_enrollment_defaults_to_new(raw):
    """Unrecognized or absent statuses are treated as NEW."""
    assert EnrollmentStatus.parse(raw) is EnrollmentStatus.NEW


def test_student_from_rest_payload(student_payload):
    student = Student.from_mapping(student_payload)
    assert student.name == 'Ana  Pérez'
    assert student.year == 2024
    assert student.guardian_phone == '3020000000'
    assert student.status is EnrollmentStatus.RETURNING


def test_student_from_attribute_names_and_unknown_keys():
    student = Student.from_mapping({'name': 'Luis', 'grade': '5', 'foo': 'ignored'})
    assert student.name == 'Luis'
    assert student.text('grade') == '5'
    assert student.text('age') == ''


def test_empty_student():
    student = Student.from_mapping(None)
    assert all(student.text(attr) == '' for attr in ('name', 'year', 'address'))
    assert student.status is EnrollmentStatus.NEW


def test_period_keys():
    assert normalize_period_key('iii') == 'III'
    assert normalize_period_key(2) == 'II'
    assert normalize_period_key('V') is None


def test_normalize_observations_order_and_padding():
    """Exactly four periods in fixed order; missing periods are empty."""
    result = normalize_observations({
        'IV': {'fortalezas': 'd'},
        '1': PeriodObservation(strengths='a'),
        'extra': {'fortalezas': 'x'},
    })
    assert tuple(result) == PERIODS
    assert result['I'].strengths == 'a'
    assert result['IV'].strengths == 'd'
    assert result['II'] == PeriodObservation()
    assert result['III'].difficulties is None


def test_normalize_none():
    assert normalize_observations(None) == {p: PeriodObservation() for p in PERIODS}


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
