"""
Input records consumed by the block builders.

Provides:
- EnrollmentStatus enum with tolerant parsing (defaults to NEW)
- Student, a flat read-only record of optional fields
- PeriodObservation and normalize_observations() for the per-period texts

Records arrive from the upstream REST services as camelCase mappings; the
from_mapping() constructors accept those keys as well as the Python
attribute names.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, fields
from enum import Enum
from typing import Any, Dict, Mapping, Optional, Tuple, Union

LOGGER = logging.getLogger(__name__)

PERIODS: Tuple[str, ...] = ('I', 'II', 'III', 'IV')

_ARABIC_TO_ROMAN = {'1': 'I', '2': 'II', '3': 'III', '4': 'IV'}


def as_text(value: Any) -> str:
    """Render an optional scalar as text; None and '' become ''."""
    if value is None:
        return ''
    return str(value)


# ============================================================================
# ENROLLMENT STATUS
# ============================================================================
class EnrollmentStatus(str, Enum):
    NEW = 'Nuevo'
    RETURNING = 'Antiguo'
    REPEATING = 'Repitente'

    @classmethod
    def parse(cls, value: Any) -> 'EnrollmentStatus':
        """
        Match a raw status against the three allowed literals.

        Accepts the Spanish literal, the English member name or a member,
        case-insensitively. Anything else, including None, is NEW.
        """
        if isinstance(value, cls):
            return value
        token = as_text(value).strip().lower()
        for member in cls:
            if token in (member.value.lower(), member.name.lower()):
                return member
        if token:
            LOGGER.debug("Unrecognized enrollment status %r, using %s", value, cls.NEW.value)
        return cls.NEW


# ============================================================================
# STUDENT
# ============================================================================
@dataclass(frozen=True)
class Student:
    """Student data shown in the record. Every field is optional."""
    name: Any = None
    grade: Any = None
    year: Any = None
    age: Any = None
    birth_day: Any = None
    birth_month: Any = None
    birth_year: Any = None
    birthplace: Any = None
    phone: Any = None
    document_type: Any = None
    document_number: Any = None
    blood_type: Any = None
    health_insurer: Any = None
    enrollment_status: Any = None
    address: Any = None
    father_name: Any = None
    father_occupation: Any = None
    father_phone: Any = None
    mother_name: Any = None
    mother_occupation: Any = None
    mother_phone: Any = None
    guardian_name: Any = None
    guardian_phone: Any = None

    # REST payload key -> attribute
    ALIASES = {
        'nombre': 'name',
        'grado': 'grade',
        'anio': 'year',
        'edad': 'age',
        'diaNacimiento': 'birth_day',
        'mesNacimiento': 'birth_month',
        'anioNacimiento': 'birth_year',
        'lugarNacimiento': 'birthplace',
        'celular': 'phone',
        'tipoDocumento': 'document_type',
        'numeroDocumento': 'document_number',
        'rh': 'blood_type',
        'eps': 'health_insurer',
        'estadoMatricula': 'enrollment_status',
        'direccion': 'address',
        'nombrePadre': 'father_name',
        'ocupacionPadre': 'father_occupation',
        'celularPadre': 'father_phone',
        'nombreMadre': 'mother_name',
        'ocupacionMadre': 'mother_occupation',
        'celularMadre': 'mother_phone',
        'acudiente': 'guardian_name',
        'celularAcudiente': 'guardian_phone',
    }

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> 'Student':
        """Build a Student from a REST payload or attribute mapping."""
        names = {f.name for f in fields(cls)}
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            attr = cls.ALIASES.get(key, key)
            if attr in names:
                values[attr] = value
        return cls(**values)

    def text(self, attr: str) -> str:
        return as_text(getattr(self, attr))

    @property
    def status(self) -> EnrollmentStatus:
        return EnrollmentStatus.parse(self.enrollment_status)


# ============================================================================
# OBSERVATIONS
# ============================================================================
@dataclass(frozen=True)
class PeriodObservation:
    """Free-text observations for one period; each text may be multi-line."""
    strengths: Optional[str] = None
    difficulties: Optional[str] = None
    commitments: Optional[str] = None

    ALIASES = {
        'fortalezas': 'strengths',
        'dificultades': 'difficulties',
        'compromisos': 'commitments',
    }

    @classmethod
    def from_mapping(cls, data: Optional[Mapping[str, Any]]) -> 'PeriodObservation':
        values: Dict[str, Any] = {}
        for key, value in (data or {}).items():
            attr = cls.ALIASES.get(key, key)
            if attr in ('strengths', 'difficulties', 'commitments'):
                values[attr] = value
        return cls(**values)


ObservationInput = Union[PeriodObservation, Mapping[str, Any], None]


def normalize_period_key(key: Any) -> Optional[str]:
    token = as_text(key).strip().upper()
    token = _ARABIC_TO_ROMAN.get(token, token)
    return token if token in PERIODS else None


def normalize_observations(
        observations: Optional[Mapping[Any, ObservationInput]],
) -> Dict[str, PeriodObservation]:
    """
    Map an observation set onto the four canonical periods.

    Returns a dict with exactly the keys I, II, III, IV (in that order).
    Missing periods become an empty PeriodObservation; unknown keys are
    ignored.

    Args:
        observations: Mapping period key -> PeriodObservation or mapping

    Returns:
        Ordered dict period -> PeriodObservation
    """
    found: Dict[str, PeriodObservation] = {}
    for key, entry in (observations or {}).items():
        period = normalize_period_key(key)
        if period is None:
            LOGGER.debug("Ignoring observation entry with key %r", key)
            continue
        if isinstance(entry, PeriodObservation):
            found[period] = entry
        else:
            found[period] = PeriodObservation.from_mapping(entry)

    return {period: found.get(period, PeriodObservation()) for period in PERIODS}
