"""
Student data table.

The cell layout is fixed (a ten-column grid, six rows); only the cell
contents come from the Student record. Every cell is a literal label
followed by the value, or by nothing when the value is absent.
"""
from __future__ import annotations

from typing import Tuple

from observador.core.block_registry import (
    BLOCK_REGISTRY, BlockBuilder, BlockConfig, BuildContext,
)
from observador.core.document_model import Cell, Row, TableBlock, TextLine, VAlign
from observador.core.layout_config import FONT_SIZE_LABEL, FONT_SIZE_SMALL, LayoutConfig
from observador.core.records import EnrollmentStatus, Student

DEFAULT_DOCUMENT_TYPE = 'T.I.'
MARKER = 'X'
SLOT_SEPARATOR = '    '

# (font size, ((label, field, span), ...)); spans add up to the grid width
STUDENT_ROWS = (
    (FONT_SIZE_LABEL, (
        ('NOMBRE DEL ESTUDIANTE', 'name', 6),
        ('GRADO', 'grade', 2),
        ('AÑO', 'year', 2),
    )),
    (FONT_SIZE_SMALL, (
        ('Edad', 'age', 1),
        ('Fecha de Nacimiento', 'birth_date', 3),
        ('Lugar de Nacimiento', 'birthplace', 2),
        ('Cel', 'phone', 4),
    )),
    (FONT_SIZE_SMALL, (
        (None, 'document', 2),
        ('RH', 'blood_type', 1),
        ('EPS', 'health_insurer', 3),
        (None, 'enrollment', 4),
    )),
    (FONT_SIZE_SMALL, (
        ('DIRECCIÓN DE VIVIENDA', 'address', 10),
    )),
    (FONT_SIZE_SMALL, (
        ('NOMBRE DEL PADRE', 'father_name', 3),
        ('NOMBRE DE LA MADRE', 'mother_name', 3),
        ('ACUDIENTE', 'guardian_name', 2),
        ('CEL', 'guardian_phone', 2),
    )),
    (FONT_SIZE_SMALL, (
        ('OCUPACIÓN DEL PADRE', 'father_occupation', 3),
        ('CEL. PADRE', 'father_phone', 2),
        ('OCUPACIÓN DE LA MADRE', 'mother_occupation', 3),
        ('CEL. MADRE', 'mother_phone', 2),
    )),
)


def enrollment_markers(status: EnrollmentStatus) -> str:
    """Three marker slots with exactly one MARKER, e.g. 'Nuevo: X    Antiguo:    Repitente:'."""
    slots = []
    for member in EnrollmentStatus:
        slot = f"{member.value}:"
        if member is status:
            slot += f" {MARKER}"
        slots.append(slot)
    return SLOT_SEPARATOR.join(slots)


def field_text(student: Student, label: str, field: str) -> str:
    if field == 'birth_date':
        return (f"{label}: Día: {student.text('birth_day')}  "
                f"Mes: {student.text('birth_month')}  Año: {student.text('birth_year')}")
    if field == 'document':
        doc_type = student.text('document_type') or DEFAULT_DOCUMENT_TYPE
        return f"{doc_type}: {student.text('document_number')}"
    if field == 'enrollment':
        return enrollment_markers(student.status)
    return f"{label}: {student.text(field)}"


def build_student_table(student: Student, layout: LayoutConfig) -> TableBlock:
    """
    Build the student data table.

    Args:
        student: Student record (all fields optional)
        layout: Layout constants (student grid)

    Returns:
        TableBlock of kind "student_table"
    """
    rows = []
    for size, specs in STUDENT_ROWS:
        cells: Tuple[Cell, ...] = tuple(
            Cell(
                lines=(TextLine(field_text(student, label, field), size=size),),
                span=span,
                valign=VAlign.CENTER,
            )
            for label, field, span in specs
        )
        rows.append(Row(cells))
    return TableBlock(kind='student_table', grid=tuple(layout.student_grid), rows=tuple(rows))


class StudentTableBuilder(BlockBuilder):
    """Bordered table with the student's personal data."""

    def build(self, context: BuildContext) -> TableBlock:
        return build_student_table(context.student, context.layout)


BLOCK_REGISTRY.register(
    StudentTableBuilder(BlockConfig(name='student_table', title='Student data', order=20))
)
