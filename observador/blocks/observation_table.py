"""
Observation table: one header row plus one row per period.

Period rows are always I, II, III, IV in that order, whatever keys the
observation set carries. Free-text cells are split on newlines and padded
with empty lines up to LayoutConfig.min_text_lines so every period row
has the same minimum height.
"""
from __future__ import annotations

from typing import Dict, List, Optional, Tuple

from observador.core.block_registry import (
    BLOCK_REGISTRY, BlockBuilder, BlockConfig, BuildContext,
)
from observador.core.document_model import (
    Align, Cell, Row, TableBlock, TextLine, VAlign,
)
from observador.core.layout_config import (
    FONT_SIZE_BODY, FONT_SIZE_PERIOD, FONT_SIZE_SMALL, LayoutConfig,
)
from observador.core.records import PERIODS, PeriodObservation

# column key -> (header label, header font size)
HEADER_LABELS: Dict[str, Tuple[str, float]] = {
    'period': ('PERÍODO', FONT_SIZE_BODY),
    'strengths': ('FORTALEZAS', FONT_SIZE_BODY),
    'difficulties': ('DIFICULTADES', FONT_SIZE_BODY),
    'commitments': ('COMPROMISOS', FONT_SIZE_BODY),
    'guardian_signature': ('FIRMA ACUDIENTE', FONT_SIZE_SMALL),
}

TEXT_FIELDS = ('strengths', 'difficulties', 'commitments')


def split_lines(text: Optional[str], min_lines: int) -> List[str]:
    """
    Split free text on newlines and pad to ``min_lines``.

    >>> split_lines('a\\nb', 4)
    ['a', 'b', '', '']
    """
    lines = (text or '').replace('\r\n', '\n').replace('\r', '\n').split('\n')
    if lines == ['']:
        lines = []
    if len(lines) < min_lines:
        lines.extend([''] * (min_lines - len(lines)))
    return lines


def _header_row(layout: LayoutConfig) -> Row:
    cells = []
    for key, _ in layout.observation_columns:
        label, size = HEADER_LABELS[key]
        cells.append(Cell(lines=(TextLine(label, size=size, bold=True, align=Align.CENTER),)))
    return Row(tuple(cells))


def _period_row(period: str, observation: PeriodObservation, layout: LayoutConfig) -> Row:
    cells = [Cell(lines=(TextLine(period, size=FONT_SIZE_PERIOD, bold=True, align=Align.CENTER),))]
    for name in TEXT_FIELDS:
        lines = split_lines(getattr(observation, name), layout.min_text_lines)
        cells.append(Cell(
            lines=tuple(TextLine(line, size=FONT_SIZE_BODY) for line in lines),
            valign=VAlign.TOP,
        ))
    # Left blank for a handwritten signature
    cells.append(Cell(lines=(TextLine('', size=FONT_SIZE_BODY, align=Align.CENTER),)))
    return Row(tuple(cells))


def build_observation_table(observations: Dict[str, PeriodObservation],
                            layout: LayoutConfig) -> TableBlock:
    """
    Build the observation table.

    Args:
        observations: Normalized observation set (see normalize_observations)
        layout: Layout constants (column widths, minimum line count)

    Returns:
        TableBlock of kind "observation_table" with 5 rows
    """
    rows = [_header_row(layout)]
    for period in PERIODS:
        rows.append(_period_row(period, observations.get(period) or PeriodObservation(), layout))
    return TableBlock(kind='observation_table', grid=layout.observation_widths, rows=tuple(rows))


class ObservationTableBuilder(BlockBuilder):
    """Four-period observation table."""

    def build(self, context: BuildContext) -> TableBlock:
        return build_observation_table(context.observations, context.layout)


BLOCK_REGISTRY.register(
    ObservationTableBuilder(BlockConfig(name='observation_table', title='Observations by period', order=40))
)
