# test_layout_config.py
"""
Test layout constants and width scaling.

Run with: pytest observador/core/test_layout_config.py -v
"""
import pytest

from observador.core.errors import ConfigInvariantError, LayoutOverflowError
from observador.core.layout_config import (
    HEADER_COLUMNS, LAYOUT, OBSERVATION_COLUMNS, STUDENT_GRID, TOTAL_CONTENT_WIDTH,
    BorderSpec, LayoutConfig, dxa_to_pt, pt_to_dxa, px_to_emu, px_to_pt,
)


def test_width_tables_sum_to_total():
    """Every width table adds up to the content width."""
    assert sum(w for _, w in OBSERVATION_COLUMNS) == TOTAL_CONTENT_WIDTH == 14460
    assert sum(STUDENT_GRID) == TOTAL_CONTENT_WIDTH
    assert sum(HEADER_COLUMNS) == TOTAL_CONTENT_WIDTH
    assert LAYOUT.observation_widths == (993, 3500, 3500, 3500, 2967)


def test_unit_conversions():
    assert dxa_to_pt(1440) == 72
    assert pt_to_dxa(9) == 180
    assert px_to_pt(80) == 60
    assert px_to_emu(80) == 762000


def test_border_defaults():
    border = BorderSpec()
    assert (border.style, border.size, border.color) == ('single', 4, '000000')
    assert border.width_pt == 0.5


def test_bad_observation_widths_rejected():
    """A width table that does not sum to total_width is rejected at construction."""
    columns = OBSERVATION_COLUMNS[:-1] + (('guardian_signature', 2000),)
    with pytest.raises(ConfigInvariantError, match='observation_table'):
        LayoutConfig(observation_columns=columns)


def test_bad_student_grid_rejected():
    with pytest.raises(ConfigInvariantError, match='student_table'):
        LayoutConfig(student_grid=STUDENT_GRID[:-1])


def test_scalar_invariants():
    with pytest.raises(ConfigInvariantError):
        LayoutConfig(orientation='portrait')
    with pytest.raises(ConfigInvariantError):
        LayoutConfig(min_text_lines=0)
    with pytest.raises(ConfigInvariantError):
        LayoutConfig(min_scale=1.5)
    with pytest.raises(ConfigInvariantError):
        LayoutConfig(logo_size_px=0)


def test_scale_widths_fits_unchanged():
    widths = [100, 200, 300]
    assert LAYOUT.scale_widths(widths, 600) == [100.0, 200.0, 300.0]


def test_scale_widths_keeps_proportions():
    """The 14460 DXA tables scale into the 14400 DXA DOCX print width."""
    scaled = LAYOUT.scale_widths(LAYOUT.observation_widths, 14400)
    assert sum(scaled) == pytest.approx(14400)
    assert scaled[1] / scaled[0] == pytest.approx(3500 / 993)
    assert scaled[1] == scaled[2] == scaled[3]


def test_scale_widths_overflow():
    """Below min_scale the content no longer fits and scaling is refused."""
    with pytest.raises(LayoutOverflowError):
        LAYOUT.scale_widths(LAYOUT.observation_widths, 14460 * 0.5)


def test_span_width():
    assert LAYOUT.span_width(STUDENT_GRID, 0, 6) == 1772 * 6
    assert LAYOUT.span_width(STUDENT_GRID, 6, 4) == 993 + 992 + 922 + 921


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
