"""
Layout constants shared by block builders and renderer backends.

Defines:
- Unit conversions (DXA, points, pixels, EMU)
- Typography tokens (font family, point sizes)
- Border specification
- Column-width tables for the letterhead, student and observation tables
- LayoutConfig, the process-wide immutable value object (LAYOUT)

All widths are expressed in DXA (1/20 pt, 1440 per inch). Backends convert
them to their native units and scale them proportionally when the printable
width is narrower than the configured total.
"""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, Sequence, Tuple

from .errors import ConfigInvariantError, LayoutOverflowError

LOGGER = logging.getLogger(__name__)

# ============================================================================
# UNITS
# ============================================================================
DXA_PER_INCH = 1440
DXA_PER_POINT = 20
POINTS_PER_PIXEL = 0.75  # 96 dpi
EMU_PER_PIXEL = 9525


def dxa_to_pt(value: float) -> float:
    return value / DXA_PER_POINT


def pt_to_dxa(value: float) -> float:
    return value * DXA_PER_POINT


def px_to_pt(value: float) -> float:
    return value * POINTS_PER_PIXEL


def px_to_emu(value: float) -> int:
    return int(round(value * EMU_PER_PIXEL))


# ============================================================================
# TYPOGRAPHY
# ============================================================================
FONT_FAMILY = 'Arial'
# Helvetica is the metric-compatible standard PDF face for Arial
PDF_FONT = 'Helvetica'
PDF_FONT_BOLD = 'Helvetica-Bold'

FONT_SIZE_TITLE = 16
FONT_SIZE_PERIOD = 18
FONT_SIZE_SIGNATURE = 11
FONT_SIZE_LABEL = 10
FONT_SIZE_BODY = 9
FONT_SIZE_SMALL = 8
FONT_SIZE_LETTERHEAD = 9
FONT_SIZE_LETTERHEAD_SMALL = 7

# ============================================================================
# PAGE (US letter, landscape)
# ============================================================================
PAGE_WIDTH_DXA = 15840
PAGE_HEIGHT_DXA = 12240
DOCX_MARGIN_DXA = 720  # 0.5 in
PDF_MARGIN_PT = 40

# ============================================================================
# COLUMN WIDTHS (DXA)
# ============================================================================
TOTAL_CONTENT_WIDTH = 14460

OBSERVATION_COLUMNS: Tuple[Tuple[str, int], ...] = (
    ('period', 993),
    ('strengths', 3500),
    ('difficulties', 3500),
    ('commitments', 3500),
    ('guardian_signature', 2967),
)

# Ten-column grid; student rows span groups of these columns
STUDENT_GRID: Tuple[int, ...] = (1772, 1772, 1772, 1772, 1772, 1772, 993, 992, 922, 921)

# 15% / 70% / 15% of the total width
HEADER_COLUMNS: Tuple[int, ...] = (2169, 10122, 2169)


@dataclass(frozen=True)
class BorderSpec:
    """
    Cell border used by every bordered table.

    Attributes:
        style: Border style name ("single" or "none")
        size: Line weight in eighths of a point (OOXML w:sz)
        color: RGB hex string without '#'
    """
    style: str = 'single'
    size: int = 4
    color: str = '000000'

    @property
    def width_pt(self) -> float:
        return self.size / 8.0


@dataclass(frozen=True)
class LayoutConfig:
    """
    Immutable layout constants, validated on construction.

    The column-width tables must each sum exactly to ``total_width``; a
    mismatch breaks table geometry in every backend, so it is rejected here
    with ConfigInvariantError instead of surfacing at render time.
    """
    font_family: str = FONT_FAMILY
    pdf_font: str = PDF_FONT
    pdf_font_bold: str = PDF_FONT_BOLD
    border: BorderSpec = field(default_factory=BorderSpec)

    page_width: int = PAGE_WIDTH_DXA
    page_height: int = PAGE_HEIGHT_DXA
    orientation: str = 'landscape'
    docx_margin: int = DOCX_MARGIN_DXA
    pdf_margin_pt: float = PDF_MARGIN_PT

    total_width: int = TOTAL_CONTENT_WIDTH
    observation_columns: Tuple[Tuple[str, int], ...] = OBSERVATION_COLUMNS
    student_grid: Tuple[int, ...] = STUDENT_GRID
    header_columns: Tuple[int, ...] = HEADER_COLUMNS

    min_text_lines: int = 4
    logo_size_px: int = 80
    min_scale: float = 0.75

    cell_margin_vertical: int = 50
    cell_margin_horizontal: int = 80

    def __post_init__(self):
        self.validate()

    def validate(self) -> None:
        """
        Check structural invariants.

        Raises:
            ConfigInvariantError: If any width table does not sum to
                total_width, or a scalar constant is out of range
        """
        for name, widths in self.width_tables().items():
            total = sum(widths)
            if total != self.total_width:
                raise ConfigInvariantError(
                    f"{name} widths sum to {total}, expected {self.total_width}"
                )
            if any(w <= 0 for w in widths):
                raise ConfigInvariantError(f"{name} widths must be positive")
        if self.orientation != 'landscape':
            raise ConfigInvariantError("Observation records are landscape only")
        if self.min_text_lines < 1:
            raise ConfigInvariantError("min_text_lines must be at least 1")
        if not 0 < self.min_scale <= 1:
            raise ConfigInvariantError("min_scale must be in (0, 1]")
        if self.logo_size_px <= 0:
            raise ConfigInvariantError("logo_size_px must be positive")

    def width_tables(self) -> Dict[str, Tuple[int, ...]]:
        return {
            'observation_table': self.observation_widths,
            'student_table': tuple(self.student_grid),
            'header': tuple(self.header_columns),
        }

    @property
    def observation_widths(self) -> Tuple[int, ...]:
        return tuple(width for _, width in self.observation_columns)

    def span_width(self, grid: Sequence[int], start: int, span: int) -> int:
        """Width of ``span`` grid columns starting at ``start``."""
        return sum(grid[start:start + span])

    def scale_widths(self, widths: Sequence[float], available: float) -> List[float]:
        """
        Fit column widths into the available width.

        Widths that already fit are returned unchanged; otherwise every
        column is scaled by the same factor so proportions are kept.

        Args:
            widths: Column widths (any unit)
            available: Available width in the same unit

        Returns:
            List of widths, same length and unit as the input

        Raises:
            LayoutOverflowError: If the required scale factor is below
                min_scale (text would no longer fit its cells)
        """
        total = float(sum(widths))
        if total <= available:
            return [float(w) for w in widths]

        factor = available / total
        if factor < self.min_scale:
            raise LayoutOverflowError(
                f"Available width {available:.1f} fits only {factor:.0%} of "
                f"the configured {total:.1f} (minimum {self.min_scale:.0%})"
            )
        LOGGER.debug("Scaling %d columns by %.4f to fit %.1f", len(widths), factor, available)
        return [w * factor for w in widths]


# ============================================================================
# PROCESS-WIDE INSTANCE
# ============================================================================
LAYOUT = LayoutConfig()
