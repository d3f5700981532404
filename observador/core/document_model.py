"""
Backend-agnostic document model.

A DocumentModel is an ordered tuple of typed blocks. Blocks only carry
text, typography tokens and widths in DXA; logos are referenced by slot
name and resolved by the renderer, so no backend type leaks into the
builders.

Block variants:
- HeaderBlock:  letterhead (two logo slots + centered text lines)
- TitleBlock:   single centered heading line
- TableBlock:   bordered grid table (student data, observations)
- SpacerBlock:  vertical gap
- SignatureBlock: right-aligned signature line
"""
from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterator, List, Tuple, Union


class Align(str, Enum):
    LEFT = 'left'
    CENTER = 'center'
    RIGHT = 'right'


class VAlign(str, Enum):
    TOP = 'top'
    CENTER = 'center'


# ============================================================================
# TEXT
# ============================================================================
@dataclass(frozen=True)
class TextLine:
    """One paragraph of a single run: text plus typography."""
    text: str = ''
    size: float = 9
    bold: bool = False
    align: Align = Align.LEFT


# ============================================================================
# TABLES
# ============================================================================
@dataclass(frozen=True)
class Cell:
    """
    Table cell.

    Attributes:
        lines: Paragraphs, top to bottom (at least one)
        span: Number of grid columns covered
        valign: Vertical alignment inside the cell
    """
    lines: Tuple[TextLine, ...] = (TextLine(),)
    span: int = 1
    valign: VAlign = VAlign.CENTER

    @property
    def text(self) -> str:
        return '\n'.join(line.text for line in self.lines)


@dataclass(frozen=True)
class Row:
    cells: Tuple[Cell, ...]

    @property
    def span(self) -> int:
        return sum(cell.span for cell in self.cells)


@dataclass(frozen=True)
class TableBlock:
    """
    Bordered table laid out on a fixed column grid.

    Attributes:
        kind: Block identifier ("student_table", "observation_table")
        grid: Column widths in DXA
        rows: Rows; each row's spans must add up to len(grid)
        bordered: Draw the configured border around every cell
    """
    kind: str
    grid: Tuple[int, ...]
    rows: Tuple[Row, ...]
    bordered: bool = True

    def __post_init__(self):
        for index, row in enumerate(self.rows):
            if row.span != len(self.grid):
                raise ValueError(
                    f"{self.kind} row {index} spans {row.span} columns, grid has {len(self.grid)}"
                )

    def cell_starts(self, row: Row) -> Iterator[Tuple[int, Cell]]:
        """Yield (first grid column, cell) for every cell of a row."""
        column = 0
        for cell in row.cells:
            yield column, cell
            column += cell.span

    def span_width(self, start: int, span: int) -> int:
        return sum(self.grid[start:start + span])


# ============================================================================
# OTHER BLOCKS
# ============================================================================
@dataclass(frozen=True)
class ImageSlot:
    """Placeholder for a logo resolved at render time."""
    key: str
    width_px: int
    height_px: int
    align: Align = Align.LEFT


@dataclass(frozen=True)
class HeaderBlock:
    left: ImageSlot
    lines: Tuple[TextLine, ...]
    right: ImageSlot
    grid: Tuple[int, ...]
    kind: str = 'header'


@dataclass(frozen=True)
class TitleBlock:
    line: TextLine
    space_before: float = 5
    space_after: float = 10
    kind: str = 'title'


@dataclass(frozen=True)
class SpacerBlock:
    height: float = 10
    kind: str = 'spacer'


@dataclass(frozen=True)
class SignatureBlock:
    line: TextLine
    space_before: float = 10
    kind: str = 'signature'


Block = Union[HeaderBlock, TitleBlock, TableBlock, SpacerBlock, SignatureBlock]


# ============================================================================
# DOCUMENT
# ============================================================================
@dataclass(frozen=True)
class DocumentModel:
    """Ordered, immutable sequence of blocks for one export call."""
    blocks: Tuple[Block, ...] = field(default_factory=tuple)

    def __len__(self) -> int:
        return len(self.blocks)

    def __iter__(self) -> Iterator[Block]:
        return iter(self.blocks)

    @property
    def kinds(self) -> List[str]:
        return [block.kind for block in self.blocks]

    def get(self, kind: str) -> Block:
        for block in self.blocks:
            if block.kind == kind:
                return block
        raise KeyError(kind)

    def texts(self) -> List[str]:
        """All text of the document in block order (used for comparisons)."""
        out: List[str] = []
        for block in self.blocks:
            if isinstance(block, HeaderBlock):
                out.extend(line.text for line in block.lines)
            elif isinstance(block, (TitleBlock, SignatureBlock)):
                out.append(block.line.text)
            elif isinstance(block, TableBlock):
                for row in block.rows:
                    out.extend(cell.text for cell in row.cells)
        return out
