#!/usr/bin/env python3
"""
DOCX Renderer

Renders the observation record as an editable Word document.

Output structure:
- US letter, landscape, 0.5 in margins
- Letterhead as a borderless 3-column table with both logos
- Title paragraph
- Student and observation tables with the configured single border
- Spacer and right-aligned signature paragraphs

Column widths are converted from DXA to twips (the same unit) and scaled
proportionally to the printable width of the section.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Iterable, Optional, Sequence

from docx import Document
from docx.enum.section import WD_ORIENT
from docx.enum.table import WD_ALIGN_VERTICAL, WD_TABLE_ALIGNMENT
from docx.enum.text import WD_ALIGN_PARAGRAPH
from docx.oxml import OxmlElement
from docx.oxml.ns import qn
from docx.shared import Emu, Pt, Twips

from observador.core.document_model import (
    Align, DocumentModel, HeaderBlock, SignatureBlock, SpacerBlock,
    TableBlock, TextLine, TitleBlock, VAlign,
)
from observador.core.errors import ObservadorError, PackagingError
from observador.core.layout_config import BorderSpec, px_to_emu
from observador.pipeline.asset_loader import LogoSet

from .base import RendererBackend, register_backend

LOGGER = logging.getLogger(__name__)

_ALIGN = {
    Align.LEFT: WD_ALIGN_PARAGRAPH.LEFT,
    Align.CENTER: WD_ALIGN_PARAGRAPH.CENTER,
    Align.RIGHT: WD_ALIGN_PARAGRAPH.RIGHT,
}
_VALIGN = {
    VAlign.TOP: WD_ALIGN_VERTICAL.TOP,
    VAlign.CENTER: WD_ALIGN_VERTICAL.CENTER,
}

# Schema order of w:tblPr children that follow the ones we insert
_BORDERS_SUCCESSORS = ('w:shd', 'w:tblLayout', 'w:tblCellMar', 'w:tblLook',
                       'w:tblCaption', 'w:tblDescription')
_CELL_MAR_SUCCESSORS = ('w:tblLook', 'w:tblCaption', 'w:tblDescription')

LINE_SPACE_AFTER = Pt(2.5)


# ============================================================================
# OXML HELPERS
# ============================================================================
def _insert_tbl_pr_child(tbl_pr, element, successors: Iterable[str]) -> None:
    """Replace/insert ``element`` in w:tblPr keeping schema order."""
    for existing in tbl_pr.findall(element.tag):
        tbl_pr.remove(existing)
    for tag in successors:
        anchor = tbl_pr.find(qn(tag))
        if anchor is not None:
            anchor.addprevious(element)
            return
    tbl_pr.append(element)


def set_table_borders(table, border: Optional[BorderSpec]) -> None:
    """Apply ``border`` to all outer and inner edges; None removes borders."""
    borders = OxmlElement('w:tblBorders')
    for edge in ('top', 'left', 'bottom', 'right', 'insideH', 'insideV'):
        el = OxmlElement(f'w:{edge}')
        if border is None or border.style == 'none':
            el.set(qn('w:val'), 'nil')
        else:
            el.set(qn('w:val'), border.style)
            el.set(qn('w:sz'), str(border.size))
            el.set(qn('w:space'), '0')
            el.set(qn('w:color'), border.color)
        borders.append(el)
    _insert_tbl_pr_child(table._tbl.tblPr, borders, _BORDERS_SUCCESSORS)


def set_cell_margins(table, vertical: int, horizontal: int) -> None:
    """Default cell margins in twips for every cell of ``table``."""
    margins = OxmlElement('w:tblCellMar')
    for edge, value in (('top', vertical), ('left', horizontal),
                        ('bottom', vertical), ('right', horizontal)):
        el = OxmlElement(f'w:{edge}')
        el.set(qn('w:w'), str(value))
        el.set(qn('w:type'), 'dxa')
        margins.append(el)
    _insert_tbl_pr_child(table._tbl.tblPr, margins, _CELL_MAR_SUCCESSORS)


# ============================================================================
# RENDERER
# ============================================================================
@register_backend
class DocxRenderer(RendererBackend):
    """
    Word (.docx) backend built on python-docx.

    Example:
        >>> artifact = DocxRenderer().render(model, logos, 'record.docx')
    """

    format_name = 'docx'
    extension = 'docx'
    media_type = 'application/vnd.openxmlformats-officedocument.wordprocessingml.document'

    @property
    def available_width(self) -> int:
        """Printable width in twips (= DXA)."""
        return self.layout.page_width - 2 * self.layout.docx_margin

    def render_bytes(self, model: DocumentModel, logos: LogoSet) -> bytes:
        try:
            doc = self._new_document()
            for block in model:
                self._render_block(doc, block, logos)

            buffer = BytesIO()
            doc.save(buffer)
            return buffer.getvalue()
        except ObservadorError:
            raise
        except Exception as exc:
            LOGGER.error("DOCX packaging failed: %s", exc)
            raise PackagingError(f"DOCX packaging failed: {exc}") from exc

    # ========================================================================
    # DOCUMENT SETUP
    # ========================================================================
    def _new_document(self):
        layout = self.layout
        doc = Document()

        section = doc.sections[0]
        section.orientation = WD_ORIENT.LANDSCAPE
        section.page_width = Twips(layout.page_width)
        section.page_height = Twips(layout.page_height)
        section.left_margin = Twips(layout.docx_margin)
        section.right_margin = Twips(layout.docx_margin)
        section.top_margin = Twips(layout.docx_margin)
        section.bottom_margin = Twips(layout.docx_margin)

        style = doc.styles['Normal']
        style.font.name = layout.font_family
        style.font.size = Pt(9)
        style.paragraph_format.space_after = Pt(0)
        # East-Asian font slot, otherwise Word keeps its theme font there
        style.element.rPr.rFonts.set(qn('w:eastAsia'), layout.font_family)
        return doc

    def _render_block(self, doc, block, logos: LogoSet) -> None:
        if isinstance(block, HeaderBlock):
            self._render_header(doc, block, logos)
        elif isinstance(block, TitleBlock):
            paragraph = doc.add_paragraph()
            paragraph.paragraph_format.space_before = Pt(block.space_before)
            paragraph.paragraph_format.space_after = Pt(block.space_after)
            self._write_line(paragraph, block.line, space_after=None)
        elif isinstance(block, TableBlock):
            self._render_table(doc, block)
        elif isinstance(block, SpacerBlock):
            paragraph = doc.add_paragraph()
            paragraph.paragraph_format.space_before = Pt(block.height / 2)
            paragraph.paragraph_format.space_after = Pt(block.height / 2)
        elif isinstance(block, SignatureBlock):
            paragraph = doc.add_paragraph()
            paragraph.paragraph_format.space_before = Pt(block.space_before)
            self._write_line(paragraph, block.line, space_after=None)
        else:
            raise TypeError(f"Unsupported block type: {type(block).__name__}")
        LOGGER.debug("    docx block: %s", block.kind)

    # ========================================================================
    # BLOCKS
    # ========================================================================
    def _scaled(self, grid: Sequence[int]) -> list:
        return [int(round(w)) for w in self.layout.scale_widths(grid, self.available_width)]

    def _render_header(self, doc, block: HeaderBlock, logos: LogoSet) -> None:
        widths = self._scaled(block.grid)
        table = doc.add_table(rows=1, cols=3)
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        table.autofit = False
        set_table_borders(table, None)
        for index, width in enumerate(widths):
            table.columns[index].width = Twips(width)

        left, center, right = table.rows[0].cells
        for cell, width in zip((left, center, right), widths):
            cell.width = Twips(width)
            cell.vertical_alignment = WD_ALIGN_VERTICAL.CENTER

        for cell, slot in ((left, block.left), (right, block.right)):
            paragraph = cell.paragraphs[0]
            paragraph.alignment = _ALIGN[slot.align]
            paragraph.add_run().add_picture(
                logos.get(slot.key).stream(),
                width=Emu(px_to_emu(slot.width_px)),
                height=Emu(px_to_emu(slot.height_px)),
            )

        self._write_lines(center, block.lines)

    def _render_table(self, doc, block: TableBlock) -> None:
        widths = self._scaled(block.grid)
        table = doc.add_table(rows=len(block.rows), cols=len(block.grid))
        table.alignment = WD_TABLE_ALIGNMENT.CENTER
        table.autofit = False
        set_table_borders(table, self.layout.border if block.bordered else None)
        set_cell_margins(table, self.layout.cell_margin_vertical, self.layout.cell_margin_horizontal)
        for index, width in enumerate(widths):
            table.columns[index].width = Twips(width)

        for row_index, row in enumerate(block.rows):
            for start, cell in block.cell_starts(row):
                target = table.cell(row_index, start)
                if cell.span > 1:
                    target = target.merge(table.cell(row_index, start + cell.span - 1))
                target.width = Twips(sum(widths[start:start + cell.span]))
                target.vertical_alignment = _VALIGN[cell.valign]
                self._write_lines(target, cell.lines)

    # ========================================================================
    # TEXT
    # ========================================================================
    def _write_lines(self, cell, lines: Sequence[TextLine]) -> None:
        for index, line in enumerate(lines):
            paragraph = cell.paragraphs[0] if index == 0 else cell.add_paragraph()
            self._write_line(paragraph, line)

    def _write_line(self, paragraph, line: TextLine, space_after=LINE_SPACE_AFTER) -> None:
        paragraph.alignment = _ALIGN[line.align]
        if space_after is not None:
            paragraph.paragraph_format.space_after = space_after
        run = paragraph.add_run(line.text)
        run.font.name = self.layout.font_family
        run.font.size = Pt(line.size)
        run.bold = line.bold
