#!/usr/bin/env python3
"""
PDF Renderer

Renders the observation record as a fixed-page PDF with ReportLab platypus.

Page: US letter, landscape, 40 pt margins. Blocks map to flowables:
- HeaderBlock    -> borderless Table [Image | Paragraphs | Image]
- TitleBlock     -> Paragraph
- TableBlock     -> Table with GRID border and SPAN commands
- SpacerBlock    -> Spacer
- SignatureBlock -> Spacer + right-aligned Paragraph

DXA widths are scaled to the frame width and converted to points. Rows of
the observation table break across pages when a cell is taller than the
frame; LayoutError is left for content that cannot be split at all. Empty
text lines become Spacers of one line height so padded cells keep their
height.
"""
from __future__ import annotations

import logging
from io import BytesIO
from typing import Dict, List, Sequence, Tuple
from xml.sax.saxutils import escape

from reportlab.lib.colors import HexColor
from reportlab.lib.enums import TA_CENTER, TA_LEFT, TA_RIGHT
from reportlab.lib.pagesizes import landscape, letter
from reportlab.lib.styles import ParagraphStyle
from reportlab.platypus import (
    Flowable, Image, Paragraph, SimpleDocTemplate, Spacer, Table, TableStyle,
)
from reportlab.platypus.doctemplate import LayoutError

from observador.core.document_model import (
    Align, DocumentModel, HeaderBlock, SignatureBlock, SpacerBlock,
    TableBlock, TextLine, TitleBlock, VAlign,
)
from observador.core.errors import LayoutOverflowError, ObservadorError, PackagingError
from observador.core.layout_config import dxa_to_pt, pt_to_dxa, px_to_pt
from observador.pipeline.asset_loader import LogoSet

from .base import RendererBackend, register_backend

LOGGER = logging.getLogger(__name__)

PAGE_SIZE = landscape(letter)
FRAME_PADDING = 6  # SimpleDocTemplate frame padding on each side
LEADING_FACTOR = 1.2

_ALIGN = {Align.LEFT: TA_LEFT, Align.CENTER: TA_CENTER, Align.RIGHT: TA_RIGHT}
_IMAGE_ALIGN = {Align.LEFT: 'LEFT', Align.CENTER: 'CENTER', Align.RIGHT: 'RIGHT'}
_VALIGN = {VAlign.TOP: 'TOP', VAlign.CENTER: 'MIDDLE'}


@register_backend
class PdfRenderer(RendererBackend):
    """
    PDF backend built on ReportLab.

    Example:
        >>> artifact = PdfRenderer().render(model, logos, 'record.pdf')
    """

    format_name = 'pdf'
    extension = 'pdf'
    media_type = 'application/pdf'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self._styles: Dict[Tuple[float, bool, Align], ParagraphStyle] = {}

    @property
    def available_width(self) -> float:
        """Frame width in points."""
        return PAGE_SIZE[0] - 2 * self.layout.pdf_margin_pt - 2 * FRAME_PADDING

    # ========================================================================
    # PUBLIC API
    # ========================================================================
    def build_story(self, model: DocumentModel, logos: LogoSet) -> List[Flowable]:
        """
        Convert the model into platypus flowables.

        Raises:
            LayoutOverflowError: If a table cannot be scaled into the frame
        """
        story: List[Flowable] = []
        for block in model:
            story.extend(self._render_block(block, logos))
            LOGGER.debug("    pdf block: %s", block.kind)
        return story

    def render_bytes(self, model: DocumentModel, logos: LogoSet) -> bytes:
        story = self.build_story(model, logos)
        margin = self.layout.pdf_margin_pt

        buffer = BytesIO()
        doc = SimpleDocTemplate(
            buffer,
            pagesize=PAGE_SIZE,
            leftMargin=margin,
            rightMargin=margin,
            topMargin=margin,
            bottomMargin=margin,
            title='Observador del Estudiante',
        )
        try:
            doc.build(story)
        except LayoutError as exc:
            raise LayoutOverflowError(f"PDF content does not fit the page: {exc}") from exc
        except ObservadorError:
            raise
        except Exception as exc:
            LOGGER.error("PDF packaging failed: %s", exc)
            raise PackagingError(f"PDF packaging failed: {exc}") from exc

        pdf_bytes = buffer.getvalue()
        buffer.close()
        return pdf_bytes

    # ========================================================================
    # BLOCKS
    # ========================================================================
    def _render_block(self, block, logos: LogoSet) -> List[Flowable]:
        if isinstance(block, HeaderBlock):
            return [self._header_table(block, logos)]
        if isinstance(block, TitleBlock):
            return [Spacer(1, block.space_before), self._paragraph(block.line), Spacer(1, block.space_after)]
        if isinstance(block, TableBlock):
            return [self._grid_table(block)]
        if isinstance(block, SpacerBlock):
            return [Spacer(1, block.height)]
        if isinstance(block, SignatureBlock):
            return [Spacer(1, block.space_before), self._paragraph(block.line)]
        raise TypeError(f"Unsupported block type: {type(block).__name__}")

    def _col_widths(self, grid: Sequence[int]) -> List[float]:
        scaled = self.layout.scale_widths(grid, pt_to_dxa(self.available_width))
        return [dxa_to_pt(w) for w in scaled]

    def _header_table(self, block: HeaderBlock, logos: LogoSet) -> Table:
        def image(slot) -> Image:
            flowable = Image(logos.get(slot.key).stream(),
                             width=px_to_pt(slot.width_px), height=px_to_pt(slot.height_px))
            flowable.hAlign = _IMAGE_ALIGN[slot.align]
            return flowable

        row = [image(block.left), [self._paragraph(line) for line in block.lines], image(block.right)]
        table = Table([row], colWidths=self._col_widths(block.grid))
        table.setStyle(TableStyle([
            ('VALIGN', (0, 0), (-1, -1), 'MIDDLE'),
            ('ALIGN', (0, 0), (0, 0), _IMAGE_ALIGN[block.left.align]),
            ('ALIGN', (1, 0), (1, 0), 'CENTER'),
            ('ALIGN', (2, 0), (2, 0), _IMAGE_ALIGN[block.right.align]),
            ('LEFTPADDING', (0, 0), (-1, -1), 0),
            ('RIGHTPADDING', (0, 0), (-1, -1), 0),
        ]))
        return table

    def _grid_table(self, block: TableBlock) -> Table:
        layout = self.layout
        n_cols = len(block.grid)
        data: List[List] = []
        commands: List[tuple] = [
            ('LEFTPADDING', (0, 0), (-1, -1), dxa_to_pt(layout.cell_margin_horizontal)),
            ('RIGHTPADDING', (0, 0), (-1, -1), dxa_to_pt(layout.cell_margin_horizontal)),
            ('TOPPADDING', (0, 0), (-1, -1), dxa_to_pt(layout.cell_margin_vertical)),
            ('BOTTOMPADDING', (0, 0), (-1, -1), dxa_to_pt(layout.cell_margin_vertical)),
        ]
        if block.bordered and layout.border.style != 'none':
            commands.append(('GRID', (0, 0), (-1, -1), layout.border.width_pt,
                             HexColor(f"#{layout.border.color}")))

        for row_index, row in enumerate(block.rows):
            values: List = [''] * n_cols
            for start, cell in block.cell_starts(row):
                values[start] = self._cell_flowables(cell.lines)
                end = start + cell.span - 1
                if cell.span > 1:
                    commands.append(('SPAN', (start, row_index), (end, row_index)))
                commands.append(('VALIGN', (start, row_index), (end, row_index), _VALIGN[cell.valign]))
            data.append(values)

        # Rows without merged cells may break across pages
        spanned = any(cell.span > 1 for row in block.rows for cell in row.cells)
        table = Table(data, colWidths=self._col_widths(block.grid), repeatRows=0,
                      splitInRow=0 if spanned else 1)
        table.setStyle(TableStyle(commands))
        return table

    # ========================================================================
    # TEXT
    # ========================================================================
    def _style(self, line: TextLine) -> ParagraphStyle:
        key = (line.size, line.bold, line.align)
        style = self._styles.get(key)
        if style is None:
            style = ParagraphStyle(
                f"obs-{line.size:g}-{'b' if line.bold else 'r'}-{line.align.value}",
                fontName=self.layout.pdf_font_bold if line.bold else self.layout.pdf_font,
                fontSize=line.size,
                leading=line.size * LEADING_FACTOR,
                alignment=_ALIGN[line.align],
            )
            self._styles[key] = style
        return style

    def _paragraph(self, line: TextLine) -> Paragraph:
        # Paragraph collapses runs of spaces and strips both ends; keep them
        markup = escape(line.text).replace('  ', ' &nbsp;')
        if markup.startswith(' '):
            markup = '&nbsp;' + markup[1:]
        if markup.endswith(' '):
            markup = markup[:-1] + '&nbsp;'
        return Paragraph(markup, self._style(line))

    def _cell_flowables(self, lines: Sequence[TextLine]) -> List[Flowable]:
        flowables: List[Flowable] = []
        for line in lines:
            if line.text.strip():
                flowables.append(self._paragraph(line))
            else:
                flowables.append(Spacer(1, self._style(line).leading))
        return flowables
