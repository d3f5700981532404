"""
Letterhead and title blocks.

Renders:
- Institutional letterhead: left logo | six centered lines | right logo
- Document title line

Both blocks are purely presentational: the letterhead text comes from
configuration, never from the student or the observations.
"""
from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping, Tuple

from observador.core.block_registry import (
    BLOCK_REGISTRY, BlockBuilder, BlockConfig, BuildContext,
)
from observador.core.document_model import (
    Align, HeaderBlock, ImageSlot, TextLine, TitleBlock,
)
from observador.core.layout_config import (
    FONT_SIZE_LETTERHEAD, FONT_SIZE_LETTERHEAD_SMALL, FONT_SIZE_TITLE, LayoutConfig,
)

LEFT_LOGO = 'left_logo'
RIGHT_LOGO = 'right_logo'
TITLE_TEXT = 'OBSERVADOR DEL ESTUDIANTE'


@dataclass(frozen=True)
class Letterhead:
    """The six institutional text lines printed between the logos."""
    country: str
    institution: str
    resolutions: Tuple[str, str]
    locality: str
    codes: str

    @classmethod
    def from_config(cls, cfg: Mapping[str, Any]) -> 'Letterhead':
        """
        Build from the ``letterhead`` section of the configuration.

        Raises:
            ValueError: If the section does not provide exactly two
                resolution lines
        """
        section = cfg.get('letterhead', cfg)
        resolutions = tuple(str(line) for line in section.get('resolutions') or ())
        if len(resolutions) != 2:
            raise ValueError(f"letterhead.resolutions needs 2 lines, got {len(resolutions)}")
        return cls(
            country=str(section.get('country', '')),
            institution=str(section.get('institution', '')),
            resolutions=resolutions,  # type: ignore[arg-type]
            locality=str(section.get('locality', '')),
            codes=str(section.get('codes', '')),
        )


def build_header_block(letterhead: Letterhead, layout: LayoutConfig) -> HeaderBlock:
    """
    Build the letterhead block.

    Args:
        letterhead: Institutional text lines
        layout: Layout constants (logo footprint, header column widths)

    Returns:
        HeaderBlock with both logo slots at the same square footprint
    """
    def small(text: str) -> TextLine:
        return TextLine(text, size=FONT_SIZE_LETTERHEAD_SMALL, align=Align.CENTER)

    lines = (
        TextLine(letterhead.country, size=FONT_SIZE_LETTERHEAD, align=Align.CENTER),
        TextLine(letterhead.institution, size=FONT_SIZE_LETTERHEAD, bold=True, align=Align.CENTER),
        small(letterhead.resolutions[0]),
        small(letterhead.resolutions[1]),
        small(letterhead.locality),
        small(letterhead.codes),
    )
    size = layout.logo_size_px
    return HeaderBlock(
        left=ImageSlot(LEFT_LOGO, size, size, Align.LEFT),
        lines=lines,
        right=ImageSlot(RIGHT_LOGO, size, size, Align.RIGHT),
        grid=tuple(layout.header_columns),
    )


def build_title_block() -> TitleBlock:
    return TitleBlock(TextLine(TITLE_TEXT, size=FONT_SIZE_TITLE, bold=True, align=Align.CENTER))


class HeaderBuilder(BlockBuilder):
    """Letterhead with both logos."""

    def build(self, context: BuildContext) -> HeaderBlock:
        return build_header_block(context.letterhead, context.layout)


class TitleBuilder(BlockBuilder):

    def build(self, context: BuildContext) -> TitleBlock:
        return build_title_block()


# Auto-register these blocks
BLOCK_REGISTRY.register(
    HeaderBuilder(BlockConfig(name='header', title='Institutional letterhead', order=0))
)
BLOCK_REGISTRY.register(
    TitleBuilder(BlockConfig(name='title', title='Document title', order=10))
)
