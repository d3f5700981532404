"""
Spacer and signature-line blocks. Neither takes input data.
"""
from observador.core.block_registry import (
    BLOCK_REGISTRY, BlockBuilder, BlockConfig, BuildContext,
)
from observador.core.document_model import (
    Align, SignatureBlock, SpacerBlock, TextLine,
)
from observador.core.layout_config import FONT_SIZE_SIGNATURE

SIGNATURE_TEXT = 'FIRMA DEL DOCENTE: _____________________________________________'


def build_signature_block() -> SignatureBlock:
    return SignatureBlock(TextLine(SIGNATURE_TEXT, size=FONT_SIZE_SIGNATURE, bold=True, align=Align.RIGHT))


def build_spacer_block() -> SpacerBlock:
    return SpacerBlock(height=10)


class SpacerBuilder(BlockBuilder):

    def build(self, context: BuildContext) -> SpacerBlock:
        return build_spacer_block()


class SignatureBuilder(BlockBuilder):

    def build(self, context: BuildContext) -> SignatureBlock:
        return build_signature_block()


BLOCK_REGISTRY.register(
    SpacerBuilder(BlockConfig(name='spacer', title='Spacer', order=30))
)
BLOCK_REGISTRY.register(
    SignatureBuilder(BlockConfig(name='signature', title='Signature line', order=50))
)
