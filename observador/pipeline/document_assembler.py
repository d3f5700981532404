#!/usr/bin/env python3
"""
Document Assembler

Runs every enabled block builder from the registry, in order, and packs the
resulting blocks into one immutable DocumentModel.
"""
from __future__ import annotations

import logging
from typing import List, Optional

from observador.core.block_registry import BLOCK_REGISTRY, BlockRegistry, BuildContext
from observador.core.document_model import Block, DocumentModel

LOGGER = logging.getLogger(__name__)


class DocumentAssembler:
    """
    Builds a DocumentModel from the registered block builders.

    Unlike a best-effort renderer, a failing builder aborts the whole
    assembly: the record is either complete or not produced.
    """

    def __init__(self, registry: Optional[BlockRegistry] = None):
        """
        Args:
            registry: Builder registry (defaults to BLOCK_REGISTRY)
        """
        if registry is None:
            import observador.blocks  # noqa: F401  (populates BLOCK_REGISTRY)
            registry = BLOCK_REGISTRY
        self.registry = registry

    def assemble(self, context: BuildContext) -> DocumentModel:
        """
        Build all enabled blocks.

        Args:
            context: BuildContext for this export

        Returns:
            DocumentModel with one block per enabled builder

        Raises:
            RuntimeError: If no builder is enabled
        """
        builders = self.registry.get_enabled_builders()
        if not builders:
            raise RuntimeError("No enabled block builders - nothing to render!")

        LOGGER.info("  Building %d blocks:", len(builders))
        blocks: List[Block] = []
        for builder in builders:
            block = builder.build(context)
            blocks.append(block)
            LOGGER.debug("    ✓ %s (%s)", builder.config.name, block.kind)

        model = DocumentModel(blocks=tuple(blocks))
        LOGGER.info("  Blocks: %s", ", ".join(model.kinds))
        return model
