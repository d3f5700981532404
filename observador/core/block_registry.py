"""
Block registry for assembling the observation record.

Provides:
- BlockConfig for builder settings (name, order, enabled)
- Abstract BlockBuilder base class
- BuildContext passed to every builder
- Global BLOCK_REGISTRY populated on import of observador.blocks
"""
from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import TYPE_CHECKING, Dict, List

from .document_model import Block
from .layout_config import LAYOUT, LayoutConfig
from .records import PeriodObservation, Student

if TYPE_CHECKING:
    from observador.blocks.header import Letterhead

LOGGER = logging.getLogger(__name__)


# ============================================================================
# BLOCK CONFIGURATION
# ============================================================================
@dataclass
class BlockConfig:
    """
    Configuration for a document block.

    Attributes:
        name: Unique block identifier (e.g., "observation_table")
        title: Human-readable name for logs
        enabled: Whether the block is part of the document
        order: Sort order (lower = earlier in the document)
    """
    name: str
    title: str
    enabled: bool = True
    order: int = 100

    def __post_init__(self):
        """Validate configuration."""
        if not self.name:
            raise ValueError("Block name cannot be empty")
        if self.order < 0:
            raise ValueError("Block order must be non-negative")


# ============================================================================
# BUILD CONTEXT
# ============================================================================
@dataclass(frozen=True)
class BuildContext:
    """
    Inputs shared by all builders of one export call.

    Builders must treat every attribute as read-only.
    """
    student: Student
    observations: Dict[str, PeriodObservation]
    letterhead: 'Letterhead'
    layout: LayoutConfig = LAYOUT


# ============================================================================
# ABSTRACT BUILDER
# ============================================================================
class BlockBuilder(ABC):
    """
    Abstract base class for block builders.

    Each builder turns the BuildContext into exactly one Block. Builders
    are stateless; the same builder instance serves concurrent exports.
    """

    def __init__(self, config: BlockConfig):
        self.config = config
        self.logger = logging.getLogger(f"{__name__}.{config.name}")

    @abstractmethod
    def build(self, context: BuildContext) -> Block:
        """
        Build the block.

        Args:
            context: Inputs of the current export

        Returns:
            A DocumentModel block
        """

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.config.name}', enabled={self.config.enabled}, order={self.config.order})"


# ============================================================================
# BLOCK REGISTRY
# ============================================================================
class BlockRegistry:
    """
    Registry of document block builders.

    Builders auto-register on module import via:
        BLOCK_REGISTRY.register(MyBuilder(BlockConfig(...)))
    """

    def __init__(self):
        self._builders: Dict[str, BlockBuilder] = {}

    def register(self, builder: BlockBuilder) -> None:
        """
        Register a builder.

        Raises:
            ValueError: If the name or the order is already taken
        """
        name = builder.config.name
        if name in self._builders:
            raise ValueError(f"Block '{name}' already registered")
        for other in self._builders.values():
            if other.config.order == builder.config.order:
                raise ValueError(
                    f"Block '{name}' order {builder.config.order} clashes with '{other.config.name}'"
                )

        self._builders[name] = builder
        LOGGER.debug("Registered block: %s", name)

    def get_enabled_builders(self) -> List[BlockBuilder]:
        """Enabled builders sorted by config.order."""
        builders = [b for b in self._builders.values() if b.config.enabled]
        return sorted(builders, key=lambda b: b.config.order)

    def __len__(self) -> int:
        return len(self._builders)

    def __contains__(self, name: str) -> bool:
        return name in self._builders


# ============================================================================
# GLOBAL REGISTRY INSTANCE
# ============================================================================
BLOCK_REGISTRY = BlockRegistry()
