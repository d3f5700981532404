#!/usr/bin/env python3
"""
Export Coordinator - Main Orchestrator

Coordinates the generation of one Student Observation Record:
1. Load both logo assets (abort on AssetLoadError)
2. Build the block fragments in fixed order
3. Assemble the DocumentModel
4. Render it with exactly one backend
5. Name the artifact

Usage:
    coordinator = ExportCoordinator(backend="docx")
    artifact = await coordinator.generate(student, observations)
    path = save_artifact(artifact, Path("out"))
"""
from __future__ import annotations

import argparse
import asyncio
import dataclasses
import json
import logging
import re
import sys
from datetime import date
from pathlib import Path
from typing import Any, Callable, Dict, Mapping, Optional, Sequence, Union

from observador.blocks.header import Letterhead
from observador.core.block_registry import BlockRegistry, BuildContext
from observador.core.config import get_config, resolve_asset_url
from observador.core.document_model import DocumentModel
from observador.core.errors import ObservadorError
from observador.core.layout_config import LAYOUT, LayoutConfig
from observador.core.records import ObservationInput, Student, normalize_observations
from observador.pipeline.asset_loader import AssetLoader
from observador.pipeline.document_assembler import DocumentAssembler
from observador.rendering import RenderedArtifact, RendererBackend, available_backends, get_backend

LOGGER = logging.getLogger(__name__)

DEFAULT_PREFIX = 'Observador'
DEFAULT_STUDENT_NAME = 'Estudiante'

StudentInput = Union[Student, Mapping[str, Any], None]
ObservationSetInput = Optional[Mapping[Any, ObservationInput]]


def build_filename(student: Student,
                   extension: str,
                   today: date,
                   prefix: str = DEFAULT_PREFIX,
                   fallback_name: str = DEFAULT_STUDENT_NAME) -> str:
    """
    Default download name: ``<prefix>_<name>_<year>.<extension>``.

    Runs of whitespace and path separators in the name collapse to one
    underscore; a missing or blank name uses ``fallback_name``; a missing
    year uses ``today.year``.

    >>> build_filename(Student(name='Ana  Pérez', year=2024), 'docx', date(2030, 1, 1))
    'Observador_Ana_Pérez_2024.docx'
    """
    name = student.text('name').strip()
    safe_name = re.sub(r"[\s/\\]+", "_", name) if name else fallback_name
    year = student.text('year').strip() or str(today.year)
    return f"{prefix}_{safe_name}_{year}.{extension}"


# ============================================================================
# COORDINATOR
# ============================================================================
class ExportCoordinator:
    """
    Orchestrates asset loading, block building and rendering.

    The coordinator keeps no per-call state, so one instance can serve
    concurrent generate() calls; each call owns its own DocumentModel and
    artifact.

    Attributes:
        backend: Renderer used for every call
        asset_loader: Logo loader (optionally caching)
        letterhead: Institutional text lines
        cfg: Configuration dict

    Example:
        >>> coordinator = ExportCoordinator(backend="pdf")
        >>> artifact = await coordinator.generate({"nombre": "Ana"}, {})
    """

    def __init__(self,
                 backend: Union[str, RendererBackend, None] = None,
                 asset_loader: Optional[AssetLoader] = None,
                 cfg: Optional[Dict[str, Any]] = None,
                 registry: Optional[BlockRegistry] = None,
                 layout: LayoutConfig = LAYOUT,
                 clock: Callable[[], date] = date.today):
        """
        Args:
            backend: Backend instance or format name (default from config)
            asset_loader: Loader to use (default built from config)
            cfg: Configuration dictionary (default: get_config())
            registry: Block registry (default: BLOCK_REGISTRY)
            layout: Layout constants
            clock: Returns today's date; used for the filename year
        """
        self.cfg = cfg if cfg is not None else get_config()
        self.layout = layout
        self.clock = clock

        export_cfg = self.cfg.get('export', {})
        assets_cfg = self.cfg.get('assets', {})

        if backend is None:
            backend = export_cfg.get('format', 'docx')
        self.backend = get_backend(backend, layout) if isinstance(backend, str) else backend

        self.left_logo_url = resolve_asset_url(str(assets_cfg.get('left_logo', '')))
        self.right_logo_url = resolve_asset_url(str(assets_cfg.get('right_logo', '')))
        self.asset_loader = asset_loader or AssetLoader(
            timeout=assets_cfg.get('fetch_timeout_sec', 10.0),
            cache=bool(assets_cfg.get('cache', False)),
        )

        self.letterhead = Letterhead.from_config(self.cfg)
        self.assembler = DocumentAssembler(registry)
        self.filename_prefix = export_cfg.get('filename_prefix', DEFAULT_PREFIX)
        self.fallback_name = export_cfg.get('fallback_student_name', DEFAULT_STUDENT_NAME)

        LOGGER.debug("ExportCoordinator initialized: backend=%s left=%s right=%s",
                     self.backend.format_name, self.left_logo_url, self.right_logo_url)

    # ========================================================================
    # PUBLIC API
    # ========================================================================
    async def generate(self,
                       student: StudentInput,
                       observations: ObservationSetInput,
                       filename: Optional[str] = None) -> RenderedArtifact:
        """
        Produce one observation record.

        Args:
            student: Student record or REST mapping
            observations: Period key -> observation record
            filename: Download name (default: build_filename())

        Returns:
            RenderedArtifact with bytes and filename

        Raises:
            AssetLoadError: A logo could not be loaded; nothing is rendered
            LayoutOverflowError, PackagingError: Rendering failed
        """
        fmt = self.backend.format_name
        LOGGER.info("OBSERVATION RECORD EXPORT (%s)", fmt.upper())
        try:
            LOGGER.info("[1/5] Loading logo assets...")
            logos = await self.asset_loader.load_logos(self.left_logo_url, self.right_logo_url)

            LOGGER.info("[2/5] Building blocks...")
            context = self.build_context(student, observations)

            LOGGER.info("[3/5] Assembling document...")
            model = self.assembler.assemble(context)

            LOGGER.info("[4/5] Rendering %s...", fmt.upper())
            artifact = self.backend.render(model, logos)

            LOGGER.info("[5/5] Naming artifact...")
            name = filename or build_filename(
                context.student, self.backend.extension, self.clock(),
                self.filename_prefix, self.fallback_name,
            )
            artifact = dataclasses.replace(artifact, filename=name)
        except ObservadorError as exc:
            LOGGER.error("Observation record export failed: %s", exc, exc_info=True)
            raise

        LOGGER.info("✓ EXPORT COMPLETE: %s (%.1f KB)", artifact.filename, len(artifact) / 1024)
        return artifact

    def build_context(self, student: StudentInput, observations: ObservationSetInput) -> BuildContext:
        if not isinstance(student, Student):
            student = Student.from_mapping(student)
        return BuildContext(
            student=student,
            observations=normalize_observations(observations),
            letterhead=self.letterhead,
            layout=self.layout,
        )

    def build_document(self, student: StudentInput, observations: ObservationSetInput) -> DocumentModel:
        """Assemble the DocumentModel without loading assets or rendering."""
        return self.assembler.assemble(self.build_context(student, observations))


# ============================================================================
# CONVENIENCE FUNCTIONS
# ============================================================================
async def generate_observador(student: StudentInput,
                              observations: ObservationSetInput,
                              filename: Optional[str] = None,
                              fmt: Optional[str] = None,
                              cfg: Optional[Dict[str, Any]] = None) -> RenderedArtifact:
    """
    Generate one observation record with a throwaway coordinator.

    Example:
        >>> artifact = await generate_observador({"nombre": "Ana"}, {}, fmt="pdf")
    """
    coordinator = ExportCoordinator(backend=fmt, cfg=cfg)
    return await coordinator.generate(student, observations, filename)


def save_artifact(artifact: RenderedArtifact, directory: Union[str, Path]) -> Path:
    """
    Write the artifact into ``directory`` under its own filename.

    Returns:
        Path of the written file
    """
    directory = Path(directory)
    directory.mkdir(parents=True, exist_ok=True)
    path = directory / Path(artifact.filename).name
    path.write_bytes(artifact.data)
    LOGGER.info("Saved %s", path)
    return path


# ============================================================================
# CLI ENTRY POINT
# ============================================================================
def _read_json(path: Optional[Path]) -> Any:
    if path is None:
        return {}
    with Path(path).open('r', encoding='utf-8') as handle:
        return json.load(handle)


def main(argv: Optional[Sequence[str]] = None) -> int:
    """Command-line entry point."""
    parser = argparse.ArgumentParser(
        description="Generate a Student Observation Record"
    )
    parser.add_argument(
        "student",
        help="JSON file with the student record",
        type=Path,
    )
    parser.add_argument(
        "observations",
        help="JSON file mapping period (I..IV) to observations",
        type=Path,
        nargs="?",
        default=None,
    )
    parser.add_argument(
        "-f", "--format",
        help="Output format (default: from config)",
        choices=available_backends(),
        default=None,
    )
    parser.add_argument(
        "-o", "--output-dir",
        help="Directory for the generated file",
        type=Path,
        default=Path("."),
    )
    parser.add_argument("--filename", help="Override the generated filename")
    parser.add_argument("--config", help="Alternative YAML configuration")
    parser.add_argument(
        "--set",
        dest="set_values",
        action="append",
        default=[],
        help="Override a config value (section.key=value, repeatable)",
    )
    parser.add_argument(
        "-v", "--verbose",
        help="Enable verbose logging",
        action="store_true",
    )

    args = parser.parse_args(argv)

    try:
        cfg = get_config(config_path=args.config, overrides=args.set_values)
    except (OSError, TypeError, ValueError) as e:
        print(f"\n✗ Invalid configuration: {e}")
        return 1

    level = logging.DEBUG if args.verbose else cfg.get('logging', {}).get('level', 'INFO')
    logging.basicConfig(level=level, format="%(asctime)s %(levelname)s %(name)s: %(message)s")

    try:
        student = _read_json(args.student)
        observations = _read_json(args.observations)
        coordinator = ExportCoordinator(backend=args.format, cfg=cfg)
        artifact = asyncio.run(coordinator.generate(student, observations, args.filename))
        path = save_artifact(artifact, args.output_dir)
    except (ObservadorError, OSError, ValueError) as e:
        print(f"\n✗ Error: {e}")
        return 1

    print(f"\n✓ Observation record generated: {path}")
    return 0


if __name__ == "__main__":
    sys.exit(main())
