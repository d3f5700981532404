# test_export_coordinator.py
"""
Test the export orchestration end to end (mocked logo server).

Run with: pytest observador/test_export_coordinator.py -v
"""
import asyncio
import json
from datetime import date
from io import BytesIO
from pathlib import Path

import docx
import pytest

from observador.conftest import LOGO_BASE
from observador.core.config import get_config
from observador.core.errors import AssetLoadError
from observador.core.records import Student
from observador.export_coordinator import (
    ExportCoordinator, build_filename, generate_observador, main, save_artifact,
)
from observador.pipeline.asset_loader import AssetLoader
from observador.rendering import DocxRenderer, RenderedArtifact


class SpyBackend(DocxRenderer):
    """DOCX backend that counts render calls."""

    format_name = 'spy'

    def __init__(self, *args, **kwargs):
        super().__init__(*args, **kwargs)
        self.calls = 0

    def render_bytes(self, model, logos):
        self.calls += 1
        return super().render_bytes(model, logos)


@pytest.fixture
def coordinator(http_cfg, mock_loader):
    return ExportCoordinator(backend='docx', asset_loader=mock_loader, cfg=http_cfg,
                             clock=lambda: date(2031, 2, 1))


# ============================================================================
# FILENAMES
# ============================================================================
def test_filename_collapses_whitespace():
    student = Student(name='Ana  Pérez', year=2024)
    assert build_filename(student, 'docx', date(2030, 1, 1)) == 'Observador_Ana_Pérez_2024.docx'


def test_filename_fallbacks():
    today = date(2027, 6, 30)
    assert build_filename(Student(), 'pdf', today) == 'Observador_Estudiante_2027.pdf'
    assert build_filename(Student(name='   '), 'pdf', today) == 'Observador_Estudiante_2027.pdf'
    assert build_filename(Student(name=' Luis\tMora '), 'pdf', today) == 'Observador_Luis_Mora_2027.pdf'


def test_filename_replaces_path_separators(tmp_path):
    """Separators in the name never turn the filename into a path."""
    today = date(2027, 6, 30)
    student = Student(name='Ana/Pérez', year=2024)
    name = build_filename(student, 'docx', today)
    assert name == 'Observador_Ana_Pérez_2024.docx'
    assert build_filename(Student(name='Ana \\ Pérez'), 'pdf', today) == 'Observador_Ana_Pérez_2027.pdf'

    artifact = RenderedArtifact(data=b'data', filename=name, media_type='application/pdf')
    assert save_artifact(artifact, tmp_path).name == name


# ============================================================================
# GENERATION
# ============================================================================
@pytest.mark.asyncio
async def test_generate_docx(coordinator, student_payload, observations):
    artifact = await coordinator.generate(student_payload, observations)
    assert isinstance(artifact, RenderedArtifact)
    assert artifact.filename == 'Observador_Ana_Pérez_2024.docx'

    document = docx.Document(BytesIO(artifact.data))
    assert len(document.tables) == 3
    assert len(document.tables[2].rows) == 5


@pytest.mark.asyncio
async def test_generate_pdf(http_cfg, mock_loader, student, observations):
    coordinator = ExportCoordinator(backend='pdf', asset_loader=mock_loader, cfg=http_cfg)
    artifact = await coordinator.generate(student, observations)
    assert artifact.data.startswith(b'%PDF')
    assert artifact.filename.endswith('_2024.pdf')


@pytest.mark.asyncio
async def test_missing_year_uses_clock(coordinator):
    artifact = await coordinator.generate({'nombre': 'Luis'}, None)
    assert artifact.filename == 'Observador_Luis_2031.docx'


@pytest.mark.asyncio
async def test_year_read_per_call(http_cfg, mock_loader):
    """Calls in different years never reuse an earlier filename."""
    days = iter([date(2030, 12, 31), date(2031, 1, 1)])
    coordinator = ExportCoordinator(asset_loader=mock_loader, cfg=http_cfg, clock=lambda: next(days))
    first = await coordinator.generate({'nombre': 'Luis'}, {})
    second = await coordinator.generate({'nombre': 'Luis'}, {})
    assert (first.filename, second.filename) == ('Observador_Luis_2030.docx', 'Observador_Luis_2031.docx')


@pytest.mark.asyncio
async def test_explicit_filename(coordinator, student):
    artifact = await coordinator.generate(student, {}, filename='custom.docx')
    assert artifact.filename == 'custom.docx'


@pytest.mark.asyncio
async def test_asset_failure_skips_rendering(http_cfg, logo_server, student):
    """A logo failure aborts the export before any backend call."""
    cfg = dict(http_cfg, assets=dict(http_cfg['assets'], right_logo=f'{LOGO_BASE}/missing.png'))
    spy = SpyBackend()
    coordinator = ExportCoordinator(backend=spy, asset_loader=AssetLoader(transport=logo_server), cfg=cfg)

    with pytest.raises(AssetLoadError):
        await coordinator.generate(student, {})
    assert spy.calls == 0


@pytest.mark.asyncio
async def test_renders_exactly_once(http_cfg, mock_loader, student):
    spy = SpyBackend()
    coordinator = ExportCoordinator(backend=spy, asset_loader=mock_loader, cfg=http_cfg)
    await coordinator.generate(student, {})
    assert spy.calls == 1


def test_model_is_deterministic(coordinator, student, observations):
    assert coordinator.build_document(student, observations) == coordinator.build_document(student, observations)


@pytest.mark.asyncio
async def test_concurrent_exports_are_isolated(coordinator, observations):
    """Concurrent calls on one coordinator never mix student data."""
    names = [f'Estudiante Número {i}' for i in range(6)]
    artifacts = await asyncio.gather(*(
        coordinator.generate({'nombre': name, 'anio': 2024}, observations) for name in names
    ))
    for name, artifact in zip(names, artifacts):
        document = docx.Document(BytesIO(artifact.data))
        first_cell = document.tables[1].cell(0, 0).text
        assert first_cell == f'NOMBRE DEL ESTUDIANTE: {name}'
        assert artifact.filename == f"Observador_{name.replace(' ', '_')}_2024.docx"


def test_emblems_from_config():
    """The bundled placeholders are replaced through assets.* keys."""
    cfg = get_config(overrides=[f'assets.left_logo={LOGO_BASE}/escudo.png',
                                'assets.right_logo=/srv/emblemas/colombia.png'])
    coordinator = ExportCoordinator(cfg=cfg)
    assert coordinator.left_logo_url == f'{LOGO_BASE}/escudo.png'
    assert coordinator.right_logo_url == str(Path('/srv/emblemas/colombia.png'))

    defaults = ExportCoordinator(cfg=get_config())
    assert Path(defaults.left_logo_url).name == 'escudo_institucion.png'


@pytest.mark.asyncio
async def test_bundled_logos_by_default(student):
    artifact = await generate_observador(student, {}, fmt='pdf')
    assert artifact.data.startswith(b'%PDF')


# ============================================================================
# SAVING AND CLI
# ============================================================================
def test_save_artifact(tmp_path):
    artifact = RenderedArtifact(data=b'data', filename='Observador_Ana_2024.pdf', media_type='application/pdf')
    path = save_artifact(artifact, tmp_path / 'out')
    assert path == tmp_path / 'out' / 'Observador_Ana_2024.pdf'
    assert path.read_bytes() == b'data'


def test_cli(tmp_path, student_payload, observations):
    student_file = tmp_path / 'student.json'
    student_file.write_text(json.dumps(student_payload), encoding='utf-8')
    observations_file = tmp_path / 'observations.json'
    observations_file.write_text(json.dumps(observations), encoding='utf-8')

    code = main([str(student_file), str(observations_file), '--format', 'pdf',
                 '-o', str(tmp_path), '--set', 'export.filename_prefix=Registro'])
    assert code == 0
    assert (tmp_path / 'Registro_Ana_Pérez_2024.pdf').exists()


def test_cli_missing_input(tmp_path):
    assert main([str(tmp_path / 'missing.json'), '-o', str(tmp_path)]) == 1


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
