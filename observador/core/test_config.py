# test_config.py
"""
Test the YAML configuration loader.

Run with: pytest observador/core/test_config.py -v
"""
from pathlib import Path

import pytest

from observador.core.config import (
    get_config, get_config_overrides, get_config_source, resolve_asset_url,
)


def test_defaults_load():
    cfg = get_config(reload=True)
    assert cfg['letterhead']['country'] == 'REPÚBLICA DE COLOMBIA'
    assert len(cfg['letterhead']['resolutions']) == 2
    assert cfg['export']['format'] == 'docx'
    assert get_config_source().name == 'defaults.yaml'


def test_returns_independent_copies():
    cfg = get_config()
    cfg['export']['format'] = 'pdf'
    assert get_config()['export']['format'] == 'docx'


def test_overrides_coerce_to_default_type():
    cfg = get_config(overrides=['assets.fetch_timeout_sec=5', 'assets.cache=no', 'export.format=pdf'])
    assert cfg['assets']['fetch_timeout_sec'] == 5.0
    assert isinstance(cfg['assets']['fetch_timeout_sec'], float)
    assert cfg['assets']['cache'] is False
    assert cfg['export']['format'] == 'pdf'
    assert get_config_overrides()['assets.cache'] is False


def test_override_keys_are_case_insensitive():
    cfg = get_config(overrides=['Export.Filename_Prefix=Registro'])
    assert cfg['export']['filename_prefix'] == 'Registro'


def test_invalid_override_rejected():
    with pytest.raises(ValueError):
        get_config(overrides=['export.format'])


def test_alternative_file(tmp_path):
    path = tmp_path / 'school.yaml'
    path.write_text('export:\n  format: pdf\n', encoding='utf-8')
    cfg = get_config(config_path=path)
    assert cfg == {'export': {'format': 'pdf'}}


def test_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        get_config(config_path=tmp_path / 'missing.yaml')


def test_resolve_asset_url():
    assert resolve_asset_url('https://x.example/a.png') == 'https://x.example/a.png'
    bundled = Path(resolve_asset_url('assets/escudo_colombia.png'))
    assert bundled.is_absolute() and bundled.exists()
    assert resolve_asset_url('logo.png', base=Path('/srv')) == str(Path('/srv/logo.png'))


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
