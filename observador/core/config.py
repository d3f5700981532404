"""Configuration loader for the observation record engine.

The loader consumes a YAML file (defaults to ``observador/data/defaults.yaml``)
and applies dotted overrides on top of it. It is stdlib-only apart from
PyYAML.

Usage
-----
>>> from observador.core.config import get_config
>>> cfg = get_config()  # resolved defaults
>>> cfg = get_config(overrides=["assets.fetch_timeout_sec=5"])

Overrides use the ``section.key=value`` syntax of the CLI ``--set`` flag.
Values are parsed as JSON literals where possible and coerced to the type
of the default they replace.

The engine itself reads no environment variables; the CLI wrapper is the
only place that turns command-line flags into ``config_path``/``overrides``.
"""

from __future__ import annotations

import json
from copy import deepcopy
from pathlib import Path
from typing import Any, Iterable, MutableMapping, Sequence

import yaml

_DATA_DIR = Path(__file__).resolve().parents[1] / "data"
_DEFAULT_CONFIG_PATH = _DATA_DIR / "defaults.yaml"

_last_config: dict[str, Any] | None = None
_last_signature: tuple[Any, ...] | None = None
_last_source: Path | None = None
_last_overrides: dict[str, Any] = {}


def _collect_overrides(values: Iterable[str] | None) -> dict[str, Any]:
    overrides: dict[str, Any] = {}
    for item in values or ():
        if item is None:
            continue
        if "=" not in item:
            raise ValueError(f"Invalid override '{item}'; expected path=value")
        path, raw = item.split("=", 1)
        path = path.strip()
        if not path:
            raise ValueError(f"Invalid override '{item}'; empty path")
        overrides[path] = raw
    return overrides


def _parse_literal(raw: Any) -> Any:
    if raw is None:
        return None
    if isinstance(raw, (bool, int, float)):
        return raw
    text = str(raw).strip()
    if text == "":
        return None
    lowered = text.lower()
    if lowered in {"none", "null", "~"}:
        return None
    if lowered in {"true", "false"}:
        return lowered == "true"
    try:
        return json.loads(text)
    except ValueError:
        return text


def _match_key(container: MutableMapping[str, Any], token: str) -> str:
    token_norm = token.lower()
    for existing in container.keys():
        if str(existing).lower() == token_norm:
            return existing  # type: ignore[return-value]
    return token


def _coerce_to_reference(value: Any, reference: Any) -> Any:
    if reference is None or value is None:
        return value
    try:
        if isinstance(reference, bool):
            if isinstance(value, str):
                return value.strip().lower() in {"1", "true", "yes", "on"}
            return bool(value)
        if isinstance(reference, int):
            if isinstance(value, (int, float)):
                return int(value)
            return int(float(str(value)))
        if isinstance(reference, float):
            return float(value if isinstance(value, (int, float)) else str(value))
        if isinstance(reference, str):
            return str(value)
        if isinstance(reference, list):
            parsed = json.loads(value) if isinstance(value, str) else value
            return list(parsed)
    except (TypeError, ValueError):
        return value
    return value


def _set_path(container: MutableMapping[str, Any], path: str, raw_value: Any,
              record: dict[str, Any]) -> None:
    tokens = [tok for tok in path.split(".") if tok]
    if not tokens:
        raise ValueError("Empty config path in override")
    cur: MutableMapping[str, Any] = container
    for tok in tokens[:-1]:
        key = _match_key(cur, tok)
        nxt = cur.get(key)
        if not isinstance(nxt, MutableMapping):
            nxt = {}
            cur[key] = nxt
        cur = nxt
    key = _match_key(cur, tokens[-1])
    coerced = _coerce_to_reference(_parse_literal(raw_value), cur.get(key))
    cur[key] = coerced
    record[".".join(tokens)] = coerced


def _load_yaml(path: Path) -> dict[str, Any]:
    if not path.exists():
        raise FileNotFoundError(f"Config file not found: {path}")
    with path.open("r", encoding="utf-8") as handle:
        data = yaml.safe_load(handle) or {}
        if not isinstance(data, dict):
            raise TypeError(f"Root of config must be a mapping, got {type(data)!r}")
        return data


def get_config(*, config_path: str | Path | None = None,
               overrides: Sequence[str] | None = None,
               reload: bool = False) -> dict[str, Any]:
    """Return the effective configuration dictionary.

    Args:
        config_path: alternative YAML file. Defaults to the bundled
            ``defaults.yaml``.
        overrides: ``section.key=value`` strings applied in order.
        reload: force the YAML to be re-read even if the cached signature
            matches.

    Returns:
        A deep copy of the resolved configuration; callers may mutate it.
    """

    path = Path(config_path).expanduser() if config_path else _DEFAULT_CONFIG_PATH
    parsed = _collect_overrides(overrides)

    signature = (
        str(path.resolve()),
        tuple((k.lower(), str(v)) for k, v in parsed.items()),
    )

    global _last_config, _last_signature, _last_source, _last_overrides
    if not reload and _last_config is not None and signature == _last_signature:
        return deepcopy(_last_config)

    cfg = _load_yaml(path)
    record: dict[str, Any] = {}
    for pth, raw in parsed.items():
        _set_path(cfg, pth, raw, record)

    _last_config = deepcopy(cfg)
    _last_signature = signature
    _last_source = path.resolve()
    _last_overrides = record
    return deepcopy(cfg)


def get_config_source() -> Path | None:
    """Return the path of the last configuration file that was loaded."""

    return _last_source


def get_config_overrides() -> dict[str, Any]:
    """Return the overrides applied on top of the YAML defaults."""

    return deepcopy(_last_overrides)


def resolve_asset_url(url: str, base: Path | None = None) -> str:
    """Resolve a configured asset location.

    URLs with a scheme (``http://``, ``https://``, ``file://``) are returned
    unchanged; bare relative paths are resolved against ``base`` (the data
    directory by default) so the bundled logos work from any working
    directory.
    """

    if "://" in url:
        return url
    path = Path(url).expanduser()
    if not path.is_absolute():
        path = (base or _DATA_DIR) / path
    return str(path)


__all__ = [
    "get_config",
    "get_config_source",
    "get_config_overrides",
    "resolve_asset_url",
]
