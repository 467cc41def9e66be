from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Optional

import yaml

_SUFFIX_FORMATS = {
    ".json": "json",
    ".yaml": "yaml",
    ".yml": "yaml",
}


def detect_format(path: Optional[str] = None, data_hint: Optional[str] = None) -> Optional[str]:
    """
    Returns 'json' or 'yaml'.
    Uses the file suffix first; falls back to simple data sniffing if provided.
    """
    if path:
        fmt = _SUFFIX_FORMATS.get(Path(path).suffix.lower())
        if fmt:
            return fmt
    if data_hint is not None:
        s = data_hint.lstrip()
        if s.startswith('{') or s.startswith('['):
            return 'json'
        # YAML is a superset of JSON, so it is the safe default for anything else
        return 'yaml'
    return None


def load_data(text: str | bytes, *, fmt: Optional[str] = None) -> Any:
    """
    Convert JSON or YAML text to native Python structures for use as a
    render context. Empty input yields None (an empty context).
    """
    if isinstance(text, (bytes, bytearray)):
        text = text.decode('utf-8', errors='replace')
    if not text.strip():
        return None
    f = (fmt or detect_format(data_hint=text)).lower()
    if f == 'json':
        try:
            return json.loads(text)
        except json.JSONDecodeError:
            # Declared JSON that is actually YAML-like (e.g. flow style with bare keys)
            return yaml.safe_load(text)
    if f == 'yaml':
        return yaml.safe_load(text)
    raise ValueError(f"Unsupported data format: {fmt!r}")


def load_data_file(path: str | Path, *, fmt: Optional[str] = None) -> Any:
    """Read a JSON/YAML file; the format comes from `fmt`, then the suffix, then the content."""
    p = Path(path)
    text = p.read_text(encoding="utf-8")
    return load_data(text, fmt=fmt or detect_format(str(p), text))


__all__ = [
    "load_data",
    "load_data_file",
    "detect_format",
]
