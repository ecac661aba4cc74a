from __future__ import annotations
from typing import Dict, List
from .base import DocumentLayout

_REGISTRY: Dict[str, DocumentLayout] = {}

def register(layout: DocumentLayout) -> None:
    _REGISTRY[layout.layout_key] = layout

def get(key: str) -> DocumentLayout:
    if key not in _REGISTRY:
        raise KeyError(f"Unknown layout key: {key}. Available: {list(_REGISTRY.keys())}")
    return _REGISTRY[key]

def all_layouts() -> List[DocumentLayout]:
    return [l for _, l in sorted(_REGISTRY.items(), key=lambda kv: kv[0])]
