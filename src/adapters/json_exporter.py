"""Exportación JSON de resultados.

Por qué JSON:
- Permite encadenar la CLI con otras herramientas (`jq`, scripts) sin parsear Rich.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import RetrievalResult


def result_to_json(result: RetrievalResult) -> str:
    payload = result.model_dump(mode="json")
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_result_json(*, result: RetrievalResult, output_path: Path) -> Path:
    """Exporta `RetrievalResult` a JSON UTF-8 con formato estable."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(result_to_json(result), encoding="utf-8")
    return output_path
