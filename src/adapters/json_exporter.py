"""JSON export of an assembled environment.

Stable formatting (sorted keys, UTF-8) so two exports of the same environment
are byte-identical and diff cleanly.
"""

from __future__ import annotations

import json
from pathlib import Path

from core.domain.models import ActivationEnvironment


def environment_to_json(environment: ActivationEnvironment) -> str:
    payload = environment.model_dump(mode="json")
    return json.dumps(payload, ensure_ascii=False, indent=2, sort_keys=True) + "\n"


def export_environment_json(*, environment: ActivationEnvironment, output_path: Path) -> Path:
    """Write `environment` to `output_path` as JSON."""

    output_path.parent.mkdir(parents=True, exist_ok=True)
    output_path.write_text(environment_to_json(environment), encoding="utf-8")
    return output_path
