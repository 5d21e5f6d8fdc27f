"""Wire-contract validation for rundown API payloads.

Schemas live beside this module in ``schemas/<Name>.v1.json``.  Requests are
validated before they are sent and selected responses after they arrive, so a
drift in the backend's shape fails loudly at the boundary instead of deep in
the editor state.
"""
from __future__ import annotations

import json
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict

import jsonschema

_SCHEMA_DIR = Path(__file__).resolve().parent / "schemas"


@lru_cache(maxsize=None)
def load_schema(name: str) -> Dict[str, Any]:
    """Load a schema by file name, e.g. ``"RundownDetail.v1.json"``.

    Raises:
        FileNotFoundError: no schema with that name ships with the package.
    """
    schema_path = _SCHEMA_DIR / name
    if not schema_path.exists():
        raise FileNotFoundError(f"Missing contract schema: {schema_path}")
    return json.loads(schema_path.read_text(encoding="utf-8"))


def validate_payload(name: str, data: Any) -> None:
    """Validate *data* against the named contract schema.

    Raises jsonschema.ValidationError if non-conformant.
    """
    jsonschema.validate(data, load_schema(name))


def contract_errors(name: str, data: Any) -> list[str]:
    """Return human-readable contract violations (empty list = valid).

    Does not raise for invalid data.
    """
    validator = jsonschema.Draft202012Validator(load_schema(name))
    return [
        f"{'/'.join(str(p) for p in err.absolute_path) or '<root>'}: {err.message}"
        for err in sorted(validator.iter_errors(data), key=lambda e: [str(p) for p in e.absolute_path])
    ]
