"""
Script loading for local jobs.

A script is accepted either as a mapping or as a path to a JSON file. The
mapping may be the script itself or a wrapper holding it under ``script``.
"""

from __future__ import annotations

import json
import os
from pathlib import Path
from typing import Any, Mapping

from jsonschema import Draft202012Validator

from ..errors import BadScriptError, ScriptInitFailedError

SCRIPT_SCHEMA: dict[str, Any] = {
    "type": "object",
    "required": ["id", "contexts"],
    "properties": {
        "id": {"type": "string"},
        "contexts": {"type": ["object", "array"]},
    },
}

_validator = Draft202012Validator(SCRIPT_SCHEMA)


def _recognize(candidate: Any) -> dict[str, Any] | None:
    if isinstance(candidate, Mapping) and _validator.is_valid(dict(candidate)):
        return dict(candidate)
    return None


def load_script(script_or_path: Any) -> dict[str, Any]:
    """
    Resolve a script mapping from a mapping or a JSON file path.

    Raises:
        BadScriptError: The mapping has no recognizable script
        ScriptInitFailedError: The file cannot be read or parsed, or the
            argument is neither a mapping nor a path
    """
    if isinstance(script_or_path, Mapping):
        script = _recognize(script_or_path) or _recognize(script_or_path.get("script"))
        if script is None:
            raise BadScriptError(
                "Could not recognize script format: "
                "script JSON should contain `id` and `contexts` fields"
            )
        return script

    if isinstance(script_or_path, (str, os.PathLike)):
        path = Path(script_or_path).expanduser().resolve()
        try:
            content = json.loads(path.read_text(encoding="utf-8"))
        except (OSError, ValueError) as exc:
            raise ScriptInitFailedError(
                f"Could not load script from {path}: {exc}",
                details={"path": str(path)},
                cause=exc,
            ) from exc
        if not isinstance(content, Mapping):
            raise BadScriptError(f"Script file {path} does not contain a JSON object")
        return load_script(content)

    raise ScriptInitFailedError("Script should be either an object or a path to local file")


__all__ = ["SCRIPT_SCHEMA", "load_script"]
