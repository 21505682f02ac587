from __future__ import annotations

import importlib
import os
import subprocess
import sys
from pathlib import Path

import pytest

SRC = Path(__file__).resolve().parents[1] / "src"

MODULES = [
    "opschema",
    "opschema.rules",
    "opschema.errors",
    "opschema.schema",
    "opschema.schema.model",
    "opschema.schema.builders",
    "opschema.schema.presets",
    "opschema.core.engine",
    "opschema.core.info",
    "opschema.core.events",
    "opschema.core.batch",
    "opschema.openapi.emitter",
    "opschema.openapi.document",
    "opschema.config.model",
    "opschema.config.load",
    "opschema.render.renderers",
    "opschema.binding",
]


@pytest.mark.parametrize("name", MODULES)
def test_module_imports(name: str) -> None:
    assert importlib.import_module(name) is not None


def test_package_imports_in_fresh_interpreter() -> None:
    env = dict(os.environ)
    env["PYTHONPATH"] = os.pathsep.join(filter(None, [str(SRC), env.get("PYTHONPATH")]))
    result = subprocess.run(
        [sys.executable, "-c", "import " + ", ".join(MODULES)],
        capture_output=True,
        text=True,
        env=env,
        check=False,
    )
    assert result.returncode == 0, result.stderr


def test_event_and_exception_names_do_not_collide() -> None:
    from opschema.core import events
    from opschema.errors import ValidationFailed

    assert not hasattr(events, "ValidationFailed")
    assert issubclass(ValidationFailed, Exception)
    assert events.ValidationRejected(label="x").to_dict()["type"] == "ValidationRejected"
