from __future__ import annotations

import sys
from pathlib import Path

import pytest

ROOT = Path(__file__).resolve().parents[1]
SRC = ROOT / "src"

if str(SRC) not in sys.path:
    sys.path.insert(0, str(SRC))

from opschema.schema import Number, Object, String  # noqa: E402


@pytest.fixture
def user_schema():
    return Object(
        {
            "name": String().min(1),
            "email": String().email().required(),
            "age": Number().min(0).optional(),
        }
    ).required()


@pytest.fixture
def emitter_config_file(tmp_path: Path) -> Path:
    path = tmp_path / "opschema.yaml"
    path.write_text(
        """
openapi: 3.1.0
title: Users API
version: 2.0.0
description: Schemas for the users service
include_vendor_extensions: false
check_fragments: true
""".strip()
        + "\n",
        encoding="utf-8",
    )
    return path
