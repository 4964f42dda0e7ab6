import json
from pathlib import Path

import pytest

from client_codegen.schema import SchemaModel, parse_schema

SCHEMAS = Path(__file__).parent / "test_data" / "schemas"


def load_schema(name: str) -> dict:
    with open(SCHEMAS / name) as f:
        return json.load(f)


@pytest.fixture
def storage_schema() -> dict:
    return load_schema("storage.json")


@pytest.fixture
def storage_model(storage_schema) -> SchemaModel:
    return parse_schema(storage_schema)
