import importlib.util
import sys
from pathlib import Path

import pytest

from json_object_schema.codegen import RecordCodeGenerator
from json_object_schema.config import CompilerConfig
from json_object_schema.loader import DescriptorLoader

PETSTORE = Path(__file__).parent / "test_data" / "petstore.json"


@pytest.fixture
def loader():
    loader = DescriptorLoader.from_file(PETSTORE)
    loader.load()
    return loader


@pytest.fixture
def source(loader):
    return RecordCodeGenerator(loader.compiled, generation_comment="Generated by test").generate()


def test_prefix(source):
    lines = source.splitlines()
    assert lines[0] == "# Generated by test"
    assert "from __future__ import annotations" in lines
    assert "from dataclasses import dataclass" in lines
    assert "from typing import Any, Generic, TypeVar" in lines
    assert 'T = TypeVar("T")' in lines


def test_no_generation_comment(loader):
    config = CompilerConfig(add_generation_comment=False)
    source = RecordCodeGenerator(loader.compiled, config, generation_comment="Generated by test").generate()
    assert "Generated by test" not in source
    assert source.startswith("from __future__ import annotations")


def test_classes(source):
    assert source.count("@dataclass(kw_only=True)") == 4
    assert "class Category:" in source
    assert "class Audit:" in source
    assert "class Pet:" in source
    assert "class Page(Generic[T]):" in source
    assert '    """A pet for sale"""' in source


def test_field_annotations(source):
    for line in [
        "    id: int",
        "    pet_name: str",
        "    category: Category",
        "    tags: list[str]",
        "    weight: float | None",
        "    audit: Audit",
        "    cache: Any",
        "    items: list[T]",
        "    total: int",
    ]:
        assert line in source.splitlines()


def test_field_comments(source):
    lines = source.splitlines()
    assert "    # Unique identifier, read only" in lines
    assert '    # serialized as "petName"' in lines
    assert "    # flattened" in lines
    assert "    # write only" in lines
    assert "    # skipped" in lines


def test_generated_module_imports(loader, source, tmp_path, monkeypatch):
    path = tmp_path / "petstore_models.py"
    path.write_text(source)
    spec = importlib.util.spec_from_file_location("petstore_models", path)
    module = importlib.util.module_from_spec(spec)
    monkeypatch.setitem(sys.modules, "petstore_models", module)
    spec.loader.exec_module(module)

    pet = module.Pet(
        id=7,
        pet_name="Rex",
        category=module.Category(id=1, name="dogs"),
        tags=["good"],
        weight=None,
        password="secret",
        audit=module.Audit(created_by="me", revision=2),
        cache=None,
    )
    pet_type = loader.resolve_public_name("Pet")
    assert pet_type.serialize(pet) == {
        "id": 7,
        "petName": "Rex",
        "category": {"id": 1, "name": "dogs"},
        "tags": ["good"],
        "created_by": "me",
        "revision": 2,
    }
    page = module.Page(items=[pet], total=1)
    assert loader.resolve_public_name("PetPage").serialize(page)["total"] == 1
