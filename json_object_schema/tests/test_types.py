import pytest

from json_object_schema.errors import ConfigurationError, ExpectedType, FieldError, ItemError
from json_object_schema.types import (
    ANY,
    BOOLEAN,
    INTEGER,
    NUMBER,
    STRING,
    ArrayType,
    MapType,
    OptionalType,
    TypeParam,
    type_params,
)


@pytest.mark.parametrize(
    "schema_type,value,expected",
    [
        (INTEGER, 3, 3),
        (NUMBER, 3, 3.0),
        (NUMBER, 2.5, 2.5),
        (STRING, "abc", "abc"),
        (BOOLEAN, False, False),
        (ANY, {"a": [1]}, {"a": [1]}),
    ],
)
def test_primitive_parse(schema_type, value, expected):
    assert schema_type.parse(value) == expected


@pytest.mark.parametrize(
    "schema_type,value",
    [
        (INTEGER, True),
        (INTEGER, 1.5),
        (INTEGER, "1"),
        (INTEGER, None),
        (NUMBER, False),
        (STRING, 1),
        (BOOLEAN, 0),
        (BOOLEAN, None),
    ],
)
def test_primitive_rejects(schema_type, value):
    with pytest.raises(ExpectedType):
        schema_type.parse(value)


def test_expected_type_message():
    with pytest.raises(ExpectedType) as exc_info:
        INTEGER.parse("1")
    assert str(exc_info.value) == 'Expected input type "integer_int64", found string.'


def test_required_flags():
    assert INTEGER.is_required
    assert ArrayType(STRING).is_required
    assert not OptionalType(INTEGER).is_required
    assert not ANY.is_required


def test_zero_values():
    assert INTEGER.zero_value() == 0
    assert NUMBER.zero_value() == 0.0
    assert STRING.zero_value() == ""
    assert BOOLEAN.zero_value() is False
    assert ArrayType(INTEGER).zero_value() == []
    assert MapType(INTEGER).zero_value() == {}
    assert OptionalType(INTEGER).zero_value() is None


def test_array_item_error():
    with pytest.raises(ItemError) as exc_info:
        ArrayType(INTEGER).parse([1, 2, "x"])
    assert exc_info.value.index == 2
    assert exc_info.value.path_str == "[2]"


def test_array_schema():
    schema = ArrayType(STRING).schema_ref().to_dict()
    assert schema == {"type": "array", "items": {"type": "string"}}


def test_map_type():
    map_type = MapType(INTEGER)
    assert map_type.parse({"a": 1}) == {"a": 1}
    assert map_type.schema_ref().to_dict() == {
        "type": "object",
        "additionalProperties": {"type": "integer", "format": "int64"},
    }
    with pytest.raises(FieldError) as exc_info:
        map_type.parse({"a": "b"})
    assert exc_info.value.path == ["a"]


def test_optional_type():
    optional = OptionalType(INTEGER)
    assert optional.parse(None) is None
    assert optional.parse(1) == 1
    assert optional.serialize(None) is None
    assert optional.schema_ref().to_dict() == INTEGER.schema_ref().to_dict()


def test_type_param_resolution():
    generic = ArrayType(OptionalType(TypeParam("T")))
    assert type_params(generic) == {"T"}
    assert type_params(INTEGER) == set()
    resolved = generic.resolve({"T": STRING})
    assert resolved.parse(["a", None]) == ["a", None]
    assert resolved.python_type() == "list[str | None]"
    with pytest.raises(ConfigurationError):
        generic.resolve({})


def test_unbound_type_param():
    with pytest.raises(TypeError):
        TypeParam("T").parse(1)
