from dataclasses import dataclass
from types import SimpleNamespace
from uuid import UUID

import pytest

from models import BoolConfig, EnumConfig, FloatConfig, IntConfig, SampleEnum, SimpleConfig, UUIDConfig
from src.binding.fields import config_field
from src.core.config_string import ConfigString
from src.core.errors import ConfigSyntaxError, MissingKeyError, ValueFormatError


SAMPLE = 'Host Name=example.com; Port=587; EnableSSL = true; Weird = "String with special=characters!;"'
MISSING_REQUIRED = "配置字符串无效，以下字段必须定义: required."


# ----------------------------------------------------------------------
# 属性
# ----------------------------------------------------------------------
@pytest.mark.parametrize("text, expected", [
    ("", 0),
    ("Host Name=", 0),
    ("Host Name=example.com", 1),
    ("Host Name=example.com;", 1),
    ("Host Name=example.com; Port=587; EnableSSL = true", 3),
    (SAMPLE, 4),
])
def test_count(text, expected):
    parsed = ConfigString(text)
    assert parsed.count == expected
    assert len(parsed) == expected


@pytest.mark.parametrize("text, expected", [
    ("", []),
    ("Host Name=", []),
    ("Host Name=example.com", ["host name"]),
    ("Host Name=example.com; Port=587; EnableSSL = true", ["enablessl", "host name", "port"]),
    (SAMPLE, ["enablessl", "host name", "port", "weird"]),
])
def test_keys(text, expected):
    assert sorted(ConfigString(text).keys) == expected


@pytest.mark.parametrize("text, expected", [
    ("", ""),
    ("Host Name=", ""),
    ("Host Name=example.com", "host name=example.com"),
    ("Host Name=example.com;", "host name=example.com"),
    ("Host Name=example.com; Port=587; EnableSSL = true", "host name=example.com;port=587;enablessl=true"),
    (SAMPLE, 'host name=example.com;port=587;enablessl=true;weird="String with special=characters!;"'),
])
def test_config_string(text, expected):
    parsed = ConfigString(text)
    assert parsed.config_string == expected
    assert str(parsed) == expected


@pytest.mark.parametrize("text", [
    "",
    SAMPLE,
    'a="say ""hi""";b=  padded value  ;C=x',
    "a=1;b=2;a=;c=3",
])
def test_config_string_is_idempotent(text):
    once = ConfigString(text).config_string
    assert ConfigString(once).config_string == once


@pytest.mark.parametrize("text, key, expected", [
    ("", "host name", None),
    ("Host Name=", "host name", None),
    ("Host Name=example.com", "host name", "example.com"),
    ("Host Name=example.com", "HOsT nAmE", "example.com"),
    ("Host Name=example.com; Port=587; EnableSSL = true", "port", "587"),
    (SAMPLE, "weird", "String with special=characters!;"),
])
def test_indexer(text, key, expected):
    assert ConfigString(text)[key] == expected


def test_indexer_never_raises_for_odd_keys():
    assert ConfigString("a=1")["a;b"] is None


def test_malformed_text_raises_at_construction():
    with pytest.raises(ConfigSyntaxError):
        ConfigString('Weird="unterminated')


# ----------------------------------------------------------------------
# 读取
# ----------------------------------------------------------------------
@pytest.mark.parametrize("text, key, expected", [
    ("", "host name", False),
    ("Host Name=", "host name", False),
    ("Host Name=example.com;", "missing key", False),
    ("Host Name=example.com", "HOsT nAmE", True),
    (SAMPLE, "weird", True),
])
def test_contains_key(text, key, expected):
    parsed = ConfigString(text)
    assert parsed.contains_key(key) is expected
    assert (key in parsed) is expected


def test_get_required_missing_lists_valid_keys():
    with pytest.raises(MissingKeyError) as exc:
        ConfigString("Host Name=example.com; Port=587").get("missing")
    assert exc.value.missing_keys == ["missing"]
    assert "'missing'" in str(exc.value)
    assert "host name, port" in str(exc.value)


@pytest.mark.parametrize("text", ["", "Host Name="])
def test_get_required_missing_is_key_error(text):
    with pytest.raises(KeyError):
        ConfigString(text).get("host name", required=True)


@pytest.mark.parametrize("required", [True, False])
def test_get_present(required):
    assert ConfigString("Host Name=example.com").get("HOsT nAmE", required=required) == "example.com"


def test_get_optional_missing_returns_none():
    assert ConfigString("").get("host name", required=False) is None


@pytest.mark.parametrize("text, key, value_type, expected", [
    ("", "host name", str, ""),
    ("", "host name", int, 0),
    ("Host Name=", "host name", str, ""),
    ("Host Name=example.com", "HOsT nAmE", str, "example.com"),
    ("Host Name=example.com; Port=587", "port", int, 587),
])
def test_get_as_optional(text, key, value_type, expected):
    assert ConfigString(text).get_as(key, value_type, required=False) == expected


@pytest.mark.parametrize("value_type", [str, int])
def test_get_as_required_missing(value_type):
    with pytest.raises(MissingKeyError):
        ConfigString("").get_as("host name", value_type, required=True)


@pytest.mark.parametrize("required", [True, False])
def test_get_as_unparsable(required):
    with pytest.raises(ValueFormatError) as exc:
        ConfigString("Host Name=example.com;").get_as("host name", int, required=required)
    assert exc.value.key == "host name"
    assert exc.value.target_type is int


@pytest.mark.parametrize("port", ["1_000", "١٢٣"])
def test_get_as_rejects_non_ascii_digits(port):
    with pytest.raises(ValueFormatError):
        ConfigString(f"port={port}").get_as("port", int)


@pytest.mark.parametrize("text, keys, missing", [
    ("", ["host name", "missing"], ["host name", "missing"]),
    ("host name=", ["host name", "missing"], ["host name", "missing"]),
    ("host name=example.com", ["host name", "missing"], ["missing"]),
])
def test_assert_required_keys_reports_all_missing(text, keys, missing):
    with pytest.raises(MissingKeyError) as exc:
        ConfigString(text).assert_required_keys(keys)
    assert exc.value.missing_keys == missing
    assert str(exc.value) == f"配置字符串无效，以下字段必须定义: {', '.join(missing)}."


def test_assert_required_keys_passes():
    ConfigString("host name=example.com; port=587").assert_required_keys(["HOST NAME", "port"])


@pytest.mark.parametrize("text, other, expected", [
    ("", "", True),
    ("", None, True),
    ("host name=", "", True),
    ("host name=; PORT = 587", "port = 587;", True),
    ("host name=example.com; PORT = 587", "port = 587; host NAmE=example.com", True),
    ("host name=EXAMPLE.com; port=587", "port=587; host name=example.com", False),
    ("host name=EXAMPLE.com; port=587", "host name=example.com", False),
    ("host name=EXAMPLE.com; port=587", "", False),
    ("host name=EXAMPLE.com; port=587", None, False),
    ("a=1", 'a="1', False),
])
def test_equivalent_to(text, other, expected):
    assert ConfigString(text).equivalent_to(other) is expected


def test_equivalent_to_compares_rendered_typed_values():
    parsed = ConfigString()
    parsed["port"] = 587
    parsed["ratio"] = 2.0
    assert parsed.equivalent_to("RATIO=2;port=587")


@pytest.mark.parametrize("text, expected", [
    ("", []),
    ("host name=", []),
    ("host name=; PORT = 587", [("port", "587")]),
    ("host NaMe=example.com; PORT = 587", [("host name", "example.com"), ("port", "587")]),
    ("host NaMe=example.com; PORT = 587;  Weird = \"String with special=characters!;\"",
     [("host name", "example.com"), ("port", "587"), ("weird", "String with special=characters!;")]),
])
def test_iteration(text, expected):
    parsed = ConfigString(text)
    assert list(parsed) == expected
    assert list(parsed.entries()) == list(parsed.entries())


# ----------------------------------------------------------------------
# 模型映射
# ----------------------------------------------------------------------
@pytest.mark.parametrize("text, host_name", [
    ("Required=arbitrary text", ""),
    ("Host Name=;Required=arbitrary text", ""),
    ("Host NAME=example.com;Required=arbitrary text", "example.com"),
    ("Host_Name=example.com;Required=arbitrary text", "example.com"),
    ("HoSt_NaMe=example.com;Required=arbitrary text", "example.com"),
])
def test_map_to_strings(text, host_name):
    model = ConfigString(text).map_to(SimpleConfig)
    assert model == SimpleConfig(host_name=host_name, required="arbitrary text")


@pytest.mark.parametrize("model_type", [SimpleConfig, BoolConfig, IntConfig, FloatConfig, UUIDConfig, EnumConfig])
def test_map_to_missing_required(model_type):
    with pytest.raises(MissingKeyError) as exc:
        ConfigString("").map_to(model_type)
    assert str(exc.value) == MISSING_REQUIRED


@pytest.mark.parametrize("text, expected", [
    ("Required=true", BoolConfig(False, None, True)),
    ("Required=false", BoolConfig(False, None, False)),
    ("Required=true;Optional=", BoolConfig(False, None, True)),
    ("Required=true;Optional=true", BoolConfig(False, True, True)),
    ("Required=true;Optional=true;Value=", BoolConfig(False, True, True)),
    ("Required=true;Optional=true;Value=true", BoolConfig(True, True, True)),
    ("Required=14", IntConfig(0, None, 14)),
    ("Required=14;Optional=", IntConfig(0, None, 14)),
    ("Required=14;Optional=15", IntConfig(0, 15, 14)),
    ("Required=14;Optional=15;Value=", IntConfig(0, 15, 14)),
    ("Required=14;Optional=15;Value=16", IntConfig(16, 15, 14)),
    ("Required=14.5", FloatConfig(0.0, None, 14.5)),
    ("Required=14.5;Optional=15", FloatConfig(0.0, 15.0, 14.5)),
    ("Required=14.5;Optional=15;Value=16", FloatConfig(16.0, 15.0, 14.5)),
])
def test_map_to_primitive_types(text, expected):
    assert ConfigString(text).map_to(type(expected)) == expected


def test_map_to_uuid():
    text = ("Required=95a23cad-5ad6-4ab4-bb0d-8079f062ac2c;"
            "Optional=95a23cad-5ad6-4ab4-bb0d-8079f062ac2d")
    model = ConfigString(text).map_to(UUIDConfig)
    assert model.value == UUID(int=0)
    assert model.optional == UUID("95a23cad-5ad6-4ab4-bb0d-8079f062ac2d")
    assert model.required == UUID("95a23cad-5ad6-4ab4-bb0d-8079f062ac2c")


@pytest.mark.parametrize("text, expected", [
    ("Required=One", EnumConfig(SampleEnum.Zero, None, SampleEnum.One)),
    ("Required=One;Optional=", EnumConfig(SampleEnum.Zero, None, SampleEnum.One)),
    ("Required=One;Optional=One,Two", EnumConfig(SampleEnum.Zero, SampleEnum.Three, SampleEnum.One)),
    ("Required=One;Optional=Three", EnumConfig(SampleEnum.Zero, SampleEnum.Three, SampleEnum.One)),
    ("Required=One;Optional=Two;Value=Three", EnumConfig(SampleEnum.Three, SampleEnum.Two, SampleEnum.One)),
])
def test_map_to_enums(text, expected):
    assert ConfigString(text).map_to(EnumConfig) == expected


def test_map_to_existing_instance():
    instance = IntConfig(value=7)
    result = ConfigString("required=1").map_to(instance)
    assert result is instance
    assert (instance.value, instance.required) == (7, 1)


def test_map_to_lists_every_missing_display_name():
    @dataclass
    class Model:
        a: str = config_field("", display_name="A", required=True)
        b: str = config_field("", display_name="B", required=True)

    with pytest.raises(MissingKeyError) as exc:
        ConfigString("").map_to(Model)
    assert "A, B" in str(exc.value)


# ----------------------------------------------------------------------
# 写入
# ----------------------------------------------------------------------
@pytest.mark.parametrize("value, expected", [
    ("string", "host name=example.com;added=string"),
    ("string with spaces", 'host name=example.com;added="string with spaces"'),
    ("string-with-special=characters!;", 'host name=example.com;added="string-with-special=characters!;"'),
    (42, "host name=example.com;added=42"),
    (42.0, "host name=example.com;added=42"),
])
def test_add(value, expected):
    parsed = ConfigString("Host name=example.com")
    parsed.add("Added", value)
    assert parsed.config_string == expected


@pytest.mark.parametrize("value, expected", [
    ("string", "host name=example.com;added=string"),
    ("string with spaces", 'host name=example.com;added="string with spaces"'),
    (42.0, "host name=example.com;added=42"),
])
def test_add_from_mapping(value, expected):
    parsed = ConfigString("Host name=example.com")
    parsed.add_from({"added": value})
    assert parsed.config_string == expected


def test_add_from_dataclass_and_object():
    @dataclass
    class Values:
        added: float = 42.0
        other: str = "x y"

    parsed = ConfigString("Host name=example.com")
    parsed.add_from(Values())
    parsed.add_from(SimpleNamespace(third=True, _hidden="secret"))
    assert parsed.config_string == 'host name=example.com;added=42;other="x y";third=True'


def test_add_normalizes_stored_values():
    parsed = ConfigString()
    parsed.add("Port", 587)
    assert parsed["port"] == "587"
    assert parsed.get_as("port", int) == 587


def test_add_empty_value_removes_key():
    parsed = ConfigString("a=1;b=2")
    parsed.add("A", "")
    parsed.add_from({"b": None})
    assert parsed.count == 0


def test_add_invalid_key_raises():
    with pytest.raises(ValueError):
        ConfigString().add("a=b", "x")


def test_indexer_set_keeps_typed_value():
    parsed = ConfigString("Host name=example.com")
    parsed["Port"] = 587
    assert parsed["port"] == 587
    assert parsed.config_string == "host name=example.com;port=587"
    parsed["PORT"] = None
    assert "port" not in parsed


def test_add_keeps_position_on_overwrite():
    parsed = ConfigString("a=1;b=2")
    parsed.add("A", "3")
    assert parsed.config_string == "a=3;b=2"


@pytest.mark.parametrize("text, key, expected", [
    ("Host name=example.com", "Host Name", ""),
    ("Host name=example.com", "HoSt NaMe", ""),
    ("Host Name=example.com; Port=587; EnableSSL = true", "port", "host name=example.com;enablessl=true"),
    ("Host Name=example.com", "missing", "host name=example.com"),
])
def test_remove(text, key, expected):
    parsed = ConfigString(text)
    parsed.remove(key)
    assert parsed.config_string == expected


def test_del_removes_key():
    parsed = ConfigString("a=1;b=2")
    del parsed["A"]
    assert parsed.config_string == "b=2"


@pytest.mark.parametrize("text", ["", "Host name=", "Host name=example.com", SAMPLE])
def test_clear(text):
    parsed = ConfigString(text)
    parsed.clear()
    assert parsed.config_string == ""
    assert parsed.count == 0


def test_quoted_special_characters_round_trip():
    parsed = ConfigString('Weird = "a;b=c"')
    assert parsed.get("weird") == "a;b=c"
    assert parsed.config_string == 'weird="a;b=c"'
    assert not ConfigString("a=X").equivalent_to("a=x")
    assert ConfigString("a=1;b=2").equivalent_to("b=2;a=1")
