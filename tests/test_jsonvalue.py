import pytest

from ssrtools.jsonvalue import JsonSettings, JsonType, JsonValue


def _doc():
    root = JsonValue(JsonType.OBJECT)
    arr = JsonValue(JsonType.ARRAY, parent=root)
    arr.value.extend(
        [
            JsonValue(JsonType.INTEGER, 7, arr),
            JsonValue(JsonType.STRING, "x", arr),
            JsonValue(JsonType.NULL, parent=arr),
        ]
    )
    root.value.append(("list", arr))
    root.value.append(("flag", JsonValue(JsonType.BOOLEAN, True, root)))
    root.value.append(("name", JsonValue(JsonType.STRING, "server", root)))
    return root


def test_type_numbering_matches_format():
    assert [t.value for t in JsonType] == list(range(8))
    assert JsonType(0) is JsonType.NONE
    assert JsonType(7) is JsonType.NULL
    assert JsonValue().type.value == 0
    assert JsonValue(JsonType.NULL).type.value == 7


def test_settings_defaults_and_validation():
    settings = JsonSettings()
    assert settings.max_memory == 0
    assert settings.enable_comments is False
    with pytest.raises(ValueError):
        JsonSettings(max_memory=-1)


def test_object_lookup_by_name():
    doc = _doc()
    assert str(doc["name"]) == "server"
    assert doc["flag"].type is JsonType.BOOLEAN
    assert doc["missing"].type is JsonType.NONE


def test_duplicate_names_lookup_returns_first():
    root = JsonValue(JsonType.OBJECT)
    root.value.append(("k", JsonValue(JsonType.INTEGER, 1)))
    root.value.append(("k", JsonValue(JsonType.INTEGER, 2)))
    assert int(root["k"]) == 1
    assert root.to_python() == {"k": 2}


def test_array_indexing_and_out_of_range():
    arr = _doc()["list"]
    assert int(arr[0]) == 7
    assert str(arr[1]) == "x"
    assert arr[3].type is JsonType.NONE
    assert arr[-1].type is JsonType.NONE


def test_wrong_container_gives_none():
    doc = _doc()
    assert doc[0].type is JsonType.NONE
    assert doc["list"]["name"].type is JsonType.NONE
    assert doc["a"]["b"][5].type is JsonType.NONE


def test_bad_key_type_raises():
    with pytest.raises(TypeError):
        _doc()[1.5]


def test_len_of_containers_and_scalars():
    doc = _doc()
    assert len(doc) == 3
    assert len(doc["list"]) == 3
    assert len(doc["name"]) == len("server")
    assert len(doc["flag"]) == 0


def test_bool_only_true_for_true_boolean():
    values = [
        JsonValue(JsonType.BOOLEAN, True),
        JsonValue(JsonType.BOOLEAN, False),
        JsonValue(JsonType.INTEGER, 5),
        JsonValue(JsonType.STRING, "yes"),
    ]
    assert [bool(v) for v in values] == [True, False, False, False]


def test_int_conversion():
    assert int(JsonValue(JsonType.INTEGER, -42)) == -42
    assert int(JsonValue(JsonType.DOUBLE, -2.9)) == -2
    assert int(JsonValue(JsonType.STRING, "12")) == 0


def test_float_conversion():
    assert float(JsonValue(JsonType.DOUBLE, 1.25)) == 1.25
    assert float(JsonValue(JsonType.INTEGER, 3)) == 3.0
    assert float(JsonValue(JsonType.NULL)) == 0.0


def test_str_conversion_only_for_strings():
    assert str(JsonValue(JsonType.STRING, "abc")) == "abc"
    assert str(JsonValue(JsonType.INTEGER, 9)) == ""


def test_iteration():
    doc = _doc()
    assert list(doc) == ["list", "flag", "name"]
    assert [int(v) for v in doc["list"]][0] == 7
    assert list(JsonValue(JsonType.INTEGER, 1)) == []


def test_to_python_round_trip():
    assert _doc().to_python() == {
        "list": [7, "x", None],
        "flag": True,
        "name": "server",
    }


def test_default_payloads():
    assert JsonValue(JsonType.ARRAY).to_python() == []
    assert JsonValue(JsonType.OBJECT).to_python() == {}
    assert JsonValue().to_python() is None
    assert JsonValue(JsonType.BOOLEAN).to_python() is False


def test_parent_links():
    doc = _doc()
    arr = doc["list"]
    assert arr.parent is doc
    assert arr[0].parent is arr
    assert doc.parent is None