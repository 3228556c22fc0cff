import json

import pytest

from cardpng.card import card_to_json, empty_card_v3, normalize_imported_card, parse_card_json
from cardpng.errors import CardDecodeError


def test_empty_card_is_fresh_copy():
    card = empty_card_v3()
    card["data"]["tags"].append("x")

    assert empty_card_v3()["data"]["tags"] == []
    assert card["spec"] == "chara_card_v3"
    assert card["spec_version"] == "3.0"


@pytest.mark.parametrize(["obj"], (
    (None,),
    ("a string",),
    ([1, 2, 3],),
    (42,),
))
def test_non_objects_become_empty_card(obj):
    assert normalize_imported_card(obj) == empty_card_v3()


def test_v2_card_top_level_fields_fill_data():
    # Arrange
    v2 = {
        "name": "Ayla",
        "description": "A ranger.",
        "first_mes": "Hello there.",
        "spec": "chara_card_v2",
        "spec_version": "2.0",
    }

    # Act
    card = normalize_imported_card(v2)

    # Assert
    assert card["spec"] == "chara_card_v3"
    assert card["spec_version"] == "3.0"
    assert card["data"]["name"] == "Ayla"
    assert card["data"]["description"] == "A ranger."
    assert card["data"]["first_mes"] == "Hello there."
    assert card["data"]["character_book"] == {"name": "", "entries": []}
    assert card["avatar"] == "none"


def test_data_wins_over_top_level():
    card = normalize_imported_card({
        "name": "Old",
        "data": {"name": "New", "tags": ["a", "b"], "extensions": {"depth": 4}},
        "tags": ["stale"],
    })

    assert card["name"] == "New"
    assert card["data"]["name"] == "New"
    assert card["tags"] == ["a", "b"]
    assert card["data"]["extensions"] == {"depth": 4}


def test_null_data_tags_take_top_level_tags():
    card = normalize_imported_card({"tags": ["x"], "data": {"tags": None}})

    assert card["data"]["tags"] == ["x"]
    assert card["tags"] == ["x"]


def test_unknown_fields_survive():
    card = normalize_imported_card({"create_date": "2024-01-01", "custom": 1, "data": {"creator": "me"}})

    assert card["custom"] == 1
    assert card["create_date"] == "2024-01-01"
    assert card["data"]["creator"] == "me"


def test_input_not_mutated():
    original = {"name": "A", "data": {"tags": ["t"]}}

    card = normalize_imported_card(original)
    card["data"]["tags"].append("u")

    assert original == {"name": "A", "data": {"tags": ["t"]}}


def test_card_to_json_keeps_unicode_and_syncs():
    card = empty_card_v3()
    card["data"]["name"] = "Zoë"

    text = card_to_json(card)

    assert "Zoë" in text
    assert text.startswith("{\n  ")
    assert json.loads(text)["name"] == "Zoë"


def test_parse_card_json_errors():
    assert parse_card_json('{"a": 1}') == {"a": 1}
    with pytest.raises(CardDecodeError):
        parse_card_json("{not json")
