from __future__ import annotations
from typing import Any
import copy
import json

from cardpng.errors import CardDecodeError

CARD_SPEC = "chara_card_v3"
CARD_SPEC_VERSION = "3.0"

# Fields duplicated at the top level of a card for older readers
MIRRORED_FIELDS = ("name", "description", "personality", "scenario", "first_mes", "mes_example")

_EMPTY_CARD_V3: dict[str, Any] = {
    "name": "",
    "description": "",
    "personality": "",
    "scenario": "",
    "first_mes": "",
    "mes_example": "",
    "creatorcomment": "",
    "avatar": "none",
    "talkativeness": "0.5",
    "fav": False,
    "tags": [],
    "spec": CARD_SPEC,
    "spec_version": CARD_SPEC_VERSION,
    "data": {
        "name": "",
        "description": "",
        "personality": "",
        "scenario": "",
        "first_mes": "",
        "mes_example": "",
        "creator_notes": "",
        "system_prompt": "",
        "post_history_instructions": "",
        "tags": [],
        "creator": "",
        "character_version": "",
        "alternate_greetings": [],
        "group_only_greetings": False,
        "character_book": {"name": "", "entries": []},
        "extensions": {},
    },
    "create_date": "",
}


def empty_card_v3() -> dict[str, Any]:
    return copy.deepcopy(_EMPTY_CARD_V3)


def sync_top_level_from_data(card: dict[str, Any]) -> dict[str, Any]:
    synced = dict(card)
    data = synced["data"]
    for field in MIRRORED_FIELDS:
        synced[field] = data.get(field)

    tags = data.get("tags")
    if tags is None:
        tags = card.get("tags")
    synced["tags"] = tags if tags is not None else []
    return synced


def normalize_imported_card(obj: Any) -> dict[str, Any]:
    """
    Coerces anything read from a card file into a complete chara_card_v3 document.

    Missing keys get the defaults from empty_card_v3(), spec/spec_version are forced,
    empty fields under "data" are back-filled from the top level (v1/v2 cards keep
    them there), and finally the top level is re-synced from "data".
    Anything that is not a JSON object yields an empty card.
    """
    if not isinstance(obj, dict):
        return empty_card_v3()

    empty = empty_card_v3()
    data = obj.get("data")
    if not isinstance(data, dict):
        data = {}

    merged = {**empty, **copy.deepcopy(obj), "spec": CARD_SPEC, "spec_version": CARD_SPEC_VERSION}
    merged["data"] = {**empty["data"], **copy.deepcopy(data)}

    for field in MIRRORED_FIELDS:
        merged["data"][field] = merged["data"].get(field) or merged.get(field) or ""

    if merged["data"].get("tags") is None:
        merged["data"]["tags"] = merged.get("tags") or []

    return sync_top_level_from_data(merged)


def card_to_json(card: dict[str, Any]) -> str:
    return json.dumps(sync_top_level_from_data(card), ensure_ascii=False, indent=2)


def parse_card_json(json_text: str) -> Any:
    try:
        return json.loads(json_text)
    except json.JSONDecodeError as e:
        raise CardDecodeError(f"Card is not valid JSON: {e}") from e
