"""
Conversion between models and their JSON-compatible state.

Incoming state is validated with pydantic TypeAdapters against the
TypedDicts in interfaces before any model is built.
"""

from datetime import date
from typing import Any

from pydantic import TypeAdapter, ValidationError as PydanticValidationError

from .exceptions import ValidationError
from .interfaces import HistoryPointState, ItemState, ListState
from .models import DEFAULT_SCORE, AttributeValue, HistoryPoint, Item, ItemList, ListMode
from .query.ast_nodes import format_query
from .query.parser import parse
from .query.schema import Schema

_LIST_ADAPTER = TypeAdapter(ListState)
_HISTORY_POINT_ADAPTER = TypeAdapter(HistoryPointState)

DATE_TAG = "$date"


def _encode_attribute(value: AttributeValue) -> int | float | str | dict[str, str]:
    if isinstance(value, date):
        return {DATE_TAG: value.isoformat()}
    return value


def _decode_attribute(value: int | float | str | dict[str, str]) -> AttributeValue:
    if isinstance(value, dict):
        if set(value) != {DATE_TAG}:
            raise ValidationError(f"Unsupported attribute object: {value}")
        try:
            return date.fromisoformat(value[DATE_TAG])
        except ValueError as e:
            raise ValidationError(f"Invalid date attribute: {value[DATE_TAG]!r}") from e
    return value


def item_to_state(item: Item) -> ItemState:
    return {
        "id": item.id,
        "name": item.name,
        "attributes": {k: _encode_attribute(v) for k, v in item.attributes.items()},
        "score": item.score,
        "rank": item.rank,
        "hidden": item.hidden,
        "wins": item.wins,
        "losses": item.losses,
    }


def item_from_state(state: ItemState) -> Item:
    return Item(
        id=state["id"],
        name=state["name"],
        attributes={k: _decode_attribute(v) for k, v in state.get("attributes", {}).items()},
        score=state.get("score", DEFAULT_SCORE),
        rank=state.get("rank"),
        hidden=state.get("hidden", False),
        wins=state.get("wins", 0),
        losses=state.get("losses", 0),
    )


def list_to_state(item_list: ItemList) -> ListState:
    return {
        "id": item_list.id,
        "owner": item_list.owner,
        "items": [item_to_state(item) for item in item_list.items],
        "query": format_query(item_list.query),
        "mode": item_list.mode.value,
        "version": item_list.version,
    }


def list_from_state(data: Any) -> ItemList:
    """
    Validate raw JSON data and build an ItemList.

    The stored query text is re-parsed against the list's own items.

    Raises:
        ValidationError: data does not match the list state shape
        QueryError: the stored query no longer parses against the items
    """
    try:
        state = _LIST_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid list state: {e}") from e

    try:
        mode = ListMode(state.get("mode", ListMode.SORT.value))
    except ValueError as e:
        raise ValidationError(f"Unknown list mode: {state.get('mode')!r}") from e

    items = tuple(item_from_state(item) for item in state["items"])
    query_text = state.get("query", "")
    query = parse(query_text, Schema.from_items(items)) if query_text else None
    return ItemList(
        id=state["id"],
        owner=state["owner"],
        items=items,
        query=query,
        mode=mode,
        version=state.get("version", 0),
    )


def history_point_to_state(point: HistoryPoint) -> HistoryPointState:
    return {"item_id": point.item_id, "timestamp": point.timestamp, "score": point.score}


def history_point_from_state(data: Any) -> HistoryPoint:
    try:
        state = _HISTORY_POINT_ADAPTER.validate_python(data)
    except PydanticValidationError as e:
        raise ValidationError(f"Invalid history point: {e}") from e
    return HistoryPoint(item_id=state["item_id"], score=state["score"], timestamp=state["timestamp"])
