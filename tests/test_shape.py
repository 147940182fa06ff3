from __future__ import annotations

from dataclasses import dataclass

import pytest

from grocer import shape


@pytest.mark.parametrize(
    "offset,returned,has_more",
    (
        (0, 10, True),
        (10, 10, True),
        (20, 3, False),
        (30, 0, False),
    ),
)
def test_paginate(offset: int, returned: int, has_more: bool) -> None:
    page = shape.paginate(list(range(23)), offset, 10)

    assert page.returned == returned
    assert page.items == list(range(23))[offset : offset + 10]
    assert page.total == 23
    assert page.has_more is has_more
    assert page.meta() == {
        "offset": offset,
        "limit": 10,
        "returned": returned,
        "total": 23,
        "hasMore": has_more,
    }


def test_compact_drops_none_recursively() -> None:
    data = {"a": 1, "b": None, "c": {"d": None, "e": [{"f": None, "g": 0}]}}
    assert shape.compact(data) == {"a": 1, "c": {"e": [{"g": 0}]}}


def test_as_payload_of_dataclass() -> None:
    @dataclass
    class Item:
        name: str
        note: str | None = None

    assert shape.as_payload(Item("milk")) == {"name": "milk"}


def test_format_timestamp() -> None:
    assert shape.format_timestamp("2024-01-01T10:00:00.000+01:00") == "2024-01-01 10:00"
    assert shape.format_timestamp(None) is None
    assert shape.format_timestamp("") is None


def test_flatten_cart() -> None:
    cart = {
        "type": "ORDER",
        "items": [
            {"type": "ORDER_LINE", "items": [
                {"id": "a1", "name": "Milk", "price": 119, "unit_quantity": "1 l", "image_ids": ["img-1", "img-2"]},
            ]},
            {"type": "ORDER_LINE", "items": [
                {"id": "a2", "name": "Bread", "price": 249, "image_ids": []},
                {"id": "a3", "name": "Eggs", "price": 299},
            ]},
        ],
        "total_count": 3,
        "total_price": 667,
        "checkout_total_price": 667,
    }

    flat = shape.flatten_cart(cart)

    assert flat["items"] == [
        {"id": "a1", "name": "Milk", "price": 119, "unit": "1 l", "image_id": "img-1"},
        {"id": "a2", "name": "Bread", "price": 249},
        {"id": "a3", "name": "Eggs", "price": 299},
    ]
    assert flat["total_count"] == 3
    assert flat["checkout_total_price"] == 667
    assert "total_savings" not in flat


def test_flatten_empty_cart() -> None:
    assert shape.flatten_cart(None) == {"items": []}


def test_product() -> None:
    raw = {"id": "p1", "name": "Apple", "display_price": 99, "unit_quantity": "6 st", "image_id": "i1", "extra": 1}
    assert shape.product(raw) == {"id": "p1", "name": "Apple", "price": 99, "unit": "6 st", "image_id": "i1"}


CATEGORY = {
    "id": "c1",
    "name": "Fruit",
    "type": "CATEGORY",
    "level": 1,
    "image_id": "img-c1",
    "items": [{"id": f"c1-{n}", "name": f"Sub {n}", "type": "CATEGORY", "extra": True} for n in range(5)],
}


def test_category_profiles() -> None:
    assert shape.project_category(CATEGORY, "search") == {"id": "c1", "name": "Fruit", "type": "CATEGORY"}
    assert shape.project_category(CATEGORY, "browse") == {
        "id": "c1",
        "name": "Fruit",
        "type": "CATEGORY",
        "items_count": 5,
    }

    detailed = shape.project_category(CATEGORY, "detailed", depth=1, include_images=True)
    assert detailed["level"] == 1
    assert detailed["image_id"] == "img-c1"
    assert detailed["items"] == [{"id": f"c1-{n}", "name": f"Sub {n}", "type": "CATEGORY"} for n in range(3)]


def test_detailed_profile_without_depth_has_no_items() -> None:
    assert "items" not in shape.project_category(CATEGORY, "detailed", depth=0)


def test_category_item() -> None:
    sub = {"id": "s", "name": "Sub", "type": "CATEGORY", "items": [{}, {}]}
    prod = {"id": "p", "name": "Pear", "type": "SINGLE_ARTICLE", "display_price": 50, "image_id": "x"}

    assert shape.category_item(sub) == {"id": "s", "name": "Sub", "type": "CATEGORY", "items_count": 2}
    assert shape.category_item(prod) == {"id": "p", "name": "Pear", "type": "SINGLE_ARTICLE", "price": 50}
    assert shape.category_item(prod, include_images=True)["image_id"] == "x"


def test_available_slots() -> None:
    slots = [
        {
            "slot_id": "s1",
            "window_start": "2024-01-01T10:00:00.000+01:00",
            "window_end": "2024-01-01T11:00:00.000+01:00",
            "cut_off_time": "2023-12-31T22:00:00.000+01:00",
            "is_available": True,
            "selected": True,
        },
        {"slot_id": "s2", "is_available": False},
        {"slot_id": "s3", "is_available": True},
    ]

    assert shape.available_slots(slots) == [
        {
            "slot_id": "s1",
            "date": "2024-01-01",
            "start": "10:00",
            "end": "11:00",
            "cut_off": "2023-12-31 22:00",
            "selected": True,
        },
        {"slot_id": "s3"},
    ]
