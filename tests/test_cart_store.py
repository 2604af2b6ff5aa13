# tests/test_cart_store.py

import pytest

from app.schemas.cart import CartSnapshot
from app.services.cart import CartStore, build_cart_response

from factories import discount, make_product


def test_add_same_product_without_color_merges_lines():
    store = CartStore()
    product = make_product("prod-1")

    store.add_item(product, 1)
    store.add_item(product, 2)

    assert len(store.items) == 1
    assert store.items[0].quantity == 3


def test_add_same_product_with_different_colors_creates_two_lines():
    store = CartStore()
    product = make_product("prod-1")

    store.add_item(product, 1, "red")
    store.add_item(product, 1, "blue")
    store.add_item(product, 4, "red")

    assert [(item.selected_color, item.quantity) for item in store.items] == [("red", 5), ("blue", 1)]


@pytest.mark.parametrize("quantity", [0, -1, 1.5, True])
def test_add_item_rejects_non_positive_or_non_integer_quantity(quantity):
    store = CartStore()

    with pytest.raises(ValueError):
        store.add_item(make_product(), quantity)
    assert store.items == []


def test_update_quantity_to_zero_removes_line():
    store = CartStore()
    store.add_item(make_product("prod-1"), 2)
    store.add_item(make_product("prod-2"), 1)

    store.update_quantity("prod-1", 0)

    assert [item.product.id for item in store.items] == ["prod-2"]


def test_update_quantity_changes_only_first_line_of_product():
    # Позиция ищется только по id товара, цвет не учитывается
    store = CartStore()
    product = make_product("prod-1")
    store.add_item(product, 1, "red")
    store.add_item(product, 1, "blue")

    store.update_quantity("prod-1", 7)

    assert [(item.selected_color, item.quantity) for item in store.items] == [("red", 7), ("blue", 1)]


def test_update_quantity_for_unknown_product_is_noop():
    store = CartStore()
    store.add_item(make_product("prod-1"), 1)

    store.update_quantity("missing", 5)

    assert store.items[0].quantity == 1


def test_remove_item_drops_all_color_variants():
    store = CartStore()
    product = make_product("prod-1")
    store.add_item(product, 1, "red")
    store.add_item(product, 1, "blue")
    store.add_item(make_product("prod-2"), 1)

    store.remove_item("prod-1")

    assert [item.product.id for item in store.items] == ["prod-2"]


def test_toggle_cart_flips_visibility():
    store = CartStore()

    assert store.toggle_cart() is True
    assert store.toggle_cart() is False


def test_total_uses_discount_promotion_price():
    store = CartStore()
    store.add_item(make_product("prod-1", price=100, promotion=discount(70)), 2)

    assert store.total == 140


def test_total_ignores_quantity_promotions():
    store = CartStore()
    promotion = {"id": "promo-2", "type": "2x1", "total_price": None}
    store.add_item(make_product("prod-1", price=100, promotion=promotion), 2)
    store.add_item(make_product("prod-2", price=25.5), 1)

    assert store.total == 225.5
    assert store.items_count == 3


def test_empty_cart_total_is_zero():
    assert CartStore().total == 0


def test_snapshot_round_trip_keeps_lines_and_flag():
    store = CartStore()
    store.add_item(make_product("prod-1", promotion=discount(80)), 2, "red")
    store.toggle_cart()

    restored = CartStore.from_snapshot(CartSnapshot.model_validate_json(store.to_snapshot().model_dump_json()))

    assert restored.is_open is True
    assert restored.items[0].selected_color == "red"
    assert restored.total == 160


def test_build_cart_response_contains_line_prices_and_labels():
    store = CartStore()
    store.add_item(make_product("prod-1", price=100, promotion=discount(70)), 2)

    response = build_cart_response("session-1", store)

    item = response.items[0]
    assert item.unit_price == 70
    assert item.line_total == 140
    assert item.promotion_label == "30% OFF"
    assert response.total == 140
    assert response.items_count == 2
