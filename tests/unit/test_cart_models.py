import pytest

from storefront.cart.models import (
    CartItem,
    cart_total,
    decrement_quantity,
    increment_quantity,
    merge_carts,
    parse_items,
    remove_item,
)


def test_decrement_is_noop_at_one():
    items = [CartItem(id="a", name="A", price=10, quantity=1)]

    result = decrement_quantity(items, "a")

    assert result[0].quantity == 1


def test_increment_then_decrement(ring):
    items = increment_quantity([ring], "ring-1")
    assert items[0].quantity == 3
    items = decrement_quantity(items, "ring-1")
    assert items[0].quantity == 2
    # la liste d'entrée n'est pas modifiée
    assert ring.quantity == 2


def test_remove_item_removes_only_that_line(ring, necklace):
    items = remove_item([ring, necklace], "ring-1")
    assert [it.id for it in items] == ["neck-1"]


def test_quantity_below_one_rejected():
    with pytest.raises(ValueError):
        CartItem(id="a", price=1, quantity=0)


def test_cart_total(ring, necklace):
    assert cart_total([ring, necklace]) == 4500.5
    assert cart_total([]) == 0


def test_parse_items_skips_invalid_entries():
    raw = [
        {"id": 7, "name": "Bangle", "price": "99.5", "quantity": 1},
        {"name": "sans id"},
        "garbage",
        {"id": "x", "price": -1},
    ]

    items = parse_items(raw)

    assert [it.id for it in items] == ["7"]
    assert items[0].price == 99.5


def test_merge_local_wins_on_collision_and_keeps_remote_only():
    local = [CartItem(id="a", name="local A", price=10, quantity=3)]
    remote = [
        CartItem(id="a", name="remote A", price=10, quantity=1),
        CartItem(id="b", name="remote B", price=5, quantity=1),
    ]

    merged = merge_carts(local, remote)

    assert [(it.id, it.name, it.quantity) for it in merged] == [("a", "local A", 3), ("b", "remote B", 1)]


def test_merge_is_idempotent(ring, necklace):
    once = merge_carts([ring], [necklace])
    twice = merge_carts(once, once)
    assert twice == once
    assert merge_carts([], []) == []
