import pytest

from agroshop.data.models import ProductModel, UserModel
from agroshop.domain.errors import (
    ItemNotInCart,
    NotFound,
    OutOfStock,
    ProductNotInCart,
    ValidationError,
)
from agroshop.repos.product_repo import chunked
from agroshop.services.cart_service import CartService


@pytest.fixture
def svc(store):
    return CartService(store)


def _cart(read, uid):
    return read(UserModel, uid).cart


def test_add_accumulates_until_stock_is_reached(svc, add_user, add_product, read):
    add_user("U1")
    add_product("P1", quantity=3)

    for _ in range(3):
        detailed = svc.add("U1", "P1")

    assert _cart(read, "U1") == [{"productId": "P1", "quantity": 3}]
    assert detailed[0]["quantity"] == 3
    assert detailed[0]["product"]["id"] == "P1"

    with pytest.raises(OutOfStock):
        svc.add("U1", "P1")
    assert _cart(read, "U1") == [{"productId": "P1", "quantity": 3}]


def test_add_does_not_touch_stock(svc, add_user, add_product, read):
    add_user("U1")
    add_product("P1", quantity=2)

    svc.add("U1", "P1")

    assert read(ProductModel, "P1").quantity == 2


def test_add_out_of_stock_product(svc, add_user, add_product, read):
    add_user("U1")
    add_product("P1", quantity=0)

    with pytest.raises(OutOfStock):
        svc.add("U1", "P1")
    assert _cart(read, "U1") == []


def test_add_missing_product_or_user(svc, add_user, add_product):
    add_user("U1")
    add_product("P1")

    with pytest.raises(NotFound):
        svc.add("U1", "nope")
    with pytest.raises(NotFound):
        svc.add("ghost", "P1")


@pytest.mark.parametrize("uid, product_id", [("", "P1"), ("U1", "  "), (None, "P1"), ("U1", 5)])
def test_add_rejects_invalid_ids(svc, uid, product_id):
    with pytest.raises(ValidationError):
        svc.add(uid, product_id)


def test_update_quantity_respects_stock(svc, add_user, add_product, read):
    add_user("U1", cart=[{"productId": "P1", "quantity": 4}])
    add_product("P1", quantity=5)

    with pytest.raises(OutOfStock):
        svc.update_quantity("U1", "P1", 2)
    assert _cart(read, "U1") == [{"productId": "P1", "quantity": 4}]

    svc.update_quantity("U1", "P1", 1)
    assert _cart(read, "U1") == [{"productId": "P1", "quantity": 5}]


def test_update_quantity_to_zero_removes_line(svc, add_user, add_product, read):
    add_user("U1", cart=[{"productId": "P1", "quantity": 2}, {"productId": "P2", "quantity": 1}])
    add_product("P1")
    add_product("P2")

    detailed = svc.update_quantity("U1", "P1", -2)

    assert _cart(read, "U1") == [{"productId": "P2", "quantity": 1}]
    assert [line["product"]["id"] for line in detailed] == ["P2"]


def test_update_quantity_large_negative_removes_line(svc, add_user, add_product, read):
    add_user("U1", cart=[{"productId": "P1", "quantity": 2}])
    add_product("P1")

    assert svc.update_quantity("U1", "P1", -100) == []
    assert _cart(read, "U1") == []


def test_update_quantity_zero_is_noop(svc, add_user, add_product, read):
    add_user("U1", cart=[{"productId": "P1", "quantity": 2}])
    add_product("P1")

    svc.update_quantity("U1", "P1", 0)

    user = read(UserModel, "U1")
    assert user.cart == [{"productId": "P1", "quantity": 2}]
    assert user.version == 1


def test_update_quantity_errors(svc, add_user, add_product):
    add_user("U1")
    add_product("P1")

    with pytest.raises(ItemNotInCart):
        svc.update_quantity("U1", "P1", 1)
    with pytest.raises(NotFound, match="User or product not found"):
        svc.update_quantity("U1", "nope", 1)
    with pytest.raises(NotFound, match="User or product not found"):
        svc.update_quantity("ghost", "P1", 1)
    with pytest.raises(ValidationError):
        svc.update_quantity("U1", "P1", 1.5)


def test_remove_line(svc, add_user, add_product, read):
    add_user("U1", cart=[{"productId": "P1", "quantity": 2}, {"productId": "P2", "quantity": 3}])
    add_product("P1")
    add_product("P2")

    detailed = svc.remove("U1", "P1")

    assert _cart(read, "U1") == [{"productId": "P2", "quantity": 3}]
    assert detailed[0]["quantity"] == 3

    with pytest.raises(ProductNotInCart):
        svc.remove("U1", "P1")


def test_remove_for_unknown_user_reports_product_not_in_cart(svc):
    with pytest.raises(ProductNotInCart):
        svc.remove("ghost", "P1")


def test_detailed_cart_drops_deleted_products(svc, store, add_user, add_product):
    add_user("U1", cart=[{"productId": "P1", "quantity": 1}, {"productId": "P2", "quantity": 2}])
    add_product("P1")
    add_product("P2")

    with store.session() as db:
        db.delete(db.get(ProductModel, "P1"))
        db.commit()

    detailed = svc.get_detailed_cart("U1")

    assert len(detailed) == 1
    assert detailed[0]["product"]["id"] == "P2"
    assert detailed[0]["quantity"] == 2


def test_detailed_cart_fetches_in_chunks(store, add_user, add_product):
    ids = [f"P{i}" for i in range(7)]
    for pid in ids:
        add_product(pid, quantity=10)
    add_user("U1", cart=[{"productId": pid, "quantity": 1} for pid in reversed(ids)])

    detailed = CartService(store, chunk_size=3).get_detailed_cart("U1")

    assert [line["product"]["id"] for line in detailed] == list(reversed(ids))


def test_detailed_cart_unknown_user(svc):
    with pytest.raises(NotFound):
        svc.get_detailed_cart("ghost")


def test_chunked():
    assert chunked(list(range(7)), 3) == [[0, 1, 2], [3, 4, 5], [6]]
    assert chunked([], 10) == []
    with pytest.raises(ValueError):
        chunked([1], 0)


def test_merge_cart_caps_at_stock_and_skips_bad_lines(svc, add_user, add_product, read):
    add_user("U1", cart=[{"productId": "P1", "quantity": 2}])
    add_product("P1", quantity=3)
    add_product("P2", quantity=10)

    svc.merge_cart(
        "U1",
        [
            {"productId": "P1", "quantity": 5},
            {"product": {"id": "P2"}, "quantity": 4},
            {"productId": "missing", "quantity": 1},
            {"productId": "P2", "quantity": 0},
            {"productId": "P2", "quantity": "3"},
            "garbage",
        ],
    )

    assert _cart(read, "U1") == [
        {"productId": "P1", "quantity": 3},
        {"productId": "P2", "quantity": 4},
    ]


def test_merge_cart_unknown_user(svc):
    with pytest.raises(NotFound):
        svc.merge_cart("ghost", [])
