from decimal import Decimal

import pytest

from storefront.domain.errors import ConflictError, NotFoundError, ValidationError
from storefront.repos.cart_repo import CartRepo
from storefront.services.cart_service import CartService

from conftest import FakeLockService


@pytest.fixture
def service(db):
    return CartService(db=db, lock_service=FakeLockService())


def test_lost_version_race_is_retried(service, make_user, make_product, monkeypatch):
    user_id = make_user()
    a = make_product(price="12.00")

    real_update = CartRepo.update_cart_version
    calls = {"n": 0}

    def flaky_update(self, cart_id, old_version, new_data):
        calls["n"] += 1
        if calls["n"] == 1:
            return 0
        return real_update(self, cart_id, old_version, new_data)

    monkeypatch.setattr(CartRepo, "update_cart_version", flaky_update)

    cart = service.add_to_cart(user_id, a)

    assert calls["n"] == 2
    assert [(i["product_id"], i["quantity"]) for i in cart["items"]] == [(a, 1)]
    assert cart["total_price"] == Decimal("12.00")


def test_persistent_version_conflict_surfaces_as_conflict(service, make_user, make_product, monkeypatch):
    user_id = make_user()
    a = make_product()
    monkeypatch.setattr(CartRepo, "update_cart_version", lambda self, *args, **kwargs: 0)

    with pytest.raises(ConflictError):
        service.add_to_cart(user_id, a)

    assert service.get_cart(user_id)["items"] == []


def test_version_increments_on_every_mutation(service, db, make_user, make_product):
    user_id = make_user()
    a = make_product()

    service.add_to_cart(user_id, a)
    service.update_quantity(user_id, a, "increase")
    service.remove_from_cart(user_id, a)

    cart = CartRepo(db).get_cart_by_user(user_id)
    db.refresh(cart)
    assert cart.version == 4


def test_purge_product_drops_lines_and_fixes_totals(service, make_user, make_product):
    jane = make_user("jane@example.com")
    john = make_user("john@example.com")
    a = make_product("A", "10")
    b = make_product("B", "5")
    service.add_to_cart(jane, a)
    service.add_to_cart(jane, b)
    service.add_to_cart(john, a)

    affected = service.purge_product(a)

    assert affected == 2
    assert service.get_cart(jane)["items"][0]["product_id"] == b
    assert service.get_cart(jane)["total_price"] == Decimal("5")
    assert service.get_cart(john)["items"] == []


def test_update_quantity_validates_action(service, make_user):
    user_id = make_user()
    with pytest.raises(ValidationError):
        service.update_quantity(user_id, 1, "sideways")


def test_remove_without_cart_raises_not_found(service, make_user):
    with pytest.raises(NotFoundError):
        service.remove_from_cart(make_user(), 1)
