import sqlite3

import pytest
from sqlalchemy import event
from sqlalchemy.exc import OperationalError

from agroshop.data.models import ProductModel, UserModel
from agroshop.data.store import DocumentStore
from agroshop.domain.errors import OutOfStock, TransactionConflict, TransactionTooLarge


def _concurrent_write(store, model, key, **values):
    """Zapis z innej sesji, tak jakby zrobil go rownolegly request."""
    with store.session() as db:
        doc = db.get(model, key)
        for name, value in values.items():
            setattr(doc, name, value)
        doc.version += 1
        db.commit()


def test_write_conflict_is_retried_with_fresh_read(store, add_user, read):
    add_user("U1")
    calls = []

    def body(tx):
        user = tx.get(UserModel, "U1")
        calls.append(user.version)
        if len(calls) == 1:
            _concurrent_write(store, UserModel, "U1", tel="0700")
        tx.update(user, address="Str. Morii 1")

    store.run_transaction(body)

    assert calls == [1, 2]
    user = read(UserModel, "U1")
    assert user.tel == "0700"
    assert user.address == "Str. Morii 1"
    assert user.version == 3


def test_read_only_document_change_causes_conflict(store, add_user, add_product, read):
    add_user("U1")
    add_product("P1", quantity=5)
    seen_stock = []

    def body(tx):
        user = tx.get(UserModel, "U1")
        product = tx.get(ProductModel, "P1")
        seen_stock.append(product.quantity)
        if len(seen_stock) == 1:
            _concurrent_write(store, ProductModel, "P1", quantity=1)
        tx.update(user, cart=[{"productId": "P1", "quantity": product.quantity}])

    store.run_transaction(body)

    assert seen_stock == [5, 1]
    assert read(UserModel, "U1").cart == [{"productId": "P1", "quantity": 1}]


def test_conflict_surfaces_after_retries_exhausted(engine, add_user, read):
    from agroshop.data.database import build_session_factory

    store = DocumentStore(build_session_factory(engine), max_attempts=3, wait_multiplier=0)
    add_user("U1")
    calls = []

    def body(tx):
        user = tx.get(UserModel, "U1")
        calls.append(1)
        _concurrent_write(store, UserModel, "U1", tel=str(len(calls)))
        tx.update(user, address="never")

    with pytest.raises(TransactionConflict):
        store.run_transaction(body)

    assert len(calls) == 3
    assert read(UserModel, "U1").address == ""


def test_business_error_is_not_retried_and_rolls_back(store, add_user, read):
    add_user("U1")
    calls = []

    def body(tx):
        calls.append(1)
        user = tx.get(UserModel, "U1")
        tx.update(user, tel="123")
        raise OutOfStock()

    with pytest.raises(OutOfStock):
        store.run_transaction(body)

    assert len(calls) == 1
    assert read(UserModel, "U1").tel == ""


def test_transaction_too_large_writes_nothing(engine, add_product, read):
    from agroshop.data.database import build_session_factory

    store = DocumentStore(build_session_factory(engine), max_documents=2, wait_multiplier=0)
    for pid in ("P1", "P2", "P3"):
        add_product(pid, quantity=5)

    def body(tx):
        for pid in ("P1", "P2", "P3"):
            product = tx.get(ProductModel, pid)
            tx.update(product, quantity=0)

    with pytest.raises(TransactionTooLarge) as exc:
        store.run_transaction(body)

    assert exc.value.touched == 3
    assert [read(ProductModel, pid).quantity for pid in ("P1", "P2", "P3")] == [5, 5, 5]


def test_update_requires_prior_read(store, add_user):
    add_user("U1")
    with store.session() as db:
        detached = db.get(UserModel, "U1")

    def body(tx):
        tx.update(detached, tel="1")

    with pytest.raises(RuntimeError):
        store.run_transaction(body)


def test_concurrent_create_of_same_document_is_a_conflict(store, read):
    calls = []

    def body(tx):
        calls.append(1)
        if tx.get(UserModel, "U9") is not None:
            return False
        if len(calls) == 1:
            with store.session() as db:
                db.add(UserModel(uid="U9", email="other@example.com", name="Other"))
                db.commit()
        tx.create(UserModel(uid="U9", email="me@example.com", name="Me"))
        return True

    assert store.run_transaction(body) is False
    assert len(calls) == 2
    assert read(UserModel, "U9").email == "other@example.com"


class _DriverError(Exception):
    def __init__(self, message, pgcode=None):
        super().__init__(message)
        self.pgcode = pgcode


@pytest.mark.parametrize(
    "orig",
    [
        _DriverError("deadlock detected", pgcode="40P01"),
        _DriverError("could not serialize access", pgcode="40001"),
        sqlite3.OperationalError("database is locked"),
    ],
)
def test_deadlock_and_lock_errors_are_retried(store, add_user, read, orig):
    add_user("U1")
    calls = []

    def body(tx):
        calls.append(1)
        user = tx.get(UserModel, "U1")
        if len(calls) == 1:
            raise OperationalError("UPDATE products SET ...", {}, orig)
        tx.update(user, tel="0722")

    store.run_transaction(body)

    assert len(calls) == 2
    assert read(UserModel, "U1").tel == "0722"


def test_other_database_errors_are_not_retried(store, add_user):
    add_user("U1")
    calls = []

    def body(tx):
        calls.append(1)
        raise OperationalError("SELECT 1", {}, _DriverError("no such table", pgcode="42P01"))

    with pytest.raises(OperationalError):
        store.run_transaction(body)

    assert len(calls) == 1


def _record_statements(engine):
    statements = []

    def before_cursor_execute(conn, cursor, statement, parameters, context, executemany):
        statements.append((statement, parameters))

    event.listen(engine, "before_cursor_execute", before_cursor_execute)
    return statements, lambda: event.remove(engine, "before_cursor_execute", before_cursor_execute)


def test_writes_are_applied_in_key_order(store, engine, add_product):
    for pid in ("P1", "P2", "P3"):
        add_product(pid, quantity=5)

    def body(tx):
        for pid in ("P3", "P1", "P2"):
            product = tx.get(ProductModel, pid)
            tx.update(product, quantity=product.quantity - 1)

    statements, stop = _record_statements(engine)
    try:
        store.run_transaction(body)
    finally:
        stop()

    updated = [
        next(p for p in ("P1", "P2", "P3") if p in params)
        for sql, params in statements
        if sql.startswith("UPDATE products")
    ]
    assert updated == ["P1", "P2", "P3"]


def test_read_only_versions_are_checked_after_writes(store, engine, add_user, add_product):
    add_user("U1")
    add_product("P1", quantity=5)

    def body(tx):
        user = tx.get(UserModel, "U1")
        tx.get(ProductModel, "P1")
        tx.update(user, cart=[{"productId": "P1", "quantity": 1}])

    statements, stop = _record_statements(engine)
    try:
        store.run_transaction(body)
    finally:
        stop()

    sql = [s for s, _ in statements]
    update_at = next(i for i, s in enumerate(sql) if s.startswith("UPDATE users"))
    check_at = next(i for i, s in enumerate(sql) if s.startswith("SELECT products.version"))
    assert update_at < check_at
