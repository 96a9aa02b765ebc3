from decimal import Decimal

import pytest
from fastapi.testclient import TestClient

from agroshop.data.database import Base, build_engine, build_session_factory
from agroshop.data.models import OrderModel, ProductModel, UserModel
from agroshop.data.store import DocumentStore
from agroshop.main import create_app


@pytest.fixture
def engine(tmp_path):
    engine = build_engine(f"sqlite:///{tmp_path / 'shop.db'}")
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def store(engine):
    return DocumentStore(build_session_factory(engine), wait_multiplier=0)


@pytest.fixture
def client(store):
    return TestClient(create_app(store))


@pytest.fixture
def add_product(store):
    def _add(product_id, quantity=5, price="10.00", name=None, type_=1):
        with store.session() as db:
            db.add(
                ProductModel(
                    id=product_id,
                    name=name or f"Produs {product_id}",
                    price=Decimal(price),
                    quantity=quantity,
                    type=type_,
                    image_url="",
                )
            )
            db.commit()

    return _add


@pytest.fixture
def add_user(store):
    def _add(uid, cart=None, favorites=None):
        with store.session() as db:
            db.add(
                UserModel(
                    uid=uid,
                    email=f"{uid}@example.com",
                    name=f"User {uid}",
                    cart=cart or [],
                    favorites=favorites or [],
                )
            )
            db.commit()

    return _add


@pytest.fixture
def read(store):
    """Swiezy odczyt dokumentu z bazy, poza transakcja."""

    def _read(model, key):
        with store.session() as db:
            return db.get(model, key)

    return _read


@pytest.fixture
def orders(store):
    def _orders():
        with store.session() as db:
            return db.query(OrderModel).all()

    return _orders
