# agroshop/repos/product_repo.py
from sqlalchemy import select
from sqlalchemy.orm import Session

from agroshop.data.models.product import ProductModel
from agroshop.utils.settings import PRODUCT_CHUNK_SIZE


def chunked(keys: list, size: int) -> list[list]:
    if size <= 0:
        raise ValueError("Rozmiar paczki musi byc wiekszy niz 0")
    return [keys[i:i + size] for i in range(0, len(keys), size)]


class ProductRepo:
    def __init__(self, db: Session, chunk_size: int = PRODUCT_CHUNK_SIZE):
        self.db = db
        self.chunk_size = chunk_size

    def get_product(self, product_id: str) -> ProductModel | None:
        return self.db.get(ProductModel, product_id)

    def list_products(
        self,
        type_: int | None = None,
        search: str | None = None,
        in_stock: bool | None = None,
    ) -> list[ProductModel]:
        stmt = select(ProductModel).order_by(ProductModel.name, ProductModel.id)

        if type_ is not None:
            stmt = stmt.where(ProductModel.type == type_)
        if search:
            stmt = stmt.where(ProductModel.name.ilike(f"%{search}%"))
        if in_stock is True:
            stmt = stmt.where(ProductModel.quantity > 0)
        elif in_stock is False:
            stmt = stmt.where(ProductModel.quantity <= 0)

        return list(self.db.execute(stmt).scalars().all())

    def get_products_by_ids(self, product_ids: list[str]) -> dict[str, ProductModel]:
        """
        Pobiera produkty paczkami (zapytanie IN ma limit kluczy),
        zwraca mape id -> produkt. Brakujace id po prostu nie wystepuja w mapie.
        """
        unique_ids = list(dict.fromkeys(product_ids))
        products: dict[str, ProductModel] = {}

        for chunk in chunked(unique_ids, self.chunk_size):
            rows = self.db.execute(
                select(ProductModel).where(ProductModel.id.in_(chunk))
            ).scalars().all()
            products.update({p.id: p for p in rows})

        return products
