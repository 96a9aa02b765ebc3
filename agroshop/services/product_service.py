# agroshop/services/product_service.py
from decimal import Decimal
from typing import Any, Dict, List

from agroshop.data.models.product import ProductModel
from agroshop.data.store import DocumentStore, Transaction
from agroshop.domain.errors import NotFound, ShopError
from agroshop.domain.schemas import ProductIn
from agroshop.repos.category_repo import CategoryRepo
from agroshop.repos.product_repo import ProductRepo
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)


class ProductService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def list_products(
        self,
        type_: int | None = None,
        search: str | None = None,
        in_stock: bool | None = None,
    ) -> List[Dict[str, Any]]:
        with self.store.session() as db:
            products = ProductRepo(db).list_products(type_=type_, search=search, in_stock=in_stock)
            return [p.to_dict() for p in products]

    def list_categories(self) -> List[Dict[str, Any]]:
        with self.store.session() as db:
            return [c.to_dict() for c in CategoryRepo(db).list_categories()]

    def get_product(self, product_id: str) -> Dict[str, Any]:
        with self.store.session() as db:
            product = ProductRepo(db).get_product(product_id)
            if product is None:
                raise NotFound("Product not found")
            return product.to_dict()

    def import_products(self, rows: List[ProductIn]) -> Dict[str, Any]:
        """
        Use Case: import produktow przez admina.

        Istniejacy produkt: stan magazynu jest DOKLADANY do obecnego, cena i typ
        nadpisywane tylko gdy sie zmienily. Nowy produkt: tworzony w calosci.
        Kazdy produkt to osobna transakcja, zeby nie zgubic rownoleglego zamowienia.
        """
        updated = 0
        created = 0
        errors = []
        price_changes = []

        for row in rows:
            def body(tx: Transaction):
                existing = tx.get(ProductModel, row.id)

                if existing is None:
                    tx.create(
                        ProductModel(
                            id=row.id,
                            name=row.name,
                            price=row.price,
                            quantity=row.quantity,
                            mass=row.mass,
                            type=row.type,
                            image_url=row.imageUrl,
                        )
                    )
                    return "created", None

                patch = {"quantity": existing.quantity + row.quantity}
                change = None
                if Decimal(existing.price) != row.price:
                    patch["price"] = row.price
                    change = {"id": row.id, "oldPrice": existing.price, "newPrice": row.price}
                if existing.type != row.type:
                    patch["type"] = row.type

                tx.update(existing, **patch)
                return "updated", change

            try:
                outcome, change = self.store.run_transaction(body)
            except ShopError as e:
                logger.error(f"Import produktu {row.id} nieudany: {e}")
                errors.append({"id": row.id, "error": e.message})
                continue

            if outcome == "created":
                created += 1
            else:
                updated += 1
            if change:
                price_changes.append(change)

        logger.info(f"Import produktow: {created} nowych, {updated} zaktualizowanych, {len(errors)} bledow")

        return {
            "updated": updated,
            "created": created,
            "errors": errors,
            "priceChanges": price_changes,
        }
