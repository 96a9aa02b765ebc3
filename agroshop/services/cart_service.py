# agroshop/services/cart_service.py
from typing import Any, Dict, List

from agroshop.data.models.product import ProductModel
from agroshop.data.models.user import UserModel
from agroshop.data.store import DocumentStore, Transaction
from agroshop.domain.errors import (
    ItemNotInCart,
    NotFound,
    OutOfStock,
    ProductNotInCart,
    ValidationError,
)
from agroshop.repos.product_repo import ProductRepo
from agroshop.repos.user_repo import UserRepo
from agroshop.utils.settings import PRODUCT_CHUNK_SIZE
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)


def is_valid_id(value: Any) -> bool:
    return isinstance(value, str) and value.strip() != ""


def _require_ids(*ids):
    if not all(is_valid_id(i) for i in ids):
        raise ValidationError("Missing or invalid uid/productId")


def _copy_cart(user: UserModel | None) -> List[Dict[str, Any]]:
    # kopia - nie ruszamy stanu zaladowanego dokumentu, transakcja moze byc powtorzona
    if user is None:
        return []
    return [dict(line) for line in user.cart or []]


def _find_line(cart: List[Dict[str, Any]], product_id: str) -> Dict[str, Any] | None:
    return next((line for line in cart if line["productId"] == product_id), None)


def project_cart(cart: List[Dict[str, Any]], products: Dict[str, ProductModel]) -> List[Dict[str, Any]]:
    """
    Laczy surowy koszyk z pelnymi produktami, w kolejnosci koszyka.
    Linie ze skasowanym produktem sa pomijane.
    """
    detailed = []
    for line in cart:
        product = products.get(line["productId"])
        if product is None:
            continue
        detailed.append({"product": product.to_dict(), "quantity": line["quantity"]})
    return detailed


class CartService:
    """
    Use case'y koszyka. Kazda komenda (add, update_quantity, remove, merge_cart)
    to jedna transakcja na dokumencie usera i produktu, query (get_detailed_cart) tylko czyta.
    Koszyk nie rezerwuje stanu magazynu - stan schodzi dopiero przy zamowieniu.
    """

    def __init__(self, store: DocumentStore, chunk_size: int = PRODUCT_CHUNK_SIZE):
        self.store = store
        self.chunk_size = chunk_size

    #query - odczyt
    def get_detailed_cart(self, uid: str) -> List[Dict[str, Any]]:
        if not is_valid_id(uid):
            raise ValidationError("Missing or invalid uid")

        with self.store.session() as db:
            user = UserRepo(db).get_user(uid)
            if user is None:
                raise NotFound("Cart not found")

            cart = user.cart or []
            if not cart:
                return []

            products = ProductRepo(db, self.chunk_size).get_products_by_ids(
                [line["productId"] for line in cart]
            )
            return project_cart(cart, products)

    #commands
    def add(self, uid: str, product_id: str) -> List[Dict[str, Any]]:
        _require_ids(uid, product_id)

        def body(tx: Transaction):
            user = tx.get(UserModel, uid)
            product = tx.get(ProductModel, product_id)

            if user is None:
                raise NotFound("User not found")
            if product is None:
                raise NotFound("Product not found")

            cart = _copy_cart(user)
            cart_item = _find_line(cart, product_id)
            current_qty = cart_item["quantity"] if cart_item else 0

            if current_qty + 1 > product.quantity:
                raise OutOfStock()

            if cart_item:
                cart_item["quantity"] += 1
            else:
                cart.append({"productId": product_id, "quantity": 1})

            tx.update(user, cart=cart)

        logger.info(f"Dodaje produkt {product_id} do koszyka uzytkownika {uid}")
        self.store.run_transaction(body)
        logger.info(f"Produkt {product_id} dodany do koszyka uzytkownika {uid}")

        return self.get_detailed_cart(uid)

    def update_quantity(self, uid: str, product_id: str, change: int) -> List[Dict[str, Any]]:
        _require_ids(uid, product_id)
        if isinstance(change, bool) or not isinstance(change, int):
            raise ValidationError("Invalid input")

        def body(tx: Transaction):
            user = tx.get(UserModel, uid)
            product = tx.get(ProductModel, product_id)

            if user is None or product is None:
                raise NotFound("User or product not found")

            cart = _copy_cart(user)
            cart_item = _find_line(cart, product_id)
            if cart_item is None:
                raise ItemNotInCart()

            if change > 0:
                max_increase = product.quantity - cart_item["quantity"]
                if change > max_increase:
                    raise OutOfStock()

            if change == 0:
                return

            cart_item["quantity"] += change
            if cart_item["quantity"] <= 0:
                cart.remove(cart_item)

            tx.update(user, cart=cart)

        logger.info(f"Zmiana ilosci produktu {product_id} o {change} w koszyku {uid}")
        self.store.run_transaction(body)

        return self.get_detailed_cart(uid)

    def remove(self, uid: str, product_id: str) -> List[Dict[str, Any]]:
        _require_ids(uid, product_id)

        def body(tx: Transaction):
            user = tx.get(UserModel, uid)
            # brak usera traktujemy jak pusty koszyk
            cart = _copy_cart(user)

            cart_item = _find_line(cart, product_id)
            if cart_item is None:
                raise ProductNotInCart()

            cart.remove(cart_item)
            tx.update(user, cart=cart)

        logger.info(f"Usuwanie produktu {product_id} z koszyka {uid}")
        self.store.run_transaction(body)

        return self.get_detailed_cart(uid)

    def merge_cart(self, uid: str, local_cart: List[Dict[str, Any]]) -> List[Dict[str, Any]]:
        """
        Scala koszyk goscia (z przegladarki) z koszykiem zapisanym w bazie.
        Ilosc kazdej linii jest przycinana do stanu magazynu, linie z nieistniejacym
        produktem albo niepoprawna iloscia sa pomijane.
        """
        if not is_valid_id(uid) or not isinstance(local_cart, list):
            raise ValidationError("Invalid payload")

        def body(tx: Transaction):
            user = tx.get(UserModel, uid)
            if user is None:
                raise NotFound("User not found")

            merged: Dict[str, Dict[str, Any]] = {
                line["productId"]: {"productId": line["productId"], "quantity": line["quantity"]}
                for line in user.cart or []
            }

            for item in local_cart:
                if not isinstance(item, dict):
                    continue
                product_id = item.get("productId") or (item.get("product") or {}).get("id")
                quantity = item.get("quantity")
                if not is_valid_id(product_id):
                    continue
                if isinstance(quantity, bool) or not isinstance(quantity, int) or quantity <= 0:
                    continue

                product = tx.get(ProductModel, product_id)
                if product is None:
                    continue

                previous = merged.get(product_id, {}).get("quantity", 0)
                final_quantity = min(previous + quantity, product.quantity)

                if final_quantity > 0:
                    merged[product_id] = {"productId": product_id, "quantity": final_quantity}

            tx.update(user, cart=list(merged.values()))

        logger.info(f"Scalanie koszyka lokalnego ({len(local_cart)} pozycji) dla {uid}")
        self.store.run_transaction(body)

        return self.get_detailed_cart(uid)
