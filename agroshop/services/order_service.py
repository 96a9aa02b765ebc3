# agroshop/services/order_service.py
import math
import uuid
from datetime import datetime, timezone
from decimal import Decimal
from typing import Any, Dict

from agroshop.data.models.order import OrderModel
from agroshop.data.models.product import ProductModel
from agroshop.data.models.user import UserModel
from agroshop.data.store import DocumentStore, Transaction
from agroshop.domain.errors import EmptyCart, InsufficientStock, NotFound, ValidationError
from agroshop.domain.schemas import OrderStatus
from agroshop.repos.order_repo import OrderRepo
from agroshop.repos.product_repo import ProductRepo
from agroshop.repos.user_repo import UserRepo
from agroshop.services.cart_service import is_valid_id
from agroshop.utils.settings import PRODUCT_CHUNK_SIZE
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)

MAX_PAGE_SIZE = 100
PERIOD_MONTHS = {"3months": 3, "6months": 6}


def months_ago(now: datetime, months: int) -> datetime:
    year, month = divmod(now.year * 12 + (now.month - 1) - months, 12)
    month += 1
    # 31 maja - 3 miesiace -> 28/29 lutego
    for day in range(now.day, 27, -1):
        try:
            return now.replace(year=year, month=month, day=day)
        except ValueError:
            continue
    return now.replace(year=year, month=month, day=min(now.day, 28))


class OrderService:
    """
    Serwis domeny zamowien, oddzielony od CartService.
    Jedyne miejsce gdzie stan magazynu faktycznie schodzi.
    """

    def __init__(self, store: DocumentStore, chunk_size: int = PRODUCT_CHUNK_SIZE):
        self.store = store
        self.chunk_size = chunk_size

    def place_order(self, uid: str, total) -> Dict[str, Any]:
        """
        Use Case: zamowienie z koszyka.

        1. Odczyt usera poza transakcja (brak -> NotFound, pusty koszyk -> EmptyCart)
        2. W transakcji: walidacja stanu kazdej linii, zamrozenie ceny
        3. Commit: zmniejszenie stanow, nowe zamowienie, pusty koszyk - wszystko albo nic

        total pochodzi od klienta i jest zapisywany bez przeliczania.
        """
        if not is_valid_id(uid) or isinstance(total, bool) or not isinstance(total, (int, float, Decimal)):
            raise ValidationError("Invalid order data")

        with self.store.session() as db:
            user = UserRepo(db).get_user(uid)
            if user is None:
                raise NotFound("User not found")
            if not user.cart:
                raise EmptyCart()

        order_total = Decimal(str(total))

        def body(tx: Transaction) -> OrderModel:
            user = tx.get(UserModel, uid)
            if user is None:
                raise NotFound("User not found")

            cart = user.cart or []
            if not cart:
                raise EmptyCart()

            items = []
            for line in cart:
                product = tx.get(ProductModel, line["productId"])

                # skasowany produkt = zerowy stan
                if product is None or product.quantity < line["quantity"]:
                    raise InsufficientStock(line["productId"])

                items.append({
                    "productId": line["productId"],
                    "quantity": line["quantity"],
                    "unitPrice": str(product.price),
                })
                tx.update(product, quantity=product.quantity - line["quantity"])

            order = OrderModel(
                id=uuid.uuid4().hex,
                user_id=uid,
                items=items,
                total=order_total,
                status=OrderStatus.PROCESSING.value,
                created_at=datetime.now(timezone.utc),
            )
            tx.create(order)
            tx.update(user, cart=[])
            return order

        logger.info(f"Skladanie zamowienia dla {uid}, total {order_total}")
        try:
            order = self.store.run_transaction(body)
        except InsufficientStock as e:
            logger.warning(f"Zamowienie dla {uid} odrzucone: {e}")
            raise

        logger.info(f"Zamowienie {order.id} utworzone dla {uid} ({len(order.items)} pozycji)")
        return order.to_dict()

    def get_order(self, order_id: str) -> Dict[str, Any]:
        with self.store.session() as db:
            order = OrderRepo(db).get_order(order_id)
            if order is None:
                raise NotFound("Order not found.")
            return order.to_dict()

    def list_orders(self, page: int = 1, limit: int = 20, period: str = "all") -> Dict[str, Any]:
        """
        Use Case: lista zamowien dla panelu admina (Query).
        Najnowsze pierwsze, opcjonalnie tylko z ostatnich 3/6 miesiecy.
        """
        page = max(1, page)
        limit = max(1, min(limit, MAX_PAGE_SIZE))

        since = None
        if period in PERIOD_MONTHS:
            since = months_ago(datetime.now(timezone.utc), PERIOD_MONTHS[period])

        with self.store.session() as db:
            repo = OrderRepo(db)
            total_orders = repo.count_orders(since)
            orders = repo.list_orders((page - 1) * limit, limit, since)

            users = UserRepo(db).get_users_by_ids([o.user_id for o in orders])
            products = ProductRepo(db, self.chunk_size).get_products_by_ids(
                [i["productId"] for o in orders for i in o.items or []]
            )

            data = []
            for order in orders:
                row = order.to_dict()
                user = users.get(order.user_id)
                row["user"] = (
                    {
                        "id": user.uid,
                        "name": user.name,
                        "email": user.email,
                        "tel": user.tel,
                        "address": user.address,
                    }
                    if user
                    else None
                )
                for item in row["items"]:
                    product = products.get(item["productId"])
                    item["product"] = product.to_dict() if product else None
                data.append(row)

        return {
            "data": data,
            "pagination": {
                "page": page,
                "limit": limit,
                "totalOrders": total_orders,
                "totalPages": math.ceil(total_orders / limit),
            },
        }

    def update_status(self, order_id: str, status: str) -> Dict[str, Any]:
        try:
            new_status = OrderStatus(status)
        except ValueError:
            raise ValidationError(f"Invalid status: {status}")

        def body(tx: Transaction) -> str:
            order = tx.get(OrderModel, order_id)
            if order is None:
                raise NotFound("Order not found.")
            tx.update(order, status=new_status.value)
            return order.status

        old_status = self.store.run_transaction(body)
        logger.info(f"Zamowienie {order_id}: status {old_status} -> {new_status.value}")

        return self.get_order(order_id)
