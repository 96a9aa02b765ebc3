#agroshop/api/routers/carts.py
from fastapi import APIRouter, Depends

from agroshop.api.responses import fail
from agroshop.data.database import get_store
from agroshop.data.store import DocumentStore
from agroshop.domain.errors import (
    EmptyCart,
    ItemNotInCart,
    NotFound,
    OutOfStock,
    ProductNotInCart,
    ValidationError,
)
from agroshop.domain.schemas import (
    CartItemIn,
    CartOut,
    PlaceOrderIn,
    PlacedOrderOut,
    QuantityChangeIn,
)
from agroshop.services.cart_service import CartService
from agroshop.services.order_service import OrderService
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/cart", tags=["cart"])


def get_service(store: DocumentStore = Depends(get_store)):
    return CartService(store)


def get_order_service(store: DocumentStore = Depends(get_store)):
    return OrderService(store)


# bledy biznesowe ida jako 500 z konkretnym komunikatem - tego oczekuje frontend


@router.get("/details/{uid}", response_model=CartOut)
def get_cart_details(uid: str, svc: CartService = Depends(get_service)):
    try:
        return {"success": True, "cart": svc.get_detailed_cart(uid)}
    except ValidationError:
        return fail(400, "Missing or invalid uid")
    except NotFound:
        return fail(404, "Cart not found")
    except Exception:
        logger.exception(f"Blad pobierania koszyka {uid}")
        return fail(500, "Server error")


@router.post("/add", response_model=CartOut)
def add_item(payload: CartItemIn, svc: CartService = Depends(get_service)):
    try:
        return {"success": True, "cart": svc.add(payload.uid, payload.productId)}
    except OutOfStock as e:
        return fail(500, e.message)
    except Exception:
        logger.exception(f"Blad dodawania {payload.productId} do koszyka {payload.uid}")
        return fail(500, "Server error")


@router.patch("/update-quantity", response_model=CartOut)
def update_quantity(payload: QuantityChangeIn, svc: CartService = Depends(get_service)):
    try:
        return {
            "success": True,
            "cart": svc.update_quantity(payload.uid, payload.productId, payload.change),
        }
    except (OutOfStock, ItemNotInCart, NotFound) as e:
        return fail(500, e.message)
    except Exception:
        logger.exception(f"Blad zmiany ilosci {payload.productId} w koszyku {payload.uid}")
        return fail(500, "Server error")


@router.delete("/remove", response_model=CartOut)
def remove_item(payload: CartItemIn, svc: CartService = Depends(get_service)):
    try:
        return {"success": True, "cart": svc.remove(payload.uid, payload.productId)}
    except ProductNotInCart as e:
        return fail(500, e.message)
    except Exception:
        logger.exception(f"Blad usuwania {payload.productId} z koszyka {payload.uid}")
        return fail(500, "Server error")


@router.post("/place-order", response_model=PlacedOrderOut, status_code=201)
def place_order(
    payload: PlaceOrderIn,
    svc: CartService = Depends(get_service),
    orders: OrderService = Depends(get_order_service),
):
    try:
        order = orders.place_order(payload.uid, payload.total)
    except ValidationError:
        return fail(400, "Invalid order data")
    except NotFound:
        return fail(404, "User not found")
    except EmptyCart as e:
        return fail(400, e.message)
    except Exception:
        # szczegol (np. ktory produkt sie skonczyl) zostaje w logach
        logger.exception(f"Order error dla {payload.uid}")
        return fail(500, "Order error")

    try:
        cart = svc.get_detailed_cart(payload.uid)
    except Exception:
        # zamowienie juz zapisane, nie udal sie tylko odczyt koszyka
        logger.exception(f"Blad pobierania koszyka po zamowieniu {order['id']}")
        return fail(500, "Server error")

    return {"success": True, "cart": cart, "orderId": order["id"]}
