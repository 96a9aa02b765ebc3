# agroshop/api/routers/orders.py
from fastapi import APIRouter, Depends, Query

from agroshop.api.responses import fail
from agroshop.data.database import get_store
from agroshop.data.store import DocumentStore
from agroshop.domain.errors import NotFound, ValidationError
from agroshop.domain.schemas import MessageOut, OrderStatusIn
from agroshop.services.order_service import OrderService
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/orders", tags=["orders"])


def get_service(store: DocumentStore = Depends(get_store)):
    return OrderService(store)


@router.get("/")
def list_orders(
    page: int = Query(1),
    limit: int = Query(20),
    filter: str = Query("all"),
    svc: OrderService = Depends(get_service),
):
    """
    Wszystkie zamowienia z danymi usera i produktow (panel admina).
    filter: all / 3months / 6months
    """
    try:
        return {"success": True, **svc.list_orders(page=page, limit=limit, period=filter)}
    except Exception:
        logger.exception("Blad pobierania listy zamowien")
        return fail(500, "Error fetching all orders")


@router.patch("/{order_id}/status", response_model=MessageOut)
def update_order_status(
    order_id: str,
    payload: OrderStatusIn,
    svc: OrderService = Depends(get_service),
):
    if not payload.status:
        return fail(400, "Missing status.")

    try:
        svc.update_status(order_id, payload.status)
    except ValidationError as e:
        return fail(400, e.message)
    except NotFound as e:
        return fail(404, e.message)
    except Exception:
        logger.exception(f"Blad zmiany statusu zamowienia {order_id}")
        return fail(500, "Failed to update status.")

    return {"success": True, "message": "Status updated."}
