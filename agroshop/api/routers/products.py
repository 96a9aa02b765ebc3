# agroshop/api/routers/products.py
from fastapi import APIRouter, Depends, Header, Query

from agroshop.api.responses import fail
from agroshop.data.database import get_store
from agroshop.data.store import DocumentStore
from agroshop.domain.errors import NotFound
from agroshop.domain.schemas import ProductUploadIn
from agroshop.services.product_service import ProductService
from agroshop.utils import settings
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/products", tags=["products"])


def get_service(store: DocumentStore = Depends(get_store)):
    return ProductService(store)


@router.get("/")
def list_products(
    type: int | None = Query(None),
    search: str | None = Query(None),
    in_stock: bool | None = Query(None),
    svc: ProductService = Depends(get_service),
):
    try:
        return {"success": True, "data": svc.list_products(type_=type, search=search, in_stock=in_stock)}
    except Exception:
        logger.exception("Blad pobierania produktow")
        return fail(500, "Error while fetching products")


@router.get("/{product_id}")
def get_product(product_id: str, svc: ProductService = Depends(get_service)):
    if not product_id.strip():
        return fail(400, "Invalid product id")

    try:
        return {"success": True, "data": svc.get_product(product_id)}
    except NotFound as e:
        return fail(404, e.message)
    except Exception:
        logger.exception(f"Blad pobierania produktu {product_id}")
        return fail(500, "Error fetching product")


@router.post("/upload")
def upload_products(
    payload: ProductUploadIn,
    x_admin_token: str | None = Header(None),
    svc: ProductService = Depends(get_service),
):
    """Import sparsowanych wierszy CSV: dokladanie stanu, aktualizacja cen."""
    if not x_admin_token:
        return fail(400, "Missing token or products")
    if not settings.ADMIN_TOKEN or x_admin_token != settings.ADMIN_TOKEN:
        return fail(403, "Not admin")

    try:
        result = svc.import_products(payload.products)
    except Exception:
        logger.exception("Blad zapisu produktow")
        return fail(500, "Failed to save products")

    return {"success": True, "message": "Products processed", **result}
