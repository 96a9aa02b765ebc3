from fastapi import APIRouter, Depends

from agroshop.api.responses import fail
from agroshop.data.database import get_store
from agroshop.data.store import DocumentStore
from agroshop.services.product_service import ProductService
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/categories", tags=["categories"])


def get_service(store: DocumentStore = Depends(get_store)):
    return ProductService(store)


@router.get("/")
def list_categories(svc: ProductService = Depends(get_service)):
    try:
        return {"success": True, "data": svc.list_categories()}
    except Exception:
        logger.exception("Blad pobierania kategorii")
        return fail(500, "Error while fetching categories")
