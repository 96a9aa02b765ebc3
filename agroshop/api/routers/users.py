from fastapi import APIRouter, Depends, Response

from agroshop.api.responses import fail
from agroshop.data.database import get_store
from agroshop.data.store import DocumentStore
from agroshop.domain.errors import NotFound, ValidationError
from agroshop.domain.schemas import CartOut, FavoriteToggleIn, MergeCartIn, MessageOut, SetFieldIn, UserCreate
from agroshop.services.cart_service import CartService
from agroshop.services.user_service import UserService
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)

router = APIRouter(prefix="/api/user", tags=["user"])


def get_service(store: DocumentStore = Depends(get_store)):
    return UserService(store)


def get_cart_service(store: DocumentStore = Depends(get_store)):
    return CartService(store)


@router.get("/profile/{uid}")
def get_profile(uid: str, svc: UserService = Depends(get_service)):
    try:
        return {"success": True, "data": svc.get_profile(uid)}
    except NotFound as e:
        return fail(404, e.message)
    except Exception:
        logger.exception(f"Blad pobierania profilu {uid}")
        return fail(500, "Server error")


@router.get("/exists/{uid}")
def user_exists(uid: str, svc: UserService = Depends(get_service)):
    try:
        return {"success": True, "exists": svc.exists(uid)}
    except Exception:
        logger.exception(f"Blad sprawdzania usera {uid}")
        return fail(500, "Server error")


@router.post("/create", response_model=MessageOut, status_code=201)
def create_user(payload: UserCreate, response: Response, svc: UserService = Depends(get_service)):
    try:
        created = svc.create_user(payload)
    except Exception:
        logger.exception(f"Blad tworzenia usera {payload.uid}")
        return fail(500, "Server error")

    if not created:
        response.status_code = 200
        return {"success": True, "message": "User already exists"}
    return {"success": True, "message": "User created"}


@router.post("/merge-cart", response_model=CartOut)
def merge_cart(payload: MergeCartIn, svc: CartService = Depends(get_cart_service)):
    try:
        return {"success": True, "cart": svc.merge_cart(payload.uid, payload.localCart)}
    except (NotFound, ValidationError) as e:
        return fail(500, e.message)
    except Exception:
        logger.exception(f"Blad scalania koszyka {payload.uid}")
        return fail(500, "Server error")


@router.patch("/set-field", response_model=MessageOut)
def set_field(payload: SetFieldIn, svc: UserService = Depends(get_service)):
    # produkty zmienia tylko import admina
    if payload.collection != "users":
        return fail(403, "Unauthorized field or collection")

    try:
        svc.set_field(payload.id, payload.field, payload.value)
    except PermissionError as e:
        return fail(403, str(e))
    except ValidationError as e:
        return fail(400, e.message)
    except NotFound as e:
        return fail(404, e.message)
    except Exception:
        logger.exception(f"Blad aktualizacji pola {payload.field} usera {payload.id}")
        return fail(500, "Server error")

    return {"success": True, "message": "Field updated"}


@router.post("/favorites/toggle")
def toggle_favorite(payload: FavoriteToggleIn, svc: UserService = Depends(get_service)):
    try:
        return {"success": True, "favorites": svc.toggle_favorite(payload.uid, payload.productId)}
    except NotFound as e:
        return fail(404, e.message)
    except Exception:
        logger.exception(f"Blad aktualizacji ulubionych {payload.uid}")
        return fail(500, "Server error")
