# agroshop/domain/schemas.py
from decimal import Decimal
from enum import Enum
from typing import Annotated, Any, List

from pydantic import AfterValidator, BaseModel, ConfigDict, Field, StrictFloat, StrictInt, StrictStr


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


DocumentId = Annotated[StrictStr, AfterValidator(_not_blank)]


class OrderStatus(str, Enum):
    PROCESSING = "Procesare"
    IN_DELIVERY = "În curs de livrare"
    SHIPPED = "Expediată"
    COMPLETED = "Finalizată"
    CANCELLED = "Anulată"


# --- requesty koszyka / zamowienia ---

class CartItemIn(BaseModel):
    """Body dla /api/cart/add i /api/cart/remove."""

    uid: DocumentId
    productId: DocumentId


class QuantityChangeIn(CartItemIn):
    change: StrictInt


class PlaceOrderIn(BaseModel):
    uid: DocumentId
    total: StrictInt | StrictFloat


class MergeCartIn(BaseModel):
    uid: DocumentId
    localCart: List[Any]


# --- requesty usera ---

class UserCreate(BaseModel):
    uid: DocumentId
    email: DocumentId
    name: DocumentId
    lname: str | None = None
    photoURL: str | None = None


class SetFieldIn(BaseModel):
    collection: str
    id: DocumentId
    field: str
    value: Any = None


class FavoriteToggleIn(BaseModel):
    uid: DocumentId
    productId: DocumentId


# --- produkty ---

class ProductIn(BaseModel):
    """Wiersz importu produktow (juz sparsowany po stronie panelu admina)."""

    id: DocumentId
    name: str = ""
    price: Decimal = Field(..., ge=0)
    quantity: int = Field(..., ge=0)
    mass: str | None = None
    type: int = 0
    imageUrl: str = ""


class ProductUploadIn(BaseModel):
    products: List[ProductIn]


class ProductOut(BaseModel):
    id: str
    name: str
    price: float
    quantity: int
    mass: str | None = None
    type: int
    imageUrl: str

    model_config = ConfigDict(from_attributes=True)


class DetailedCartLine(BaseModel):
    product: ProductOut
    quantity: int


class CartOut(BaseModel):
    success: bool = True
    cart: List[DetailedCartLine]


class PlacedOrderOut(CartOut):
    orderId: str


class OrderStatusIn(BaseModel):
    status: str | None = None


class MessageOut(BaseModel):
    success: bool
    message: str
