from typing import Any, Dict, List

from agroshop.data.models.product import ProductModel
from agroshop.data.models.user import UserModel
from agroshop.data.store import DocumentStore, Transaction
from agroshop.domain.errors import NotFound, ValidationError
from agroshop.domain.schemas import UserCreate
from agroshop.repos.user_repo import UserRepo
from agroshop.utils.logging import get_logger

logger = get_logger(__name__)

EDITABLE_FIELDS = ("tel", "address")


class UserService:
    def __init__(self, store: DocumentStore):
        self.store = store

    def create_user(self, payload: UserCreate) -> bool:
        """Zwraca True gdy user zostal utworzony, False gdy juz istnial."""
        name = f"{payload.lname} {payload.name}" if payload.lname else payload.name

        def body(tx: Transaction) -> bool:
            if tx.get(UserModel, payload.uid) is not None:
                return False
            tx.create(
                UserModel(
                    uid=payload.uid,
                    email=payload.email,
                    name=name,
                    img=payload.photoURL,
                    cart=[],
                    favorites=[],
                )
            )
            return True

        created = self.store.run_transaction(body)
        if created:
            logger.info(f"Utworzono uzytkownika {payload.uid}")
        return created

    def get_profile(self, uid: str) -> Dict[str, Any]:
        with self.store.session() as db:
            user = UserRepo(db).get_user(uid)
            if user is None:
                raise NotFound("User not found")
            return user.to_dict()

    def exists(self, uid: str) -> bool:
        with self.store.session() as db:
            return UserRepo(db).get_user(uid) is not None

    def set_field(self, uid: str, field: str, value: str) -> None:
        if field not in EDITABLE_FIELDS:
            raise PermissionError("Unauthorized field or collection")
        if not isinstance(value, str):
            raise ValidationError(f"{field} must be a string")

        def body(tx: Transaction):
            user = tx.get(UserModel, uid)
            if user is None:
                raise NotFound("User not found")
            tx.update(user, **{field: value})

        self.store.run_transaction(body)
        logger.info(f"Uzytkownik {uid}: zaktualizowano pole {field}")

    def toggle_favorite(self, uid: str, product_id: str) -> List[str]:
        def body(tx: Transaction) -> List[str]:
            user = tx.get(UserModel, uid)
            if user is None:
                raise NotFound("User not found")

            favorites = list(user.favorites or [])
            if product_id in favorites:
                favorites.remove(product_id)
            else:
                if tx.get(ProductModel, product_id) is None:
                    raise NotFound("Product not found")
                favorites.append(product_id)

            tx.update(user, favorites=favorites)
            return favorites

        return self.store.run_transaction(body)
