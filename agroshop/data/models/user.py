from datetime import datetime, timezone

from sqlalchemy import JSON, Column, DateTime, Integer, String

from agroshop.data.database import Base


class UserModel(Base):
    __tablename__ = "users"

    uid = Column(String, primary_key=True)
    email = Column(String, nullable=False, default="")
    name = Column(String, nullable=False, default="")
    tel = Column(String, nullable=False, default="")
    address = Column(String, nullable=False, default="")
    img = Column(String, nullable=True)

    # koszyk i ulubione trzymane w dokumencie usera: [{"productId": ..., "quantity": ...}]
    cart = Column(JSON, nullable=False, default=list)
    favorites = Column(JSON, nullable=False, default=list)

    created_at = Column(DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc))
    version = Column(Integer, nullable=False, default=1)

    def to_dict(self) -> dict:
        return {
            "uid": self.uid,
            "email": self.email,
            "name": self.name,
            "tel": self.tel,
            "address": self.address,
            "img": self.img,
            "cart": list(self.cart or []),
            "favorites": list(self.favorites or []),
            "createdAt": self.created_at,
        }
