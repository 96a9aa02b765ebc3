from datetime import datetime, timezone
from decimal import Decimal

from sqlalchemy import JSON, Column, DateTime, ForeignKey, Integer, Numeric, String

from agroshop.data.database import Base


class OrderModel(Base):
    __tablename__ = "orders"

    id = Column(String, primary_key=True)
    user_id = Column(String, ForeignKey("users.uid"), nullable=False, index=True)

    # [{"productId", "quantity", "unitPrice"}] - cena zamrozona w chwili zamowienia
    items = Column(JSON, nullable=False, default=list)
    total = Column(Numeric(10, 2), nullable=False)
    status = Column(String, nullable=False, default="Procesare")  # Procesare, În curs de livrare, Expediată, Finalizată, Anulată
    created_at = Column(
        DateTime(timezone=True), nullable=False, default=lambda: datetime.now(timezone.utc), index=True
    )
    version = Column(Integer, nullable=False, default=1)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "userId": self.user_id,
            "items": [
                {
                    "productId": i["productId"],
                    "quantity": i["quantity"],
                    "unitPrice": Decimal(i["unitPrice"]),
                }
                for i in self.items or []
            ],
            "total": self.total,
            "status": self.status,
            "createdAt": self.created_at,
        }
