from decimal import Decimal

from sqlalchemy import Column, Integer, Numeric, String

from agroshop.data.database import Base


class ProductModel(Base):
    __tablename__ = "products"

    id = Column(String, primary_key=True)
    name = Column(String, nullable=False, default="")
    price = Column(Numeric(10, 2), nullable=False, default=Decimal("0.00"))
    quantity = Column(Integer, nullable=False, default=0)
    mass = Column(String, nullable=True)
    type = Column(Integer, nullable=False, default=0)  # id kategorii
    image_url = Column(String, nullable=False, default="")

    version = Column(Integer, nullable=False, default=1)

    def to_dict(self) -> dict:
        return {
            "id": self.id,
            "name": self.name,
            "price": self.price,
            "quantity": self.quantity,
            "mass": self.mass,
            "type": self.type,
            "imageUrl": self.image_url,
        }
