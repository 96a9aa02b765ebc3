from sqlalchemy import Column, Integer, String

from agroshop.data.database import Base


class CategoryModel(Base):
    __tablename__ = "categories"

    # id kategorii = ProductModel.type
    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    image_url = Column(String, nullable=False, default="")

    def to_dict(self) -> dict:
        return {"id": self.id, "name": self.name, "imageUrl": self.image_url}
