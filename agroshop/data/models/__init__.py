#import wszystkich modeli zeby SQLAlchemy je zarejestrowal w base metadata

from agroshop.data.models.category import CategoryModel
from agroshop.data.models.product import ProductModel
from agroshop.data.models.user import UserModel
from agroshop.data.models.order import OrderModel

__all__ = ["CategoryModel", "ProductModel", "UserModel", "OrderModel"]
