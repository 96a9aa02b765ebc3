# agroshop/repos/order_repo.py
from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.orm import Session

from agroshop.data.models.order import OrderModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def get_order(self, order_id: str) -> OrderModel | None:
        return self.db.get(OrderModel, order_id)

    def count_orders(self, since: datetime | None = None) -> int:
        stmt = select(func.count()).select_from(OrderModel)
        if since is not None:
            stmt = stmt.where(OrderModel.created_at >= since)
        return self.db.execute(stmt).scalar_one()

    def list_orders(self, offset: int, limit: int, since: datetime | None = None) -> list[OrderModel]:
        stmt = select(OrderModel).order_by(OrderModel.created_at.desc(), OrderModel.id)
        if since is not None:
            stmt = stmt.where(OrderModel.created_at >= since)
        return list(self.db.execute(stmt.offset(offset).limit(limit)).scalars().all())
