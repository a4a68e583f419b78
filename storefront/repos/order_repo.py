# storefront/repos/order_repo.py
from datetime import datetime, timezone

from sqlalchemy import func, or_, select, update
from sqlalchemy.orm import Session, selectinload

from storefront.data.models.order import OrderModel
from storefront.data.models.order_item import OrderItemModel


class OrderRepo:
    def __init__(self, db: Session):
        self.db = db

    def add_order(self, order: OrderModel) -> OrderModel:
        self.db.add(order)
        self.db.flush()
        return order

    def get_order(self, order_id: int) -> OrderModel | None:
        stmt = (
            select(OrderModel)
            .where(OrderModel.id == order_id)
            .options(selectinload(OrderModel.items), selectinload(OrderModel.delivery_slot))
            .execution_options(populate_existing=True)
        )
        return self.db.execute(stmt).scalar_one_or_none()

    def get_owner_id(self, order_id: int) -> int | None:
        return self.db.execute(
            select(OrderModel.user_id).where(OrderModel.id == order_id)
        ).scalar_one_or_none()

    def order_number_exists(self, order_number: str) -> bool:
        stmt = select(OrderModel.id).where(OrderModel.order_number == order_number)
        return self.db.execute(stmt).first() is not None

    def transition(
        self,
        order_id: int,
        from_statuses: list[str],
        to_status: str,
        payment_status: str | None = None,
    ) -> bool:
        """
        Guarded status change: UPDATE ... WHERE status IN (from_statuses).
        False means the order was not in an allowed predecessor state.
        """
        values = {"status": to_status, "updated_at": datetime.now(timezone.utc)}
        if payment_status is not None:
            values["payment_status"] = payment_status

        stmt = (
            update(OrderModel)
            .where(OrderModel.id == order_id, OrderModel.status.in_(from_statuses))
            .values(**values)
            .execution_options(synchronize_session=False)
        )
        return self.db.execute(stmt).rowcount == 1

    def list_for_user(
        self,
        user_id: int,
        status: str | None = None,
        search: str | None = None,
        page: int = 1,
        per_page: int = 10,
    ) -> tuple[list[OrderModel], int]:
        conditions = [OrderModel.user_id == user_id]
        if status:
            conditions.append(OrderModel.status == status)
        if search:
            pattern = f"%{search}%"
            matching_items = select(OrderItemModel.order_id).where(
                OrderItemModel.product_name.ilike(pattern)
            )
            conditions.append(
                or_(OrderModel.order_number.ilike(pattern), OrderModel.id.in_(matching_items))
            )

        total = self.db.execute(
            select(func.count()).select_from(OrderModel).where(*conditions)
        ).scalar_one()

        stmt = (
            select(OrderModel)
            .where(*conditions)
            .options(selectinload(OrderModel.items), selectinload(OrderModel.delivery_slot))
            .order_by(OrderModel.created_at.desc(), OrderModel.id.desc())
            .offset((page - 1) * per_page)
            .limit(per_page)
        )
        return list(self.db.execute(stmt).scalars().all()), total
