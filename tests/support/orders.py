"""Order domain used across the test suite."""

from enum import Enum

from sqlalchemy import Column, ForeignKey, Integer, MetaData, String, Table, Text

from ddd_foundation.domain.shared.error import ValidationError
from ddd_foundation.domain.shared.event import DomainEvent
from ddd_foundation.domain.shared.model.aggregate import AggregateRoot
from ddd_foundation.domain.shared.model.change import ChangeSet
from ddd_foundation.domain.shared.model.entity import Entity
from ddd_foundation.domain.shared.model.value import Identifier
from ddd_foundation.domain.shared.port.record_store import PersistedRecord
from ddd_foundation.infrastructure.persistence.mappers.base import EntityMapper
from ddd_foundation.infrastructure.persistence.repository.base import Repository
from ddd_foundation.infrastructure.persistence.tables import entity_table


class OrderId(Identifier): ...


class OrderLineId(Identifier): ...


class OrderStatus(str, Enum):
    DRAFT = "draft"
    PLACED = "placed"


class OrderPlaced(DomainEvent):
    @classmethod
    def event_name(cls) -> str:
        return "order.placed"


class OrderCustomerChanged(DomainEvent):
    @classmethod
    def event_name(cls) -> str:
        return "order.customer_changed"


class Order(AggregateRoot):
    id: OrderId
    customer: str
    status: OrderStatus = OrderStatus.DRAFT
    note: str | None = None

    @classmethod
    def create(cls, customer: str, id: OrderId | None = None) -> "Order":
        return cls(id=id or OrderId.generate(), customer=customer)

    def place(self) -> None:
        self._update_aggregate(
            {"status": OrderStatus.PLACED},
            OrderPlaced(aggregate_id=self.id, event_data={"customer": self.customer}),
        )

    def change_customer(self, customer: str) -> None:
        if not customer:
            raise ValidationError("customer must not be empty", field="customer")
        self._update_aggregate(
            {"customer": customer},
            OrderCustomerChanged(
                aggregate_id=self.id, event_data={"from": self.customer, "to": customer}
            ),
        )

    def annotate(self, note: str | None) -> None:
        self._update_entity({"note": note})

    def apply_changes(self, changes: ChangeSet) -> None:
        self._apply_changes_by_setter_map(
            {
                "customer": lambda v: setattr(self, "customer", v),
                "status": lambda v: setattr(self, "status", v),
                "note": lambda v: setattr(self, "note", v),
            },
            changes,
        )


class OrderLine(Entity):
    id: OrderLineId
    order_id: OrderId
    sku: str
    quantity: int = 1

    def change_quantity(self, quantity: int) -> None:
        if quantity < 1:
            raise ValidationError("quantity must be positive", field="quantity")
        self._update_entity({"quantity": quantity})

    def apply_changes(self, changes: ChangeSet) -> None:
        if changes.has("quantity"):
            self.quantity = changes.new_value("quantity")


class OrderMapper(EntityMapper[Order]):
    entity_type = Order

    def to_entity(self, record: PersistedRecord, deep: bool = False) -> Order:
        order = Order(
            id=OrderId(record.id),
            customer=record["customer"],
            status=OrderStatus(record["status"]),
            note=record.get("note"),
        )
        return self._hydrated(order, record)

    def to_model(self, order: Order) -> PersistedRecord:
        return self._find_or_create_record(
            order,
            {"customer": order.customer, "status": order.status.value, "note": order.note},
        )


class OrderLineMapper(EntityMapper[OrderLine]):
    entity_type = OrderLine

    def to_entity(self, record: PersistedRecord, deep: bool = False) -> OrderLine:
        line = OrderLine(
            id=OrderLineId(record.id),
            order_id=OrderId(record["order_id"]),
            sku=record["sku"],
            quantity=record["quantity"],
        )
        return self._hydrated(line, record)

    def to_model(self, line: OrderLine) -> PersistedRecord:
        return self._find_or_create_record(
            line,
            {"order_id": str(line.order_id), "sku": line.sku, "quantity": line.quantity},
        )


class OrderRepository(Repository[Order]):
    aggregate = Order


def build_tables(meta: MetaData) -> tuple[Table, Table]:
    orders = entity_table(
        "orders",
        meta,
        Column("customer", String(255), nullable=False),
        Column("status", String(32), nullable=False),
        Column("note", Text, nullable=True),
    )
    order_lines = entity_table(
        "order_lines",
        meta,
        Column("order_id", String(64), ForeignKey("orders.id"), nullable=False),
        Column("sku", String(64), nullable=False),
        Column("quantity", Integer, nullable=False),
    )
    return orders, order_lines
