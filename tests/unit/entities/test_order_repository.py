from decimal import Decimal

import pytest

from src.greenhouse.core.errors import DuplicatePaymentError
from src.greenhouse.entities.service.order import Order, OrderRepository, OrderStatus
from src.greenhouse.entities.service.plant import PlantRepository, Seller


@pytest.fixture
def plant(session, plant_factory):
    created = PlantRepository(session).create(plant_factory())
    session.commit()
    return created


class TestOrderSnapshot:
    def test_snapshot_copies_plant_details(self, plant):
        order = Order.snapshot(
            plant, transaction_id="pi_1", customer="buyer@example.com", price=Decimal("25.00")
        )
        assert order.plant_id == plant.id
        assert order.seller == plant.seller
        assert order.name == plant.name
        assert order.category == plant.category
        assert order.image == plant.image
        assert order.quantity == 1
        assert order.status is OrderStatus.PENDING

    def test_json_shape(self, plant):
        order = Order.snapshot(
            plant, transaction_id="pi_1", customer="buyer@example.com", price=Decimal("25.00")
        )
        body = order.model_dump(mode="json", by_alias=True)
        assert body["plantId"] == plant.id
        assert body["transactionId"] == "pi_1"
        assert body["price"] == 25.0
        assert body["status"] == "pending"


class TestOrderRepository:
    def _order(self, plant, transaction_id: str, customer: str = "buyer@example.com") -> Order:
        return Order.snapshot(
            plant, transaction_id=transaction_id, customer=customer, price=plant.price
        )

    def test_create_and_lookup_by_transaction(self, session, plant):
        repo = OrderRepository(session)
        created = repo.create(self._order(plant, "pi_1"))
        session.commit()

        assert repo.get_by_transaction_id("pi_1") == created
        assert repo.get_by_transaction_id("pi_2") is None

    def test_duplicate_transaction_rejected(self, session, plant):
        repo = OrderRepository(session)
        repo.create(self._order(plant, "pi_1"))
        session.commit()

        with pytest.raises(DuplicatePaymentError) as exc_info:
            repo.create(self._order(plant, "pi_1", customer="other@example.com"))
        session.rollback()

        assert exc_info.value.transaction_id == "pi_1"
        assert len(repo.list_by_seller(plant.seller.email)) == 1

    def test_list_by_customer(self, session, plant):
        repo = OrderRepository(session)
        repo.create(self._order(plant, "pi_1", customer="a@example.com"))
        repo.create(self._order(plant, "pi_2", customer="b@example.com"))
        repo.create(self._order(plant, "pi_3", customer="a@example.com"))
        session.commit()

        orders = repo.list_by_customer("a@example.com")
        assert [o.transaction_id for o in orders] == ["pi_1", "pi_3"]
        assert all(o.customer == "a@example.com" for o in orders)
        assert repo.list_by_customer("nobody@example.com") == []

    def test_list_by_seller(self, session, plant, plant_factory):
        other_plant = PlantRepository(session).create(
            plant_factory(seller=Seller(name="Olga", email="olga@example.com"))
        )
        repo = OrderRepository(session)
        repo.create(self._order(plant, "pi_1"))
        repo.create(self._order(other_plant, "pi_2"))
        session.commit()

        assert [o.transaction_id for o in repo.list_by_seller("olga@example.com")] == ["pi_2"]

    def test_emails_are_matched_case_insensitively(self, session, plant):
        repo = OrderRepository(session)
        repo.create(self._order(plant, "pi_1", customer="Ann.Lee@Example.COM"))
        session.commit()

        (order,) = repo.list_by_customer("ann.lee@example.com")
        assert order.customer == "ann.lee@example.com"
        assert len(repo.list_by_customer(" ANN.LEE@example.com")) == 1
        assert len(repo.list_by_seller(plant.seller.email.upper())) == 1
