"""
Order schema rules: status enumeration, product references, timestamps, payment.
"""

import pytest
from bson import ObjectId

from order_store.errors import ValidationError
from order_store.models.order import Order, OrderStatus
from order_store.services.order_store import OrderStore


class TestSchemaValidation:
    """Shape and defaults of a newly created order."""

    def test_status_defaults_to_not_process(self, db):
        order = OrderStore.create_order(db, {})
        assert order.status == OrderStatus.NOT_PROCESS
        assert order.status.value == "Not Process"

    def test_accepts_valid_status(self, db):
        order = OrderStore.create_order(db, {"status": "Processing"})
        assert order.status == OrderStatus.PROCESSING

    @pytest.mark.parametrize("status", [s.value for s in OrderStatus])
    def test_accepts_every_enumerated_status(self, db, status):
        order = OrderStore.create_order(db, {"status": status})
        assert order.status.value == status

    def test_rejects_status_outside_enumeration(self, db):
        with pytest.raises(ValidationError, match="status"):
            OrderStore.create_order(db, {"status": "InTransit"})

    def test_status_matching_is_case_sensitive(self, db):
        with pytest.raises(ValidationError):
            OrderStore.create_order(db, {"status": "Delivered"})

    def test_explicit_null_status_is_rejected(self, db):
        with pytest.raises(ValidationError):
            OrderStore.create_order(db, {"status": None})

    def test_allows_empty_products(self, db):
        order = OrderStore.create_order(db, {"products": []})
        assert len(order.products) == 0

    def test_allows_one_product(self, db):
        order = OrderStore.create_order(db, {"products": [ObjectId()]})
        assert len(order.products) == 1

    def test_rejects_plain_string_product(self, db):
        with pytest.raises(ValidationError, match="products"):
            OrderStore.create_order(db, {"products": ["abc123"]})

    def test_rejects_non_string_product(self, db):
        with pytest.raises(ValidationError):
            OrderStore.create_order(db, {"products": [12345]})

    def test_products_keep_their_order(self, db):
        product_ids = [str(ObjectId()) for _ in range(4)]
        order = OrderStore.create_order(db, {"products": product_ids})
        assert order.products == product_ids

    def test_product_ids_are_normalised(self, db):
        product_id = ObjectId()
        order = OrderStore.create_order(db, {"products": [str(product_id).upper()]})
        assert order.products == [str(product_id)]

    def test_rejects_malformed_buyer(self, db):
        with pytest.raises(ValidationError, match="buyer"):
            OrderStore.create_order(db, {"buyer": "not-a-user"})

    def test_buyer_is_stored(self, db, buyer_id):
        order = OrderStore.create_order(db, {"buyer": buyer_id})
        assert order.buyer == buyer_id


class TestFunctionalBehavior:
    """Timestamps and verbatim payment storage."""

    def test_sets_created_and_updated_at(self, db):
        order = OrderStore.create_order(db, {})
        assert order.created_at is not None
        assert order.updated_at is not None
        assert order.created_at <= order.updated_at

    def test_client_timestamps_are_ignored(self, db):
        order = OrderStore.create_order(db, {"createdAt": "1999-01-01T00:00:00", "created_at": "1999-01-01T00:00:00"})
        assert order.created_at.year != 1999

    def test_preserves_payment_structure(self, db):
        order = OrderStore.create_order(db, {"payment": {"method": "card", "amount": 200}})
        assert order.payment == {"method": "card", "amount": 200}

    def test_preserves_nested_payment(self, db):
        payment = {"success": True, "transaction": {"amount": 49.99, "id": "txn_1"}, "errors": []}
        order = OrderStore.create_order(db, {"payment": payment})

        stored = OrderStore.get_order(db, order.id)
        assert stored.payment == payment

    def test_generated_id_is_an_object_id(self, db):
        order = OrderStore.create_order(db, {})
        assert ObjectId.is_valid(order.id)


class TestErrorHandling:
    """Nothing is persisted when validation fails."""

    def test_invalid_status_writes_nothing(self, db):
        with pytest.raises(ValidationError):
            OrderStore.create_order(db, {"status": "Invalid"})
        assert db.query(Order).count() == 0

    def test_invalid_product_writes_nothing(self, db):
        with pytest.raises(ValidationError):
            OrderStore.create_order(db, {"products": [str(ObjectId()), "not-an-objectid"]})
        assert db.query(Order).count() == 0

    def test_validation_error_lists_each_problem(self, db):
        with pytest.raises(ValidationError) as exc_info:
            OrderStore.create_order(db, {"status": "Invalid", "products": ["abc123"]})

        locations = {error["loc"][0] for error in exc_info.value.errors}
        assert locations == {"status", "products"}

    def test_validation_error_is_a_value_error(self, db):
        with pytest.raises(ValueError):
            OrderStore.create_order(db, {"status": "Invalid"})
