"""Unit tests for StockValidator with a mocked repository."""

from __future__ import annotations

from dataclasses import dataclass, field
from unittest.mock import MagicMock
from uuid import UUID, uuid4

import pytest

from modules.products.exceptions import InsufficientStock
from modules.products.stock import StockValidator

pytestmark = pytest.mark.unit


@dataclass
class StubProduct:
    name: str
    stock_quantity: int
    id: UUID = field(default_factory=uuid4)


@pytest.fixture()
def repo():
    return MagicMock()


@pytest.fixture()
def validator(repo):
    return StockValidator(repo)


class TestCheckAvailability:
    def test_exact_stock_is_enough(self, validator):
        validator.check_availability(StubProduct("Tee", 3), 3)

    def test_more_than_stock_raises_with_details(self, validator):
        with pytest.raises(InsufficientStock) as exc_info:
            validator.check_availability(StubProduct("Linen Shirt", 2), 3)

        exc = exc_info.value
        assert exc.product_name == "Linen Shirt"
        assert exc.available == 2
        assert exc.requested == 3
        assert str(exc) == '"Linen Shirt" only has 2 units left in stock.'


class TestDeduct:
    def test_successful_conditional_update(self, validator, repo):
        product_id = uuid4()
        repo.decrement_stock.return_value = True

        validator.deduct(product_id, 2)

        repo.decrement_stock.assert_called_once_with(product_id, 2)

    def test_rejected_update_reports_fresh_availability(self, validator, repo):
        product_id = uuid4()
        repo.decrement_stock.return_value = False
        repo.get_stock.return_value = 1

        with pytest.raises(InsufficientStock) as exc_info:
            validator.deduct(product_id, 2, product_name="Crew Tee")

        assert exc_info.value.available == 1
        assert exc_info.value.product_name == "Crew Tee"
        repo.get_by_id.assert_not_called()

    def test_rejected_update_looks_up_the_name(self, validator, repo):
        repo.decrement_stock.return_value = False
        repo.get_stock.return_value = 0
        repo.get_by_id.return_value = StubProduct("Beanie", 0)

        with pytest.raises(InsufficientStock, match="Beanie"):
            validator.deduct(uuid4(), 1)

    @pytest.mark.parametrize("quantity", [0, -1])
    def test_non_positive_quantity(self, validator, repo, quantity):
        with pytest.raises(ValueError):
            validator.deduct(uuid4(), quantity)
        repo.decrement_stock.assert_not_called()


class TestRestore:
    def test_increments(self, validator, repo):
        product_id = uuid4()
        validator.restore(product_id, 4)
        repo.increment_stock.assert_called_once_with(product_id, 4)

    def test_non_positive_quantity(self, validator):
        with pytest.raises(ValueError):
            validator.restore(uuid4(), 0)
