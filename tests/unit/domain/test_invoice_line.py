"""Unit tests for InvoiceLine item references and money helpers"""

import pytest
from decimal import Decimal
from pydantic import ValidationError
from src.domain.invoice_line import InvoiceLine, ItemRef, ItemType
from src.domain.money import has_at_most_two_places, line_total, quantize_money, sum_money


class TestItemRef:
    def test_service_reference(self):
        item = ItemRef(item_type=ItemType.SERVICE, item_id=3)

        assert item.service_id == 3
        assert item.product_id is None

    def test_product_reference(self):
        item = ItemRef(item_type="product", item_id=9)

        assert item.item_type == ItemType.PRODUCT
        assert item.product_id == 9
        assert item.service_id is None

    def test_rejects_non_positive_id(self):
        with pytest.raises(ValidationError):
            ItemRef(item_type=ItemType.SERVICE, item_id=0)

    def test_rejects_unknown_type(self):
        with pytest.raises(ValidationError):
            ItemRef(item_type="consultation", item_id=1)


class TestInvoiceLineItem:
    def _line(self, item):
        return InvoiceLine.for_item(
            item,
            description="Vaccine",
            quantity=Decimal("1"),
            unit_price=Decimal("25.00"),
            line_total=Decimal("25.00"),
            invoice_id=1,
        )

    def test_for_item_sets_exactly_one_key(self):
        line = self._line(ItemRef(item_type=ItemType.PRODUCT, item_id=9))

        assert line.item_type == ItemType.PRODUCT
        assert line.product_id == 9
        assert line.service_id is None
        assert line.item_ref == ItemRef(item_type=ItemType.PRODUCT, item_id=9)

    def test_assign_item_switches_kind(self):
        line = self._line(ItemRef(item_type=ItemType.PRODUCT, item_id=9))

        line.assign_item(ItemRef(item_type=ItemType.SERVICE, item_id=3))

        assert line.service_id == 3
        assert line.product_id is None
        assert line.item_ref.item_type == ItemType.SERVICE

    def test_item_ref_rejects_inconsistent_columns(self):
        line = self._line(ItemRef(item_type=ItemType.SERVICE, item_id=3))
        line.product_id = 9

        with pytest.raises(ValueError):
            line.item_ref


class TestMoney:
    def test_line_total_is_exact(self):
        assert line_total(Decimal("2"), Decimal("10.00")) == Decimal("20.00")
        assert line_total(Decimal("0.5"), Decimal("12.35")) == Decimal("6.18")

    def test_quantize_rounds_half_up(self):
        assert quantize_money(Decimal("0.125")) == Decimal("0.13")
        assert quantize_money(Decimal("0.124")) == Decimal("0.12")

    def test_two_places(self):
        assert has_at_most_two_places(Decimal("10.5"))
        assert has_at_most_two_places(Decimal("10.50"))
        assert not has_at_most_two_places(Decimal("10.505"))
        assert not has_at_most_two_places(Decimal("NaN"))

    def test_sum_money(self):
        assert sum_money([Decimal("20.00"), Decimal("25.00")]) == Decimal("45.00")
        assert sum_money([]) == Decimal("0.00")
