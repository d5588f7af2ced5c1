"""API tests for the billing routes

Drives the FastAPI app over httpx against the in-memory SQLite catalog.
"""

import pytest
from decimal import Decimal

INVOICE_PAYLOAD = {
    "client_id": 42,
    "consultation_id": 7,
    "issue_date": "2025-03-01",
    "due_date": "2025-03-31",
    "lines": [
        {"item_type": "service", "item_id": 3, "quantity": "2", "unit_price": "10.00"},
        {"item_type": "product", "item_id": 9, "quantity": "1", "unit_price": "25.00"},
    ],
}


async def create_invoice(client, headers, **overrides):
    payload = {**INVOICE_PAYLOAD, **overrides}
    response = await client.post("/billing/invoices", json=payload, headers=headers)
    assert response.status_code == 201, response.text
    return response.json()


def update_payload(invoice, **overrides):
    payload = {
        "client_id": invoice["client_id"],
        "consultation_id": invoice["consultation_id"],
        "invoice_number": invoice["invoice_number"],
        "issue_date": invoice["issue_date"],
        "due_date": invoice["due_date"],
        "status": invoice["status"],
        "version": invoice["version"],
        "lines": [
            {
                "id": line["line_id"],
                "item_type": line["item_type"],
                "item_id": line["item_id"],
                "quantity": str(line["quantity"]),
                "unit_price": str(line["unit_price"]),
            }
            for line in invoice["lines"]
        ],
    }
    payload.update(overrides)
    return payload


@pytest.mark.asyncio
class TestPriceRuleEndpoints:
    async def test_resolve_price_for_dog_and_cat(self, client, catalog, staff_headers):
        dog = await client.get(
            "/billing/price-rules/resolve",
            params={"service_id": 3, "species_id": 1, "weight_kg": "15"},
            headers=staff_headers,
        )
        cat = await client.get(
            "/billing/price-rules/resolve",
            params={"service_id": 3, "species_id": 2, "weight_kg": "15"},
            headers=staff_headers,
        )

        assert dog.status_code == 200
        assert Decimal(str(dog.json()["amount"])) == Decimal("240.00")
        assert Decimal(str(cat.json()["amount"])) == Decimal("45.00")

    async def test_resolve_price_unknown_service(self, client, catalog, staff_headers):
        response = await client.get(
            "/billing/price-rules/resolve", params={"service_id": 999}, headers=staff_headers
        )

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "SERVICE_NOT_FOUND"

    async def test_price_rule_crud(self, client, catalog, staff_headers, admin_headers):
        created = await client.post(
            "/billing/price-rules",
            json={
                "service_id": 3,
                "species_id": 2,
                "weight_max_kg": "5.00",
                "amount": "35.00",
            },
            headers=staff_headers,
        )
        assert created.status_code == 201
        rule = created.json()
        assert rule["currency"] == "EUR"

        updated = await client.put(
            f"/billing/price-rules/{rule['price_rule_id']}",
            json={"service_id": 3, "species_id": 2, "weight_max_kg": "5.00", "amount": "38.50"},
            headers=staff_headers,
        )
        assert updated.status_code == 200
        assert Decimal(str(updated.json()["amount"])) == Decimal("38.50")

        listing = await client.get(
            "/billing/price-rules", params={"service_id": 3}, headers=staff_headers
        )
        assert len(listing.json()["price_rules"]) == 3

        forbidden = await client.delete(
            f"/billing/price-rules/{rule['price_rule_id']}", headers=staff_headers
        )
        assert forbidden.status_code == 403

        deleted = await client.delete(
            f"/billing/price-rules/{rule['price_rule_id']}", headers=admin_headers
        )
        assert deleted.status_code == 204

        missing = await client.get(
            f"/billing/price-rules/{rule['price_rule_id']}", headers=staff_headers
        )
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "PRICE_RULE_NOT_FOUND"

    async def test_inverted_weight_range_rejected(self, client, catalog, staff_headers):
        response = await client.post(
            "/billing/price-rules",
            json={"service_id": 3, "weight_min_kg": "20", "weight_max_kg": "10", "amount": "50.00"},
            headers=staff_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_WEIGHT_RANGE"


@pytest.mark.asyncio
class TestInvoiceEndpoints:
    async def test_create_invoice(self, client, catalog, staff_headers):
        invoice = await create_invoice(client, staff_headers)

        assert Decimal(str(invoice["total_amount"])) == Decimal("45.00")
        assert Decimal(str(invoice["amount_paid"])) == Decimal("0")
        assert invoice["status"] == "draft"
        assert [line["description"] for line in invoice["lines"]] == ["Consultation", "Vaccine"]

    async def test_create_invoice_unknown_product(self, client, catalog, staff_headers):
        response = await client.post(
            "/billing/invoices",
            json={
                **INVOICE_PAYLOAD,
                "lines": [{"item_type": "product", "item_id": 404, "quantity": "1"}],
            },
            headers=staff_headers,
        )

        assert response.status_code == 404
        assert response.json() == {
            "error": {"code": "PRODUCT_NOT_FOUND", "message": "Product 404 not found"}
        }

    async def test_create_invoice_bad_dates(self, client, catalog, staff_headers):
        response = await client.post(
            "/billing/invoices",
            json={**INVOICE_PAYLOAD, "due_date": "2025-02-01"},
            headers=staff_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_DUE_DATE"

    async def test_malformed_body_uses_error_envelope(self, client, catalog, staff_headers):
        response = await client.post(
            "/billing/invoices", json={"client_id": "abc"}, headers=staff_headers
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "VALIDATION_ERROR"

    async def test_duplicate_invoice_number(self, client, catalog, staff_headers):
        await create_invoice(client, staff_headers, invoice_number="CLINIC-1")

        response = await client.post(
            "/billing/invoices",
            json={**INVOICE_PAYLOAD, "invoice_number": "CLINIC-1"},
            headers=staff_headers,
        )

        assert response.status_code == 409
        assert response.json()["error"]["code"] == "DUPLICATE_INVOICE_NUMBER"

    async def test_update_replaces_lines(self, client, catalog, staff_headers):
        invoice = await create_invoice(client, staff_headers)
        payload = update_payload(invoice, status="sent")
        payload["lines"] = payload["lines"][:1]

        response = await client.put(
            f"/billing/invoices/{invoice['invoice_id']}", json=payload, headers=staff_headers
        )

        assert response.status_code == 200
        body = response.json()
        assert body["status"] == "sent"
        assert Decimal(str(body["total_amount"])) == Decimal("20.00")
        assert [line["line_id"] for line in body["lines"]] == [invoice["lines"][0]["line_id"]]
        assert body["version"] == invoice["version"] + 1

    async def test_stale_update_rejected(self, client, catalog, staff_headers):
        invoice = await create_invoice(client, staff_headers)
        first = await client.put(
            f"/billing/invoices/{invoice['invoice_id']}",
            json=update_payload(invoice),
            headers=staff_headers,
        )
        assert first.status_code == 200

        stale = await client.put(
            f"/billing/invoices/{invoice['invoice_id']}",
            json=update_payload(invoice),
            headers=staff_headers,
        )

        assert stale.status_code == 409
        assert stale.json()["error"]["code"] == "STALE_INVOICE"

    async def test_list_invoices_by_client(self, client, catalog, staff_headers):
        await create_invoice(client, staff_headers)
        await create_invoice(client, staff_headers, client_id=43)

        response = await client.get(
            "/billing/invoices", params={"client_id": 42}, headers=staff_headers
        )

        assert response.status_code == 200
        invoices = response.json()["invoices"]
        assert len(invoices) == 1
        assert invoices[0]["client_id"] == 42

    async def test_delete_invoice(self, client, catalog, staff_headers, admin_headers):
        invoice = await create_invoice(client, staff_headers)

        response = await client.delete(
            f"/billing/invoices/{invoice['invoice_id']}", headers=admin_headers
        )
        missing = await client.get(
            f"/billing/invoices/{invoice['invoice_id']}", headers=staff_headers
        )

        assert response.status_code == 204
        assert missing.status_code == 404
        assert missing.json()["error"]["code"] == "INVOICE_NOT_FOUND"


@pytest.mark.asyncio
class TestPaymentEndpoints:
    async def test_payment_marks_invoice_paid_and_locks_it(
        self, client, catalog, staff_headers, admin_headers
    ):
        invoice = await create_invoice(client, staff_headers)

        paid = await client.post(
            f"/billing/invoices/{invoice['invoice_id']}/payments",
            json={"amount": "45.00", "method": "card", "transaction_id": "txn_1"},
            headers=staff_headers,
        )
        assert paid.status_code == 201
        assert paid.json()["invoice_status"] == "paid"

        locked = await client.put(
            f"/billing/invoices/{invoice['invoice_id']}",
            json=update_payload(invoice, status="paid", version=None),
            headers=staff_headers,
        )
        assert locked.status_code == 409
        assert locked.json()["error"]["code"] == "INVOICE_LOCKED"

        blocked = await client.delete(
            f"/billing/invoices/{invoice['invoice_id']}", headers=admin_headers
        )
        assert blocked.status_code == 409

    async def test_doctor_reverses_payment(self, client, catalog, staff_headers):
        invoice = await create_invoice(client, staff_headers, status="sent")
        paid = await client.post(
            f"/billing/invoices/{invoice['invoice_id']}/payments",
            json={"amount": "50.00", "method": "cash"},
            headers=staff_headers,
        )
        payment_id = paid.json()["payment"]["payment_id"]

        fetched = await client.get(f"/billing/payments/{payment_id}", headers=staff_headers)
        assert fetched.status_code == 200
        assert Decimal(str(fetched.json()["amount"])) == Decimal("50.00")

        owner = {"X-User-Id": "owner-42", "X-User-Roles": "client", "X-Contact-Id": "42"}
        forbidden = await client.delete(f"/billing/payments/{payment_id}", headers=owner)
        assert forbidden.status_code == 403

        reversed_ = await client.delete(f"/billing/payments/{payment_id}", headers=staff_headers)
        assert reversed_.status_code == 200
        assert reversed_.json()["invoice_status"] == "sent"

        payments = await client.get(
            f"/billing/invoices/{invoice['invoice_id']}/payments", headers=staff_headers
        )
        assert payments.json()["payments"] == []

    async def test_payment_date_with_offset_is_stored_as_utc(self, client, catalog, staff_headers):
        invoice = await create_invoice(client, staff_headers)

        paid = await client.post(
            f"/billing/invoices/{invoice['invoice_id']}/payments",
            json={"amount": "45.00", "method": "card", "payment_date": "2025-03-05T23:30:00+05:00"},
            headers=staff_headers,
        )
        fetched = await client.get(
            f"/billing/payments/{paid.json()['payment']['payment_id']}", headers=staff_headers
        )

        assert paid.status_code == 201
        assert fetched.json()["payment_date"] == "2025-03-05T18:30:00"

    async def test_non_positive_payment_rejected(self, client, catalog, staff_headers):
        invoice = await create_invoice(client, staff_headers)

        response = await client.post(
            f"/billing/invoices/{invoice['invoice_id']}/payments",
            json={"amount": "0", "method": "card"},
            headers=staff_headers,
        )

        assert response.status_code == 400
        assert response.json()["error"]["code"] == "INVALID_PAYMENT_AMOUNT"

    async def test_unknown_payment(self, client, catalog, staff_headers):
        response = await client.get("/billing/payments/999", headers=staff_headers)

        assert response.status_code == 404
        assert response.json()["error"]["code"] == "PAYMENT_NOT_FOUND"


@pytest.mark.asyncio
class TestAccessControl:
    async def test_missing_identity(self, client, catalog):
        response = await client.get("/billing/invoices")

        assert response.status_code == 401
        assert response.json()["error"]["code"] == "UNAUTHENTICATED"

    async def test_client_cannot_create_invoice(self, client, catalog):
        response = await client.post(
            "/billing/invoices",
            json=INVOICE_PAYLOAD,
            headers={"X-User-Id": "owner-42", "X-User-Roles": "client", "X-Contact-Id": "42"},
        )

        assert response.status_code == 403
        assert response.json()["error"]["code"] == "FORBIDDEN"

    async def test_client_reads_only_own_invoices(self, client, catalog, staff_headers):
        own = await create_invoice(client, staff_headers)
        other = await create_invoice(client, staff_headers, client_id=43)
        owner = {"X-User-Id": "owner-42", "X-User-Roles": "client", "X-Contact-Id": "42"}

        own_response = await client.get(f"/billing/invoices/{own['invoice_id']}", headers=owner)
        other_response = await client.get(f"/billing/invoices/{other['invoice_id']}", headers=owner)
        listing = await client.get("/billing/invoices", params={"client_id": 43}, headers=owner)

        assert own_response.status_code == 200
        assert other_response.status_code == 403
        assert [invoice["client_id"] for invoice in listing.json()["invoices"]] == [42]
