"""Invoice API Routes

FastAPI routes for invoices, their line synchronization and their payments.
"""

from typing import Optional
from fastapi import APIRouter, Depends, Query, Request, status
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.api.auth import (
    ADMIN_ROLES,
    STAFF_ROLES,
    ensure_can_read_client,
    get_caller,
    has_staff_access,
    require_roles,
)
from src.api.error import ClientError
from src.api.schemas.billing_request import (
    InvoiceRequestSchema,
    InvoiceUpdateRequestSchema,
    PaymentRequestSchema,
)
from src.app.use_cases.billing.dtos import (
    CallerContext,
    CreateInvoiceCommandDTO,
    InvoiceLineSpecDTO,
    InvoiceResponseDTO,
    ListInvoicesResponseDTO,
    ListPaymentsResponseDTO,
    PaymentLedgerResponseDTO,
    RecordPaymentCommandDTO,
    UpdateInvoiceCommandDTO,
)
from src.app.use_cases.billing.create_invoice import CreateInvoice
from src.app.use_cases.billing.update_invoice import UpdateInvoice
from src.app.use_cases.billing.delete_invoice import DeleteInvoice
from src.app.use_cases.billing.get_invoice import GetInvoice
from src.app.use_cases.billing.list_invoices import ListInvoices
from src.app.use_cases.billing.item_resolver import ItemResolver
from src.app.use_cases.billing.line_synchronizer import InvoiceLineSynchronizer
from src.app.use_cases.billing.list_payments import ListPayments
from src.app.use_cases.billing.record_payment import RecordPayment
from src.adapter.repositories.catalog_repository import SqlAlchemyCatalogRepository
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_line_repository import SqlAlchemyInvoiceLineRepository
from src.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session
from src.domain.invoice import InvoiceStatus

router = APIRouter(prefix="/billing/invoices", tags=["Invoices"])

CONFLICT_EXAMPLE = {
    409: {
        "description": "Invoice state forbids the operation",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVOICE_LOCKED",
                        "message": "Invoice 1 is paid and can no longer be edited"
                    }
                }
            }
        }
    },
    404: {
        "description": "Invoice, service or product not found",
        "content": {
            "application/json": {
                "example": {
                    "error": {
                        "code": "INVOICE_NOT_FOUND",
                        "message": "Invoice 123 not found"
                    }
                }
            }
        }
    }
}


def _line_specs(lines: list) -> list:
    return [
        InvoiceLineSpecDTO(
            id=line.id,
            item_type=line.item_type,
            item_id=line.item_id,
            quantity=line.quantity,
            unit_price=line.unit_price,
        )
        for line in lines
    ]


def _line_synchronizer(session: AsyncSession) -> InvoiceLineSynchronizer:
    return InvoiceLineSynchronizer(ItemResolver(SqlAlchemyCatalogRepository(session)))


async def _get_invoice(session: AsyncSession, invoice_id: int) -> InvoiceResponseDTO:
    use_case = GetInvoice(
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlAlchemyPaymentRepository(session),
    )
    result = await use_case.execute(invoice_id)
    if result.is_err():
        raise ClientError(result.error)
    return result.value


@router.get("", response_model=ListInvoicesResponseDTO)
async def list_invoices(
    request: Request,
    client_id: Optional[int] = Query(default=None, description="Filter by client"),
    invoice_status: Optional[InvoiceStatus] = Query(default=None, alias="status"),
    limit: int = Query(default=ApplicationConfig.DEFAULT_PAGE_SIZE, ge=1, le=ApplicationConfig.MAX_PAGE_SIZE),
    offset: int = Query(default=0, ge=0),
    caller: CallerContext = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    List invoices, newest issue date first.

    Clients only ever see their own invoices; the client filter is forced
    to the caller's contact.
    """
    if not has_staff_access(request, caller):
        if caller.contact_id is None:
            raise ClientError(
                Error(code="FORBIDDEN", message="Caller is not linked to a client record"),
                status_code=status.HTTP_403_FORBIDDEN,
            )
        client_id = caller.contact_id

    use_case = ListInvoices(
        SqlAlchemyInvoiceRepository(session), SqlAlchemyPaymentRepository(session)
    )
    result = await use_case.execute(
        client_id=client_id, status=invoice_status, limit=limit, offset=offset
    )

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.get("/{invoice_id}", response_model=InvoiceResponseDTO, responses=CONFLICT_EXAMPLE)
async def get_invoice(
    invoice_id: int,
    request: Request,
    caller: CallerContext = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    Retrieve an invoice with its lines and the amount paid so far.
    """
    invoice = await _get_invoice(session, invoice_id)
    ensure_can_read_client(request, caller, invoice.client_id)
    return invoice


@router.post(
    "",
    response_model=InvoiceResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses=CONFLICT_EXAMPLE,
)
async def create_invoice(
    request: InvoiceRequestSchema,
    caller: CallerContext = Depends(require_roles(*STAFF_ROLES)),
    session: AsyncSession = Depends(get_session),
):
    """
    Create an invoice with its lines.

    **Example request:**
    ```json
    {
      "client_id": 42,
      "issue_date": "2025-03-01",
      "due_date": "2025-03-31",
      "lines": [
        {"item_type": "service", "item_id": 3, "quantity": "2", "unit_price": "10.00"},
        {"item_type": "product", "item_id": 9, "quantity": "1", "unit_price": "25.00"}
      ]
    }
    ```

    **Returns:**
    - 201: Invoice created (total 45.00 for the example)
    - 400: Invalid dates, status or line
    - 404: Unknown service or product
    - 409: Invoice number already in use
    """
    command = CreateInvoiceCommandDTO(
        client_id=request.client_id,
        consultation_id=request.consultation_id,
        invoice_number=request.invoice_number,
        issue_date=request.issue_date,
        due_date=request.due_date,
        status=request.status,
        lines=_line_specs(request.lines),
    )

    use_case = CreateInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        _line_synchronizer(session),
        invoice_number_prefix=ApplicationConfig.INVOICE_NUMBER_PREFIX,
    )
    result = await use_case.execute(command, caller)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.put("/{invoice_id}", response_model=InvoiceResponseDTO, responses=CONFLICT_EXAMPLE)
async def update_invoice(
    invoice_id: int,
    request: InvoiceUpdateRequestSchema,
    caller: CallerContext = Depends(require_roles(*STAFF_ROLES)),
    session: AsyncSession = Depends(get_session),
):
    """
    Replace an invoice header and its complete line set.

    Lines with an `id` are updated, lines without one are added, and
    existing lines missing from the request are removed.

    **Returns:**
    - 200: Invoice updated
    - 400: Invalid dates, status transition or line
    - 404: Invoice, service or product not found
    - 409: Invoice paid/void, number in use, or modified concurrently
    """
    command = UpdateInvoiceCommandDTO(
        invoice_id=invoice_id,
        client_id=request.client_id,
        consultation_id=request.consultation_id,
        invoice_number=request.invoice_number,
        issue_date=request.issue_date,
        due_date=request.due_date,
        status=request.status,
        lines=_line_specs(request.lines),
        version=request.version,
    )

    use_case = UpdateInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlAlchemyPaymentRepository(session),
        _line_synchronizer(session),
    )
    result = await use_case.execute(command, caller)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.delete(
    "/{invoice_id}",
    status_code=status.HTTP_204_NO_CONTENT,
    responses=CONFLICT_EXAMPLE,
)
async def delete_invoice(
    invoice_id: int,
    caller: CallerContext = Depends(require_roles(*ADMIN_ROLES)),
    session: AsyncSession = Depends(get_session),
):
    """
    Delete an invoice that is not paid and has no payments.
    """
    use_case = DeleteInvoice(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyInvoiceLineRepository(session),
        SqlAlchemyPaymentRepository(session),
    )
    result = await use_case.execute(invoice_id, caller)

    if result.is_err():
        raise ClientError(result.error)


@router.get("/{invoice_id}/payments", response_model=ListPaymentsResponseDTO)
async def list_invoice_payments(
    invoice_id: int,
    request: Request,
    caller: CallerContext = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    """
    List the payments of an invoice, oldest first.
    """
    if not has_staff_access(request, caller):
        invoice = await _get_invoice(session, invoice_id)
        ensure_can_read_client(request, caller, invoice.client_id)

    use_case = ListPayments(
        SqlAlchemyInvoiceRepository(session), SqlAlchemyPaymentRepository(session)
    )
    result = await use_case.execute(invoice_id)

    if result.is_err():
        raise ClientError(result.error)

    return result.value


@router.post(
    "/{invoice_id}/payments",
    response_model=PaymentLedgerResponseDTO,
    status_code=status.HTTP_201_CREATED,
    responses={
        409: {
            "description": "Invoice is void",
            "content": {
                "application/json": {
                    "example": {
                        "error": {
                            "code": "INVOICE_VOID",
                            "message": "Invoice INV-2025-000001 is void and accepts no payments"
                        }
                    }
                }
            }
        }
    }
)
async def record_payment(
    invoice_id: int,
    request: PaymentRequestSchema,
    caller: CallerContext = Depends(require_roles(*STAFF_ROLES)),
    session: AsyncSession = Depends(get_session),
):
    """
    Record a payment against an invoice.

    Partial payments leave the invoice sent; reaching the total marks it
    paid. Overpayments are accepted.

    **Example request:**
    ```json
    {"amount": "45.00", "method": "card", "transaction_id": "txn_8f2a91"}
    ```
    """
    command = RecordPaymentCommandDTO(
        invoice_id=invoice_id,
        amount=request.amount,
        payment_date=request.payment_date,
        method=request.method,
        transaction_id=request.transaction_id,
    )

    use_case = RecordPayment(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentRepository(session),
    )
    result = await use_case.execute(command, caller)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
