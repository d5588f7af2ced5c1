"""Payment API Routes

FastAPI routes for single payments.
"""

from fastapi import APIRouter, Depends, Request
from sqlmodel.ext.asyncio.session import AsyncSession

from src.api.auth import STAFF_ROLES, ensure_can_read_client, get_caller, has_staff_access, require_roles
from src.api.error import ClientError
from src.app.use_cases.billing.dtos import (
    CallerContext,
    PaymentLedgerResponseDTO,
    PaymentResponseDTO,
)
from src.app.use_cases.billing.get_invoice import GetInvoice
from src.app.use_cases.billing.list_payments import GetPayment
from src.app.use_cases.billing.reverse_payment import ReversePayment
from src.adapter.repositories.invoice_repository import SqlAlchemyInvoiceRepository
from src.adapter.repositories.invoice_line_repository import SqlAlchemyInvoiceLineRepository
from src.adapter.repositories.payment_repository import SqlAlchemyPaymentRepository
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.depends import get_session

router = APIRouter(prefix="/billing/payments", tags=["Payments"])


@router.get("/{payment_id}", response_model=PaymentResponseDTO)
async def get_payment(
    payment_id: int,
    request: Request,
    caller: CallerContext = Depends(get_caller),
    session: AsyncSession = Depends(get_session),
):
    result = await GetPayment(SqlAlchemyPaymentRepository(session)).execute(payment_id)
    if result.is_err():
        raise ClientError(result.error)

    payment = result.value
    if not has_staff_access(request, caller):
        invoice_result = await GetInvoice(
            SqlAlchemyInvoiceRepository(session),
            SqlAlchemyInvoiceLineRepository(session),
            SqlAlchemyPaymentRepository(session),
        ).execute(payment.invoice_id)
        if invoice_result.is_err():
            raise ClientError(invoice_result.error)
        ensure_can_read_client(request, caller, invoice_result.value.client_id)

    return payment


@router.delete("/{payment_id}", response_model=PaymentLedgerResponseDTO)
async def reverse_payment(
    payment_id: int,
    caller: CallerContext = Depends(require_roles(*STAFF_ROLES)),
    session: AsyncSession = Depends(get_session),
):
    """
    Reverse a payment.

    The payment is removed and a paid invoice no longer covered by the
    remaining payments returns to sent.

    **Returns:**
    - 200: Reversed payment and the invoice state after reversal
    - 404: Payment not found
    - 409: Invoice modified concurrently
    """
    use_case = ReversePayment(
        SqlAlchemyUnitOfWork(session),
        SqlAlchemyInvoiceRepository(session),
        SqlAlchemyPaymentRepository(session),
    )
    result = await use_case.execute(payment_id, caller)

    if result.is_err():
        raise ClientError(result.error)

    return result.value
