"""Invoice Line Synchronizer

Reconciles a complete submitted line set against an invoice's persisted
lines. Computes the plan only; applying it is the caller's unit of work.
"""

from dataclasses import dataclass, field
from decimal import Decimal
from typing import List, Optional, Sequence
from libs.result import Result, Return
from src.app.errors import ValidationFailure
from src.domain.invoice_line import InvoiceLine
from src.domain.money import sum_money
from .dtos import InvoiceLineSpecDTO
from .item_resolver import ItemResolver, ResolvedLine


@dataclass
class LineUpdate:
    """An existing line and the values it will be overwritten with"""

    line: InvoiceLine
    resolved: ResolvedLine

    @property
    def is_noop(self) -> bool:
        line = self.line
        resolved = self.resolved
        return (
            line.item_ref == resolved.item
            and line.description == resolved.description
            and Decimal(line.quantity) == resolved.quantity
            and Decimal(line.unit_price) == resolved.unit_price
            and Decimal(line.line_total) == resolved.line_total
        )

    def apply(self) -> InvoiceLine:
        line = self.line
        line.assign_item(self.resolved.item)
        line.description = self.resolved.description
        line.quantity = self.resolved.quantity
        line.unit_price = self.resolved.unit_price
        line.line_total = self.resolved.line_total
        return line


@dataclass
class LineSyncPlan:
    """
    Outcome of a synchronization

    to_insert, to_update and to_delete are disjoint; new_total is the sum
    of the line totals of the post-synchronization set.
    """

    new_total: Decimal
    to_insert: List[InvoiceLine] = field(default_factory=list)
    to_update: List[LineUpdate] = field(default_factory=list)
    to_delete: List[InvoiceLine] = field(default_factory=list)

    @property
    def has_changes(self) -> bool:
        return bool(
            self.to_insert
            or self.to_delete
            or any(not update.is_noop for update in self.to_update)
        )


class InvoiceLineSynchronizer:
    """
    Diff submitted lines against existing lines

    Algorithm:
    1. Reject an empty submission
    2. Partition submitted lines by presence of an id; ids must be unique
       and belong to this invoice's existing lines
    3. Existing lines whose id was not submitted are deleted
    4. Submitted lines with an id are resolved and update their line
    5. Submitted lines without an id are resolved into new lines
    6. new_total = sum of the final line totals

    Any resolution failure aborts the whole synchronization.
    """

    def __init__(self, item_resolver: ItemResolver):
        self.item_resolver = item_resolver

    async def synchronize(
        self,
        invoice_id: Optional[int],
        existing_lines: Sequence[InvoiceLine],
        submitted_lines: Sequence[InvoiceLineSpecDTO],
    ) -> Result[LineSyncPlan]:
        """
        Compute the synchronization plan

        Args:
            invoice_id: Owning invoice (None while the invoice is being created)
            existing_lines: Lines currently persisted for the invoice
            submitted_lines: Complete replacement set from the caller

        Returns:
            Result[LineSyncPlan]: Plan, or the first failure encountered
        """
        if not submitted_lines:
            return Return.err(
                ValidationFailure(
                    code="EMPTY_LINE_SET",
                    message="An invoice must contain at least one line",
                )
            )

        existing_by_id = {line.id: line for line in existing_lines}

        # Step 2: partition and check submitted ids
        submitted_ids = set()
        for entry in submitted_lines:
            if entry.id is None:
                continue
            if entry.id in submitted_ids:
                return Return.err(
                    ValidationFailure(
                        code="DUPLICATE_INVOICE_LINE",
                        message=f"Invoice line {entry.id} was submitted more than once",
                    )
                )
            if entry.id not in existing_by_id:
                return Return.err(
                    ValidationFailure(
                        code="UNKNOWN_INVOICE_LINE",
                        message=f"Invoice line {entry.id} does not belong to invoice {invoice_id}",
                    )
                )
            submitted_ids.add(entry.id)

        # Step 3: deletions
        to_delete = [line for line in existing_lines if line.id not in submitted_ids]

        # Steps 4-5: resolve every submitted line before producing anything
        to_update: List[LineUpdate] = []
        to_insert: List[InvoiceLine] = []
        for entry in submitted_lines:
            resolved_result = await self.item_resolver.resolve_line(
                entry.item_type, entry.item_id, entry.quantity, entry.unit_price
            )
            if resolved_result.is_err():
                return Return.err(resolved_result.error)
            resolved = resolved_result.value

            if entry.id is not None:
                to_update.append(LineUpdate(line=existing_by_id[entry.id], resolved=resolved))
            else:
                to_insert.append(
                    InvoiceLine.for_item(
                        resolved.item,
                        description=resolved.description,
                        quantity=resolved.quantity,
                        unit_price=resolved.unit_price,
                        line_total=resolved.line_total,
                        invoice_id=invoice_id,
                    )
                )

        # Step 6: total of the post-synchronization set
        new_total = sum_money(
            [update.resolved.line_total for update in to_update]
            + [Decimal(line.line_total) for line in to_insert]
        )

        return Return.ok(
            LineSyncPlan(
                to_insert=to_insert,
                to_update=to_update,
                to_delete=to_delete,
                new_total=new_total,
            )
        )
