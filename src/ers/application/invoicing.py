"""Application services: invoicing and payment.

Both steps move only the financial track; the fulfillment status and its
history are left alone.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from datetime import date

from ers.application.clock import Clock, utc_now
from ers.application.mapping import money_str
from ers.domain.exceptions import EntityNotFoundError, ValidationError
from ers.domain.model.notification import NotificationType
from ers.domain.model.order import FinancialStatus, Invoice, Order
from ers.domain.repository.unit_of_work import UnitOfWork
from ers.domain.service.notification_dispatcher import NotificationDispatcher, dispatch_safely

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class InvoiceDTO:
    order_number: str
    invoice_number: str
    financial_status: str
    amount: str | None
    generated_at: str
    paid_at: str | None
    payment_method: str | None
    payment_reference: str | None


def _to_invoice_dto(order: Order, invoice: Invoice) -> InvoiceDTO:
    return InvoiceDTO(
        order_number=order.display_id,
        invoice_number=invoice.number,
        financial_status=order.financial_status.value,
        amount=money_str(order.final_total_price),
        generated_at=invoice.generated_at.strftime("%Y-%m-%d %H:%M UTC"),
        paid_at=invoice.paid_at.isoformat() if invoice.paid_at else None,
        payment_method=invoice.payment_method,
        payment_reference=invoice.payment_reference,
    )


class GenerateInvoiceHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._dispatcher = dispatcher
        self._clock = clock

    def handle(self, order_id: int, user_id: str) -> InvoiceDTO:
        """Issue the invoice for an accepted quote.

        QUOTE_ACCEPTED -> PENDING_INVOICE -> INVOICED in one step; an
        order already waiting in PENDING_INVOICE only takes the second.
        """
        now = self._clock()
        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            if order.financial_status == FinancialStatus.QUOTE_ACCEPTED:
                order.move_financial_to(FinancialStatus.PENDING_INVOICE, now)
            order.move_financial_to(FinancialStatus.INVOICED, now)
            invoice = order.record_invoice(uow.orders.next_invoice_number(now.date()), now)
            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Invoice %s generated for order %s by %s",
            invoice.number,
            order.display_id,
            user_id,
        )
        dispatch_safely(self._dispatcher, [(NotificationType.INVOICE_GENERATED, order_id)])
        return _to_invoice_dto(order, invoice)


class ConfirmPaymentHandler:

    def __init__(
        self,
        uow: UnitOfWork,
        dispatcher: NotificationDispatcher,
        clock: Clock = utc_now,
    ) -> None:
        self._uow = uow
        self._dispatcher = dispatcher
        self._clock = clock

    def handle(
        self,
        order_id: int,
        user_id: str,
        payment_method: str,
        payment_reference: str,
        payment_date: date | None = None,
    ) -> InvoiceDTO:
        now = self._clock()
        paid_on = payment_date or now.date()
        if paid_on > now.date():
            raise ValidationError("Payment date cannot be in the future")

        with self._uow as uow:
            order = uow.orders.get_by_id(order_id)
            if order is None:
                raise EntityNotFoundError(f"Order #{order_id} not found")

            invoice = order.record_payment(payment_method, payment_reference, paid_on)
            order.move_financial_to(FinancialStatus.PAID, now)
            uow.orders.save(order)
            uow.commit()

        logger.info(
            "Payment for order %s confirmed by %s (%s %s)",
            order.display_id,
            user_id,
            payment_method,
            payment_reference,
        )
        dispatch_safely(self._dispatcher, [(NotificationType.PAYMENT_CONFIRMED, order_id)])
        return _to_invoice_dto(order, invoice)
