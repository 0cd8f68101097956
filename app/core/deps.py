# /app/core/deps.py
from fastapi import Depends, Request

from app.core.config import get_settings
from app.services.callback_service import PaymentCallbackHandler
from app.services.installations_service import InstallationService
from app.services.inquiries_service import InquiryService
from app.services.mpesa_gateway import PaymentGateway
from app.services.orders_service import OrderService
from app.services.payment_service import PaymentInitiator
from app.services.quote_ledger import QuoteLedger
from app.services.sms import Notifier


def get_gateway(request: Request) -> PaymentGateway:
    """
    Process-wide gateway client, built once in create_app().
    """
    return request.app.state.payment_gateway


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


def get_ledger(notifier: Notifier = Depends(get_notifier)) -> QuoteLedger:
    return QuoteLedger(notifier=notifier, validity_days=get_settings().quote_validity_days)


def get_payment_initiator(
    gateway: PaymentGateway = Depends(get_gateway),
    ledger: QuoteLedger = Depends(get_ledger),
    notifier: Notifier = Depends(get_notifier),
) -> PaymentInitiator:
    return PaymentInitiator(
        gateway,
        ledger,
        notifier,
        description=get_settings().mpesa_transaction_desc,
    )


def get_callback_handler(
    ledger: QuoteLedger = Depends(get_ledger),
    notifier: Notifier = Depends(get_notifier),
) -> PaymentCallbackHandler:
    return PaymentCallbackHandler(ledger, notifier)


def get_order_service(ledger: QuoteLedger = Depends(get_ledger)) -> OrderService:
    return OrderService(ledger)


def get_installation_service(ledger: QuoteLedger = Depends(get_ledger)) -> InstallationService:
    return InstallationService(ledger)


def get_inquiry_service(notifier: Notifier = Depends(get_notifier)) -> InquiryService:
    return InquiryService(notifier)
