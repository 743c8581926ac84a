"""
Checkout breakdown and the hosted payment checkout.

Charging, card handling and transaction verification stay with the gateway,
this module only shows the amounts, initializes the checkout and hands the
gateway callbacks over to the handlers given by the caller.
"""
from decimal import Decimal, InvalidOperation, ROUND_HALF_UP
from typing import Callable, Dict, Any, List

from chalice import Response

from chalicelib.constants.constants import SERVICE_FEE_RATE, CURRENCY_SYMBOL
from chalicelib.constants.status_codes import http200
from chalicelib.utils import app as utils_app, data as utils_data, exceptions, paystack
from chalicelib.utils.logger import logger


def to_decimal(amount, field: str = 'amount') -> Decimal:
    if isinstance(amount, Decimal):
        value = amount
    else:
        try:
            value = Decimal(str(amount))
        except InvalidOperation:
            value = None
    if value is None or not value.is_finite():
        message = f'Validation error occurred while validating the field={field}'
        logger.error(f"to_decimal ::: {message}, value={amount!r}")
        raise exceptions.ValidationException(message)
    return value


def format_amount(amount) -> str:
    """
    Locale style: thousands separator, at most three fraction digits, no trailing zeros
    1500 -> ₦1,500, 1234.5 -> ₦1,234.5
    """
    value = to_decimal(amount).quantize(Decimal('0.001'), rounding=ROUND_HALF_UP).normalize()
    return f'{CURRENCY_SYMBOL}{value:,f}'


def to_minor_units(amount) -> int:
    return int((to_decimal(amount) * 100).quantize(Decimal('1'), rounding=ROUND_HALF_UP))


class PaystackCheckout:

    def __init__(self, public_key: str = None, email: str = None, amount: int = None, metadata: Dict = None,
                 split: Dict = None, on_success: Callable[[Any], Any] = None, on_close: Callable[[], Any] = None):
        self.public_key: str = public_key or ''
        self.email: str = email or ''
        self.amount: int = amount or 0
        self.metadata: Dict = metadata or {'custom_fields': []}
        self.split: Dict = split or {
            'type': 'percentage',
            'bearer_type': 'account',
            'subaccounts': []
        }
        self.on_success = on_success
        self.on_close = on_close

    def config(self) -> Dict:
        return {
            'public_key': self.public_key,
            'email': self.email,
            'amount': self.amount,
            'metadata': self.metadata,
            'split': self.split
        }

    def initialize_payment(self) -> Dict:
        metadata = dict(self.metadata)
        if paystack.paystack_close_url():
            # the hosted page redirects here when the customer closes it
            metadata.setdefault('cancel_action', paystack.paystack_close_url())
        transaction = paystack.initialize_transaction(
            email=self.email,
            amount=self.amount,
            metadata=metadata,
            split=self.split if self.split.get('subaccounts') else None,
            callback_url=paystack.paystack_callback_url()
        )
        return {
            **self.config(),
            'reference': transaction.get('reference'),
            'access_code': transaction.get('access_code'),
            'authorization_url': transaction.get('authorization_url')
        }

    def success(self, reference):
        if self.on_success:
            return self.on_success(reference)

    def close(self):
        if self.on_close:
            return self.on_close()


class PaymentBreakdown:

    def __init__(self, subtotal, delivery_fee, service_fee, total, restaurant_id: str, order_id: str = None,
                 checkout: PaystackCheckout = None):
        self.subtotal: Decimal = to_decimal(subtotal, 'subtotal')
        self.delivery_fee: Decimal = to_decimal(delivery_fee, 'delivery_fee')
        self.service_fee: Decimal = to_decimal(service_fee, 'service_fee')
        self.total: Decimal = to_decimal(total, 'total')
        self.restaurant_id: str = restaurant_id
        self.order_id: str = order_id
        self.checkout: PaystackCheckout = checkout or PaystackCheckout()

    @staticmethod
    def service_fee_for(subtotal) -> Decimal:
        return (to_decimal(subtotal, 'subtotal') * Decimal(SERVICE_FEE_RATE)).quantize(Decimal('0.01'),
                                                                                      rounding=ROUND_HALF_UP)

    @classmethod
    def from_subtotal(cls, subtotal, delivery_fee, restaurant_id, order_id=None, checkout=None):
        subtotal, delivery_fee = to_decimal(subtotal, 'subtotal'), to_decimal(delivery_fee, 'delivery_fee')
        service_fee = cls.service_fee_for(subtotal)
        return cls(subtotal, delivery_fee, service_fee, subtotal + delivery_fee + service_fee,
                   restaurant_id, order_id, checkout)

    def lines(self) -> List[Dict]:
        return [
            {'label': 'Subtotal', 'amount': format_amount(self.subtotal)},
            {'label': 'Delivery Fee', 'amount': format_amount(self.delivery_fee)},
            {'label': f'Service Fee ({int(Decimal(SERVICE_FEE_RATE) * 100)}%)',
             'amount': format_amount(self.service_fee)},
            {'label': 'Total', 'amount': format_amount(self.total)}
        ]

    def to_ui(self) -> Dict:
        return {
            'restaurant_id': self.restaurant_id,
            'order_id': self.order_id,
            'subtotal': self.subtotal,
            'delivery_fee': self.delivery_fee,
            'service_fee': self.service_fee,
            'total': self.total,
            'lines': self.lines()
        }

    def handle_payment(self) -> Dict:
        logger.info(f"handle_payment ::: {self.restaurant_id=}, {self.order_id=}, amount={self.checkout.amount}")
        return self.checkout.initialize_payment()


@utils_app.log_and_raise('Error creating checkout')
def create_checkout(request_body: Dict) -> PaymentBreakdown:
    """
    Amounts given by the caller are shown as they are,
    only a missing service fee or total is filled in
    """
    missing_fields = [field for field in ('subtotal', 'delivery_fee', 'restaurant_id') if field not in request_body]
    if missing_fields:
        raise exceptions.MandatoryFieldsAreNotFilled(f'Mandatory fields are not filled: {", ".join(missing_fields)}')

    subtotal = to_decimal(request_body['subtotal'], 'subtotal')
    delivery_fee = to_decimal(request_body['delivery_fee'], 'delivery_fee')
    if request_body.get('service_fee') is None:
        service_fee = PaymentBreakdown.service_fee_for(subtotal)
    else:
        service_fee = to_decimal(request_body['service_fee'], 'service_fee')
    if request_body.get('total') is None:
        total = subtotal + delivery_fee + service_fee
    else:
        total = to_decimal(request_body['total'], 'total')
    breakdown = PaymentBreakdown(subtotal, delivery_fee, service_fee, total,
                                 request_body['restaurant_id'], request_body.get('order_id'))

    if request_body.get('amount'):
        amount = int(to_decimal(request_body['amount'], 'amount'))
    else:
        amount = to_minor_units(breakdown.total)
    breakdown.checkout = PaystackCheckout(
        public_key=paystack.paystack_public_key(),
        email=request_body.get('email'),
        amount=amount,
        metadata=request_body.get('metadata'),
        split=request_body.get('split')
    )
    return breakdown


def payment_success_handler(reference) -> Response:
    logger.info(f"payment_success_handler ::: {reference=}")
    return Response(status_code=http200, body={'message': 'Payment completed', 'reference': reference})


def payment_close_handler() -> Response:
    logger.info("payment_close_handler ::: payment window closed")
    return Response(status_code=http200, body={'message': 'Payment window closed'})


@utils_app.request_exception_handler(ui_message='Failed to start payment')
@utils_app.track_request
@utils_app.log_start_finish
def endpoint_create_checkout(current_request) -> Response:
    breakdown = create_checkout(utils_data.parse_raw_body(current_request))
    checkout = breakdown.handle_payment()
    return Response(status_code=http200, body={'breakdown': breakdown.to_ui(), 'checkout': checkout})


@utils_app.request_exception_handler(ui_message='Failed to complete payment')
@utils_app.track_request
@utils_app.log_start_finish
def endpoint_payment_callback(current_request) -> Response:
    reference = dict(current_request.query_params or {})
    if not reference.get('reference'):
        raise exceptions.MandatoryFieldsAreNotFilled('reference is required')
    return PaystackCheckout(on_success=payment_success_handler).success(reference)


@utils_app.request_exception_handler
@utils_app.track_request
@utils_app.log_start_finish
def endpoint_payment_close(current_request) -> Response:
    return PaystackCheckout(on_close=payment_close_handler).close()
