import json
from decimal import Decimal

import pytest
import requests

from chalicelib.constants.status_codes import http200, http400, http502
from chalicelib.payments import PaymentBreakdown, PaystackCheckout, format_amount, to_minor_units
from chalicelib.utils import paystack
from test.utils.request_utils import make_request

from test.utils.fixtures import aws, chalice_client


class FakeGatewayResponse:

    def __init__(self, status_code, body):
        self.status_code = status_code
        self.ok = status_code < 400
        self.body = body

    def json(self):
        return self.body


class HtmlGatewayResponse(FakeGatewayResponse):

    def json(self):
        raise json.JSONDecodeError('Expecting value', self.body, 0)


@pytest.fixture
def gateway(monkeypatch):
    """
    Replaces the hosted checkout api, captured requests are available in gateway['requests']
    """
    monkeypatch.setenv('PAYSTACK_PUBLIC_KEY', 'pk_test_public')
    monkeypatch.setenv('PAYSTACK_SECRET_KEY', 'sk_test_secret')
    monkeypatch.setenv('PAYSTACK_CALLBACK_URL', 'https://portal.example.com/payments/callback')
    monkeypatch.setenv('PAYSTACK_CLOSE_URL', 'https://portal.example.com/payments/close')
    state = {
        'requests': [],
        'response': FakeGatewayResponse(200, {
            'status': True,
            'message': 'Authorization URL created',
            'data': {
                'authorization_url': 'https://checkout.paystack.com/0peioxfhpn',
                'access_code': '0peioxfhpn',
                'reference': '7PVGX8MEk85tgeEpVDtD'
            }
        })
    }

    def fake_post(url, headers=None, data=None, timeout=None):
        state['requests'].append({'url': url, 'headers': headers, 'payload': json.loads(data), 'timeout': timeout})
        return state['response']
    monkeypatch.setattr(paystack.requests, 'post', fake_post)
    return state


@pytest.mark.parametrize('amount, expected', [
    (1500, '₦1,500'),
    (Decimal('1234.5'), '₦1,234.5'),
    (Decimal('1234.50'), '₦1,234.5'),
    (0.1234, '₦0.123'),
    (1000000, '₦1,000,000'),
    (0, '₦0'),
])
def test_format_amount(amount, expected):
    assert format_amount(amount) == expected


def test_to_minor_units():
    assert to_minor_units(Decimal('1500.5')) == 150050
    assert to_minor_units(2000) == 200000
    assert to_minor_units(0.015) == 2


def test_breakdown_from_subtotal():
    breakdown = PaymentBreakdown.from_subtotal(Decimal('4500'), 800, 'rest-1')

    assert breakdown.service_fee == Decimal('450.00')
    assert breakdown.total == Decimal('5750.00')
    assert breakdown.total == breakdown.subtotal + breakdown.delivery_fee + breakdown.service_fee
    assert breakdown.lines() == [
        {'label': 'Subtotal', 'amount': '₦4,500'},
        {'label': 'Delivery Fee', 'amount': '₦800'},
        {'label': 'Service Fee (10%)', 'amount': '₦450'},
        {'label': 'Total', 'amount': '₦5,750'}
    ]


def test_breakdown_shows_caller_amounts_as_given():
    breakdown = PaymentBreakdown(1000, 500, 100, 1700, 'rest-1', order_id='order-1')

    assert breakdown.to_ui()['total'] == Decimal('1700')
    assert breakdown.lines()[-1] == {'label': 'Total', 'amount': '₦1,700'}


def test_checkout_defaults():
    assert PaystackCheckout().config() == {
        'public_key': '',
        'email': '',
        'amount': 0,
        'metadata': {'custom_fields': []},
        'split': {'type': 'percentage', 'bearer_type': 'account', 'subaccounts': []}
    }


def test_checkout_forwards_callbacks():
    received = []
    reference = {'reference': '7PVGX8MEk85tgeEpVDtD', 'status': 'success'}
    checkout = PaystackCheckout(on_success=lambda ref: received.append(ref) or 'handled',
                                on_close=lambda: received.append('closed') or 'closed')

    assert checkout.success(reference) == 'handled'
    assert checkout.close() == 'closed'
    assert received == [reference, 'closed']
    assert received[0] is reference


def test_checkout_without_callbacks():
    checkout = PaystackCheckout()

    assert checkout.success({'reference': 'abc'}) is None
    assert checkout.close() is None


def test_initialize_payment(gateway):
    split = {'type': 'percentage', 'bearer_type': 'account',
             'subaccounts': [{'subaccount': 'ACCT_restaurant', 'share': 90}]}
    checkout = PaystackCheckout(public_key='pk_test_public', email='ada@example.com', amount=575000,
                                metadata={'custom_fields': [], 'order_id': 'order-1'}, split=split)

    result = checkout.initialize_payment()

    request = gateway['requests'][0]
    assert request['url'] == 'https://api.paystack.co/transaction/initialize'
    assert request['headers']['Authorization'] == 'Bearer sk_test_secret'
    assert request['payload'] == {
        'email': 'ada@example.com',
        'amount': 575000,
        'metadata': {'custom_fields': [], 'order_id': 'order-1',
                     'cancel_action': 'https://portal.example.com/payments/close'},
        'split': split,
        'callback_url': 'https://portal.example.com/payments/callback'
    }
    assert result['reference'] == '7PVGX8MEk85tgeEpVDtD'
    assert result['authorization_url'] == 'https://checkout.paystack.com/0peioxfhpn'
    assert result['public_key'] == 'pk_test_public'


def test_create_checkout(chalice_client, gateway):
    response = make_request(chalice_client, endpoint='/payments/checkout', method='POST', json_body={
        'subtotal': 4500,
        'delivery_fee': 800,
        'restaurant_id': 'rest-1',
        'order_id': 'order-1',
        'email': 'ada@example.com'
    })

    assert response.status_code == http200
    body = response.json_body
    assert [line['amount'] for line in body['breakdown']['lines']] == ['₦4,500', '₦800', '₦450', '₦5,750']
    assert body['checkout']['amount'] == 575000
    assert body['checkout']['public_key'] == 'pk_test_public'
    assert body['checkout']['access_code'] == '0peioxfhpn'
    payload = gateway['requests'][0]['payload']
    assert payload['amount'] == 575000
    # split without subaccounts is not sent to the gateway
    assert 'split' not in payload


def test_create_checkout_with_caller_amount(chalice_client, gateway):
    response = make_request(chalice_client, endpoint='/payments/checkout', method='POST', json_body={
        'subtotal': 1000,
        'delivery_fee': 500,
        'service_fee': 100,
        'total': 1600,
        'amount': 160000,
        'restaurant_id': 'rest-1',
        'email': 'ada@example.com'
    })

    assert response.status_code == http200
    assert response.json_body['breakdown']['total'] == 1600
    assert gateway['requests'][0]['payload']['amount'] == 160000


def test_create_checkout_with_missing_fields(chalice_client, gateway):
    response = make_request(chalice_client, endpoint='/payments/checkout', method='POST',
                            json_body={'subtotal': 1000})

    assert response.status_code == http400
    assert response.json_body['message'] == 'Failed to start payment'
    assert gateway['requests'] == []


def test_create_checkout_gateway_error(chalice_client, gateway):
    gateway['response'] = FakeGatewayResponse(400, {'status': False, 'message': 'Invalid Email Address Passed'})

    response = make_request(chalice_client, endpoint='/payments/checkout', method='POST', json_body={
        'subtotal': 1000,
        'delivery_fee': 500,
        'restaurant_id': 'rest-1',
        'email': 'not-an-email'
    })

    assert response.status_code == http502
    assert response.json_body['message'] == 'Failed to start payment'
    assert response.json_body['error'] == 'Invalid Email Address Passed'


def test_create_checkout_gateway_timeout(chalice_client, gateway, monkeypatch):
    def timeout_post(url, headers=None, data=None, timeout=None):
        raise requests.exceptions.Timeout('read timed out')
    monkeypatch.setattr(paystack.requests, 'post', timeout_post)

    response = make_request(chalice_client, endpoint='/payments/checkout', method='POST', json_body={
        'subtotal': 1000,
        'delivery_fee': 500,
        'restaurant_id': 'rest-1',
        'email': 'ada@example.com'
    })

    assert response.status_code == http502
    assert response.json_body['exception'] == 'PaymentGatewayException'
    assert response.json_body['message'] == 'Failed to start payment'


def test_create_checkout_gateway_html_error(chalice_client, gateway):
    gateway['response'] = HtmlGatewayResponse(502, '<html><body>Bad Gateway</body></html>')

    response = make_request(chalice_client, endpoint='/payments/checkout', method='POST', json_body={
        'subtotal': 1000,
        'delivery_fee': 500,
        'restaurant_id': 'rest-1',
        'email': 'ada@example.com'
    })

    assert response.status_code == http502
    assert response.json_body['exception'] == 'PaymentGatewayException'


@pytest.mark.parametrize('field', ['subtotal', 'delivery_fee', 'service_fee', 'total', 'amount'])
def test_create_checkout_with_non_numeric_amount(chalice_client, gateway, field):
    json_body = {'subtotal': 1000, 'delivery_fee': 500, 'restaurant_id': 'rest-1', 'email': 'ada@example.com'}
    json_body[field] = 'abc'

    response = make_request(chalice_client, endpoint='/payments/checkout', method='POST', json_body=json_body)

    assert response.status_code == http400
    assert response.json_body['exception'] == 'ValidationException'
    assert response.json_body['error'] == f'Validation error occurred while validating the field={field}'
    assert gateway['requests'] == []


def test_create_checkout_keeps_caller_total(chalice_client, gateway):
    response = make_request(chalice_client, endpoint='/payments/checkout', method='POST', json_body={
        'subtotal': 1000,
        'delivery_fee': 500,
        'total': 1700,
        'restaurant_id': 'rest-1',
        'email': 'ada@example.com'
    })

    assert response.status_code == http200
    breakdown = response.json_body['breakdown']
    assert breakdown['service_fee'] == 100
    assert breakdown['total'] == 1700
    assert breakdown['lines'][-1] == {'label': 'Total', 'amount': '₦1,700'}
    assert gateway['requests'][0]['payload']['amount'] == 170000


def test_payment_callback(chalice_client):
    response = make_request(chalice_client, endpoint='/payments/callback', method='GET',
                            query='trxref=7PVGX8MEk85tgeEpVDtD&reference=7PVGX8MEk85tgeEpVDtD')

    assert response.status_code == http200
    assert response.json_body == {
        'message': 'Payment completed',
        'reference': {'trxref': '7PVGX8MEk85tgeEpVDtD', 'reference': '7PVGX8MEk85tgeEpVDtD'}
    }


def test_payment_callback_without_reference(chalice_client):
    response = make_request(chalice_client, endpoint='/payments/callback', method='GET')

    assert response.status_code == http400


def test_payment_close(chalice_client):
    response = make_request(chalice_client, endpoint='/payments/close', method='GET')

    assert response.status_code == http200
    assert response.json_body == {'message': 'Payment window closed'}
