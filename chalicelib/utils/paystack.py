import json
import os

import requests

from chalicelib.constants.constants import DEFAULT_PAYSTACK_BASE_URL, DEFAULT_PAYSTACK_TIMEOUT
from chalicelib.utils.exceptions import PaymentGatewayException
from chalicelib.utils.logger import logger, CustomJSONEncoder


def paystack_public_key():
    return os.environ.get('PAYSTACK_PUBLIC_KEY', '')


def paystack_secret_key():
    return os.environ["PAYSTACK_SECRET_KEY"]


def paystack_base_url():
    return os.environ.get('PAYSTACK_BASE_URL', DEFAULT_PAYSTACK_BASE_URL).rstrip('/')


def paystack_callback_url():
    return os.environ.get('PAYSTACK_CALLBACK_URL')


def paystack_close_url():
    return os.environ.get('PAYSTACK_CLOSE_URL')


def initialize_transaction(email: str, amount: int, metadata: dict = None, split: dict = None,
                           callback_url: str = None) -> dict:
    """
    Initializes a transaction on the hosted checkout.
    amount is in minor units (kobo)
    :return:
    data of the gateway response: authorization_url, access_code, reference
    """
    payload = {'email': email, 'amount': amount}
    if metadata:
        payload['metadata'] = metadata
    if split:
        payload['split'] = split
    if callback_url:
        payload['callback_url'] = callback_url

    logger.info(f'initialize_transaction ::: {email=}, {amount=}')
    try:
        response = requests.post(
            f'{paystack_base_url()}/transaction/initialize',
            headers={'Authorization': f'Bearer {paystack_secret_key()}', 'Content-Type': 'application/json'},
            data=json.dumps(payload, cls=CustomJSONEncoder),
            timeout=int(os.environ.get('PAYSTACK_TIMEOUT', DEFAULT_PAYSTACK_TIMEOUT))
        )
    except requests.exceptions.RequestException as error:
        raise PaymentGatewayException(f'Gateway is not reachable: {error}') from error

    try:
        body = response.json()
    except ValueError as error:
        raise PaymentGatewayException(f'Gateway responded with {response.status_code} and no json body') from error
    if not response.ok or not body.get('status'):
        raise PaymentGatewayException(body.get('message') or f'Gateway responded with {response.status_code}')

    logger.info(f'initialize_transaction ::: SUCCESS, reference={body["data"].get("reference")}')
    return body['data']
