import boto3
import pytest
from chalice.test import Client
from moto import mock_aws

from app import app
from chalicelib.utils import db, boto_clients
from chalicelib.utils.logger import log_message

TEST_STAGE = 'test'
TEST_REGION = 'eu-central-1'
TEST_TABLE_NAME = 'restaurant-portal-test'
TEST_BUCKET_NAME = 'restaurant-portal-verification-test'


def create_test_table():
    boto3.resource('dynamodb', region_name=TEST_REGION).create_table(
        TableName=TEST_TABLE_NAME,
        KeySchema=[
            {'AttributeName': 'partkey', 'KeyType': 'HASH'},
            {'AttributeName': 'sortkey', 'KeyType': 'RANGE'}
        ],
        AttributeDefinitions=[
            {'AttributeName': 'partkey', 'AttributeType': 'S'},
            {'AttributeName': 'sortkey', 'AttributeType': 'S'}
        ],
        BillingMode='PAY_PER_REQUEST'
    )


def create_test_bucket():
    boto3.client('s3', region_name=TEST_REGION).create_bucket(
        Bucket=TEST_BUCKET_NAME,
        CreateBucketConfiguration={'LocationConstraint': TEST_REGION}
    )


@pytest.fixture
def aws(monkeypatch):
    monkeypatch.setenv('AWS_ACCESS_KEY_ID', 'testing')
    monkeypatch.setenv('AWS_SECRET_ACCESS_KEY', 'testing')
    monkeypatch.setenv('AWS_SECURITY_TOKEN', 'testing')
    monkeypatch.setenv('AWS_SESSION_TOKEN', 'testing')
    monkeypatch.setenv('AWS_DEFAULT_REGION', TEST_REGION)
    monkeypatch.setenv('AWS_REGION', TEST_REGION)
    monkeypatch.setenv('MAIN_BOTO_REGION', TEST_REGION)
    monkeypatch.setenv('GEN_TABLE_NAME', TEST_TABLE_NAME)
    monkeypatch.setenv('VERIFICATION_FILES_BUCKET_NAME', TEST_BUCKET_NAME)
    monkeypatch.delenv('ENDPOINT_URL', raising=False)
    with mock_aws():
        create_test_table()
        create_test_bucket()
        db.reset_tables()
        boto_clients.reset_clients()
        yield
        db.reset_tables()
        boto_clients.reset_clients()


@pytest.fixture
def chalice_client(aws):
    # the test stage of .chalice/config.json names the table and the bucket created above
    log_message('chalice_client', f'stage = {TEST_STAGE}')
    with Client(app, stage_name=TEST_STAGE) as client:
        yield client
