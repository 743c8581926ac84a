import os

import boto3
from botocore.config import Config

_S3 = None


def main_boto_region():
    return os.environ.get('MAIN_BOTO_REGION', 'eu-central-1')


def aws_config_ddb():
    return Config(retries={'max_attempts': 30}, region_name=os.environ.get('AWS_REGION', 'eu-central-1'))


def aws_config_s3():
    # SigV4 is required for presigned urls in eu-central-1
    return Config(retries={'max_attempts': 30}, region_name=main_boto_region(), signature_version='s3v4')


def s3_client():
    """
    S3 Client.
    Clients provide a low-level interface to AWS services whose methods map close to 1:1 with service APIs.
    Created on first use and reused afterwards.
    """
    global _S3
    if _S3 is None:
        _S3 = boto3.client('s3', config=aws_config_s3())
    return _S3


def reset_clients():
    global _S3
    _S3 = None


def dynamodb_resource():
    """
    DynamoDB Resource.
    ENDPOINT_URL points to a local DynamoDB instance
    """
    if os.environ.get('ENDPOINT_URL'):
        return boto3.resource('dynamodb', endpoint_url=os.environ.get('ENDPOINT_URL'))
    return boto3.resource('dynamodb', config=aws_config_ddb())
