import functools
import os

import boto3

from chalicelib.utils import exceptions
from chalicelib.utils.boto_clients import dynamodb_resource
from chalicelib.utils.logger import logger, log_exception

need_return_capacity = ('put_item', 'get_item', 'delete_item', 'query')

_DB = None


def log_db_operation(func):
    """
        should be used for any atomic
        get/put/delete item or query in the code,
        errors are logged and propagated as is, no retries
    """

    @functools.wraps(func)
    def wrapper(*args, **kwargs):
        logger.debug(f'{func.__name__}:: args={args}, kwargs={kwargs}')
        if func.__name__ not in need_return_capacity:
            raise RuntimeError("This decorator only for DynamoDB methods")
        kwargs.update({'ReturnConsumedCapacity': 'TOTAL'})
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            log_exception(e, msg=f'Got exception while trying to {func.__name__}: ')
            raise
        logger.info(f'{func.__name__}:: SUCCESS, consumed_capacity={result.get("ConsumedCapacity")}')
        return result

    return wrapper


def get_table(gl_table: boto3.session.Session.resource, table_name: str) -> boto3.session.Session.resource:
    if gl_table is None:
        gl_table = dynamodb_resource().Table(table_name)

        gl_table.put_item = log_db_operation(gl_table.put_item)
        gl_table.get_item = log_db_operation(gl_table.get_item)
        gl_table.delete_item = log_db_operation(gl_table.delete_item)
        gl_table.query = log_db_operation(gl_table.query)

    return gl_table


def get_gen_table():
    global _DB
    _DB = get_table(_DB, os.environ.get('GEN_TABLE_NAME'))
    return _DB


def reset_tables():
    global _DB
    _DB = None


def put_db_record(item: dict, table=get_gen_table):
    """ Creates or fully overwrites the record """
    table().put_item(Item=item)


def get_db_item(partkey, sortkey, table=get_gen_table):
    result = table().get_item(
        Key={
            'partkey': partkey,
            'sortkey': sortkey
        }
    )

    if 'Item' in result:
        return result['Item']
    else:
        logger.warning(f"get_db_item ::: record partkey={partkey} sortkey={sortkey} not found")
        raise exceptions.RecordNotFound(f'record partkey={partkey} sortkey={sortkey} not found')


def delete_db_item(partkey, sortkey, table=get_gen_table):
    table().delete_item(
        Key={
            'partkey': partkey,
            'sortkey': sortkey
        }
    )


def query_items_paginated(
        key_condition_expression,
        filter_expression=None,
        projection_expression=None,
        table=get_gen_table,
        index_name=None,
        expr_attr_names=None,
        limit=None,
        start_key=None
):
    kwargs = {'KeyConditionExpression': key_condition_expression}
    if filter_expression:
        kwargs.update({'FilterExpression': filter_expression})

    if projection_expression:
        kwargs.update({'ProjectionExpression': projection_expression})

    if expr_attr_names:
        kwargs.update({'ExpressionAttributeNames': expr_attr_names})

    if limit:
        kwargs.update({'Limit': int(limit)})

    if index_name:
        kwargs.update({'IndexName': index_name})

    if start_key:
        kwargs.update({'ExclusiveStartKey': start_key})

    resp = table().query(**kwargs)
    return resp['Items'], resp.get('LastEvaluatedKey')


def query_items_paged(key_condition_expression, filter_expression=None, projection_expression=None,
                      table=get_gen_table, index_name=None, expr_attr_names=None):
    """ This method shall be used whenever you think the query will
        return more than 1mb of data at once"""
    all_items = []
    items, last_evaluated_key = query_items_paginated(
        key_condition_expression,
        filter_expression=filter_expression,
        projection_expression=projection_expression,
        table=table,
        index_name=index_name,
        expr_attr_names=expr_attr_names
    )
    all_items.extend(items)

    while last_evaluated_key is not None:
        items, last_evaluated_key = query_items_paginated(
            key_condition_expression,
            filter_expression=filter_expression,
            projection_expression=projection_expression,
            table=table,
            index_name=index_name,
            expr_attr_names=expr_attr_names,
            start_key=last_evaluated_key
        )
        all_items.extend(items)

    return all_items
