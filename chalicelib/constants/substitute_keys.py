# attribute names which are DynamoDB reserved words are stored with a trailing underscore
to_db = {
    'id': 'id_',
    'name': 'name_',
    'type': 'type_',
    'status': 'status_'
}

from_db = {
    'id_': 'id',
    'name_': 'name',
    'type_': 'type',
    'status_': 'status',
    'partkey': None,
    'sortkey': None,
    'record_type': None
}
