import json
from typing import Optional

from requests_toolbelt.multipart.encoder import MultipartEncoder


def make_request(chalice_client, endpoint: str = '/', method: str = 'GET',
                 query: Optional[str] = None, json_body=None, token=None):
    headers = {'Content-Type': 'application/json'}
    if token:
        headers['Authorization'] = token
    return chalice_client.http.request(
        method=method,
        path=f"{endpoint}?{query}" if query else f"{endpoint}",
        headers=headers,
        body=json.dumps(json_body).encode('utf-8') if json_body is not None else b''
    )


def make_multipart_request(chalice_client, endpoint: str, fields: dict, token=None):
    multipart_data = MultipartEncoder(fields=fields)
    headers = {'Content-Type': multipart_data.content_type}
    if token:
        headers['Authorization'] = token
    return chalice_client.http.request(
        method='POST',
        path=endpoint,
        headers=headers,
        body=multipart_data.to_string()
    )
