from chalicelib.constants import keys_structure
from chalicelib.constants.status_codes import http200, http400, http401
from chalicelib.restaurant_settings import get_settings, save_settings
from chalicelib.utils import db
from test.utils.portal_test_data import id_owner, get_settings_form
from test.utils.request_utils import make_request

from test.utils.fixtures import aws, chalice_client


def get_settings_db_record(user_id):
    return db.get_gen_table().get_item(Key={
        'partkey': keys_structure.restaurant_settings_pk,
        'sortkey': keys_structure.restaurant_settings_sk.format(user_id=user_id)
    }).get('Item')


def test_get_settings_falls_back_to_blank_defaults(chalice_client):
    response = make_request(chalice_client, endpoint='/settings', method='GET', token=id_owner)

    assert response.status_code == http200
    body = response.json_body
    for field in get_settings_form():
        assert body[field] == ''
    assert 'last_updated' not in body
    assert get_settings_db_record(id_owner) is None


def test_update_and_get_settings(chalice_client):
    first_form = {**get_settings_form(), 'restaurant_name': 'First name'}
    make_request(chalice_client, endpoint='/settings', method='PUT', json_body=first_form, token=id_owner)
    first_last_updated = get_settings_db_record(id_owner)['last_updated']

    form = get_settings_form()
    response = make_request(chalice_client, endpoint='/settings', method='PUT', json_body=form, token=id_owner)

    assert response.status_code == http200
    assert response.json_body['message'] == 'Settings updated successfully'

    response_get = make_request(chalice_client, endpoint='/settings', method='GET', token=id_owner)
    body = response_get.json_body
    for field, value in form.items():
        assert body[field] == value
    assert body['last_updated'] > first_last_updated


def test_update_settings_overwrites_whole_record(aws):
    save_settings(id_owner, {**get_settings_form(), 'unknown_field': 'ignored'})

    db_record = get_settings_db_record(id_owner)

    assert 'unknown_field' not in db_record
    assert {key: db_record[key] for key in get_settings_form()} == get_settings_form()
    assert get_settings(id_owner).restaurant_name == 'Mama Put Kitchen'


def test_update_settings_with_missing_field(chalice_client):
    form = get_settings_form()
    form['phone'] = ''
    form.pop('address')

    response = make_request(chalice_client, endpoint='/settings', method='PUT', json_body=form, token=id_owner)

    assert response.status_code == http400
    assert response.json_body['message'] == 'Failed to update settings'
    assert response.json_body['exception'] == 'MandatoryFieldsAreNotFilled'
    assert get_settings_db_record(id_owner) is None


def test_update_settings_with_wrong_field_type(chalice_client):
    form = {**get_settings_form(), 'phone': 2348012345678}

    response = make_request(chalice_client, endpoint='/settings', method='PUT', json_body=form, token=id_owner)

    assert response.status_code == http400
    assert response.json_body['exception'] == 'ValidationException'


def test_settings_require_authorization(chalice_client):
    response = make_request(chalice_client, endpoint='/settings', method='GET')

    assert response.status_code == http401
    assert response.json_body['exception'] == 'NotAuthorizedException'
