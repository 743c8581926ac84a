from typing import Tuple, Dict

from chalice import Response

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure, db_structure
from chalicelib.constants.status_codes import http200
from chalicelib.utils import auth as utils_auth, app as utils_app, data as utils_data, exceptions
from chalicelib.utils.data import current_timestamp
from chalicelib.utils.logger import logger


class RestaurantSettings(EntityBase):
    """
    Restaurant profile of the signed in user.
    The record is always overwritten as a whole, there is no field level merge.
    """
    pk = keys_structure.restaurant_settings_pk
    sk = keys_structure.restaurant_settings_sk

    fields = tuple(db_structure.RESTAURANT_SETTINGS.keys())

    required_fields_validation = {
        **{field: lambda x: isinstance(x, str) for field in fields},
        'last_updated': lambda x: isinstance(x, str)
    }

    def __init__(self, id_, **kwargs):
        EntityBase.__init__(self, id_)

        for field, default in db_structure.RESTAURANT_SETTINGS.items():
            setattr(self, field, kwargs.get(field, default))
        self.last_updated: str = kwargs.get('last_updated')
        self.record_type = 'restaurant_settings'

    @classmethod
    def init_by_user_id(cls, user_id):
        """
        Blank settings are returned when nothing is stored yet, they are not written to db
        """
        c = cls(user_id)
        try:
            return cls(**c._get_db_item())
        except exceptions.RecordNotFound:
            logger.info(f"init_by_user_id ::: no settings stored for {user_id=}, using blank defaults")
            return c

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk, self.sk.format(user_id=self.id_)

    def _to_dict(self):
        return {
            'id_': self.id_,
            **{field: getattr(self, field) for field in self.fields},
            'last_updated': self.last_updated
        }

    def _validate_mandatory_fields(self):
        missing_fields = [field for field in self.fields if self.db_record.get(field) in (None, '')]
        if missing_fields:
            message = f'Mandatory fields are not filled: {", ".join(missing_fields)}'
            logger.error(f"_validate_mandatory_fields ::: {message}")
            raise exceptions.MandatoryFieldsAreNotFilled(message)
        super()._validate_mandatory_fields()

    def save(self):
        self.last_updated = current_timestamp()
        self._put_db_record()

    def to_ui(self):
        return self._to_ui()


@utils_app.log_and_raise('Error fetching settings')
def get_settings(user_id: str) -> RestaurantSettings:
    return RestaurantSettings.init_by_user_id(user_id)


@utils_app.log_and_raise('Error updating settings')
def save_settings(user_id: str, fields: Dict) -> RestaurantSettings:
    settings = RestaurantSettings(user_id, **{field: fields.get(field) for field in RestaurantSettings.fields})
    settings.save()
    return settings


@utils_app.request_exception_handler(ui_message='Failed to load restaurant settings')
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_get_settings(current_request) -> Response:
    settings = get_settings(current_request.auth_result['user_id'])
    return Response(status_code=http200, body=settings.to_ui())


@utils_app.request_exception_handler(ui_message='Failed to update settings')
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_update_settings(current_request) -> Response:
    request_body = utils_data.parse_raw_body(current_request)
    settings = save_settings(current_request.auth_result['user_id'], request_body)
    return Response(status_code=http200,
                    body={'message': 'Settings updated successfully', 'settings': settings.to_ui()})
