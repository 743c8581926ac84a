from decimal import Decimal
from typing import List, Dict

from boto3.dynamodb.conditions import Attr, Key
from chalice import Response

from chalicelib.constants import keys_structure
from chalicelib.constants.constants import DEFAULT_RESTAURANT_IMAGE
from chalicelib.constants.status_codes import http200
from chalicelib.utils import db as utils_db, app as utils_app
from chalicelib.utils.logger import logger


class RestaurantCard:
    """
    Summary of a restaurant for the listing, rendering only, no db or network calls
    """

    def __init__(self, id_, **kwargs):
        self.id_: str = id_
        self.name: str = kwargs.get('name_') or kwargs.get('name')
        self.image: str = kwargs.get('image') or DEFAULT_RESTAURANT_IMAGE
        self.rating: Decimal = kwargs.get('rating')
        self.delivery_time: str = kwargs.get('delivery_time')
        self.minimum_order: Decimal = kwargs.get('minimum_order')

    def on_image_error(self):
        self.image = DEFAULT_RESTAURANT_IMAGE
        return self

    def to_ui(self) -> Dict:
        return {
            'id': self.id_,
            'name': self.name,
            'image': self.image,
            'fallback_image': DEFAULT_RESTAURANT_IMAGE,
            'rating': self.rating,
            'delivery_time': self.delivery_time,
            'minimum_order': self.minimum_order,
            'link': f'/restaurant/{self.id_}'
        }


def get_restaurant_cards() -> List[RestaurantCard]:
    restaurant_db_records: List[Dict] = utils_db.query_items_paged(
        Key('partkey').eq(keys_structure.restaurants_pk),
        filter_expression=Attr('archived').not_exists() | Attr('archived').eq(False)
    )
    return [RestaurantCard(**record) for record in restaurant_db_records]


@utils_app.request_exception_handler(ui_message='Failed to load restaurants')
@utils_app.track_request
@utils_app.log_start_finish
def endpoint_get_all(current_request) -> Response:
    restaurants: List[Dict] = [card.to_ui() for card in get_restaurant_cards()]
    logger.info(f"endpoint_get_all ::: returning restaurants={[rest['id'] for rest in restaurants]}")
    return Response(status_code=http200, body=restaurants)
