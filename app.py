from chalice import Chalice

from chalicelib import restaurants, restaurant_settings, verification, payments

app = Chalice(app_name='restaurant-portal')

app.api.binary_types.insert(0, 'multipart/form-data')
app.debug = True


@app.route('/health-check', methods=['GET'], cors=True)
def health_check():
    return {'health': 'check'}


# RESTAURANTS
@app.route('/restaurants', methods=['GET'], cors=True)
def get_restaurants():
    return restaurants.endpoint_get_all(app.current_request)


# SETTINGS
@app.route('/settings', methods=['GET'], cors=True)
def get_settings():
    """
    restaurant owner operation, settings of the signed in user
    """
    return restaurant_settings.endpoint_get_settings(app.current_request)


@app.route('/settings', methods=['PUT'], cors=True)
def update_settings():
    """
    restaurant owner operation, the whole record is overwritten
    """
    return restaurant_settings.endpoint_update_settings(app.current_request)


# VERIFICATION
@app.route('/restaurants/{restaurant_id}/verification/status', methods=['GET'], cors=True)
def get_verification_status(restaurant_id):
    """
    default status is created on the first read
    """
    return verification.endpoint_get_verification_status(app.current_request, restaurant_id)


@app.route('/restaurants/{restaurant_id}/verification/documents', methods=['GET'], cors=True)
def get_verification_documents(restaurant_id):
    return verification.endpoint_get_documents(app.current_request, restaurant_id)


@app.route('/restaurants/{restaurant_id}/verification/documents', methods=['POST'],
           content_types=['multipart/form-data'], cors=True)
def upload_verification_document(restaurant_id):
    """
    multipart fields: fileContent, type, expiryDate (optional)
    """
    return verification.endpoint_upload_document(app.current_request, restaurant_id)


@app.route('/restaurants/{restaurant_id}/verification/documents/{document_id}', methods=['DELETE'], cors=True)
def delete_verification_document(restaurant_id, document_id):
    return verification.endpoint_delete_document(app.current_request, restaurant_id, document_id)


# PAYMENTS
@app.route('/payments/checkout', methods=['POST'], cors=True)
def create_checkout():
    return payments.endpoint_create_checkout(app.current_request)


@app.route('/payments/callback', methods=['GET'], cors=True)
def payment_callback():
    """
    hosted checkout redirects here after a successful payment
    """
    return payments.endpoint_payment_callback(app.current_request)


@app.route('/payments/close', methods=['GET'], cors=True)
def payment_close():
    """
    hosted checkout redirects here when the customer closes it
    """
    return payments.endpoint_payment_close(app.current_request)
