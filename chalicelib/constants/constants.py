REQUIRED_DOCUMENT_TYPES = ('business_license', 'food_permit', 'identity')

DOCUMENT_STATUS_PENDING = 'pending'
DOCUMENT_STATUS_APPROVED = 'approved'
DOCUMENT_STATUS_REJECTED = 'rejected'
DOCUMENT_STATUSES = (DOCUMENT_STATUS_PENDING, DOCUMENT_STATUS_APPROVED, DOCUMENT_STATUS_REJECTED)

DEFAULT_RESTAURANT_IMAGE = '/default-restaurant.jpeg'

SERVICE_FEE_RATE = '0.10'
CURRENCY_SYMBOL = '₦'

# seconds, 7 days is the maximum for SigV4 presigned urls
DEFAULT_DOWNLOAD_URL_EXPIRATION = 604800
DEFAULT_PAYSTACK_BASE_URL = 'https://api.paystack.co'
DEFAULT_PAYSTACK_TIMEOUT = 10
