RESTAURANT_SETTINGS = {
    'restaurant_name': '',
    'description': '',
    'cuisine': '',
    'opening_hours': '',
    'closing_hours': '',
    'address': '',
    'phone': ''
}

VERIFICATION_STATUS = {
    'is_verified': False,
    'documents_submitted': False,
    'pending_documents': None,
    'rejected_documents': None,
    'last_updated': None
}
