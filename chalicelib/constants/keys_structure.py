restaurants_pk = 'restaurants'
restaurants_sk = '{restaurant_id}'

restaurant_settings_pk = 'restaurant_settings'
restaurant_settings_sk = '{user_id}'

verification_pk = 'restaurants_{restaurant_id}_verification'
verification_document_sk = '{document_id}'
verification_status_sk = 'status'

verification_file_key = 'restaurants/{restaurant_id}/verification/{document_type}_{timestamp}'
