__all__ = ["NotAuthorizedException", "RecordNotFound", "MandatoryFieldsAreNotFilled", "ValidationException",
           "PaymentGatewayException"]


class NotAuthorizedException(Exception):
    pass


# Generic Exceptions
class MandatoryFieldsAreNotFilled(Exception):
    pass


# DynamoDB exceptions
class RecordNotFound(Exception):
    pass


# Validations exceptions
class ValidationException(Exception):
    pass


# Hosted checkout exceptions
class PaymentGatewayException(Exception):
    pass
