import functools
from typing import Callable

from chalice import Response

from chalicelib.constants import status_codes
from chalicelib.utils.exceptions import (MandatoryFieldsAreNotFilled, ValidationException, NotAuthorizedException,
                                         RecordNotFound, PaymentGatewayException)
from chalicelib.utils.logger import logger, log_exception, log_request, set_request_id

exception_status_codes = {
    MandatoryFieldsAreNotFilled: status_codes.http400,
    ValidationException: status_codes.http400,
    NotAuthorizedException: status_codes.http401,
    RecordNotFound: status_codes.http404,
    PaymentGatewayException: status_codes.http502,
}


def error_response(error: Exception, msg: str = "", status_code: int = 400, *args, **kwargs):
    log_exception(error=error, msg=msg, status_code=status_code, *args, **kwargs)
    return Response(
        body={
            'error': str(error),
            'exception': error.__class__.__name__,
            "message": str(msg),
            'error_id': getattr(logger, 'current_request_id'),
            'level': getattr(error, 'LEVEL', 'exception')
        },
        status_code=status_code,
        headers={'Content-Type': 'application/json'}
    )


def request_exception_handler(func: Callable = None, *, ui_message: str = None):
    """
    Turns any exception raised by an endpoint into a json error response.
    ui_message is the generic message shown to the user instead of the error details
    """
    if func is None:
        return functools.partial(request_exception_handler, ui_message=ui_message)

    @functools.wraps(func)
    def result(*args, **kwargs):
        try:
            logger.info(f'Calling function {func.__name__}')
            return func(*args, **kwargs)
        except Exception as exception:
            status_code = exception_status_codes.get(type(exception), status_codes.http500)
            return error_response(
                error=exception,
                msg=ui_message or f'function = {func.__name__}, error = {exception}',
                status_code=status_code)
    return result


def log_start_finish(func: Callable):
    @functools.wraps(func)
    def result(*args, **kwargs):
        logger.info(f'{func.__name__} ::: started')
        response = func(*args, **kwargs)
        logger.info(f'{func.__name__} ::: finished')
        return response
    return result


def log_and_raise(message: str):
    """
    Service level wrapper: the error is logged and re-raised unchanged
    """
    def decorator(func: Callable):
        @functools.wraps(func)
        def result(*args, **kwargs):
            try:
                return func(*args, **kwargs)
            except Exception as error:
                log_exception(error, msg=f'{func.__name__} ::: {message}')
                raise
        return result
    return decorator


def track_request(func: Callable):
    """
    For endpoints taking the chalice request as the first argument:
    sets the short request id for the logger and logs the request
    """
    @functools.wraps(func)
    def result(request, *args, **kwargs):
        set_request_id(request)
        log_request(request)
        return func(request, *args, **kwargs)
    return result
