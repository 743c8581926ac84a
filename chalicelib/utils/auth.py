import functools

from chalice.app import Request

from chalicelib.constants import status_codes
from chalicelib.utils import exceptions as utils_exceptions
from chalicelib.utils.app import error_response
from chalicelib.utils.logger import log_request, logger, set_request_id


def get_user_id_by_request(request: Request) -> str:
    """
    Session management lives outside of the service,
    the authorization header carries the id of the signed in user
    """
    user_id = request.headers.get('authorization')
    if not user_id:
        raise utils_exceptions.NotAuthorizedException('Error occurred in authorization process')
    return user_id


def authenticate(func):
    """
    Wrapper for functions which require user's authentication
    """

    @functools.wraps(func)
    def result_auth(*args, **kwargs):
        request = args[0]
        set_request_id(request)
        log_request(request)
        try:
            user_id = get_user_id_by_request(request)
        except utils_exceptions.NotAuthorizedException as err:
            logger.error(f"authenticate ::: {str(err)}")
            return error_response(err, msg=f'{func.__name__}', status_code=status_codes.http401)
        setattr(request, 'auth_result', {'user_id': user_id})
        result = func(*args, **kwargs)
        logger.info(f'authenticate ::: SUCCESS, func.__name__ {func.__name__}')
        return result

    return result_auth
