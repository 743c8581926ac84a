import os
import tempfile
from urllib.parse import urlparse, unquote

from chalicelib.constants.constants import DEFAULT_DOWNLOAD_URL_EXPIRATION
from chalicelib.utils.boto_clients import s3_client
from chalicelib.utils.logger import logger


def verification_files_bucket():
    return os.environ["VERIFICATION_FILES_BUCKET_NAME"]


def download_url_expiration():
    return int(os.environ.get('DOWNLOAD_URL_EXPIRATION', DEFAULT_DOWNLOAD_URL_EXPIRATION))


def upload_file_to_s3(body, file_path, content_type):
    with tempfile.TemporaryFile() as tf:
        tf.write(body)
        tf.seek(0)
        s3_client().upload_fileobj(tf, verification_files_bucket(), f'{file_path}',
                                   ExtraArgs={'ContentType': content_type})
    logger.info(f'upload_file_to_s3:: SUCCESS, file_path:{file_path} ')
    return file_path


def get_download_url(file_path):
    url = s3_client().generate_presigned_url(
        'get_object',
        Params={'Bucket': verification_files_bucket(), 'Key': file_path},
        ExpiresIn=download_url_expiration()
    )
    logger.info(f'get_download_url:: SUCCESS, file_path:{file_path} ')
    return url


def get_file_path_from_url(url):
    """
    Works with both virtual-hosted (bucket.s3.region.amazonaws.com/key)
    and path-style (s3.region.amazonaws.com/bucket/key) urls
    """
    bucket = verification_files_bucket()
    parsed_url = urlparse(url)
    file_path = unquote(parsed_url.path).lstrip('/')
    if not parsed_url.netloc.startswith(f'{bucket}.') and file_path.startswith(f'{bucket}/'):
        file_path = file_path[len(bucket) + 1:]
    return file_path


def delete_file_from_s3(file_path):
    s3_client().delete_object(Bucket=verification_files_bucket(), Key=file_path)
    logger.info(f'delete_file_from_s3:: SUCCESS, file_path:{file_path} ')
