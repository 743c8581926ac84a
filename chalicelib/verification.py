"""
Document verification of restaurants during onboarding.

Document records and the status record share one partition per restaurant,
document records are told apart by the presence of the type attribute.
The status record is never patched, it is recomputed from all documents
every time the set of documents changes.
"""
import time
from email.message import Message
from typing import Tuple, List, Dict
from uuid import uuid4

from boto3.dynamodb.conditions import Attr, Key
from chalice import Response
from requests_toolbelt.multipart.decoder import MultipartDecoder

from chalicelib.base_class_entity import EntityBase
from chalicelib.constants import keys_structure, db_structure
from chalicelib.constants.constants import (REQUIRED_DOCUMENT_TYPES, DOCUMENT_STATUSES, DOCUMENT_STATUS_PENDING,
                                            DOCUMENT_STATUS_APPROVED, DOCUMENT_STATUS_REJECTED)
from chalicelib.constants.status_codes import http200
from chalicelib.utils import auth as utils_auth, app as utils_app, db as utils_db, s3 as utils_s3, exceptions
from chalicelib.utils.data import current_timestamp
from chalicelib.utils.logger import logger


class VerificationDocument(EntityBase):
    pk = keys_structure.verification_pk
    sk = keys_structure.verification_document_sk

    required_fields_validation = {
        'id_': lambda x: isinstance(x, str),
        'restaurant_id': lambda x: isinstance(x, str),
        'type_': lambda x: isinstance(x, str) and len(x) > 0,
        'status_': lambda x: x in DOCUMENT_STATUSES,
        'file_url': lambda x: isinstance(x, str),
        'file_name': lambda x: isinstance(x, str),
        'uploaded_at': lambda x: isinstance(x, str)
    }

    optional_fields_validation = {
        'expiry_date': lambda x: isinstance(x, str)
    }

    def __init__(self, id_, restaurant_id, **kwargs):
        EntityBase.__init__(self, id_)

        self.restaurant_id: str = restaurant_id
        self.type_: str = kwargs.get('type_')
        self.status_: str = kwargs.get('status_') or DOCUMENT_STATUS_PENDING
        self.file_url: str = kwargs.get('file_url')
        self.file_name: str = kwargs.get('file_name')
        self.uploaded_at: str = kwargs.get('uploaded_at') or current_timestamp()
        self.expiry_date: str = kwargs.get('expiry_date')
        self.record_type = 'verification_document'

    @classmethod
    def init_get_by_id(cls, restaurant_id, document_id):
        logger.info("init_get_by_id ::: started")
        c = cls(document_id, restaurant_id)
        db_record = c._get_db_item()
        if 'type_' not in db_record:
            raise exceptions.RecordNotFound(f'verification document {document_id} not found')
        return cls(**db_record)

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk.format(restaurant_id=self.restaurant_id), self.sk.format(document_id=self.id_)

    def _to_dict(self):
        return {
            'id_': self.id_,
            'restaurant_id': self.restaurant_id,
            'type_': self.type_,
            'status_': self.status_,
            'file_url': self.file_url,
            'file_name': self.file_name,
            'uploaded_at': self.uploaded_at,
            'expiry_date': self.expiry_date
        }

    def to_ui(self):
        return self._to_ui()


class VerificationStatus(EntityBase):
    pk = keys_structure.verification_pk
    sk = keys_structure.verification_status_sk

    required_fields_validation = {
        'is_verified': lambda x: isinstance(x, bool),
        'documents_submitted': lambda x: isinstance(x, bool),
        'pending_documents': lambda x: isinstance(x, list),
        'rejected_documents': lambda x: isinstance(x, list),
        'last_updated': lambda x: isinstance(x, str)
    }

    def __init__(self, restaurant_id, **kwargs):
        EntityBase.__init__(self, keys_structure.verification_status_sk)

        defaults = db_structure.VERIFICATION_STATUS
        self.restaurant_id: str = restaurant_id
        self.is_verified: bool = kwargs.get('is_verified', defaults['is_verified'])
        self.documents_submitted: bool = kwargs.get('documents_submitted', defaults['documents_submitted'])
        self.pending_documents: List[str] = list(kwargs.get('pending_documents', REQUIRED_DOCUMENT_TYPES))
        self.rejected_documents: List[str] = list(kwargs.get('rejected_documents', []))
        self.last_updated: str = kwargs.get('last_updated') or current_timestamp()
        self.record_type = 'verification_status'

    @classmethod
    def from_documents(cls, restaurant_id, documents: List[VerificationDocument]):
        """
        A required type stops being pending once any of its documents is approved.
        Every rejected document adds its type to rejected documents,
        an approval of the same type does not cancel the rejection
        and repeated rejections of one type are all kept.
        """
        pending_documents = dict.fromkeys(REQUIRED_DOCUMENT_TYPES)
        rejected_documents = []
        for document in documents:
            if document.status_ == DOCUMENT_STATUS_APPROVED:
                pending_documents.pop(document.type_, None)
            elif document.status_ == DOCUMENT_STATUS_REJECTED:
                rejected_documents.append(document.type_)

        return cls(
            restaurant_id,
            is_verified=len(pending_documents) == 0 and len(rejected_documents) == 0,
            documents_submitted=len(documents) > 0,
            pending_documents=list(pending_documents),
            rejected_documents=rejected_documents,
            last_updated=current_timestamp()
        )

    def _get_pk_sk(self) -> Tuple[str, str]:
        return self.pk.format(restaurant_id=self.restaurant_id), self.sk

    def _to_dict(self):
        return {
            'restaurant_id': self.restaurant_id,
            'is_verified': self.is_verified,
            'documents_submitted': self.documents_submitted,
            'pending_documents': self.pending_documents,
            'rejected_documents': self.rejected_documents,
            'last_updated': self.last_updated
        }

    def to_ui(self):
        return self._to_ui()


@utils_app.log_and_raise('Error uploading document')
def upload_document(restaurant_id: str, file_content: bytes, file_name: str, document_type: str,
                    expiry_date: str = None, content_type: str = 'application/octet-stream') -> VerificationDocument:
    if not document_type or not file_name:
        raise exceptions.MandatoryFieldsAreNotFilled('Document type and file are required')

    # timestamp suffix keeps repeated uploads of one type apart
    file_path = keys_structure.verification_file_key.format(
        restaurant_id=restaurant_id, document_type=document_type, timestamp=int(time.time() * 1000))
    utils_s3.upload_file_to_s3(file_content, file_path, content_type)
    file_url = utils_s3.get_download_url(file_path)

    document = VerificationDocument(
        id_=str(uuid4()),
        restaurant_id=restaurant_id,
        type_=document_type,
        status_=DOCUMENT_STATUS_PENDING,
        file_url=file_url,
        file_name=file_name,
        uploaded_at=current_timestamp(),
        expiry_date=expiry_date
    )
    document._put_db_record()

    update_verification_status(restaurant_id)
    return document


@utils_app.log_and_raise('Error getting verification status')
def get_verification_status(restaurant_id: str) -> VerificationStatus:
    status = VerificationStatus(restaurant_id)
    try:
        db_record = status._get_db_item()
    except exceptions.RecordNotFound:
        logger.info(f"get_verification_status ::: initializing default status for {restaurant_id=}")
        status._put_db_record()
        return status
    return VerificationStatus(**db_record)


@utils_app.log_and_raise('Error getting verification documents')
def get_documents(restaurant_id: str) -> List[VerificationDocument]:
    db_records: List[Dict] = utils_db.query_items_paged(
        Key('partkey').eq(keys_structure.verification_pk.format(restaurant_id=restaurant_id)),
        filter_expression=Attr('type_').exists()
    )
    return [VerificationDocument(**record) for record in db_records]


@utils_app.log_and_raise('Error updating verification status')
def update_verification_status(restaurant_id: str) -> VerificationStatus:
    documents = get_documents(restaurant_id)
    status = VerificationStatus.from_documents(restaurant_id, documents)
    status._put_db_record()
    logger.info(f"update_verification_status ::: {restaurant_id=}, {status.is_verified=}, "
                f"{status.pending_documents=}, {status.rejected_documents=}")
    return status


@utils_app.log_and_raise('Error deleting document')
def delete_document(restaurant_id: str, document: VerificationDocument) -> None:
    """
    Steps are not compensated, a failure after the file removal leaves a record without a file
    """
    utils_s3.delete_file_from_s3(utils_s3.get_file_path_from_url(document.file_url))
    document._delete_db_record()
    update_verification_status(restaurant_id)


def parse_content_disposition(value: str) -> Dict[str, str]:
    message = Message()
    message['content-disposition'] = value
    return {
        'name': message.get_param('name', header='content-disposition'),
        'filename': message.get_filename()
    }


def parse_multipart_request_data(current_request):
    decoder = MultipartDecoder(current_request.raw_body, current_request.headers['content-type'])
    fields = {}
    for part in decoder.parts:
        disposition = parse_content_disposition(part.headers.get(b'Content-Disposition', b'').decode('utf-8'))
        fields[disposition.get('name')] = part
        if disposition.get('filename'):
            setattr(part, 'file_name', disposition['filename'])

    file_part = fields.get('fileContent')
    type_part = fields.get('type')
    if file_part is None or type_part is None:
        raise exceptions.MandatoryFieldsAreNotFilled('fileContent and type are required')

    expiry_part = fields.get('expiryDate')
    return {
        'file_content': file_part.content,
        'file_name': getattr(file_part, 'file_name', None),
        'content_type': file_part.headers.get(b'Content-Type', b'application/octet-stream').decode('utf-8'),
        'document_type': type_part.text,
        'expiry_date': expiry_part.text if expiry_part is not None and expiry_part.text else None
    }


@utils_app.request_exception_handler(ui_message='Failed to upload document')
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_upload_document(current_request, restaurant_id) -> Response:
    document = upload_document(restaurant_id, **parse_multipart_request_data(current_request))
    return Response(status_code=http200, body=document.to_ui())


@utils_app.request_exception_handler(ui_message='Failed to load verification status')
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_get_verification_status(current_request, restaurant_id) -> Response:
    return Response(status_code=http200, body=get_verification_status(restaurant_id).to_ui())


@utils_app.request_exception_handler(ui_message='Failed to load verification documents')
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_get_documents(current_request, restaurant_id) -> Response:
    documents = [document.to_ui() for document in get_documents(restaurant_id)]
    logger.info(f"endpoint_get_documents ::: returning documents={[document['id'] for document in documents]}")
    return Response(status_code=http200, body=documents)


@utils_app.request_exception_handler(ui_message='Failed to delete document')
@utils_auth.authenticate
@utils_app.log_start_finish
def endpoint_delete_document(current_request, restaurant_id, document_id) -> Response:
    document = VerificationDocument.init_get_by_id(restaurant_id, document_id)
    delete_document(restaurant_id, document)
    return Response(status_code=http200, body={'message': 'Document was successfully deleted', 'id': document_id})
