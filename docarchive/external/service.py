
import logging
from sqlalchemy.orm import Session
from docarchive.auth.service import get_user_by_email
from docarchive.documents.service import create_document
from docarchive.errors import UserNotFound
from docarchive.models.document import Document, UploadSource
from docarchive.schemas.document import DocumentCreate, ExternalUploadIn

logger = logging.getLogger(__name__)


def external_upload(db: Session, data: ExternalUploadIn) -> Document:
    # exact match: the caller is a trusted service, not an end user
    user = get_user_by_email(db, data.user_email)
    if user is None:
        raise UserNotFound(f"User not found with email: {data.user_email}")

    doc = create_document(
        db,
        DocumentCreate(
            filename=data.filename,
            original_filename=data.original_filename,
            file_type=data.file_type,
            file_size=data.file_size,
            file_path=data.file_path,
            content_text=data.content_text,
            metadata=data.metadata,
            upload_source=UploadSource.EXTERNAL_SERVICE,
            external_service_id=data.external_service_id,
        ),
        owner_id=user.id,
    )
    logger.info(
        "Ingested document id=%s from %s (external id %s)",
        doc.id, data.service_name, data.external_service_id,
    )
    return doc
