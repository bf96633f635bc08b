"""Owner-scoped document repository.

Every function takes the caller's user id explicitly and builds its statements
from ``DocumentQuery.for_owner``, so rows of other users are never read or
written. Misses are reported the same way whether the row is absent or owned
by someone else.

Listings are newest first: ``created_at`` descending, and rows sharing a
timestamp follow insertion order in the same direction (higher id first), so a
listing reads as one reverse-chronological sequence.

``list_documents`` and ``search_documents`` read the page and the total in two
separate statements without a shared snapshot. A write landing between them
can leave ``total``/``has_more`` briefly out of step with the page.
"""

import logging
from dataclasses import dataclass
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from docarchive.documents.query import DocumentQuery
from docarchive.errors import NotFoundOrForbidden, StorageFailure
from docarchive.models.document import Document, FileType
from docarchive.models.user import utcnow
from docarchive.schemas.document import (
    DEFAULT_PAGE_SIZE, DocumentCreate, DocumentUpdate, ListParams, SearchParams,
)

logger = logging.getLogger(__name__)


@dataclass
class DocumentPage:
    documents: list[Document]
    total: int
    has_more: bool


def _commit(db: Session, action: str):
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Document %s failed", action)
        raise StorageFailure() from e


def create_document(db: Session, data: DocumentCreate, owner_id: int) -> Document:
    doc = Document(
        user_id=owner_id,
        filename=data.filename,
        original_filename=data.original_filename,
        file_type=data.file_type,
        file_size=data.file_size,
        file_path=data.file_path,
        content_text=data.content_text,
        meta=data.metadata,
        upload_source=data.upload_source,
        external_service_id=data.external_service_id,
    )
    db.add(doc)
    _commit(db, "create")
    db.refresh(doc)
    logger.info("Created document id=%s for user id=%s (%s)", doc.id, owner_id, doc.upload_source.value)
    return doc


def get_document(db: Session, document_id: int, owner_id: int) -> Document | None:
    return DocumentQuery.for_owner(owner_id).with_id(document_id).first(db)


def _paginate(db: Session, query: DocumentQuery, limit: int, offset: int) -> DocumentPage:
    documents = query.page(db, limit, offset)
    total = query.count(db)
    return DocumentPage(
        documents=documents,
        total=total,
        has_more=offset + len(documents) < total,
    )


def list_documents(
    db: Session,
    owner_id: int,
    file_type: FileType | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> DocumentPage:
    params = ListParams(limit=limit, offset=offset, file_type=file_type)
    query = DocumentQuery.for_owner(owner_id).of_type(params.file_type)
    return _paginate(db, query, params.limit, params.offset)


def search_documents(
    db: Session,
    owner_id: int,
    query: str,
    file_type: FileType | None = None,
    limit: int = DEFAULT_PAGE_SIZE,
    offset: int = 0,
) -> DocumentPage:
    params = SearchParams(query=query, limit=limit, offset=offset, file_type=file_type)
    q = DocumentQuery.for_owner(owner_id).of_type(params.file_type).matching(params.query)
    return _paginate(db, q, params.limit, params.offset)


def update_document(db: Session, document_id: int, owner_id: int, patch: DocumentUpdate) -> Document:
    doc = get_document(db, document_id, owner_id)
    if doc is None:
        raise NotFoundOrForbidden()

    changes = patch.changes()
    if "filename" in changes:
        doc.filename = changes["filename"]
    if "content_text" in changes:
        doc.content_text = changes["content_text"]
    if "metadata" in changes:
        doc.meta = changes["metadata"]
    doc.updated_at = utcnow()

    _commit(db, "update")
    db.refresh(doc)
    logger.info("Updated document id=%s fields=%s", doc.id, sorted(changes))
    return doc


def delete_document(db: Session, document_id: int, owner_id: int) -> bool:
    doc = get_document(db, document_id, owner_id)
    if doc is None:
        return False
    db.delete(doc)
    _commit(db, "delete")
    logger.info("Deleted document id=%s for user id=%s", document_id, owner_id)
    return True
