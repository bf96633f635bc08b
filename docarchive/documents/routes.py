
from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session
from docarchive.auth.deps import get_db, get_current_user_id
from docarchive.documents import service
from docarchive.errors import NotFoundOrForbidden
from docarchive.models.document import FileType
from docarchive.schemas.document import (
    DEFAULT_PAGE_SIZE, MAX_PAGE_SIZE, DocumentCreate, DocumentListOut, DocumentOut, DocumentUpdate,
)

router = APIRouter(prefix="/documents", tags=["documents"])

def _page_out(page: service.DocumentPage) -> DocumentListOut:
    return DocumentListOut(
        documents=[DocumentOut.model_validate(d) for d in page.documents],
        total=page.total,
        has_more=page.has_more,
    )

@router.post("", response_model=DocumentOut, status_code=status.HTTP_201_CREATED)
def upload_document(body: DocumentCreate, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return DocumentOut.model_validate(service.create_document(db, body, user_id))

@router.get("", response_model=DocumentListOut)
def list_documents(
    limit: int = Query(DEFAULT_PAGE_SIZE, gt=0, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    file_type: FileType | None = None,
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    return _page_out(service.list_documents(db, user_id, file_type=file_type, limit=limit, offset=offset))

@router.get("/search", response_model=DocumentListOut)
def search_documents(
    query: str = Query(..., min_length=1),
    file_type: FileType | None = None,
    limit: int = Query(DEFAULT_PAGE_SIZE, gt=0, le=MAX_PAGE_SIZE),
    offset: int = Query(0, ge=0),
    db: Session = Depends(get_db),
    user_id: int = Depends(get_current_user_id),
):
    page = service.search_documents(db, user_id, query, file_type=file_type, limit=limit, offset=offset)
    return _page_out(page)

@router.get("/{doc_id}", response_model=DocumentOut)
def get_document(doc_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    doc = service.get_document(db, doc_id, user_id)
    if not doc:
        raise NotFoundOrForbidden()
    return DocumentOut.model_validate(doc)

@router.patch("/{doc_id}", response_model=DocumentOut)
def update_document(doc_id: int, body: DocumentUpdate, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return DocumentOut.model_validate(service.update_document(db, doc_id, user_id, body))

@router.delete("/{doc_id}")
def delete_document(doc_id: int, db: Session = Depends(get_db), user_id: int = Depends(get_current_user_id)):
    return {"deleted": service.delete_document(db, doc_id, user_id)}
