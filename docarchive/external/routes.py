
import hmac
from fastapi import APIRouter, Depends, Header, status
from sqlalchemy.orm import Session
from docarchive.auth.deps import get_db
from docarchive.config import settings
from docarchive.errors import Unauthenticated
from docarchive.external.service import external_upload
from docarchive.schemas.document import DocumentOut, ExternalUploadIn

router = APIRouter(prefix="/external", tags=["external"])

def require_service_key(x_service_key: str | None = Header(default=None)):
    expected = settings.external_service_key
    if not expected:
        return
    if not x_service_key or not hmac.compare_digest(x_service_key, expected):
        raise Unauthenticated("Invalid service key")

@router.post(
    "/upload",
    response_model=DocumentOut,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_service_key)],
)
def upload(body: ExternalUploadIn, db: Session = Depends(get_db)):
    return DocumentOut.model_validate(external_upload(db, body))
