
from sqlalchemy import and_, func, or_, select
from sqlalchemy.orm import Session
from docarchive.models.document import Document, FileType


class DocumentQuery:
    """Owner-scoped document filter.

    Instances are only created through ``for_owner`` so every statement built
    from one carries the owner predicate. Refinements return new instances.
    """

    __slots__ = ("owner_id", "_clauses")

    def __init__(self, owner_id: int, clauses: tuple = ()):
        self.owner_id = owner_id
        self._clauses = clauses

    @classmethod
    def for_owner(cls, owner_id: int) -> "DocumentQuery":
        return cls(owner_id)

    def _with(self, clause) -> "DocumentQuery":
        return DocumentQuery(self.owner_id, self._clauses + (clause,))

    def of_type(self, file_type: FileType | None) -> "DocumentQuery":
        if file_type is None:
            return self
        return self._with(Document.file_type == file_type)

    def matching(self, text: str | None) -> "DocumentQuery":
        if not text:
            return self
        return self._with(or_(
            Document.filename.icontains(text, autoescape=True),
            Document.original_filename.icontains(text, autoescape=True),
            Document.content_text.icontains(text, autoescape=True),
        ))

    def with_id(self, document_id: int) -> "DocumentQuery":
        return self._with(Document.id == document_id)

    def where(self):
        return and_(Document.user_id == self.owner_id, *self._clauses)

    def select(self):
        return (
            select(Document)
            .where(self.where())
            .order_by(Document.created_at.desc(), Document.id.desc())
        )

    def first(self, db: Session) -> Document | None:
        return db.execute(self.select().limit(1)).scalars().first()

    def page(self, db: Session, limit: int, offset: int) -> list[Document]:
        return list(db.execute(self.select().limit(limit).offset(offset)).scalars().all())

    def count(self, db: Session) -> int:
        total = db.execute(select(func.count(Document.id)).where(self.where())).scalar_one()
        return int(total or 0)
