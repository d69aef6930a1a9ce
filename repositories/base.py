import logging
from datetime import datetime
from typing import Any, Generic, List, Optional, Type, TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.exceptions import StoreWriteFailure

logger = logging.getLogger(__name__)

ModelT = TypeVar("ModelT")


class Repository(Generic[ModelT]):
    """Filtered list, get-by-id, insert, update-by-id and delete-by-id over one table.

    Every write commits immediately. A failed commit is rolled back and surfaced as
    StoreWriteFailure so that no partial state is left in the session.
    """

    model: Type[ModelT]

    def __init__(self, db: Session):
        self.db = db

    def get(self, entity_id: str) -> Optional[ModelT]:
        return self.db.get(self.model, entity_id)

    def list(self, order_by=None, **filters: Any) -> List[ModelT]:
        query = self.db.query(self.model).filter_by(**filters)
        if order_by is not None:
            query = query.order_by(order_by)
        return query.all()

    def first(self, **filters: Any) -> Optional[ModelT]:
        return self.db.query(self.model).filter_by(**filters).first()

    def insert(self, **values: Any) -> ModelT:
        entity = self.model(**values)
        self.db.add(entity)
        self._commit(f"insert {self.model.__name__}")
        self.db.refresh(entity)
        return entity

    def update(self, entity_id: str, **values: Any) -> Optional[ModelT]:
        entity = self.get(entity_id)
        if entity is None:
            return None
        for field, value in values.items():
            setattr(entity, field, value)
        self._commit(f"update {self.model.__name__} {entity_id}")
        self.db.refresh(entity)
        return entity

    def delete(self, entity_id: str) -> bool:
        entity = self.get(entity_id)
        if entity is None:
            return False
        self.db.delete(entity)
        self._commit(f"delete {self.model.__name__} {entity_id}")
        return True

    def _commit(self, what: str) -> None:
        try:
            self.db.commit()
        except SQLAlchemyError as e:
            self.db.rollback()
            logger.error(f"Store write failed ({what}): {e}")
            raise StoreWriteFailure() from e


class SoftDeleteRepository(Repository[ModelT]):
    """Repository for tables carrying is_deleted / deleted_at.

    list() hides soft-deleted rows unless is_deleted is passed explicitly.
    """

    def list(self, order_by=None, is_deleted: bool = False, **filters: Any) -> List[ModelT]:
        return super().list(order_by=order_by, is_deleted=is_deleted, **filters)

    def soft_delete(self, entity_id: str, now: Optional[datetime] = None) -> Optional[ModelT]:
        return self.update(entity_id, is_deleted=True, deleted_at=now or datetime.utcnow())

    def restore(self, entity_id: str) -> Optional[ModelT]:
        return self.update(entity_id, is_deleted=False, deleted_at=None)

    def hard_delete(self, entity_id: str) -> bool:
        return self.delete(entity_id)
