from typing import TypeVar

from sqlalchemy.orm import Session

from artfolio.db import Base

ModelT = TypeVar("ModelT", bound=Base)


class BaseRepository:
    """Holds the request-scoped session shared by all repositories."""

    def __init__(self, db: Session):
        self.db = db

    def save(self, instance: ModelT) -> ModelT:
        """Commit pending changes on ``instance`` and reload it from the database."""
        self.db.add(instance)
        self.db.commit()
        self.db.refresh(instance)
        return instance
