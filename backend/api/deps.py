from fastapi import Depends
from sqlalchemy.orm import Session

from db.database import get_db
from db.document_store import SqlDocumentStore
from services.habit_engine import HabitEngine


def get_engine(db: Session = Depends(get_db)) -> HabitEngine:
    return HabitEngine(SqlDocumentStore(db))
