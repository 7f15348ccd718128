from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session
from typing import List
import logging

from api.todos.schemas import TodoCreate, TodoResponse
from tryon.db import get_db
from tryon.models import Todo

todos_router = APIRouter()
logger = logging.getLogger(__name__)


@todos_router.get("", response_model=List[TodoResponse])
def list_todos(db: Session = Depends(get_db)):
    try:
        return db.execute(select(Todo).order_by(Todo.id)).scalars().all()
    except SQLAlchemyError as e:
        logger.error(f"Failed to list todos: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server Error")


@todos_router.post("", response_model=TodoResponse, status_code=status.HTTP_201_CREATED)
def create_todo(payload: TodoCreate, db: Session = Depends(get_db)):
    title = payload.title.strip()
    if not title:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail="Title is required")

    todo = Todo(title=title)
    db.add(todo)
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.error(f"Failed to create todo: {e}", exc_info=True)
        raise HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="Server Error")
    db.refresh(todo)
    logger.info(f"Created todo {todo.id}")
    return todo
