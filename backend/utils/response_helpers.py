"""
Response helper utilities for model validation and domain error translation
"""
from typing import Any, Dict, List
from fastapi import HTTPException, status
from pydantic import BaseModel

from services.errors import KaamDhenuError, NotFoundError


def orm_to_dict(obj: Any) -> Dict[str, Any]:
    """
    Column values of a SQLAlchemy model as a plain dict
    """
    if isinstance(obj, dict):
        return dict(obj)
    return {
        column.key: getattr(obj, column.key)
        for column in obj.__table__.columns
    }


def safe_model_validate(model_class: BaseModel, data: Any) -> BaseModel:
    """
    Validate a response model from an ORM object or dict without touching
    unloaded relationships
    """
    if not isinstance(data, dict) and hasattr(data, '__table__'):
        data = orm_to_dict(data)
    return model_class.model_validate(data)


def safe_model_validate_list(model_class: BaseModel, data_list: List[Any]) -> List[BaseModel]:
    return [safe_model_validate(model_class, item) for item in data_list]


def http_error_for(error: KaamDhenuError) -> HTTPException:
    """
    Business-rule failures are client errors; missing entities are 404
    """
    if isinstance(error, NotFoundError):
        return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=error.message)
    return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=error.message)
