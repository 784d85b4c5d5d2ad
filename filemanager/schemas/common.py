from typing import Generic, TypeVar, Optional
from pydantic import BaseModel

T = TypeVar('T')

class DataResponse(BaseModel, Generic[T]):
    message: Optional[str] = None
    data: Optional[T] = None

class MessageResponse(BaseModel):
    message: str

class ErrorResponse(BaseModel):
    """Shape shared by every error response"""
    error: str
