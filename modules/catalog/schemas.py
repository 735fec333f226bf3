"""
Catalog Module - Request Schemas
==================================
String fields are stripped before length checks, so whitespace-only
titles and categories are rejected.
"""

from typing import List, Optional

from pydantic import BaseModel, ConfigDict, Field

from config.settings import MAX_PRICE


class ProductCreate(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    title: str = Field(..., min_length=1, max_length=200)
    description: str = Field(..., max_length=5000)
    price: float = Field(..., ge=0, le=MAX_PRICE)
    stock: int = Field(..., ge=0)
    images: List[str] = Field(default_factory=list)
    category: str = Field(..., min_length=1, max_length=100)


class ProductUpdate(BaseModel):
    """Partial product edit: a field left out (or null) is not touched."""
    model_config = ConfigDict(str_strip_whitespace=True)

    title: Optional[str] = Field(None, min_length=1, max_length=200)
    description: Optional[str] = Field(None, max_length=5000)
    price: Optional[float] = Field(None, ge=0, le=MAX_PRICE)
    stock: Optional[int] = Field(None, ge=0)
    images: Optional[List[str]] = None
    category: Optional[str] = Field(None, min_length=1, max_length=100)
