from typing import List

from stockroom.schemas.base import CamelModel


class ReferenceNameIn(CamelModel):
    name: str = ""


class CategoryList(CamelModel):
    success: bool = True
    categories: List[str]


class VendorList(CamelModel):
    success: bool = True
    vendors: List[str]
