from fastapi import APIRouter
from typing import List

from devgad.core.errors import NotFoundError
from devgad.data import catalog
from devgad.schemas.product import Product

router = APIRouter()

@router.get("/", response_model=List[Product])
def list_products():
    return list(catalog.list_products())

@router.get("/{product_id}", response_model=Product)
def get_product(product_id: str):
    product = catalog.get_product(product_id)
    if product is None:
        raise NotFoundError("Product")
    return product
