from fastapi import APIRouter, Depends
from pydantic import BaseModel

from devgad.core.errors import NotFoundError
from devgad.data import catalog
from devgad.db.deps import get_cart, get_or_create_cart
from devgad.services.cart_service import Cart

router = APIRouter()

class CartItemAdd(BaseModel):
    product_id: str

class CartQuantityUpdate(BaseModel):
    quantity: int

@router.get("/")
def view_cart(cart: Cart = Depends(get_cart)):
    return cart.to_dict()

@router.post("/items")
def add_item(data: CartItemAdd, cart: Cart = Depends(get_or_create_cart)):
    product = catalog.get_product(data.product_id)
    if product is None:
        raise NotFoundError("Product")
    cart.add(product)
    return cart.to_dict()

@router.put("/items/{product_id}")
def update_quantity(product_id: str, data: CartQuantityUpdate, cart: Cart = Depends(get_cart)):
    """Quantity below 1 removes the line."""
    cart.set_quantity(product_id, data.quantity)
    return cart.to_dict()

@router.delete("/items/{product_id}")
def remove_item(product_id: str, cart: Cart = Depends(get_cart)):
    cart.remove(product_id)
    return cart.to_dict()

@router.delete("/")
def clear_cart(cart: Cart = Depends(get_cart)):
    cart.clear()
    return cart.to_dict()
