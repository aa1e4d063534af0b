"""Cart sync API routes for the storefront"""

from fastapi import APIRouter, HTTPException

from ..database.carts import cart_db
from ..models.cart import CartResponse, CartSyncRequest

router = APIRouter(prefix="/api/cart", tags=["Cart"])


@router.post("/sync", response_model=CartResponse)
async def sync_cart(request: CartSyncRequest):
    """Store a copy of a client cart for cross-device access"""
    cart = cart_db.save_cart(request.user_id, request.items)
    return CartResponse(cart=cart, message="Cart synced")


@router.get("/{user_id}", response_model=CartResponse)
async def get_cart(user_id: str):
    """Get the synced cart of a user"""
    cart = cart_db.get_cart(user_id)
    if not cart:
        raise HTTPException(status_code=404, detail="Cart not found")
    return CartResponse(cart=cart)


@router.delete("/{user_id}", status_code=204)
async def delete_cart(user_id: str):
    """Drop the synced cart of a user"""
    if not cart_db.delete_cart(user_id):
        raise HTTPException(status_code=404, detail="Cart not found")
