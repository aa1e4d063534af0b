"""Checkout API routes for the storefront"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..core.config import settings
from ..database.orders import OrderNotFound, order_db
from ..database.products import product_db
from ..errors import (
    CheckoutSessionFailed,
    EmptyCart,
    InsufficientStock,
    InvalidStatusTransition,
    ProductUnavailable,
    ReconciliationGap,
)
from ..gateway import get_gateway
from ..models.checkout import (
    CheckoutRequest,
    CheckoutResponse,
    Order,
    OrderStatusUpdate,
    ReconciliationRecord,
)
from ..services.checkout import CheckoutOrchestrator

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/checkout", tags=["Checkout"])


def get_orchestrator() -> CheckoutOrchestrator:
    return CheckoutOrchestrator(
        products=product_db,
        orders=order_db,
        gateway=get_gateway(),
    )


@router.post("", response_model=CheckoutResponse)
def checkout(
    request: CheckoutRequest,
    orchestrator: CheckoutOrchestrator = Depends(get_orchestrator),
):
    """
    Start checkout for a cart snapshot.

    Validates every line against live inventory, records a pending order and
    returns the hosted payment page to redirect to.
    """
    try:
        result = orchestrator.checkout(request)
    except (EmptyCart, ProductUnavailable, InsufficientStock) as e:
        raise HTTPException(status_code=400, detail=str(e))
    except (CheckoutSessionFailed, ReconciliationGap) as e:
        # Already logged with order details by the orchestrator
        logger.error(f"Checkout failed: {e}")
        raise HTTPException(status_code=500, detail="Failed to create checkout session")
    except Exception:
        logger.exception("Checkout error")
        raise HTTPException(status_code=500, detail="Failed to create checkout session")

    logger.info(f"Order {result.order_number} awaiting payment in session {result.session_id}")

    return CheckoutResponse(
        session_id=result.session_id,
        url=result.url,
        order_id=result.order_id,
    )


@router.get("/orders/{order_id}", response_model=Order)
async def get_order(order_id: str):
    """Get order details"""
    order = order_db.get_order(order_id)
    if not order:
        raise HTTPException(status_code=404, detail="Order not found")
    return order


@router.get("/orders", response_model=list[Order])
async def list_orders(limit: int = Query(50, ge=1, le=settings.max_page_size)):
    """List recent orders"""
    return order_db.list_orders(limit=limit)


@router.patch("/orders/{order_id}/status", response_model=Order)
async def update_order_status(order_id: str, request: OrderStatusUpdate):
    """Move an order along its status and/or payment lifecycle"""
    if request.status is None and request.payment_status is None:
        raise HTTPException(status_code=400, detail="Nothing to update")

    try:
        order = order_db.update_statuses(
            order_id,
            status=request.status,
            payment_status=request.payment_status,
        )
    except OrderNotFound:
        raise HTTPException(status_code=404, detail="Order not found")
    except InvalidStatusTransition as e:
        raise HTTPException(status_code=409, detail=str(e))

    return order


@router.get("/reconciliation", response_model=list[ReconciliationRecord])
async def list_reconciliation_gaps():
    """Payment sessions that still need to be linked to their orders"""
    return order_db.reconciliation_log
