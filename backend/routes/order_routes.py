"""
Order Routes - Print orders, cost estimates and the manual processing hook
"""
from fastapi import APIRouter, Depends, HTTPException, Query, Request, status
from fastapi.responses import JSONResponse
from sqlalchemy.orm import Session
from typing import Any, List, Optional
from uuid import UUID
import json
import logging

from database import get_db
from schemas.order_schemas import OrderCreate, OrderResponse, OrderEstimateResponse
from security import get_current_user
from services import order_service
from services.access_service import Caller, get_caller, require_order_owner, resolve_caller
from tasks.order_tasks import process_order_task
from utils.response_builders import order_response

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/orders", tags=["orders"])
process_router = APIRouter(prefix="/api/orders", tags=["orders"])


# ============================================
# Orders
# ============================================

@router.post("", response_model=OrderResponse, status_code=status.HTTP_201_CREATED)
async def create_order(
    order_data: OrderCreate,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Create an order for one of the caller's books; it waits in pending_payment."""
    order = order_service.create_order(
        db,
        caller,
        order_data.book_id,
        order_data.shipping_address.model_dump(),
        order_data.contact_email,
        order_data.price,
    )
    return order_response(order)


@router.get("", response_model=List[OrderResponse])
async def list_orders(
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    return [order_response(order) for order in order_service.list_orders(db, caller)]


@router.get("/estimate", response_model=OrderEstimateResponse)
def estimate_order(
    book_id: UUID = Query(...),
    postal_code: str = Query(..., min_length=3),
    country_code: str = Query("US", min_length=2, max_length=2),
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Lulu print + GROUND shipping quote for a book."""
    return order_service.estimate_order_cost(db, caller, book_id, postal_code, country_code)


@router.get("/{order_id}", response_model=OrderResponse)
async def get_order(
    order_id: UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    return order_response(require_order_owner(db, caller, order_id))


@router.post("/{order_id}/refresh-status", response_model=OrderResponse)
def refresh_order_status(
    order_id: UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Pull the latest print job status from Lulu."""
    order = require_order_owner(db, caller, order_id)
    if not order.lulu_print_job_id:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Order has not been submitted to the printer yet"
        )

    result = order_service.check_print_job_status(db, order.id)
    if not result["success"]:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=result["error"])

    db.refresh(order)
    return order_response(order)


@router.post("/{order_id}/process", status_code=status.HTTP_202_ACCEPTED)
async def queue_order_processing(
    order_id: UUID,
    caller: Caller = Depends(get_caller),
    db: Session = Depends(get_db)
):
    """Run order processing in the background worker."""
    order = require_order_owner(db, caller, order_id)
    task = process_order_task.delay(str(order.id))
    logger.info(f"Processing queued for order {order.id} (task {task.id})")
    return {"order_id": order.id, "task_id": task.id}


# ============================================
# Manual processing hook
# ============================================

_UNREADABLE_BODY = object()


async def read_json_body(request: Request) -> Any:
    """Request body as parsed JSON; None when empty."""
    raw = await request.body()
    if not raw.strip():
        return None
    try:
        return json.loads(raw)
    except ValueError:
        return _UNREADABLE_BODY


def _requested_order_id(payload: Any) -> Optional[str]:
    order_id = payload.get("orderId") if isinstance(payload, dict) else None
    return str(order_id) if order_id else None


def _process_response(order_id: str, db: Session) -> JSONResponse:
    result = order_service.process_order(db, order_id)
    if result.success:
        return JSONResponse(status_code=status.HTTP_200_OK, content={"success": True, "message": result.message})
    return _process_failure(result.error)


def _process_failure(error: str) -> JSONResponse:
    return JSONResponse(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        content={"success": False, "error": error},
    )


def _missing_order_id() -> JSONResponse:
    return JSONResponse(status_code=status.HTTP_400_BAD_REQUEST, content={"error": "Missing orderId"})


@process_router.post("/process")
def process_order(
    payload: Any = Depends(read_json_body),
    db: Session = Depends(get_db)
):
    """
    Run order processing synchronously. Used for testing the flow without
    payment webhooks and for retrying stalled or failed orders.

    Body: {"orderId": str}
    """
    if payload is _UNREADABLE_BODY:
        return _process_failure("Invalid JSON body")
    order_id = _requested_order_id(payload)
    if not order_id:
        return _missing_order_id()
    return _process_response(order_id, db)


@process_router.post("/process/authenticated")
def process_order_authenticated(
    current_user: dict = Depends(get_current_user),
    payload: Any = Depends(read_json_body),
    db: Session = Depends(get_db)
):
    """Same as /api/orders/process, restricted to the owner of the order."""
    if payload is _UNREADABLE_BODY:
        return _process_failure("Invalid JSON body")
    order_id = _requested_order_id(payload)
    if not order_id:
        return _missing_order_id()

    caller = resolve_caller(db, current_user)
    order = order_service.get_order(db, order_id)
    if order is not None:
        require_order_owner(db, caller, order.id)

    return _process_response(order_id, db)
