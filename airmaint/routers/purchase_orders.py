# airmaint/routers/purchase_orders.py
from __future__ import annotations

import logging

from fastapi import APIRouter, Depends, HTTPException, Query

from ..db import get_storage
from ..schemas import (
    PurchaseOrderCreate,
    PurchaseOrderItem,
    PurchaseOrderItemCreate,
    PurchaseOrderItemIn,
    PurchaseOrderStatus,
    PurchaseOrderUpdate,
    PurchaseOrderView,
)
from ..services.expansion import expand_purchase_order
from ..storage import Storage

log = logging.getLogger("airmaint.purchasing")

router = APIRouter(prefix="/purchase-orders", tags=["purchasing"])


@router.get("", response_model=list[PurchaseOrderView])
def list_purchase_orders(
    status: PurchaseOrderStatus | None = Query(default=None),
    storage: Storage = Depends(get_storage),
):
    return [expand_purchase_order(storage, po) for po in storage.list_purchase_orders(status=status)]


@router.get("/{po_id}", response_model=PurchaseOrderView)
def get_purchase_order(po_id: int, storage: Storage = Depends(get_storage)):
    po = storage.get_purchase_order(po_id)
    if po is None:
        raise HTTPException(status_code=404, detail="Purchase order not found")
    return expand_purchase_order(storage, po)


@router.post("", response_model=PurchaseOrderView, status_code=201)
def create_purchase_order(payload: PurchaseOrderCreate, storage: Storage = Depends(get_storage)):
    return expand_purchase_order(storage, storage.create_purchase_order(payload))


@router.patch("/{po_id}", response_model=PurchaseOrderView)
def update_purchase_order(po_id: int, payload: PurchaseOrderUpdate, storage: Storage = Depends(get_storage)):
    return expand_purchase_order(storage, storage.update_purchase_order(po_id, payload))


@router.post("/{po_id}/items", response_model=PurchaseOrderItem, status_code=201)
def add_purchase_order_item(po_id: int, payload: PurchaseOrderItemIn, storage: Storage = Depends(get_storage)):
    if storage.get_purchase_order(po_id) is None:
        raise HTTPException(status_code=404, detail="Purchase order not found")
    if storage.get_material(payload.material_id) is None:
        raise HTTPException(status_code=404, detail="Material not found")

    item = storage.create_purchase_order_item(PurchaseOrderItemCreate(**payload.model_dump(), purchase_order_id=po_id))
    log.info("purchase order item added", extra={"purchase_order_id": po_id})
    return item
