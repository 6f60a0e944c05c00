#kitstore/api/routers/carts.py
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException
from sqlalchemy.orm import Session

from kitstore.data.database import get_db
from kitstore.domain.exceptions import NotFoundError, ValidationError
from kitstore.services.cart_service import CartService

router = APIRouter(prefix="/api/carts", tags=["carts"])


def get_service(db: Session):
    return CartService(db=db)


@router.post("")
def create_cart(db: Session = Depends(get_db)):
    svc = get_service(db)
    cart_id = svc.create_cart()
    return {"message": f"Cart created with id: {cart_id}"}


@router.get("/{cid}")
def get_cart(cid: str, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        cart = svc.get_cart(cid)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": "Cart found successfully", "cart": cart}


@router.post("/{cid}/products/{pid}")
def add_product(cid: str, pid: str, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.add_product(cid, pid)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": f"Product with id {pid} added to cart with id {cid} successfully"}


@router.delete("/{cid}/products/{pid}")
def remove_product(cid: str, pid: str, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.remove_product(cid, pid)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": f"Product with id {pid} removed from cart with id {cid} successfully"}


@router.put("/{cid}")
def update_cart(cid: str, payload: Any = Body(None), db: Session = Depends(get_db)):
    """
    Body example:
    [{"product": "<product id>", "quantity": 2}, {"product": "<product id>", "quantity": 1}]
    """
    svc = get_service(db)
    try:
        svc.update_cart(cid, payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": f"Cart with id {cid} updated successfully"}


@router.put("/{cid}/products/{pid}")
def update_quantity(
    cid: str,
    pid: str,
    payload: Any = Body(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db)
    try:
        quantity = svc.update_quantity(cid, pid, payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "message": f"Added {quantity} of product with id {pid} to cart with id {cid} successfully"
    }


@router.delete("/{cid}")
def empty_cart(cid: str, db: Session = Depends(get_db)):
    svc = get_service(db)
    try:
        svc.empty_cart(cid)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": f"Cart with id {cid} emptied successfully"}
