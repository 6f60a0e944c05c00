# kitstore/api/routers/products.py
from typing import Any

from fastapi import APIRouter, Body, Depends, HTTPException, Request
from sqlalchemy.orm import Session

from kitstore.data.database import get_db
from kitstore.domain.exceptions import NotFoundError, ValidationError
from kitstore.domain.schemas import ProductOut, ProductPageOut
from kitstore.services.event_publisher import EventPublisher
from kitstore.services.product_service import ProductService

router = APIRouter(prefix="/api/products", tags=["products"])


def get_service(db: Session, publisher: EventPublisher) -> ProductService:
    return ProductService(db=db, publisher=publisher)


@router.get("", response_model=ProductPageOut)
def list_products(
    request: Request,
    limit: str | None = None,
    page: str | None = None,
    category: str | None = None,
    sort: str | None = None,
    db: Session = Depends(get_db),
):
    svc = get_service(db, request.app.state.publisher)
    base_url = f"{str(request.base_url).rstrip('/')}{router.prefix}"

    result = svc.list_paged(base_url, limit=limit, page=page, category=category, sort=sort)
    if not result.payload:
        raise HTTPException(status_code=404, detail="No products found")
    return result


@router.get("/{pid}")
def get_product(pid: str, request: Request, db: Session = Depends(get_db)):
    svc = get_service(db, request.app.state.publisher)
    try:
        product = svc.get_product(pid)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {
        "message": "Product found successfully",
        "product": ProductOut.model_validate(product),
    }


@router.post("")
def create_product(
    request: Request,
    payload: Any = Body(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db, request.app.state.publisher)
    try:
        product_id = svc.create_product(payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return {"message": "Product added to list successfully", "id": product_id}


@router.put("/{pid}")
def update_product(
    pid: str,
    request: Request,
    payload: Any = Body(None),
    db: Session = Depends(get_db),
):
    svc = get_service(db, request.app.state.publisher)
    try:
        svc.update_product(pid, payload)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": "Product updated successfully"}


@router.delete("/{pid}")
def delete_product(pid: str, request: Request, db: Session = Depends(get_db)):
    svc = get_service(db, request.app.state.publisher)
    try:
        svc.delete_product(pid)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    return {"message": "Product deleted successfully"}
