# kitstore/api/routers/views.py
from pathlib import Path

from fastapi import APIRouter, Depends, Form, HTTPException, Request
from fastapi.responses import RedirectResponse
from fastapi.templating import Jinja2Templates
from sqlalchemy.orm import Session

from kitstore.data.database import get_db
from kitstore.domain.exceptions import NotFoundError, ValidationError
from kitstore.domain.validation import leading_int
from kitstore.services.cart_service import CartService
from kitstore.services.product_service import ProductService
from kitstore.utils.settings import VIEW_PAGE_LIMIT

router = APIRouter(tags=["views"])

templates = Jinja2Templates(directory=str(Path(__file__).resolve().parents[2] / "templates"))


@router.get("/products")
def products_view(request: Request, page: str | None = None, db: Session = Depends(get_db)):
    svc = ProductService(db, request.app.state.publisher)
    result = svc.list_paged(str(request.url_for("products_view")), limit=VIEW_PAGE_LIMIT, page=page)

    return templates.TemplateResponse(
        request,
        "home.html",
        {
            "products": result.payload,
            "page": result.page,
            "total_pages": result.total_pages,
            "has_prev_page": result.has_prev_page,
            "has_next_page": result.has_next_page,
            "prev_page": result.prev_page,
            "next_page": result.next_page,
        },
    )


@router.get("/carts/{cid}")
def cart_view(cid: str, request: Request, db: Session = Depends(get_db)):
    svc = CartService(db)
    try:
        cart = svc.get_cart(cid)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except NotFoundError as e:
        raise HTTPException(status_code=404, detail=str(e))

    # lines of deleted products are not rendered
    lines = [line for line in cart.products if line.product is not None]
    return templates.TemplateResponse(request, "cart.html", {"id": cart.id, "lines": lines})


@router.get("/realtimeproducts")
def realtime_products_view(request: Request, db: Session = Depends(get_db)):
    svc = ProductService(db, request.app.state.publisher)
    return templates.TemplateResponse(
        request,
        "realtimeproducts.html",
        {"products": svc.list_all()},
    )


@router.post("/realtimeproducts")
def realtime_products_submit(
    request: Request,
    title: str = Form(""),
    description: str = Form(""),
    code: str = Form(""),
    price: str = Form(""),
    stock: str = Form(""),
    category: str = Form(""),
    db: Session = Depends(get_db),
):
    # the form has no status field, products created here are always active
    body = {
        "title": title,
        "description": description,
        "code": code,
        "price": leading_int(price),
        "status": True,
        "stock": leading_int(stock),
        "category": category,
    }

    svc = ProductService(db, request.app.state.publisher)
    try:
        svc.create_product(body)
    except ValidationError as e:
        raise HTTPException(status_code=400, detail=str(e))

    return RedirectResponse(url=request.url_for("realtime_products_view"), status_code=303)
