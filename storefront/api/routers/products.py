# storefront/api/routers/products.py
import json
from typing import List, Optional

from fastapi import APIRouter, Depends, File, Form, Query, UploadFile

from storefront.api.deps import get_product_service, require_admin
from storefront.api.uploads import read_uploads
from storefront.data.models.user import UserModel
from storefront.domain.errors import ValidationError
from storefront.domain.schemas import MessageOut, ProductEnvelope, ProductListOut
from storefront.services.product_service import ProductService

router = APIRouter(prefix="/api/v1/product", tags=["product"])


def _keep_images(raw: str | None) -> List[str] | None:
    if raw is None:
        return None
    try:
        ids = json.loads(raw)
    except json.JSONDecodeError:
        raise ValidationError("existingImages must be a JSON list of public ids")
    if not isinstance(ids, list) or not all(isinstance(i, str) for i in ids):
        raise ValidationError("existingImages must be a JSON list of public ids")
    return ids


@router.post("/add", response_model=ProductEnvelope, status_code=201)
def add_product(
    product_name: str | None = Form(None, alias="productName"),
    product_desc: str | None = Form(None, alias="productDesc"),
    product_price: str | None = Form(None, alias="productPrice"),
    category: str | None = Form(None),
    brand: str | None = Form(None),
    files: List[UploadFile] = File(default=[]),
    admin: UserModel = Depends(require_admin),
    svc: ProductService = Depends(get_product_service),
):
    fields = {
        "product_name": product_name,
        "product_desc": product_desc,
        "product_price": product_price,
        "category": category,
        "brand": brand,
    }
    product = svc.add_product(fields, read_uploads(files))
    return {"success": True, "message": "Product added successfully", "product": product}


@router.get("/getallproducts", response_model=ProductListOut)
def get_all_products(
    search: Optional[str] = Query(None),
    category: Optional[str] = Query(None),
    brand: Optional[str] = Query(None),
    sort: Optional[str] = Query(None),
    svc: ProductService = Depends(get_product_service),
):
    products = svc.get_all_products(search=search, category=category, brand=brand, sort=sort)
    return {"success": True, "products": products}


@router.put("/update/{product_id}", response_model=ProductEnvelope)
def update_product(
    product_id: int,
    product_name: str | None = Form(None, alias="productName"),
    product_desc: str | None = Form(None, alias="productDesc"),
    product_price: str | None = Form(None, alias="productPrice"),
    category: str | None = Form(None),
    brand: str | None = Form(None),
    existing_images: str | None = Form(None, alias="existingImages"),
    files: List[UploadFile] = File(default=[]),
    admin: UserModel = Depends(require_admin),
    svc: ProductService = Depends(get_product_service),
):
    fields = {
        "product_name": product_name,
        "product_desc": product_desc,
        "product_price": product_price,
        "category": category,
        "brand": brand,
    }
    product = svc.update_product(product_id, fields, read_uploads(files), _keep_images(existing_images))
    return {"success": True, "message": "Product updated successfully", "product": product}


@router.delete("/delete/{product_id}", response_model=MessageOut)
def delete_product(
    product_id: int,
    admin: UserModel = Depends(require_admin),
    svc: ProductService = Depends(get_product_service),
):
    svc.delete_product(product_id)
    return {"success": True, "message": "Product deleted successfully"}
