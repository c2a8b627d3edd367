from fastapi import APIRouter, Depends, HTTPException
from sqlalchemy.orm import Session
from app.database.connection import get_db
from app.schemas.product import ProductCreate, ProductResponse, ProductUpdate
from app.services.product_service import (
    create_product, get_product, list_products,
    update_product, deactivate_product
)
from app.dependencies.auth import require_admin


router = APIRouter(prefix="/products", tags=["Products & Tier Pricing"])

# CREATE
@router.post("/", response_model=ProductResponse, status_code=201, dependencies=[Depends(require_admin)])
def create(data: ProductCreate, db: Session = Depends(get_db)):
    return create_product(db, data)

# LIST
@router.get("/", response_model=list[ProductResponse])
def list_all(db: Session = Depends(get_db)):
    return list_products(db)

# GET BY ID
@router.get("/{product_id}", response_model=ProductResponse)
def get(product_id: int, db: Session = Depends(get_db)):
    product = get_product(db, product_id)
    if not product or not product.is_active:
        raise HTTPException(404, "Product not found")
    return product

# UPDATE (tiers are replaced as a set)
@router.put("/{product_id}", response_model=ProductResponse, dependencies=[Depends(require_admin)])
def update(product_id: int, data: ProductUpdate, db: Session = Depends(get_db)):
    product = update_product(db, product_id, data)
    if not product:
        raise HTTPException(404, "Product not found")
    return product

# DEACTIVATE
@router.delete("/{product_id}", dependencies=[Depends(require_admin)])
def delete(product_id: int, db: Session = Depends(get_db)):
    if not deactivate_product(db, product_id):
        raise HTTPException(404, "Product not found")
    return {"success": True, "message": "Product deactivated"}
