# app/routers/products.py

import logging

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session
from sqlalchemy.exc import IntegrityError, SQLAlchemyError

from app.core.exceptions import DataServiceError
from app.database import get_db
from app.models.products import Product
from app.schemas.product import (
    ProductCreate,
    ProductUpdate,
    ProductResponse,
    StockUpdate,
)
from app.services import store

router = APIRouter(
    prefix="/products",
    tags=["Products"],
)

logger = logging.getLogger("app")


def _commit(db: Session, product: Product) -> None:
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        logger.warning(f"Product write rejected: {exc.orig}")
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product with this name already exists",
        )
    except SQLAlchemyError as exc:
        db.rollback()
        logger.error(f"Unable to save product: {exc}")
        raise DataServiceError("Unable to save product") from exc

    db.refresh(product)


@router.get("", response_model=list[ProductResponse])
def list_products(db: Session = Depends(get_db)):
    return store.fetch_products(db)


@router.post(
    "",
    response_model=ProductResponse,
    status_code=status.HTTP_201_CREATED,
)
def create_product(
    product_data: ProductCreate,
    db: Session = Depends(get_db),
):
    # Prevent duplicate product names
    if store.find_product_by_name(db, product_data.name):
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Product with this name already exists",
        )

    # Business rule: price must not be lower than cost
    if product_data.price < product_data.cost:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Price cannot be lower than cost",
        )

    product = Product(
        name=product_data.name,
        price=product_data.price,
        cost=product_data.cost,
        stock=product_data.stock,
    )

    db.add(product)
    _commit(db, product)

    logger.info(f"Product {product.id} created: {product.name}")

    return product


@router.get("/{product_id}", response_model=ProductResponse)
def get_product(
    product_id: int,
    db: Session = Depends(get_db),
):
    return store.fetch_product(db, product_id)


@router.put("/{product_id}", response_model=ProductResponse)
def update_product(
    product_id: int,
    product_data: ProductUpdate,
    db: Session = Depends(get_db),
):
    product = store.fetch_product(db, product_id)

    # Validate prices if either is being updated
    new_cost = product_data.cost if product_data.cost is not None else product.cost
    new_price = product_data.price if product_data.price is not None else product.price

    if new_price < new_cost:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="Price cannot be lower than cost",
        )

    if product_data.name is not None and product_data.name != product.name:
        if store.find_product_by_name(db, product_data.name, exclude_id=product.id):
            raise HTTPException(
                status_code=status.HTTP_409_CONFLICT,
                detail="Product with this name already exists",
            )
        product.name = product_data.name

    if product_data.cost is not None:
        product.cost = product_data.cost

    if product_data.price is not None:
        product.price = product_data.price

    _commit(db, product)

    return product


@router.put("/{product_id}/stock", response_model=ProductResponse)
def restock_product(
    product_id: int,
    stock_data: StockUpdate,
    db: Session = Depends(get_db),
):
    product = store.fetch_product(db, product_id)

    product.stock = stock_data.stock

    _commit(db, product)

    logger.info(f"Product {product.id} stock set to {product.stock}")

    return product
