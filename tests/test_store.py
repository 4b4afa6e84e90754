from decimal import Decimal

import pytest
from sqlalchemy.exc import OperationalError

from app.core.exceptions import (
    DataServiceError,
    InsufficientStockError,
    ProductNotFoundError,
    SaleNotFoundError,
    SaleStatusError,
)
from app.models.products import Product
from app.models.sales import Sale
from app.services import store


def _line(sale_id, product_id, quantity, unit_price="6900"):
    price = Decimal(unit_price)
    return {
        "sale_id": sale_id,
        "product_id": product_id,
        "quantity": quantity,
        "unit_price": price,
        "subtotal": price * quantity,
    }


def test_fetch_products_is_ordered_by_name(db, make_product):
    make_product("Zucchini Bread")
    make_product("Almond Loaf")

    assert [p.name for p in store.fetch_products(db)] == ["Almond Loaf", "Zucchini Bread"]


def test_insert_sale_defaults_to_not_fulfilled(db):
    sale = store.insert_sale(db, "Ana", Decimal("6900"))
    db.commit()

    assert sale.id is not None
    assert sale.status == "not_fulfilled"


def test_line_item_insert_decrements_stock(db, catalogue):
    molde, _ = catalogue

    sale = store.insert_sale(db, "Ana", Decimal("13800"))
    store.insert_line_items(db, [_line(sale.id, molde.id, 2)])
    db.commit()

    db.refresh(molde)
    assert molde.stock == 18


def test_line_item_over_stock_is_rejected_and_stock_untouched(db, make_product):
    molde = make_product(stock=3)

    sale = store.insert_sale(db, "Ana", Decimal("27600"))

    with pytest.raises(InsufficientStockError):
        store.insert_line_items(db, [_line(sale.id, molde.id, 4)])

    db.rollback()

    assert db.query(Product).filter(Product.id == molde.id).one().stock == 3


def test_line_item_for_unknown_product_is_rejected(db):
    sale = store.insert_sale(db, "Ana", Decimal("6900"))

    with pytest.raises(ProductNotFoundError):
        store.insert_line_items(db, [_line(sale.id, 999, 1)])

    db.rollback()


def test_fetch_sales_nests_items_with_product_names_newest_first(db, catalogue):
    molde, redondito = catalogue

    first = store.insert_sale(db, "Ana", Decimal("6900"))
    store.insert_line_items(db, [_line(first.id, molde.id, 1)])
    second = store.insert_sale(db, "Luis", Decimal("6900"))
    store.insert_line_items(db, [_line(second.id, redondito.id, 1)])
    db.commit()

    sales = store.fetch_sales(db)

    assert [s.customer_name for s in sales] == ["Luis", "Ana"]
    assert sales[0].items[0].product_name == "Keto Redondito"


def test_fetch_sales_filters_by_status(db):
    store.insert_sale(db, "Ana", Decimal("6900"))
    done = store.insert_sale(db, "Luis", Decimal("6900"), status="fulfilled")
    db.commit()

    pending = store.fetch_sales(db, status="not_fulfilled")

    assert done.id not in [s.id for s in pending]
    assert len(pending) == 1


def test_update_sale_status_changes_only_status(db):
    sale = store.insert_sale(db, "Ana", Decimal("6900"))
    db.commit()

    store.update_sale_status(db, sale.id, "fulfilled")
    db.commit()

    reloaded = db.query(Sale).filter(Sale.id == sale.id).one()
    assert reloaded.status == "fulfilled"
    assert reloaded.customer_name == "Ana"
    assert reloaded.total_amount == Decimal("6900")


def test_fetch_missing_sale_raises(db):
    with pytest.raises(SaleNotFoundError):
        store.fetch_sale(db, 12345)


def _failing_query(*args, **kwargs):
    raise OperationalError("SELECT", {}, Exception("database is locked"))


@pytest.mark.parametrize(
    "call",
    [
        lambda db: store.fetch_product(db, 1),
        lambda db: store.fetch_sale(db, 1),
        lambda db: store.fetch_sales(db),
        lambda db: store.find_product_by_name(db, "Keto Molde"),
    ],
)
def test_lookups_wrap_database_errors(db, monkeypatch, call):
    monkeypatch.setattr(db, "query", _failing_query)

    with pytest.raises(DataServiceError) as exc_info:
        call(db)

    assert "database is locked" in str(exc_info.value)


def test_update_sale_status_only_moves_forward(db):
    sale = store.insert_sale(db, "Ana", Decimal("6900"))
    db.commit()

    with pytest.raises(SaleStatusError):
        store.update_sale_status(db, sale.id, "not_fulfilled")

    store.update_sale_status(db, sale.id, "fulfilled")
    db.commit()

    with pytest.raises(SaleStatusError):
        store.update_sale_status(db, sale.id, "fulfilled")


def test_update_status_of_missing_sale_raises_not_found(db):
    with pytest.raises(SaleNotFoundError):
        store.update_sale_status(db, 777, "fulfilled")
