from decimal import Decimal
from pathlib import Path

from alembic import command
from alembic.config import Config
from sqlalchemy import create_engine, text

ROOT = Path(__file__).resolve().parent.parent


def _alembic_config(url: str) -> Config:
    config = Config(str(ROOT / "alembic.ini"))
    config.set_main_option("script_location", str(ROOT / "alembic"))
    config.set_main_option("sqlalchemy.url", url)
    return config


def test_upgrade_creates_schema_and_seeds_catalogue(tmp_path):
    url = f"sqlite:///{tmp_path / 'pos.db'}"

    command.upgrade(_alembic_config(url), "head")

    engine = create_engine(url)
    with engine.connect() as connection:
        rows = connection.execute(
            text("SELECT name, price, cost, stock FROM products ORDER BY name")
        ).all()
        sales = connection.execute(text("SELECT COUNT(*) FROM sales")).scalar()
    engine.dispose()

    assert [(row.name, row.stock) for row in rows] == [
        ("Keto Molde", 20),
        ("Keto Redondito", 20),
    ]
    assert all(Decimal(str(row.price)) == Decimal("6900") for row in rows)
    assert all(Decimal(str(row.cost)) == Decimal("4050") for row in rows)
    assert sales == 0
