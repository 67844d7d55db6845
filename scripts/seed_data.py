import argparse

from sqlalchemy import delete, select

from app.core.logging import setup_logging
from app.database import Base, SessionLocal, engine, ensure_sqlite_schema
from app.models import (
    Branch,
    Category,
    Product,
    StockEntry,
    User,
    Warehouse,
    import_all_models,
)


def parse_args():
    parser = argparse.ArgumentParser(description="Seed sample inventory data.")
    parser.add_argument(
        "--reset",
        action="store_true",
        help="Clear existing data before seeding.",
    )
    return parser.parse_args()


def main():
    setup_logging()
    args = parse_args()

    import_all_models()
    Base.metadata.create_all(bind=engine)
    ensure_sqlite_schema()

    db = SessionLocal()
    try:
        if args.reset:
            db.execute(delete(StockEntry))
            db.execute(delete(Product))
            db.execute(delete(Warehouse))
            db.execute(delete(Category))
            db.execute(delete(Branch))
            db.execute(delete(User))
            db.commit()

        has_warehouse = db.execute(select(Warehouse.id).limit(1)).first()
        if has_warehouse:
            print("Seed skipped: warehouses already exist.")
            return

        warehouses = [
            Warehouse(warehouse_number="WH-01", name="Main Warehouse", location="Riyadh"),
            Warehouse(warehouse_number="WH-02", name="Service Depot", location="Jeddah"),
        ]
        db.add_all(warehouses)
        db.add_all(
            [
                Category(name="Printers", description="Printers and multifunction devices"),
                Category(name="Spare Parts"),
                Branch(name="Riyadh HQ", address="King Fahd Road"),
                User(name="System Admin", email="admin@itmco.local", role="admin"),
                User(name="Stock Keeper", email="stock@itmco.local", role="inventory_manager"),
            ]
        )
        db.flush()

        db.add_all(
            [
                Product(
                    name="LaserJet Pro M404",
                    brand="HP",
                    model="M404dn",
                    category="Printers",
                    item_code="HP-M404",
                    stock=12,
                    min_stock=3,
                    warehouse_id=warehouses[0].id,
                ),
                Product(
                    name="Fuser Unit",
                    brand="Canon",
                    model="FM1-T412",
                    category="Spare Parts",
                    item_code="CN-FUSER",
                    stock=4,
                    min_stock=5,
                    warehouse_id=warehouses[1].id,
                ),
            ]
        )
        db.commit()
        print("Seed data created.")
    finally:
        db.close()


if __name__ == "__main__":
    main()
