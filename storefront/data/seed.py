# storefront/data/seed.py
from decimal import Decimal

from storefront.data.database import SessionLocal
from storefront.data.models import ProductModel, UserModel

DEMO_USER = {"id": "demo-user", "name": "Demo User", "email": "demo@example.com"}

DEMO_PRODUCTS = [
    {
        "id": "tee-classic",
        "name": "Classic Tee",
        "price": Decimal("799.00"),
        "stock": 10,
        "sizes": ["S", "M", "L", "XL"],
        "image_urls": ["/images/tee-classic.jpg"],
        "category": "apparel",
    },
    {
        "id": "hoodie-zip",
        "name": "Zip Hoodie",
        "price": Decimal("1999.00"),
        "stock": 4,
        "sizes": ["M", "L"],
        "image_urls": ["/images/hoodie-zip.jpg"],
        "category": "apparel",
    },
    {
        "id": "tote-bag",
        "name": "Canvas Tote",
        "price": Decimal("349.50"),
        "stock": 25,
        "sizes": [],
        "image_urls": ["/images/tote-bag.jpg"],
        "category": "accessories",
    },
]


def seed(session_factory=SessionLocal):
    db = session_factory()
    try:
        # tylko jesli pusto
        if db.query(ProductModel).first():
            return
        db.add(UserModel(**DEMO_USER))
        for data in DEMO_PRODUCTS:
            db.add(ProductModel(**data))
        db.commit()
    finally:
        db.close()


if __name__ == "__main__":
    seed()
