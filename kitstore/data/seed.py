# kitstore/data/seed.py
from sqlalchemy import select

from kitstore.data.database import SessionLocal, init_db
from kitstore.data.models.product import ProductModel
from kitstore.utils.logging import get_logger

logger = get_logger(__name__)

DEMO_PRODUCTS = [
    {
        "title": "Camiseta titular 2024",
        "description": "Camiseta oficial de local, tejido respirable.",
        "code": "LOC-2024",
        "price": 2490,
        "status": True,
        "stock": 25,
        "category": "Camisetas locales",
    },
    {
        "title": "Camiseta suplente 2024",
        "description": "Camiseta oficial de visitante.",
        "code": "VIS-2024",
        "price": 2290,
        "status": True,
        "stock": 18,
        "category": "Camisetas visitantes",
    },
    {
        "title": "Tercera camiseta 2024",
        "description": "Edición alternativa de la temporada.",
        "code": "ALT-2024",
        "price": 2690,
        "status": True,
        "stock": 10,
        "category": "Camisetas alternativas",
    },
    {
        "title": "Camiseta de arquero 2024",
        "description": "Mangas largas con refuerzo en codos.",
        "code": "GK-2024",
        "price": 2590,
        "status": True,
        "stock": 6,
        "category": "Camisetas de portero",
    },
]


def seed(db=None) -> int:
    """Insert the demo products when the catalogue is empty, return how many were added."""
    own_session = db is None
    db = db or SessionLocal()
    try:
        # not forcing: only seed if empty
        if db.execute(select(ProductModel.id).limit(1)).first():
            logger.info("Products already exist, skipping seed")
            return 0

        db.add_all(ProductModel(**p) for p in DEMO_PRODUCTS)
        db.commit()
        logger.info(f"Seeded {len(DEMO_PRODUCTS)} products")
        return len(DEMO_PRODUCTS)
    finally:
        if own_session:
            db.close()


if __name__ == "__main__":
    init_db()
    seed()
