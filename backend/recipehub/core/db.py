# recipehub/core/db.py
"""
Database configuration and initialization module.
Handles Tortoise ORM setup, database connection, and migration configuration.
"""
from tortoise import Tortoise

from recipehub.config import settings

# Database connection URL (PostgreSQL in production, SQLite in tests)
DB_URL = settings.database_url

# Also read by Aerich for migrations
TORTOISE_ORM = {
    "connections": {"default": DB_URL},
    "apps": {
        "models": {
            "models": [
                "recipehub.models.user",     # User, Session, Device
                "recipehub.models.recipe",   # Recipe, Review
                "aerich.models",
            ],
            "default_connection": "default",
        },
    },
}


async def init_db(generate_schemas: bool = False):
    """
    Open the Tortoise ORM connection and register all models.

    Args:
        generate_schemas: Create missing tables. Only meant for local development,
            deployed databases are migrated with Aerich.
    """
    await Tortoise.init(config=TORTOISE_ORM)
    if generate_schemas:
        await Tortoise.generate_schemas(safe=True)


async def close_db():
    await Tortoise.close_connections()
