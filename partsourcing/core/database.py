from motor.motor_asyncio import AsyncIOMotorClient
from beanie import init_beanie
from partsourcing.core.config import settings


async def init_db():
    """
    Initialize MongoDB connection and Beanie ODM for the inventory store.
    """
    client = AsyncIOMotorClient(settings.DATABASE_URL)

    # Selecting the database name from the URL or default
    db_name = client.get_default_database(default="partsourcing_db").name
    if not db_name or db_name == 'test':
        db_name = "partsourcing_db"

    from partsourcing.models.inventory import InventoryPart, FluidSpecification

    await init_beanie(
        database=client[db_name],
        document_models=[
            InventoryPart,
            FluidSpecification,
        ]
    )
