"""
Database models package.
Import all models here so init_beanie sees every document.
"""
from partsourcing.models.inventory import (
    InventoryPart,
    FluidSpecification,
    FluidType,
    VERIFIED_CONFIDENCE,
)

__all__ = [
    "InventoryPart",
    "FluidSpecification",
    "FluidType",
    "VERIFIED_CONFIDENCE",
]
