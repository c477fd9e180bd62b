from beanie import Document, Indexed, Insert, Replace, Save, before_event
from pydantic import Field
from datetime import datetime
from typing import List, Optional
import enum


class FluidType(str, enum.Enum):
    """Fluid categories recorded on spec-scanned inventory"""
    ENGINE_OIL = "engine_oil"
    TRANSMISSION_FLUID = "transmission_fluid"
    COOLANT = "coolant"
    BRAKE_FLUID = "brake_fluid"
    GEAR_OIL = "gear_oil"
    POWER_STEERING_FLUID = "power_steering_fluid"


# Spec rows at or above this confidence count as verified
VERIFIED_CONFIDENCE = 0.8


class InventoryPart(Document):
    """
    Locally stocked part.
    Read-only from the sourcing engine's point of view.
    """
    part_number: Indexed(str)
    description: str
    vendor: Optional[str] = None
    cost: float = 0.0
    price: float = 0.0
    quantity_available: int = 0
    location: Optional[str] = None
    bin_location: Optional[str] = None

    created_at: datetime = Field(default_factory=datetime.utcnow)

    class Settings:
        name = "parts_inventory"


class FluidSpecification(Document):
    """
    Label data extracted for a stocked fluid, one row per inventory part.
    """
    inventory_id: Indexed(str, unique=True)
    fluid_type: Optional[FluidType] = None
    base_stock: Optional[str] = None
    viscosity: Optional[str] = None
    api_service_class: Optional[str] = None
    acea_class: Optional[str] = None
    ilsac_class: Optional[str] = None
    oem_approvals: List[str] = []  # Normalised codes, e.g. "GM-DEXOS1-G3"
    product_name: Optional[str] = None
    confidence_score: float = 0.0
    is_verified: bool = False
    needs_review: bool = True

    extraction_date: datetime = Field(default_factory=datetime.utcnow)

    @before_event(Insert, Replace, Save)
    def apply_confidence(self):
        """Verification follows the extraction confidence"""
        self.is_verified = self.confidence_score >= VERIFIED_CONFIDENCE
        self.needs_review = not self.is_verified

    class Settings:
        name = "fluid_specifications"
