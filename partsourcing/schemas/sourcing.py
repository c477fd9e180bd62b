from pydantic import BaseModel, Field, BeforeValidator
from typing import Optional, List, Any, Annotated
from enum import Enum


def _to_str(value: Any) -> Any:
    # Marketplace ids arrive as either JSON numbers or strings
    if value is None or isinstance(value, str):
        return value
    return str(value)


CatalogId = Annotated[str, BeforeValidator(_to_str)]


class SearchMode(str, Enum):
    """manual: orderable-now only, ai: everything incl. backorder"""
    MANUAL = "manual"
    AI = "ai"


# ============================================================================
# Marketplace identities
# ============================================================================

class VehicleIdentity(BaseModel):
    """Vehicle as recognised by the marketplace catalog"""
    id: CatalogId = Field(..., description="Vendor-assigned vehicle id")
    vin: str
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    engine: Optional[str] = None

    class Config:
        frozen = True
        json_schema_extra = {
            "example": {
                "id": "301455",
                "vin": "1HGCM82633A004352",
                "year": 2003,
                "make": "Honda",
                "model": "Accord",
                "engine": "3.0L V6"
            }
        }


class PartType(BaseModel):
    id: CatalogId
    name: Optional[str] = None


# ============================================================================
# Vendor offers
# ============================================================================

class OfferAttribute(BaseModel):
    name: str
    values: Optional[List[Any]] = None


class OfferImage(BaseModel):
    preview: Optional[str] = None
    medium: Optional[str] = None
    full: Optional[str] = None


class PartOffer(BaseModel):
    """One vendor's sellable unit for a part"""
    partNumber: str
    partNumberId: Optional[CatalogId] = None
    brand: str = "Unknown"
    description: Optional[str] = None

    price: Optional[float] = None
    listPrice: Optional[float] = None
    customerPrice: Optional[float] = None
    retailPrice: Optional[float] = None
    coreCharge: Optional[float] = None

    quantityAvailable: int = 0
    stockStatus: str = "Not Available"
    storeLocation: Optional[str] = None
    availabilityType: Optional[str] = None
    stocked: Optional[bool] = None
    sponsorType: Optional[str] = None

    attributes: List[OfferAttribute] = []
    images: List[OfferImage] = []

    vendorAccountId: CatalogId
    vendorName: str = ""

    class Config:
        frozen = True


class VendorGroup(BaseModel):
    vendor: str
    vendorAccountId: CatalogId
    vendorLocation: str = ""
    parts: List[PartOffer] = []


# ============================================================================
# Local inventory
# ============================================================================

class FluidSpec(BaseModel):
    """Structured label data recorded for a stocked fluid"""
    fluidType: Optional[str] = None
    viscosity: Optional[str] = None
    apiServiceClass: Optional[str] = None
    aceaClass: Optional[str] = None
    ilsacClass: Optional[str] = None
    oemApprovals: List[str] = []
    confidenceScore: float = 0.0
    isVerified: bool = False


class InventoryItem(BaseModel):
    id: Optional[str] = None
    partNumber: str
    description: str
    vendor: str = "In-House"
    cost: float = 0.0
    price: float = 0.0
    quantityAvailable: int = 0
    location: str = ""
    binLocation: Optional[str] = None
    fluidSpec: Optional[FluidSpec] = None


class PricingOption(BaseModel):
    """One candidate way to fulfil a requested part"""
    partNumber: str
    description: Optional[str] = None
    brand: Optional[str] = None
    vendor: Optional[str] = None
    cost: float = 0.0
    retailPrice: float = 0.0
    inStock: bool = False
    quantity: int = 0
    isInventory: bool = False
    location: Optional[str] = None
    binLocation: Optional[str] = None
    images: List[OfferImage] = []
    source: str = Field(..., description="spec-matched-inventory | ai-inventory-match-legacy | inventory | partstech")
    matchReason: Optional[str] = None

    isSpecMatched: bool = False
    hasOemMatch: bool = False
    matchedOemApprovals: List[str] = []
    viscosity: Optional[str] = None
    apiClass: Optional[str] = None
    aceaClass: Optional[str] = None
    confidenceScore: Optional[float] = None


# ============================================================================
# Request schemas
# ============================================================================

class PartsSearchRequest(BaseModel):
    """Request schema for a multi-vendor parts search"""
    vin: str = Field(..., min_length=1, description="Vehicle VIN")
    searchTerm: str = Field(..., min_length=1, description="Free-text part search")
    mode: SearchMode = SearchMode.MANUAL

    class Config:
        json_schema_extra = {
            "example": {
                "vin": "1HGCM82633A004352",
                "searchTerm": "oil filter",
                "mode": "manual"
            }
        }


class VehicleInfoSchema(BaseModel):
    vin: Optional[str] = Field(None, description="Vehicle Identification Number")
    year: Optional[int] = None
    make: Optional[str] = None
    model: Optional[str] = None
    engine: Optional[str] = None


class PartRequest(BaseModel):
    """Generic part description, e.g. "engine oil 0w20 synthetic" """
    description: str = Field(..., min_length=1)
    quantity: float = 1
    unit: str = "each"
    notes: Optional[str] = None


class PartWithPricing(PartRequest):
    source: str = "none"
    pricingOptions: List[PricingOption] = []


class PartsPricingRequest(BaseModel):
    vehicle: VehicleInfoSchema
    parts: List[PartRequest] = Field(..., min_length=1)


class ServiceItemSchema(BaseModel):
    serviceName: str = Field(..., min_length=1)
    serviceDescription: Optional[str] = None


class GeneratePartsRequest(BaseModel):
    vehicle: VehicleInfoSchema
    services: List[ServiceItemSchema] = Field(..., min_length=1)

    class Config:
        json_schema_extra = {
            "example": {
                "vehicle": {"vin": "1HGCM82633A004352", "year": 2003, "make": "Honda", "model": "Accord"},
                "services": [{"serviceName": "Engine oil change"}]
            }
        }


class ServiceWithParts(BaseModel):
    serviceName: str
    parts: List[PartWithPricing] = []
