"""
Typeahead Suggestion Shapes

The marketplace typeahead returns a polymorphic `item` per suggestion. Each
shape is decoded once, here, into its own model; every model answers
`first_part_type()` so callers never probe raw fields.
"""
from typing import Optional, List, Union, Dict, Any, Literal
from pydantic import BaseModel, ValidationError

from partsourcing.schemas.sourcing import PartType, CatalogId


class PartTypeRef(BaseModel):
    id: Optional[CatalogId] = None
    name: Optional[str] = None


class PartTypeSuggestion(BaseModel):
    kind: Literal["part_type"] = "part_type"
    id: Optional[CatalogId] = None
    name: Optional[str] = None

    def first_part_type(self) -> Optional[PartType]:
        if not self.id:
            return None
        return PartType(id=self.id, name=self.name)


class PartTypeGroupSuggestion(BaseModel):
    kind: Literal["part_type_group"] = "part_type_group"
    id: Optional[CatalogId] = None
    name: Optional[str] = None
    partTypes: Optional[List[PartTypeRef]] = None

    def first_part_type(self) -> Optional[PartType]:
        # Groups resolve to their first member
        if not self.partTypes or not self.partTypes[0].id:
            return None
        first = self.partTypes[0]
        return PartType(id=first.id, name=first.name)


class AttributedPartTypeSuggestion(BaseModel):
    kind: Literal["attributed_part_type"] = "attributed_part_type"
    partType: Optional[PartTypeRef] = None

    def first_part_type(self) -> Optional[PartType]:
        if self.partType is None or not self.partType.id:
            return None
        return PartType(id=self.partType.id, name=self.partType.name)


class PartNumberSuggestion(BaseModel):
    """A grouped part number; carries no part type"""
    kind: Literal["part_number"] = "part_number"
    id: Optional[CatalogId] = None
    partNumber: Optional[str] = None
    brandName: Optional[str] = None

    def first_part_type(self) -> Optional[PartType]:
        return None


Suggestion = Union[
    PartTypeSuggestion,
    PartTypeGroupSuggestion,
    AttributedPartTypeSuggestion,
    PartNumberSuggestion,
]

_BY_TYPENAME = {
    "PartType": PartTypeSuggestion,
    "PartTypeGroup": PartTypeGroupSuggestion,
    "SearchPartType": AttributedPartTypeSuggestion,
    "GroupedPartNumber": PartNumberSuggestion,
}


def decode_suggestion(item: Optional[Dict[str, Any]]) -> Optional[Suggestion]:
    """
    Decode one raw typeahead `item` into its suggestion model.

    Uses `__typename` when the server sends it, otherwise falls back to the
    shape of the payload. Returns None for empty, unrecognised or malformed
    items.
    """
    if not item or not isinstance(item, dict):
        return None

    typename = item.get("__typename")
    model = _BY_TYPENAME.get(typename) if isinstance(typename, str) else None
    if model is None:
        if "partTypes" in item:
            model = PartTypeGroupSuggestion
        elif "partType" in item:
            model = AttributedPartTypeSuggestion
        elif "partNumber" in item:
            model = PartNumberSuggestion
        elif item.get("id") and item.get("name"):
            model = PartTypeSuggestion
        else:
            return None

    fields = {k: v for k, v in item.items() if k != "__typename"}
    try:
        return model.model_validate(fields)
    except ValidationError:
        return None
