"""
Part Type Service

Maps a free-text search term ("oil filter") to a PartsTech part type id via
the typeahead endpoint. Results are not stable over time, so they are looked
up per request and never cached.
"""
import logging
from typing import Optional

from partsourcing.adapters.partstech_graphql_client import PartsTechGraphQLClient
from partsourcing.adapters.partstech_queries import GET_TYPEAHEAD
from partsourcing.schemas.sourcing import PartType
from partsourcing.schemas.typeahead import decode_suggestion

logger = logging.getLogger(__name__)


class PartTypeService:

    def __init__(self, client: PartsTechGraphQLClient):
        self.client = client

    async def resolve(self, search_term: str, cookies: str) -> Optional[PartType]:
        """
        Resolve the first typeahead suggestion to a part type.

        Returns None when there are no suggestions or the first one carries no
        part type. Transport and GraphQL failures propagate.
        """
        logger.info(f'PARTSTECH TYPEAHEAD: Looking up part type for "{search_term}"')

        data = await self.client.execute(
            GET_TYPEAHEAD, {"search": search_term}, "GetTypeahead", cookies
        )

        suggestions = data.get("typeahead") or []
        if not isinstance(suggestions, list) or not suggestions:
            logger.info("PARTSTECH TYPEAHEAD: No part type found")
            return None

        first = suggestions[0] if isinstance(suggestions[0], dict) else {}
        suggestion = decode_suggestion(first.get("item"))
        part_type = suggestion.first_part_type() if suggestion is not None else None

        if part_type is None:
            logger.info(f"PARTSTECH TYPEAHEAD: Could not extract part type id from {first.get('item')!r}")
            return None

        logger.info(f"PARTSTECH TYPEAHEAD: Part type found: {part_type.name} (ID: {part_type.id})")
        return part_type
