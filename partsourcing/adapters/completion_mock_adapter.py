"""
Mock Completion Adapter

Used when no AI provider is configured. Every inventory match is declined
and no parts are drafted, so callers fall back to marketplace offers.
"""
import json

from partsourcing.adapters.completion_adapter_interface import CompletionAdapterInterface


class CompletionMockAdapter(CompletionAdapterInterface):
    """Mock adapter that never selects anything"""

    async def complete(self, prompt: str) -> str:
        if "selectedInventoryIndex" in prompt:
            return json.dumps({
                "useInventory": False,
                "selectedInventoryIndex": None,
                "reason": "AI matching disabled (mock adapter)"
            })
        return json.dumps({"services": []})
