"""
Completion Adapter Interface

Abstract interface for the generative-AI text completion service
(inventory match selection, parts list drafting).
"""
import json
from abc import ABC, abstractmethod
from typing import Any


def clean_json_reply(response_text: str) -> str:
    """Strip markdown code fences the model may wrap around JSON"""
    response_text = (response_text or "").strip()
    if response_text.startswith("```"):
        response_text = response_text.split("```")[1]
        if response_text.startswith("json"):
            response_text = response_text[4:]
    return response_text.strip()


def parse_json_reply(response_text: str) -> Any:
    """
    Parse a model reply as JSON.

    Raises:
        json.JSONDecodeError: If the cleaned reply is not valid JSON
    """
    return json.loads(clean_json_reply(response_text))


class CompletionAdapterInterface(ABC):
    """Abstract interface for AI completion adapters"""

    @abstractmethod
    async def complete(self, prompt: str) -> str:
        """
        Send a prompt and return the raw text reply.

        Args:
            prompt: Full natural-language prompt

        Returns:
            Model reply text (may or may not be JSON)
        """
        pass
