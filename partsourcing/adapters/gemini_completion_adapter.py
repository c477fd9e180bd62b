"""
Gemini Completion Adapter

Google Gemini implementation of the completion interface.
"""
import logging
import time

import google.generativeai as genai

from partsourcing.adapters.completion_adapter_interface import CompletionAdapterInterface

logger = logging.getLogger(__name__)


class GeminiCompletionAdapter(CompletionAdapterInterface):
    """Text completion through google-generativeai"""

    def __init__(self, api_key: str, model_name: str = "gemini-2.0-flash"):
        self.model_name = model_name
        genai.configure(api_key=api_key)
        self.model = genai.GenerativeModel(model_name)

        # Stats for monitoring
        self.stats = {
            "api_calls": 0,
            "total_latency_ms": 0
        }
        logger.info(f"[AI] Gemini initialized with model: {model_name}")

    async def complete(self, prompt: str) -> str:
        start_time = time.time()

        response = await self.model.generate_content_async(prompt)

        latency = int((time.time() - start_time) * 1000)
        self.stats["api_calls"] += 1
        self.stats["total_latency_ms"] += latency
        logger.info(f"[AI] Gemini reply received ({latency}ms)")

        return response.text
