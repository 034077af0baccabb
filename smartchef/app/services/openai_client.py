"""
OpenAI Realtime API client used for text-only recipe generation.
Based on official OpenAI Realtime API documentation.
"""

import asyncio
import json
import logging
from typing import Optional

from websockets.asyncio.client import ClientConnection, connect
from websockets.exceptions import ConnectionClosed, WebSocketException

from ..core.config import Settings, get_settings
from ..core.exceptions import RecipeGenerationError

log = logging.getLogger(__name__)

INSTRUCTIONS = (
    "You are a helpful cooking assistant. Answer with plain text recipes using "
    "'Recipe:', 'Ingredients:', 'Instructions:' and 'Macros:' section headers."
)


class RecipeGenerator:
    def __init__(self, settings: Optional[Settings] = None):
        self.settings = settings or get_settings()
        self.ws: Optional[ClientConnection] = None
        self.session_id = None

    async def __aenter__(self):
        if not self.settings.openai_api_key:
            raise RecipeGenerationError("OpenAI API key is not configured")

        url = f"{self.settings.openai_realtime_url}?model={self.settings.openai_realtime_model}"
        log.info(f"🔗 Connecting to OpenAI Realtime API: {url}")

        try:
            self.ws = await connect(
                url,
                additional_headers={
                    "Authorization": f"Bearer {self.settings.openai_api_key}",
                    "OpenAI-Beta": "realtime=v1",
                },
                max_size=4 * 1024 * 1024,
            )
        except (OSError, asyncio.TimeoutError, WebSocketException) as e:
            raise RecipeGenerationError(f"Could not connect to OpenAI: {e}") from e

        try:
            await self._configure_session()
        except Exception:
            await self.ws.close()
            raise

        return self

    async def _configure_session(self):
        try:
            created = await self._recv()
            if created.get("type") == "session.created":
                self.session_id = created.get("session", {}).get("id")
                log.info(f"✅ Session created: {self.session_id}")
            else:
                log.error(f"❌ Expected session.created, got: {created}")

            await self._send({
                "type": "session.update",
                "session": {
                    "modalities": ["text"],
                    "instructions": INSTRUCTIONS,
                    "turn_detection": None,
                    "temperature": 0.8,
                },
            })

            updated = await self._recv()
        except (json.JSONDecodeError, AttributeError) as e:
            raise RecipeGenerationError(f"Malformed session event: {e}") from e

        if updated.get("type") == "session.updated":
            log.info("✅ Session configured successfully")
        else:
            log.warning(f"⚠️ Expected session.updated, got: {updated}")

    async def __aexit__(self, *exc):
        if self.ws:
            await self.ws.close()
            log.info("🔌 Disconnected from OpenAI Realtime API")

    async def _send(self, message: dict):
        if not self.ws:
            raise RuntimeError("WebSocket not connected")
        try:
            await self.ws.send(json.dumps(message))
        except ConnectionClosed as e:
            raise RecipeGenerationError("OpenAI connection closed unexpectedly") from e
        log.debug(f"📤 Sent: {message['type']}")

    async def _recv(self) -> dict:
        if not self.ws:
            raise RuntimeError("WebSocket not connected")
        try:
            return json.loads(await self.ws.recv())
        except ConnectionClosed as e:
            raise RecipeGenerationError("OpenAI connection closed unexpectedly") from e

    async def generate_text(self, prompt: str) -> str:
        """Send one user message and collect the text reply."""
        await self._send({
            "type": "conversation.item.create",
            "item": {
                "type": "message",
                "role": "user",
                "content": [{"type": "input_text", "text": prompt}],
            },
        })
        await self._send({"type": "response.create", "response": {"modalities": ["text"]}})

        try:
            text = await asyncio.wait_for(
                self._collect_response(), timeout=self.settings.generation_timeout
            )
        except asyncio.TimeoutError as e:
            raise RecipeGenerationError("Timed out waiting for recipe") from e

        if not text.strip():
            raise RecipeGenerationError("OpenAI returned an empty recipe")
        return text

    async def _collect_response(self) -> str:
        chunks = []
        while True:
            try:
                data = await self._recv()
            except json.JSONDecodeError as e:
                log.error(f"❌ Failed to parse JSON message: {e}")
                continue

            event_type = data.get("type", "unknown")
            log.debug(f"📨 Received event: {event_type}")

            if event_type == "response.text.delta":
                if delta := data.get("delta"):
                    chunks.append(delta)

            elif event_type == "response.done":
                status = data.get("response", {}).get("status", "completed")
                if status not in ("completed", "incomplete"):
                    raise RecipeGenerationError(f"Response ended with status {status}")
                log.info("✅ Response generation completed")
                return "".join(chunks)

            elif event_type == "error":
                error = data.get("error", {})
                log.error(f"❌ OpenAI API error: {error}")
                raise RecipeGenerationError(error.get("message", "OpenAI API error"))

            else:
                log.debug(f"📋 Unhandled event type: {event_type}")


async def generate_recipe(prompt: str) -> str:
    async with RecipeGenerator() as generator:
        return await generator.generate_text(prompt)
