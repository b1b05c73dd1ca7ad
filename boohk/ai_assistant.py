"""
In-app AI assistant.
Uses Anthropic Claude to answer questions about working in Boohk.
"""
import os
import logging
from typing import Dict, List, Optional
import anthropic

logger = logging.getLogger(__name__)

ASSISTANT_MODEL = os.getenv("ASSISTANT_MODEL", "claude-3-7-sonnet-20250219")
ASSISTANT_MAX_TOKENS = int(os.getenv("ASSISTANT_MAX_TOKENS", "1024"))

SYSTEM_PROMPT = """You are OHLIVER, the helpful AI assistant for Boohk, a platform for managing out-of-home (OOH) advertising operations: LED billboards, static billboards and digital signage networks.

The platform's departments:
- Sales: clients, sites, proposals, cost estimates, quotations and bookings. Quotations are emailed to clients as PDFs, are valid for 30 days, and clients accept or reject them from a password-protected page. Accepted quotations are reserved as bookings.
- Logistics: job orders (installation, dismantling, maintenance, repair, change material, roll down), service assignments, fleet and the weather forecast.
- Treasury and accounting: collectibles, and collection status per quotation.
- Admin: users, roles and company files.

Answer with practical, step-by-step guidance. Keep replies short. If a question is outside the platform, say so briefly and help where you can."""


class AssistantServiceError(Exception):
    """Raised when the model call fails."""


class BoohkAssistant:
    """Chat assistant for platform guidance."""

    def __init__(self, api_key: Optional[str] = None):
        api_key = api_key or os.getenv('ANTHROPIC_API_KEY')
        if not api_key:
            raise ValueError("ANTHROPIC_API_KEY environment variable not set")
        self.client = anthropic.Anthropic(api_key=api_key)

    @staticmethod
    def to_model_messages(messages: List[Dict]) -> List[Dict]:
        """
        Normalize chat history for the Messages API.

        Accepts {role, content} or {role, parts}; "model" is treated as
        "assistant". Empty messages are dropped, and the history must start
        with a user turn.
        """
        normalized = []
        for message in messages:
            role = message.get("role")
            role = "assistant" if role in ("assistant", "model") else "user"
            content = message.get("content") or message.get("parts") or ""
            if not isinstance(content, str) or not content.strip():
                continue
            if normalized and normalized[-1]["role"] == role:
                normalized[-1]["content"] += "\n\n" + content
            else:
                normalized.append({"role": role, "content": content})

        while normalized and normalized[0]["role"] != "user":
            normalized.pop(0)
        return normalized

    def reply(self, messages: List[Dict], current_page: Optional[str] = None, user_name: Optional[str] = None) -> str:
        """
        Generate the assistant's next message.

        Raises:
            ValueError: If there is no user message to answer
            AssistantServiceError: If the Anthropic call fails
        """
        model_messages = self.to_model_messages(messages)
        if not model_messages:
            raise ValueError("At least one user message is required")

        system = SYSTEM_PROMPT
        if current_page or user_name:
            system += f"\n\nCurrent page: {current_page or 'unknown'}\nUser: {user_name or 'unknown'}"

        try:
            response = self.client.messages.create(
                model=ASSISTANT_MODEL,
                max_tokens=ASSISTANT_MAX_TOKENS,
                system=system,
                messages=model_messages,
            )
        except anthropic.APIError as e:
            logger.error(f"Assistant request failed: {e}")
            raise AssistantServiceError("Failed to generate response") from e

        text_parts = [block.text for block in response.content if getattr(block, "type", None) == "text"]
        return "\n".join(text_parts).strip()
