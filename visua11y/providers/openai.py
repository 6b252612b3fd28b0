"""
OpenAI chat-completions provider.

Builds chat-completion requests (system + user messages, bearer auth) and
reads the answer from choices[0].message.content. Screenshots are passed as
an image_url reference carrying the data URL unchanged.
"""

from typing import Any, Dict, List, Optional

from visua11y.config import config
from visua11y.errors import ResponseParseError
from visua11y.prompts import get_profile
from visua11y.providers.base import CloudProvider, Operation, ProviderKind, ProviderRequest


class OpenAIProvider(CloudProvider):
    """Cloud text/vision provider A."""

    def __init__(self, api_url: Optional[str] = None, model: Optional[str] = None) -> None:
        self.api_url = api_url or config.OPENAI_API_URL
        self.model = model or config.OPENAI_MODEL

    @property
    def kind(self) -> ProviderKind:
        return ProviderKind.OPENAI

    @property
    def label(self) -> str:
        return "OpenAI"

    def build_request(self, operation: Operation, payload: str, api_key: str) -> ProviderRequest:
        profile = get_profile(operation)

        if operation is Operation.ANALYZE_SCREENSHOT:
            user_content: Any = _vision_content(profile.user_prompt, payload)
        else:
            user_content = profile.user_message(payload)

        body = {
            "model": self.model,
            "messages": [
                {"role": "system", "content": profile.system_instruction},
                {"role": "user", "content": user_content},
            ],
            "max_tokens": profile.max_tokens,
            "temperature": profile.temperature,
        }
        headers = {
            "Content-Type": "application/json",
            "Authorization": f"Bearer {api_key}",
        }
        return ProviderRequest(url=self.api_url, body=body, headers=headers)

    def parse_response(self, operation: Operation, data: Any) -> str:
        text = _first_choice_text(data)
        if text:
            return text

        message = self.error_message(data)
        if message:
            raise ResponseParseError(f"OpenAI API error: {message}", provider=self.kind.value)
        raise ResponseParseError(
            f"Unexpected response format from OpenAI API ({operation.value})",
            provider=self.kind.value,
        )


def _vision_content(prompt: str, data_url: str) -> List[Dict[str, Any]]:
    return [
        {"type": "text", "text": prompt},
        {"type": "image_url", "image_url": {"url": data_url, "detail": "high"}},
    ]


def _first_choice_text(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    choices = data.get("choices")
    if not isinstance(choices, list) or not choices:
        return None
    first = choices[0]
    if not isinstance(first, dict):
        return None
    message = first.get("message")
    if not isinstance(message, dict):
        return None
    content = message.get("content")
    if not isinstance(content, str):
        return None
    return content.strip() or None
