"""Accessibility prompts for the summarizers (OpenAI, Gemini, on-device)."""

from dataclasses import dataclass
from typing import Dict

from visua11y.providers.base import Operation


@dataclass(frozen=True)
class OperationProfile:
    """
    Fixed instruction and generation limits for one operation.

    Attributes:
        system_instruction: Role/task description sent ahead of the input
        user_prompt: Lead-in placed before the user's content
        max_tokens: Cap on generated output length
        temperature: Sampling temperature, kept low for literal summaries
    """

    system_instruction: str
    user_prompt: str
    max_tokens: int
    temperature: float

    def user_message(self, content: str) -> str:
        """Combine the lead-in with the caller's content."""
        return f"{self.user_prompt}\n\n{content}"


# WCAG 3.1.5 (Reading Level): text should not require reading ability
# beyond lower secondary education.
SUMMARIZE_INSTRUCTION = (
    "Your task is to simplify complex information for users with cognitive "
    "disabilities, as per accessibility standard WCAG 3.1.5 (Reading Level). "
    "Create a version of the following text that is easy to understand, as if "
    "for someone at a lower secondary education level. The summary should be "
    "concise and clear. Use **bold text** to highlight important terms and concepts."
)

DIGEST_INSTRUCTION = (
    "You are an accessibility expert helping users with cognitive disabilities "
    "understand webpage content. Create a short TLDR that explains what this "
    "page is about and what it is for, in simple, clear language. "
    "Use **bold** for key terms."
)

SCREENSHOT_INSTRUCTION = (
    "You are an accessibility expert analyzing webpage screenshots. Provide "
    "concise visual summaries for screen reader users, focusing on page "
    "structure and key interactive elements such as buttons, links, forms "
    "and navigation."
)

ON_DEVICE_SHARED_CONTEXT = (
    "You are helping users with cognitive disabilities understand complex text "
    "by simplifying it according to WCAG 3.1.5 accessibility standards. "
    "Use **bold** for important terms."
)

OPERATION_PROFILES: Dict[Operation, OperationProfile] = {
    Operation.SUMMARIZE: OperationProfile(
        system_instruction=SUMMARIZE_INSTRUCTION,
        user_prompt="Please summarize the following text:",
        max_tokens=1024,
        temperature=0.3,
    ),
    # Digests are deliberately shorter than selection summaries
    Operation.GENERATE_DIGEST: OperationProfile(
        system_instruction=DIGEST_INSTRUCTION,
        user_prompt="Provide a TLDR for:",
        max_tokens=300,
        temperature=0.3,
    ),
    Operation.ANALYZE_SCREENSHOT: OperationProfile(
        system_instruction=SCREENSHOT_INSTRUCTION,
        user_prompt="Analyze this webpage screenshot for structure and key interactive elements.",
        max_tokens=400,
        temperature=0.1,
    ),
}


def get_profile(operation: Operation) -> OperationProfile:
    """Return the prompt profile for an operation."""
    return OPERATION_PROFILES[operation]
