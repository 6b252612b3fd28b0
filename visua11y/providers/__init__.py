"""
Provider vocabulary for the fallback engine.

Concrete providers live in their own modules and are imported from there:
    - visua11y.providers.openai: OpenAIProvider (cloud provider A)
    - visua11y.providers.gemini: GeminiProvider (cloud provider B)
    - visua11y.providers.on_device: OnDeviceProbe, OllamaSummarizer
    - visua11y.providers.invoker: ProviderInvoker
"""

from visua11y.providers.base import (
    PROVIDER_PRIORITY,
    AttemptResult,
    CloudProvider,
    ErrorKind,
    Exhausted,
    Failure,
    Operation,
    OrchestrationResult,
    ProviderEntry,
    ProviderKind,
    ProviderRequest,
    Succeeded,
    Success,
    Unavailable,
    providers_for,
)

__all__ = [
    "PROVIDER_PRIORITY",
    "AttemptResult",
    "CloudProvider",
    "ErrorKind",
    "Exhausted",
    "Failure",
    "Operation",
    "OrchestrationResult",
    "ProviderEntry",
    "ProviderKind",
    "ProviderRequest",
    "Succeeded",
    "Success",
    "Unavailable",
    "providers_for",
]
