"""Accessibility prompts and per-operation generation limits."""

from visua11y.prompts.accessibility import (
    ON_DEVICE_SHARED_CONTEXT,
    OPERATION_PROFILES,
    OperationProfile,
    get_profile,
)

__all__ = [
    'ON_DEVICE_SHARED_CONTEXT',
    'OPERATION_PROFILES',
    'OperationProfile',
    'get_profile',
]
