from __future__ import annotations


class WizardError(Exception):
    """Base class for errors surfaced to the user."""


class ValidationError(WizardError):
    """Required user input is missing. Shown inline, no step change."""


class ServiceError(WizardError):
    """The model call failed, returned nothing, or returned unusable data."""
