from .outcome import ReconciliationReport, StepOutcome
from .provider_options import AutoLinkOptions, ExternalLoginProviderOptions

__all__ = [
    "AutoLinkOptions",
    "ExternalLoginProviderOptions",
    "ReconciliationReport",
    "StepOutcome",
]
