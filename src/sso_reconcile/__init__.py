"""External login reconciliation for back-office SSO.

This package keeps local user accounts in step with the claims of an external
identity provider: authorization groups, display name and login identifier,
and the profile picture published by the provider's graph API.
"""

__version__ = "0.1.0"
