class ReconciliationError(Exception):
    """Base class for errors raised while reconciling an external login."""


class AccountStoreError(ReconciliationError):
    """The local account store could not be read or written.

    This is an operational failure; the user was already authenticated by the
    identity provider and must not be told the login failed because of it.
    """


class ContentStoreError(ReconciliationError):
    """A media file could not be written."""
