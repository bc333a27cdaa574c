"""Errors raised by external collaborators."""


class StoreUnavailableError(Exception):
    """The durable state store could not be read or written."""


class FetchError(Exception):
    """The remote change list could not be retrieved or decoded."""
