"""
Error taxonomy for Seraglio
"""


class SeraglioError(Exception):
    """Base class for all Seraglio errors"""


class StorageError(SeraglioError):
    """The session store could not read or write"""


class NotFoundError(SeraglioError):
    """No matching user or session"""


class ValidationError(SeraglioError):
    """A request is missing a required field; the message is shown to the requester"""
