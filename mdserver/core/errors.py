class MdServerError(Exception):
    """Base class for errors raised by the document pipeline."""


class ClientInputError(MdServerError):
    """
    The request itself is invalid (short search term, traversal attempt).
    Answered with HTTP 400 and the message as body; never logged.
    """


class EnumerationError(MdServerError):
    """
    The document directory could not be listed.
    Distinct from an empty index: callers must not treat it as "no documents".
    """

    def __init__(self, directory, cause: Exception):
        super().__init__(f"cannot list {directory}: {cause}")
        self.directory = directory
        self.cause = cause
