"""Exceptions raised by the dispatch kernel and its store collaborators."""


class KernelError(Exception):
    """Base class for errors detected by the kernel itself."""

    pass


class UnknownCommand(KernelError):
    """Raised when a message name is not mapped to a handler and definition."""

    def __init__(self, message_name: str):
        super().__init__(
            f'Unknown message "{message_name}". Message name not mapped to an aggregate.'
        )
        self.message_name = message_name


class MissingRequiredField(KernelError):
    """Raised when the identifier or version field cannot be extracted."""

    def __init__(self, field_name: str, source: str):
        super().__init__(f'Missing required field "{field_name}" in {source}')
        self.field_name = field_name


class InvalidHandlerResult(KernelError):
    """Raised when a command handler returns something other than an AggregateResult."""

    def __init__(self, returned: object):
        super().__init__(
            f"Invalid aggregate result returned: expected AggregateResult, "
            f"got {type(returned).__name__}"
        )
        self.returned = returned


class BadCollaboratorFactory(KernelError):
    """Raised when a store factory returns an object of the wrong type."""

    def __init__(self, factory_name: str, expected: type, returned: object):
        super().__init__(
            f"{factory_name} did not return an instance of {expected.__name__}, "
            f"got {type(returned).__name__}"
        )
        self.expected = expected
        self.returned = returned


class UnsupportedOperation(KernelError):
    """Raised when an object is asked for an operation it does not offer."""

    def __init__(self, owner: str, operation: str):
        super().__init__(f"{owner} does not support {operation}()")
        self.operation = operation


class StoreError(Exception):
    """Base class for failures reported by event and snapshot stores."""

    pass


class ConcurrencyError(StoreError):
    """Raised when an optimistic concurrency check fails.

    This exception indicates that another process has appended events for the
    aggregate between when its state was loaded and when the new events were
    written.
    """

    pass


class StreamExistsAlready(StoreError):
    """Raised when creating a stream under a name that is already taken."""

    def __init__(self, stream_name: str):
        super().__init__(f'Stream "{stream_name}" exists already')
        self.stream_name = stream_name


class StreamNotFound(StoreError):
    """Raised when reading from or appending to a stream that does not exist."""

    def __init__(self, stream_name: str):
        super().__init__(f'Stream "{stream_name}" not found')
        self.stream_name = stream_name
