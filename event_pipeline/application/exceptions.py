"""Application-layer exceptions. Do not reuse domain exceptions."""


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class ProcessorError(ApplicationError):
    """Raised inside a processor. Isolated: recorded as `failed` for that processor only."""

    def __init__(self, processor: str, message: str) -> None:
        self.processor = processor
        super().__init__(message)


class DeadLetterNotFoundError(ApplicationError):
    """Raised when a dead-letter item does not exist."""


class StoreOperationError(ApplicationError):
    """Raised by a canonical store when a store-side operation fails. Carries the underlying cause."""

    def __init__(self, operation: str, cause: str) -> None:
        self.operation = operation
        self.cause = cause
        super().__init__(f"{operation} failed: {cause}")
