class ServiceError(Exception):
    """Base class for failures in an upstream service call."""


class StorageError(ServiceError):
    pass


class ExtractionError(ServiceError):
    pass


class GenerationError(ServiceError):
    """The model call failed or its output could not be decoded into the expected shape."""


class RubricError(GenerationError):
    pass
