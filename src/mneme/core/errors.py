"""Error types raised by the Mneme core."""


class MnemeError(Exception):
    """Base class for all Mneme errors."""


class InvalidQuality(MnemeError):
    """Quality signal outside the accepted Hard/Good/Easy set."""

    def __init__(self, quality: object):
        self.quality = quality
        super().__init__(f"Invalid quality {quality!r}: expected one of 1, 3, 5")


class NotFound(MnemeError):
    """Identifier that does not resolve to an existing record."""

    def __init__(self, resource: str, identifier: object):
        self.resource = resource
        self.identifier = identifier
        super().__init__(f"{resource} {identifier} not found")


class ValidationFailed(MnemeError):
    """Content input rejected before reaching the store."""


class StoreUnavailable(MnemeError):
    """The underlying store failed; the original error is chained."""


class ConfigError(MnemeError):
    """An environment setting holds a value that cannot be used."""
