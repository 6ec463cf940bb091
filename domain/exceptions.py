"""Domain exceptions for pipeline rule violations and collaborator failures."""


class DomainError(Exception):
    """Base exception for domain layer."""


class ValidationError(DomainError):
    """Raised when input validation fails."""


class InvalidBoundingBoxError(ValidationError):
    """Raised when a bounding box violates the normalized-space invariant."""


class DecodeError(DomainError):
    """Raised when document bytes cannot be decoded as a PDF."""


class RenderError(DomainError):
    """Raised when a single page cannot be rasterized."""


class ExtractionParseError(DomainError):
    """Raised when an inference response cannot be parsed into its schema.

    Never leaves the extraction client; it is always converted to a fallback value.
    """


class PageProcessingError(DomainError):
    """Raised when a whole-page extraction request fails."""


class ChemistryExtractionError(DomainError):
    """Raised when a chemical-structure extraction workflow fails."""


class InfrastructureError(DomainError):
    """Raised when infrastructure operations fail (imaging, network, etc.)."""


class PageNotFoundError(DomainError):
    """Raised when a page number is not part of the active session."""


class SessionSupersededError(DomainError):
    """Raised when a load finishes after a newer upload or a reset replaced its session."""
