"""
Error taxonomy for Recompose.

Classes:
    RecomposeError: Base class for all engine errors
    ValidationError: Malformed or missing input, rejected before any work
    DecodeError: Raster bytes that fail to parse
    CollaboratorError: An external service failed or returned nothing usable
"""


class RecomposeError(Exception):
    """Base class for errors raised by the composition engine."""


class ValidationError(RecomposeError, ValueError):
    """Raised when a request or argument is malformed."""


class DecodeError(RecomposeError, IOError):
    """Raised when raster bytes cannot be decoded into pixels."""


class CollaboratorError(RecomposeError, RuntimeError):
    """
    Raised when a vision, generation, editing or background-removal
    collaborator fails or returns nothing usable.

    Attributes:
        collaborator: Name of the failing collaborator
        diagnostic: Diagnostic message reported by (or about) the collaborator
    """

    def __init__(self, collaborator: str, diagnostic: str):
        self.collaborator = collaborator
        self.diagnostic = diagnostic
        super().__init__(f"{collaborator} failed: {diagnostic}")
