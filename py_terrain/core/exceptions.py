"""Error types raised by the terrain generation pipeline."""

from typing import Optional


class TerrainError(Exception):
    """Base class for all terrain generation failures."""


class ConfigurationError(TerrainError, ValueError):
    """Invalid input detected before any simulation work begins."""


class TemplateError(ConfigurationError):
    """A heightmap template step could not be parsed or applied.

    Attributes:
        step_index: Zero-based position of the offending step, or None when
            the failure concerns the template as a whole.
        operation: Operation name of the offending step, when known.
    """

    def __init__(self, message: str, step_index: Optional[int] = None,
                 operation: Optional[str] = None):
        self.step_index = step_index
        self.operation = operation
        if step_index is not None:
            label = f"step {step_index}"
            if operation:
                label += f" ({operation})"
            message = f"{label}: {message}"
        super().__init__(message)


class GridGeometryError(TerrainError):
    """Triangulation collapsed or produced an unusable cell decomposition."""


class DepressionResolutionError(TerrainError):
    """Depression resolution did not converge within its iteration bound."""

    def __init__(self, message: str, iterations: int, depressions: int):
        self.iterations = iterations
        self.depressions = depressions
        super().__init__(
            f"{message} (iterations={iterations}, depressions={depressions})"
        )


class GenerationCancelled(TerrainError):
    """The caller asked to stop generation between two stages."""

    def __init__(self, stage: str):
        self.stage = stage
        super().__init__(f"generation cancelled before stage '{stage}'")
