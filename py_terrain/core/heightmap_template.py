"""
Heightmap template model and parser.

A template is an ordered list of primitive steps. Text templates use one step
per line in the form ``<Operation> <p1> <p2> <p3> <p4>``, for example::

    Hill 1 90-99 60-80 45-55
    Multiply 0.8 land 0 0
    Strait 2 vertical 0 0
    Smooth 100% 0 0 0

Numeric parameters are parsed once into either ``Fixed`` or ``Span`` values.
Any parse failure raises ``TemplateError`` naming the offending step index.
"""

import re
from dataclasses import dataclass
from enum import Enum
from typing import Iterable, Optional, Sequence, Tuple, Union

from .alea_prng import AleaPRNG
from .exceptions import TemplateError

_NUMBER = r"-?(?:\d+\.?\d*|\.\d+)"
_NUMBER_RE = re.compile(rf"^{_NUMBER}$")
_SPAN_RE = re.compile(rf"^({_NUMBER})-({_NUMBER})$")
_PERCENT_RE = re.compile(rf"^({_NUMBER})%$")


@dataclass(frozen=True)
class Fixed:
    """A single numeric parameter value."""
    value: float


@dataclass(frozen=True)
class Span:
    """An inclusive ``low-high`` range sampled when the step runs."""
    low: float
    high: float


NumberParam = Union[Fixed, Span]


class Operation(Enum):
    HILL = "Hill"
    PIT = "Pit"
    RANGE = "Range"
    TROUGH = "Trough"
    STRAIT = "Strait"
    MASK = "Mask"
    INVERT = "Invert"
    ADD = "Add"
    MULTIPLY = "Multiply"
    SMOOTH = "Smooth"


class StraitDirection(Enum):
    VERTICAL = "vertical"
    HORIZONTAL = "horizontal"


class InvertAxes(Enum):
    X = "x"
    Y = "y"
    BOTH = "both"


_AXES_ALIASES = {
    "x": InvertAxes.X,
    "horizontal": InvertAxes.X,
    "y": InvertAxes.Y,
    "vertical": InvertAxes.Y,
    "both": InvertAxes.BOTH,
}


@dataclass(frozen=True)
class HeightBand:
    """Inclusive elevation band a modifier is restricted to."""
    low: float = 0
    high: float = 100

    @property
    def is_land(self) -> bool:
        return self.low == 20


ALL_HEIGHTS = HeightBand(0, 100)
LAND_HEIGHTS = HeightBand(20, 100)


@dataclass(frozen=True)
class BlobStep:
    """Shared parameters of the blob and ridge primitives.

    ``range_x`` and ``range_y`` are percentages of the map width and height.
    """
    count: NumberParam
    height: NumberParam
    range_x: NumberParam
    range_y: NumberParam


@dataclass(frozen=True)
class HillStep(BlobStep):
    pass


@dataclass(frozen=True)
class PitStep(BlobStep):
    pass


@dataclass(frozen=True)
class RangeStep(BlobStep):
    pass


@dataclass(frozen=True)
class TroughStep(BlobStep):
    pass


@dataclass(frozen=True)
class StraitStep:
    width: NumberParam
    direction: StraitDirection


@dataclass(frozen=True)
class MaskStep:
    power: float


@dataclass(frozen=True)
class InvertStep:
    probability: float
    axes: InvertAxes


@dataclass(frozen=True)
class AddStep:
    value: float
    band: HeightBand


@dataclass(frozen=True)
class MultiplyStep:
    value: float
    band: HeightBand


@dataclass(frozen=True)
class SmoothStep:
    """Blend each cell toward its neighborhood mean.

    ``blend`` is the weight of the mean: 1 replaces the height with the mean,
    0.5 averages the old height and the mean.
    """
    blend: float


Step = Union[HillStep, PitStep, RangeStep, TroughStep, StraitStep, MaskStep,
             InvertStep, AddStep, MultiplyStep, SmoothStep]


@dataclass(frozen=True)
class HeightmapTemplate:
    """A parsed, validated sequence of steps."""
    steps: Tuple[Step, ...]
    name: str = "custom"

    def __len__(self) -> int:
        return len(self.steps)

    def appended(self, *steps: Step) -> "HeightmapTemplate":
        """Copy of this template with extra steps at the end."""
        return HeightmapTemplate(self.steps + tuple(steps), self.name)


def resolve_count(param: NumberParam, prng: AleaPRNG) -> int:
    """Resolve a count or height parameter to an integer.

    A fixed fractional value rounds up with probability equal to its fraction,
    so ``1.5`` yields 1 or 2 equally often. A span samples uniformly.
    """
    if isinstance(param, Fixed):
        whole = int(param.value)
        return whole + int(prng.chance(param.value - whole))
    return int(prng.random() * (param.high - param.low + 1) + param.low)


def resolve_point(param: NumberParam, length: float, prng: AleaPRNG) -> float:
    """Resolve a percentage range to a coordinate along an axis of ``length``."""
    if isinstance(param, Fixed):
        low = high = param.value / 100
    else:
        low, high = param.low / 100, param.high / 100
    low *= length
    high *= length
    return int(prng.random() * (high - low + 1)) + low


def _parse_number(token: str, index: int, operation: str, label: str) -> NumberParam:
    if _NUMBER_RE.match(token):
        return Fixed(float(token))
    match = _SPAN_RE.match(token)
    if match:
        low, high = float(match.group(1)), float(match.group(2))
        if low > high:
            raise TemplateError(
                f"{label} range '{token}' has its lower bound above its upper bound",
                index, operation,
            )
        return Span(low, high)
    raise TemplateError(f"malformed {label} '{token}'", index, operation)


def _parse_float(token: str, index: int, operation: str, label: str) -> float:
    if not _NUMBER_RE.match(token):
        raise TemplateError(f"{label} must be a number, got '{token}'", index, operation)
    return float(token)


def _require_non_negative(param: NumberParam, index: int, operation: str, label: str):
    low = param.value if isinstance(param, Fixed) else param.low
    if low < 0:
        raise TemplateError(f"{label} must not be negative", index, operation)


def _parse_band(token: str, index: int, operation: str) -> HeightBand:
    if token == "all":
        return ALL_HEIGHTS
    if token == "land":
        return LAND_HEIGHTS
    match = _SPAN_RE.match(token)
    if not match:
        raise TemplateError(
            f"height band must be 'all', 'land' or 'low-high', got '{token}'",
            index, operation,
        )
    low, high = float(match.group(1)), float(match.group(2))
    if not 0 <= low <= high <= 100:
        raise TemplateError(f"height band '{token}' outside 0-100", index, operation)
    return HeightBand(low, high)


def _parse_blob(cls, args: Sequence[str], index: int, operation: str) -> BlobStep:
    if len(args) < 4:
        raise TemplateError(
            "expected count, height, x range and y range", index, operation
        )
    count = _parse_number(args[0], index, operation, "count")
    height = _parse_number(args[1], index, operation, "height")
    range_x = _parse_number(args[2], index, operation, "x range")
    range_y = _parse_number(args[3], index, operation, "y range")
    _require_non_negative(count, index, operation, "count")
    _require_non_negative(height, index, operation, "height")
    return cls(count=count, height=height, range_x=range_x, range_y=range_y)


def _parse_smooth(args: Sequence[str], index: int, operation: str) -> SmoothStep:
    token = args[0] if args else "2"
    match = _PERCENT_RE.match(token)
    if match:
        percent = float(match.group(1))
        if not 0 < percent <= 100:
            raise TemplateError(f"smoothing percentage must be in (0, 100], got {token}",
                                index, operation)
        return SmoothStep(blend=percent / 100)
    factor = _parse_float(token, index, operation, "smoothing factor")
    if factor < 1:
        raise TemplateError(f"smoothing factor must be at least 1, got {token}",
                            index, operation)
    return SmoothStep(blend=1 / factor)


def parse_step(operation: str, args: Sequence[str], index: int = 0) -> Step:
    """Parse one step from its operation name and parameter tokens."""
    try:
        op = Operation(operation)
    except ValueError:
        raise TemplateError(f"unknown operation '{operation}'", index, operation) from None

    if op is Operation.HILL:
        return _parse_blob(HillStep, args, index, operation)
    if op is Operation.PIT:
        return _parse_blob(PitStep, args, index, operation)
    if op is Operation.RANGE:
        return _parse_blob(RangeStep, args, index, operation)
    if op is Operation.TROUGH:
        return _parse_blob(TroughStep, args, index, operation)

    if not args:
        raise TemplateError("missing parameters", index, operation)

    if op is Operation.STRAIT:
        width = _parse_number(args[0], index, operation, "width")
        _require_non_negative(width, index, operation, "width")
        direction = args[1] if len(args) > 1 else "vertical"
        try:
            return StraitStep(width=width, direction=StraitDirection(direction))
        except ValueError:
            raise TemplateError(f"unknown strait direction '{direction}'",
                                index, operation) from None
    if op is Operation.MASK:
        return MaskStep(power=_parse_float(args[0], index, operation, "power"))
    if op is Operation.INVERT:
        probability = _parse_float(args[0], index, operation, "probability")
        if not 0 <= probability <= 1:
            raise TemplateError(f"probability must be in [0, 1], got {args[0]}",
                                index, operation)
        axes_token = args[1] if len(args) > 1 else "both"
        if axes_token not in _AXES_ALIASES:
            raise TemplateError(f"unknown invert axes '{axes_token}'", index, operation)
        return InvertStep(probability=probability, axes=_AXES_ALIASES[axes_token])
    if op is Operation.ADD or op is Operation.MULTIPLY:
        value = _parse_float(args[0], index, operation, "value")
        band = _parse_band(args[1], index, operation) if len(args) > 1 else ALL_HEIGHTS
        if op is Operation.ADD:
            return AddStep(value=value, band=band)
        return MultiplyStep(value=value, band=band)
    if op is Operation.SMOOTH:
        return _parse_smooth(args, index, operation)

    raise TemplateError(f"operation '{operation}' has no parser", index, operation)


def parse_template(source: Union[str, Iterable[Union[str, Tuple[str, str]]]],
                   name: Optional[str] = None) -> HeightmapTemplate:
    """
    Parse a template from text or from (operation, parameters) pairs.

    Args:
        source: Multi-line template text, an iterable of step lines, or an
            iterable of ``(operation, "p1 p2 p3 p4")`` pairs
        name: Optional template name

    Returns:
        Parsed template

    Raises:
        TemplateError: For empty templates, unknown operations or malformed
            parameters.
    """
    if isinstance(source, str):
        entries = source.splitlines()
    else:
        entries = list(source)

    steps = []
    for entry in entries:
        if isinstance(entry, str):
            tokens = entry.split()
            if not tokens:
                continue
            operation, args = tokens[0], tokens[1:]
        else:
            operation, params = entry
            args = str(params).split()
        steps.append(parse_step(operation, args, index=len(steps)))

    if not steps:
        raise TemplateError("template contains no steps")

    return HeightmapTemplate(steps=tuple(steps), name=name or "custom")
