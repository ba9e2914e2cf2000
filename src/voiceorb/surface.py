"""
Drawing surface contract.

A deliberately small subset of a Canvas-2D style API: clear, fill a disk
with a solid color or radial gradient, and stroke a quadratic curve. The
engine only ever talks to this protocol; ``RecordingSurface`` keeps the
calls as typed records, ``voiceorb.raster.RasterSurface`` rasterizes them.
"""

from dataclasses import dataclass, field
from typing import Protocol, Union

from voiceorb.core.palette import Color

Point = tuple[float, float]


@dataclass(frozen=True)
class RadialGradient:
    """
    Two-circle radial gradient.

    Colors are interpolated between ``stops`` (offset in [0, 1], Color)
    along the family of circles from (start, start_radius) to
    (end, end_radius), padded beyond both ends.
    """

    start: Point
    start_radius: float
    end: Point
    end_radius: float
    stops: tuple[tuple[float, Color], ...]


Paint = Union[Color, RadialGradient]


@dataclass(frozen=True)
class Clear:
    pass


@dataclass(frozen=True)
class FillCircle:
    center: Point
    radius: float
    paint: Paint


@dataclass(frozen=True)
class StrokeQuadratic:
    start: Point
    control: Point
    end: Point
    color: Color
    width: float


DrawCommand = Union[Clear, FillCircle, StrokeQuadratic]


class DrawingSurface(Protocol):
    width: int
    height: int

    def clear(self) -> None: ...

    def fill_circle(self, center: Point, radius: float, paint: Paint) -> None: ...

    def stroke_quadratic(
        self, start: Point, control: Point, end: Point, color: Color, width: float
    ) -> None: ...


@dataclass
class RecordingSurface:
    """Surface that records draw calls instead of rasterizing them."""

    width: int
    height: int
    commands: list[DrawCommand] = field(default_factory=list)

    def clear(self) -> None:
        self.commands.append(Clear())

    def fill_circle(self, center: Point, radius: float, paint: Paint) -> None:
        self.commands.append(FillCircle(center=center, radius=radius, paint=paint))

    def stroke_quadratic(
        self, start: Point, control: Point, end: Point, color: Color, width: float
    ) -> None:
        self.commands.append(
            StrokeQuadratic(start=start, control=control, end=end, color=color, width=width)
        )

    def reset(self):
        """Forget recorded commands."""
        self.commands.clear()

    def of_type(self, kind: type) -> list:
        return [c for c in self.commands if isinstance(c, kind)]
