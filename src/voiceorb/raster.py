"""
Numpy raster implementation of the drawing surface.

Composites into a premultiplied RGBA float32 buffer with source-over
blending. Disks (solid or radial-gradient filled) are evaluated only inside
their bounding box; curved strokes are rasterized as coverage masks with
Pillow and then blended like any other paint.
"""

import numpy as np
from PIL import Image, ImageDraw

from voiceorb.core.palette import Color
from voiceorb.surface import Point, RadialGradient

# Line segments used to flatten a quadratic curve
CURVE_SEGMENTS = 24


def _premultiplied(color: Color) -> np.ndarray:
    r, g, b, a = color.as_rgba()
    return np.array([r / 255.0 * a, g / 255.0 * a, b / 255.0 * a, a], dtype=np.float32)


def gradient_parameter(
    gradient: RadialGradient,
    xs: np.ndarray,
    ys: np.ndarray,
) -> tuple[np.ndarray, np.ndarray]:
    """
    Solve the two-circle gradient parameter ``t`` for every pixel.

    A pixel P lies on the circle ``(c0 + t*(c1 - c0), r0 + t*(r1 - r0))``.
    Of the roots with non-negative radius the largest is used.

    Returns:
        (t, defined) arrays; ``defined`` is False where no circle passes
        through the pixel.
    """
    (x0, y0), r0 = gradient.start, gradient.start_radius
    (x1, y1), r1 = gradient.end, gradient.end_radius
    dx, dy, dr = x1 - x0, y1 - y0, r1 - r0

    qx = xs - x0
    qy = ys - y0
    a = dx * dx + dy * dy - dr * dr
    b = qx * dx + qy * dy + r0 * dr
    c = qx * qx + qy * qy - r0 * r0

    with np.errstate(divide="ignore", invalid="ignore"):
        if abs(a) < 1e-9:
            if abs(dr) < 1e-9 and abs(dx) < 1e-9 and abs(dy) < 1e-9:
                # Degenerate gradient: every pixel takes the last stop
                t = np.ones_like(c)
                return t, np.ones(c.shape, dtype=bool)
            t = c / (2.0 * b)
            defined = np.isfinite(t) & (r0 + t * dr >= 0)
            return np.where(defined, t, 0.0), defined

        disc = b * b - a * c
        defined = disc >= 0
        root = np.sqrt(np.maximum(disc, 0.0))
        t_hi = (b + root) / a
        t_lo = (b - root) / a
        t_max = np.maximum(t_hi, t_lo)
        t_min = np.minimum(t_hi, t_lo)
        use_max = r0 + t_max * dr >= 0
        t = np.where(use_max, t_max, t_min)
        defined &= use_max | (r0 + t_min * dr >= 0)
    return np.where(defined, t, 0.0), defined


def sample_stops(stops, t: np.ndarray) -> np.ndarray:
    """Interpolate premultiplied stop colors at parameter ``t`` (padded)."""
    offsets = np.array([s[0] for s in stops], dtype=np.float32)
    colors = np.stack([_premultiplied(s[1]) for s in stops])
    t = np.clip(t, 0.0, 1.0)
    out = np.empty(t.shape + (4,), dtype=np.float32)
    for ch in range(4):
        out[..., ch] = np.interp(t, offsets, colors[:, ch])
    return out


class RasterSurface:
    """
    RGBA raster drawing surface.

    Args:
        width: Surface width in pixels.
        height: Surface height in pixels.
    """

    def __init__(self, width: int, height: int):
        self.width = int(width)
        self.height = int(height)
        self.buffer = np.zeros((self.height, self.width, 4), dtype=np.float32)

    def clear(self) -> None:
        self.buffer.fill(0.0)

    def _blend(self, y0: int, x0: int, src: np.ndarray):
        """Source-over blend of a premultiplied patch at (y0, x0)."""
        h, w = src.shape[:2]
        dst = self.buffer[y0:y0 + h, x0:x0 + w]
        dst *= 1.0 - src[..., 3:4]
        dst += src

    def _bounds(self, cx: float, cy: float, extent: float):
        x0 = max(0, int(np.floor(cx - extent)))
        x1 = min(self.width, int(np.ceil(cx + extent)) + 1)
        y0 = max(0, int(np.floor(cy - extent)))
        y1 = min(self.height, int(np.ceil(cy + extent)) + 1)
        if x0 >= x1 or y0 >= y1:
            return None
        return x0, x1, y0, y1

    def fill_circle(self, center: Point, radius: float, paint) -> None:
        if radius <= 0:
            return
        cx, cy = center
        bounds = self._bounds(cx, cy, radius + 1)
        if bounds is None:
            return
        x0, x1, y0, y1 = bounds

        # Pixel centers
        ys, xs = np.mgrid[y0:y1, x0:x1].astype(np.float32)
        xs += 0.5
        ys += 0.5
        dist = np.sqrt((xs - cx) ** 2 + (ys - cy) ** 2)
        coverage = np.clip(radius + 0.5 - dist, 0.0, 1.0)

        if isinstance(paint, RadialGradient):
            t, defined = gradient_parameter(paint, xs, ys)
            src = sample_stops(paint.stops, t)
            coverage = coverage * defined
        else:
            src = np.broadcast_to(_premultiplied(paint), coverage.shape + (4,))

        self._blend(y0, x0, src * coverage[..., None])

    def stroke_quadratic(
        self, start: Point, control: Point, end: Point, color: Color, width: float
    ) -> None:
        ts = np.linspace(0.0, 1.0, CURVE_SEGMENTS + 1)
        u = 1.0 - ts
        px = u * u * start[0] + 2 * u * ts * control[0] + ts * ts * end[0]
        py = u * u * start[1] + 2 * u * ts * control[1] + ts * ts * end[1]

        pad = width + 2
        x0 = max(0, int(np.floor(px.min() - pad)))
        x1 = min(self.width, int(np.ceil(px.max() + pad)))
        y0 = max(0, int(np.floor(py.min() - pad)))
        y1 = min(self.height, int(np.ceil(py.max() + pad)))
        if x0 >= x1 or y0 >= y1:
            return

        mask = Image.new("L", (x1 - x0, y1 - y0), 0)
        draw = ImageDraw.Draw(mask)
        points = [(float(x - x0), float(y - y0)) for x, y in zip(px, py)]
        draw.line(points, fill=255, width=max(1, int(round(width))), joint="curve")

        coverage = np.asarray(mask, dtype=np.float32) / 255.0
        self._blend(y0, x0, _premultiplied(color) * coverage[..., None])

    def to_array(self) -> np.ndarray:
        """Return the surface as an (H, W, 4) uint8 straight-alpha array."""
        alpha = np.clip(self.buffer[..., 3:4], 0.0, 1.0)
        with np.errstate(divide="ignore", invalid="ignore"):
            rgb = np.where(alpha > 0, self.buffer[..., :3] / alpha, 0.0)
        out = np.concatenate([np.clip(rgb, 0.0, 1.0), alpha], axis=-1)
        return (out * 255 + 0.5).astype(np.uint8)

    def to_image(self) -> Image.Image:
        return Image.fromarray(self.to_array())

    def composite_on(self, background: tuple[int, int, int]) -> np.ndarray:
        """Flatten over an opaque background; returns (H, W, 3) uint8."""
        bg = np.array(background, dtype=np.float32) / 255.0
        rgb = self.buffer[..., :3] + bg * (1.0 - self.buffer[..., 3:4])
        return (np.clip(rgb, 0.0, 1.0) * 255 + 0.5).astype(np.uint8)


class RasterProvider:
    """Surface provider that reuses one square RasterSurface per dimension."""

    def __init__(self):
        self.surface: RasterSurface | None = None

    def __call__(self, size: int) -> RasterSurface:
        if self.surface is None or self.surface.width != size:
            self.surface = RasterSurface(size, size)
        return self.surface
