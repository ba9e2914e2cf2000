"""
Sphere compositing: outer glow, gradient-shaded core, specular highlights.

Geometry is computed by a pure function of (center, base radius, level,
state, pulse phase) so the same inputs always yield the same radii and
gradient stops; ``SphereRenderer`` turns that geometry into draw calls.
"""

import math
from dataclasses import dataclass
from typing import Optional

from voiceorb.core.audio import DEFAULT_REACTIVITY, Reactivity
from voiceorb.core.palette import TRANSPARENT_WHITE, WHITE, AgentState, Color, lookup
from voiceorb.surface import RadialGradient


@dataclass(frozen=True)
class SphereStyle:
    """Shape and lighting constants for the sphere."""

    pulse_amplitude: float = 0.05  # Breathing depth
    glow_scale: float = 1.5  # Glow radius relative to the sphere
    light_offset: float = 0.3  # Core light source, toward upper-left
    core_white: Color = WHITE.with_alpha(0.9)
    core_offsets: tuple[float, float, float, float] = (0.0, 0.4, 0.8, 1.0)

    # (focus offset, gradient radius, disk radius, peak alpha), all x radius
    primary_highlight: tuple[float, float, float, float] = (-0.4, 0.6, 0.4, 0.7)
    secondary_highlight: tuple[float, float, float, float] = (0.3, 0.2, 0.1, 0.4)


@dataclass(frozen=True)
class Highlight:
    center: tuple[float, float]
    radius: float
    gradient: RadialGradient


@dataclass(frozen=True)
class SphereGeometry:
    """Every number needed to draw the sphere for one frame."""

    center: tuple[float, float]
    sphere_radius: float
    pulse_factor: float
    glow_radius: float
    glow: RadialGradient
    core: RadialGradient
    highlights: tuple[Highlight, ...]


def _highlight(center, radius, params) -> Highlight:
    offset, gradient_scale, disk_scale, alpha = params
    focus = (center[0] + radius * offset, center[1] + radius * offset)
    gradient = RadialGradient(
        start=focus,
        start_radius=0.0,
        end=focus,
        end_radius=radius * gradient_scale,
        stops=((0.0, WHITE.with_alpha(alpha)), (1.0, TRANSPARENT_WHITE)),
    )
    return Highlight(center=focus, radius=radius * disk_scale, gradient=gradient)


class SphereRenderer:
    """Draws the audio-reactive sphere in its state palette."""

    def __init__(
        self,
        style: Optional[SphereStyle] = None,
        reactivity: Reactivity = DEFAULT_REACTIVITY,
    ):
        self.style = style or SphereStyle()
        self.reactivity = reactivity

    def compute_geometry(
        self,
        center: tuple[float, float],
        base_radius: float,
        level: float,
        state: AgentState,
        pulse_phase: float,
    ) -> SphereGeometry:
        """
        Lay out glow, core and highlights.

        Args:
            center: Sphere center in surface pixels.
            base_radius: Radius at zero audio level.
            level: Normalized audio level in [0, 1].
            state: Agent state selecting the palette.
            pulse_phase: Breathing phase in radians.

        Returns:
            Frame geometry with all gradient stops resolved.
        """
        style = self.style
        colors = lookup(state)
        cx, cy = center

        radius = max(0.0, self.reactivity.sphere_radius(base_radius, level))
        pulse = 1.0 + math.sin(pulse_phase) * style.pulse_amplitude
        glow_radius = radius * style.glow_scale * pulse

        glow = RadialGradient(
            start=center,
            start_radius=0.0,
            end=center,
            end_radius=glow_radius,
            stops=((0.0, colors.glow), (1.0, TRANSPARENT_WHITE)),
        )

        o = style.core_offsets
        core = RadialGradient(
            start=(cx - radius * style.light_offset, cy - radius * style.light_offset),
            start_radius=0.0,
            end=center,
            end_radius=radius,
            stops=(
                (o[0], style.core_white),
                (o[1], colors.primary),
                (o[2], colors.secondary),
                (o[3], colors.tertiary),
            ),
        )

        highlights = (
            _highlight(center, radius, style.primary_highlight),
            _highlight(center, radius, style.secondary_highlight),
        )

        return SphereGeometry(
            center=center,
            sphere_radius=radius,
            pulse_factor=pulse,
            glow_radius=glow_radius,
            glow=glow,
            core=core,
            highlights=highlights,
        )

    def render_body(self, surface, geometry: SphereGeometry):
        """Draw the glow halo, then the core on top of it."""
        if geometry.glow_radius > 0:
            surface.fill_circle(geometry.center, geometry.glow_radius, geometry.glow)
        if geometry.sphere_radius > 0:
            surface.fill_circle(geometry.center, geometry.sphere_radius, geometry.core)

    def render_highlights(self, surface, geometry: SphereGeometry):
        for h in geometry.highlights:
            if h.radius > 0:
                surface.fill_circle(h.center, h.radius, h.gradient)

    def render(
        self,
        surface,
        center: tuple[float, float],
        base_radius: float,
        level: float,
        state: AgentState,
        pulse_phase: float,
    ) -> SphereGeometry:
        """Draw glow, core and highlights in that order."""
        geometry = self.compute_geometry(center, base_radius, level, state, pulse_phase)
        self.render_body(surface, geometry)
        self.render_highlights(surface, geometry)
        return geometry
