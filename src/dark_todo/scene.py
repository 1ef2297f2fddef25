"""Decorative background: a field of slowly bobbing spheres.

Nothing here reads or writes task state.
"""
from __future__ import annotations

import math
import random
from dataclasses import dataclass, field
from typing import List, Optional, Tuple

SPHERE_COUNT = 20
MIN_SIZE = 0.5
SIZE_SPREAD = 2.0
DEPTH = 10.0
DRIFT = 0.001
COLOR = "#444444"
HOVER_COLOR = "#666666"
OPACITY = 0.7


@dataclass
class Sphere:
    x: float
    y: float
    z: float
    size: float
    hovered: bool = False

    def offset_at(self, elapsed: float) -> float:
        """Vertical drift for one frame; phase is seeded by x so spheres desynchronize."""
        return math.sin(elapsed + self.x * 1000) * DRIFT

    def step(self, elapsed: float) -> None:
        self.y += self.offset_at(elapsed)

    @property
    def color(self) -> str:
        return HOVER_COLOR if self.hovered else COLOR

    @property
    def position(self) -> Tuple[float, float, float]:
        return (self.x, self.y, self.z)


def generate_spheres(
    width: float,
    height: float,
    count: int = SPHERE_COUNT,
    rng: Optional[random.Random] = None,
) -> List[Sphere]:
    """Scatter `count` spheres over a volume twice the viewport in x and y, up to DEPTH deep."""
    rng = rng or random.Random()
    return [
        Sphere(
            x=(rng.random() - 0.5) * width * 2,
            y=(rng.random() - 0.5) * height * 2,
            z=rng.random() * -DEPTH,
            size=rng.random() * SIZE_SPREAD + MIN_SIZE,
        )
        for _ in range(count)
    ]


@dataclass
class Scene:
    """Spheres for the current viewport, regenerated when the viewport changes."""

    count: int = SPHERE_COUNT
    rng: random.Random = field(default_factory=random.Random)
    viewport: Optional[Tuple[float, float]] = None
    spheres: List[Sphere] = field(default_factory=list)
    elapsed: float = 0.0

    def resize(self, width: float, height: float) -> List[Sphere]:
        if self.viewport != (width, height):
            self.viewport = (width, height)
            self.spheres = generate_spheres(width, height, self.count, self.rng)
        return self.spheres

    def advance(self, elapsed: float) -> List[Sphere]:
        self.elapsed = elapsed
        for sphere in self.spheres:
            sphere.step(elapsed)
        return self.spheres

    def hover(self, index: int, hovered: bool) -> Optional[Sphere]:
        """Set the pointer-over flag of one sphere; None when `index` is out of range."""
        if not 0 <= index < len(self.spheres):
            return None
        sphere = self.spheres[index]
        sphere.hovered = hovered
        return sphere
