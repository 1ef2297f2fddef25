from __future__ import annotations

import math
import random

from dark_todo.scene import COLOR, HOVER_COLOR, SPHERE_COUNT, Scene, Sphere, generate_spheres


def test_generates_twenty_spheres_inside_bounds():
    spheres = generate_spheres(8.0, 4.0, rng=random.Random(1))
    assert len(spheres) == SPHERE_COUNT
    for s in spheres:
        assert -8.0 <= s.x < 8.0
        assert -4.0 <= s.y < 4.0
        assert -10.0 < s.z <= 0.0
        assert 0.5 <= s.size < 2.5


def test_resize_regenerates_only_on_change():
    scene = Scene(rng=random.Random(3))
    first = scene.resize(10, 5)
    assert scene.resize(10, 5) is first
    assert scene.resize(12, 5) is not first


def test_drift_is_phase_shifted_by_x():
    a = Sphere(x=0.0, y=0.0, z=0.0, size=1.0)
    b = Sphere(x=0.5, y=0.0, z=0.0, size=1.0)
    assert a.offset_at(1.0) == math.sin(1.0) * 0.001
    assert a.offset_at(1.0) != b.offset_at(1.0)


def test_advance_moves_only_vertically():
    scene = Scene(count=3, rng=random.Random(5))
    scene.resize(4, 4)
    before = [(s.x, s.z, s.size) for s in scene.spheres]
    scene.advance(2.0)
    assert [(s.x, s.z, s.size) for s in scene.spheres] == before


def test_hover_colour():
    s = Sphere(x=0, y=0, z=0, size=1, hovered=True)
    assert s.color == HOVER_COLOR


def test_hover_toggles_one_sphere():
    scene = Scene(count=3, rng=random.Random(7))
    scene.resize(4, 4)
    assert scene.hover(1, True) is scene.spheres[1]
    assert [s.color for s in scene.spheres] == [COLOR, HOVER_COLOR, COLOR]
    scene.hover(1, False)
    assert all(s.color == COLOR for s in scene.spheres)


def test_hover_out_of_range():
    scene = Scene(count=2, rng=random.Random(7))
    scene.resize(4, 4)
    assert scene.hover(2, True) is None
    assert not any(s.hovered for s in scene.spheres)
