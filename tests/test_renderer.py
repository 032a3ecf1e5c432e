import numpy as np
from color import Color
from params import Seed, SimParams, DisplayParams
from renderer import WorldRenderer
from world import World

BACKGROUND = Color.hex(0x242424ff)


def make_world(seed="renderer"):
    return World(SimParams(seed=Seed.from_str(seed), particle_count=10, acc_limit=-1), DisplayParams())


def test_renderer_stops_at_frame_limit():
    renderer = WorldRenderer(make_world(), 40, 30, BACKGROUND, frame_limit=3)
    assert [renderer.frame() for _ in range(5)] == [True, True, True, False, False]
    assert renderer.finished
    assert renderer.frame_idx == 3


def test_paused_renderer_does_not_advance():
    renderer = WorldRenderer(make_world(), 40, 30, BACKGROUND, frame_limit=10)
    renderer.pause_resume()
    assert not renderer.frame()
    assert renderer.frame_idx == 0
    renderer.pause_resume()
    assert renderer.frame()
    assert renderer.frame_idx == 1


def test_set_frame_limit_resumes():
    renderer = WorldRenderer(make_world(), 40, 30, BACKGROUND, frame_limit=1)
    renderer.frame()
    renderer.pause_resume()
    renderer.set_frame_limit(0)
    assert renderer.frame_limit == 1
    assert not renderer.paused
    renderer.set_frame_limit(2)
    assert renderer.frame()


def test_set_world_clears_image_and_resumes():
    renderer = WorldRenderer(make_world(), 40, 30, BACKGROUND, frame_limit=10)
    renderer.frame()
    assert not np.all(renderer.image.pixels == BACKGROUND.as_array())
    renderer.pause_resume()
    fresh = make_world(seed="other")
    renderer.set_world(fresh)
    assert renderer.world is fresh
    assert not renderer.paused
    assert renderer.frame_idx == 0
    assert np.all(renderer.image.pixels == BACKGROUND.as_array())


def test_resize_changes_image_size():
    renderer = WorldRenderer(make_world(), 40, 30, BACKGROUND, frame_limit=10)
    renderer.resize(20, 50)
    assert (renderer.image.width, renderer.image.height) == (20, 50)
    assert renderer.image.pixels.shape == (50, 20, 4)
