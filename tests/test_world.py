import re
import numpy as np
import pytest
import constants
from color import Color
from image import Image
from params import Seed, SimParams, DisplayParams, ValidationError
from world import World, render_palette, format_coords, path_data


def make_world(count=30, seed="world", acc_limit=-1, display=None):
    params = SimParams(seed=Seed.from_str(seed), particle_count=count, acc_limit=acc_limit)
    return World(params, display or DisplayParams())


def path_commands(svg):
    return re.findall(r' d="([^"]*)"', svg)


@pytest.mark.parametrize("count", [0, 1, 2])
def test_world_rejects_fewer_than_three_particles(count):
    with pytest.raises(ValidationError):
        make_world(count=count)


def test_world_arrays_have_expected_shapes():
    world = make_world(count=25)
    assert world.positions.shape == (25, 2) and world.positions.dtype == np.float32
    assert world.velocities.shape == (25, 2) and world.velocities.dtype == np.float32
    assert world.partners.shape == (25, 2)
    assert world.colors.shape == (25, 4) and world.colors.dtype == np.uint8
    assert world.frame_idx == 0
    assert len(world.history) == 1


def test_partners_are_distinct_from_each_other_and_self():
    world = make_world(count=200)
    idx = np.arange(200)
    j, k = world.partners[:, 0], world.partners[:, 1]
    assert np.all(j != idx) and np.all(k != idx) and np.all(j != k)
    assert np.all((world.partners >= 0) & (world.partners < 200))


def test_initial_ring_layout():
    world = make_world(count=64)
    radii = np.linalg.norm(world.positions.astype(np.float64), axis=1)
    assert np.all(radii >= constants.SPAWN_RADIUS_MIN - 1e-4)
    assert np.all(radii <= constants.SPAWN_RADIUS_MAX + 1e-4)
    angles = np.arctan2(world.positions[:, 1], world.positions[:, 0]).astype(np.float64)
    expected = np.arange(64) * 2.0 * np.pi / 64
    diff = np.angle(np.exp(1j * (angles - expected)))
    assert np.all(np.abs(diff) < 1e-4)
    assert not np.any(world.velocities)


def test_same_params_give_identical_worlds():
    a, b = make_world(), make_world()
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.partners, b.partners)
    assert np.array_equal(a.colors, b.colors)
    for _ in range(20):
        a.update()
        b.update()
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.velocities, b.velocities)


def test_different_seeds_give_different_worlds():
    a, b = make_world(seed="one"), make_world(seed="two")
    assert not np.array_equal(a.positions, b.positions)


def test_zero_spread_gives_uniform_colors():
    display = DisplayParams(particle_color_hue_spread=0.0, particle_color_saturation_spread=0.0)
    world = make_world(display=display)
    assert np.all(world.colors == world.colors[0])
    expected = Color.hsva(
        display.particle_color_hue_mid, display.particle_color_saturation_mid,
        display.particle_color_value, display.particle_color_alpha,
    )
    assert tuple(int(c) for c in world.colors[0]) == tuple(expected)


def test_update_moves_by_new_velocity_and_records_history():
    world = make_world()
    before = world.positions.copy()
    world.update()
    assert world.frame_idx == 1
    assert len(world.history) == 2
    assert np.array_equal(world.positions, before + world.velocities)
    assert np.array_equal(world.history[0], before)
    assert np.array_equal(world.history[-1], world.positions)


def test_history_is_capped(monkeypatch):
    monkeypatch.setattr(constants, "HISTORY_MEMORY_CAP", 3 * 5 * 2 * 4)
    world = make_world(count=5)
    for _ in range(10):
        world.update()
    assert world.history.capacity == 3
    assert len(world.history) == 3
    assert np.array_equal(world.history[-1], world.positions)


def test_render_does_not_change_world_and_is_repeatable():
    world = make_world()
    for _ in range(3):
        world.update()
    positions = world.positions.copy()
    velocities = world.velocities.copy()
    first = Image(64, 48, Color.hex(0x242424ff))
    second = Image(64, 48, Color.hex(0x242424ff))
    world.render(first)
    world.render(second)
    assert np.array_equal(first.pixels, second.pixels)
    assert np.array_equal(world.positions, positions)
    assert np.array_equal(world.velocities, velocities)
    assert world.frame_idx == 3
    background = Image(64, 48, Color.hex(0x242424ff))
    assert not np.array_equal(first.pixels, background.pixels)


def test_svg_before_any_update_has_move_only_paths():
    world = make_world(count=3)
    svg = world.generate_svg(Color.hex(0x000000ff))
    assert svg.startswith('<?xml version="1.0" encoding="UTF-8"?>\n')
    assert svg.endswith("</svg>\n")
    assert "background: #000000ff;" in svg
    assert svg.count("<path") == 3
    for idx, d in enumerate(path_commands(svg)):
        x, y = world.positions[idx]
        assert d == f"M {format_coords([x, y])}"


def test_svg_after_one_update_adds_one_line_per_path():
    world = make_world(count=3)
    world.update()
    svg = world.generate_svg(Color.hex(0x000000ff))
    commands = path_commands(svg)
    assert len(commands) == 3
    for d in commands:
        assert d.count("M ") == 1
        assert d.count("L ") == 1


def test_svg_view_box_covers_all_recorded_positions():
    world = make_world(count=10)
    for _ in range(5):
        world.update()
    svg = world.generate_svg(Color.hex(0x000000ff))
    view_box = re.search(r'viewBox="([^"]*)"', svg).group(1)
    x, y, w, h = (float(v) for v in view_box.split())
    trajectories = world.history.as_array()
    assert x == pytest.approx(float(trajectories[:, :, 0].min()))
    assert y == pytest.approx(float(trajectories[:, :, 1].min()))
    assert x + w == pytest.approx(float(trajectories[:, :, 0].max()), abs=1e-4)
    assert y + h == pytest.approx(float(trajectories[:, :, 1].max()), abs=1e-4)


def test_svg_strokes_use_particle_colors():
    world = make_world(count=4)
    svg = world.generate_svg(Color.hex(0x000000ff))
    strokes = re.findall(r'stroke="#([0-9a-f]{8})"', svg)
    assert strokes == [world.particles.color(i).to_hex() for i in range(4)]


def test_render_palette_shape_and_opacity():
    palette = render_palette(DisplayParams(), 20, 8)
    assert (palette.width, palette.height) == (20, 8)
    assert np.all(palette.pixels[:, :, 3] == 255)


def test_render_palette_without_spread_is_uniform():
    display = DisplayParams(particle_color_hue_spread=0.0, particle_color_saturation_spread=0.0)
    palette = render_palette(display, 10, 4)
    assert np.all(palette.pixels == palette.pixels[0, 0])


def test_render_palette_saturation_highest_at_top():
    display = DisplayParams(
        particle_color_hue_mid=0.0, particle_color_hue_spread=0.0,
        particle_color_saturation_mid=50.0, particle_color_saturation_spread=100.0,
        particle_color_value=100.0,
    )
    palette = render_palette(display, 3, 5)
    top = palette.pixel(0, 0)
    bottom = palette.pixel(0, 4)
    assert (top.r, top.g, top.b) == (255, 0, 0)
    assert (bottom.r, bottom.g, bottom.b) == (255, 255, 255)


REFERENCE_SEED = 0x27e3771584a46455


def reference_world():
    params = SimParams(seed=Seed.from_hash(REFERENCE_SEED), particle_count=3, acc_limit=-1)
    return World(params, DisplayParams())


def test_reference_run_initial_state():
    world = reference_world()
    expected_positions = np.array(
        [[9.838469, 0.0], [-4.624357, 8.009622], [-4.662281, -8.075308]], dtype=np.float32
    )
    assert np.array_equal(world.positions, expected_positions)
    assert world.partners.tolist() == [[1, 2], [0, 2], [1, 0]]
    assert world.colors.tolist() == [
        [0xe3, 0xff, 0x98, 0x0f],
        [0x83, 0xff, 0xe2, 0x0f],
        [0x8c, 0xa6, 0xff, 0x0f],
    ]
    svg = world.generate_svg(Color.hex(0x000000ff))
    assert path_commands(svg) == [
        "M 9.838469 0", "M -4.624357 8.009622", "M -4.662281 -8.075308",
    ]
    assert re.findall(r'stroke="#([0-9a-f]{8})"', svg) == ["e3ff980f", "83ffe20f", "8ca6ff0f"]


def test_reference_run_first_update():
    world = reference_world()
    initial = world.positions.copy()
    world.update()
    expected_velocities = np.array(
        [[-0.43683112, -0.24326645], [-0.00117886, -0.4999986], [0.43683112, 0.24326645]],
        dtype=np.float64,
    )
    assert np.allclose(world.velocities, expected_velocities, rtol=0.0, atol=1e-8)
    assert np.array_equal(world.positions, initial + world.velocities)


def test_display_params_do_not_perturb_other_streams():
    sim = SimParams(seed=Seed.from_str("streams"), particle_count=50, acc_limit=-1)
    a = World(sim, DisplayParams())
    b = World(sim, DisplayParams(particle_color_hue_mid=10.0, particle_color_alpha=50.0))
    assert np.array_equal(a.positions, b.positions)
    assert np.array_equal(a.partners, b.partners)
    assert np.array_equal(a.velocities, b.velocities)
    assert not np.array_equal(a.colors, b.colors)
    for _ in range(5):
        a.update()
        b.update()
    assert np.array_equal(a.positions, b.positions)


def test_format_coords_drops_integral_suffix_and_keeps_sign():
    values = [0.0, -0.0, 3.0, 10.0, -0.5, 9.838469, -4.624357]
    assert format_coords(values) == "0 -0 3 10 -0.5 9.838469 -4.624357"


def test_path_data_moves_then_draws_lines():
    trajectory = np.array([[1.5, -2.0], [0.25, 100.0], [-7.0, 0.1]], dtype=np.float32)
    assert path_data(trajectory) == "M 1.5 -2 L 0.25 100 L -7 0.1"


def test_svg_coordinates_round_trip_to_recorded_float32():
    world = make_world(count=40)
    for _ in range(120):
        world.update()
    svg = world.generate_svg(Color.hex(0x000000ff))
    trajectories = world.history.as_array()
    for idx, d in enumerate(path_commands(svg)):
        tokens = d.split()
        assert tokens[0] == "M" and tokens.count("L") == 120
        numbers = [t for t in tokens if t not in ("M", "L")]
        parsed = np.array(numbers, dtype=np.float64).astype(np.float32).reshape(-1, 2)
        assert np.array_equal(parsed, trajectories[:, idx])
