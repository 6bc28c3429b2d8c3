"""Unit tests for the particle field lifecycle and tick."""

import math

import pytest
from core.errors import FieldError
from simulation.field import FieldState
from simulation.inputs import POINTER_MOVE, RESIZE
from simulation.palette import DARK_PALETTE, LIGHT_PALETTE

FAR_AWAY = (10_000.0, 10_000.0)


def place(particle, x, y, vx, vy):
    particle.x, particle.y, particle.vx, particle.vy = x, y, vx, vy


class TestLifecycle:
    """Tests for activate / deactivate."""

    def test_starts_inactive(self, make_field, scheduler, inputs):
        field = make_field()
        assert field.state == FieldState.INACTIVE
        assert field.particles == []
        assert scheduler.pending == 0
        assert inputs.listener_count(POINTER_MOVE) == 0

    def test_activate_allocates_and_registers(self, make_field, scheduler, inputs):
        field = make_field(particle_count=20)
        field.activate()
        assert field.state == FieldState.ACTIVE
        assert len(field.particles) == 20
        assert [p.id for p in field.particles] == list(range(20))
        assert inputs.listener_count(POINTER_MOVE) == 1
        assert inputs.listener_count(RESIZE) == 1
        assert scheduler.pending == 1

    def test_activate_sizes_surface(self, make_field):
        field = make_field()
        field.activate()
        assert (field.surface.width, field.surface.height) == (100, pytest.approx(70))
        assert (field.world.width, field.world.height) == (100, pytest.approx(70))

    def test_activate_twice_is_noop(self, make_field, scheduler, inputs):
        field = make_field()
        field.activate()
        first = field.particles
        field.activate()
        assert field.particles is first
        assert scheduler.pending == 1
        assert inputs.listener_count(RESIZE) == 1

    def test_deactivate_unhooks_everything(self, make_field, scheduler, inputs):
        field = make_field()
        field.activate()
        field.deactivate()
        assert field.state == FieldState.INACTIVE
        assert field.particles == []
        assert scheduler.pending == 0
        assert inputs.listener_count(POINTER_MOVE) == 0
        assert inputs.listener_count(RESIZE) == 0

    def test_no_tick_after_deactivate(self, make_field, scheduler):
        field = make_field()
        field.activate()
        field.deactivate()
        assert scheduler.run_pending(0) == 0
        assert field.frame == 0

    def test_step_inactive_raises(self, make_field):
        with pytest.raises(FieldError) as excinfo:
            make_field().step()
        assert excinfo.value.context["state"] == "inactive"

    def test_pointer_defaults_to_origin(self, make_field):
        assert make_field().pointer == (0.0, 0.0)


class TestDisplayMode:
    """Tests for palette switching."""

    def test_light_palette_by_default(self, make_field):
        field = make_field(particle_count=30, seed=2)
        field.activate()
        assert {p.color for p in field.particles} <= set(LIGHT_PALETTE)

    def test_switch_resets_with_new_palette(self, make_field, scheduler, inputs):
        field = make_field(particle_count=30, seed=2)
        field.activate()
        old = field.particles
        assert field.set_display_mode(True) is True
        assert field.particles is not old
        assert len(field.particles) == 30
        assert {p.color for p in field.particles} <= set(DARK_PALETTE)
        assert scheduler.pending == 1
        assert inputs.listener_count(POINTER_MOVE) == 1

    def test_same_mode_is_noop(self, make_field):
        field = make_field()
        field.activate()
        old = field.particles
        assert field.set_display_mode(False) is False
        assert field.particles is old

    def test_inactive_switch_only_records(self, make_field):
        field = make_field()
        assert field.set_display_mode(True) is False
        assert field.dark_mode is True
        assert field.state == FieldState.INACTIVE

    def test_activate_with_mode(self, make_field):
        field = make_field(particle_count=30)
        field.activate(dark_mode=True)
        assert field.dark_mode is True
        assert {p.color for p in field.particles} <= set(DARK_PALETTE)


class TestDeterminism:
    """Seeded fields reproduce their population."""

    def test_reactivation_reproduces_population(self, make_field):
        field = make_field(particle_count=20, seed=42)
        field.activate()
        first = [p.to_state().to_dict() for p in field.particles]
        field.deactivate()
        field.activate()
        assert [p.to_state().to_dict() for p in field.particles] == first

    def test_unseeded_fields_differ(self, make_field):
        a, b = make_field(particle_count=20), make_field(particle_count=20)
        a.activate()
        b.activate()
        assert [p.x for p in a.particles] != [p.x for p in b.particles]


class TestTick:
    """Tests for the frame callback."""

    def test_single_particle_scenario(self, make_field, scheduler, inputs):
        """One particle at the origin moving (1, 1) ends at (1, 1) with velocity unchanged."""
        field = make_field(particle_count=1)
        field.activate()
        inputs.pointer_move(*FAR_AWAY)
        place(field.particles[0], 0, 0, 1, 1)
        scheduler.run_pending(0)
        p = field.particles[0]
        assert (p.x, p.y) == (1, 1)
        assert (p.vx, p.vy) == (1, 1)
        assert field.frame == 1

    def test_two_particle_connection_scenario(self, make_field, scheduler, inputs):
        scenes = []
        field = make_field(particle_count=2, sink=scenes.append)
        field.activate()
        inputs.pointer_move(*FAR_AWAY)
        place(field.particles[0], 0, 0, 0, 0)
        place(field.particles[1], 10, 0, 0, 0)
        scheduler.run_pending(0)
        (scene,) = scenes
        (line,) = scene.connections
        assert line.opacity == pytest.approx(0.2833, abs=1e-4)
        assert len(scene.shapes) == 2

    def test_tick_reschedules_itself(self, make_field, scheduler):
        field = make_field()
        field.activate()
        for timestamp in range(5):
            assert scheduler.run_pending(timestamp) == 1
        assert field.frame == 5
        assert scheduler.pending == 1

    def test_pointer_updates_from_events(self, make_field, inputs):
        field = make_field()
        field.activate()
        inputs.pointer_move(12.5, 7.0)
        assert field.pointer == (12.5, 7.0)

    def test_pointer_survives_mode_switch(self, make_field, inputs):
        field = make_field()
        field.activate()
        inputs.pointer_move(30, 40)
        field.set_display_mode(True)
        assert field.pointer == (30, 40)

    def test_resize_updates_region_and_surface(self, make_field, scheduler, inputs):
        field = make_field()
        field.activate()
        inputs.resize(400, 200)
        assert field.world.width == 400
        assert field.world.height == pytest.approx(140)
        assert (field.surface.width, field.surface.height) == (400, pytest.approx(140))

    def test_detached_surface_skips_paint(self, make_field, scheduler):
        scenes = []
        field = make_field(sink=scenes.append)
        field.activate()
        field.detach_surface()
        scheduler.run_pending(0)
        assert scenes == []
        assert field.last_scene is None
        assert field.frame == 1
        field.attach_surface()
        scheduler.run_pending(1)
        assert len(scenes) == 1
        assert (scenes[0].width, scenes[0].height) == (100, pytest.approx(70))

    def test_ensure_frame_after_failed_tick(self, make_field, scheduler):
        field = make_field()
        field.activate()

        def broken():
            raise RuntimeError("boom")

        field.step = broken
        with pytest.raises(RuntimeError):
            scheduler.run_pending(0)
        assert scheduler.pending == 0
        field.ensure_frame()
        assert scheduler.pending == 1


class TestInvariants:
    """Properties that hold over long runs."""

    def test_population_bounds_and_speed(self, make_field, scheduler, inputs):
        field = make_field(particle_count=20, seed=3)
        field.activate()
        inputs.pointer_move(*FAR_AWAY)
        for frame in range(2000):
            scheduler.run_pending(frame)
            assert len(field.particles) == 20
            for p in field.particles:
                assert -p.speed <= p.x <= field.world.width + p.speed
                assert -p.speed <= p.y <= field.world.height + p.speed
        assert field.out_of_bounds() == []

    def test_speed_ceiling_with_pointer_nearby(self, make_field, scheduler, inputs):
        field = make_field(particle_count=20, seed=8)
        field.activate()
        for frame in range(1500):
            inputs.pointer_move(50 + 40 * math.sin(frame / 30), 35 + 30 * math.cos(frame / 45))
            scheduler.run_pending(frame)
            assert field.max_speed() <= field.config.max_speed + 1e-9
        assert len(field.particles) == 20

    def test_stats(self, make_field, scheduler):
        field = make_field(particle_count=3)
        field.activate()
        scheduler.run_pending(0)
        stats = field.stats()
        assert stats["state"] == "active"
        assert stats["mode"] == "light"
        assert stats["frame"] == 1
        assert stats["particles"] == 3
        assert stats["pending_frame"] is True

    def test_snapshot(self, make_field):
        field = make_field(particle_count=3)
        field.activate()
        d = field.snapshot().to_dict()
        assert d["state"] == "active"
        assert d["region"]["width"] == 100
        assert d["pointer"] == {"x": 0.0, "y": 0.0}
        assert len(d["particles"]) == 3
