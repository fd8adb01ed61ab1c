import logging

import numpy as np
import pytest

from geometry import Edge, Point, Rect
from particle import EdgePolicy
from simulation import MotionState, ParticleEngine, ParticleField
from vector_math import Vector2

RECT = Rect(0.0, 0.0, 100.0, 100.0)


class FakeClock:
    def __init__(self, now=0.0):
        self.now = now

    def __call__(self):
        return self.now


def make_engine(policy=EdgePolicy.WRAP_AROUND, **kwargs):
    emitted, hits = [], []
    engine = ParticleEngine(
        Point(50.0, 50.0), RECT, Vector2(1.0, 0.0), 10.0,
        edge_policy=policy,
        on_position_changed=emitted.append,
        on_edge_hit=lambda point, edge: hits.append((point, edge)),
        **kwargs
    )
    return engine, emitted, hits


def assert_point(actual, expected):
    assert actual is not None
    assert actual.x == pytest.approx(expected[0])
    assert actual.y == pytest.approx(expected[1])


class TestWrapAround:
    def test_first_tick_starts_at_the_start_point(self):
        engine, emitted, hits = make_engine()
        assert engine.tick(0.0) == Point(50.0, 50.0)
        assert emitted == [Point(50.0, 50.0)]
        assert hits == []
        assert engine.motion_state is MotionState.END

    def test_moves_linearly_towards_the_edge(self):
        engine, _, _ = make_engine()
        engine.tick(0.0)
        assert_point(engine.tick(2.5), (75.0, 50.0))

    def test_wraps_to_the_opposite_edge(self):
        engine, _, hits = make_engine()
        engine.tick(0.0)
        assert_point(engine.tick(5.0), (0.0, 50.0))
        assert hits == [(Point(100.0, 50.0), Edge.TRAILING)]
        assert engine.motion_state is MotionState.START

        assert_point(engine.tick(7.5), (25.0, 50.0))
        assert_point(engine.tick(10.0), (50.0, 50.0))
        assert engine.motion_state is MotionState.END

    def test_long_gap_completes_every_leg_in_order(self):
        engine, _, hits = make_engine()
        engine.tick(0.0)
        # Three full cycles plus a quarter.
        assert_point(engine.tick(32.5), (75.0, 50.0))
        assert len(hits) == 3

    def test_leg_boundaries_fall_on_exact_times(self):
        engine, _, _ = make_engine()
        engine.tick(0.0)
        engine.tick(5.3)
        assert engine.state.leg_start_time == pytest.approx(5.0)

    def test_long_pause_skips_whole_cycles(self, caplog):
        engine, emitted, hits = make_engine()
        engine.tick(0.0)
        with caplog.at_level(logging.WARNING):
            assert_point(engine.tick(10_002.5), (75.0, 50.0))
        # One edge hit per skipped cycle, all at the same point.
        assert len(hits) == 1000
        assert set(hits) == {(Point(100.0, 50.0), Edge.TRAILING)}
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert len(emitted) == 2

    def test_polling_current_position_completes_finished_legs(self):
        engine, emitted, hits = make_engine()
        engine.tick(0.0)
        assert_point(engine.current_position(7.5), (25.0, 50.0))
        assert len(hits) == 1
        assert len(emitted) == 1
        assert engine.motion_state is MotionState.START


class TestBounceOff:
    def test_reverses_at_the_edge(self):
        engine, _, hits = make_engine(EdgePolicy.BOUNCE_OFF)
        engine.tick(0.0)
        assert_point(engine.tick(5.0), (100.0, 50.0))
        assert engine.vector == Vector2(-1.0, 0.0)
        assert hits == [(Point(100.0, 50.0), Edge.TRAILING)]

        assert_point(engine.tick(7.5), (75.0, 50.0))

    def test_bounces_back_from_the_far_edge(self):
        engine, _, hits = make_engine(EdgePolicy.BOUNCE_OFF)
        engine.tick(0.0)
        engine.tick(5.0)
        engine.tick(15.0)
        assert engine.vector == Vector2(1.0, 0.0)
        assert [edge for _, edge in hits] == [Edge.TRAILING, Edge.LEADING]
        assert_point(engine.tick(20.0), (50.0, 50.0))

    def test_diagonal_bounce_flips_only_the_hit_axis(self):
        engine = ParticleEngine(
            Point(50.0, 80.0), RECT, Vector2(1.0, 1.0), 10.0, edge_policy=EdgePolicy.BOUNCE_OFF
        )
        engine.tick(0.0)
        # Hits the bottom edge at (70, 100) after 2.83 seconds.
        engine.tick(3.0)
        assert engine.vector == Vector2(1.0, -1.0)

    def test_hit_near_a_corner_does_not_trap_the_particle(self, caplog):
        hits = []
        engine = ParticleEngine(
            Point(99.96, 0.01), RECT, Vector2(1.0, 1.0), 10.0,
            edge_policy=EdgePolicy.BOUNCE_OFF,
            on_edge_hit=lambda point, edge: hits.append(point),
        )
        engine.tick(0.0)
        engine.tick(1.0)
        # Only the trailing edge turns the particle; it keeps heading down.
        assert engine.vector == Vector2(-1.0, 1.0)
        assert engine.state.plan.end.y == pytest.approx(100.0)

        with caplog.at_level(logging.WARNING):
            for now in range(2, 60):
                position = engine.tick(float(now))
        # One crossing of the rect takes about 14 seconds.
        assert len(hits) <= 6
        assert not [r for r in caplog.records if r.levelno >= logging.WARNING]
        assert 0.0 <= position.x <= 100.0
        assert 0.0 <= position.y <= 100.0


class TestDisappear:
    def test_vanishes_at_the_edge_and_stays_silent(self):
        engine, emitted, hits = make_engine(EdgePolicy.DISAPPEAR)
        for now in (0.0, 1.0, 2.0, 3.0, 4.0):
            assert engine.tick(now) is not None
        assert len(emitted) == 5

        assert engine.tick(5.0) is None
        assert not engine.visible
        assert engine.motion_state is MotionState.VANISHED
        assert engine.tick(6.0) is None
        assert engine.tick(60.0) is None
        assert len(emitted) == 5
        assert len(hits) == 1
        assert engine.current_position() == Point(100.0, 50.0)

    def test_update_after_vanishing_does_not_revive(self):
        engine, _, _ = make_engine(EdgePolicy.DISAPPEAR)
        engine.tick(0.0)
        engine.tick(5.0)
        engine.update(vector=Vector2(-1.0, 0.0), now=6.0)
        assert engine.vector == Vector2(-1.0, 0.0)
        assert engine.tick(7.0) is None


class TestUpdateInterval:
    def test_emits_at_most_once_per_interval(self):
        engine, emitted, _ = make_engine(update_interval=1.0)
        for i in range(9):
            engine.tick(i * 0.25)
        # Emits at 0.0 and 1.0 and 2.0.
        assert len(emitted) == 3

    def test_zero_interval_emits_every_tick(self):
        engine, emitted, _ = make_engine(update_interval=0.0)
        for i in range(4):
            engine.tick(i * 0.1)
        assert len(emitted) == 4


class TestUpdate:
    def test_vector_change_replans_from_the_current_position(self):
        engine, _, _ = make_engine()
        engine.tick(0.0)
        engine.update(vector=Vector2(0.0, 1.0), now=2.5)
        assert_point(engine.legs[0].origin, (75.0, 50.0))
        assert_point(engine.tick(5.0), (75.0, 75.0))

    def test_late_update_first_catches_up_with_the_cycle(self):
        engine, _, hits = make_engine()
        engine.tick(0.0)
        engine.update(speed=10.0, now=7.5)
        assert len(hits) == 1
        assert_point(engine.state.plan.start, (25.0, 50.0))

    def test_shrinking_rect_clamps_the_particle_inside(self):
        engine, _, _ = make_engine()
        engine.tick(0.0)
        small = Rect(0.0, 0.0, 60.0, 60.0)
        engine.update(bounding_rect=small, now=2.5)
        assert engine.bounding_rect == small
        assert engine.state.plan.start == Point(60.0, 50.0)

    def test_combined_update_replans_once(self):
        engine, _, _ = make_engine()
        engine.tick(0.0)
        engine.update(vector=Vector2(-1.0, 0.0), speed=25.0, now=2.0)
        assert engine.state.plan.start == Point(70.0, 50.0)
        assert engine.legs[0].duration == pytest.approx(70.0 / 25.0)

    def test_setter_uses_the_engine_clock(self):
        clock = FakeClock()
        engine, _, _ = make_engine(clock=clock)
        engine.tick()
        clock.now = 2.5
        engine.speed = 20.0
        assert engine.speed == 20.0
        assert_point(engine.current_position(3.0), (85.0, 50.0))

    def test_update_before_start_uses_the_start_position(self):
        engine, _, _ = make_engine()
        engine.update(vector=Vector2(0.0, -1.0), now=100.0)
        assert engine.state.leg_start_time is None
        assert engine.tick(0.0) == Point(50.0, 50.0)
        assert_point(engine.tick(1.0), (50.0, 40.0))

    def test_invalid_rect_is_rejected(self):
        engine, _, _ = make_engine()
        with pytest.raises(ValueError):
            engine.update(bounding_rect=Rect(0.0, 0.0, 0.0, 10.0), now=0.0)


class TestStaticPlans:
    def test_zero_speed_never_advances(self):
        engine = ParticleEngine(Point(30.0, 40.0), RECT, Vector2(1.0, 0.0), 0.0)
        for now in (0.0, 10.0, 1e6):
            assert engine.tick(now) == Point(30.0, 40.0)

    def test_zero_vector_never_advances(self):
        engine = ParticleEngine(Point(30.0, 40.0), RECT, Vector2(0.0, 0.0), 10.0)
        assert engine.tick(0.0) == Point(30.0, 40.0)
        assert engine.tick(99.0) == Point(30.0, 40.0)

    def test_starting_from_rest(self):
        engine = ParticleEngine(Point(50.0, 50.0), RECT, Vector2(1.0, 0.0), 0.0)
        engine.tick(0.0)
        engine.update(speed=10.0, now=30.0)
        assert_point(engine.tick(31.0), (60.0, 50.0))


def test_stop_silences_the_engine():
    engine, emitted, _ = make_engine()
    engine.tick(0.0)
    engine.stop()
    assert engine.stopped
    assert engine.tick(1.0) is None
    assert len(emitted) == 1


def test_degenerate_rect_is_rejected():
    with pytest.raises(ValueError):
        ParticleEngine(Point(0.0, 0.0), Rect(0.0, 0.0, 10.0, 0.0), Vector2(1.0, 0.0), 1.0)


class TestParticleField:
    def test_positions_are_reproducible_from_the_seed(self):
        params = {'count': 12, 'seed': 5, 'speed': 10.0, 'random_direction': True}
        first = ParticleField(params, RECT).tick(0.0)
        second = ParticleField(params, RECT).tick(0.0)
        assert first.shape == (12, 2)
        assert first.dtype == np.float64
        np.testing.assert_array_equal(first, second)

    def test_different_seeds_scatter_differently(self):
        a = ParticleField({'count': 5, 'seed': 1}, RECT).tick(0.0)
        b = ParticleField({'count': 5, 'seed': 2}, RECT).tick(0.0)
        assert not np.array_equal(a, b)

    def test_all_particles_stay_inside_the_rect(self):
        field = ParticleField({'count': 30, 'seed': 9, 'random_direction': True}, RECT)
        for step in range(40):
            positions = field.tick(step * 0.5)
            assert np.all(positions >= -1e-9)
            assert np.all(positions <= 100.0 + 1e-9)

    def test_disappearing_field_empties(self):
        hits = []
        field = ParticleField(
            {'count': 8, 'seed': 3, 'speed': 50.0, 'edge_policy': 'disappear'},
            RECT,
            on_edge_hit=lambda point, edge: hits.append(edge),
        )
        field.tick(0.0)
        positions = field.tick(10.0)
        assert positions.shape == (0, 2)
        assert field.visible_count == 0
        assert len(hits) == 8

    def test_set_vector_fans_out(self):
        field = ParticleField({'count': 4, 'seed': 0}, RECT)
        field.tick(0.0)
        field.set_vector(Vector2(0.0, 1.0), now=0.0)
        assert all(engine.vector == Vector2(0.0, 1.0) for engine in field.engines)

    def test_set_edge_policy_fans_out(self):
        field = ParticleField({'count': 4, 'seed': 0}, RECT)
        field.set_edge_policy(EdgePolicy.BOUNCE_OFF)
        assert all(engine.edge_policy is EdgePolicy.BOUNCE_OFF for engine in field.engines)

    def test_unknown_edge_policy_is_a_config_error(self):
        with pytest.raises(ValueError):
            ParticleField({'edge_policy': 'teleport'}, RECT)

    def test_stop(self):
        field = ParticleField({'count': 3, 'seed': 0}, RECT)
        field.tick(0.0)
        field.stop()
        assert field.tick(1.0).shape == (0, 2)
