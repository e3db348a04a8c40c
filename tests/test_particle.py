"""
Tests for the particle update step and worker lifecycle.
"""

import threading
import time
from types import SimpleNamespace

import numpy as np
import pytest

from psoswarm.core import Channel, InvalidArgument, Particle, ParticleState
from psoswarm.float64 import Float64Array, Float64Range, Float64TargetFunc, make_param


def square(values):
    return sum(x * x for x in values)


def wait_for(predicate, timeout=5.0):
    deadline = time.monotonic() + timeout
    while time.monotonic() < deadline:
        if predicate():
            return True
        time.sleep(0.005)
    return predicate()


class TestParticleConstruction:
    """Tests for Particle argument checks."""

    def test_missing_arguments(self):
        bounds = Float64Range.with_inf(1)
        with pytest.raises(InvalidArgument):
            Particle(None, Float64Array([0.0]), bounds)
        with pytest.raises(InvalidArgument):
            Particle(Float64Array([0.0]), None, bounds)
        with pytest.raises(InvalidArgument):
            Particle(Float64Array([0.0]), Float64Array([0.0]), None)

    def test_position_velocity_type_mismatch(self):
        class OtherVector(Float64Array):
            pass

        with pytest.raises(InvalidArgument):
            Particle(Float64Array([0.0]), OtherVector([0.0]), Float64Range.with_inf(1))

    def test_position_velocity_dimension_mismatch(self):
        with pytest.raises(InvalidArgument):
            Particle(Float64Array([0.0, 0.0]), Float64Array([0.0]), Float64Range.with_inf(2))

    def test_bounds_type_mismatch(self):
        bounds = SimpleNamespace(type=list)
        with pytest.raises(InvalidArgument):
            Particle(Float64Array([0.0]), Float64Array([0.0]), bounds)

    def test_initial_state(self):
        position = Float64Array([1.0, 2.0])
        particle = Particle(position, Float64Array([0.0, 0.0]), Float64Range.with_inf(2), name="p")

        assert particle.state is ParticleState.IDLE
        assert particle.position is position
        assert particle.best.tolist() == [1.0, 2.0]
        assert particle.best is not position
        assert particle.eval_value is None
        assert particle.global_best is None
        assert particle.iterations == 0


class TestParticleStep:
    """Tests for one velocity/position update."""

    @pytest.fixture
    def target(self):
        return Float64TargetFunc(square)

    @pytest.fixture
    def param(self):
        return make_param(0.5, 0.5, 0.5, dimension=1)

    def test_out_of_bounds_candidate_keeps_position(self, target, param):
        bounds = Float64Range(Float64Array([0.0]), Float64Array([1.0]))
        particle = Particle(Float64Array([0.9]), Float64Array([0.5]), bounds, rng=np.random.default_rng(0))

        improved = particle.step(target, param, global_best=Float64Array([0.9]))

        assert particle.position.tolist() == [0.9]
        # Personal and global best equal the position, so only inertia remains
        assert particle.velocity.tolist() == pytest.approx([0.25])
        assert improved is False

    def test_velocity_keeps_evolving_at_boundary(self, target, param):
        bounds = Float64Range(Float64Array([0.0]), Float64Array([1.0]))
        particle = Particle(Float64Array([0.9]), Float64Array([0.5]), bounds, rng=np.random.default_rng(0))

        particle.step(target, param, global_best=Float64Array([0.9]))
        particle.step(target, param, global_best=Float64Array([0.9]))

        # Second candidate 0.9 + 0.25 is still outside
        assert particle.position.tolist() == [0.9]
        assert particle.velocity.tolist() == pytest.approx([0.125])

    def test_candidate_on_boundary_is_accepted(self, target, param):
        bounds = Float64Range(Float64Array([0.0]), Float64Array([1.0]))
        particle = Particle(Float64Array([0.5]), Float64Array([0.5]), bounds, rng=np.random.default_rng(0))

        particle.step(target, param, global_best=Float64Array([0.5]))

        assert particle.position.tolist() == [1.0]

    def test_improvement_updates_best_and_reports(self, target, param):
        reports = Channel()
        particle = Particle(
            Float64Array([2.0]), Float64Array([-1.0]), Float64Range.with_inf(1),
            rng=np.random.default_rng(0),
        )

        improved = particle.step(target, param, global_best=Float64Array([2.0]), reports=reports)

        assert improved is True
        assert particle.position.tolist() == [1.0]
        assert particle.best.tolist() == [1.0]
        assert particle.eval_value.value == 1.0
        report, ok = reports.receive(timeout=1)
        assert ok and report.tolist() == [1.0]
        assert report is not particle.position

    def test_no_report_without_improvement(self, target, param):
        reports = Channel()
        particle = Particle(
            Float64Array([1.0]), Float64Array([1.0]), Float64Range.with_inf(1),
            rng=np.random.default_rng(0),
        )

        improved = particle.step(target, param, global_best=Float64Array([1.0]), reports=reports)

        assert improved is False
        assert particle.best.tolist() == [1.0]
        assert len(reports) == 0

    def test_global_best_is_not_mutated(self, target, param):
        global_best = Float64Array([0.0])
        particle = Particle(Float64Array([3.0]), Float64Array([-1.0]), Float64Range.with_inf(1))

        for _ in range(10):
            particle.step(target, param, global_best=global_best)

        assert global_best.tolist() == [0.0]

    def test_seeded_particles_are_reproducible(self, target, param):
        def run(seed):
            particle = Particle(
                Float64Array([5.0]), Float64Array([-0.5]), Float64Range.with_inf(1),
                rng=np.random.default_rng(seed),
            )
            for _ in range(20):
                particle.step(target, param, global_best=Float64Array([0.5]))
            return particle.position.tolist(), particle.velocity.tolist()

        assert run(3) == run(3)


class TestParticleWorker:
    """Tests for the particle's threaded lifecycle."""

    def test_start_reports_waits_runs_and_stops(self):
        target = Float64TargetFunc(square)
        param = make_param(0.5, 0.5, 0.5, dimension=2)
        particle = Particle(
            Float64Array([4.0, -4.0]), Float64Array([-1.0, 1.0]), Float64Range.with_inf(2),
            rng=np.random.default_rng(1), name="worker",
        )
        reports = Channel(maxsize=1)

        worker = threading.Thread(target=particle.start, args=(target, param, reports))
        worker.start()

        initial, ok = reports.receive(timeout=2)
        assert ok and initial.tolist() == [4.0, -4.0]
        assert wait_for(lambda: particle.state is ParticleState.AWAITING_INITIAL_BEST)
        assert particle.iterations == 0

        particle.inbox.send(initial)
        assert wait_for(lambda: particle.iterations > 0)
        assert particle.global_best is initial

        particle.inbox.close()
        reports.close()
        worker.join(timeout=5)

        assert not worker.is_alive()
        assert particle.state is ParticleState.STOPPED

    def test_receiver_picks_up_later_broadcasts(self):
        target = Float64TargetFunc(square)
        param = make_param(0.5, 0.5, 0.5, dimension=1)
        particle = Particle(Float64Array([1.0]), Float64Array([0.0]), Float64Range.with_inf(1))
        reports = Channel()

        worker = threading.Thread(target=particle.start, args=(target, param, reports))
        worker.start()
        reports.receive(timeout=2)

        particle.inbox.send(Float64Array([1.0]))
        newer = Float64Array([0.5])
        particle.inbox.send(newer)
        assert wait_for(lambda: particle.global_best is newer)

        particle.inbox.close()
        reports.close()
        worker.join(timeout=5)
        assert not worker.is_alive()

    def test_closed_inbox_before_first_broadcast(self):
        target = Float64TargetFunc(square)
        param = make_param(0.5, 0.5, 0.5, dimension=1)
        particle = Particle(Float64Array([1.0]), Float64Array([0.0]), Float64Range.with_inf(1))
        reports = Channel()
        particle.inbox.close()

        particle.start(target, param, reports)

        assert particle.state is ParticleState.STOPPED
        assert particle.iterations == 0

    def test_cannot_start_twice(self):
        target = Float64TargetFunc(square)
        param = make_param(0.5, 0.5, 0.5, dimension=1)
        particle = Particle(Float64Array([1.0]), Float64Array([0.0]), Float64Range.with_inf(1))
        particle.inbox.close()
        particle.start(target, param, Channel())

        with pytest.raises(RuntimeError):
            particle.start(target, param, Channel())
