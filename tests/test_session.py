"""
Tests for session orchestration and the backend availability state machine.

Collaborators are deterministic stand-ins; no network access is needed.
"""

import sys
from pathlib import Path
import asyncio
import unittest
from datetime import datetime

# Add the src directory to the path
sys.path.insert(0, str(Path(__file__).parent.parent / "src"))

from gridsched.config import (
    IrradianceConfig, OptimizerBackendConfig, SchedulerConfig, ValidationLevel
)
from gridsched.events import EventType
from gridsched.exceptions import BackendUnavailableError, ConfigurationError, RegionNotFoundError
from gridsched.irradiance import IrradianceLookup, IrradianceReading
from gridsched.optimization import FallbackOptimizer, OptimizerBackend
from gridsched.session import BackendStatus, SessionController
from gridsched.simulation import GenerationProfileBuilder


class StubBackend(OptimizerBackend):
    """Returns a fixed-seed plan flagged as coming from the real backend."""

    def __init__(self):
        super().__init__("stub")
        self.calls = []

    async def optimize(self, profile):
        self.calls.append(profile.region.id)
        result = FallbackOptimizer(seed=0).solve(profile)
        result.using_real_backend = True
        return result


class DownBackend(OptimizerBackend):
    def __init__(self):
        super().__init__("down")

    async def optimize(self, profile):
        raise BackendUnavailableError("Backend returned 502: Bad Gateway", status_code=502)


class HangingBackend(OptimizerBackend):
    def __init__(self):
        super().__init__("hanging")

    async def optimize(self, profile):
        await asyncio.sleep(10)


class GatedBackend(StubBackend):
    """Holds a region's request until its gate is opened."""

    def __init__(self):
        super().__init__()
        self.gates = {}
        self.entered = {}

    async def optimize(self, profile):
        region_id = profile.region.id
        self.entered.setdefault(region_id, asyncio.Event()).set()
        gate = self.gates.get(region_id)
        if gate is not None:
            await gate.wait()
        return await super().optimize(profile)


class SunnyLookup(IrradianceLookup):
    async def lookup(self, latitude, longitude):
        return IrradianceReading(ghi=5.5)


def make_controller(remote=None, lookup=None, **kwargs):
    builder = GenerationProfileBuilder(lookup, clock=lambda: datetime(2024, 6, 1, 10, 0))
    return SessionController(builder, FallbackOptimizer(seed=4), remote=remote, **kwargs)


class TestBackendStateMachine(unittest.IsolatedAsyncioTestCase):

    async def test_initial_state(self):
        controller = make_controller()

        self.assertEqual(controller.backend_status, BackendStatus.CHECKING)
        self.assertEqual(controller.state.region_id, "california")
        self.assertIsNone(controller.state.result)

    async def test_connected(self):
        remote = StubBackend()
        controller = make_controller(remote)

        outcome = await controller.start()

        self.assertTrue(outcome.applied)
        self.assertEqual(outcome.backend_status, BackendStatus.CONNECTED)
        self.assertEqual(controller.backend_status, BackendStatus.CONNECTED)
        self.assertTrue(controller.state.result.using_real_backend)
        self.assertIs(controller.state.profile, outcome.profile)
        self.assertFalse(controller.state.is_processing)
        self.assertEqual(remote.calls, ["california"])

    async def test_backend_down_uses_fallback(self):
        controller = make_controller(DownBackend())

        outcome = await controller.select_region("texas")

        self.assertEqual(controller.backend_status, BackendStatus.FALLBACK)
        self.assertFalse(outcome.result.using_real_backend)
        self.assertEqual(controller.state.result.metrics.algorithm, "QAOA (Fallback Mode)")
        self.assertEqual(controller.state.profile.capacity.battery, 4500)

    async def test_timeout_transitions_checking_to_fallback(self):
        """A hung optimizer call times out and the session falls back."""
        controller = make_controller(HangingBackend(), optimizer_timeout=0.05)
        seen = []
        controller.add_listener(lambda event: seen.append((event.type, controller.backend_status)))

        outcome = await controller.select_region("texas")

        self.assertEqual(seen[0], (EventType.CYCLE_STARTED, BackendStatus.CHECKING))
        self.assertEqual(seen[-1], (EventType.CYCLE_COMPLETED, BackendStatus.FALLBACK))
        self.assertIn((EventType.FALLBACK_ENGAGED, BackendStatus.FALLBACK), seen)
        self.assertFalse(outcome.result.using_real_backend)

    async def test_no_remote_is_fallback(self):
        controller = make_controller()
        await controller.start()
        self.assertEqual(controller.backend_status, BackendStatus.FALLBACK)

    async def test_every_cycle_restarts_at_checking(self):
        remote = StubBackend()
        controller = make_controller(remote)
        statuses = []
        controller.add_listener(
            lambda event: statuses.append(controller.backend_status)
            if event.type == EventType.CYCLE_STARTED else None
        )

        await controller.start()
        controller.remote = DownBackend()
        await controller.retry()
        controller.remote = remote
        await controller.select_region("pjm")

        self.assertEqual(statuses, [BackendStatus.CHECKING] * 3)
        self.assertEqual(controller.backend_status, BackendStatus.CONNECTED)
        self.assertEqual(controller.state.sequence, 3)

    async def test_real_irradiance_flag(self):
        controller = make_controller(StubBackend(), lookup=SunnyLookup())
        await controller.start()

        self.assertTrue(controller.state.using_real_data)

    async def test_unknown_region_rejected_before_cycle(self):
        controller = make_controller(StubBackend())
        await controller.start()

        with self.assertRaises(RegionNotFoundError):
            await controller.select_region("atlantis")

        self.assertEqual(controller.state.region_id, "california")
        self.assertEqual(controller.backend_status, BackendStatus.CONNECTED)
        self.assertEqual(controller.get_backend_stats()["cycles_started"], 1)

    async def test_failing_listener_does_not_break_cycle(self):
        controller = make_controller(StubBackend())

        def bad_listener(event):
            raise RuntimeError("render failed")

        controller.add_listener(bad_listener)
        outcome = await controller.start()

        self.assertTrue(outcome.applied)
        controller.remove_listener(bad_listener)


class TestStaleCycles(unittest.IsolatedAsyncioTestCase):

    async def test_late_result_is_discarded(self):
        """A slow cycle finishing after a newer one must not overwrite it."""
        remote = GatedBackend()
        remote.gates["texas"] = asyncio.Event()
        remote.entered["texas"] = asyncio.Event()
        controller = make_controller(remote)

        slow = asyncio.ensure_future(controller.select_region("texas"))
        await remote.entered["texas"].wait()

        fast = await controller.select_region("midwest")
        self.assertTrue(fast.applied)
        self.assertEqual(controller.state.region_id, "midwest")

        remote.gates["texas"].set()
        late = await slow

        self.assertFalse(late.applied)
        self.assertEqual(late.region_id, "texas")
        self.assertEqual(controller.state.region_id, "midwest")
        self.assertIs(controller.state.result, fast.result)
        self.assertIs(controller.state.profile, fast.profile)
        self.assertEqual(controller.state.sequence, fast.sequence)

        stats = controller.get_backend_stats()
        self.assertEqual(stats["stale_results_discarded"], 1)
        self.assertEqual(stats["cycles_completed"], 2)
        self.assertEqual(len(controller.get_history(EventType.STALE_RESULT_DISCARDED)), 1)

    async def test_pending_cycle_keeps_checking_status(self):
        remote = GatedBackend()
        remote.gates["northwest"] = asyncio.Event()
        remote.entered["northwest"] = asyncio.Event()
        controller = make_controller(remote)

        await controller.start()
        pending = asyncio.ensure_future(controller.select_region("northwest"))
        await remote.entered["northwest"].wait()

        self.assertEqual(controller.backend_status, BackendStatus.CHECKING)
        self.assertTrue(controller.state.is_processing)
        self.assertEqual(controller.state.result.schedule[0].hour, "10:00")

        remote.gates["northwest"].set()
        outcome = await pending
        self.assertTrue(outcome.applied)
        self.assertEqual(controller.backend_status, BackendStatus.CONNECTED)


class TestFromConfig(unittest.IsolatedAsyncioTestCase):

    async def test_offline_configuration(self):
        config = SchedulerConfig.from_dict({
            "default_region": "southwest",
            "irradiance": {"enabled": False},
            "optimizer": {"enabled": False},
            "fallback": {"random_seed": 123},
            "monitoring": {"log_level": "WARNING", "max_event_history": 5},
        })
        controller = SessionController.from_config(config)

        self.assertIsNone(controller.remote)
        self.assertIsNone(controller.builder.irradiance_lookup)

        for _ in range(3):
            await controller.retry()

        self.assertEqual(controller.state.region_id, "southwest")
        self.assertEqual(controller.backend_status, BackendStatus.FALLBACK)
        self.assertEqual(len(controller.get_history()), 5)
        self.assertEqual(controller.get_backend_stats()["fallback_rate"], 1.0)
        self.assertEqual(controller.get_backend_stats()["fallback"]["name"], "fallback_dispatch")

    async def test_invalid_configuration_rejected(self):
        config = SchedulerConfig(optimizer=OptimizerBackendConfig(timeout=-1))

        with self.assertRaises(ConfigurationError) as ctx:
            SessionController.from_config(config)
        self.assertIn("optimizer: ", str(ctx.exception))

    async def test_warn_level_accepts_invalid_configuration(self):
        config = SchedulerConfig(
            optimizer=OptimizerBackendConfig(enabled=False, timeout=-1),
            irradiance=IrradianceConfig(enabled=False),
            validation_level=ValidationLevel.WARN,
        )

        controller = SessionController.from_config(config)

        self.assertIsNone(controller.remote)
        self.assertEqual(controller.optimizer_timeout, -1)


if __name__ == "__main__":
    unittest.main()
