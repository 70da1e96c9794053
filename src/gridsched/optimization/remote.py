"""HTTP client for the remote dispatch optimization service."""

import time
from typing import Optional

import httpx

from .base import OptimizerBackend
from ..config import OptimizerBackendConfig
from ..exceptions import BackendUnavailableError, ValidationError
from ..models import EnergyProfile, OptimizationResult


class RemoteOptimizerClient(OptimizerBackend):
    """Posts an energy profile to the optimizer service and parses its plan.

    Every failure (non-2xx status, transport error, timeout, malformed body)
    surfaces as BackendUnavailableError. There are no retries.
    """

    def __init__(self, config: Optional[OptimizerBackendConfig] = None,
                 transport: Optional[httpx.AsyncBaseTransport] = None):
        super().__init__("remote_optimizer")
        self.config = config or OptimizerBackendConfig()
        self._transport = transport

    @property
    def endpoint(self) -> str:
        return self.config.endpoint

    async def _post(self, profile: EnergyProfile) -> httpx.Response:
        try:
            async with httpx.AsyncClient(timeout=self.config.timeout,
                                         transport=self._transport) as client:
                response = await client.post(self.endpoint, json=profile.to_dict())
        except httpx.TimeoutException as e:
            raise BackendUnavailableError(
                f"Optimizer timed out after {self.config.timeout}s"
            ) from e
        except httpx.HTTPError as e:
            raise BackendUnavailableError(f"Optimizer request failed: {e}") from e

        if not response.is_success:
            raise BackendUnavailableError(
                f"Backend returned {response.status_code}: {response.reason_phrase}",
                status_code=response.status_code,
            )
        return response

    def _parse(self, response: httpx.Response, profile: EnergyProfile) -> OptimizationResult:
        try:
            data = response.json()
        except ValueError as e:
            raise BackendUnavailableError(f"Optimizer response is not JSON: {e}") from e

        try:
            result = OptimizationResult.from_dict(data, expected_hours=len(profile.hourly))
            result.validate_for_profile(profile)
        except ValidationError as e:
            raise BackendUnavailableError(f"Malformed optimizer response: {e}") from e

        result.using_real_backend = True
        result.metadata["endpoint"] = self.endpoint
        return result

    async def optimize(self, profile: EnergyProfile) -> OptimizationResult:
        start_time = time.time()
        self.logger.debug(f"Calling optimizer backend at {self.endpoint}")

        try:
            response = await self._post(profile)
            result = self._parse(response, profile)
        except BackendUnavailableError:
            self._record_solve_attempt(False, time.time() - start_time)
            raise

        solve_time = time.time() - start_time
        self._record_solve_attempt(True, solve_time)
        result.metadata["solve_time"] = solve_time
        self.logger.info(
            f"Received {len(result.schedule)}-hour plan from backend in {solve_time:.3f}s"
        )
        return result
