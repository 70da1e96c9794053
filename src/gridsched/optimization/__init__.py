"""
Battery dispatch optimization.

This package provides:
- A remote optimizer client that delegates to an external solver service
- A local rule-based fallback that is always available
- ``solve_with_fallback`` tying the two together under a timeout
"""

import asyncio
import logging
from typing import Optional, Tuple

from .base import (
    OptimizerBackend,
    RuleBasedOptimizer
)

from .remote import RemoteOptimizerClient

from .fallback import (
    FallbackOptimizer,
    RECOMMENDATION_WINDOW
)

from ..exceptions import BackendUnavailableError
from ..models import EnergyProfile, OptimizationResult

__all__ = [
    # Base framework
    "OptimizerBackend",
    "RuleBasedOptimizer",

    # Implementations
    "RemoteOptimizerClient",
    "FallbackOptimizer",
    "RECOMMENDATION_WINDOW",

    # Utilities
    "solve_with_fallback",
]

logger = logging.getLogger(__name__)


async def solve_with_fallback(
    profile: EnergyProfile,
    fallback: RuleBasedOptimizer,
    backend: Optional[OptimizerBackend] = None,
    timeout: float = 5.0
) -> Tuple[OptimizationResult, bool]:
    """
    Solve with the remote backend, falling back to local rules on any failure.

    Args:
        profile: Energy profile to schedule
        fallback: Local optimizer used when the backend fails
        backend: Remote backend to try first (optional)
        timeout: Maximum seconds to wait for the backend

    Returns:
        Tuple of (result, backend_succeeded)

    Example:
        >>> result, connected = await solve_with_fallback(
        ...     profile, FallbackOptimizer(seed=7), RemoteOptimizerClient())
    """
    if backend is not None:
        try:
            result = await asyncio.wait_for(backend.optimize(profile), timeout=timeout)
            return result, True
        except asyncio.TimeoutError:
            logger.warning(f"Backend {backend.name} timed out after {timeout}s, using fallback")
        except BackendUnavailableError as e:
            logger.warning(f"Backend {backend.name} unavailable, using fallback: {e}")
        except Exception as e:
            logger.error(f"Backend {backend.name} failed unexpectedly, using fallback: {e!r}")
    else:
        logger.info("No remote backend configured, using fallback")

    return fallback.solve(profile), False
