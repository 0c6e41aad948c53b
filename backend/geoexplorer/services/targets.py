import asyncio
import logging
import random
from typing import List, Optional, Protocol, Sequence

from ..exceptions import DegradedSource
from ..models.domain import RoundTarget
from .locations import sample_locations

logger = logging.getLogger(__name__)


class TargetProvider(Protocol):
    """Anything that can hand out a random round target."""

    async def get_random_target(self) -> Optional[RoundTarget]:
        ...


async def _fetch_one(provider: TargetProvider, slot: int, timeout_sec: float) -> RoundTarget:
    try:
        target = await asyncio.wait_for(provider.get_random_target(), timeout=timeout_sec)
    except asyncio.TimeoutError as e:
        raise DegradedSource(f"slot {slot}: imagery lookup timed out after {timeout_sec:.1f}s") from e
    except DegradedSource:
        raise
    except Exception as e:
        raise DegradedSource(f"slot {slot}: {e!r}") from e
    if target is None:
        raise DegradedSource(f"slot {slot}: no imagery found")
    return target


async def gather_targets(
    provider: Optional[TargetProvider],
    count: int,
    timeout_sec: float = 8.0,
    fallback: Optional[Sequence[RoundTarget]] = None,
    rng: Optional[random.Random] = None,
) -> List[RoundTarget]:
    """
    Collect the targets for a whole session.

    Slots are fetched concurrently and returned in request order. Any slot
    the provider fails on (error, timeout or no result) gets the curated
    location at the same position instead.

    Args:
        provider: Imagery source, or None to use curated locations only
        count: Number of rounds
        timeout_sec: Per-slot time budget
        fallback: Replacement targets; sampled from the curated list if omitted
        rng: Random source for the curated sample

    Returns:
        Exactly ``count`` targets
    """
    if fallback is None:
        fallback = sample_locations(count, rng=rng)
    if len(fallback) < count:
        raise ValueError(f"need {count} fallback targets, got {len(fallback)}")

    if provider is None:
        return list(fallback[:count])

    outcomes = await asyncio.gather(
        *(_fetch_one(provider, slot, timeout_sec) for slot in range(count)),
        return_exceptions=True,
    )

    targets = []
    for slot, outcome in enumerate(outcomes):
        if isinstance(outcome, RoundTarget):
            targets.append(outcome)
            continue
        if isinstance(outcome, DegradedSource):
            logger.warning("Using curated location for round %d: %s", slot + 1, outcome)
        else:
            # Cancellation and other BaseExceptions should not be hidden
            raise outcome
        targets.append(fallback[slot])
    return targets
