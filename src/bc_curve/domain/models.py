"""Domain models for bc_curve: pure dataclasses, no I/O."""

from dataclasses import dataclass

from src.bc_common.errors import InvalidArgumentError
from src.bc_curve.domain.formula import MAX_WEIGHT


@dataclass(frozen=True)
class CurveParams:
    """Immutable per engine.

    slope: 18-decimal fixed point.
    reserve_ratio: parts of MAX_WEIGHT, weight 1/(n+1) for a degree-n price curve.
    """

    slope: int
    reserve_ratio: int

    def __post_init__(self) -> None:
        if self.slope <= 0:
            raise InvalidArgumentError(f"slope must be positive, got {self.slope}")
        if not 0 < self.reserve_ratio <= MAX_WEIGHT:
            raise InvalidArgumentError(
                f"reserve_ratio must be in (0, {MAX_WEIGHT}], got {self.reserve_ratio}"
            )
