"""
Score function for records on the demonlist.

A record's score depends on the position of its demon and on how far the
record got relative to the demon's requirement. The score of a completion
("beaten score") is a piecewise function of the position whose pieces join
continuously at every boundary; partial progress is worth a fraction of it
that grows exponentially from a tenth (at the requirement) towards half.
"""
import math
from typing import Callable, List, NamedTuple, Tuple

# Positions 1-3: linear
LINEAR_SLOPE = -18.2899079915
LINEAR_INTERCEPT = 368.2899079915

# Positions 4-20: exponential decay
TOP20_AMPLITUDE = 326.1
TOP20_RATE = -0.0871
TOP20_OFFSET = 51.09
TOP20_SCALE = 1.037117142

# Positions 21-35: geometric decay
TOP35_AMPLITUDE = 250 - 83.389
TOP35_BASE = 1.0099685
TOP35_OFFSET = -31.152
TOP35_SCALE = 1.0371139743

# Positions 36-55: geometric decay
TOP55_AMPLITUDE = 212.61
TOP55_BASE = 1.036
TOP55_OFFSET = 25.071
TOP55_SCALE = 1.0371139743

# Positions 56-150: exponential decay
TAIL_AMPLITUDE = 185.7
TAIL_RATE = -0.02715
TAIL_OFFSET = 14.84
TAIL_SCALE = 1.039035131

# Partial progress on a demon is worth beaten_score * PARTIAL_BASE^t / PARTIAL_DIVISOR,
# with t the fraction of the way from the requirement to 100%.
PARTIAL_BASE = 5.0
PARTIAL_DIVISOR = 10.0


def _linear(position: int) -> float:
    return LINEAR_SLOPE * position + LINEAR_INTERCEPT


def _top20(position: int) -> float:
    return (TOP20_AMPLITUDE * math.exp(TOP20_RATE * position) + TOP20_OFFSET) * TOP20_SCALE


def _top35(position: int) -> float:
    return (TOP35_AMPLITUDE * TOP35_BASE ** (2 - position) + TOP35_OFFSET) * TOP35_SCALE


def _top55(position: int) -> float:
    return TOP55_SCALE * (TOP55_AMPLITUDE * TOP55_BASE ** (1 - position) + TOP55_OFFSET)


def _tail(position: int) -> float:
    return TAIL_SCALE * (TAIL_AMPLITUDE * math.exp(TAIL_RATE * position) + TAIL_OFFSET)


class Segment(NamedTuple):
    min_position: int
    max_position: int
    formula: Callable[[int], float]

    def covers(self, position: int) -> bool:
        return self.min_position <= position <= self.max_position


# Ordered, disjoint and gap-free over 1..150. Positions outside score 0.
SEGMENTS: Tuple[Segment, ...] = (
    Segment(1, 3, _linear),
    Segment(4, 20, _top20),
    Segment(21, 35, _top35),
    Segment(36, 55, _top55),
    Segment(56, 150, _tail),
)


def beaten_score(position: int) -> float:
    """Score of a 100% record on the demon at ``position``."""
    for segment in SEGMENTS:
        if segment.covers(position):
            return segment.formula(position)
    return 0.0


def score(position: int, progress: int, requirement: int) -> float:
    """
    Score of a record with ``progress`` on a demon at ``position`` that requires ``requirement``.

    Records below the requirement are worth nothing. A requirement of 100 with
    progress below 100 lands in that branch, so the partial formula never
    divides by zero.
    """
    if progress < requirement:
        return 0.0

    full = beaten_score(position)

    if progress == 100:
        return full

    exponent = (progress - requirement) / (100 - requirement)
    return full * PARTIAL_BASE ** exponent / PARTIAL_DIVISOR


def segment_boundary_gaps() -> List[Tuple[int, float]]:
    """
    Difference between adjacent formulas where two segments meet.

    Neighbouring pieces are fitted to agree at the last position of the left
    segment, so both formulas are evaluated there. Returns ``(position, gap)``
    pairs, one per boundary.
    """
    gaps = []
    for left, right in zip(SEGMENTS, SEGMENTS[1:]):
        boundary = left.max_position
        gaps.append((boundary, abs(left.formula(boundary) - right.formula(boundary))))
    return gaps
