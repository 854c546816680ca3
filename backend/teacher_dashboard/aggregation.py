from __future__ import annotations
from decimal import Decimal, ROUND_HALF_UP
from typing import Iterable, List, Optional, Sequence

from .schemas import AggregateResult, DistributionBucket, Scope, StudentScore


def _to_decimal(value) -> Decimal:
	# str() keeps 0.1 as 0.1 instead of its binary expansion
	return Decimal(str(value))


def round_half_up(value, places: int = 1) -> float:
	"""Round half away from zero (2.25 -> 2.3, -2.25 -> -2.3)."""
	quantum = Decimal(1).scaleb(-places)
	return float(_to_decimal(value).quantize(quantum, rounding=ROUND_HALF_UP))


def filter_by_test(scores: Iterable[StudentScore], test_id: str) -> List[StudentScore]:
	return [s for s in scores if s.test_id == test_id]


def aggregate(
	scores: Sequence[StudentScore],
	test_id: str,
	scope: Scope = Scope.classroom,
	scope_key: str = "",
	school_year: str = "",
) -> AggregateResult:
	"""Mean and participant count of the scores recorded for ``test_id``.

	An empty selection gives mean 0 and count 0. The mean is computed in
	decimal arithmetic and rounded to one place, half away from zero, so the
	same inputs always round the same way.
	"""
	matching = filter_by_test(scores, test_id)
	if not matching:
		mean = 0.0
	else:
		total = sum((_to_decimal(s.score) for s in matching), Decimal(0))
		mean = round_half_up(total / Decimal(len(matching)), 1)
	return AggregateResult(
		test_id=test_id,
		scope=scope,
		scope_key=scope_key,
		school_year=school_year,
		mean=mean,
		participant_count=len(matching),
	)


def score_distribution(
	scores: Sequence[StudentScore],
	test_id: str,
	bucket_width: int = 10,
	max_score: Optional[int] = None,
) -> List[DistributionBucket]:
	"""Count scores for ``test_id`` in contiguous bands of ``bucket_width``.

	Bands run from 0 up to the band holding the highest score (or
	``max_score`` when that is larger). Each band is [lower, upper); the top
	band also counts scores equal to its upper bound so a perfect score is not
	dropped. Negative scores fall into the first band.
	"""
	if bucket_width <= 0:
		raise ValueError("bucket_width must be positive")
	matching = filter_by_test(scores, test_id)
	if not matching:
		return []
	top = max(s.score for s in matching)
	if max_score is not None and max_score > top:
		top = max_score
	n_buckets = max(1, int(top // bucket_width) + (0 if top % bucket_width == 0 and top > 0 else 1))
	counts = [0] * n_buckets
	for s in matching:
		idx = int(max(s.score, 0) // bucket_width)
		counts[min(idx, n_buckets - 1)] += 1
	return [
		DistributionBucket(lower=i * bucket_width, upper=(i + 1) * bucket_width, count=c)
		for i, c in enumerate(counts)
	]
