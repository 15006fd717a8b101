"""Stride planning over a commit sequence."""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
	from collections.abc import Iterator


def stride_count(length: int, batch_size: int) -> int:
	"""Number of strides needed to cover ``length`` commits."""
	if batch_size < 1:
		msg = f"batch_size must be at least 1, got {batch_size}"
		raise ValueError(msg)
	return -(-length // batch_size)


def boundary_indices(length: int, batch_size: int) -> Iterator[int]:
	"""
	Yield the index of the last commit of every stride.

	Stride ``i`` (starting at 1) ends at ``min(i * batch_size, length) - 1``, so the
	final stride is clamped to the last commit and no index reaches ``length``.

	Args:
	    length: Number of commits in the sequence
	    batch_size: Commits per stride

	Yields:
	    Boundary indices in ascending order

	Raises:
	    ValueError: If ``batch_size`` is less than 1

	"""
	for stride in range(1, stride_count(length, batch_size) + 1):
		yield min(stride * batch_size, length) - 1
