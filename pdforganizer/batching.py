"""Candidate listing and fixed-size batch pagination."""

from __future__ import annotations

import math
from pathlib import Path
from typing import Callable, Sequence, TypeVar

from .naming import is_standardized
from .records import RecordStateMachine
from .utils import DEFAULT_BATCH_SIZE

T = TypeVar("T")


def _check_size(size: int) -> None:
    if size < 1:
        raise ValueError(f"batch size must be positive, got {size}")


def batch(items: Sequence[T], index: int, size: int = DEFAULT_BATCH_SIZE) -> list[T]:
    """Slice ``[index*size, index*size+size)``; empty when out of range."""
    _check_size(size)
    if index < 0 or index >= total_batches(items, size):
        return []
    return list(items[index * size : index * size + size])


def total_batches(items: Sequence[object], size: int = DEFAULT_BATCH_SIZE) -> int:
    _check_size(size)
    return math.ceil(len(items) / size)


class BatchCoordinator:
    """Splits a directory's PDFs into what still needs a decision."""

    def __init__(
        self,
        records: RecordStateMachine,
        list_files: Callable[[], list[Path]],
        *,
        batch_size: int = DEFAULT_BATCH_SIZE,
    ) -> None:
        _check_size(batch_size)
        self.records = records
        self.list_files = list_files
        self.batch_size = batch_size

    def non_standardized(self) -> list[Path]:
        """Files needing a rename proposal, minus rejected ones."""
        return [
            path
            for path in self.list_files()
            if not is_standardized(path.name)
            and not self.records.is_rejected(str(path))
        ]

    def standardized(self) -> list[Path]:
        """Files already named by convention, minus metadata rejections."""
        return [
            path
            for path in self.list_files()
            if is_standardized(path.name)
            and not self.records.is_metadata_rejected(str(path))
        ]

    def get_batch(self, index: int, size: int | None = None) -> list[Path]:
        size = self.batch_size if size is None else size
        return batch(self.non_standardized(), index, size)

    def total_batches(self, size: int | None = None) -> int:
        size = self.batch_size if size is None else size
        return total_batches(self.non_standardized(), size)
