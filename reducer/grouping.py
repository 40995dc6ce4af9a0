"""
Sorting the working set by key and reducing each run of equal keys.
"""

import logging
from itertools import groupby
from operator import attrgetter
from typing import Callable, Iterable, Iterator, List, Sequence, Tuple

from reducer.errors import ReduceFunctionError
from reducer.records import KeyValue

logger = logging.getLogger(__name__)

ReduceFunction = Callable[[str, Sequence[str]], str]

_by_key = attrgetter('key')


def sort_records(records: Iterable[KeyValue]) -> List[KeyValue]:
    """
    Order records by key.

    The sort is stable: records with equal keys keep their merged order.
    Comparing str by code point gives the same order as comparing their
    UTF-8 bytes.
    """
    return sorted(records, key=_by_key)


def group_by_key(sorted_records: Iterable[KeyValue]) -> Iterator[Tuple[str, List[str]]]:
    """Yield (key, values) for each maximal run of equal keys."""
    for key, run in groupby(sorted_records, key=_by_key):
        yield key, [kv.value for kv in run]


def reduce_groups(groups: Iterable[Tuple[str, List[str]]], reduce_fn: ReduceFunction) -> List[KeyValue]:
    """
    Call reduce_fn once per group

    Args:
        groups: (key, values) pairs in key order
        reduce_fn: User function (key, values) -> str

    Returns:
        One reduced KeyValue per group, in the order of the groups

    Raises:
        ReduceFunctionError: If reduce_fn raises or does not return a str
    """
    reduced = []
    for key, values in groups:
        try:
            result = reduce_fn(key, values)
        except Exception as e:
            raise ReduceFunctionError(key, f"{type(e).__name__}: {e}") from e
        if not isinstance(result, str):
            raise ReduceFunctionError(key, f"expected str result, got {type(result).__name__}")
        reduced.append(KeyValue(key, result))
    return reduced
