"""
Batch Loader
============

Loads per-user metrics with one grouped query per metric instead of one
query per user. Keys are sent in ``IN (...)`` chunks that stay below
SQLite's bound-parameter limit; results are merged into in-memory maps
keyed by user.

Copyright 2024-2025 北京思源智教科技有限公司 (Beijing Siyuan Zhijiao Technology Co., Ltd.)
All Rights Reserved
Proprietary License
"""

from typing import Any, Callable, Dict, Iterable, Iterator, List, Optional, Sequence

from sqlalchemy.orm import Query

# SQLite's default SQLITE_MAX_VARIABLE_NUMBER is 999 on older builds
DEFAULT_CHUNK_SIZE = 500


def chunked(values: Sequence[Any], size: int) -> Iterator[List[Any]]:
    """Split values into lists of at most ``size`` items, preserving order."""
    if size < 1:
        raise ValueError("chunk size must be positive")
    for start in range(0, len(values), size):
        yield list(values[start:start + size])


def unique_keys(keys: Iterable[str]) -> List[str]:
    """Drop duplicate keys, keeping first-seen order."""
    return list(dict.fromkeys(keys))


class BatchLoader:
    """
    Runs a grouped query once per chunk of keys and merges the rows.

    ``build_query`` receives a chunk of keys and returns a query whose rows
    expose ``key_attr`` (and ``value_attr`` for scalar maps). Rows keep the
    order the query returns them in.
    """

    def __init__(self, chunk_size: int = DEFAULT_CHUNK_SIZE):
        self.chunk_size = chunk_size

    def _rows(self, build_query: Callable[[List[str]], Query], keys: Iterable[str]) -> Iterator[Any]:
        for chunk in chunked(unique_keys(keys), self.chunk_size):
            yield from build_query(chunk).all()

    def load_map(
        self,
        build_query: Callable[[List[str]], Query],
        keys: Iterable[str],
        key_attr: str = "key",
        value_attr: str = "count"
    ) -> Dict[str, int]:
        """
        Load one integer per key.

        Keys with no row are absent from the result; callers default them.
        """
        result: Dict[str, int] = {}
        for row in self._rows(build_query, keys):
            result[getattr(row, key_attr)] = int(getattr(row, value_attr) or 0)
        return result

    def load_lists(
        self,
        build_query: Callable[[List[str]], Query],
        keys: Iterable[str],
        key_attr: str = "key",
        limit_per_key: Optional[int] = None
    ) -> Dict[str, List[Any]]:
        """
        Load an ordered list of rows per key, truncated to ``limit_per_key``.

        Per-group LIMIT is applied here rather than in SQL so the loader
        works on stores without window functions.
        """
        result: Dict[str, List[Any]] = {}
        for row in self._rows(build_query, keys):
            rows = result.setdefault(getattr(row, key_attr), [])
            if limit_per_key is None or len(rows) < limit_per_key:
                rows.append(row)
        return result
