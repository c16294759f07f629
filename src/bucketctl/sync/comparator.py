"""
Structural comparison of facet remote shapes.

Compares the projector's rendering of the desired state with the raw
observed remote shape. Works over mappings, sequences, dataclasses and
scalars.

Rules:
    - Values of ignored types (platform references/selectors) are skipped
    - Mapping keys / dataclass fields listed in ignore_keys are skipped
    - Sequences compare element-wise in order; a length mismatch is a
      single difference at the sequence path, elements are not compared
    - No normalization: a missing key differs from a key set to None,
      and an empty list differs from None
"""

import dataclasses
from collections.abc import Iterable, Iterator, Mapping, Sequence
from typing import Any

from bucketctl.sync.models import Reference, Selector

DEFAULT_IGNORE_TYPES: tuple[type, ...] = (Reference, Selector)

_MISSING = object()


def _join(path: str, key: Any) -> str:
    if isinstance(key, int):
        return f"{path}[{key}]"
    return f"{path}.{key}" if path else str(key)


def _is_sequence(value: Any) -> bool:
    return isinstance(value, Sequence) and not isinstance(value, (str, bytes, bytearray))


def _is_dataclass_instance(value: Any) -> bool:
    return dataclasses.is_dataclass(value) and not isinstance(value, type)


def _iter_diffs(
    desired: Any,
    observed: Any,
    path: str,
    ignore_keys: frozenset[str],
    ignore_types: tuple[type, ...],
) -> Iterator[str]:
    if ignore_types and (isinstance(desired, ignore_types) or isinstance(observed, ignore_types)):
        return

    if desired is _MISSING or observed is _MISSING:
        yield path
        return

    if _is_dataclass_instance(desired) or _is_dataclass_instance(observed):
        if type(desired) is not type(observed):
            yield path
            return
        for f in dataclasses.fields(desired):
            if f.name in ignore_keys:
                continue
            yield from _iter_diffs(
                getattr(desired, f.name),
                getattr(observed, f.name),
                _join(path, f.name),
                ignore_keys,
                ignore_types,
            )
        return

    if isinstance(desired, Mapping) or isinstance(observed, Mapping):
        if not (isinstance(desired, Mapping) and isinstance(observed, Mapping)):
            yield path
            return
        keys = [k for k in {**desired, **observed} if k not in ignore_keys]
        for key in sorted(keys, key=str):
            yield from _iter_diffs(
                desired.get(key, _MISSING),
                observed.get(key, _MISSING),
                _join(path, key),
                ignore_keys,
                ignore_types,
            )
        return

    if _is_sequence(desired) or _is_sequence(observed):
        if not (_is_sequence(desired) and _is_sequence(observed)):
            yield path
            return
        if len(desired) != len(observed):
            yield path
            return
        for i, (d, o) in enumerate(zip(desired, observed)):
            yield from _iter_diffs(d, o, _join(path, i), ignore_keys, ignore_types)
        return

    if desired != observed:
        yield path


def diff_paths(
    desired: Any,
    observed: Any,
    ignore_keys: Iterable[str] = (),
    ignore_types: tuple[type, ...] = DEFAULT_IGNORE_TYPES,
) -> list[str]:
    """List the paths where desired and observed differ.

    Args:
        desired: Remote-shape rendering of the desired state
        observed: Remote shape as returned by the API
        ignore_keys: Keys/fields that are server-managed and never compared
        ignore_types: Value types that are never compared

    Returns:
        Paths such as "TargetGrants[0].Grantee.ID"; "" denotes the root
    """
    return list(_iter_diffs(desired, observed, "", frozenset(ignore_keys), ignore_types))


def is_equal(
    desired: Any,
    observed: Any,
    ignore_keys: Iterable[str] = (),
    ignore_types: tuple[type, ...] = DEFAULT_IGNORE_TYPES,
) -> bool:
    """Structural equality under the same rules as diff_paths."""
    diffs = _iter_diffs(desired, observed, "", frozenset(ignore_keys), ignore_types)
    return next(diffs, None) is None
