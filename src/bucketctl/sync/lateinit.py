"""Late initialization of desired state from observed state."""

import copy
import dataclasses
from typing import Any


def late_initialize(current: Any, observed: Any) -> bool:
    """Fill unset fields of ``current`` from ``observed`` in place.

    A field is unset when it is None. Collections are unset when empty, in
    which case the observed collection is copied whole, element by element,
    in order. Nested dataclasses present on both sides are merged
    recursively. Set values are never overwritten.

    Args:
        current: Desired-state dataclass, mutated in place
        observed: Dataclass of the same type built from the remote shape

    Returns:
        True if any field of current changed
    """
    if type(current) is not type(observed) or not dataclasses.is_dataclass(current):
        raise TypeError(
            f"cannot late-initialize {type(current).__name__} from {type(observed).__name__}"
        )

    changed = False
    for f in dataclasses.fields(current):
        cur = getattr(current, f.name)
        obs = getattr(observed, f.name)
        if obs is None:
            continue
        if cur is None:
            setattr(current, f.name, copy.deepcopy(obs))
            changed = True
        elif isinstance(cur, (list, dict)):
            if not cur and obs:
                setattr(current, f.name, copy.deepcopy(obs))
                changed = True
        elif dataclasses.is_dataclass(cur) and type(cur) is type(obs):
            changed = late_initialize(cur, obs) or changed
    return changed
