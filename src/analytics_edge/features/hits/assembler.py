from __future__ import annotations

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from analytics_edge.core.constants import NO_DATA_HIT_VALUE, VAR_ESCAPE_PREFIX, RequestKeys

from .schema import LegacyHit


def assemble(vars: Mapping[str, str], context_data: Mapping[str, str]) -> LegacyHit:
    """
    Merge request variables and context data into one legacy hit.

    - vars form the top-level fields, plus ndh=1
    - a "&&"-prefixed context key is stripped and hoisted to the top level,
      overwriting any var of the same name
    - any other non-empty key stays in the nested "c" map
    - keys that end up empty are dropped
    """
    fields: dict[str, Any] = dict(vars)
    fields[RequestKeys.NO_DATA_HIT] = NO_DATA_HIT_VALUE

    nested: dict[str, str] = {}
    for key, value in context_data.items():
        if key.startswith(VAR_ESCAPE_PREFIX):
            stripped = key[len(VAR_ESCAPE_PREFIX) :]
            if stripped:
                fields[stripped] = value
        elif key:
            nested[key] = value

    # "c" is always the nested map, even if a hoisted key tried to claim it
    fields.pop(RequestKeys.CONTEXT_DATA, None)

    return LegacyHit(fields=MappingProxyType(fields), context_data=MappingProxyType(nested))
