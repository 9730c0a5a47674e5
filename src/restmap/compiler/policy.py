from __future__ import annotations

from typing import Callable

from restmap.domain.models import RouteMetaData
from restmap.errors import ConfigurationError

# Decides whether a compiled route must have a bound handle method.
HandlePolicy = Callable[[RouteMetaData], bool]

PUSH_VERBS = frozenset({"POST", "PUT", "PATCH"})


def no_handle_required(route: RouteMetaData) -> bool:
    return False


def push_verbs_require_handle(route: RouteMetaData) -> bool:
    """Routes that accept a request body must say how to apply it, unless an action class does."""
    if route.action_class_name:
        return False
    return any(v in PUSH_VERBS for v in route.verbs)


_POLICIES: dict[str, HandlePolicy] = {
    "none": no_handle_required,
    "push": push_verbs_require_handle,
}


def get_handle_policy(name: str) -> HandlePolicy:
    try:
        return _POLICIES[name.strip().lower()]
    except KeyError:
        raise ConfigurationError(
            f"Unknown handle policy '{name}' (expected one of: {', '.join(_POLICIES)})"
        ) from None
