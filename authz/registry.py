"""Named collection of authorization strategies.

The registry decides which strategies apply to a request from the
operation's security requirements and runs them in insertion order.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, Iterator, List, Mapping, Optional

from authz.request import RequestDescriptor
from authz.strategies import Authorization, apply_authorization

logger = logging.getLogger(__name__)


def flatten_securities(securities: Any) -> List[str]:
    """Flatten security requirements into strategy names.

    Requirements look like ``[{"api_key": []}, "petstore_auth"]``: the keys
    of each requirement object and every bare string name a strategy. A
    single mapping contributes its keys.
    """
    if not securities:
        return []
    if isinstance(securities, Mapping):
        return list(securities.keys())
    if isinstance(securities, str):
        return [securities]

    names: List[str] = []
    for requirement in securities:
        if isinstance(requirement, str):
            names.append(requirement)
        elif isinstance(requirement, Mapping):
            names.extend(requirement.keys())
    return names


class SwaggerAuthorizations:
    """Maps strategy names to strategies and applies them to requests."""

    def __init__(self, authz: Optional[Mapping[str, Authorization]] = None):
        self.authz: Dict[str, Authorization] = dict(authz or {})

    def add_one(self, name: str, strategy: Authorization) -> Authorization:
        """Store a strategy under a name, replacing any existing one."""
        self.authz[name] = strategy
        return strategy

    def add_many(
        self, strategies: Mapping[str, Authorization]
    ) -> Mapping[str, Authorization]:
        """Merge several named strategies, replacing existing names."""
        self.authz.update(strategies)
        return strategies

    def remove(self, name: str) -> bool:
        """Remove a strategy.

        Returns:
            True if the strategy was removed, False if not found
        """
        if name in self.authz:
            del self.authz[name]
            return True
        return False

    def get(self, name: str) -> Optional[Authorization]:
        return self.authz.get(name)

    def names(self) -> List[str]:
        return list(self.authz.keys())

    def __contains__(self, name: object) -> bool:
        return name in self.authz

    def __iter__(self) -> Iterator[str]:
        return iter(self.authz)

    def apply(self, request: RequestDescriptor, securities: Any = None) -> bool:
        """Apply the eligible strategies to a request.

        A registry attached to the request takes precedence over this one.
        Without securities every strategy is eligible.

        Args:
            request: Request descriptor to mutate
            securities: The operation's security requirements

        Returns:
            True only if every applied strategy succeeded. A failing strategy
            does not stop the others from running.
        """
        registry = (
            request.client_authorizations
            if request.client_authorizations is not None
            else self
        )
        apply_all = not securities
        eligible = set(flatten_securities(securities))

        status = True
        for name, strategy in registry.authz.items():
            if not (apply_all or name in eligible):
                continue
            applied = apply_authorization(strategy, request)
            if not applied:
                logger.debug("Authorization %s did not apply", name)
            status = status and applied
        return status
