from __future__ import annotations

"""Capability registry.

The registry maps a ``(namespace, name)`` pair to an executable capability.
A fresh registry is assembled for every dispatch: built-in providers are
registered unconditionally, integration providers only when their credential
is present (see ``ConditionalRegistration``).
"""

import logging
from dataclasses import dataclass
from typing import Callable, Dict, List, Optional, Tuple

from ..errors import CapabilityNotFoundError, DuplicateCapabilityError
from .base import Capability, CapabilityDescriptor, CapabilityProvider

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[], CapabilityProvider]


def has_credential(credential: Optional[str]) -> bool:
    return bool(credential and credential.strip())


@dataclass(frozen=True)
class ConditionalRegistration:
    """An integration whose skills are registered only for some requests.

    Attributes:
        integration: Credential key (e.g. ``"github"``) looked up in the request credentials.
        namespace: Namespace the provider's functions are registered under.
        factory: Builds the provider from the credential value.
        predicate: Decides from the credential value whether to register at all.
    """

    integration: str
    namespace: str
    factory: Callable[[str], CapabilityProvider]
    predicate: Callable[[Optional[str]], bool] = has_credential


class CapabilityRegistry:
    """
    In-memory mapping of ``(namespace, name)`` to capability implementations.

    Notes:
        - ``register`` refuses duplicates with ``DuplicateCapabilityError`` and
          registers nothing from a provider that would collide.
        - ``lookup`` raises ``CapabilityNotFoundError`` if the capability is missing.
    """

    def __init__(self) -> None:
        """Initialize an empty capability registry."""
        self._caps: Dict[Tuple[str, str], Capability] = {}

    def register(self, namespace: str, provider: CapabilityProvider) -> None:
        """
        Register every function of a provider under ``namespace``.

        Args:
            namespace: The namespace to register under.
            provider: The capability provider.

        Raises:
            DuplicateCapabilityError: If any ``(namespace, name)`` is already present,
                or the provider exposes the same name twice.
        """
        caps = list(provider.functions())
        seen: set[str] = set()
        for cap in caps:
            if (namespace, cap.name) in self._caps or cap.name in seen:
                raise DuplicateCapabilityError(namespace, cap.name)
            seen.add(cap.name)
        for cap in caps:
            self._caps[(namespace, cap.name)] = cap
        logger.debug(f"Registered {len(caps)} capabilities under '{namespace}'")

    def register_capability(self, namespace: str, cap: Capability) -> None:
        """Register a single capability under ``namespace``."""
        if (namespace, cap.name) in self._caps:
            raise DuplicateCapabilityError(namespace, cap.name)
        self._caps[(namespace, cap.name)] = cap

    def register_if(
        self,
        credential_present: bool,
        namespace: str,
        factory: ProviderFactory,
    ) -> Optional[CapabilityProvider]:
        """
        Build and register a provider only when its credential is present.

        Args:
            credential_present: Whether the integration's credential was supplied.
            namespace: The namespace to register under.
            factory: Zero-argument callable building the provider.

        Returns:
            The registered provider, or None when registration was skipped.
        """
        if not credential_present:
            logger.debug(f"Skipping '{namespace}': no credential supplied")
            return None
        provider = factory()
        self.register(namespace, provider)
        return provider

    def lookup(self, namespace: str, name: str) -> Capability:
        """
        Retrieve a registered capability.

        Raises:
            CapabilityNotFoundError: If nothing is registered under ``(namespace, name)``.
        """
        try:
            return self._caps[(namespace, name)]
        except KeyError:
            raise CapabilityNotFoundError(namespace, name) from None

    def has(self, namespace: str, name: str) -> bool:
        return (namespace, name) in self._caps

    def descriptors(self) -> List[CapabilityDescriptor]:
        """Describe every registered capability, in registration order."""
        return [
            CapabilityDescriptor(namespace=ns, name=name, description=cap.description)
            for (ns, name), cap in self._caps.items()
        ]

    def __len__(self) -> int:
        return len(self._caps)
