"""Capability registry and skill providers.

 A *capability* is the execution unit behind a plan step.

 - The planner emits ``Step`` items naming a ``(namespace, name)`` pair.
 - The dispatcher resolves that pair through ``CapabilityRegistry``.
 - The capability is invoked with the dispatch ``Context``.

 Providers come in two flavours:

 - built-in skills (``RenderSkills``, ``ImageSkills``, ``ChatSkill``), shared
   across requests and registered for every dispatch;
 - credentialed integrations (``GitHubSkill``, ``JiraSkill``,
   ``CalendarSkill``, ``ShoppingSkill``), built per dispatch through a
   ``ConditionalRegistration`` only when the request carries the credential.
 """

from .base import Capability, CapabilityDescriptor, CapabilityFunction, CapabilityProvider
from .builtin import ChatSkill, ImageSkills, RenderSkills
from .integrations import (
    DEFAULT_INTEGRATIONS,
    CalendarSkill,
    GitHubSkill,
    HttpSkillProvider,
    JiraSkill,
    ShoppingSkill,
    credentials_from_headers,
)
from .registry import CapabilityRegistry, ConditionalRegistration, has_credential

__all__ = [
    "Capability",
    "CapabilityDescriptor",
    "CapabilityFunction",
    "CapabilityProvider",
    "CapabilityRegistry",
    "ConditionalRegistration",
    "has_credential",
    "ChatSkill",
    "ImageSkills",
    "RenderSkills",
    "DEFAULT_INTEGRATIONS",
    "HttpSkillProvider",
    "GitHubSkill",
    "JiraSkill",
    "CalendarSkill",
    "ShoppingSkill",
    "credentials_from_headers",
]
