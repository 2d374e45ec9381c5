"""The fixed set of cognitive domains under measurement."""

from __future__ import annotations

from dataclasses import dataclass

from cogdash.errors import ValidationFailed


@dataclass(frozen=True)
class DomainInfo:
    name: str
    description: str
    color: str


DOMAINS: tuple[str, ...] = (
    "depth-perception",
    "eye-hand-coordination",
    "pursuit-follow",
    "saccadic-movement",
)

DOMAIN_INFO: dict[str, DomainInfo] = {
    "depth-perception": DomainInfo(
        name="Depth Perception",
        description="Ability to judge distances and spatial relationships",
        color="#3b82f6",
    ),
    "eye-hand-coordination": DomainInfo(
        name="Eye-Hand Coordination",
        description="Hand-eye coordination and precision targeting",
        color="#10b981",
    ),
    "pursuit-follow": DomainInfo(
        name="Pursuit & Follow",
        description="Ability to track moving objects smoothly",
        color="#f59e0b",
    ),
    "saccadic-movement": DomainInfo(
        name="Saccadic Movement",
        description="Rapid eye movements between fixed points",
        color="#8b5cf6",
    ),
}


def is_valid_domain(value: str) -> bool:
    """Check whether a string names one of the fixed domains."""
    return value in DOMAINS


def game_domain(game_type: str) -> str:
    """Map a session's game_type to its domain.

    Game types and domains share the same keys; the mapping exists so the
    two can diverge without touching callers.
    """
    if not is_valid_domain(game_type):
        raise ValidationFailed(
            "Invalid game_type",
            allowed=list(DOMAINS),
        )
    return game_type


def domain_info(domain: str) -> DomainInfo:
    """Display metadata for a domain."""
    return DOMAIN_INFO[domain]
