"""
Resolution of environment and database credential rules.

Both tables are ordered: the first rule whose prefix matches wins, even when a
later rule has a longer (more specific) prefix. An empty prefix matches every
name, so a catch-all rule has to be declared last.
"""
from __future__ import annotations

from dataclasses import replace
from typing import Callable, Iterable, Optional, Sequence, TypeVar

from jumpkit.core.errors import ConfigurationError
from jumpkit.core.models import CredentialRule, EngineProfile, EnvironmentRule
from jumpkit.utils.logging import get_logger

logger = get_logger(__name__)

R = TypeVar("R", EnvironmentRule, CredentialRule)

MYSQL = EngineProfile(port=3306, client="mycli", fallback_client="mysql")
POSTGRES = EngineProfile(port=5432, client="pgcli", fallback_client="psql")

ENGINE_PROFILES = {
    "mysql": MYSQL,
}


def first_match(name: str, rules: Iterable[R]) -> Optional[R]:
    for rule in rules:
        if name.startswith(rule.prefix):
            return rule
    return None


def match_environment(name: str, rules: Sequence[EnvironmentRule]) -> EnvironmentRule:
    rule = first_match(name, rules)
    if rule is None:
        raise ConfigurationError(
            f"No environment matched {name}, please check your configuration. Run: 'jumpkit config'"
        )
    if not rule.jump_host:
        raise ConfigurationError(f"Environment '{rule.prefix}' has no jump host configured")
    return rule


def derive_database(endpoint: str) -> Optional[str]:
    """Infer the database name from an endpoint such as ``staging-billing.abc.rds.amazonaws.com``.

    The name is the second ``-`` separated segment, cut at the first dot.
    """
    segments = endpoint.split("-")
    if len(segments) < 2:
        return None
    return segments[1].split(".")[0] or None


def match_credentials(
    endpoint: str,
    rules: Sequence[CredentialRule],
    lookup_secret: Optional[Callable[[str], str]] = None,
) -> CredentialRule:
    rule = first_match(endpoint, rules)
    if rule is None:
        raise ConfigurationError(
            f"No RDS configuration found for {endpoint}, please check your configuration. Run: 'jumpkit config'"
        )

    if not rule.database:
        rule = replace(rule, database=derive_database(endpoint))
        logger.debug(f"Inferred database '{rule.database}' from {endpoint}")

    if rule.user and not rule.password and lookup_secret is not None:
        item = f"{rule.prefix or 'default'} RDS Password"
        rule = replace(rule, password=lookup_secret(item))

    return rule


def engine_profile(engine: str) -> EngineProfile:
    return ENGINE_PROFILES.get(engine, POSTGRES)
