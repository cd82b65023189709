"""Scope selection and repository enumeration.

A run targets exactly one scope: an organization, a list of teams, a user
or a single repository. The scope is validated once and then turned into
the deduplicated list of ``owner/name`` repositories to query.
"""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from logging import getLogger

import httpx

from prtool.conf.config import EffectiveConfig
from prtool.errors import (
    ConfigurationRequired,
    InvalidScopeValue,
    MultipleScopesSpecified,
    NoRepositoriesFound,
    NoScopeSpecified,
)

from .github.client import wrap_upstream_error
from .github.models import Page, RepositoryLister

logger = getLogger(__name__)


@dataclass(frozen=True)
class OrganizationScope:
    name: str

    kind = "organization"

    @property
    def value(self) -> str:
        return self.name


@dataclass(frozen=True)
class TeamsScope:
    teams: tuple[str, ...]

    kind = "team"

    @property
    def value(self) -> str:
        return ", ".join(self.teams)


@dataclass(frozen=True)
class UserScope:
    name: str

    kind = "user"

    @property
    def value(self) -> str:
        return self.name


@dataclass(frozen=True)
class RepositoryScope:
    full_name: str

    kind = "repository"

    @property
    def value(self) -> str:
        return self.full_name


ScopeSelection = OrganizationScope | TeamsScope | UserScope | RepositoryScope


def validate_scope(cfg: EffectiveConfig | None) -> ScopeSelection:
    """Ensure exactly one scope is configured and return it.

    Raises:
        ConfigurationRequired: If no configuration was supplied
        NoScopeSpecified: If none of org, team, user or repo is set
        MultipleScopesSpecified: If more than one is set; names the offending options
    """
    if cfg is None:
        raise ConfigurationRequired()

    candidates: list[tuple[str, ScopeSelection]] = []
    if cfg.org:
        candidates.append(("org", OrganizationScope(cfg.org)))
    if cfg.teams:
        candidates.append(("team", TeamsScope(tuple(cfg.teams))))
    if cfg.user:
        candidates.append(("user", UserScope(cfg.user)))
    if cfg.repo:
        candidates.append(("repo", RepositoryScope(cfg.repo)))

    if not candidates:
        raise NoScopeSpecified()
    if len(candidates) > 1:
        raise MultipleScopesSpecified([name for name, _ in candidates])

    selection = candidates[0][1]
    logger.debug(f"Scope resolved to {selection.kind} {selection.value}")
    return selection


def split_full_name(value: str, kind: str = "repository") -> tuple[str, str]:
    """Split ``owner/name`` into its parts.

    Raises:
        InvalidScopeValue: If the value does not contain exactly one "/" between non-empty parts
    """
    parts = value.split("/")
    if len(parts) != 2 or not parts[0] or not parts[1]:
        expected = "org/team" if kind == "team" else "owner/repo"
        raise InvalidScopeValue(kind, value, expected)
    return parts[0], parts[1]


async def _paginate(fetch_page: Callable[[int], Awaitable[Page]]) -> list[str]:
    names: list[str] = []
    page = 1
    while True:
        result = await fetch_page(page)
        names.extend(item["full_name"] for item in result.items)
        if not result.has_next:
            return names
        page = result.next_page or page + 1


def _dedupe(names: list[str]) -> list[str]:
    # GitHub names are case-insensitive; keep the first spelling seen
    seen: dict[str, str] = {}
    for name in names:
        seen.setdefault(name.lower(), name)
    return list(seen.values())


async def enumerate_repositories(selection: ScopeSelection, client: RepositoryLister) -> list[str]:
    """Turn a scope into the ordered, deduplicated list of repositories to query.

    Args:
        selection: Validated scope
        client: Repository lister (GitHub API client or test double)

    Returns:
        Repository full names in listing order

    Raises:
        InvalidScopeValue: If a repository or team identifier is malformed
        AuthenticationFailed: If GitHub rejects the token
        UpstreamTransportError: If any listing request fails
        NoRepositoriesFound: If the scope is valid but holds no repositories
    """
    context = f"listing repositories for {selection.kind} {selection.value}"

    # Validate identifiers before touching the network
    if isinstance(selection, RepositoryScope):
        owner, name = split_full_name(selection.full_name)
    elif isinstance(selection, TeamsScope):
        team_parts = [split_full_name(team, kind="team") for team in selection.teams]

    try:
        if isinstance(selection, OrganizationScope):
            names = await _paginate(lambda page: client.list_repositories_for_org(selection.name, page))
        elif isinstance(selection, UserScope):
            names = await _paginate(lambda page: client.list_repositories_for_user(selection.name, page))
        elif isinstance(selection, RepositoryScope):
            repository = await client.get_repository(owner, name)
            names = [repository.get("full_name") or selection.full_name]
        else:
            names = []
            for org, team_slug in team_parts:
                team_names = await _paginate(
                    lambda page, org=org, team_slug=team_slug: client.list_repositories_for_team(org, team_slug, page)
                )
                logger.debug(f"Team {org}/{team_slug} has {len(team_names)} repositories")
                names.extend(team_names)
    except (httpx.HTTPError, KeyError, ValueError) as e:
        raise wrap_upstream_error(e, context) from e

    repositories = _dedupe(names)
    if not repositories:
        raise NoRepositoriesFound(selection.kind, selection.value)

    logger.info(f"Found {len(repositories)} repositories for {selection.kind} {selection.value}")
    return repositories
