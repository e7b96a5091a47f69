"""
Domain-based access control for analytics queries.

A caller may see analytics for their own email domain, for domains that
domain is statically granted, and for domains they have verified. Admins
see everything.
"""

import logging
from dataclasses import dataclass, field
from typing import Iterable, Mapping, Optional

from ..config.constants import EXTRA_DOMAIN_ACCESS

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class UserIdentity:
    """An authenticated caller as supplied by the auth provider."""

    email: Optional[str] = None
    verified_domains: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class AllowedHosts:
    """
    Hosts a caller may query.

    ``unrestricted`` is the admin case. A restricted set with no hosts
    means nothing is visible; the two are never inferred from set size.
    """

    unrestricted: bool = False
    hosts: tuple[str, ...] = ()

    @classmethod
    def all(cls) -> "AllowedHosts":
        """The unrestricted (admin) set."""
        return cls(unrestricted=True)

    @classmethod
    def of(cls, hosts: Iterable[str]) -> "AllowedHosts":
        """A restricted set, de-duplicated in first-seen order."""
        unique: list[str] = []
        for host in hosts:
            if host and host not in unique:
                unique.append(host)
        return cls(unrestricted=False, hosts=tuple(unique))

    @property
    def is_empty(self) -> bool:
        """True only for a restricted set without hosts."""
        return not self.unrestricted and not self.hosts

    def to_dict(self) -> dict:
        """Convert to dictionary."""
        return {"unrestricted": self.unrestricted, "hosts": list(self.hosts)}


def email_domain(email: Optional[str]) -> Optional[str]:
    """
    Extract the lowercased domain of an email address.

    >>> email_domain("a@Foo.com")
    'foo.com'
    >>> email_domain("no-at-sign") is None
    True
    """
    if not email or "@" not in email:
        return None
    domain = email.rsplit("@", 1)[1].strip().lower()
    return domain or None


def host_matches(requested_host: str, allowed_host: str) -> bool:
    """
    Check whether a requested host falls under an allowed host.

    Uses substring containment in either direction. This over-grants: a
    caller allowed "foo.com" may request "com" (or "o.c"), and the host
    filter for "com" then matches every host ending in ".com".
    """
    requested = requested_host.lower()
    allowed = allowed_host.lower()
    return allowed in requested or requested in allowed


class AccessPolicy:
    """Resolves callers to the hosts they may query."""

    def __init__(
        self,
        admin_emails: Iterable[str] = (),
        extra_domain_access: Mapping[str, Iterable[str]] = EXTRA_DOMAIN_ACCESS,
    ):
        """
        Initialize the policy.

        Args:
            admin_emails: Emails with unrestricted access
            extra_domain_access: Email domain -> additional granted hosts
        """
        self._admin_emails = frozenset(e.strip().lower() for e in admin_emails)
        self._extra_domain_access = {
            domain.lower(): tuple(hosts)
            for domain, hosts in extra_domain_access.items()
        }

    def is_admin(self, identity: UserIdentity) -> bool:
        """Check the admin allowlist (case-insensitive)."""
        return bool(identity.email) and identity.email.strip().lower() in self._admin_emails

    def resolve_allowed_hosts(self, identity: UserIdentity) -> AllowedHosts:
        """
        Compute the caller's allowed hosts.

        Recomputed on every call, since verified domains change over time.
        """
        if self.is_admin(identity):
            return AllowedHosts.all()

        hosts: list[str] = []
        domain = email_domain(identity.email)
        if domain:
            hosts.append(domain)
            hosts.extend(self._extra_domain_access.get(domain, ()))
        hosts.extend(d.strip().lower() for d in identity.verified_domains)

        allowed = AllowedHosts.of(hosts)
        logger.debug(f"Resolved {len(allowed.hosts)} allowed hosts for caller")
        return allowed
