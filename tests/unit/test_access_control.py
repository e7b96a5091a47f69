"""
Unit tests for access_control module.
"""

import pytest

from ai_docs_analytics.reporting.access_control import (
    AccessPolicy,
    AllowedHosts,
    UserIdentity,
    email_domain,
    host_matches,
)


@pytest.fixture
def policy():
    return AccessPolicy(admin_emails=["Admin@Example.org"])


class TestEmailDomain:
    """Tests for email_domain function."""

    def test_lowercased(self):
        assert email_domain("Dev@Docs.Example.COM") == "docs.example.com"

    @pytest.mark.parametrize("email", [None, "", "no-at-sign", "trailing@"])
    def test_invalid(self, email):
        assert email_domain(email) is None


class TestHostMatches:
    """Tests for containment-based host matching."""

    def test_subdomain_of_allowed(self):
        assert host_matches("docs.example.com", "example.com")

    def test_allowed_contains_requested(self):
        assert host_matches("example.com", "docs.example.com")

    def test_case_insensitive(self):
        assert host_matches("Docs.Example.com", "example.COM")

    def test_unrelated(self):
        assert not host_matches("other.dev", "example.com")

    def test_fragment_of_allowed_host_matches(self):
        # containment, not suffix matching: "com" is inside "foo.com"
        assert host_matches("com", "foo.com")
        assert host_matches("o.c", "foo.com")


class TestAllowedHosts:
    """Tests for AllowedHosts."""

    def test_unrestricted_is_not_empty(self):
        assert AllowedHosts.all().is_empty is False

    def test_restricted_empty(self):
        assert AllowedHosts.of([]).is_empty is True

    def test_deduplicated_in_order(self):
        hosts = AllowedHosts.of(["b.com", "a.com", "b.com", ""])

        assert hosts.hosts == ("b.com", "a.com")
        assert hosts.to_dict() == {"unrestricted": False, "hosts": ["b.com", "a.com"]}


class TestAccessPolicy:
    """Tests for resolve_allowed_hosts."""

    def test_admin_is_unrestricted(self, policy):
        allowed = policy.resolve_allowed_hosts(UserIdentity(email="admin@example.org"))

        assert allowed.unrestricted is True

    def test_own_domain(self, policy):
        allowed = policy.resolve_allowed_hosts(UserIdentity(email="dev@example.com"))

        assert allowed == AllowedHosts.of(["example.com"])

    def test_extra_domain_grants(self, policy):
        allowed = policy.resolve_allowed_hosts(UserIdentity(email="someone@opral.com"))

        assert allowed.hosts == ("opral.com", "inlang.com")

    def test_multiple_extra_grants(self, policy):
        allowed = policy.resolve_allowed_hosts(
            UserIdentity(email="me@jamesrichardfry.com")
        )

        assert set(allowed.hosts) == {
            "jamesrichardfry.com",
            "clawgles.art",
            "clawblocks.art",
        }

    def test_verified_domains_added(self, policy):
        identity = UserIdentity(
            email="dev@example.com", verified_domains=("Docs.Other.dev", "example.com")
        )

        assert policy.resolve_allowed_hosts(identity).hosts == (
            "example.com",
            "docs.other.dev",
        )

    def test_no_email_no_domains_is_empty(self, policy):
        allowed = policy.resolve_allowed_hosts(UserIdentity())

        assert allowed.is_empty
        assert allowed.unrestricted is False

    def test_verified_domains_without_email(self, policy):
        allowed = policy.resolve_allowed_hosts(
            UserIdentity(verified_domains=("mysite.io",))
        )

        assert allowed.hosts == ("mysite.io",)

    def test_custom_extra_access(self):
        policy = AccessPolicy(extra_domain_access={"corp.com": ["corp-docs.dev"]})
        allowed = policy.resolve_allowed_hosts(UserIdentity(email="x@CORP.com"))

        assert allowed.hosts == ("corp.com", "corp-docs.dev")
