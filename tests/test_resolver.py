"""Tests for free-text name resolution."""

from injaz.db.enums import Direction, PartyType
from injaz.services import projects
from injaz.tools import resolver


def test_find_party_by_substring(session, org, client_party, vendor_party):
    assert resolver.find_party(session, org.id, "  nile ").id == vendor_party.id
    assert resolver.find_party(session, org.id, "acme", type="VENDOR") is None
    assert resolver.find_party(session, org.id, "") is None
    assert resolver.find_party(session, org.id, None) is None


def test_find_party_is_deterministic(session, org):
    from injaz.services import parties

    parties.create_party(session, org.id, {"name": "Delta Trading"})
    parties.create_party(session, org.id, {"name": "Alpha Trading"})

    assert resolver.find_party(session, org.id, "trading").name == "Alpha Trading"


def test_like_wildcards_are_literal(session, org, client_party):
    assert resolver.find_party(session, org.id, "%") is None


def test_resolve_party_creates_typed_party(session, org):
    client = resolver.resolve_party(session, org.id, "Fresh Client", Direction.INBOUND)
    vendor = resolver.resolve_party(session, org.id, "Fresh Vendor", "outbound")

    assert client.type == PartyType.CLIENT
    assert vendor.type == PartyType.VENDOR
    assert resolver.resolve_party(session, org.id, "fresh client", "OUTBOUND").id == client.id


def test_resolve_blank_name_returns_none(session, org):
    assert resolver.resolve_party(session, org.id, "   ", "INBOUND") is None


def test_find_project_and_user(session, org, user):
    website = projects.create_project(session, org.id, {"name": "Website Revamp"})

    assert resolver.find_project(session, org.id, "revamp").id == website.id
    assert resolver.find_project(session, "other-org", "revamp") is None
    assert resolver.find_user(session, "sara").id == user.id
    assert resolver.find_user(session, "nobody") is None
