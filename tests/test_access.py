import pytest

from app.core.exceptions import AuthenticationError, NotFoundError
from app.services import catalog
from app.services.access import authorize, authorize_owner_or_public

OWNER = "owner-1"


def test_authorize_resolves_session(sessions):
    token = sessions.create(OWNER)

    assert authorize(sessions, token) == OWNER
    for bad in (None, "", "unknown-token"):
        with pytest.raises(AuthenticationError):
            authorize(sessions, bad)


def test_session_expires_and_logout_is_idempotent(sessions, fake_redis):
    token = sessions.create(OWNER)
    assert 0 < fake_redis.ttl(f"auth_{token}") <= 60

    sessions.revoke(token)
    sessions.revoke(token)

    assert sessions.resolve(token) is None


def test_private_node_visible_to_owner_only(db, blobs, sessions):
    node = catalog.create_node(db, blobs, OWNER, "a.txt", "file", content=b"x")
    owner_token = sessions.create(OWNER)
    other_token = sessions.create("owner-2")

    grant = authorize_owner_or_public(db, sessions, owner_token, node.id)
    assert grant.as_owner is True

    for token in (other_token, None, "expired-token"):
        with pytest.raises(NotFoundError):
            authorize_owner_or_public(db, sessions, token, node.id)


def test_public_node_readable_anonymously(db, blobs, sessions):
    node = catalog.create_node(db, blobs, OWNER, "a.txt", "file", is_public=True, content=b"x")

    grant = authorize_owner_or_public(db, sessions, None, node.id)

    assert grant.node.id == node.id
    assert grant.as_owner is False


def test_absent_and_hidden_look_the_same(db, blobs, sessions):
    node = catalog.create_node(db, blobs, OWNER, "a.txt", "file", content=b"x")

    with pytest.raises(NotFoundError) as hidden:
        authorize_owner_or_public(db, sessions, None, node.id)
    with pytest.raises(NotFoundError) as absent:
        authorize_owner_or_public(db, sessions, None, "no-such-id")

    assert hidden.value.reason == absent.value.reason
