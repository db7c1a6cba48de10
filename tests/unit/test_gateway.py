"""
Unit tests for connection authentication.
"""
import uuid

import pytest

from app.chat.connection_manager import ConnectionRegistry
from app.chat.gateway import ConnectionGateway, Principal
from app.core.exceptions import InvalidToken


def _gateway(lookup):
    return ConnectionGateway(ConnectionRegistry(), session_lookup=lookup)


def test_valid_token_resolves_principal():
    user_id = uuid.uuid4()
    sessions = {"good": {"user_id": str(user_id), "email": "a@example.com", "name": "Alice"}}

    principal = _gateway(sessions.get).authenticate("good")

    assert principal == Principal(user_id=user_id, email="a@example.com", name="Alice")


@pytest.mark.parametrize("token", [None, "", "unknown"])
def test_missing_or_unknown_token(token):
    with pytest.raises(InvalidToken):
        _gateway({}.get).authenticate(token)


def test_malformed_session_is_invalid():
    with pytest.raises(InvalidToken):
        _gateway({"t": {"user_id": "not-a-uuid"}}.get).authenticate("t")


def test_session_store_failure_is_invalid_token():
    def broken(token):
        raise ConnectionError("redis down")

    with pytest.raises(InvalidToken):
        _gateway(broken).authenticate("t")
