import pytest


@pytest.fixture
def general(make_user, make_room, login):
    """Room "general" owned by Alice with Bob as a member, both logged in."""
    alice, bob = make_user("Alice"), make_user("Bob")
    room = make_room(alice, name="general", members=[bob])
    return {
        "room": room,
        "alice": alice,
        "bob": bob,
        "alice_auth": login(alice),
        "bob_auth": login(bob),
    }
