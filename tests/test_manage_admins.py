import manage_admins
from neighbora.repositories import admins as admins_repo

from conftest import FakeIdentity


def test_add_list_remove(db, capsys):
    identity = FakeIdentity()
    identity.add_user("u1", "u1@example.com", name="U One")

    assert manage_admins.main(["add", "u1@example.com", "--role", "superadmin"], db=db, identity=identity) == 0
    record = admins_repo.find_active_by_uid(db, "u1")
    assert record["role"] == "superadmin"
    assert record["name"] == "U One"
    assert identity.users["u1"]["customClaims"] == {"admin": True, "superadmin": True}

    assert manage_admins.main(["list"], db=db, identity=identity) == 0
    assert "u1@example.com" in capsys.readouterr().out

    assert manage_admins.main(["remove", "u1@example.com"], db=db, identity=identity) == 0
    assert admins_repo.find_active_by_uid(db, "u1") is None
    assert identity.users["u1"]["customClaims"] == {}

    # re-adding re-activates the same record
    assert manage_admins.main(["add", "u1@example.com"], db=db, identity=identity) == 0
    assert admins_repo.find_active_by_uid(db, "u1")["role"] == "admin"
    assert db["admins"].count_documents({}) == 1


def test_claims_only_commands(db):
    identity = FakeIdentity()
    identity.add_user("u2", "u2@example.com")

    assert manage_admins.main(["set-claim", "u2@example.com"], db=db, identity=identity) == 0
    assert identity.users["u2"]["customClaims"] == {"admin": True, "superadmin": False}
    assert admins_repo.find_by_uid(db, "u2") is None

    assert manage_admins.main(["remove-claim", "u2@example.com"], db=db, identity=identity) == 0
    assert identity.users["u2"]["customClaims"] == {}


def test_unknown_user(db, capsys):
    assert manage_admins.main(["add", "ghost@example.com"], db=db, identity=FakeIdentity()) == 1
    assert "User not found" in capsys.readouterr().out
