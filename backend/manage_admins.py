#!/usr/bin/env python3
"""
Admin management from the command line.

Uses the same settings, MongoDB database and Firebase app as the API:

    python manage_admins.py add user@example.com --role superadmin
    python manage_admins.py remove user@example.com
    python manage_admins.py list
    python manage_admins.py set-claim user@example.com [--superadmin]
    python manage_admins.py remove-claim user@example.com

`add` / `remove` write the `admins` record and mirror the custom claims;
`set-claim` / `remove-claim` touch only the Firebase claims.
Users must sign out and in again for new claims to reach their ID token.
"""
import argparse
import sys
from typing import List, Optional

from firebase_admin.exceptions import FirebaseError

from neighbora.config import build_firebase_app, get_settings
from neighbora.core.errors import AppError
from neighbora.core.identity import FirebaseIdentityProvider
from neighbora.database import connect, ensure_indexes
from neighbora.repositories import admins as admins_repo


def add_admin(db, identity, args) -> None:
    user = identity.get_user_by_email(args.email)
    print(f"✅ User found: {user['uid']} - {user['email']}")

    existing = admins_repo.find_by_uid(db, user["uid"])
    if existing and existing.get("isActive"):
        print(f"ℹ️  {args.email} is already an active {existing['role']}")
        return
    if existing:
        admins_repo.update(db, str(existing["_id"]), {"isActive": True, "role": args.role}, "cli")
        print(f"✅ Admin record re-activated: {args.email}")
    else:
        admins_repo.create(db, {
            "firebaseUid": user["uid"],
            "email": user["email"] or args.email,
            "name": args.name or user.get("displayName"),
            "role": args.role,
        }, "cli")
        print(f"✅ Admin record created: {args.email} ({args.role})")

    identity.set_custom_claims(user["uid"], {"admin": True, "superadmin": args.role == "superadmin"})
    print("✅ Custom claims updated")


def remove_admin(db, identity, args) -> None:
    user = identity.get_user_by_email(args.email)
    if admins_repo.deactivate_by_uid(db, user["uid"], "cli") is None:
        print(f"ℹ️  No admin record for {args.email}")
    else:
        print(f"✅ Admin record deactivated: {args.email}")
    identity.set_custom_claims(user["uid"], None)
    print("✅ Custom claims removed")


def list_admins(db, identity, args) -> None:
    admins = admins_repo.list_active(db)
    if not admins:
        print("No active admins")
        return
    for record in admins:
        print(f"- {record['email']:<35} {record['role']:<11} {record['firebaseUid']}")
    print(f"Total: {len(admins)}")


def set_claim(db, identity, args) -> None:
    user = identity.get_user_by_email(args.email)
    identity.set_custom_claims(user["uid"], {"admin": True, "superadmin": bool(args.superadmin)})
    claims = identity.fetch_user(user["uid"]).get("customClaims")
    print(f"✅ Custom claims for {args.email}: {claims}")


def remove_claim(db, identity, args) -> None:
    user = identity.get_user_by_email(args.email)
    identity.set_custom_claims(user["uid"], None)
    print(f"✅ Custom claims removed for {args.email}")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="manage_admins", description="Manage Neighbora administrators")
    sub = parser.add_subparsers(dest="command", required=True)

    add = sub.add_parser("add", help="Create (or re-activate) an admin record and set claims")
    add.add_argument("email")
    add.add_argument("--name")
    add.add_argument("--role", choices=["admin", "superadmin"], default="admin")
    add.set_defaults(handler=add_admin)

    remove = sub.add_parser("remove", help="Deactivate an admin record and clear claims")
    remove.add_argument("email")
    remove.set_defaults(handler=remove_admin)

    lst = sub.add_parser("list", help="List active admins")
    lst.set_defaults(handler=list_admins)

    sc = sub.add_parser("set-claim", help="Set admin custom claims only")
    sc.add_argument("email")
    sc.add_argument("--superadmin", action="store_true")
    sc.set_defaults(handler=set_claim)

    rc = sub.add_parser("remove-claim", help="Clear custom claims only")
    rc.add_argument("email")
    rc.set_defaults(handler=remove_claim)

    return parser


def main(argv: Optional[List[str]] = None, *, db=None, identity=None) -> int:
    args = build_parser().parse_args(argv)

    if db is None or identity is None:
        settings = get_settings()
        if db is None:
            db = connect(settings)
            ensure_indexes(db)
        if identity is None:
            firebase_app = build_firebase_app(settings)
            if firebase_app is None:
                print("❌ Firebase Admin is not configured (see FIREBASE_* settings)")
                return 1
            identity = FirebaseIdentityProvider(firebase_app)

    try:
        args.handler(db, identity, args)
    except AppError as e:
        print(f"❌ {e.message}")
        return 1
    except FirebaseError as e:
        print(f"❌ Firebase error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
