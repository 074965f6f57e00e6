import argparse
from datetime import timedelta

from claimdesk.database import init_db
from claimdesk.services.auth import Actor, ActorRole, AuthService


def create_tables() -> None:
    init_db()
    print("Tables created")


def issue_token(actor_id: str, role: str, name: str = None, minutes: int = 60) -> str:
    actor = Actor(id=actor_id, role=ActorRole(role), name=name)
    return AuthService.create_access_token(actor, expires_delta=timedelta(minutes=minutes))


def main(argv=None) -> None:
    parser = argparse.ArgumentParser(prog="claimdesk")
    sub = parser.add_subparsers(dest="command", required=True)

    sub.add_parser("init-db", help="Create tables for local development")

    token = sub.add_parser("token", help="Mint a development bearer token")
    token.add_argument("actor_id")
    token.add_argument("--role", default=ActorRole.STAFF.value, choices=[r.value for r in ActorRole])
    token.add_argument("--name")
    token.add_argument("--minutes", type=int, default=60)

    args = parser.parse_args(argv)
    if args.command == "init-db":
        create_tables()
    else:
        print(issue_token(args.actor_id, args.role, args.name, args.minutes))


if __name__ == "__main__":
    main()
