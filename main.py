"""
HR Sourcing Agent - CLI Entry Point.

Commands:
    serve                      Run the API server
    add-user                   Register a recruiter and their sourcing agent
    token <external_user_id>   Print the x-token to configure on the search tool
"""

import argparse
import sys

from dotenv import load_dotenv

load_dotenv()

from backend.config import settings  # noqa: E402
from backend.logging_config import setup_logging  # noqa: E402


def serve(args: argparse.Namespace) -> None:
    import uvicorn

    uvicorn.run("backend.api.app:app", host=args.host, port=args.port, reload=args.reload)


def add_user(args: argparse.Namespace) -> None:
    from backend.db import User, init_db, session_scope
    from backend.security import encrypt

    init_db()
    with session_scope() as db:
        user = db.query(User).filter(User.external_id == args.external_id).first()
        if user is None:
            user = User(external_id=args.external_id)
            db.add(user)
        user.email = args.email
        user.display_name = args.name or args.email.split("@")[0]
        user.agent_api_key = encrypt(args.api_key)
        user.sourcing_agent_id = args.agent_id
        db.commit()
        print(f"Saved user {user.external_id} ({user.email})")
        print(f"x-token: {encrypt(user.external_id)}")


def token(args: argparse.Namespace) -> None:
    from backend.security import encrypt

    print(encrypt(args.external_id))


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description="HR Sourcing Agent")
    sub = parser.add_subparsers(dest="command", required=True)

    p_serve = sub.add_parser("serve", help="Run the API server")
    p_serve.add_argument("--host", default="0.0.0.0")
    p_serve.add_argument("--port", type=int, default=8000)
    p_serve.add_argument("--reload", action="store_true")
    p_serve.set_defaults(func=serve)

    p_user = sub.add_parser("add-user", help="Register a recruiter")
    p_user.add_argument("--external-id", required=True, help="Agent platform user id")
    p_user.add_argument("--email", required=True)
    p_user.add_argument("--name", default="")
    p_user.add_argument("--api-key", required=True, help="Agent platform API key (stored encrypted)")
    p_user.add_argument("--agent-id", required=True, help="Sourcing agent id")
    p_user.set_defaults(func=add_user)

    p_token = sub.add_parser("token", help="Print the x-token for a user")
    p_token.add_argument("external_id")
    p_token.set_defaults(func=token)

    args = parser.parse_args(argv)
    setup_logging(settings.log_level, settings.log_file or None)

    try:
        args.func(args)
    except ValueError as e:
        print(f"Error: {e}")
        return 1
    return 0


if __name__ == "__main__":
    sys.exit(main())
