#!/usr/bin/env python3
"""
TasksCompleted -- command line entry point.

Usage:
  python main.py serve [--reload]
  python main.py seed-admin --email admin@example.com --name Admin --password s3cret
  python main.py check-config

Environment variables (see core/config.py for the full list):
  SECRET_KEY     Required. JWT signing secret, at least 32 characters.
  DATABASE_URL   SQLAlchemy URL. Default sqlite:///./taskscompleted.db
  HOST / PORT    Listen address for `serve`. Default 127.0.0.1:3000
"""

import argparse
import sys

from pydantic import ValidationError

from core.config import Settings, get_settings


def _load_settings() -> Settings:
    try:
        return get_settings()
    except ValidationError as e:
        print("  [!] Invalid configuration:")
        for err in e.errors():
            field = ".".join(str(p) for p in err["loc"]) or "settings"
            print(f"      {field}: {err['msg']}")
        sys.exit(1)


def cmd_serve(args: argparse.Namespace) -> int:
    import uvicorn

    settings = _load_settings()
    uvicorn.run(
        "asgi:app",
        host=settings.host,
        port=settings.port,
        reload=args.reload,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_seed_admin(args: argparse.Namespace) -> int:
    from auth.models import Role
    from auth.service import create_user
    from auth.store import UserStore
    from core.database import Database
    from core.errors import AppError

    settings = _load_settings()
    db = Database(settings.database_url, timeout=settings.db_timeout_seconds)
    try:
        user = create_user(UserStore(db.engine), settings, args.email, args.password, args.name, role=Role.ADMIN)
    except AppError as e:
        print(f"  [!] {e.message}")
        return 1
    finally:
        db.close()
    print(f"  Admin created: id={user.id} email={user.email}")
    return 0


def cmd_check_config(args: argparse.Namespace) -> int:
    from sqlalchemy.engine import make_url

    settings = _load_settings()
    print("  Configuration OK")
    print(f"  database_url     {make_url(settings.database_url).render_as_string(hide_password=True)}")
    print(f"  listen           {settings.host}:{settings.port}")
    print(f"  token lifetime   {settings.token_expires_in}s")
    print(f"  cors origins     {', '.join(settings.allowed_origins) or '(none)'}")
    print(f"  dev endpoints    {'on' if settings.enable_dev_endpoints else 'off'}")
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="taskscompleted",
        description="TasksCompleted task-tracking API.",
    )
    sub = parser.add_subparsers(dest="command", required=True)

    serve = sub.add_parser("serve", help="Run the HTTP API with uvicorn")
    serve.add_argument("--reload", action="store_true", help="Reload on code changes (development)")
    serve.set_defaults(func=cmd_serve)

    seed = sub.add_parser("seed-admin", help="Create an ADMIN user")
    seed.add_argument("--email", required=True)
    seed.add_argument("--name", required=True)
    seed.add_argument("--password", required=True)
    seed.set_defaults(func=cmd_seed_admin)

    check = sub.add_parser("check-config", help="Validate environment configuration and exit")
    check.set_defaults(func=cmd_check_config)

    return parser


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
