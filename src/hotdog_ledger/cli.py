"""
Command-line interface for the Hot Dog Ledger bot.

Provides CLI commands for bot management:
- init-db: Initialize the database schema
- run: Start the HTTP server (Discord webhook and query API)
- register-commands: Install the slash commands with Discord
- config: Print the effective configuration

Usage:
    hotdog-ledger init-db
    hotdog-ledger run [--port PORT] [--host HOST]
    hotdog-ledger register-commands
    hotdog-ledger config

Environment Variables:
    HOTDOG_HOST: Host to bind the server (default: 0.0.0.0)
    HOTDOG_PORT: Port for the server (default: 3000)
    HOTDOG_DB_PATH: SQLite ledger file (default: data/hotdogs.db)
    HOTDOG_LOG_LEVEL: Logging level (default: INFO)
    DISCORD_APPLICATION_ID / DISCORD_BOT_TOKEN: Credentials used by
        register-commands and for editing protest messages
"""

import argparse
import logging
import sys

LOG_FORMATS = {
    "simple": "%(levelname)s %(message)s",
    "detailed": "%(asctime)s %(levelname)-8s %(name)s: %(message)s",
    "json": (
        '{"time": "%(asctime)s", "level": "%(levelname)s", '
        '"logger": "%(name)s", "message": "%(message)s"}'
    ),
}


def configure_logging(level: str | None = None) -> None:
    """Configure root logging from ``config.logging`` (level may be overridden)."""
    from hotdog_ledger.config import config

    logging.basicConfig(
        level=(level or config.logging.level).upper(),
        format=LOG_FORMATS.get(config.logging.format, LOG_FORMATS["detailed"]),
        force=True,
    )


def cmd_init_db(args: argparse.Namespace) -> int:
    """
    Initialize the database schema.

    Returns:
        0 on success, 1 on error
    """
    from hotdog_ledger.db.schema import init_database

    try:
        init_database()
        print("Database initialized successfully.")
        return 0
    except Exception as e:
        print(f"Error initializing database: {e}", file=sys.stderr)
        return 1


def cmd_run(args: argparse.Namespace) -> int:
    """
    Run the HTTP server.

    Ensures the schema exists, then serves the Discord interactions webhook
    and the query API under uvicorn until interrupted.

    Configuration Priority:
        1. CLI arguments (--port, --host)
        2. Environment variables (HOTDOG_PORT, HOTDOG_HOST)
        3. config/server.ini
        4. Default values (3000, 0.0.0.0)

    Returns:
        0 on clean shutdown, 1 on startup error
    """
    from hotdog_ledger.api.server import start_server
    from hotdog_ledger.db.schema import init_database

    try:
        init_database()
    except Exception as e:
        print(f"Error initializing database: {e}", file=sys.stderr)
        return 1

    try:
        start_server(host=getattr(args, "host", None), port=getattr(args, "port", None))
    except KeyboardInterrupt:
        print("\nShutting down...")
    return 0


def cmd_register_commands(args: argparse.Namespace) -> int:
    """
    Install the bot's slash commands as global application commands.

    Returns:
        0 on success, 1 on error
    """
    from hotdog_ledger.interactions.registration import ALL_COMMANDS, register_global_commands

    ok, error = register_global_commands()
    if not ok:
        print(f"Error registering commands: {error}", file=sys.stderr)
        return 1
    names = ", ".join(command["name"] for command in ALL_COMMANDS)
    print(f"Registered commands: {names}")
    return 0


def cmd_config(args: argparse.Namespace) -> int:
    """Print the effective configuration."""
    from hotdog_ledger.config import print_config_summary

    print_config_summary()
    return 0


def main(argv: list[str] | None = None) -> int:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="hotdog-ledger",
        description="Hot Dog Ledger - track, contest and rank hot dog consumption",
    )
    parser.add_argument(
        "--log-level",
        type=str,
        help="Override the configured log level (e.g. DEBUG)",
    )
    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init-db command
    init_parser = subparsers.add_parser(
        "init-db",
        help="Initialize the database schema",
        description="Create the ledger table, totals view, protest table and triggers.",
    )
    init_parser.set_defaults(func=cmd_init_db)

    # run command
    run_parser = subparsers.add_parser(
        "run",
        help="Run the bot's HTTP server",
        description="Serve the Discord interactions webhook and the read-only query API.",
    )
    run_parser.add_argument(
        "--port",
        "-p",
        type=int,
        help="Server port (default: 3000, or HOTDOG_PORT env var)",
    )
    run_parser.add_argument(
        "--host",
        type=str,
        help="Host to bind to (default: 0.0.0.0, or HOTDOG_HOST env var)",
    )
    run_parser.set_defaults(func=cmd_run)

    # register-commands command
    register_parser = subparsers.add_parser(
        "register-commands",
        help="Register slash commands with Discord",
        description=(
            "Bulk-overwrite the application's global slash commands. "
            "Requires DISCORD_APPLICATION_ID and DISCORD_BOT_TOKEN."
        ),
    )
    register_parser.set_defaults(func=cmd_register_commands)

    # config command
    config_parser = subparsers.add_parser("config", help="Show the effective configuration")
    config_parser.set_defaults(func=cmd_config)

    args = parser.parse_args(argv)

    if args.command is None:
        parser.print_help()
        return 0

    configure_logging(args.log_level)
    return args.func(args)


if __name__ == "__main__":
    sys.exit(main())
