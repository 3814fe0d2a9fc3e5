#!/usr/bin/env python3
"""
PhotoShare CLI - Main entry point.

Usage:
    photoshare serve [--config photoshare.yaml]   # Run the gateway
    photoshare init-db                            # Create store tables
    photoshare schema                             # Print the GraphQL SDL
"""

from __future__ import annotations

import argparse
import asyncio
import logging
import sys
from typing import List, Optional

from ..config import Settings, load_settings
from ..core.schema import TYPE_DEFS
from ..store import create_store


def _settings_from(args: argparse.Namespace) -> Settings:
    return load_settings(
        getattr(args, "config", None),
        host=getattr(args, "host", None),
        port=getattr(args, "port", None),
        database_url=getattr(args, "database_url", None),
    )


def cmd_serve(args: argparse.Namespace) -> int:
    """Run the gateway with uvicorn."""
    import uvicorn

    from ..gateway import Gateway

    settings = _settings_from(args)
    logging.basicConfig(
        level=settings.log_level.upper(),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    gateway = Gateway(settings)
    print(f"Starting {settings.title} on http://{settings.host}:{settings.port}{settings.graphql_path}")
    uvicorn.run(
        gateway.app,
        host=settings.host,
        port=settings.port,
        timeout_keep_alive=settings.idle_timeout,
        log_level=settings.log_level.lower(),
    )
    return 0


def cmd_init_db(args: argparse.Namespace) -> int:
    """Create the document table in the configured database."""
    settings = _settings_from(args)
    if not settings.database_url:
        print("Error: no database_url configured; the in-memory store needs no setup.")
        return 1

    async def _init() -> None:
        store = create_store(settings.database_url)
        try:
            await store.init()
        finally:
            await store.close()

    try:
        asyncio.run(_init())
    except Exception as e:
        print(f"Error initializing database: {e}")
        return 1

    print("Database initialized!")
    return 0


def cmd_schema(args: argparse.Namespace) -> int:
    """Print the GraphQL schema."""
    print(TYPE_DEFS.strip())
    return 0


def create_parser() -> argparse.ArgumentParser:
    """Create CLI argument parser."""
    parser = argparse.ArgumentParser(
        prog="photoshare",
        description="PhotoShare - GraphQL API for sharing and tagging photos"
    )
    parser.add_argument("--version", action="version", version="%(prog)s 0.1.0")

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # serve
    serve_parser = subparsers.add_parser("serve", help="Run the gateway")
    serve_parser.add_argument("--config", "-c", help="YAML settings file")
    serve_parser.add_argument("--host", help="Bind address")
    serve_parser.add_argument("--port", "-p", type=int, help="Listen port")
    serve_parser.add_argument("--database-url", help="SQLAlchemy async database URL")

    # init-db
    init_parser = subparsers.add_parser("init-db", help="Create store tables")
    init_parser.add_argument("--config", "-c", help="YAML settings file")
    init_parser.add_argument("--database-url", help="SQLAlchemy async database URL")

    # schema
    subparsers.add_parser("schema", help="Print the GraphQL schema")

    return parser


def app(args: Optional[List[str]] = None) -> int:
    """Main CLI application."""
    parser = create_parser()
    parsed = parser.parse_args(args)

    if not parsed.command:
        parser.print_help()
        return 0

    commands = {
        "serve": cmd_serve,
        "init-db": cmd_init_db,
        "schema": cmd_schema,
    }

    handler = commands.get(parsed.command)
    if handler:
        return handler(parsed)

    parser.print_help()
    return 1


def main() -> None:
    """Entry point for CLI."""
    sys.exit(app())


if __name__ == "__main__":
    main()
