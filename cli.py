#!/usr/bin/env python3
"""
Command-line interface for the KIVO storefront.

Usage:
    python cli.py [command] [options]

Commands:
    demo        Run demo scenarios
    test        Run the test suite
    serve       Start the API server
    init-db     Create the database schema

Examples:
    python cli.py demo flash-sale
    python cli.py serve --reload
"""

import argparse
import subprocess
import sys


def run_demo(scenario: str) -> None:
    """Run a demo scenario."""
    if scenario == "flash-sale":
        from storefront.demo import run_flash_sale_demo
        run_flash_sale_demo()
    elif scenario == "validation":
        from storefront.demo import run_validation_demo
        run_validation_demo()
    elif scenario == "all":
        from storefront.demo import run_flash_sale_demo, run_validation_demo
        run_flash_sale_demo()
        run_validation_demo()
    else:
        print(f"Unknown scenario: {scenario}")
        sys.exit(1)


def run_init_db(database_url: str) -> None:
    """Create all tables in the configured database."""
    from store.sql_store import SqlStore

    SqlStore(database_url).create_schema()
    print(f"Schema ready at {database_url}")


def run_tests(args: list[str]) -> None:
    """Run the test suite."""
    cmd = [sys.executable, "-m", "pytest"] + args
    sys.exit(subprocess.run(cmd).returncode)


def run_server(host: str, port: int, reload: bool) -> None:
    """Start the API server."""
    cmd = [sys.executable, "-m", "uvicorn", "api.main:app", f"--host={host}", f"--port={port}"]
    if reload:
        cmd.append("--reload")

    print(f"Starting server at http://{host}:{port}")
    print(f"API docs available at http://{host}:{port}/docs")
    subprocess.run(cmd)


def main() -> None:
    """Main CLI entry point."""
    from store.config import settings

    parser = argparse.ArgumentParser(
        description="KIVO Storefront CLI",
        formatter_class=argparse.RawDescriptionHelpFormatter,
        epilog="""
Examples:
  %(prog)s demo flash-sale
  %(prog)s demo all
  %(prog)s init-db
  %(prog)s test -v
  %(prog)s serve --reload
        """,
    )

    subparsers = parser.add_subparsers(dest="command", help="Command to run")

    # Demo command
    demo_parser = subparsers.add_parser("demo", help="Run demo scenarios")
    demo_parser.add_argument(
        "scenario",
        choices=["flash-sale", "validation", "all"],
        help="Which scenario to run",
    )

    # Init-db command
    init_parser = subparsers.add_parser("init-db", help="Create the database schema")
    init_parser.add_argument("--database-url", default=settings.DATABASE_URL, help="SQLAlchemy database URL")

    # Test command
    test_parser = subparsers.add_parser("test", help="Run the test suite")
    test_parser.add_argument(
        "pytest_args",
        nargs="*",
        default=[],
        help="Arguments to pass to pytest",
    )

    # Serve command
    serve_parser = subparsers.add_parser("serve", help="Start the API server")
    serve_parser.add_argument("--host", default="127.0.0.1", help="Host to bind to")
    serve_parser.add_argument("--port", type=int, default=8000, help="Port to bind to")
    serve_parser.add_argument("--reload", action="store_true", help="Enable auto-reload")

    args = parser.parse_args()

    if args.command == "demo":
        run_demo(args.scenario)
    elif args.command == "init-db":
        run_init_db(args.database_url)
    elif args.command == "test":
        run_tests(args.pytest_args)
    elif args.command == "serve":
        run_server(args.host, args.port, args.reload)
    else:
        parser.print_help()


if __name__ == "__main__":
    main()
