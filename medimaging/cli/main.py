#!/usr/bin/env python3
"""MedImaging CLI - management utility for the MedImaging backend."""

import argparse
import getpass
import sys
from pathlib import Path

from medimaging.settings import settings
from medimaging.utils.auth import get_password_hash
from medimaging.utils.logger import logger

SETTINGS_TEMPLATE = """# MedImaging Configuration File

# Server settings
port = 5000
host = "127.0.0.1"
environment = "development"

# PACS settings
pacs_url = "http://localhost:8080/pacs"
pacs_direct_url = "http://localhost:8042"
pacs_username = "orthanc"
pacs_password = "orthanc"

# Upload settings
upload_dir = "./uploads/dicom"

# Security (change in production!)
jwt_secret_key = "change-this-secret-key-in-production"
auth_required = false
"""

ENV_TEMPLATE = """# Environment variables (optional)
# MEDIMAGING_PACS_DIRECT_URL=http://orthanc:8042
# MEDIMAGING_JWT_SECRET_KEY=your-secret-key
"""


def init_project(path: str) -> None:
    """Initialize a MedImaging deployment directory."""
    project_path = Path(path).resolve()

    upload_dir = project_path / "uploads" / "dicom"
    upload_dir.mkdir(parents=True, exist_ok=True)
    logger.info(f"Created directory: {upload_dir}")

    settings_file = project_path / "settings.toml"
    if not settings_file.exists():
        settings_file.write_text(SETTINGS_TEMPLATE)
        logger.info(f"Created settings file: {settings_file}")
    else:
        logger.info(f"Keeping existing settings file: {settings_file}")

    env_file = project_path / ".env.example"
    env_file.write_text(ENV_TEMPLATE)
    logger.info(f"Created .env.example: {env_file}")

    logger.info(f"Project initialized at {project_path}")


def run_server(host: str | None = None, port: int | None = None, reload: bool = False) -> None:
    """Run the MedImaging server."""
    import uvicorn

    host = host or settings.host
    port = port or settings.port

    logger.info(f"Starting MedImaging server at http://{host}:{port}")
    logger.info(f"Health check: http://{host}:{port}/health")

    uvicorn.run(
        "medimaging.api.app:app",
        host=host,
        port=port,
        reload=reload,
        log_level="debug" if settings.debug else "info",
    )


def hash_password(password: str | None) -> None:
    """Print a bcrypt hash for a password, prompting if none is given."""
    if not password:
        password = getpass.getpass("Enter password: ")
        confirm = getpass.getpass("Confirm password: ")
        if password != confirm:
            logger.error("Passwords do not match")
            sys.exit(1)
    print(get_password_hash(password, rounds=settings.bcrypt_rounds))


def main(argv: list[str] | None = None) -> None:
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="medimaging", description="MedImaging CLI - medical imaging portal backend"
    )

    subparsers = parser.add_subparsers(dest="command", help="Available commands")

    # init command
    init_parser = subparsers.add_parser("init", help="Create settings and upload directory")
    init_parser.add_argument(
        "path",
        nargs="?",
        default=".",
        help="Path where to create the project (default: current directory)",
    )

    # run command
    run_parser = subparsers.add_parser("run", help="Run the server")
    run_parser.add_argument("--host", type=str, default=None, help="Host to bind to")
    run_parser.add_argument("--port", type=int, default=None, help="Port to bind to")
    run_parser.add_argument("--reload", action="store_true", help="Reload on code changes")

    # hash-password command
    hash_parser = subparsers.add_parser("hash-password", help="Print a bcrypt password hash")
    hash_parser.add_argument(
        "--password", type=str, default=None, help="Password (will prompt if not provided)"
    )

    args = parser.parse_args(argv)

    if args.command == "init":
        init_project(args.path)
    elif args.command == "run":
        run_server(args.host, args.port, args.reload)
    elif args.command == "hash-password":
        hash_password(args.password)
    else:
        parser.print_help()
        sys.exit(1)


if __name__ == "__main__":
    main()
