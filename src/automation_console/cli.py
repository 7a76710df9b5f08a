"""CLI entry point for Automation Console."""

import argparse
import sys


def main():
    """Main entry point for Automation Console."""
    parser = argparse.ArgumentParser(
        prog="automation-console",
        description="Automation Console - dashboard API and assistant for the business automations",
    )
    parser.add_argument(
        "--port", "-p",
        type=int,
        default=8000,
        help="Port to run the server on (default: 8000)"
    )
    parser.add_argument(
        "--host",
        default="127.0.0.1",
        help="Host to bind to (default: 127.0.0.1)"
    )
    parser.add_argument(
        "--reload",
        action="store_true",
        help="Restart the server when source files change (development)"
    )
    parser.add_argument(
        "--version", "-v",
        action="store_true",
        help="Show version and exit"
    )

    args = parser.parse_args()

    if args.version:
        from automation_console import __version__
        print(f"Automation Console v{__version__}")
        return 0

    from automation_console.app.config import APP_HOME, ensure_directories
    ensure_directories()

    print(f"""
  Automation Console
  App data:  {APP_HOME}
  Server:    http://{args.host}:{args.port}
    """)
    print("\n  Press Ctrl+C to stop the server.\n")

    # Start server
    import uvicorn
    uvicorn.run(
        "automation_console.app.main:app",
        host=args.host,
        port=args.port,
        reload=args.reload,
        log_level="info",
    )

    return 0


if __name__ == "__main__":
    sys.exit(main())
