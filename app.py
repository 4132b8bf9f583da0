# app.py

# --- Imports ---
import argparse

import uvicorn

# --- Argument Parsing ---
parser = argparse.ArgumentParser(description="VaultGuard will registry API.")
parser.add_argument("--host", default="127.0.0.1", help="Interface to bind.")
parser.add_argument("--port", type=int, default=3000, help="Port to listen on.")
parser.add_argument(
    "--log-level",
    default="info",
    choices=["critical", "error", "warning", "info", "debug"],
    help="Server log level. Application logging follows VAULTGUARD_LOG_LEVEL.",
)
parser.add_argument("--reload", action="store_true", help="Reload on code changes.")


def main(argv=None):
    args = parser.parse_args(argv)
    print(f"--- VaultGuard API starting on {args.host}:{args.port} ---")
    uvicorn.run(
        "vaultguard.main:app",
        host=args.host,
        port=args.port,
        log_level=args.log_level,
        reload=args.reload,
    )


if __name__ == "__main__":
    main()
