"""CLI argument parsing and uvicorn entry point."""

import logging
import os


def main():
    import argparse
    import uvicorn

    parser = argparse.ArgumentParser(description="Trackline API Server")
    parser.add_argument("--host", default=os.getenv("TRACKLINE_HOST", "0.0.0.0"))
    parser.add_argument("--port", type=int, default=int(os.getenv("TRACKLINE_PORT", "8000")))
    parser.add_argument("--config", default=None, help="YAML config path (overrides TRACKLINE_CONFIG)")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(levelname)s: %(name)s - %(message)s",
    )

    if args.config:
        os.environ["TRACKLINE_CONFIG"] = args.config

    from .app import api
    uvicorn.run(api, host=args.host, port=args.port)


if __name__ == "__main__":
    main()
