from __future__ import annotations

import argparse
import logging

import uvicorn

from roastmaster.internal_core.config import load_config


def _build_parser() -> argparse.ArgumentParser:
    cfg = load_config()
    parser = argparse.ArgumentParser(description="Run the AI Roast Master API server.")
    parser.add_argument("--host", default=cfg.ROAST_HOST, help="Bind address (default: ROAST_HOST).")
    parser.add_argument("--port", type=int, default=cfg.PORT, help="Listen port (default: PORT).")
    parser.add_argument(
        "--log-level",
        default=cfg.ROAST_LOG_LEVEL,
        help="Python log level (default: ROAST_LOG_LEVEL).",
    )
    return parser


def main(argv: list[str] | None = None) -> int:
    args = _build_parser().parse_args(argv)
    level = str(args.log_level or "INFO").upper()
    logging.basicConfig(
        level=level,
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
    )
    logger = logging.getLogger("roastmaster")
    logger.info("AI Roast Master API starting on http://%s:%d", args.host, args.port)
    logger.info("health: http://localhost:%d/api/health", args.port)

    uvicorn.run(
        "roastmaster.api.main:app",
        host=args.host,
        port=int(args.port),
        log_level=level.lower(),
    )
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
