#!/usr/bin/env python3
# -*- coding: utf-8 -*-
"""
Tag registry server.

Usage:
  tag-registry [--port 9090] [--dir ./data] [--prefix api] [--host 0.0.0.0]
               [--config config.yaml] [--log-level INFO]

Notes:
- Flags override TAG_REGISTRY_* env vars, which override config.yaml.
- The data directory and the SQLite schema are created on startup; if that
  fails the process exits with status 1.
"""
from __future__ import annotations

import argparse
import logging
import sys

import uvicorn

from .api import create_app
from .config import load_settings
from .db import get_db_path
from .logs import configure_logging
from .services.tag_svc import StoreError, TagStore

logger = logging.getLogger("tag_registry")


def build_parser() -> argparse.ArgumentParser:
    ap = argparse.ArgumentParser(prog="tag-registry", description="name:tag registry HTTP server")
    ap.add_argument("--port", type=int, default=None, help="server port, default 9090")
    ap.add_argument("--dir", dest="data_dir", default=None, help="server data dir, default ./data")
    ap.add_argument("--prefix", default=None, help="server api prefix, default api")
    ap.add_argument("--host", default=None, help="bind address, default 0.0.0.0")
    ap.add_argument("--config", default=None, help="path to config.yaml")
    ap.add_argument("--log-level", default="INFO", help="logging level, default INFO")
    return ap


def main(argv: list[str] | None = None) -> int:
    args = build_parser().parse_args(argv)
    configure_logging(args.log_level)

    try:
        settings = load_settings(
            args.config,
            host=args.host,
            port=args.port,
            data_dir=args.data_dir,
            prefix=args.prefix,
        )
    except (OSError, ValueError) as e:
        logger.error("invalid configuration: %s", e)
        return 1

    logger.info("server start up with api prefix: %s", settings.prefix)
    db_path = get_db_path(settings.data_dir)
    logger.info("sqlite db path: %s", db_path)

    store = TagStore(db_path)
    try:
        store.ensure_schema()
    except StoreError as e:
        logger.error("%s", e)
        return 1

    app = create_app(settings, store)
    logger.info("running on port %d, save data in directory %s", settings.port, settings.data_dir)
    uvicorn.run(app, host=settings.host, port=settings.port, log_level=args.log_level.lower())
    return 0


if __name__ == "__main__":
    sys.exit(main())
