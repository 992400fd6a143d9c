#!/usr/bin/env python3
"""
WireGuard Prometheus Exporter

Runs 'wg show <interface> dump' on every scrape and exposes per-peer metrics,
optionally labelled with friendly names taken from the WireGuard config.
"""

import logging
import sys
from typing import List, Optional

from fastapi import FastAPI, HTTPException
from fastapi.responses import PlainTextResponse

from . import __version__
from .collector import scrape
from .errors import ExporterError
from .options import Options, parse_options

logger = logging.getLogger('wireguard_exporter')

CONTENT_TYPE = 'text/plain; version=0.0.4; charset=utf-8'
SCRAPE_FAILED = 'scrape failed, see the exporter log'


def setup_logging(verbose: bool) -> None:
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    if not logger.handlers:
        h = logging.StreamHandler(stream=sys.stdout)
        h.setFormatter(logging.Formatter('%(asctime)s %(levelname)s %(message)s'))
        logger.addHandler(h)


def create_app(options: Options) -> FastAPI:
    app = FastAPI(title="Prometheus WireGuard Exporter", docs_url=None, redoc_url=None)
    app.state.options = options

    # sync handlers: FastAPI runs them in its threadpool, each scrape is independent
    @app.get("/metrics", response_class=PlainTextResponse)
    def metrics():
        try:
            body = scrape(app.state.options)
        except ExporterError as e:
            logger.error("scrape failed: %s", type(e).__name__)
            logger.debug("scrape error: %s", e)
            raise HTTPException(status_code=500, detail=SCRAPE_FAILED)
        return PlainTextResponse(body, media_type=CONTENT_TYPE)

    @app.get("/health", response_class=PlainTextResponse)
    def health():
        return 'OK'

    return app


def main(argv: Optional[List[str]] = None):
    import uvicorn

    options = parse_options(argv)
    setup_logging(options.verbose)

    logger.info("prometheus_wireguard_exporter v%s starting...", __version__)
    logger.info("using options: %r", options)
    logger.info("Metrics available at http://%s:%d/metrics", options.addr, options.port)

    uvicorn.run(
        create_app(options),
        host=options.addr,
        port=options.port,
        log_level='debug' if options.verbose else 'info',
        access_log=options.verbose,
    )


if __name__ == '__main__':
    main()
