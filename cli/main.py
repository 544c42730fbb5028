"""CLI entry point: runs the bandwidth test server or client."""

import dataclasses
import os
import sys
from typing import Optional

import click

from client.config import TestConfig
from client.orchestrator import TestOrchestrator
from common.logging_config import setup_logging
from common.types import TestReport, TransferResult
from server.config import ServerConfig

HELP_TEXT = """Small webserver and client for bandwidth testing.

\b
In server mode, GET /down accepts parameter `s` with the number of bytes
to send and POST /up swallows whatever is posted.
Example values of `s`: 1g, 20M, 123412
(lowercase units are binary, uppercase are decimal: k=1024, K=1000)

In client mode, runs the upload and download tests against --host/--port.
"""


def _describe(name: str, enabled: bool, result: Optional[TransferResult]) -> str:
    if not enabled:
        return f"{name}: skipped"
    if result is None:
        return f"{name}: failed (see log)"
    return f"{name}: {result.describe()}"


def _print_report(config: TestConfig, report: TestReport) -> bool:
    click.echo(_describe("POST", config.run_post, report.post))
    click.echo(_describe("GET", config.run_get, report.get))
    return (
        (not config.run_post or report.post is not None)
        and (not config.run_get or report.get is not None)
    )


def _build_server_config(listen_address: Optional[str], segment_size: Optional[int]) -> ServerConfig:
    config = ServerConfig.from_env()
    overrides = {}
    if listen_address is not None:
        overrides['listen_address'] = listen_address
    if segment_size is not None:
        overrides['chunk_size'] = segment_size
    return dataclasses.replace(config, **overrides)


def _build_test_config(**options) -> TestConfig:
    config = TestConfig.from_env()
    overrides = {key: value for key, value in options.items() if value is not None}
    return dataclasses.replace(config, **overrides)


@click.command(help=HELP_TEXT, context_settings={'help_option_names': ['-h', '--help']})
@click.option('--mode', type=click.Choice(['server', 'client']), default=None,
              help="'client' or 'server' [default: BWTEST_MODE or server]")
@click.option('--web.listen-address', 'listen_address', default=None,
              help='Listen address for HTTP requests [default: 0.0.0.0:8080]')
@click.option('--segment.size', 'segment_size', type=click.IntRange(min=1), default=None,
              help='Size in bytes of each write/read segment [default: 10485760]')
@click.option('--host', default=None, help='Server host for client mode [default: localhost]')
@click.option('--port', type=click.IntRange(1, 65535), default=None,
              help='Server port for client mode [default: 8080]')
@click.option('--get', 'get_size', default=None, help='Size of GET data. 1g, 2M, 4k, etc.')
@click.option('--post', 'post_size', default=None, help='Size of POST data. 1g, 2M, 4k, etc.')
@click.option('--url.get', 'get_url', default=None, help='Full URL for the download test')
@click.option('--url.post', 'post_url', default=None, help='Full URL for the upload test')
@click.option('--no-get', is_flag=True, help='Skip the download test')
@click.option('--no-post', is_flag=True, help='Skip the upload test')
@click.option('--serial', is_flag=True, help='Run POST then GET instead of concurrently')
@click.option('--log-level', default=None, help='DEBUG, INFO, WARNING or ERROR [default: LOG_LEVEL or INFO]')
@click.option('--debug', is_flag=True, help='Enable debug logging')
def main(mode, listen_address, segment_size, host, port, get_size, post_size,
         get_url, post_url, no_get, no_post, serial, log_level, debug) -> None:
    """Entry point for both roles."""
    mode = mode or os.environ.get('BWTEST_MODE', 'server')
    if mode not in ('server', 'client'):
        raise click.BadParameter(f"invalid mode {mode!r}", param_hint="'--mode'")

    log_level = 'DEBUG' if debug else log_level
    logger = setup_logging(mode, log_level=log_level)
    setup_logging('common', log_level=log_level)

    if mode == 'server':
        try:
            server_config = _build_server_config(listen_address, segment_size)
        except ValueError as e:
            raise click.UsageError(str(e))

        from server.main import run_server

        try:
            run_server(server_config)
        except Exception as e:
            logger.error(f"Server error: {e}", exc_info=True)
            raise
        return

    try:
        test_config = _build_test_config(
            host=host,
            port=port,
            get_size=get_size,
            post_size=post_size,
            chunk_size=segment_size,
            get_url=get_url,
            post_url=post_url,
        )
    except ValueError as e:
        raise click.UsageError(str(e))

    test_config = dataclasses.replace(
        test_config,
        run_get=test_config.run_get and not no_get,
        run_post=test_config.run_post and not no_post,
        parallel=test_config.parallel and not serial,
    )

    logger.info(f"Using segment size {test_config.chunk_size}")
    orchestrator = TestOrchestrator(test_config)
    try:
        report = orchestrator.run()
    finally:
        orchestrator.close()

    if not _print_report(test_config, report):
        sys.exit(1)


if __name__ == "__main__":
    main()
