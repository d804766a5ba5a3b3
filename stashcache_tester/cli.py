"""CLI entry point for the cache endpoint tester."""

import argparse
import asyncio
import json
import logging
import sys
from collections.abc import AsyncGenerator, Iterable
from contextlib import asynccontextmanager
from pathlib import Path
from typing import Any

from stashcache_tester.config_loader import load_harness_config
from stashcache_tester.loading import (
    BackendNotFoundError,
    load_transfer_manifest,
    load_verifier_manifest,
)
from stashcache_tester.models.result import SiteReport
from stashcache_tester.orchestrator import EndpointOrchestrator, FailurePolicy
from stashcache_tester.runner import TestSetRunner
from stashcache_tester.scheduler import Scheduler
from stashcache_tester.telemetry import (
    DEFAULT_COLLECTOR_URL,
    HttpTelemetryEmitter,
    NullTelemetryEmitter,
    TelemetryConfig,
    TelemetryEmitter,
)
from stashcache_tester.transfer.invoker import DEFAULT_DEADLINE, TransferInvoker

EXIT_CONFIG_ERROR = 2

STATUS_SYMBOLS = {
    "passed": "✅",
    "failed": "❌",
}


def _status(success: bool) -> str:
    return "passed" if success else "failed"


def log_results_summary(log: logging.Logger, reports: Iterable[SiteReport]) -> None:
    """Log a formatted summary of site results with failing test sets."""
    log.info("=" * 80)
    log.info("Test Results Summary:")
    log.info("=" * 80)

    for report in reports:
        status = _status(report.success)
        log.info("%s %s: %s", STATUS_SYMBOLS[status], report.site, status)
        if report.error:
            log.info("  Error: %s", report.error)
        for endpoint in report.endpoints:
            log.info(
                "  %s: %s (%.2fs)",
                endpoint.endpoint.address,
                _status(endpoint.success),
                endpoint.duration,
            )
            if endpoint.error:
                log.info("    Error: %s", endpoint.error)
            for failed in endpoint.failed_sets:
                log.info(
                    "    %s failed at %s: %s",
                    failed.test_set.name,
                    failed.failure_stage,
                    failed.message,
                )


def format_output(reports: Iterable[SiteReport]) -> dict[str, Any]:
    """Format site reports for JSON output."""
    sites: list[dict[str, Any]] = []
    for report in reports:
        sites.append(
            {
                "site": report.site,
                "status": _status(report.success),
                "message": report.failure_summary(),
                "endpoints": [
                    {
                        "endpoint": endpoint.endpoint.address,
                        "status": _status(endpoint.success),
                        "duration": endpoint.duration,
                        "failed_sets": [
                            result.test_set.name for result in endpoint.failed_sets
                        ],
                    }
                    for endpoint in report.endpoints
                ],
            }
        )

    return {
        "total": len(sites),
        "passed": sum(1 for s in sites if s["status"] == "passed"),
        "failed": sum(1 for s in sites if s["status"] == "failed"),
        "sites": sites,
    }


def _parse_backend_config(config_json: str) -> dict[str, Any]:
    """Decode a backend config given on the command line.

    Raises:
        ValueError: If the text is not a JSON object

    """
    config = json.loads(config_json)
    if not isinstance(config, dict):
        raise ValueError(
            f"Backend config must be a JSON object, got {type(config).__name__}"
        )
    return config


@asynccontextmanager
async def open_telemetry(
    collector_url: str | None,
) -> AsyncGenerator[TelemetryEmitter, None]:
    """Open the HTTP emitter, or a null emitter when reporting is disabled."""
    if collector_url is None:
        yield NullTelemetryEmitter()
        return
    async with HttpTelemetryEmitter.from_config(
        TelemetryConfig(collector_url=collector_url)
    ) as emitter:
        yield emitter


async def run(
    config_path: Path,
    transfer_key: str = "xrootd",
    transfer_config_json: str = "{}",
    verifier_key: str = "sha256sum",
    verifier_config_json: str = "{}",
    collector_url: str | None = DEFAULT_COLLECTOR_URL,
    failure_policy: FailurePolicy = "continue",
    deadline: float = DEFAULT_DEADLINE,
    work_dir: Path | None = None,
) -> int:
    """Run the endpoint tests and return exit code."""
    log = logging.getLogger("stashcache_tester")

    try:
        log.info("Loading site config: %s", config_path)
        config = await load_harness_config(config_path)

        log.info("Loading transfer client: %s", transfer_key)
        transfer_manifest = load_transfer_manifest(transfer_key)
        transfer_config = transfer_manifest.config_cls(
            **_parse_backend_config(transfer_config_json)
        )

        log.info("Loading verifier: %s", verifier_key)
        verifier_manifest = load_verifier_manifest(verifier_key)
        verifier_config = verifier_manifest.config_cls(
            **_parse_backend_config(verifier_config_json)
        )
    except (FileNotFoundError, ValueError, BackendNotFoundError) as exc:
        log.error("%s", exc)
        return EXIT_CONFIG_ERROR

    if not config.test_sets:
        log.info("No test sets configured")
        print(json.dumps(format_output([])))
        return 0

    async with (
        transfer_manifest.factory(transfer_config) as client,
        verifier_manifest.factory(verifier_config) as verifier,
        open_telemetry(collector_url) as telemetry,
    ):
        runner = TestSetRunner(
            transfer=TransferInvoker(client=client, deadline=deadline),
            verifier=verifier,
            telemetry=telemetry,
        )
        orchestrator = EndpointOrchestrator(
            runner=runner,
            telemetry=telemetry,
            failure_policy=failure_policy,
            work_root=work_dir,
        )
        reports = await Scheduler(orchestrator=orchestrator).run(config)

    log_results_summary(log, reports.values())
    print(json.dumps(format_output(reports.values()), indent=2))

    return 0 if all(report.success for report in reports.values()) else 1


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Download and verify test sets from cache endpoints"
    )
    parser.add_argument(
        "--config",
        type=Path,
        default=Path("siteconfig.json"),
        help="Site configuration file (JSON, or YAML for .yaml/.yml)",
    )
    parser.add_argument(
        "--transfer",
        default="xrootd",
        help="Transfer client key (xrootd, http)",
    )
    parser.add_argument(
        "--transfer-config",
        default="{}",
        help="JSON configuration for the transfer client",
    )
    parser.add_argument(
        "--verifier",
        default="sha256sum",
        help="Verifier key (sha256sum, hashlib)",
    )
    parser.add_argument(
        "--verifier-config",
        default="{}",
        help="JSON configuration for the verifier",
    )
    parser.add_argument(
        "--collector-url",
        default=DEFAULT_COLLECTOR_URL,
        help="Metrics collector receiving telemetry records",
    )
    parser.add_argument(
        "--no-telemetry",
        action="store_true",
        help="Do not send telemetry records",
    )
    parser.add_argument(
        "--failure-policy",
        choices=["continue", "abort"],
        default="continue",
        help="Whether an endpoint keeps running test sets after one fails",
    )
    parser.add_argument(
        "--deadline",
        type=float,
        default=DEFAULT_DEADLINE,
        help="Seconds allowed for each file transfer",
    )
    parser.add_argument(
        "--work-dir",
        type=Path,
        default=None,
        help="Parent directory for scratch directories (system temp by default)",
    )

    args = parser.parse_args()

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
        stream=sys.stderr,
    )

    exit_code = asyncio.run(
        run(
            config_path=args.config,
            transfer_key=args.transfer,
            transfer_config_json=args.transfer_config,
            verifier_key=args.verifier,
            verifier_config_json=args.verifier_config,
            collector_url=None if args.no_telemetry else args.collector_url,
            failure_policy=args.failure_policy,
            deadline=args.deadline,
            work_dir=args.work_dir,
        )
    )
    sys.exit(exit_code)


if __name__ == "__main__":  # pragma: no cover
    main()
