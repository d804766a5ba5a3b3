"""Top-level scheduler: tests every configured site concurrently."""

import asyncio
import logging
from collections.abc import Mapping, Sequence
from dataclasses import dataclass
from datetime import datetime, timezone

from stashcache_tester.models.config import EndpointTarget, HarnessConfig, TestSet
from stashcache_tester.models.result import EndpointResult, SiteReport
from stashcache_tester.orchestrator import EndpointOrchestrator

log = logging.getLogger(__name__)


@dataclass(frozen=True, kw_only=True)
class Scheduler:
    """Fans out one task per site and one orchestrator run per endpoint."""

    orchestrator: EndpointOrchestrator

    async def run(self, config: HarnessConfig) -> Mapping[str, SiteReport]:
        """Test all sites in ``config``.

        Sites run concurrently with each other. A failure inside one site
        never affects the report of another.

        Returns:
            Site reports keyed by site label, in configuration order

        """
        sites = config.by_site()
        if not sites:
            log.info("No test sets configured")
            return {}

        log.info("Testing %d site(s)...", len(sites))
        results = await asyncio.gather(
            *(self._run_site(site, endpoints) for site, endpoints in sites.items()),
            return_exceptions=True,
        )
        log.info("Testing completed")

        return self._process_results(list(sites), results)

    def _process_results(
        self,
        sites: Sequence[str],
        results: Sequence[SiteReport | BaseException],
    ) -> Mapping[str, SiteReport]:
        """Pair results with their site, converting exceptions to failures."""
        reports: dict[str, SiteReport] = {}

        for site, result in zip(sites, results, strict=True):
            if isinstance(result, SiteReport):
                reports[site] = result
            elif isinstance(result, Exception):
                log.error("Site %s failed to run: %s", site, result, exc_info=result)
                reports[site] = SiteReport(site=site, error=str(result))
            else:
                raise result

        return reports

    async def _run_site(
        self,
        site: str,
        endpoints: Mapping[EndpointTarget, Sequence[TestSet]],
    ) -> SiteReport:
        """Run every endpoint of one site and report once all are done."""
        log.info("Testing endpoint %s", site)

        outcomes = await asyncio.gather(
            *(
                self.orchestrator.run_endpoint(endpoint, test_sets)
                for endpoint, test_sets in endpoints.items()
            ),
            return_exceptions=True,
        )

        results: list[EndpointResult] = []
        for endpoint, outcome in zip(endpoints, outcomes, strict=True):
            if isinstance(outcome, EndpointResult):
                results.append(outcome)
            elif isinstance(outcome, Exception):
                log.error(
                    "Endpoint %s failed to run: %s",
                    endpoint.address,
                    outcome,
                    exc_info=outcome,
                )
                now = datetime.now(timezone.utc)
                results.append(
                    EndpointResult(
                        endpoint=endpoint,
                        results=[],
                        started_at=now,
                        ended_at=now,
                        error=str(outcome) or type(outcome).__name__,
                    )
                )
            else:
                raise outcome

        report = SiteReport(site=site, endpoints=results)
        if report.success:
            log.info("%s passed testing", site)
        else:
            log.warning("%s failed testing: %s", site, report.failure_summary())
        return report
