"""Lead pipeline: extract, enrich, score, filter, write outreach, rank."""

import asyncio
import logging
from dataclasses import dataclass, field
from pathlib import Path
from typing import Awaitable, Iterable, Optional, Union

from lead_research.config import settings
from lead_research.enrich import EnrichmentIndex
from lead_research.models import Company, ICP, load_icp
from lead_research.oracles import (
    ClaudeExtractionOracle,
    ClaudeOutreachOracle,
    ClaudeScoreEnhancer,
    DemoExtractionOracle,
    ExtractionOracle,
    OracleResult,
    OutreachOracle,
    ScoreEnhancer,
    TemplateOutreachOracle,
    demo_companies,
    template_outreach_message,
)
from lead_research.score import ICPScorer

logger = logging.getLogger(__name__)

DEFAULT_MIN_SCORE = 0.3


@dataclass
class PipelineRun:
    """Outcome of processing one newsletter."""

    companies: list[Company] = field(default_factory=list)
    extracted_count: int = 0
    warnings: list[str] = field(default_factory=list)
    used_demo_data: bool = False
    cancelled: bool = False

    @property
    def degraded(self) -> bool:
        """True if any output came from fallback data or templates."""
        return self.used_demo_data or any(
            c.demo_data or c.outreach_fallback for c in self.companies
        )

    def warn(self, message: str):
        logger.warning(message)
        self.warnings.append(message)


def rank_companies(companies: Iterable[Company]) -> list[Company]:
    """Sort by ICP score, best first; ties keep their original order."""
    return sorted(companies, key=lambda c: c.icp_score, reverse=True)


def merge_results(batches: Iterable[Iterable[Company]]) -> list[Company]:
    """Merge results from several newsletters.

    Companies are deduplicated by normalized, case-insensitive name; the
    highest-scoring duplicate is kept (the first one seen on a tie).
    """
    best: dict[str, Company] = {}
    for batch in batches:
        for company in batch:
            key = company.dedup_key
            if key not in best or company.icp_score > best[key].icp_score:
                best[key] = company
    return rank_companies(best.values())


class LeadPipeline:
    """Process newsletters into ranked, ICP-qualified leads.

    The enrichment index and ICP are shared read-only between runs; each run
    owns the Company records it creates.
    """

    def __init__(
        self,
        enrichment_index: EnrichmentIndex,
        icp: ICP,
        extraction: ExtractionOracle,
        outreach: OutreachOracle,
        scorer: Optional[ICPScorer] = None,
        enhancer: Optional[ScoreEnhancer] = None,
        sender: Optional[str] = None,
    ):
        self.enrichment_index = enrichment_index
        self.icp = icp
        self.extraction = extraction
        self.outreach = outreach
        self.scorer = scorer or ICPScorer()
        self.enhancer = enhancer
        self.sender = sender

    async def process(
        self,
        newsletter_text: str,
        minimum_score: float = DEFAULT_MIN_SCORE,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list[Company]:
        """Return the ranked companies from one newsletter that meet the threshold."""
        run = await self.run(newsletter_text, minimum_score, cancel_event)
        return run.companies

    async def process_batch(
        self,
        newsletter_texts: Iterable[str],
        minimum_score: float = DEFAULT_MIN_SCORE,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list[Company]:
        """Process newsletters in sequence and merge their results."""
        batches = []
        for text in newsletter_texts:
            if _is_set(cancel_event):
                break
            run = await self.run(text, minimum_score, cancel_event)
            batches.append(run.companies)
        return merge_results(batches)

    async def run(
        self,
        newsletter_text: str,
        minimum_score: float = DEFAULT_MIN_SCORE,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> PipelineRun:
        """Process one newsletter and report warnings and degraded-mode output.

        Oracle failures fall back to the demo dataset (extraction) or the
        template generator (outreach). Setting ``cancel_event`` stops the run at
        the next oracle call; the companies finished so far are returned.
        """
        run = PipelineRun()

        if _is_set(cancel_event):
            run.cancelled = True
            return run

        # Step 1: Extraction
        logger.info("Step 1: Extracting companies from newsletter...")
        extraction = await self._call_oracle(
            self.extraction.name, self.extraction.extract(newsletter_text)
        )
        if extraction.ok:
            companies = extraction.value or []
        else:
            run.warn(f"Extraction failed ({extraction.error}); using demo dataset")
            companies = demo_companies()
            run.used_demo_data = True

        run.extracted_count = len(companies)
        logger.info(f"Extracted {len(companies)} companies")

        if not companies:
            logger.info("No companies found in newsletter")
            return run

        retained: list[Company] = []

        for company in companies:
            logger.info(f"Processing: {company.name}")

            # Steps 2-3: Enrichment and scoring
            try:
                self.enrichment_index.enrich(company)
                company.icp_score = self.scorer.score(company, self.icp)
            except Exception as e:
                run.warn(f"Failed to score {company.name}: {e}")
                continue

            if self.enhancer is not None:
                if _is_set(cancel_event):
                    run.cancelled = True
                    break
                await self._enhance(company, run)

            logger.info(f"ICP Score for {company.name}: {company.icp_score:.2f}")

            # Step 4: Threshold
            if company.icp_score < minimum_score:
                logger.info(
                    f"{company.name} doesn't meet minimum ICP score ({minimum_score:.2f})"
                )
                continue

            # Step 5: Outreach
            if _is_set(cancel_event):
                run.cancelled = True
                break
            await self._write_outreach(company, run)
            retained.append(company)

        # Step 6: Ranking
        run.companies = rank_companies(retained)

        if run.cancelled:
            logger.info(f"Run cancelled after {len(retained)} companies")
        logger.info(f"Final results: {len(run.companies)} companies match the ICP")
        return run

    async def _enhance(self, company: Company, run: PipelineRun):
        result = await self._call_oracle(
            self.enhancer.name, self.enhancer.enhance(company, self.icp)
        )
        if result.ok and result.value is not None:
            company.icp_score = min(max(result.value, 0.0), 1.0)
        else:
            run.warn(f"Score enhancement failed for {company.name} ({result.error})")

    async def _write_outreach(self, company: Company, run: PipelineRun):
        result = await self._call_oracle(
            self.outreach.name, self.outreach.generate(company, self.icp)
        )
        if result.ok and result.value and result.value.strip():
            company.outreach_message = result.value.strip()
            return

        reason = result.error or "empty message"
        run.warn(f"Outreach generation failed for {company.name} ({reason}); using template")
        company.outreach_message = template_outreach_message(company, self.sender)
        company.outreach_fallback = True

    async def _call_oracle(self, oracle_name: str, call: Awaitable[OracleResult]) -> OracleResult:
        """Await an oracle call; anything it raises becomes a failed result."""
        try:
            return await call
        except Exception as e:
            logger.error(f"Oracle {oracle_name} raised: {e}")
            return OracleResult.failure(oracle_name, f"unexpected error: {e}")


def _is_set(event: Optional[asyncio.Event]) -> bool:
    return event is not None and event.is_set()


def create_pipeline(
    icp_path: Union[str, Path, None] = None,
    enrichment_path: Union[str, Path, None] = None,
    use_mock: bool = False,
    icp: Optional[ICP] = None,
) -> LeadPipeline:
    """Build a pipeline from configuration files and settings.

    An ``icp`` passed in is used as-is instead of loading ``icp_path``.

    Raises:
        ICPConfigError: if the ICP cannot be loaded. Nothing else is fatal: a
            missing enrichment table gives an empty index.
    """
    if icp is None:
        icp = load_icp(icp_path or settings.icp_path)
    index = EnrichmentIndex.from_csv(enrichment_path or settings.enrichment_csv_path)

    if use_mock:
        logger.info("Using demo oracles")
        extraction = DemoExtractionOracle()
        outreach = TemplateOutreachOracle(settings.sender_name)
        enhancer = None
    else:
        extraction = ClaudeExtractionOracle()
        outreach = ClaudeOutreachOracle()
        enhancer = ClaudeScoreEnhancer() if settings.enhance_scores else None

    return LeadPipeline(
        enrichment_index=index,
        icp=icp,
        extraction=extraction,
        outreach=outreach,
        enhancer=enhancer,
        sender=settings.sender_name,
    )
