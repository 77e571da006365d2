"""Tests for the lead pipeline."""

import asyncio

import pytest

from lead_research.enrich import EnrichmentIndex
from lead_research.models import Company, EnrichmentRecord, ICP
from lead_research.oracles import (
    ExtractionOracle,
    OracleResult,
    OutreachOracle,
    ScoreEnhancer,
    template_outreach_message,
)
from lead_research.oracles.fallback import DEMO_COMPANIES
from lead_research.pipeline import LeadPipeline, merge_results, rank_companies


def make_icp(**kwargs) -> ICP:
    """Create test ICP with defaults."""
    defaults = {
        "industry": ["FinTech"],
        "stage": ["Seed"],
        "geo": ["USA"],
        "tech_hints": ["AI"],
        "size": {
            "min_employees": 0,
            "max_employees": 1000,
            "funding_min": "$1M",
            "funding_max": "$10M",
        },
    }
    defaults.update(kwargs)
    return ICP.model_validate(defaults)


def make_company_data(**kwargs) -> dict:
    """Create extraction item with defaults."""
    defaults = {
        "company": "Acme",
        "round": "Seed",
        "amount": "$2M",
        "sector": "FinTech",
        "HQ": "Austin, USA",
        "snippet": "AI lending",
    }
    defaults.update(kwargs)
    return defaults


class StubExtraction(ExtractionOracle):
    """Returns fixed batches of companies, one batch per call."""

    name = "stub-extraction"

    def __init__(self, *batches, error=None, raises=None):
        self.batches = list(batches)
        self.error = error
        self.raises = raises
        self.calls = 0

    async def extract(self, newsletter_text):
        self.calls += 1
        if self.raises:
            raise self.raises
        if self.error:
            return OracleResult.failure(self.name, self.error)
        items = self.batches.pop(0) if self.batches else []
        return OracleResult.success([Company.model_validate(item) for item in items])


class StubOutreach(OutreachOracle):
    """Greets each company, or fails when asked to."""

    name = "stub-outreach"

    def __init__(self, fail=False, on_call=None):
        self.fail = fail
        self.on_call = on_call
        self.generated = []

    async def generate(self, company, icp):
        self.generated.append(company.name)
        if self.on_call:
            self.on_call()
        if self.fail:
            return OracleResult.failure(self.name, "model unavailable")
        return OracleResult.success(f"Hello {company.name}")


class StubEnhancer(ScoreEnhancer):
    """Returns a fixed score, or fails."""

    name = "stub-enhancer"

    def __init__(self, value=None):
        self.value = value

    async def enhance(self, company, icp):
        if self.value is None:
            return OracleResult.failure(self.name, "no score")
        return OracleResult.success(self.value)


class StubScorer:
    """Scores companies from a name lookup."""

    def __init__(self, scores):
        self.scores = scores

    def score(self, company, icp):
        return self.scores[company.name]


def make_pipeline(extraction, outreach=None, index=None, icp=None, **kwargs) -> LeadPipeline:
    """Create test pipeline with stub oracles."""
    return LeadPipeline(
        enrichment_index=index or EnrichmentIndex(),
        icp=icp or make_icp(),
        extraction=extraction,
        outreach=outreach or StubOutreach(),
        sender="Hikru",
        **kwargs,
    )


class TestPipeline:
    """Tests for processing a single newsletter."""

    def test_end_to_end(self):
        pipeline = make_pipeline(StubExtraction([make_company_data()]))
        results = asyncio.run(pipeline.process("newsletter", minimum_score=0.5))

        assert len(results) == 1
        acme = results[0]
        assert acme.name == "Acme"
        assert acme.icp_score == pytest.approx(1.0)
        assert acme.outreach_message == "Hello Acme"
        assert acme.outreach_fallback is False
        assert acme.demo_data is False

    def test_enrichment_applied(self):
        index = EnrichmentIndex([EnrichmentRecord(company_name="Acme Inc.", domain="acme.com", headcount=50)])
        pipeline = make_pipeline(StubExtraction([make_company_data()]), index=index)
        results = asyncio.run(pipeline.process("newsletter", minimum_score=0.0))

        assert results[0].domain == "acme.com"
        assert results[0].headcount == 50

    def test_empty_extraction(self):
        outreach = StubOutreach()
        pipeline = make_pipeline(StubExtraction([]), outreach)
        run = asyncio.run(pipeline.run("nothing here", minimum_score=0.0))

        assert run.companies == []
        assert run.used_demo_data is False
        assert run.degraded is False
        assert outreach.generated == []

    def test_extraction_failure_uses_demo_data(self):
        pipeline = make_pipeline(StubExtraction(error="invalid JSON"))
        run = asyncio.run(pipeline.run("newsletter", minimum_score=0.0))

        assert run.used_demo_data is True
        assert run.degraded is True
        assert run.extracted_count == len(DEMO_COMPANIES)
        assert len(run.companies) == len(DEMO_COMPANIES)
        assert all(c.demo_data for c in run.companies)
        assert any("invalid JSON" in w for w in run.warnings)

    def test_extraction_exception_uses_demo_data(self):
        pipeline = make_pipeline(StubExtraction(raises=RuntimeError("connection reset")))
        run = asyncio.run(pipeline.run("newsletter", minimum_score=0.0))

        assert run.used_demo_data is True
        assert len(run.companies) == len(DEMO_COMPANIES)

    def test_outreach_failure_uses_template(self):
        pipeline = make_pipeline(StubExtraction([make_company_data()]), StubOutreach(fail=True))
        run = asyncio.run(pipeline.run("newsletter", minimum_score=0.0))

        acme = run.companies[0]
        assert acme.outreach_fallback is True
        assert acme.outreach_message == template_outreach_message(acme, "Hikru")
        assert run.degraded is True
        assert len(run.warnings) == 1

    def test_threshold_is_inclusive(self):
        extraction = StubExtraction([
            make_company_data(company="Below"),
            make_company_data(company="Exact"),
            make_company_data(company="Above"),
        ])
        scorer = StubScorer({"Below": 0.49, "Exact": 0.5, "Above": 0.9})
        outreach = StubOutreach()
        pipeline = make_pipeline(extraction, outreach, scorer=scorer)
        results = asyncio.run(pipeline.process("newsletter", minimum_score=0.5))

        assert [c.name for c in results] == ["Above", "Exact"]
        # Outreach is only written for retained companies
        assert sorted(outreach.generated) == ["Above", "Exact"]

    def test_ranking_is_stable(self):
        extraction = StubExtraction([
            make_company_data(company="A"),
            make_company_data(company="B"),
            make_company_data(company="C"),
        ])
        scorer = StubScorer({"A": 0.7, "B": 0.9, "C": 0.7})
        pipeline = make_pipeline(extraction, scorer=scorer)
        results = asyncio.run(pipeline.process("newsletter", minimum_score=0.0))

        assert [c.name for c in results] == ["B", "A", "C"]

    def test_scoring_error_skips_company(self):
        extraction = StubExtraction([
            make_company_data(company="Known"),
            make_company_data(company="Unknown"),
        ])
        pipeline = make_pipeline(extraction, scorer=StubScorer({"Known": 0.8}))
        run = asyncio.run(pipeline.run("newsletter", minimum_score=0.0))

        assert [c.name for c in run.companies] == ["Known"]
        assert any("Unknown" in w for w in run.warnings)

    def test_enhancer_score_is_clamped(self):
        pipeline = make_pipeline(
            StubExtraction([make_company_data(sector="Retail")]),
            enhancer=StubEnhancer(1.7),
        )
        results = asyncio.run(pipeline.process("newsletter", minimum_score=0.9))

        assert results[0].icp_score == 1.0

    def test_enhancer_failure_keeps_rule_score(self):
        pipeline = make_pipeline(
            StubExtraction([make_company_data()]),
            enhancer=StubEnhancer(None),
        )
        run = asyncio.run(pipeline.run("newsletter", minimum_score=0.0))

        assert run.companies[0].icp_score == pytest.approx(1.0)
        assert len(run.warnings) == 1


class TestCancellation:
    """Tests for cancelling a run."""

    def test_cancelled_before_start(self):
        extraction = StubExtraction([make_company_data()])
        pipeline = make_pipeline(extraction)
        event = asyncio.Event()
        event.set()
        run = asyncio.run(pipeline.run("newsletter", 0.0, event))

        assert run.cancelled is True
        assert run.companies == []
        assert extraction.calls == 0

    def test_cancelled_mid_run(self):
        event = asyncio.Event()
        extraction = StubExtraction([
            make_company_data(company="First"),
            make_company_data(company="Second"),
            make_company_data(company="Third"),
        ])
        outreach = StubOutreach(on_call=event.set)
        pipeline = make_pipeline(extraction, outreach)
        run = asyncio.run(pipeline.run("newsletter", 0.0, event))

        assert run.cancelled is True
        assert [c.name for c in run.companies] == ["First"]
        assert outreach.generated == ["First"]

    def test_batch_stops_after_cancel(self):
        event = asyncio.Event()
        extraction = StubExtraction(
            [make_company_data(company="First")],
            [make_company_data(company="Second")],
        )
        pipeline = make_pipeline(extraction, StubOutreach(on_call=event.set))
        results = asyncio.run(pipeline.process_batch(["one", "two"], 0.0, event))

        assert [c.name for c in results] == ["First"]
        assert extraction.calls == 1


class TestMerge:
    """Tests for merging results across newsletters."""

    def make_scored(self, name: str, score: float) -> Company:
        return Company(name=name, icp_score=score)

    def test_duplicates_keep_highest_score(self):
        merged = merge_results([
            [self.make_scored("Acme Inc.", 0.4)],
            [self.make_scored("acme inc", 0.8)],
        ])
        assert len(merged) == 1
        assert merged[0].name == "acme inc"
        assert merged[0].icp_score == 0.8

    def test_tie_keeps_first_seen(self):
        merged = merge_results([
            [self.make_scored("Acme", 0.5)],
            [self.make_scored("ACME", 0.5)],
        ])
        assert [c.name for c in merged] == ["Acme"]

    def test_distinct_companies_ranked(self):
        merged = merge_results([
            [self.make_scored("Low", 0.2), self.make_scored("High", 0.9)],
            [self.make_scored("Mid", 0.5)],
        ])
        assert [c.name for c in merged] == ["High", "Mid", "Low"]

    def test_rank_companies(self):
        ranked = rank_companies([self.make_scored("A", 0.1), self.make_scored("B", 0.3)])
        assert [c.name for c in ranked] == ["B", "A"]

    def test_process_batch_merges(self):
        extraction = StubExtraction(
            [make_company_data(company="Acme Inc.")],
            [make_company_data(company="acme inc"), make_company_data(company="Globex")],
        )
        scorer = StubScorer({"Acme Inc.": 0.4, "acme inc": 0.8, "Globex": 0.6})
        pipeline = make_pipeline(extraction, scorer=scorer)
        results = asyncio.run(pipeline.process_batch(["one", "two"], minimum_score=0.0))

        assert [(c.name, c.icp_score) for c in results] == [("acme inc", 0.8), ("Globex", 0.6)]
