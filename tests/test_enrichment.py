"""Tests for company-name matching and the enrichment index."""

from lead_research.enrich import EnrichmentIndex, normalize_company_name
from lead_research.enrich.matching import names_contain, names_overlap, word_overlap_ratio
from lead_research.models import Company, EnrichmentRecord


def make_record(name: str, domain: str = "", headcount=None) -> EnrichmentRecord:
    """Create test enrichment record."""
    return EnrichmentRecord(company_name=name, domain=domain, headcount=headcount)


def make_index(*names: str) -> EnrichmentIndex:
    """Create test index with one record per name."""
    return EnrichmentIndex(make_record(n, domain=f"{i}.example.com") for i, n in enumerate(names))


class TestNormalization:
    """Tests for company name normalization."""

    def test_removes_legal_suffix(self):
        assert normalize_company_name("Acme Inc.") == "acme"
        assert normalize_company_name("Acme Corp") == "acme"
        assert normalize_company_name("Acme Ltd") == "acme"

    def test_hyphens_and_commas_become_spaces(self):
        assert normalize_company_name("Acme-Data, Inc.") == "acme data"

    def test_ampersand(self):
        assert normalize_company_name("Smith & Sons Co.") == "smith and sons"

    def test_periods_removed(self):
        assert normalize_company_name("A.I. Labs LLC") == "ai labs"

    def test_suffix_attached_with_period(self):
        assert normalize_company_name("Foo.Inc") == "foo"
        assert normalize_company_name("Acme Co.Ltd") == "acme"
        assert normalize_company_name("Acme Co.Ltd.") == "acme"

    def test_attached_suffix_resolves(self):
        index = make_index("Foo Analytics")
        assert index.resolve("Foo.Inc").company_name == "Foo Analytics"

    def test_suffix_inside_word_kept(self):
        assert normalize_company_name("Incubate Labs") == "incubate labs"

    def test_whitespace_collapsed(self):
        assert normalize_company_name("  Blue   Ocean  ") == "blue ocean"

    def test_empty(self):
        assert normalize_company_name("") == ""
        assert normalize_company_name("Inc.") == ""


class TestMatchPredicates:
    """Tests for the fuzzy match predicates."""

    def test_containment_either_direction(self):
        assert names_contain("techflow", "techflow analytics")
        assert names_contain("techflow analytics", "techflow")

    def test_containment_requires_both_names(self):
        assert not names_contain("", "techflow")

    def test_overlap_ratio_uses_shorter_name(self):
        assert word_overlap_ratio("blue ocean labs", "blue ocean works group") == 2 / 3

    def test_overlap_above_threshold(self):
        assert names_overlap("blue ocean labs", "blue ocean works")

    def test_overlap_below_threshold(self):
        assert not names_overlap("northwind logistics group", "northwind data systems")

    def test_short_words_do_not_count(self):
        assert word_overlap_ratio("ox labs", "ox works") == 0.0
        assert not names_overlap("ox labs", "ox works")


class TestResolve:
    """Tests for record resolution."""

    def test_exact_match_case_insensitive(self):
        index = make_index("TechFlow Analytics")
        record = index.resolve("techflow analytics")
        assert record.company_name == "TechFlow Analytics"

    def test_exact_match_beats_earlier_fuzzy_match(self):
        index = make_index("Acme Corp", "ACME")
        assert index.resolve("acme").company_name == "ACME"

    def test_normalized_containment(self):
        index = make_index("TechFlow Analytics Inc.")
        assert index.resolve("TechFlow").company_name == "TechFlow Analytics Inc."

    def test_query_containing_record(self):
        index = make_index("DataVision")
        assert index.resolve("DataVision Corporation").company_name == "DataVision"

    def test_word_overlap(self):
        index = make_index("Northwind Data Systems")
        record = index.resolve("Northwind Systems Labs")
        assert record.company_name == "Northwind Data Systems"

    def test_first_fuzzy_match_wins(self):
        index = make_index("Acme Robotics", "Acme")
        # "Acme" would be closer, but the earlier record matches first
        assert index.resolve("Acme Inc").company_name == "Acme Robotics"

    def test_no_match(self):
        index = make_index("TechFlow Analytics", "DataVision Corporation")
        assert index.resolve("Northwind") is None

    def test_empty_query(self):
        index = make_index("TechFlow Analytics")
        assert index.resolve("") is None

    def test_query_normalizing_to_empty(self):
        index = make_index("TechFlow Analytics")
        assert index.resolve("Inc.") is None

    def test_empty_index(self):
        assert EnrichmentIndex().resolve("Acme") is None

    def test_resolution_is_deterministic(self):
        index = make_index("Acme Robotics", "Acme Analytics", "Acme")
        first = index.resolve("Acme Labs")
        assert all(index.resolve("Acme Labs") is first for _ in range(5))


class TestEnrich:
    """Tests for enriching companies."""

    def test_copies_domain_and_headcount(self):
        index = EnrichmentIndex([make_record("Acme", "acme.com", 50)])
        company = Company(name="Acme Inc.")
        assert index.enrich(company) is True
        assert company.domain == "acme.com"
        assert company.headcount == 50

    def test_empty_domain_becomes_none(self):
        index = EnrichmentIndex([make_record("Acme", "", 50)])
        company = Company(name="Acme")
        index.enrich(company)
        assert company.domain is None
        assert company.headcount == 50

    def test_no_match_leaves_company_untouched(self):
        index = EnrichmentIndex([make_record("Acme", "acme.com", 50)])
        company = Company(name="Globex")
        assert index.enrich(company) is False
        assert company.domain is None
        assert company.headcount is None


class TestLoadCSV:
    """Tests for loading the enrichment table."""

    def test_load(self, tmp_path):
        path = tmp_path / "enrichment.csv"
        path.write_text(
            "company_name,domain,employees\n"
            "TechFlow Analytics Inc.,techflow.io,85\n"
            "DataVision Corporation,datavision.com,\n",
            encoding="utf-8",
        )
        index = EnrichmentIndex.from_csv(path)

        assert len(index) == 2
        assert index.records[0] == make_record("TechFlow Analytics Inc.", "techflow.io", 85)
        assert index.records[1].headcount is None

    def test_column_aliases_case_insensitive(self, tmp_path):
        path = tmp_path / "enrichment.csv"
        path.write_text(
            "Company,Website,Head_Count\n"
            "Acme,acme.com,\"1,200\"\n",
            encoding="utf-8",
        )
        index = EnrichmentIndex.from_csv(path)
        assert index.records == (make_record("Acme", "acme.com", 1200),)

    def test_non_numeric_headcount(self, tmp_path):
        path = tmp_path / "enrichment.csv"
        path.write_text("name,headcount\nAcme,n/a\nGlobex,42.0\n", encoding="utf-8")
        index = EnrichmentIndex.from_csv(path)
        assert [r.headcount for r in index.records] == [None, 42]

    def test_blank_names_skipped(self, tmp_path):
        path = tmp_path / "enrichment.csv"
        path.write_text("name,domain\n,nobody.com\nAcme,acme.com\n", encoding="utf-8")
        index = EnrichmentIndex.from_csv(path)
        assert [r.company_name for r in index.records] == ["Acme"]

    def test_missing_file(self, tmp_path):
        index = EnrichmentIndex.from_csv(tmp_path / "missing.csv")
        assert len(index) == 0
        assert index.resolve("Acme") is None

    def test_missing_name_column(self, tmp_path):
        path = tmp_path / "enrichment.csv"
        path.write_text("foo,bar\n1,2\n", encoding="utf-8")
        assert len(EnrichmentIndex.from_csv(path)) == 0

    def test_empty_file(self, tmp_path):
        path = tmp_path / "enrichment.csv"
        path.write_text("", encoding="utf-8")
        assert len(EnrichmentIndex.from_csv(path)) == 0
