"""In-memory enrichment index backed by a CSV reference table."""

import csv
import logging
from pathlib import Path
from typing import Iterable, Optional, Union

from lead_research.models import Company, EnrichmentRecord
from .matching import names_contain, names_exact_match, names_overlap, normalize_company_name

logger = logging.getLogger(__name__)


class EnrichmentIndex:
    """Resolve free-text company names to enrichment records.

    Resolution order is fixed: a case-insensitive exact match anywhere in the
    table wins; otherwise records are scanned in load order and the first one
    whose normalized name contains (or is contained by) the query, or shares
    enough significant words with it, is returned. The first matching record
    wins even if a later one would be a closer match.
    """

    NAME_COLUMNS = ("company", "company_name", "name")
    DOMAIN_COLUMNS = ("domain", "website", "url")
    HEADCOUNT_COLUMNS = ("headcount", "head_count", "employees", "employee_count")

    def __init__(self, records: Optional[Iterable[EnrichmentRecord]] = None):
        self._records: tuple[EnrichmentRecord, ...] = tuple(records or ())
        self._normalized: tuple[str, ...] = tuple(
            normalize_company_name(r.company_name) for r in self._records
        )

    @classmethod
    def from_csv(cls, csv_path: Union[str, Path]) -> "EnrichmentIndex":
        """Load the index from a CSV file.

        A missing or malformed file produces an empty index; the failure is
        logged, not raised.
        """
        csv_path = Path(csv_path)
        if not csv_path.exists():
            logger.warning(f"Enrichment CSV file not found: {csv_path}")
            return cls()

        try:
            records = cls._read_records(csv_path)
        except (OSError, csv.Error, UnicodeDecodeError, ValueError) as e:
            logger.warning(f"Error loading enrichment data from {csv_path}: {e}")
            return cls()

        logger.info(f"Loaded {len(records)} enrichment records from {csv_path}")
        return cls(records)

    @classmethod
    def _read_records(cls, csv_path: Path) -> list[EnrichmentRecord]:
        with open(csv_path, "r", newline="", encoding="utf-8-sig") as f:
            reader = csv.DictReader(f)
            if not reader.fieldnames:
                raise ValueError("missing header row")

            headers = {h.strip().lower(): h for h in reader.fieldnames if h}
            name_col = cls._find_column(headers, cls.NAME_COLUMNS)
            if name_col is None:
                raise ValueError(
                    f"no company name column (expected one of {', '.join(cls.NAME_COLUMNS)})"
                )
            domain_col = cls._find_column(headers, cls.DOMAIN_COLUMNS)
            headcount_col = cls._find_column(headers, cls.HEADCOUNT_COLUMNS)

            records = []
            for row in reader:
                name = (row.get(name_col) or "").strip()
                if not name:
                    continue
                records.append(
                    EnrichmentRecord(
                        company_name=name,
                        domain=(row.get(domain_col) or "").strip() if domain_col else "",
                        headcount=_parse_headcount(row.get(headcount_col)) if headcount_col else None,
                    )
                )
            return records

    @staticmethod
    def _find_column(headers: dict[str, str], aliases: tuple[str, ...]) -> Optional[str]:
        for alias in aliases:
            if alias in headers:
                return headers[alias]
        return None

    def __len__(self) -> int:
        return len(self._records)

    @property
    def records(self) -> tuple[EnrichmentRecord, ...]:
        return self._records

    def resolve(self, name: str) -> Optional[EnrichmentRecord]:
        """Find the enrichment record for a company name, or None."""
        if not name or not self._records:
            return None

        for record in self._records:
            if names_exact_match(record.company_name, name):
                return record

        query = normalize_company_name(name)
        if not query:
            return None

        for record, normalized in zip(self._records, self._normalized):
            if names_contain(query, normalized) or names_overlap(query, normalized):
                logger.debug(f"Fuzzy matched '{name}' to '{record.company_name}'")
                return record

        return None

    def enrich(self, company: Company) -> bool:
        """Copy domain and headcount onto the company. Returns True on a match."""
        record = self.resolve(company.name)
        if record is None:
            logger.info(f"No enrichment data found for {company.name}")
            return False

        company.domain = record.domain or None
        company.headcount = record.headcount
        logger.info(
            f"Enriched {company.name} with domain: {company.domain}, headcount: {company.headcount}"
        )
        return True


def _parse_headcount(value: Optional[str]) -> Optional[int]:
    if value is None:
        return None
    value = value.strip().replace(",", "")
    if not value:
        return None
    try:
        return int(value)
    except ValueError:
        try:
            return int(float(value))
        except (ValueError, OverflowError):
            logger.debug(f"Ignoring non-numeric headcount: {value!r}")
            return None
