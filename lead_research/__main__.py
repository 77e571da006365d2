"""CLI entry point for the Lead Research Agent."""

import argparse
import asyncio
import logging
import sys
from datetime import datetime
from pathlib import Path
from typing import Optional

from lead_research.config import settings
from lead_research.delivery import export_to_csv, export_to_json, print_summary, render_html_report
from lead_research.models import ICPConfigError
from lead_research.models.database import get_session, save_run, was_processed
from lead_research.newsletter import SAMPLE_NEWSLETTER, Newsletter, load_newsletters
from lead_research.pipeline import LeadPipeline, create_pipeline, merge_results

# Configure logging
logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s [%(levelname)s] %(message)s",
    datefmt="%H:%M:%S",
)
logger = logging.getLogger(__name__)


async def run_once(
    pipeline: LeadPipeline,
    newsletters: list[Newsletter],
    min_score: float,
    reprocess: bool = False,
    record: bool = True,
) -> tuple[list, bool]:
    """Process each newsletter once and merge the results.

    Returns the merged companies and whether any run was degraded.
    """
    session = get_session() if record else None
    batches = []
    degraded = False

    try:
        for i, newsletter in enumerate(newsletters, 1):
            if session is not None and not reprocess and was_processed(session, newsletter.content_hash):
                logger.info(f"Skipping already processed newsletter: {newsletter.source}")
                continue

            logger.info(f"Newsletter {i}/{len(newsletters)}: {newsletter.source}")
            run = await pipeline.run(newsletter.text, min_score)
            degraded = degraded or run.degraded
            batches.append(run.companies)

            if session is not None:
                save_run(session, newsletter.content_hash, newsletter.source, run, min_score)
    finally:
        if session is not None:
            session.close()

    return merge_results(batches), degraded


def collect_newsletters(paths: list[Path], demo: bool) -> list[Newsletter]:
    """Newsletters named on the command line, or the sample in demo mode."""
    if paths:
        return load_newsletters(paths)
    if demo:
        return [Newsletter(source="sample", text=SAMPLE_NEWSLETTER)]
    return []


def write_outputs(
    results: list,
    degraded: bool,
    output: Optional[Path],
    csv_path: Optional[Path],
    html_path: Optional[Path],
):
    if output:
        export_to_json(results, output)
        logger.info(f"Results exported to {output}")
    if csv_path:
        export_to_csv(results, csv_path)
        logger.info(f"Results exported to {csv_path}")
    if html_path:
        html_path.parent.mkdir(parents=True, exist_ok=True)
        html_path.write_text(render_html_report(results, degraded), encoding="utf-8")
        logger.info(f"HTML report written to {html_path}")

    print_summary(results, degraded)


async def run_worker(args, pipeline: LeadPipeline):
    """Run once, or repeatedly at the configured interval."""
    interval = args.interval if args.interval is not None else settings.worker_interval_minutes

    while True:
        logger.info(f"Lead Research Agent - starting execution at {datetime.now():%Y-%m-%d %H:%M:%S}")
        newsletters = collect_newsletters(args.newsletters, args.demo)
        if not newsletters:
            logger.warning("No newsletters to process")
        else:
            results, degraded = await run_once(
                pipeline,
                newsletters,
                args.min_score,
                reprocess=args.reprocess,
                record=not args.no_record,
            )
            write_outputs(results, degraded, args.output, args.csv, args.html)

        if not interval:
            return

        logger.info(f"Next execution in {interval} minutes. Waiting...")
        await asyncio.sleep(interval * 60)


def main():
    """Main CLI entry point."""
    parser = argparse.ArgumentParser(
        description="Lead Research Agent - Find and score funded companies in newsletters"
    )
    parser.add_argument(
        "newsletters",
        nargs="*",
        type=Path,
        help="Newsletter files or directories (.txt, .html, .eml)",
    )
    parser.add_argument(
        "--icp", "-i",
        type=Path,
        default=settings.icp_path,
        help="Path to ICP JSON file (default: icp.json)",
    )
    parser.add_argument(
        "--enrichment", "-e",
        type=Path,
        default=settings.enrichment_csv_path,
        help="Path to enrichment CSV (default: data/enrichment.csv)",
    )
    parser.add_argument(
        "--min-score", "-m",
        type=float,
        default=settings.min_icp_score,
        help=f"Minimum ICP score to keep a company (default: {settings.min_icp_score})",
    )
    parser.add_argument(
        "--output", "-o",
        type=Path,
        default=settings.output_dir / "leads.json",
        help="Output JSON path (default: data/output/leads.json)",
    )
    parser.add_argument("--csv", type=Path, help="Also export results to this CSV file")
    parser.add_argument("--html", type=Path, help="Also write an HTML report to this file")
    parser.add_argument(
        "--demo",
        action="store_true",
        help="Use the sample newsletter and offline demo oracles",
    )
    parser.add_argument(
        "--interval",
        type=int,
        help="Run every N minutes instead of once",
    )
    parser.add_argument(
        "--reprocess",
        action="store_true",
        help="Process newsletters even if they were processed before",
    )
    parser.add_argument(
        "--no-record",
        action="store_true",
        help="Do not record runs in the database",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Enable verbose logging",
    )

    args = parser.parse_args()

    if args.verbose:
        logging.getLogger().setLevel(logging.DEBUG)

    if not args.newsletters and not args.demo:
        logger.error("No newsletters given. Pass newsletter files or use --demo")
        sys.exit(1)

    try:
        pipeline = create_pipeline(args.icp, args.enrichment, use_mock=args.demo)
    except ICPConfigError as e:
        logger.error(f"Failed to load ICP: {e}")
        sys.exit(1)

    try:
        asyncio.run(run_worker(args, pipeline))
    except KeyboardInterrupt:
        logger.info("Interrupted by user")
        sys.exit(1)
    except Exception as e:
        logger.error(f"Processing failed: {e}")
        if args.verbose:
            import traceback
            traceback.print_exc()
        sys.exit(1)


if __name__ == "__main__":
    main()
