"""API routes for the Lead Research Agent."""

import logging
import uuid
from datetime import datetime
from typing import Optional

from fastapi import APIRouter, HTTPException, BackgroundTasks
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, Field

from lead_research.config import settings
from lead_research.delivery import to_csv
from lead_research.models import ICP, ICPConfigError, load_icp
from lead_research.models.database import DBNewsletterRun, get_session, save_run
from lead_research.newsletter import NewsletterExtractor, content_hash
from lead_research.pipeline import create_pipeline, merge_results

logger = logging.getLogger(__name__)

router = APIRouter()


class ProcessRequest(BaseModel):
    """Request body for processing newsletters."""
    newsletters: list[str] = Field(min_length=1, description="Newsletter bodies, HTML or plain text")
    min_score: float = Field(default=settings.min_icp_score, ge=0.0, le=1.0)
    use_mock: bool = False
    icp: Optional[ICP] = Field(default=None, description="Overrides the configured ICP file")
    record: bool = True


class ProcessResponse(BaseModel):
    """Response for a submitted run."""
    run_id: str
    status: str
    message: str


class StatusResponse(BaseModel):
    """Response for run status."""
    run_id: str
    status: str
    newsletters: int
    processed: int
    total_results: int
    degraded: bool = False
    warnings: list[str] = Field(default_factory=list)
    error_message: Optional[str] = None


class ResultsResponse(BaseModel):
    """Response for run results."""
    run_id: str
    status: str
    degraded: bool
    total_results: int
    results: list[dict]


class RunSummary(BaseModel):
    """A recorded newsletter run."""
    content_hash: str
    source: Optional[str]
    status: str
    completed_at: Optional[datetime]
    total_extracted: int
    total_qualified: int
    degraded: bool


# In-memory storage for active runs
active_runs: dict[str, dict] = {}


@router.post("/process", response_model=ProcessResponse)
async def start_processing(request: ProcessRequest, background_tasks: BackgroundTasks):
    """Start processing newsletters in the background."""
    run_id = str(uuid.uuid4())

    active_runs[run_id] = {
        "status": "pending",
        "request": request,
        "processed": 0,
        "results": [],
        "warnings": [],
        "degraded": False,
    }

    background_tasks.add_task(run_processing, run_id)

    return ProcessResponse(
        run_id=run_id,
        status="pending",
        message="Processing started. Use /status/{run_id} to check progress.",
    )


@router.get("/status/{run_id}", response_model=StatusResponse)
async def get_status(run_id: str):
    """Get the status of a run."""
    run = _get_run(run_id)
    return StatusResponse(
        run_id=run_id,
        status=run["status"],
        newsletters=len(run["request"].newsletters),
        processed=run["processed"],
        total_results=len(run["results"]),
        degraded=run["degraded"],
        warnings=run["warnings"],
        error_message=run.get("error"),
    )


@router.get("/results/{run_id}", response_model=ResultsResponse)
async def get_results(run_id: str):
    """Get the ranked results of a run."""
    run = _get_run(run_id)
    results = [c.to_export() for c in run["results"]] if run["status"] == "completed" else []
    return ResultsResponse(
        run_id=run_id,
        status=run["status"],
        degraded=run["degraded"],
        total_results=len(results),
        results=results,
    )


@router.get("/export/{run_id}")
async def export_results(run_id: str):
    """Export run results as CSV."""
    run = _get_run(run_id)
    if not run["results"]:
        raise HTTPException(status_code=404, detail="No results to export")

    return StreamingResponse(
        iter([to_csv(run["results"])]),
        media_type="text/csv",
        headers={"Content-Disposition": f"attachment; filename=leads_{run_id[:8]}.csv"},
    )


@router.get("/icp")
async def get_icp():
    """Return the configured ICP."""
    try:
        icp = load_icp(settings.icp_path)
    except ICPConfigError as e:
        raise HTTPException(status_code=500, detail=str(e))
    return icp.to_config()


@router.get("/runs", response_model=list[RunSummary])
async def list_runs(limit: int = 20):
    """List recorded newsletter runs, newest first."""
    session = get_session()
    try:
        runs = (
            session.query(DBNewsletterRun)
            .order_by(DBNewsletterRun.completed_at.desc())
            .limit(limit)
            .all()
        )
        return [
            RunSummary(
                content_hash=r.content_hash,
                source=r.source,
                status=r.status,
                completed_at=r.completed_at,
                total_extracted=r.total_extracted or 0,
                total_qualified=r.total_qualified or 0,
                degraded=bool(r.degraded),
            )
            for r in runs
        ]
    finally:
        session.close()


async def run_processing(run_id: str):
    """Execute the pipeline for every newsletter of a run."""
    state = active_runs.get(run_id)
    if not state:
        return

    request: ProcessRequest = state["request"]
    state["status"] = "running"

    try:
        pipeline = create_pipeline(use_mock=request.use_mock, icp=request.icp)
    except ICPConfigError as e:
        logger.error(f"[{run_id}] Failed to load ICP: {e}")
        state["status"] = "failed"
        state["error"] = str(e)
        return

    extractor = NewsletterExtractor()
    session = get_session() if request.record else None
    batches = []

    try:
        for i, body in enumerate(request.newsletters, 1):
            text = extractor.extract(body)
            logger.info(f"[{run_id}] Processing newsletter {i}/{len(request.newsletters)}")
            run = await pipeline.run(text, request.min_score)

            batches.append(run.companies)
            state["warnings"].extend(run.warnings)
            state["degraded"] = state["degraded"] or run.degraded
            state["processed"] = i

            if session is not None:
                save_run(session, content_hash(text), f"api:{run_id}", run, request.min_score)

        state["results"] = merge_results(batches)
        state["status"] = "completed"
        logger.info(f"[{run_id}] {len(state['results'])} companies match the ICP")

    except Exception as e:
        logger.error(f"[{run_id}] Processing failed: {e}")
        state["status"] = "failed"
        state["error"] = str(e)
    finally:
        if session is not None:
            session.close()


def _get_run(run_id: str) -> dict:
    run = active_runs.get(run_id)
    if not run:
        raise HTTPException(status_code=404, detail="Run not found")
    return run
