"""
Job inspection API endpoints.

Read-only views of the claude_code jobs plus cancellation, for debugging a
running server over HTTP. Only served with the SSE transport.
"""

import logging

from starlette.requests import Request
from starlette.responses import JSONResponse

from omx_tools.claude_code import get_job_manager
from utils.async_jobs import JobNotFoundError, JobValidationError

logger = logging.getLogger(__name__)


async def api_list_jobs(request: Request):
    """List jobs newest first, optionally filtered with ?status=."""
    status_filter = request.query_params.get("status")
    try:
        summaries = get_job_manager().list_jobs(status_filter or None)
    except JobValidationError as e:
        return JSONResponse({"error": e.message}, status_code=400)

    jobs = [summary.to_wire() for summary in summaries]
    return JSONResponse(
        {
            "jobs": jobs,
            "total_count": len(jobs),
            "running_count": sum(1 for job in jobs if job["status"] == "running"),
        }
    )


async def api_job_stats(request: Request):
    """Count jobs per state."""
    return JSONResponse(get_job_manager().get_stats())


async def api_get_job(request: Request):
    """Snapshot of one job, without waiting."""
    job_id = request.path_params["job_id"]
    try:
        snapshot = await get_job_manager().get_status(job_id, wait_seconds=0)
    except JobNotFoundError as e:
        return JSONResponse({"error": e.message}, status_code=404)
    return JSONResponse(snapshot.to_wire())


async def api_cancel_job(request: Request):
    """Cancel a running job."""
    job_id = request.path_params["job_id"]
    try:
        outcome = get_job_manager().cancel_job(job_id)
    except JobNotFoundError as e:
        return JSONResponse({"success": False, "error": e.message}, status_code=404)

    logger.info(f"Cancel requested over HTTP for job {job_id}: {outcome.message}")
    return JSONResponse({"success": True, **outcome.to_wire()})
