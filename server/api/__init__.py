"""
API routes aggregation module.

This module imports the API endpoints from the individual modules and
aggregates them into a single api_routes list for use by the main server.
"""

from starlette.routing import Route

from .jobs import (
    api_list_jobs,
    api_job_stats,
    api_get_job,
    api_cancel_job,
)

# Aggregate all routes into a single list
api_routes = [
    # Job endpoints - specific routes first, then generic ones
    Route("/api/jobs", endpoint=api_list_jobs, methods=["GET"]),
    Route("/api/jobs/stats", endpoint=api_job_stats, methods=["GET"]),
    Route("/api/jobs/{job_id}", endpoint=api_get_job, methods=["GET"]),
    Route("/api/jobs/{job_id}/cancel", endpoint=api_cancel_job, methods=["POST"]),
]
