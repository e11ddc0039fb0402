"""Site Check API: start harness runs and stream their progress over SSE."""

import asyncio
import json
import logging
import uuid
from datetime import datetime

from fastapi import FastAPI, BackgroundTasks, HTTPException, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import StreamingResponse
from pydantic import BaseModel

from sitecheck.config import ALL_CHECKS, HarnessConfig
from sitecheck.core.cache import load_cached_discovered_urls
from sitecheck.core.runner import SiteCheckRunner
from sitecheck.models.types import RunResult

logger = logging.getLogger(__name__)

app = FastAPI(title="Site Check API", version="0.1.0")

app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost:3000"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

runs: dict[str, dict] = {}
# Per-run event queues for SSE streaming
_event_queues: dict[str, list[asyncio.Queue]] = {}


class RunRequest(BaseModel):
    url: str | None = None
    checks: list[str] = list(ALL_CHECKS)
    use_cache: bool = False


class RunResponse(BaseModel):
    run_id: str
    status: str
    url: str


@app.get("/health")
def health():
    return {"status": "ok", "service": "sitecheck-api", "version": "0.1.0"}


@app.post("/api/v1/run", response_model=RunResponse)
async def start_run(req: RunRequest, background_tasks: BackgroundTasks):
    unknown = [c for c in req.checks if c not in ALL_CHECKS]
    if unknown or not req.checks:
        raise HTTPException(status_code=422, detail=f"Checks must be a non-empty subset of {ALL_CHECKS}")

    url = req.url.strip() if req.url else None
    config = HarnessConfig.from_env(base_url=url or None)

    run_id = str(uuid.uuid4())[:8]
    runs[run_id] = {
        "run_id": run_id,
        "url": config.base_url,
        "checks": list(req.checks),
        "status": "running",
        "started_at": datetime.now().isoformat(),
        "result": None,
        "error": None,
    }
    _event_queues[run_id] = []

    background_tasks.add_task(run_checks, run_id, config, req.checks, req.use_cache)

    return RunResponse(run_id=run_id, status="running", url=config.base_url)


@app.get("/api/v1/run/{run_id}/stream")
async def run_stream(run_id: str, request: Request):
    """SSE endpoint that streams live progress events during a run."""
    if run_id not in runs:
        raise HTTPException(status_code=404, detail="Run not found")

    queue: asyncio.Queue = asyncio.Queue()
    _event_queues.setdefault(run_id, []).append(queue)

    async def event_generator():
        try:
            while True:
                if await request.is_disconnected():
                    break

                try:
                    event = await asyncio.wait_for(queue.get(), timeout=30.0)
                except asyncio.TimeoutError:
                    yield ": keepalive\n\n"
                    continue

                if event is None:
                    break

                event_type = event.get("type", "update")
                yield f"event: {event_type}\ndata: {json.dumps(event)}\n\n"

                if event_type == "run_complete":
                    break
        finally:
            if run_id in _event_queues and queue in _event_queues[run_id]:
                _event_queues[run_id].remove(queue)

    return StreamingResponse(
        event_generator(),
        media_type="text/event-stream",
        headers={
            "Cache-Control": "no-cache",
            "Connection": "keep-alive",
            "X-Accel-Buffering": "no",
        },
    )


@app.get("/api/v1/run/{run_id}")
async def get_run(run_id: str):
    if run_id not in runs:
        raise HTTPException(status_code=404, detail="Run not found")

    run = runs[run_id]
    body = {
        "run_id": run_id,
        "status": run["status"],
        "url": run["url"],
        "checks": run["checks"],
        "started_at": run["started_at"],
        "error": run.get("error"),
    }
    result: RunResult | None = run.get("result")
    if run["status"] == "completed" and result:
        body.update(result.to_dict())
    return body


@app.get("/api/v1/runs")
async def list_runs():
    return [
        {
            "run_id": r["run_id"],
            "url": r["url"],
            "status": r["status"],
            "started_at": r["started_at"],
            "failures": r["result"].failures if r.get("result") else None,
        }
        for r in runs.values()
    ]


@app.get("/api/v1/discovery")
async def get_discovery():
    """The cached discovery result from the last crawl, if any."""
    cached = load_cached_discovered_urls(HarnessConfig.from_env().discovery_cache)
    if cached is None:
        raise HTTPException(status_code=404, detail="No cached discovery")
    return cached.to_dict()


def _broadcast_event(run_id: str, event_type: str, data: dict):
    """Push an SSE event to all connected clients for this run."""
    event = {"type": event_type, **data}
    for q in _event_queues.get(run_id, []):
        try:
            q.put_nowait(event)
        except asyncio.QueueFull:
            pass


async def run_checks(run_id: str, config: HarnessConfig, checks: list[str], use_cache: bool):
    def on_progress(event_type: str, data: dict):
        _broadcast_event(run_id, event_type, data)

    try:
        runner = SiteCheckRunner(config=config, checks=checks, on_progress=on_progress, use_cache=use_cache)
        result = await runner.run()
        runs[run_id]["status"] = "completed"
        runs[run_id]["result"] = result
    except Exception as e:
        logger.exception("Run %s failed", run_id)
        runs[run_id]["status"] = "failed"
        runs[run_id]["error"] = str(e)[:500]
        _broadcast_event(run_id, "run_failed", {"error": str(e)[:500]})

    # Signal end to all SSE listeners
    for q in _event_queues.get(run_id, []):
        try:
            q.put_nowait(None)
        except asyncio.QueueFull:
            pass
