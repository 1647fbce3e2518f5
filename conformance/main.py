"""
FastAPI Main Application - Layout Conformance Tester
"""
import logging
from datetime import datetime
from typing import Dict, List, Optional

from fastapi import Depends, FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import PlainTextResponse
from pydantic import BaseModel, Field

from .config import settings
from .agents.orchestrator_agent import OrchestratorAgent
from .agents.reporter_agent import ReporterAgent
from .errors import ConfigurationError
from .models.report import RunReport
from .registry import DeviceRegistry, RoleRegistry


logging.basicConfig(
    level=getattr(logging, settings.LOG_LEVEL.upper(), logging.INFO),
    format="%(asctime)s %(levelname)s %(name)s: %(message)s"
)
logger = logging.getLogger(__name__)

app = FastAPI(
    title=settings.APP_NAME,
    description="Responsive layout conformance runs across devices and roles",
    version="1.0.0"
)

# CORS middleware
app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

device_registry = DeviceRegistry()
role_registry = RoleRegistry()

# Finished runs (in-memory)
runs: Dict[str, RunReport] = {}


# Request Models
class RunRequest(BaseModel):
    device_ids: Optional[List[str]] = None  # None runs every device
    roles: Optional[List[str]] = None
    paths: Optional[List[str]] = None
    max_parallel: Optional[int] = Field(default=None, ge=1)


def get_orchestrator() -> OrchestratorAgent:
    return OrchestratorAgent(devices=device_registry, roles=role_registry)


def get_reporter() -> ReporterAgent:
    return ReporterAgent()


# API Endpoints
@app.get("/")
async def root():
    return {"message": "Layout Conformance Tester API", "docs": "/docs"}


@app.get("/api/devices")
async def list_devices(group: Optional[str] = None):
    """
    Registered device profiles with their derived class.
    group=mobile or group=wide narrows the list to one side of the 768px breakpoint.
    """
    if group is None:
        profiles = list(device_registry)
    elif group == "mobile":
        profiles = device_registry.mobile()
    elif group == "wide":
        profiles = device_registry.wide()
    else:
        raise HTTPException(status_code=400, detail=f"Unknown device group: {group}")

    return [
        {**device.model_dump(), "device_class": device.device_class.value}
        for device in profiles
    ]


@app.get("/api/roles")
async def list_roles():
    """Registered roles, landing markers and navigation targets."""
    return [profile.model_dump(mode="json") for profile in role_registry]


@app.post("/api/runs", response_model=RunReport)
async def start_run(request: RunRequest, orchestrator: OrchestratorAgent = Depends(get_orchestrator)):
    """
    Run the selected matrix and return its report.
    Configuration problems are rejected before any browser starts.
    """
    if request.max_parallel:
        orchestrator.max_parallel = request.max_parallel

    try:
        report = await orchestrator.run(
            device_ids=request.device_ids,
            roles=request.roles,
            paths=request.paths
        )
    except ConfigurationError as e:
        logger.warning(f"Rejected run: {e}")
        raise HTTPException(status_code=400, detail=str(e))

    runs[report.run_id] = report
    return report


@app.get("/api/runs/{run_id}", response_model=RunReport)
async def get_run(run_id: str):
    if run_id not in runs:
        raise HTTPException(status_code=404, detail="Run not found")
    return runs[run_id]


@app.get("/api/runs/{run_id}/summary", response_class=PlainTextResponse)
async def get_run_summary(run_id: str, reporter: ReporterAgent = Depends(get_reporter)):
    """Console rendering of a finished run."""
    if run_id not in runs:
        raise HTTPException(status_code=404, detail="Run not found")
    return reporter.render_console(runs[run_id])


@app.get("/health")
async def health_check():
    """Health check endpoint"""
    return {"status": "healthy", "timestamp": datetime.now().isoformat()}


if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
