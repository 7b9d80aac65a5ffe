"""
HTTP API

POST /analyze runs one analysis and returns the report; GET /health reports
which engines can run on this host.
"""

import logging
from typing import Any, Optional

from fastapi import Body, FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from config import RampartConfig
from errors import InputValidationError
from models.report import report_to_dict
from agent.explorer import ExplorerClient
from agent.honeypot import HoneypotAdapter
from agent.orchestrator import AddressOrchestrator
from agent.static_audit import StaticAuditAdapter
from api.dispatcher import MISSING_FIELDS_MESSAGE, Dispatcher
from cal.repo_scanner import RepositoryScanner
from utils.health import HealthChecker
from utils.llm_backend import create_backend
from utils.logging import AnalysisLogger
from utils.process import ProcessRunner
from verification.ai_fuzzer import AIFuzzerPipeline
from verification.foundry_executor import FuzzHarness
from verification.generic_fuzzer import GenericFuzzerAdapter

logger = logging.getLogger(__name__)

GENERIC_FAILURE_MESSAGE = "Failed to complete analysis. Please check your input."


def build_dispatcher(settings: RampartConfig) -> Dispatcher:
    """wire every adapter from one settings object"""
    settings.ensure_directories()
    analysis_logger = AnalysisLogger(settings)
    runner = ProcessRunner(timeout=settings.PROCESS_TIMEOUT_SECONDS)
    backend = create_backend(settings)
    explorer = ExplorerClient(settings)
    harness = FuzzHarness(runner, settings)

    static_adapter = StaticAuditAdapter(backend, settings, analysis_logger)
    orchestrator = AddressOrchestrator(
        explorer=explorer,
        static_adapter=static_adapter,
        honeypot=HoneypotAdapter(runner, settings),
        generic_fuzzer=GenericFuzzerAdapter(harness),
        ai_pipeline=AIFuzzerPipeline(explorer, backend, harness, settings, analysis_logger),
        analysis_logger=analysis_logger,
    )
    scanner = RepositoryScanner(runner, static_adapter, settings, analysis_logger)
    return Dispatcher(orchestrator, scanner, static_adapter)


def create_app(settings: RampartConfig, dispatcher: Optional[Dispatcher] = None) -> FastAPI:
    app = FastAPI(title="Rampart", description="Smart contract security analysis")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.settings = settings
    app.state.dispatcher = dispatcher

    def get_dispatcher() -> Dispatcher:
        if app.state.dispatcher is None:
            app.state.dispatcher = build_dispatcher(settings)
        return app.state.dispatcher

    # undecodable bodies never reach the handler; answer them like a missing body
    @app.exception_handler(RequestValidationError)
    async def malformed_body(request: Request, exc: RequestValidationError):
        logger.warning("Rejected malformed request body: %s", exc.errors())
        return JSONResponse(status_code=400, content={"error": MISSING_FIELDS_MESSAGE})

    # sync handlers run in the threadpool; analyses block on subprocesses and http
    @app.post("/analyze")
    def analyze(body: Any = Body(None)):
        try:
            report = get_dispatcher().dispatch(body)
        except InputValidationError as e:
            return JSONResponse(status_code=400, content={"error": str(e)})
        except Exception:
            logger.exception("Analysis failed")
            return JSONResponse(status_code=500, content={"error": GENERIC_FAILURE_MESSAGE})
        return JSONResponse(content=report_to_dict(report))

    @app.get("/health")
    def health():
        return HealthChecker(settings).report()

    return app
