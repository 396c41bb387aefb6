from __future__ import annotations

import logging
from typing import Dict, Optional

from fastapi import FastAPI, HTTPException, WebSocket, WebSocketDisconnect
from fastapi.middleware.cors import CORSMiddleware

from core.config import evaluation_categories, evaluation_sample_size, load_app_config, store_path
from core.llm import LLMClientFactory
from core.logger import setup_logging
from core.oracle import Oracle, OracleConfig
from core.types import ResetResponse, RunResponse, utcnow_iso
from evaluator.aggregator import Aggregator
from evaluator.progress import ConnectionManager
from evaluator.runner import EvaluationRunner
from evaluator.store import QuestionStore, RecordStore

logger = logging.getLogger(__name__)


def create_app(
    store: Optional[RecordStore] = None,
    oracle: Optional[Oracle] = None,
    manager: Optional[ConnectionManager] = None,
) -> FastAPI:
    config = load_app_config()
    categories = evaluation_categories(config)
    store = store or QuestionStore(store_path(config))
    oracle = oracle or Oracle(OracleConfig(), llm_factory=LLMClientFactory(config.get("models", {})))
    manager = manager or ConnectionManager()
    runner = EvaluationRunner(
        store=store,
        oracle=oracle,
        channel=manager,
        categories=categories,
        sample_size=evaluation_sample_size(config),
    )
    aggregator = Aggregator(store=store, categories=categories)

    app = FastAPI(title="LLM Efficiency Validator", version="0.1.0")
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.state.store = store
    app.state.manager = manager
    app.state.runner = runner
    app.state.aggregator = aggregator

    @app.get("/health")
    async def health() -> dict:
        return {
            "status": "ok",
            "connectedClients": manager.client_count,
            "timestamp": utcnow_iso(),
        }

    @app.post("/api/run", response_model=RunResponse)
    async def run_evaluation() -> RunResponse:
        try:
            report = await runner.run_all()
        except Exception as exc:
            logger.exception("Evaluation run failed.")
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        if not report.ok:
            raise HTTPException(status_code=500, detail=report.error_message())
        return RunResponse(processed=report.completed)

    @app.get("/api/results")
    def results() -> Dict[str, Dict[str, str]]:
        try:
            aggregates = aggregator.compute_results()
        except Exception as exc:
            logger.exception("Result aggregation failed.")
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return {category: result.to_display() for category, result in aggregates.items()}

    @app.post("/api/reset", response_model=ResetResponse)
    def reset() -> ResetResponse:
        try:
            cleared = store.reset_all()
        except Exception as exc:
            logger.exception("Reset failed.")
            raise HTTPException(status_code=500, detail=str(exc)) from exc
        return ResetResponse(cleared=cleared)

    @app.websocket("/ws")
    async def progress_socket(websocket: WebSocket) -> None:
        client_id = await manager.connect(websocket)
        try:
            while True:
                raw = await websocket.receive_text()
                await manager.handle_message(client_id, raw)
        except WebSocketDisconnect:
            logger.debug("Websocket client %s closed the connection.", client_id)
        finally:
            await manager.disconnect(client_id)

    return app


setup_logging()
app = create_app()
