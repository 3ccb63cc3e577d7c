import json
from typing import Any, Dict, Optional

from fastapi import FastAPI, Request, Response
import uvicorn

from hostops.logging.diagnostic import diagnostic_logger as diag
from hostops.operations.dispatcher import OperationDispatcher, create_dispatcher, run_operation

ERROR_STATUS: Dict[str, int] = {
    "InvalidArgument": 400,
    "UnsupportedOperation": 400,
    "PathEscape": 403,
    "CommandNotAllowed": 403,
    "NotFound": 404,
    "NetworkError": 502,
    "ExecutionError": 500,
    "IOError": 500,
}


def _json_response(payload: Any, status_code: int) -> Response:
    return Response(
        content=json.dumps(payload),
        status_code=status_code,
        media_type="application/json",
    )


def create_app(dispatcher: Optional[OperationDispatcher] = None) -> FastAPI:
    dispatcher = dispatcher or create_dispatcher()

    app = FastAPI(title="hostops Gateway")

    @app.get("/health")
    async def health():
        return {
            "status": "ok",
            "sandbox_root": dispatcher.sandbox_root,
            "allowed_commands": list(dispatcher.allowlist),
        }

    @app.post("/operations")
    async def operations(request: Request):
        try:
            payload = await request.json()
        except Exception:
            return _json_response(
                {"error": 'Invalid JSON. Send { "type": "file_system|network|process|system_info", "details": {...} }'},
                400,
            )
        if not isinstance(payload, dict):
            return _json_response({"error": "Request body must be a JSON object"}, 400)

        op_type = payload.get("type")
        outcome = await run_operation(dispatcher, op_type, payload.get("details"))
        if outcome.success:
            return _json_response(outcome.to_dict(), 200)

        kind = outcome.error.get("kind", "") if outcome.error else ""
        diag.info(f"operation rejected: type={op_type} kind={kind}")
        return _json_response(outcome.to_dict(), ERROR_STATUS.get(kind, 500))

    return app


def start_gateway(port: int = 3000, dispatcher: Optional[OperationDispatcher] = None):
    dispatcher = dispatcher or create_dispatcher()
    app = create_app(dispatcher)
    print(f"\nhostops Gateway running on http://localhost:{port}")
    print(f"   Sandbox: {dispatcher.sandbox_root}")
    print(f"   Allowed commands: {', '.join(dispatcher.allowlist)}")
    print("   Endpoints: POST /operations | GET /health\n")

    uvicorn.run(app, host="0.0.0.0", port=port, log_level="warning")
