import logging
from typing import Any, Optional

from dotenv import load_dotenv
from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from agent_demo.protocol import MESSAGES_REQUIRED, create_chat_response, create_error
from agent_demo.runtime.runtime import Runtime

load_dotenv()

logger = logging.getLogger("agent_demo.gateway")
logging.basicConfig(level=logging.INFO)

VERSION = "1.0.0"


def create_app(runtime: Optional[Runtime] = None) -> FastAPI:
    runtime = runtime or Runtime()
    app = FastAPI(title="Agent Demo", version=VERSION)
    app.state.runtime = runtime

    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.on_event("startup")
    async def _startup():
        # Tool discovery finishes before the first request is served.
        await runtime.startup()
        logger.info("project root: %s", runtime.project_root)
        logger.info("ready with %d tools", len(runtime.tools))

    @app.on_event("shutdown")
    async def _shutdown():
        await runtime.shutdown()

    @app.get("/health")
    async def health():
        return {"ok": True, "version": VERSION, "tools": len(runtime.tools)}

    @app.post("/api/chat")
    async def chat(request: Request):
        try:
            body: Any = await request.json()
        except Exception:
            body = None
        messages = body.get("messages") if isinstance(body, dict) else None
        if not isinstance(messages, list):
            return JSONResponse(create_error(MESSAGES_REQUIRED), status_code=400)

        logger.info("received messages: %d", len(messages))
        try:
            result = await runtime.chat(messages)
        except Exception as e:
            logger.exception("error in /api/chat")
            return JSONResponse(create_error(str(e) or "Internal Server Error"), status_code=500)

        logger.info("agent response generated")
        return create_chat_response(messages=result.messages, text=result.text, tool_calls=result.tool_calls)

    return app
