#!/usr/bin/env python3
"""
Main FastAPI application for the portfolio chatbot.
"""

from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException
from fastapi.middleware.cors import CORSMiddleware

from .config import Config
from .context_cache import ContextCache
from .context_compiler import ContextCompiler
from .controller import Controller
from .generate import GenerationClient
from .prompt_builder import PromptBuilder
from .records import RecordReader, SqlRecordSource
from .session import create_conversation_store
from ..data.database import SessionLocal, create_tables
from ..schemas.io_models import ChatRequest, ChatResponse, DEFAULT_SESSION, InvalidateResponse
from ..utils.logger import get_logger

logger = get_logger()


def build_controller() -> Controller:
    """Wire the long-lived pipeline components for this process."""
    reader = RecordReader(SqlRecordSource(SessionLocal))
    compiler = ContextCompiler(owner_name=Config.OWNER_NAME)
    return Controller(
        context_cache=ContextCache(reader, compiler),
        conversation_store=create_conversation_store(),
        prompt_builder=PromptBuilder(owner_name=Config.OWNER_NAME, max_prompt_chars=Config.MAX_PROMPT_CHARS),
        generation_client=GenerationClient(),
        history_window=Config.HISTORY_WINDOW,
    )


@asynccontextmanager
async def lifespan(app: FastAPI):
    Config.debug_print()
    create_tables()
    yield


def create_app(controller: Controller = None) -> FastAPI:
    controller = controller or build_controller()

    app = FastAPI(
        title="Portfolio Chat API",
        description="Knowledge-grounded assistant that answers questions about a portfolio",
        version="1.0.0",
        lifespan=lifespan,
    )
    app.state.controller = controller

    # Add CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=["*"],  # In production, specify your frontend domain
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )

    @app.post("/api/chat", response_model=ChatResponse, response_model_exclude_none=True)
    def chat(request: ChatRequest):
        """Answer one visitor message. Pipeline failures come back as success=false."""
        if not request.message or not request.message.strip():
            raise HTTPException(status_code=400, detail="Message is required")

        session_id = request.session_id or DEFAULT_SESSION
        result = controller.handle_message(request.message.strip(), session_id=session_id)
        return ChatResponse(**result.model_dump())

    @app.delete("/api/chat/history")
    def clear_history(session_id: str = DEFAULT_SESSION):
        return {"cleared": controller.clear_history(session_id)}

    @app.post("/api/admin/knowledge/invalidate", response_model=InvalidateResponse)
    def invalidate_knowledge_context():
        """Called by the admin side whenever portfolio records change."""
        controller.invalidate_knowledge_context()
        return InvalidateResponse(invalidated=True)

    @app.get("/health")
    def health_check():
        """Health check endpoint."""
        return {"status": "healthy", "knowledge_context_warm": controller.context_cache.is_warm}

    return app


app = create_app()

if __name__ == "__main__":
    import uvicorn
    uvicorn.run(app, host="0.0.0.0", port=8000)
