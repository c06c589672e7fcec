"""Application factory for the pitch practice service.

Services are built once per app and kept on `app.state`; the session sweep
runs for the lifetime of the app.

Run directly with uvicorn:
    $ uvicorn pitchlab.server:create_app --factory --port 5000
"""
from __future__ import annotations

import logging
from contextlib import asynccontextmanager
from typing import Any, AsyncIterator, List, Optional

from fastapi import FastAPI

from pitchlab import __version__
from pitchlab.common.error_envelope import register_error_handlers
from pitchlab.common.health import router as health_router
from pitchlab.config import runtime_config
from pitchlab.conversations.routes import router as conversations_router
from pitchlab.conversations.service import ConversationService
from pitchlab.instructions.routes import router as instructions_router
from pitchlab.instructions.service import InstructionService
from pitchlab.llm.client import CompletionClient, completion_client_from_env
from pitchlab.memory.repository import ConversationMemory, memory_from_env
from pitchlab.replies.service import ReplyGenerator
from pitchlab.sessions.service import SessionRegistry

logger = logging.getLogger(__name__)


def build_services(
    memory: ConversationMemory,
    completions: CompletionClient,
    registry: Optional[SessionRegistry] = None,
) -> tuple[SessionRegistry, ConversationService, InstructionService]:
    registry = registry or SessionRegistry(memory, settings=runtime_config.get_session_settings())
    replies = ReplyGenerator(memory, completions, settings=runtime_config.get_generation_settings())
    return registry, ConversationService(registry, replies), InstructionService(replies)


def create_app(
    memory: Optional[ConversationMemory] = None,
    completions: Optional[CompletionClient] = None,
    registry: Optional[SessionRegistry] = None,
) -> FastAPI:
    # clients built here are closed on shutdown; injected ones belong to the caller
    owned: List[Any] = []
    if memory is None:
        if registry is not None:
            memory = registry.memory
        else:
            memory = memory_from_env()
            owned.append(memory)
    if completions is None:
        completions = completion_client_from_env()
        owned.append(completions)
    registry, conversations, instructions = build_services(memory, completions, registry)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        registry.start()
        logger.info("Session sweep started (ttl=%ss)", registry.settings.idle_ttl_seconds)
        try:
            yield
        finally:
            await registry.stop()
            logger.info("Session sweep stopped; %d session(s) dropped", len(registry))
            for resource in owned:
                await resource.aclose()

    app = FastAPI(title="Pitch Practice", version=__version__, lifespan=lifespan)
    app.state.memory = memory
    app.state.completions = completions
    app.state.registry = registry
    app.state.conversations = conversations
    app.state.instructions = instructions

    register_error_handlers(app)
    app.include_router(health_router)
    app.include_router(conversations_router)
    app.include_router(instructions_router)
    return app
