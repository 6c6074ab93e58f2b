"""
Stream Orchestrator
Runs one chat turn through the staged pipeline and reports progress to an
abstract event sink.

Pipeline:
    init → intent → signals → knowledge → response → page → complete

The transport (SSE over HTTP, a test list, ...) is an adapter that supplies
the `emit` coroutine. Once `run` starts emitting it always finishes with
exactly one `complete` or `error` event.
"""
import asyncio
import time
from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, List, Optional
from loguru import logger

from src.agents.intent_classifier import classify_message_intent
from src.agents.page_generator import PageGenerator
from src.agents.persona_detection import (
    classify_vectors,
    describe_persona,
    detect_and_update_vectors,
    detect_signals,
    update_persona_with_signals,
)
from src.agents.response_agent import ResponseSynthesizer
from src.config import get_settings
from src.models.intent import IntentAnalysis
from src.models.message import ChatTurn, ConversationMessage, GenerationMode, MessageRole
from src.models.page import PageGenerationRequest, PageType
from src.models.persona import PainPointType, PersonaScores
from src.models.session import Session
from src.models.signal import Signal, SignalType
from src.services.knowledge_retriever import KnowledgeRetriever
from src.services.session_tracker import SessionTracker
from src.session_store import SessionInitializationError, SessionStore
from src.utils.fallback_responses import get_fallback_reply
from src.utils.observability import log_business_event, log_stage_execution

Emit = Callable[[str, Dict[str, Any]], Awaitable[None]]

# stage id -> (active name, active progress, complete name, complete progress)
STAGES: Dict[str, tuple[str, int, str, int]] = {
    "init": ("Initializing...", 0, "Session ready", 5),
    "intent": ("Analyzing your question...", 10, "Question analyzed", 20),
    "signals": ("Detecting your profile...", 30, "Profile updated", 40),
    "knowledge": ("Searching knowledge base...", 50, "Context gathered", 60),
    "response": ("Generating response...", 70, "Response ready", 80),
    "page": ("Generating personalized page...", 85, "Page ready", 95),
    "complete": ("Saving your session...", 97, "Complete", 100),
}
STAGE_ORDER = list(STAGES)


def validate_message(message: Any, max_length: int | None = None) -> Optional[str]:
    """Error text for an unacceptable chat message, None when it is fine."""
    max_length = max_length or get_settings().max_message_length
    if not isinstance(message, str) or not message.strip():
        return "Message is required and must be a non-empty string"
    if len(message) > max_length:
        return f"Message is too long (max {max_length} characters)"
    return None


def determine_generation_mode(persona: PersonaScores, message_count: int) -> GenerationMode:
    if message_count > 5 and len(persona.pain_points_detected) >= 2:
        return GenerationMode.DATA_CONNECTED
    if persona.overall_confidence > 0.5 and message_count > 2:
        return GenerationMode.RETURNING
    return GenerationMode.FRESH


def fallback_page_type(persona: PersonaScores) -> PageType:
    """Page type when the intent classifier made no confident suggestion."""
    if persona.sales_focus_score > 0.5:
        return PageType.SOLUTION_BRIEF
    if persona.marketing_focus_score > 0.5:
        return PageType.FEATURE_SHOWCASE
    return PageType.SOLUTION_BRIEF


def stage_event(stage_id: str, status: str) -> Dict[str, Any]:
    active_name, active_progress, complete_name, complete_progress = STAGES[stage_id]
    if status == "active":
        return {"stageId": stage_id, "status": status, "stageName": active_name, "progress": active_progress}
    return {"stageId": stage_id, "status": status, "stageName": complete_name, "progress": complete_progress}


@dataclass
class StreamContext:
    """Everything one turn needs, loaded before the stream opens."""
    session_id: str
    message: str
    session: Session
    history: List[ConversationMessage]
    interaction_context: Dict[str, Any] = field(default_factory=dict)
    interaction_source: Optional[str] = None

    @property
    def clicked_text(self) -> Optional[str]:
        value = self.interaction_context.get("context")
        return value if isinstance(value, str) else None


@dataclass
class TurnState:
    """Values produced by the stages of one turn."""
    persona: PersonaScores
    intent: Optional[IntentAnalysis] = None
    signals: List[Signal] = field(default_factory=list)
    knowledge_context: Optional[str] = None
    reply: str = ""
    generated_page: Optional[Dict[str, Any]] = None


class StreamOrchestrator:
    """
    Coordinates the per-turn pipeline.

    Every collaborator failure except a fatal one is contained inside its
    stage; the session record is only written in the final persist step.

    Usage:
        >>> ctx = await orchestrator.prepare(session_id, "How can you help our sales team?")
        >>> await orchestrator.run(ctx, emit)
    """

    def __init__(
        self,
        session_store: SessionStore,
        knowledge_retriever: KnowledgeRetriever,
        response_synthesizer: ResponseSynthesizer,
        page_generator: PageGenerator,
        stage_delay_seconds: float | None = None
    ):
        settings = get_settings()
        self.session_store = session_store
        self.knowledge_retriever = knowledge_retriever
        self.response_synthesizer = response_synthesizer
        self.page_generator = page_generator
        self.stage_delay_seconds = (
            stage_delay_seconds if stage_delay_seconds is not None else settings.stage_delay_seconds
        )
        self.enable_vector_detection = settings.enable_vector_detection
        self.history_window = settings.history_window_size
        self.page_context_turns = settings.page_context_turns
        self.knowledge_top_k = settings.knowledge_top_k

    async def prepare(
        self,
        session_id: str,
        message: str,
        interaction_context: Optional[Dict[str, Any]] = None,
        interaction_source: Optional[str] = None
    ) -> StreamContext:
        """
        Load the session and its recent history.

        Raises:
            SessionInitializationError: If the session store cannot serve the session
        """
        try:
            session = await self.session_store.get_session(session_id)
            history = await self.session_store.get_conversation_history(session_id, limit=self.history_window)
        except Exception as e:
            logger.error(f"Failed to initialize session {session_id}: {e}")
            raise SessionInitializationError("Failed to initialize session") from e

        return StreamContext(
            session_id=session_id,
            message=message,
            session=session,
            history=history,
            interaction_context=dict(interaction_context or {}),
            interaction_source=interaction_source,
        )

    async def run(self, ctx: StreamContext, emit: Emit) -> None:
        """Run the full pipeline. Never raises; exactly one of `complete` or `error` is emitted."""
        start = time.perf_counter()
        logger.info(f"🎬 Starting stream for session {ctx.session_id}")
        completed = False

        try:
            state = TurnState(persona=ctx.session.persona)

            await self._stage(emit, "init", "active")
            await self._stage(emit, "init", "complete")

            await self._timed(ctx, emit, "intent", self._intent_stage(ctx, state))
            await self._timed(ctx, emit, "signals", self._signals_stage(ctx, state))
            if self.enable_vector_detection:
                vectors = classify_vectors(state.persona)
                await emit("persona_vectors", vectors.model_dump(mode="json", by_alias=True))
            await self._timed(ctx, emit, "knowledge", self._knowledge_stage(ctx, state))
            await self._timed(ctx, emit, "response", self._response_stage(ctx, state))
            await self._timed(ctx, emit, "page", self._page_stage(ctx, state, emit))

            await self._stage(emit, "complete", "active")
            mode = determine_generation_mode(state.persona, len(ctx.history))
            await self._persist(ctx, state, mode)

            await emit("complete", {
                "success": True,
                "message": state.reply,
                "session": {
                    "sessionId": ctx.session_id,
                    "persona": state.persona.model_dump(mode="json"),
                    "messageCount": ctx.session.message_count + 1,
                },
                "signals": [signal.describe() for signal in state.signals],
                "generationMode": mode.value,
                "generatedPage": state.generated_page,
            })
            completed = True
            await emit("stage", stage_event("complete", "complete"))

            logger.success(
                f"✅ Stream complete for session {ctx.session_id} in "
                f"{(time.perf_counter() - start) * 1000:.0f}ms"
            )

        except Exception as e:
            if completed:
                logger.warning(f"Trailing stage event not delivered for session {ctx.session_id}: {e}")
                return
            logger.exception(f"Stream failed for session {ctx.session_id}: {e}")
            try:
                await emit("error", {"error": str(e) or "Unknown error"})
            except Exception as emit_error:
                logger.warning(f"Could not deliver error event for session {ctx.session_id}: {emit_error}")

    # ------------------------------------------------------------------
    # Stage plumbing
    # ------------------------------------------------------------------

    async def _stage(self, emit: Emit, stage_id: str, status: str) -> None:
        await emit("stage", stage_event(stage_id, status))
        if status == "complete" and self.stage_delay_seconds > 0:
            await asyncio.sleep(self.stage_delay_seconds)

    async def _timed(self, ctx: StreamContext, emit: Emit, stage_id: str, work: Awaitable[Dict[str, Any]]) -> None:
        await self._stage(emit, stage_id, "active")
        stage_start = time.perf_counter()
        details = await work
        log_stage_execution(
            stage=stage_id,
            session_id=ctx.session_id,
            status=details.pop("status", "complete"),
            duration_ms=(time.perf_counter() - stage_start) * 1000,
            **details
        )
        await self._stage(emit, stage_id, "complete")

    # ------------------------------------------------------------------
    # Stages
    # ------------------------------------------------------------------

    async def _intent_stage(self, ctx: StreamContext, state: TurnState) -> Dict[str, Any]:
        state.intent = classify_message_intent(ctx.message, len(ctx.history), state.persona)
        return {"intent": state.intent.intent.value, "confidence": state.intent.confidence}

    async def _signals_stage(self, ctx: StreamContext, state: TurnState) -> Dict[str, Any]:
        state.signals = detect_signals(ctx.message, state.persona)

        for signal in state.signals:
            is_pain_point = signal.type == SignalType.PAIN_POINT
            try:
                await self.session_store.record_persona_signal(
                    ctx.session_id,
                    signal_type="pain_point_mention" if is_pain_point else signal.type.value,
                    evidence=signal.evidence,
                    strength=signal.strength,
                    pain_points=[PainPointType(signal.category)] if is_pain_point else None,
                    metadata={"category": signal.category},
                )
                log_business_event("persona_signal_recorded", ctx.session_id, category=signal.category)
            except Exception as e:
                logger.warning(f"Failed to record signal {signal.category} for session {ctx.session_id}: {e}")

        state.persona = update_persona_with_signals(state.persona, state.signals)
        if self.enable_vector_detection:
            state.persona = detect_and_update_vectors(state.persona, ctx.message, ctx.clicked_text)

        return {"signal_count": len(state.signals)}

    async def _knowledge_stage(self, ctx: StreamContext, state: TurnState) -> Dict[str, Any]:
        try:
            state.knowledge_context = await self.knowledge_retriever.get_context_for_llm(
                ctx.message, state.persona, top_k=self.knowledge_top_k
            )
        except Exception as e:
            logger.warning(f"Knowledge retrieval failed for session {ctx.session_id}: {e}")
            return {"status": "degraded", "error": str(e)}
        return {"found": state.knowledge_context is not None}

    async def _response_stage(self, ctx: StreamContext, state: TurnState) -> Dict[str, Any]:
        turns = [ChatTurn.from_message(message) for message in ctx.history]
        try:
            state.reply = await self.response_synthesizer.synthesize(
                ctx.message, state.persona, turns, state.knowledge_context
            )
        except Exception as e:
            logger.error(f"Response synthesis failed for session {ctx.session_id}, using fallback: {e}")
            state.reply = get_fallback_reply()
            return {"status": "degraded", "error": str(e)}
        return {"reply_chars": len(state.reply)}

    async def _page_stage(self, ctx: StreamContext, state: TurnState, emit: Emit) -> Dict[str, Any]:
        intent = state.intent
        page_type = intent.suggested_page_type if intent and intent.suggested_page_type else fallback_page_type(state.persona)

        knowledge_lines = [
            line.strip() for line in (state.knowledge_context or "").split("\n") if line.strip()
        ]
        turns = [ChatTurn.from_message(message) for message in ctx.history]
        if self.page_context_turns:
            turns = turns[-self.page_context_turns:]
        else:
            turns = []

        try:
            request = PageGenerationRequest(
                user_message=ctx.message,
                page_type=page_type,
                persona=state.persona,
                knowledge_context=knowledge_lines,
                conversation_history=turns,
                persona_description=describe_persona(state.persona),
                page_context=ctx.interaction_context,
                interaction_source=ctx.interaction_source,
            )
            result = await self.page_generator.generate(request)
        except Exception as e:
            logger.error(f"Page generation raised for session {ctx.session_id}: {e}")
            log_business_event("page_generation_failed", ctx.session_id, error=str(e))
            return {"status": "degraded", "page_type": page_type.value}

        if not result.success or result.page is None:
            logger.warning(f"Page generation failed for session {ctx.session_id}: {result.error}")
            log_business_event(
                "page_generation_failed", ctx.session_id,
                page_type=page_type.value, retry_count=result.retry_count
            )
            return {"status": "degraded", "page_type": page_type.value}

        page_payload = result.page.to_payload()
        state.generated_page = {
            "page": page_payload,
            "intent": intent.intent.value if intent else None,
            "intentConfidence": intent.confidence if intent else None,
        }
        await emit("page", {"page": page_payload})
        log_business_event(
            "page_generated", ctx.session_id,
            page_type=page_type.value, retry_count=result.retry_count,
            generation_time_ms=result.generation_time
        )
        return {"page_type": page_type.value, "retry_count": result.retry_count}

    async def _persist(self, ctx: StreamContext, state: TurnState, mode: GenerationMode) -> None:
        try:
            await self.session_store.add_conversation_message(ctx.session_id, MessageRole.USER, ctx.message, mode)
            await self.session_store.add_conversation_message(ctx.session_id, MessageRole.ASSISTANT, state.reply, mode)
        except Exception as e:
            logger.warning(f"Failed to save conversation for session {ctx.session_id}: {e}")

        try:
            await self.session_store.update_persona(ctx.session_id, state.persona)
        except Exception as e:
            # Profile updates for this turn are lost
            logger.error(f"Failed to persist persona for session {ctx.session_id}: {e}")

        feature = "BevGenie AI"
        if state.generated_page:
            feature = state.generated_page["page"].get("title") or feature
        try:
            await self.session_store.track_query(
                ctx.session_id,
                SessionTracker.build_query(
                    ctx.message,
                    context=ctx.interaction_source or "chat",
                    solution_provided=state.reply[:200],
                    feature_used=feature,
                ),
            )
        except Exception as e:
            logger.warning(f"Failed to track query for session {ctx.session_id}: {e}")
