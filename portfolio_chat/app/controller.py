"""Controller / Orchestrator for a single chat turn.

A turn moves through IDLE -> WARMING -> ASSEMBLING -> INVOKING -> RECORDING
and back to IDLE. Any failure returns straight to IDLE with a failed
TurnResult; nothing raised inside the pipeline reaches the caller.

Once the user turn is recorded it stays in the history even if the model
fails to answer, so the gap is visible and a resent message is not
duplicated in the prompt.
"""
import enum
import threading
from typing import List

from .context_cache import ContextCache
from .errors import AssistantError, ErrorKind, PromptTooLargeError
from .generate import GenerationClient
from .prompt_builder import PromptBuilder
from ..schemas.io_models import ConversationTurn, DEFAULT_SESSION, TurnResult
from ..utils.logger import get_logger

logger = get_logger()


class TurnState(str, enum.Enum):
    idle = "idle"
    warming = "warming"
    assembling = "assembling"
    invoking = "invoking"
    recording = "recording"


class Controller:
    def __init__(
        self,
        context_cache: ContextCache,
        conversation_store,
        prompt_builder: PromptBuilder,
        generation_client: GenerationClient,
        history_window: int = 10,
    ):
        self.context_cache = context_cache
        self.conversation_store = conversation_store
        self.builder = prompt_builder
        self.generation_client = generation_client
        self.history_window = history_window
        # serializes "append user turn + read window" so history order is arrival order
        self._turn_lock = threading.Lock()

    def _record_user_turn(self, text: str, session_id: str) -> List[ConversationTurn]:
        """Append the user turn and return the turns that came before it."""
        with self._turn_lock:
            self.conversation_store.append(ConversationTurn(role="user", text=text), session_id)
            window = self.conversation_store.recent_window(self.history_window + 1, session_id)
        return self._drop_orphan_answers(window[:-1])

    @staticmethod
    def _drop_orphan_answers(history: List[ConversationTurn]) -> List[ConversationTurn]:
        """Start the transcript at a user turn; an answer whose question was trimmed is dropped."""
        start = 0
        while start < len(history) and history[start].role == "assistant":
            start += 1
        return history[start:]

    def _assemble(self, context: str, history: List[ConversationTurn], text: str) -> str:
        """Build the prompt, evicting the oldest history turns while it is too large.

        The knowledge context, rules and question are never cut.
        """
        while True:
            try:
                return self.builder.build_prompt(context, history, text)
            except PromptTooLargeError as e:
                if not history:
                    raise
                logger.warning(f"[WORKFLOW] {e}; dropping oldest history turn ({len(history)} left)")
                history = self._drop_orphan_answers(history[1:])

    def handle_message(self, text: str, session_id: str = DEFAULT_SESSION) -> TurnResult:
        state = TurnState.idle
        logger.info(f"[WORKFLOW] 1. Controller received message for session '{session_id}'")
        try:
            state = TurnState.warming
            context = self.context_cache.get_context()

            state = TurnState.assembling
            history = self._record_user_turn(text, session_id)
            logger.info(f"[WORKFLOW] 2. Assembling prompt with {len(history)} prior turns")
            prompt = self._assemble(context, history, text)

            state = TurnState.invoking
            logger.info("[WORKFLOW] 3. Invoking language model")
            answer = self.generation_client.infer(prompt)

            state = TurnState.recording
            self.conversation_store.append(ConversationTurn(role="assistant", text=answer), session_id)
            logger.info("[WORKFLOW] 4. Assistant turn recorded")
            return TurnResult(success=True, message=answer)

        except AssistantError as e:
            logger.warning(f"[WORKFLOW] Turn failed while {state.value}: {e.kind.value}: {e}")
            return TurnResult(success=False, error=e.kind.value, message=e.user_message)
        except Exception:
            logger.exception(f"[WORKFLOW] Unexpected error while {state.value}")
            return TurnResult(success=False, error=ErrorKind.internal.value, message=AssistantError.user_message)
        finally:
            logger.debug(f"[WORKFLOW] {state.value} -> {TurnState.idle.value}")

    def invalidate_knowledge_context(self):
        """Admin hook: rebuild the knowledge context on the next turn."""
        self.context_cache.invalidate()

    def clear_history(self, session_id: str = DEFAULT_SESSION) -> bool:
        return self.conversation_store.clear(session_id)
