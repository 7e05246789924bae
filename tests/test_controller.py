#!/usr/bin/env python3
"""
End-to-end tests for the turn controller with stubbed records and LLM.

USAGE:
    Run from project root: python -m pytest tests/test_controller.py -v
"""
import threading
import unittest

from portfolio_chat.app.context_cache import ContextCache
from portfolio_chat.app.context_compiler import ContextCompiler
from portfolio_chat.app.controller import Controller
from portfolio_chat.app.errors import DataSourceError, ErrorKind, InferenceUnavailableError
from portfolio_chat.app.prompt_builder import PromptBuilder
from portfolio_chat.app.records import RecordReader
from portfolio_chat.app.session import ConversationStore
from portfolio_chat.schemas.io_models import ConversationTurn
from portfolio_chat.schemas.records import SkillRecord


class OneSkillSource:
    def __init__(self):
        self.fail = False

    def read_profile(self):
        return []

    def read_skills(self):
        if self.fail:
            raise ConnectionError("store unreachable")
        return [SkillRecord(name="Go", proficiency=80, years_of_experience=3)]

    def read_experience(self):
        return []

    def read_education(self):
        return []

    def read_projects(self):
        return []

    def read_certificates(self):
        return []


class FakeGenerationClient:
    def __init__(self, answer="Go.", error=None):
        self.answer = answer
        self.error = error
        self.prompts = []
        self._lock = threading.Lock()

    def infer(self, prompt):
        with self._lock:
            self.prompts.append(prompt)
        if self.error is not None:
            raise self.error
        return self.answer


class TestController(unittest.TestCase):
    def make_controller(self, llm=None, max_prompt_chars=30000, history_window=10):
        self.source = OneSkillSource()
        self.store = ConversationStore(max_turns=10)
        self.llm = llm or FakeGenerationClient()
        self.cache = ContextCache(RecordReader(self.source), ContextCompiler(owner_name="Jordan Lee"))
        return Controller(
            context_cache=self.cache,
            conversation_store=self.store,
            prompt_builder=PromptBuilder(owner_name="Jordan Lee", max_prompt_chars=max_prompt_chars),
            generation_client=self.llm,
            history_window=history_window,
        )

    def test_end_to_end_turn(self):
        controller = self.make_controller()

        result = controller.handle_message("What languages?")

        self.assertTrue(result.success)
        self.assertEqual(result.message, "Go.")
        self.assertIsNone(result.error)
        self.assertEqual([t.role for t in self.store.recent_window(10)], ["user", "assistant"])
        self.assertIn("Go (80%, 3", self.llm.prompts[0])
        self.assertIn("Question: What languages?", self.llm.prompts[0])

    def test_current_message_is_not_repeated_in_history(self):
        controller = self.make_controller()
        controller.handle_message("What languages?")
        controller.handle_message("And for how long?")

        prompt = self.llm.prompts[1]
        self.assertIn("User: What languages?\nAssistant: Go.", prompt)
        self.assertNotIn("User: And for how long?", prompt)

    def test_inference_failure_keeps_user_turn_only(self):
        llm = FakeGenerationClient(error=InferenceUnavailableError("service down"))
        controller = self.make_controller(llm=llm)

        result = controller.handle_message("What languages?")

        self.assertFalse(result.success)
        self.assertEqual(result.error, ErrorKind.inference_unavailable.value)
        self.assertTrue(result.message)
        turns = self.store.recent_window(10)
        self.assertEqual([(t.role, t.text) for t in turns], [("user", "What languages?")])

    def test_data_source_failure_is_reported_and_retried_next_turn(self):
        controller = self.make_controller()
        self.source.fail = True

        result = controller.handle_message("What languages?")
        self.assertFalse(result.success)
        self.assertEqual(result.error, DataSourceError.kind.value)
        self.assertFalse(self.cache.is_warm)
        self.assertEqual(self.store.length(), 0)

        self.source.fail = False
        self.assertTrue(controller.handle_message("What languages?").success)

    def test_unexpected_error_does_not_escape(self):
        controller = self.make_controller(llm=FakeGenerationClient(error=RuntimeError("boom")))
        result = controller.handle_message("What languages?")
        self.assertFalse(result.success)
        self.assertEqual(result.error, ErrorKind.internal.value)

    def test_oldest_history_is_dropped_when_prompt_is_too_large(self):
        controller = self.make_controller()
        controller.handle_message("first question " + "x" * 300)
        controller.handle_message("second question")
        base = len(self.llm.prompts[1])

        # too small for the full history, large enough once the first exchange is dropped
        controller.builder.max_prompt_chars = base + 10
        result = controller.handle_message("third")

        self.assertTrue(result.success)
        prompt = self.llm.prompts[2]
        self.assertNotIn("first question", prompt)
        self.assertIn("Question: third", prompt)

    def test_prompt_too_large_without_history_fails_turn(self):
        controller = self.make_controller(max_prompt_chars=100)
        result = controller.handle_message("What languages?")
        self.assertFalse(result.success)
        self.assertEqual(result.error, ErrorKind.prompt_too_large.value)
        self.assertEqual(self.llm.prompts, [])

    def test_history_stays_bounded_across_many_turns(self):
        controller = self.make_controller()
        for i in range(12):
            controller.handle_message(f"question {i}")
        turns = self.store.recent_window(10)
        self.assertEqual(self.store.length(), 10)
        self.assertEqual(turns[0].text, "question 7")
        roles = [t.role for t in turns]
        self.assertEqual(roles, ["user", "assistant"] * 5)

    def test_full_history_never_opens_with_an_answer(self):
        controller = self.make_controller()
        for i in range(6):
            controller.handle_message(f"question {i}")

        # the store evicted "question 0"; its answer must not lead the transcript
        prompt = self.llm.prompts[5]
        self.assertIn("Conversation so far:\nUser: question 1\n", prompt)
        self.assertNotIn("Conversation so far:\nAssistant:", prompt)
        self.assertNotIn("question 0", prompt)

    def test_drop_orphan_answers(self):
        user = ConversationTurn(role="user", text="q")
        answer = ConversationTurn(role="assistant", text="a")
        self.assertEqual(Controller._drop_orphan_answers([answer, answer, user, answer]), [user, answer])
        self.assertEqual(Controller._drop_orphan_answers([answer]), [])
        self.assertEqual(Controller._drop_orphan_answers([]), [])

    def test_invalidate_rebuilds_context_without_touching_history(self):
        controller = self.make_controller()
        controller.handle_message("What languages?")
        controller.invalidate_knowledge_context()

        self.assertFalse(self.cache.is_warm)
        self.assertEqual(self.store.length(), 2)
        controller.handle_message("Anything else?")
        self.assertTrue(self.cache.is_warm)

    def test_sessions_keep_separate_histories(self):
        controller = self.make_controller()
        controller.handle_message("hello from a", session_id="a")
        controller.handle_message("hello from b", session_id="b")

        self.assertNotIn("hello from a", self.llm.prompts[1])
        self.assertEqual(self.store.length("a"), 2)
        self.assertTrue(controller.clear_history("a"))
        self.assertEqual(self.store.length("a"), 0)


if __name__ == '__main__':
    unittest.main()
