"""Error taxonomy for the chat pipeline.

Every error carries an ``ErrorKind`` (reported to HTTP callers) and a
friendly sentence that can be shown to the visitor instead of a traceback.
"""
import enum


class ErrorKind(str, enum.Enum):
    data_source = "data_source_error"
    prompt_too_large = "prompt_too_large"
    inference_unavailable = "inference_unavailable"
    empty_response = "empty_response"
    internal = "internal_error"


class AssistantError(Exception):
    kind: ErrorKind = ErrorKind.internal
    user_message: str = "Sorry, I encountered an error. Please try again."


class DataSourceError(AssistantError):
    """Portfolio records could not be read."""
    kind = ErrorKind.data_source
    user_message = "Sorry, I can't reach the portfolio details right now. Please try again shortly."


class PromptTooLargeError(AssistantError):
    """The assembled prompt exceeds the configured size limit."""
    kind = ErrorKind.prompt_too_large
    user_message = "Sorry, that message is too long for me to answer. Could you shorten it?"

    def __init__(self, size: int, limit: int):
        super().__init__(f"Prompt of {size} characters exceeds limit of {limit}")
        self.size = size
        self.limit = limit


class InferenceUnavailableError(AssistantError):
    """The language model service failed or is not configured."""
    kind = ErrorKind.inference_unavailable


class EmptyResponseError(AssistantError):
    """The language model returned no usable text."""
    kind = ErrorKind.empty_response
    user_message = "Sorry, I couldn't come up with an answer to that. Could you rephrase it?"
