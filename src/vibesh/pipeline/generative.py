"""Language-model backed interpretation of natural-language input.

The model is bound to the ``ProposedAction`` schema as a tool call, so
field types and bounds are validated by pydantic before a candidate is
built. One request is sent per input line: no retries, no caching.
"""

from __future__ import annotations

import json
from collections.abc import Callable, Sequence
from typing import TYPE_CHECKING, Any

import httpx
import openai
from langchain_core.language_models import BaseChatModel
from langchain_core.messages import BaseMessage, HumanMessage, SystemMessage
from pydantic import BaseModel, Field, ValidationError, field_validator

from vibesh.context import directory_context
from vibesh.errors import ConfigurationError, SchemaError, TransportError
from vibesh.logging import Loggers
from vibesh.pipeline.models import ActionCandidate, Chain

if TYPE_CHECKING:
    from vibesh.config import VibeshSettings

logger = Loggers.pipeline()

SYSTEM_PROMPT = """You are VibeSH, a natural-language shell assistant. When the user gives an instruction you do not execute anything yourself. Instead:

1. Interpret the user's intent.
2. Choose the single most appropriate shell command, as an executable plus arguments.
3. Evaluate:
   - risk_score: integer 0-10 for potential data loss or system impact
   - reads_data: true if the command reads files or system state
   - writes_data: true if it creates, modifies, or deletes files or data
4. Respond only by calling the ProposedAction tool with:
   - explanation: one friendly sentence describing what you will do
   - command: array ["executable", "arg1", "arg2", ...], never empty
   - risk_score, reads_data, writes_data as evaluated above"""


class ProposedAction(BaseModel):
    """A shell command proposed for the user's instruction."""

    explanation: str = Field(description="One friendly sentence describing what will be done")
    command: list[str] = Field(
        min_length=1,
        description='Executable followed by its arguments, e.g. ["ls", "-la"]',
    )
    risk_score: int = Field(ge=0, le=10, description="0 (no risk) to 10 (extremely risky)")
    reads_data: bool = Field(description="True if it reads from disk, network, etc.")
    writes_data: bool = Field(description="True if it writes, modifies or deletes data")

    @field_validator("command")
    @classmethod
    def executable_present(cls, value: list[str]) -> list[str]:
        if not value[0].strip():
            raise ValueError("command must start with an executable")
        return value

    def to_candidate(self) -> ActionCandidate:
        return ActionCandidate(
            explanation=self.explanation,
            command=list(self.command),
            risk_score=self.risk_score,
            reads_data=self.reads_data,
            writes_data=self.writes_data,
            source=Chain.GENERATIVE,
            shell=False,
        )


def _raw_text(raw: Any) -> str:
    """Best-effort text of what the model sent back, for diagnostics."""
    if raw is None:
        return ""
    tool_calls = getattr(raw, "tool_calls", None) or []
    invalid_calls = getattr(raw, "invalid_tool_calls", None) or []
    if tool_calls:
        return json.dumps(tool_calls[0].get("args", {}))
    if invalid_calls:
        return str(invalid_calls[0].get("args") or "")
    content = getattr(raw, "content", raw)
    return content if isinstance(content, str) else json.dumps(content)


class GenerativeProcessor:
    """Turns one input line plus history into an ActionCandidate.

    Example:
        processor = GenerativeProcessor.from_settings(settings)
        candidate = processor.process("show the biggest files here", history=[])
    """

    def __init__(
        self,
        model: BaseChatModel,
        context_provider: Callable[[], str] = directory_context,
        system_prompt: str = SYSTEM_PROMPT,
    ):
        """Initialize the processor.

        Args:
            model: Chat model supporting tool-call structured output
            context_provider: Produces the directory snapshot text
            system_prompt: Instruction describing the output schema
        """
        self.model = model
        self.context_provider = context_provider
        self.system_prompt = system_prompt
        self._structured = model.with_structured_output(
            ProposedAction,
            method="function_calling",
            include_raw=True,
        )

    @classmethod
    def from_settings(cls, settings: VibeshSettings, **kwargs: Any) -> GenerativeProcessor:
        """Build a processor backed by ChatOpenAI.

        Raises:
            ConfigurationError: If no OpenAI API key is configured
        """
        if not settings.has_api_key:
            raise ConfigurationError(
                "OPENAI_API_KEY is not set",
                details={"setting": "openai_api_key"},
            )

        from langchain_openai import ChatOpenAI

        model = ChatOpenAI(
            model=settings.model,
            api_key=settings.openai_api_key,
            base_url=settings.openai_base_url,
            timeout=settings.request_timeout_seconds,
            max_retries=0,
            temperature=0,
        )
        return cls(model, **kwargs)

    def build_messages(self, text: str, history: Sequence[str]) -> list[BaseMessage]:
        """Assemble the request turns.

        Order: schema instruction, directory context, one turn per
        history entry, then the current input.
        """
        messages: list[BaseMessage] = [
            SystemMessage(content=self.system_prompt),
            SystemMessage(content="Directory context:\n" + self.context_provider()),
        ]
        messages.extend(HumanMessage(content=line) for line in history)
        messages.append(HumanMessage(content=text))
        return messages

    def process(self, text: str, history: Sequence[str]) -> ActionCandidate:
        """Ask the model for a candidate.

        Args:
            text: Current input line
            history: Previously submitted lines, oldest first

        Returns:
            ActionCandidate carrying the model's self-reported risk

        Raises:
            TransportError: If the request fails or times out
            SchemaError: If the response does not match ProposedAction
        """
        messages = self.build_messages(text, history)
        logger.info("generative_request", history_turns=len(history))

        try:
            response = self._structured.invoke(messages)
        except (openai.APIError, httpx.HTTPError) as e:
            raise TransportError(
                f"Model request failed: {e}",
                details={"exception": type(e).__name__},
            ) from e
        except ValidationError as e:
            # Raised by parsers that validate eagerly instead of reporting parsing_error
            raise SchemaError(f"Response does not match the action schema: {e}") from e

        return self._parse(response)

    def _parse(self, response: Any) -> ActionCandidate:
        if isinstance(response, ProposedAction):
            return response.to_candidate()

        if not isinstance(response, dict):
            raise SchemaError("Unexpected response type from model", raw=str(response))

        parsed = response.get("parsed")
        error = response.get("parsing_error")
        raw = _raw_text(response.get("raw"))

        if error is not None:
            raise SchemaError(f"Response does not match the action schema: {error}", raw=raw)
        if isinstance(parsed, dict):
            try:
                parsed = ProposedAction.model_validate(parsed)
            except ValidationError as e:
                raise SchemaError(f"Response does not match the action schema: {e}", raw=raw) from e
        if not isinstance(parsed, ProposedAction):
            raise SchemaError("Model did not return a structured action", raw=raw)

        return parsed.to_candidate()
