"""
Chat-Model Adapters
===================
Concrete text-generation capabilities backed by an OpenAI-compatible
chat model (langchain_openai.ChatOpenAI).

Both adapters render jinja2 prompt templates from ``prompts/`` and ask
the model for structured output, so replies arrive already shaped as
OutreachDraft / CrisisSignal. The analytics core never imports this
module directly; it only sees the callables.

Usage:
    writer = ChatOutreachWriter(config)
    composer = OutreachComposer(text_generator=writer, config=config)
"""

import warnings
from pathlib import Path
from typing import Dict, List, Optional

from jinja2 import Environment, FileSystemLoader
from langchain_core.messages import HumanMessage, SystemMessage
from langchain_openai import ChatOpenAI

from .composer import OutreachBrief, OutreachDraft
from .config import Config, DEFAULT_CONFIG
from .crisis import CrisisSignal
from .utils.logger import Timer, get_logger, log_llm_call

logger = get_logger(__name__)

PROMPTS_DIR = Path(__file__).resolve().parent / "prompts"

warnings.filterwarnings("ignore", message=".*field_name='parsed'.*", category=UserWarning)


def _prompt_env() -> Environment:
    return Environment(loader=FileSystemLoader(str(PROMPTS_DIR)))


def _chat_model(config: Config, temperature: float) -> ChatOpenAI:
    llm = config.llm
    if not llm.api_key:
        raise ValueError(
            "FOODBANK_LLM_API_KEY (or OPENAI_API_KEY) must be set for text generation"
        )
    return ChatOpenAI(
        model=llm.model,
        temperature=temperature,
        api_key=llm.api_key,
        base_url=llm.base_url,
        timeout=llm.timeout_seconds,
        max_tokens=llm.max_tokens,
    )


class ChatOutreachWriter:
    """
    Outreach email writer.

    Called once per OutreachBrief, possibly from several threads at once;
    the underlying client is shared.
    """

    def __init__(self, config: Optional[Config] = None):
        self.config = config or DEFAULT_CONFIG
        env = _prompt_env()
        self.system_tpl = env.get_template("outreach_system.jinja2")
        self.user_tpl = env.get_template("outreach_user.jinja2")
        self.structured_llm = _chat_model(
            self.config, self.config.llm.outreach_temperature
        ).with_structured_output(OutreachDraft, method="json_schema")

    def messages(self, brief: OutreachBrief) -> list:
        """Rendered system and user messages for one brief."""
        context = brief.to_dict()
        return [
            SystemMessage(content=self.system_tpl.render(**context)),
            HumanMessage(content=self.user_tpl.render(**context)),
        ]

    def __call__(self, brief: OutreachBrief) -> OutreachDraft:
        return self.structured_llm.invoke(self.messages(brief))


class ChatCrisisClassifier:
    """Classify news headlines into a CrisisSignal."""

    def __init__(self, config: Optional[Config] = None):
        self.config = config or DEFAULT_CONFIG
        self.user_tpl = _prompt_env().get_template("crisis_user.jinja2")
        self.structured_llm = _chat_model(
            self.config, self.config.llm.crisis_temperature
        ).with_structured_output(CrisisSignal, method="json_schema")

    def __call__(self, headlines: List[Dict[str, str]]) -> CrisisSignal:
        prompt = self.user_tpl.render(headlines=headlines)

        with Timer() as timer:
            signal = self.structured_llm.invoke([HumanMessage(content=prompt)])

        log_llm_call(module="crisis_classifier", latency_ms=timer.elapsed_ms)
        return signal
