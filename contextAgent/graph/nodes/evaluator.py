"""Evaluator node - grades the latest answer as good, normal or bad."""

from __future__ import annotations

import logging
from typing import Callable, Literal

from langchain_core.messages import SystemMessage
from pydantic import BaseModel, Field

from contextAgent.graph.message_utils import prepare_model_messages
from contextAgent.graph.prompts import EVALUATOR_SYSTEM_PROMPT
from contextAgent.graph.state import ThreadState, Verdict
from contextAgent.utils.error_handler import ModelInvocationError, handle_model_error
from contextAgent.utils.logging_utils import log_error, log_node_entry, log_node_exit

LOGGER = logging.getLogger("contextagent.nodes.evaluator")


class EvaluationResult(BaseModel):
    """Structured evaluator output."""

    grade: Literal["good", "normal", "bad"] = Field(
        description="Decide if the llm result is ok or not.",
    )
    reason: str = Field(default="", description="One sentence explaining the grade.")


def build_evaluator_node(*, model, structured_output_method: str = "function_calling") -> Callable:
    evaluator = model.with_structured_output(EvaluationResult, method=structured_output_method)
    system_message = SystemMessage(content=EVALUATOR_SYSTEM_PROMPT)

    async def evaluator_node(state: ThreadState) -> dict:
        log_node_entry(LOGGER, "evaluator", state)

        prompt = prepare_model_messages(state.get("messages", []), system_message)
        try:
            result = await evaluator.ainvoke(prompt)
            if not isinstance(result, EvaluationResult):
                raise ValueError(f"structured output could not be parsed (got {type(result).__name__})")
        except Exception as e:
            log_error(LOGGER, e, "evaluator model call")
            raise ModelInvocationError(
                f"Evaluator model call failed: {e}",
                user_message=handle_model_error(e),
            ) from e

        if result.reason:
            LOGGER.info(f"Evaluation reason: {result.reason[:200]}")

        updates = {"evaluation_verdict": Verdict(result.grade)}
        log_node_exit(LOGGER, "evaluator", updates)
        return updates

    return evaluator_node


__all__ = ["EvaluationResult", "build_evaluator_node"]
