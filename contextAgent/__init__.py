"""ContextAgent - plan, run and evaluate tasks over a checkpointed graph."""

from contextAgent.agent import ContextEngineeringAgent

__version__ = "0.1.0"
__all__ = ["ContextEngineeringAgent"]
