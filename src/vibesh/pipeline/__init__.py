"""Line-processing pipeline.

Components, leaf first:

- RiskClassifier: prefix rules assigning a risk score and read/write flags
- ConfirmationGate: decides whether a candidate needs the user's approval
- Executor: runs shell text or argv lists and captures combined output
- RetrievalMatcher: lexical lookup in a fixed knowledge base
- GenerativeProcessor: structured tool-call request to a chat model

Usage:
    from vibesh.pipeline import RetrievalMatcher, RiskClassifier

    entry = RetrievalMatcher().match("list files")
    assessment = RiskClassifier().classify(entry.template)
"""

from vibesh.pipeline.executor import Executor
from vibesh.pipeline.gate import (
    ConfirmationGate,
    ConfirmationRequest,
    ConfirmationStatus,
    Confirmer,
)
from vibesh.pipeline.models import (
    ActionCandidate,
    Chain,
    ExecutionResult,
    KnowledgeEntry,
    LineResult,
    LineStatus,
    Mode,
)
from vibesh.pipeline.retrieval import (
    DEFAULT_KNOWLEDGE,
    POPULAR_INTENTS,
    KnowledgeBase,
    RetrievalMatcher,
)
from vibesh.pipeline.risk import RiskAssessment, RiskClassifier, RiskRule
from vibesh.pipeline.session import Session

# GenerativeProcessor pulls in langchain; import it from
# vibesh.pipeline.generative where it is needed.

__all__ = [
    # Components
    "ConfirmationGate",
    "Executor",
    "KnowledgeBase",
    "RetrievalMatcher",
    "RiskClassifier",
    "Session",
    # Gate types
    "ConfirmationRequest",
    "ConfirmationStatus",
    "Confirmer",
    # Data models
    "ActionCandidate",
    "Chain",
    "ExecutionResult",
    "KnowledgeEntry",
    "LineResult",
    "LineStatus",
    "Mode",
    "RiskAssessment",
    "RiskRule",
    # Knowledge
    "DEFAULT_KNOWLEDGE",
    "POPULAR_INTENTS",
]
