# utils/diagnostics.py
from typing import Callable, List, Optional

from loguru import logger

Reporter = Callable[[str], None]


class DiagnosticCollector:
    """
    Collects the warnings raised while coercing records.

    Instances are callables so they can be handed to the aggregation
    functions as their `report` argument. Every message is also logged at
    DEBUG level under `context`.
    """

    def __init__(self, context: str = ""):
        self.context = context
        self.messages: List[str] = []

    def __call__(self, message: str) -> None:
        self.messages.append(message)
        if self.context:
            logger.debug("[{}] {}", self.context, message)
        else:
            logger.debug(message)

    def __len__(self) -> int:
        return len(self.messages)


def emit(report: Optional[Reporter], message: str) -> None:
    if report is not None:
        report(message)
