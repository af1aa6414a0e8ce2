"""Tagged results and the all-settled bulk runner shared by the list tools."""
from __future__ import annotations

import asyncio
import inspect
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Generic, Literal, Sequence, TypeVar, Union

from mcp_framework import log_interaction

I = TypeVar("I")
T = TypeVar("T")

VALIDATION_ERROR = "VALIDATION_ERROR"
UNKNOWN_ERROR = "UNKNOWN_ERROR"
TOOL_EXECUTION_ERROR = "TOOL_EXECUTION_ERROR"


@dataclass(frozen=True)
class Ok(Generic[T]):
    data: T

    @property
    def ok(self) -> bool:
        return True


@dataclass(frozen=True)
class Err:
    code: str
    message: str

    @property
    def ok(self) -> bool:
        return False

    def to_dict(self) -> dict[str, str]:
        return {"code": self.code, "message": self.message}


Result = Union[Ok[T], Err]
Operation = Callable[[I], Union[Result, Awaitable[Result]]]


@dataclass(frozen=True)
class BatchItemResult(Generic[I, T]):
    """Outcome of one batch item, echoing the input it was built from."""

    input: I
    status: Literal["success", "error"]
    data: T | None = None
    error: Err | None = None

    @property
    def ok(self) -> bool:
        return self.status == "success"


async def _settle(operation: Operation, item: Any) -> Result:
    outcome = operation(item)
    if inspect.isawaitable(outcome):
        outcome = await outcome
    if not isinstance(outcome, (Ok, Err)):
        raise TypeError(f"Batch operation must return Ok or Err, got {type(outcome).__name__}")
    return outcome


def _describe(item: Any) -> Any:
    if hasattr(item, "model_dump"):
        return item.model_dump()
    return item


async def run_batch(
    items: Sequence[I],
    operation: Operation,
    *,
    failure_message: str,
    action: str = "batch_item",
) -> list[BatchItemResult[I, Any]]:
    """
    Run ``operation`` for every item concurrently and collect every outcome.

    ``result[i]`` always belongs to ``items[i]``. An ``Err`` returned by the
    operation is kept as is; an exception raised by it becomes a
    ``TOOL_EXECUTION_ERROR`` item with ``failure_message``. No item can fail
    the batch.
    """
    if not items:
        return []

    outcomes = await asyncio.gather(
        *(_settle(operation, item) for item in items), return_exceptions=True
    )

    results: list[BatchItemResult[I, Any]] = []
    for item, outcome in zip(items, outcomes):
        if isinstance(outcome, BaseException) and not isinstance(outcome, Exception):
            raise outcome

        if isinstance(outcome, Exception):
            log_interaction(
                f"{action}_exception",
                _describe(item),
                {"error": str(outcome), "type": outcome.__class__.__name__},
            )
            entry = BatchItemResult(
                input=item,
                status="error",
                error=Err(TOOL_EXECUTION_ERROR, failure_message),
            )
        elif isinstance(outcome, Err):
            log_interaction(f"{action}_error", _describe(item), outcome.to_dict())
            entry = BatchItemResult(input=item, status="error", error=outcome)
        else:
            log_interaction(action, _describe(item), {"status": "success"})
            entry = BatchItemResult(input=item, status="success", data=outcome.data)
        results.append(entry)

    return results
