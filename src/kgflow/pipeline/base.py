"""Base protocol for pipeline stage handlers."""

from typing import Protocol, TypeVar

from kgflow.core.exceptions import KgflowError
from kgflow.core.models import StageName
from kgflow.core.types import Result

# Contravariant input (handlers can accept supertypes), invariant output
T_In = TypeVar("T_In", contravariant=True)
T_Out = TypeVar("T_Out")
T_Error = TypeVar("T_Error", bound=KgflowError)


class BaseAsyncHandler(Protocol[T_In, T_Out, T_Error]):
    """Protocol for asynchronous stage handlers.

    Each handler runs one stage of a CFP run. Handlers never raise across
    this boundary: collaborator exceptions and timeouts come back as
    ``Failure`` values.
    """

    stage: StageName

    async def handle(self, command: T_In) -> Result[T_Out, T_Error]:
        """Run the stage.

        Args:
            command: The stage's input, built by the orchestrator.

        Returns:
            A Result holding either the stage's output or its error.
        """
        ...
