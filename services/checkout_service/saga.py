import logging
from typing import Awaitable, Callable, Optional

from shared.observability import storefront_saga_compensation_total

logger = logging.getLogger(__name__)

Step = Callable[[dict], Awaitable[None]]


class SagaStep:
    def __init__(self, name: str, action: Step, compensation: Optional[Step] = None):
        self.name = name
        self.action = action
        self.compensation = compensation


class SagaOrchestrator:
    """Runs steps in order; on failure, compensates the finished ones in reverse.

    Outcome is written back into ctx:
        failed_step             name of the step that raised
        compensated             steps whose compensation succeeded
        compensation_failures   steps whose compensation raised too
    """

    def __init__(self, name: str = "saga"):
        self.name = name
        self.steps = []

    def add_step(self, name: str, action: Step, compensation: Optional[Step] = None):
        """Builder pattern to add a step and its rollback compensation."""
        self.steps.append(SagaStep(name, action, compensation))
        return self

    async def execute(self, ctx: dict):
        executed_steps = []
        current = None
        try:
            for step in self.steps:
                current = step
                await step.action(ctx)
                executed_steps.append(step)
            return True
        except Exception as e:
            logger.error(f"{self.name}: step '{current.name}' failed: {e}")
            ctx["failed_step"] = current.name
            await self._rollback(executed_steps, ctx)
            raise

    async def _rollback(self, executed_steps: list, ctx: dict):
        ctx.setdefault("compensated", [])
        ctx.setdefault("compensation_failures", [])
        logger.info(f"{self.name}: rolling back {len(executed_steps)} step(s)")
        for step in reversed(executed_steps):
            if not step.compensation:
                continue
            try:
                await step.compensation(ctx)
            except Exception as ce:
                # Keep going; the remaining compensations still have to run
                ctx["compensation_failures"].append(step.name)
                logger.critical(
                    f"{self.name}: compensation for '{step.name}' failed, manual intervention required: {ce}"
                )
            else:
                ctx["compensated"].append(step.name)
                storefront_saga_compensation_total.labels(step_name=step.name).inc()
                logger.info(f"{self.name}: compensated '{step.name}'")
