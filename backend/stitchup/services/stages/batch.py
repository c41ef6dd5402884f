"""
Batch runner: applies one generation step to every item of a stage's input.

Policy:
- Items run one at a time, in input order.
- Any exception from one item is logged and the item skipped.
- A fixed pause separates items (shorter in placeholder mode).
- With no credential the whole batch goes to the placeholder generator.
- A per-stage deadline bounds the batch; completed items are kept.
- Zero results fails the stage.
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import TypeVar

from stitchup.config import Settings
from stitchup.models.schemas import StageOutcome, StageReport
from stitchup.services.stages.base import NoArtifactsProducedError, StageDeadlineError

logger = logging.getLogger(__name__)

T = TypeVar("T")
R = TypeVar("R")


class BatchRunner:
    """
    Runs a per-item coroutine over a batch under the stage failure policy.

    Example:
        runner = BatchRunner(settings)
        outcome = await runner.run(
            "images",
            scenes,
            generate=creator.create_image,
            placeholder=placeholders.create_image,
            use_placeholders=client is None,
        )
        images = outcome.value
    """

    def __init__(self, settings: Settings):
        self.item_delay = settings.item_delay
        self.placeholder_delay = settings.placeholder_delay
        self.stage_timeout = settings.stage_timeout

    async def run(
        self,
        stage_name: str,
        items: Sequence[T],
        generate: Callable[[T], Awaitable[R]],
        placeholder: Callable[[T], Awaitable[R]],
        use_placeholders: bool,
        label: Callable[[T], str] = str,
    ) -> StageOutcome:
        """
        Process ``items`` and collect the successes.

        Args:
            stage_name: Stage name for logs, report and errors
            items: Input batch
            generate: Real generation for one item
            placeholder: Offline generation for one item
            use_placeholders: True when the provider credential is absent
            label: Short item description for logs

        Returns:
            StageOutcome with the list of produced artifacts and a StageReport

        Raises:
            NoArtifactsProducedError: Nothing was produced
            StageDeadlineError: The deadline fired before anything was produced
        """
        worker = placeholder if use_placeholders else generate
        delay = self.placeholder_delay if use_placeholders else self.item_delay
        mode = "placeholder" if use_placeholders else "real"

        logger.info(f"{stage_name}: processing {len(items)} items ({mode} generation)")

        results: list[R] = []
        failures: list[str] = []
        cancelled = False

        try:
            async with asyncio.timeout(self.stage_timeout):
                for index, item in enumerate(items):
                    if index and delay:
                        await asyncio.sleep(delay)
                    try:
                        results.append(await worker(item))
                    except Exception as e:
                        logger.warning(f"{stage_name}: {label(item)} failed: {e}")
                        failures.append(f"{label(item)}: {e}")
        except TimeoutError:
            cancelled = True
            logger.error(
                f"{stage_name}: deadline of {self.stage_timeout}s reached after "
                f"{len(results)} of {len(items)} items"
            )

        report = StageReport(
            stage=stage_name,
            attempted=len(items),
            succeeded=len(results),
            placeholders=len(results) if use_placeholders else 0,
            cancelled=cancelled,
            failures=failures,
        )
        logger.info(report.summary())

        if not results:
            if cancelled:
                raise StageDeadlineError(
                    stage_name, f"Deadline of {self.stage_timeout}s reached before any item completed"
                )
            raise NoArtifactsProducedError(stage_name, attempted=len(items), failures=failures)

        return StageOutcome(value=results, report=report)
