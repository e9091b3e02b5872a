"""
Compose Queue
=============

Serializes compose cycles for one canvas with "last write wins".

Slider events arrive faster than a compose cycle completes. The queue
keeps a single pending slot: a newer request replaces an older one
that has not started yet. A request whose overlay finished loading
after a newer request arrived is discarded instead of rendered, so a
stale result can never overwrite a fresher one.

Each submit() resolves with the canvas as of the first render at or
after its own request, or with that render's error.
"""

import asyncio
import logging
from dataclasses import dataclass
from typing import List, Optional, Tuple

from photobooth.capture.buffer import PixelBuffer
from photobooth.editor.canvas import CanvasSurface
from photobooth.editor.compositor import Compositor
from photobooth.models.controls import EditorControls, ensure_valid


logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True, eq=False)
class ComposeRequest:
    """One compose cycle's inputs."""

    source: PixelBuffer
    frame_id: Optional[str]
    controls: EditorControls


class ComposeQueue:
    """
    Single-slot coalescing queue in front of a Compositor.

    Attributes:
        compositor: Compositor owning the canvas
        submitted: Requests accepted
        rendered: Renders completed
        superseded: Requests replaced or discarded before rendering
        invalidated: Times the queue was invalidated
    """

    def __init__(self, compositor: Compositor) -> None:
        self.compositor = compositor

        self._pending: Optional[Tuple[int, ComposeRequest]] = None
        self._waiters: List[Tuple[int, asyncio.Future]] = []
        self._worker: Optional[asyncio.Task] = None
        self._generation: int = 0
        self._watermark: int = 0

        self.submitted: int = 0
        self.rendered: int = 0
        self.superseded: int = 0
        self.invalidated: int = 0

    @property
    def busy(self) -> bool:
        return self._worker is not None and not self._worker.done()

    async def submit(self, request: ComposeRequest) -> CanvasSurface:
        """
        Queue a compose cycle and wait for it (or a newer one).

        Raises:
            InvalidControlState: Immediately, without queueing
            ValueError: If the source is empty, without queueing
        """
        ensure_valid(request.controls)
        if request.source.is_empty:
            raise ValueError("Cannot compose an empty source image")

        self._generation += 1
        generation = self._generation
        self.submitted += 1

        if self._pending is not None:
            self.superseded += 1
            logger.debug(f"Compose request {self._pending[0]} superseded by {generation}")
        self._pending = (generation, request)

        future = asyncio.get_running_loop().create_future()
        self._waiters.append((generation, future))

        if not self.busy:
            self._worker = asyncio.create_task(self._drain(), name="compose_queue")

        return await future

    def invalidate(self) -> None:
        """
        Drop every request accepted so far, including one in flight.

        Nothing submitted before this call will render. Its waiters
        resolve with the canvas as it stands.
        """
        self._generation += 1
        self._watermark = self._generation
        self._pending = None
        self.invalidated += 1
        self._settle(self._watermark, result=self.compositor.canvas)
        logger.debug(f"Compose queue invalidated at generation {self._watermark}")

    async def wait_idle(self) -> None:
        """Wait until no compose cycle is running or pending."""
        while self.busy:
            await asyncio.shield(self._worker)

    async def close(self) -> None:
        """Stop the worker and cancel anyone still waiting."""
        if self._worker is not None and not self._worker.done():
            self._worker.cancel()
            try:
                await self._worker
            except asyncio.CancelledError:
                pass
        self._pending = None
        for _, future in self._waiters:
            if not future.done():
                future.cancel()
        self._waiters = []

    async def _drain(self) -> None:
        while self._pending is not None:
            generation, request = self._pending
            self._pending = None

            try:
                overlay = await self.compositor.resolve_overlay(request.frame_id)

                if generation <= self._watermark:
                    logger.debug(f"Dropping compose {generation}, queue was invalidated")
                    continue

                if self._pending is not None:
                    self.superseded += 1
                    logger.debug(f"Discarding stale compose {generation}, newer request pending")
                    continue

                canvas = self.compositor.render(request.source, request.controls, overlay)
            except asyncio.CancelledError:
                raise
            except Exception as e:
                logger.error(f"Compose {generation} failed: {e}")
                self._settle(generation, error=e)
                continue

            self.rendered += 1
            self._settle(generation, result=canvas)

    def _settle(
        self,
        generation: int,
        result: Optional[CanvasSurface] = None,
        error: Optional[BaseException] = None,
    ) -> None:
        """Resolve every waiter at or before this generation."""
        remaining = []
        for waiter_generation, future in self._waiters:
            if waiter_generation > generation:
                remaining.append((waiter_generation, future))
                continue
            if future.done():
                continue
            if error is not None:
                future.set_exception(error)
            else:
                future.set_result(result)
        self._waiters = remaining

    def metrics(self) -> dict:
        """Queue counters for observability."""
        return {
            "submitted": self.submitted,
            "rendered": self.rendered,
            "superseded": self.superseded,
            "invalidated": self.invalidated,
            "busy": self.busy,
        }
