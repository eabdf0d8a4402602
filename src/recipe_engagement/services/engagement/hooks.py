"""Post-commit hooks and background task tracking.

Side effects that must only happen once a mutation is durable (removing a
replaced image, notifying favoriters) are registered on a ``PostCommitHooks``
scope instead of being run inline:

    async with PostCommitHooks() as hooks:
        hooks.after_rollback(remove_new_upload, name="remove_upload")
        record = await repository.update(...)
        hooks.after_commit(remove_old_image, name="remove_old_image")

Leaving the block normally runs the ``after_commit`` hooks; leaving it with
an exception runs the ``after_rollback`` hooks and re-raises. Hook failures
are logged and never undo committed state.
"""

from __future__ import annotations

import asyncio
from typing import TYPE_CHECKING, Self

from recipe_engagement.observability.logging import get_logger


if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Coroutine
    from types import TracebackType
    from typing import Any

    Hook = Callable[[], Awaitable[None]]

logger = get_logger(__name__)


class PostCommitHooks:
    """Ordered lists of callbacks run when a mutation scope exits."""

    def __init__(self) -> None:
        self._after_commit: list[tuple[str, Hook]] = []
        self._after_rollback: list[tuple[str, Hook]] = []

    def after_commit(self, hook: Hook, *, name: str) -> None:
        self._after_commit.append((name, hook))

    def after_rollback(self, hook: Hook, *, name: str) -> None:
        self._after_rollback.append((name, hook))

    async def __aenter__(self) -> Self:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        if exc is None:
            await self._run(self._after_commit, phase="commit")
        else:
            await self._run(self._after_rollback, phase="rollback")

    @staticmethod
    async def _run(hooks: list[tuple[str, Hook]], *, phase: str) -> None:
        for name, hook in hooks:
            try:
                await hook()
            except Exception:
                logger.exception("Post-commit hook failed", hook=name, phase=phase)


class TaskTracker:
    """Fire-and-forget asyncio tasks that can be drained on shutdown.

    The event loop only keeps weak references to tasks, so the tracker holds
    strong ones until each task finishes. Exceptions escaping a task are
    logged, never re-raised into the request that spawned it.
    """

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def spawn(
        self, coro: Coroutine[Any, Any, Any], *, name: str
    ) -> asyncio.Task[Any]:
        """Schedule ``coro`` without awaiting it."""
        task = asyncio.create_task(coro, name=name)
        self._tasks.add(task)
        task.add_done_callback(self._on_done)
        return task

    def _on_done(self, task: asyncio.Task[Any]) -> None:
        self._tasks.discard(task)
        if task.cancelled():
            logger.warning("Background task cancelled", task=task.get_name())
            return
        exc = task.exception()
        if exc is not None:
            logger.opt(exception=exc).error(
                "Background task failed", task=task.get_name()
            )

    async def drain(self, timeout: float | None = None) -> None:
        """Wait for outstanding tasks; cancel whatever is left after ``timeout``."""
        if not self._tasks:
            return

        _, still_running = await asyncio.wait(set(self._tasks), timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            logger.warning(
                "Cancelled background tasks on drain", count=len(still_running)
            )
            await asyncio.gather(*still_running, return_exceptions=True)
