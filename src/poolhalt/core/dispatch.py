"""Fire-and-forget command dispatch.

Shutdown commands for individual VMs and member hosts are issued on a
worker pool and never joined. Whether a command succeeded is observed
only through later enumeration; a rejected command and a slow one look
the same to the procedure. Outcomes are logged at debug level.

Each batch of commands (one escalation phase, or the member host
shutdowns) gets its own pool with a worker per command, so a command
never queues behind one that is still blocked from an earlier batch.
"""

from __future__ import annotations

from collections.abc import Callable
from concurrent.futures import Executor, Future, ThreadPoolExecutor

from poolhalt.core.clock import SystemClock
from poolhalt.utils.logging import get_logger

logger = get_logger("dispatch")

ExecutorFactory = Callable[[int], Executor]


def thread_pool(workers: int) -> Executor:
    """Create a thread pool with ``workers`` threads."""
    return ThreadPoolExecutor(max_workers=workers, thread_name_prefix="poolhalt-dispatch")


class Dispatcher:
    """Spawns detached tasks with a stagger delay between spawns.

    Args:
        clock: Clock used for the stagger delay.
        executor_factory: Builds the pool for each batch, given its size.

    Example:
        >>> with Dispatcher(SystemClock()) as dispatcher:
        ...     dispatcher.start_batch(len(targets))
        ...     for uuid in targets:
        ...         dispatcher.spawn(xe.shutdown_vm, uuid, label="graceful", stagger=1)
    """

    def __init__(
        self,
        clock: SystemClock,
        executor_factory: ExecutorFactory = thread_pool,
    ) -> None:
        self.clock = clock
        self._executor_factory = executor_factory
        self._executor: Executor | None = None

    def start_batch(self, size: int) -> None:
        """Retire the current pool and open one with a worker per task.

        Tasks still running in the retired pool carry on in the background;
        any that never started are cancelled.

        Args:
            size: Number of tasks the batch will spawn.
        """
        self._retire()
        logger.debug(f"Opening dispatch batch of {size}")
        self._executor = self._executor_factory(max(size, 1))

    def spawn(
        self,
        func: Callable[[str], None],
        target: str,
        label: str,
        stagger: float = 0,
    ) -> Future[None]:
        """Submit ``func(target)`` to the current batch without waiting for it.

        Args:
            func: Action to run, taking the target UUID.
            target: UUID of the resource the action applies to.
            label: Short action name for logging.
            stagger: Delay after spawning, before returning.

        Returns:
            The task's future. Callers are not expected to wait on it.

        Raises:
            RuntimeError: If no batch has been started.
        """
        if self._executor is None:
            raise RuntimeError("start_batch() must be called before spawn()")

        future = self._executor.submit(func, target)
        future.add_done_callback(lambda f: self._log_outcome(f, label, target))
        self.clock.sleep(stagger)
        return future

    @staticmethod
    def _log_outcome(future: Future[None], label: str, target: str) -> None:
        if future.cancelled():
            logger.debug(f"{label} for {target} cancelled")
            return
        error = future.exception()
        if error is not None:
            logger.debug(f"{label} for {target} failed: {error}")
        else:
            logger.debug(f"{label} for {target} completed")

    def _retire(self) -> None:
        if self._executor is not None:
            self._executor.shutdown(wait=False, cancel_futures=True)
            self._executor = None

    def close(self) -> None:
        """Release the current pool without waiting for outstanding tasks."""
        self._retire()

    def __enter__(self) -> Dispatcher:
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
