"""In-process runtime for assistant instances and code-review sub-processes.

Each assistant instance is an asyncio task consuming its own inbox; the
runtime routes events to it by process id and guarantees at most one live
process per id.
"""

import asyncio
from dataclasses import dataclass, field
from functools import partial
from typing import Any, Optional

from pr_assistant.core.exceptions import ProcessAlreadyStartedError, ProcessNotFoundError
from pr_assistant.core.logging import get_logger
from pr_assistant.services.assistant.activities import ActivityProxy, RetryPolicy
from pr_assistant.services.assistant.schemas import (
    AssistantEvent,
    AssistantResult,
    PullRequestEvent,
    code_review_process_id,
    pull_request_process_id,
)
from pr_assistant.services.assistant.state import AssistantState
from pr_assistant.services.assistant.store import InMemoryStateStore, StateStore
from pr_assistant.services.assistant.workflow import PullRequestAssistant
from pr_assistant.services.reviewer.schemas import ReviewRequest, ReviewResult
from pr_assistant.services.reviewer.service import review_code_changes

logger = get_logger("assistant.runtime")


@dataclass
class _Instance:
    assistant: PullRequestAssistant
    inbox: asyncio.Queue = field(default_factory=asyncio.Queue)
    task: Optional[asyncio.Task] = None

    def is_live(self) -> bool:
        return (
            self.task is not None
            and not self.task.done()
            and self.assistant.state.status != "terminal"
        )


class AssistantRuntime:
    """Hosts assistant instances and code reviews inside the current event loop."""

    def __init__(
        self,
        activities: Any,
        store: Optional[StateStore] = None,
        policy: Optional[RetryPolicy] = None,
    ) -> None:
        self.activities = ActivityProxy(activities, policy)
        self.store = store or InMemoryStateStore()
        self._instances: dict[str, _Instance] = {}
        self._reviews: dict[str, asyncio.Task] = {}

    # --- assistant instances ---

    def start_assistant(self, event: PullRequestEvent) -> str:
        """Start the assistant of a pull request with its first event."""
        payload = event.payload
        process_id = pull_request_process_id(
            payload.repository.owner.login,
            payload.repository.name,
            payload.pull_request.number,
        )
        if self.is_running(process_id):
            raise ProcessAlreadyStartedError(process_id)

        instance = self._launch(AssistantState(process_id=process_id))
        instance.inbox.put_nowait(event)
        logger.info(f"Started assistant {process_id}")
        return process_id

    def signal(self, process_id: str, event: AssistantEvent) -> None:
        """Deliver an event to a live assistant, in arrival order."""
        instance = self._instances.get(process_id)
        if instance is None or not instance.is_live():
            raise ProcessNotFoundError(process_id)
        instance.inbox.put_nowait(event)
        logger.debug(f"Signalled {event.kind} event to {process_id}")

    def is_running(self, process_id: str) -> bool:
        instance = self._instances.get(process_id)
        if instance is not None:
            return instance.is_live()
        task = self._reviews.get(process_id)
        return task is not None and not task.done()

    async def join(self, process_id: str) -> None:
        """Wait until every event delivered so far has been processed."""
        instance = self._instances.get(process_id)
        if instance is not None:
            await instance.inbox.join()
        elif self.store.load(process_id) is None:
            raise ProcessNotFoundError(process_id)

    async def result(self, process_id: str) -> AssistantResult:
        """Wait for an assistant to terminate and return its result.

        Terminated instances are no longer held in memory; their result is
        read from the last snapshot.
        """
        instance = self._instances.get(process_id)
        if instance is not None and instance.task is not None:
            return await instance.task
        state = self.store.load(process_id)
        if state is None or state.result is None:
            raise ProcessNotFoundError(process_id)
        return state.result

    def get_state(self, process_id: str) -> Optional[AssistantState]:
        instance = self._instances.get(process_id)
        if instance is not None:
            return instance.assistant.state
        return self.store.load(process_id)

    def _launch(self, state: AssistantState) -> _Instance:
        assistant = PullRequestAssistant(
            state=state,
            activities=self.activities,
            reviews=self,
            store=self.store,
        )
        instance = _Instance(assistant=assistant)
        instance.task = asyncio.create_task(
            assistant.run(instance.inbox), name=state.process_id
        )
        instance.task.add_done_callback(partial(self._on_assistant_done, instance))
        self._instances[state.process_id] = instance
        return instance

    def _on_assistant_done(self, instance: _Instance, task: asyncio.Task) -> None:
        # the snapshot was checkpointed before the task finished
        process_id = task.get_name()
        if self._instances.get(process_id) is instance:
            del self._instances[process_id]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error(f"Assistant {process_id} crashed: {error}")

    async def restore(self) -> int:
        """Resume every snapshot that has not terminated."""
        states = await asyncio.to_thread(self.store.list_active)
        restored = 0
        for state in states:
            if state.context is None:
                logger.warning(f"Skip restoring {state.process_id}: no context was computed")
                continue
            if self.is_running(state.process_id):
                continue
            self._launch(state)
            restored += 1
        logger.info(f"Restored {restored} assistant instance(s)")
        return restored

    # --- code reviews ---

    def start_review(self, request: ReviewRequest) -> str:
        """Start a code review; at most one runs per pull request."""
        process_id = code_review_process_id(
            request.org, request.repo, request.pull_request_number
        )
        if self.is_running(process_id):
            raise ProcessAlreadyStartedError(process_id)

        task = asyncio.create_task(
            review_code_changes(request, self.activities), name=process_id
        )
        task.add_done_callback(self._on_review_done)
        self._reviews[process_id] = task
        logger.info(f"Started code review {process_id}")
        return process_id

    def _on_review_done(self, task: asyncio.Task) -> None:
        process_id = task.get_name()
        if self._reviews.get(process_id) is task:
            del self._reviews[process_id]
        if task.cancelled():
            return
        error = task.exception()
        if error is not None:
            logger.opt(exception=error).error(f"Code review {process_id} crashed: {error}")

    async def review_result(self, process_id: str) -> ReviewResult:
        """Wait for a running code review and return its result."""
        task = self._reviews.get(process_id)
        if task is None:
            raise ProcessNotFoundError(process_id)
        return await task

    # --- shutdown ---

    async def shutdown(self) -> None:
        """Cancel every running task. Snapshots stay in the store."""
        tasks = [i.task for i in self._instances.values() if i.task and not i.task.done()]
        tasks += [t for t in self._reviews.values() if not t.done()]
        for task in tasks:
            task.cancel()
        await asyncio.gather(*tasks, return_exceptions=True)
        logger.info(f"Runtime stopped ({len(tasks)} task(s) cancelled)")
