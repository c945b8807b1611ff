"""Replay-safe behavior switches for long-lived assistant instances.

An assistant instance lives as long as its pull request, across many
deployments. When the assistant's behavior changes, instances started before
the change must keep deciding the way they already decided. Each new
behavior is therefore introduced behind a named gate:

    if gate.is_patched(USE_REPO_GUIDELINE):
        ...new behavior...
    else:
        ...old behavior...

The first evaluation of a gate in an instance records the outcome in the
instance's decision log (``AssistantState.patches``), which is checkpointed
with the rest of the state. Later evaluations, including those after a
restore from a snapshot written by an older deployment, read the record.

Once no live instance can still hold ``False`` for a gate, the call site
switches to ``gate.deprecate(name)`` and the ``else`` branch is deleted.
"""

from pr_assistant.core.exceptions import NonDeterministicGateError
from pr_assistant.core.logging import get_logger

logger = get_logger("assistant.gate")

USE_REPO_GUIDELINE = "use-repo-guideline"
USE_CHANGE_LOG = "use-change-log-for-pull-request"
# deprecated: code review always runs as a sub-process
USE_SUBPROCESS_FOR_CODE_REVIEW = "use-subprocess-for-code-review"

# Gates whose new behavior ships with this deployment
DEPLOYED_PATCHES = frozenset({
    USE_REPO_GUIDELINE,
    USE_CHANGE_LOG,
})

# Gates whose old branch is deleted; they always evaluate as patched
DEPRECATED_PATCHES = frozenset({
    USE_SUBPROCESS_FOR_CODE_REVIEW,
})


class VersionedBehaviorGate:
    """Named boolean gates, fixed per instance at first evaluation."""

    def __init__(
        self,
        decisions: dict[str, bool],
        deployed: frozenset[str] = DEPLOYED_PATCHES,
        deprecated: frozenset[str] = DEPRECATED_PATCHES,
    ) -> None:
        # shared with AssistantState.patches so decisions are checkpointed
        self._decisions = decisions
        self._deployed = deployed | deprecated

    def is_patched(self, name: str) -> bool:
        if name in self._decisions:
            return self._decisions[name]

        value = name in self._deployed
        self._decisions[name] = value
        logger.info(f"Gate {name} recorded as {'patched' if value else 'unpatched'}")
        return value

    def deprecate(self, name: str) -> None:
        """Mark a gate whose old branch has been deleted.

        Raises NonDeterministicGateError when this instance already took the
        old branch, since it can no longer continue consistently.
        """
        if self._decisions.get(name) is False:
            raise NonDeterministicGateError(name)
        self._decisions[name] = True

    @property
    def decisions(self) -> dict[str, bool]:
        return dict(self._decisions)
