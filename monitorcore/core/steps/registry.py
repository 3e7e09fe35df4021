# monitorcore/core/steps/registry.py

from typing import Callable, Dict, Optional, Any, List
import logging

from ..errors import DuplicateStepError, RegistryFrozenError, StepNotFound
from ..step import Step, StepBody, ensure_async

logger = logging.getLogger(__name__)

# ---------------------------
# Step Registry
# ---------------------------


class StepRegistry:
    """
    Maps step names to executable step bodies.

    - Names are unique: registering a name twice raises DuplicateStepError
    - Registration happens before the run loop; the runner freezes the
      registry when the loop starts and later registrations raise
      RegistryFrozenError
    - Resolving an unknown name raises StepNotFound
    """
    def __init__(self) -> None:
        self._steps: Dict[str, Step] = {}
        self._frozen = False

    def register(self, name: str, body: Callable[[], Any], *, description: str = "") -> Step:
        if not name or not isinstance(name, str):
            raise ValueError("step name must be non-empty str")
        if not callable(body):
            raise ValueError("step body must be callable")
        if self._frozen:
            raise RegistryFrozenError(
                message=f"Cannot register step '{name}': registry is frozen",
                details={"step": name},
            )
        if name in self._steps:
            raise DuplicateStepError(
                message=f"Step already registered: {name}",
                details={"step": name},
            )

        step = Step(
            name=name,
            body=ensure_async(body),
            description=description or (getattr(body, "__doc__", None) or "").strip(),
        )
        self._steps[name] = step
        logger.debug("Registered step %s", name)
        return step

    def step(self, name: Optional[str] = None, *, description: str = "") -> Callable[[StepBody], StepBody]:
        """
        Decorator form of register().

            >>> @registry.step("TestLogging")
            ... async def test_logging():
            ...     ...
        """
        def decorator(fn: StepBody) -> StepBody:
            self.register(name or fn.__name__, fn, description=description)
            return fn

        return decorator

    def resolve(self, name: str) -> Step:
        step = self._steps.get(name)
        if step is None:
            raise StepNotFound.for_name(name)
        return step

    def get(self, name: str) -> Optional[Step]:
        return self._steps.get(name)

    def freeze(self) -> None:
        self._frozen = True

    @property
    def frozen(self) -> bool:
        return self._frozen

    def list(self) -> List[str]:
        return list(self._steps.keys())

    def describe(self, name: str) -> Dict[str, Any]:
        step = self._steps.get(name)
        if step is None:
            return {}
        return {
            "name": step.name,
            "doc": step.description,
            "callable": str(step.body),
        }

    def __contains__(self, name: object) -> bool:
        return name in self._steps

    def __len__(self) -> int:
        return len(self._steps)
