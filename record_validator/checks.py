"""
Check registry and the validator lifecycle shared by value and file validators.

Checks are plain methods tagged with the @check decorator. Each validator class
collects its tagged methods into CHECKS once, when the class is created, keyed
by the rule-set name of the check ("isInt", "maxLength", ...). Rule sets stay
declarative data: the orchestrator dispatches by name through run(), and only
registered checks are reachable, so configuration keys such as "label" or
lifecycle methods such as validate() can never be called from a rule set.

Every check appends at most one error and returns the validator, so checks can
be chained:

    ValueValidator("i", "name").is_required().min_length(2).validate()
"""

import inspect
from typing import Any, Callable, Dict, List

from .messages import make_formatter

_POSITIONAL = (
    inspect.Parameter.POSITIONAL_ONLY,
    inspect.Parameter.POSITIONAL_OR_KEYWORD,
)


def check(name: str) -> Callable:
    """
    Register the decorated validator method under a rule-set check name.

    Args:
        name: Check name used in rule sets and as message catalog key
    """
    def decorator(func):
        func._check_name = name
        return func
    return decorator


class CheckSpec:
    """A registered check: its name, method and positional arity."""

    def __init__(self, name: str, func: Callable):
        self.name = name
        self.func = func
        params = list(inspect.signature(func).parameters.values())[1:]
        self.max_args = len([p for p in params if p.kind in _POSITIONAL])

    def __repr__(self):
        return f"CheckSpec({self.name!r}, max_args={self.max_args})"


class BaseValidator:
    """
    Owns one error list and the check registry of a validator class.

    Subclasses define checks with @check; the registry is rebuilt for every
    subclass so each validator type exposes exactly its own check set.
    """

    CHECKS: Dict[str, CheckSpec] = {}

    def __init_subclass__(cls, **kwargs):
        super().__init_subclass__(**kwargs)
        registry = {}
        for klass in reversed(cls.__mro__):
            for attr in vars(klass).values():
                name = getattr(attr, "_check_name", None)
                if name:
                    registry[name] = CheckSpec(name, attr)
        cls.CHECKS = registry

    def __init__(self, label: str, messages: Any = None):
        """
        Args:
            label: Field label used in error messages
            messages: Flat message catalog, a MessageFormatter, or None for
                the fallback message format
        """
        self.label = label
        self.formatter = make_formatter(messages)
        self._errors: List[str] = []

    @classmethod
    def checks(cls) -> List[str]:
        """Return the names of the checks callable from a rule set."""
        return list(cls.CHECKS)

    def run(self, name: str, *params):
        """
        Run a registered check by name.

        Parameters beyond what the check accepts are dropped, so a flag such
        as {"isInt": True} runs the zero-argument check.

        Raises:
            KeyError: If name is not a registered check
        """
        spec = self.CHECKS[name]
        spec.func(self, *params[:spec.max_args])
        return self

    def validate(self) -> bool:
        """Return True if no check has failed so far."""
        return not self._errors

    def get_errors(self) -> List[str]:
        """Return the error messages in the order the checks failed."""
        return list(self._errors)

    def _add_error(self, key: str, *params):
        self._errors.append(self.formatter.format(key, self.label, params))
