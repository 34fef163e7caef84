"""Mixins shared by the fluent configuration objects."""

import inspect
from typing import Any, Callable

Closure = Callable[..., Any]


class ClosureEvaluationError(TypeError):
    """Raised when a configuration closure asks for a value nobody can provide."""


class EvaluatesClosures:
    """Resolve configuration values that may be given as closures.

    A closure's parameters are filled by name: first from the injections
    passed to ``evaluate``, then from the object's default injections, then
    from the parameter's own default.
    """

    def evaluate(self, value: Any, named_injections: dict[str, Any] | None = None) -> Any:
        if not _is_closure(value):
            return value

        injections = {**self.get_default_closure_injections(), **(named_injections or {})}
        kwargs: dict[str, Any] = {}
        args: list[Any] = []

        for parameter in inspect.signature(value).parameters.values():
            if parameter.kind in (parameter.VAR_POSITIONAL, parameter.VAR_KEYWORD):
                continue

            if parameter.name in injections:
                resolved = injections[parameter.name]
            elif parameter.default is not parameter.empty:
                resolved = parameter.default
            else:
                raise ClosureEvaluationError(
                    f"An attempt was made to evaluate a closure for [{type(self).__name__}], "
                    f"but [{parameter.name}] was unresolvable."
                )

            if parameter.kind == parameter.POSITIONAL_ONLY:
                args.append(resolved)
            else:
                kwargs[parameter.name] = resolved

        return value(*args, **kwargs)

    def get_default_closure_injections(self) -> dict[str, Any]:
        """Values every closure of this object may ask for by name."""
        return {}


def _is_closure(value: Any) -> bool:
    return callable(value) and not isinstance(value, type)
