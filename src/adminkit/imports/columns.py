"""Fluent description of one importer column.

A column knows which CSV header feeds it, how to cast and validate the raw
cell, and how to write the result onto the record being imported.
"""

import re
from decimal import Decimal, InvalidOperation
from typing import Any, Self

from pydantic import EmailStr, HttpUrl, TypeAdapter, ValidationError

from adminkit.support.concerns import Closure, EvaluatesClosures

_email_adapter = TypeAdapter(EmailStr)
_url_adapter = TypeAdapter(HttpUrl)

TRUE_VALUES = {"1", "true", "yes", "y", "on"}
FALSE_VALUES = {"0", "false", "no", "n", "off"}

Rule = str | Closure


class ImportColumn(EvaluatesClosures):
    """Configuration for mapping, casting, validating and filling one column."""

    def __init__(self, name: str):
        self.name = name
        self._label: str | None = None
        self._guesses: list[str] = []
        self._examples: list[Any] = []
        self._example_header: str | None = None
        self._is_mapping_required = False
        self._rules: list[Rule] = []
        self._is_sensitive = False
        self._cast_type: str | None = None
        self._cast_state_using: Closure | None = None
        self._fill_record_using: Closure | None = None
        self._ignore_blank_state = True
        self._array_separator: str | None = None

    @classmethod
    def make(cls, name: str) -> Self:
        return cls(name)

    def __repr__(self) -> str:
        return f"<ImportColumn(name='{self.name}')>"

    # Fluent configuration

    def label(self, label: str) -> Self:
        self._label = label
        return self

    def guess(self, guesses: list[str]) -> Self:
        self._guesses = list(guesses)
        return self

    def example(self, example: Any) -> Self:
        self._examples = [example]
        return self

    def examples(self, examples: list[Any]) -> Self:
        self._examples = list(examples)
        return self

    def example_header(self, header: str) -> Self:
        self._example_header = header
        return self

    def required_mapping(self, condition: bool = True) -> Self:
        self._is_mapping_required = condition
        return self

    def rules(self, rules: list[Rule]) -> Self:
        self._rules = list(rules)
        return self

    def sensitive(self, condition: bool = True) -> Self:
        self._is_sensitive = condition
        return self

    def cast_state_using(self, callback: Closure | None) -> Self:
        self._cast_state_using = callback
        return self

    def numeric(self) -> Self:
        self._cast_type = "numeric"
        return self

    def integer(self) -> Self:
        self._cast_type = "integer"
        return self

    def boolean(self) -> Self:
        self._cast_type = "boolean"
        return self

    def array(self, separator: str = ",") -> Self:
        self._array_separator = separator
        return self

    def ignore_blank_state(self, condition: bool = True) -> Self:
        self._ignore_blank_state = condition
        return self

    def fill_record_using(self, callback: Closure | None) -> Self:
        self._fill_record_using = callback
        return self

    # Getters

    def get_name(self) -> str:
        return self.name

    def get_label(self) -> str:
        if self._label is not None:
            return self._label
        return self.name.replace("_", " ").replace(".", " ").capitalize()

    def get_guesses(self) -> list[str]:
        return [self.name, self.get_label(), *self._guesses]

    def get_examples(self) -> list[Any]:
        return list(self._examples)

    def get_example_header(self) -> str:
        return self._example_header or self.name

    def is_mapping_required(self) -> bool:
        return self._is_mapping_required

    def is_sensitive(self) -> bool:
        return self._is_sensitive

    def get_rules(self) -> list[Rule]:
        rules = list(self._rules)
        if self._is_mapping_required and "required" not in rules:
            rules.insert(0, "required")
        return rules

    def get_default_closure_injections(self) -> dict[str, Any]:
        return {"column": self}

    # Behaviour

    def guess_header(self, headers: list[str]) -> str | None:
        """Pick the CSV header that most likely feeds this column."""
        normalized_headers = {_normalize_header(header): header for header in reversed(headers)}
        for guess in self.get_guesses():
            header = normalized_headers.get(_normalize_header(guess))
            if header is not None:
                return header
        return None

    def cast_state(self, state: Any, options: dict[str, Any] | None = None) -> Any:
        """Turn a raw CSV cell into the value validated and written to the record."""
        if self._array_separator is not None:
            if state is None or (isinstance(state, str) and not state.strip()):
                state = []
            elif isinstance(state, str):
                state = [item.strip() for item in state.split(self._array_separator)]
                state = [item for item in state if item]
            state = [self._cast_single(item) for item in state]
        else:
            state = self._cast_single(state)

        if self._cast_state_using is not None:
            state = self.evaluate(self._cast_state_using, {"state": state, "options": options or {}})

        return state

    def _cast_single(self, state: Any) -> Any:
        if isinstance(state, str):
            state = state.strip()
            if state == "" and self._ignore_blank_state:
                return None

        if state is None or self._cast_type is None:
            return state

        if self._cast_type == "integer":
            return _to_integer(state)
        if self._cast_type == "numeric":
            return _to_number(state)
        if self._cast_type == "boolean":
            return _to_boolean(state)

        return state

    def validate(self, state: Any) -> list[str]:
        """Return the messages of every rule the state breaks."""
        rules = self.get_rules()
        label = self.get_label()
        messages: list[str] = []

        if _is_blank(state):
            if "required" in rules:
                messages.append(f"The {label} field is required.")
            return messages

        for rule in rules:
            if rule == "required":
                continue

            if callable(rule):
                message = self.evaluate(rule, {"state": state, "value": state, "attribute": self.name})
            else:
                message = _check_rule(rule, state, label)

            if message:
                messages.append(message)

        return messages

    def fill_record(self, record: Any, state: Any, importer: Any = None) -> None:
        """Write the state onto the record."""
        if self._fill_record_using is not None:
            self.evaluate(
                self._fill_record_using,
                {
                    "record": record,
                    "state": state,
                    "importer": importer,
                    "data": getattr(importer, "data", {}),
                    "options": getattr(importer, "options", {}),
                },
            )
            return

        setattr(record, self.name, state)


def _normalize_header(header: str) -> str:
    return re.sub(r"[\s\-]+", "_", header.strip().lower())


def _is_blank(value: Any) -> bool:
    if value is None:
        return True
    if isinstance(value, str):
        return value.strip() == ""
    if isinstance(value, (list, dict)):
        return len(value) == 0
    return False


def _to_integer(state: Any) -> Any:
    if isinstance(state, bool):
        return int(state)
    if isinstance(state, int):
        return state
    number = _to_number(state)
    if isinstance(number, (int, float)) and float(number).is_integer():
        return int(number)
    return state


def _to_number(state: Any) -> Any:
    if isinstance(state, (int, float)) and not isinstance(state, bool):
        return state
    try:
        number = Decimal(str(state).replace(",", ""))
    except InvalidOperation:
        return state
    if not number.is_finite():
        return state
    if number == number.to_integral_value() and "." not in str(state):
        return int(number)
    return float(number)


def _to_boolean(state: Any) -> Any:
    if isinstance(state, bool):
        return state
    text = str(state).strip().lower()
    if text in TRUE_VALUES:
        return True
    if text in FALSE_VALUES:
        return False
    return state


def _check_rule(rule: str, state: Any, label: str) -> str | None:
    name, _, argument = rule.partition(":")

    if name == "email":
        try:
            _email_adapter.validate_python(str(state))
        except ValidationError:
            return f"The {label} field must be a valid email address."
        return None

    if name == "url":
        try:
            _url_adapter.validate_python(str(state))
        except ValidationError:
            return f"The {label} field must be a valid URL."
        return None

    if name == "integer":
        if isinstance(state, bool) or not isinstance(_to_integer(state), int):
            return f"The {label} field must be an integer."
        return None

    if name == "numeric":
        if isinstance(state, bool) or not isinstance(_to_number(state), (int, float)):
            return f"The {label} field must be a number."
        return None

    if name == "boolean":
        if not isinstance(_to_boolean(state), bool):
            return f"The {label} field must be true or false."
        return None

    if name in ("max", "min"):
        limit = float(argument)
        if isinstance(state, (int, float)) and not isinstance(state, bool):
            size, unit = state, ""
        elif isinstance(state, list):
            size, unit = len(state), " items"
        else:
            size, unit = len(str(state)), " characters"
        if name == "max" and size > limit:
            return f"The {label} field must not be greater than {argument}{unit}."
        if name == "min" and size < limit:
            return f"The {label} field must be at least {argument}{unit}."
        return None

    if name == "in":
        allowed = [item.strip() for item in argument.split(",")]
        values = state if isinstance(state, list) else [state]
        if any(str(value) not in allowed for value in values):
            return f"The selected {label} is invalid."
        return None

    raise ValueError(f"Unknown validation rule [{rule}]")
