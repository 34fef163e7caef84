"""Configuration mixins composed into Panel."""

from typing import Self

from adminkit.support.concerns import Closure


class HasSpaMode:
    """Single-page-application navigation settings.

    Every setting accepts a literal or a closure; closures are resolved
    through ``evaluate`` each time a getter is called.
    """

    _has_spa_mode: bool | Closure = False
    _has_spa_prefetch: bool | Closure = False
    _spa_url_exceptions: list[str] | Closure = []

    def spa(self, condition: bool | Closure = True, prefetch: bool | Closure = False) -> Self:
        self._has_spa_mode = condition
        self._has_spa_prefetch = prefetch
        return self

    def spa_url_exceptions(self, exceptions: list[str] | Closure) -> Self:
        self._spa_url_exceptions = exceptions
        return self

    def has_spa_mode(self) -> bool:
        return bool(self.evaluate(self._has_spa_mode))

    def has_spa_prefetch(self) -> bool:
        return bool(self.evaluate(self._has_spa_prefetch))

    def get_spa_url_exceptions(self) -> list[str]:
        return list(self.evaluate(self._spa_url_exceptions) or [])
