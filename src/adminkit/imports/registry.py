"""Lookup of registered importer classes by short name or dotted path.

Only classes registered with ``register_importer`` ever resolve; references
are never imported.
"""

import importlib

from adminkit.imports.exceptions import ImporterNotFoundError
from adminkit.imports.importer import Importer

_importers: dict[str, type[Importer]] = {}
_bundled_loaded = False


def register_importer(importer_cls: type[Importer]) -> type[Importer]:
    """Class decorator making an importer available under its ``name``."""
    if not importer_cls.name:
        raise ValueError(f"{importer_cls.__name__} needs a name to be registered")
    _importers[importer_cls.name] = importer_cls
    return importer_cls


def importer_path(importer_cls: type[Importer]) -> str:
    return f"{importer_cls.__module__}.{importer_cls.__qualname__}"


def registered_importers() -> dict[str, type[Importer]]:
    _load_bundled_importers()
    return dict(_importers)


def get_registered_importer(name: str) -> type[Importer]:
    """Importer registered under ``name``."""
    _load_bundled_importers()

    try:
        return _importers[name]
    except KeyError:
        raise ImporterNotFoundError(f"Importer [{name}] is not registered") from None


def resolve_importer(reference: str) -> type[Importer]:
    """Resolve a registered name or the dotted path of a registered class."""
    _load_bundled_importers()

    if reference in _importers:
        return _importers[reference]

    for importer_cls in _importers.values():
        if importer_path(importer_cls) == reference:
            return importer_cls

    raise ImporterNotFoundError(f"Importer [{reference}] is not registered")


def _load_bundled_importers() -> None:
    global _bundled_loaded
    if _bundled_loaded:
        return
    importlib.import_module("adminkit.importers")
    _bundled_loaded = True
