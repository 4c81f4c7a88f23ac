"""Format handler registry."""

import threading
from typing import Any, Callable, Iterable, Optional, Union

from loguru import logger

from tabio.core.exceptions import HandlerDirectionUnavailableError, UnrecognizedFormatError
from tabio.models.enums import Direction
from tabio.models.table import HandlerPair

ImportFn = Callable[..., Any]
ExportFn = Callable[..., Any]


class FormatRegistry:
    """Registry mapping format tags to import/export handlers.

    Registration and lookup share one lock, so handlers may be registered
    while other threads import or export.
    """

    def __init__(self):
        """Initialize empty registry."""
        self._handlers: dict[str, HandlerPair] = {}
        self._aliases: dict[str, str] = {}
        self._lock = threading.RLock()

    def register(
        self,
        tag: str,
        import_fn: Optional[ImportFn] = None,
        export_fn: Optional[ExportFn] = None,
        *,
        import_all_fn: Optional[ImportFn] = None,
        aliases: Iterable[str] = (),
        library: Optional[str] = None,
        multi_table: bool = False,
    ) -> None:
        """Register handlers for a format tag.

        Re-registering a tag replaces its previous handlers.

        Args:
            tag: Canonical format tag (case-insensitive)
            import_fn: ``fn(path, **options) -> DataFrame``
            export_fn: ``fn(df, path, **options) -> None``; multi-table formats
                receive a dict of name -> DataFrame instead of ``df``
            import_all_fn: ``fn(path, **options) -> dict[str, DataFrame]`` reading
                every sheet or table of a multi-section file
            aliases: Extra extensions or names resolving to ``tag``
            library: Name of the codec library, for display
            multi_table: Whether export accepts a mapping of named tables
        """
        if import_fn is None and export_fn is None:
            raise ValueError(f"At least one of import_fn or export_fn is required for '{tag}'")

        tag = tag.lower()
        with self._lock:
            replaced = tag in self._handlers
            self._handlers[tag] = HandlerPair(import_fn, export_fn, import_all_fn, library, multi_table)
            self._aliases[tag] = tag
            for alias in aliases:
                self._aliases[alias.lower()] = tag

        if replaced:
            logger.info(f"Replaced handlers for format '{tag}'")
        else:
            logger.debug(f"Registered handlers for format '{tag}'")

    def lookup(self, tag: str, direction: Union[Direction, str]) -> Callable[..., Any]:
        """Get the handler for a tag in one direction.

        Raises:
            UnrecognizedFormatError: If the tag is not registered
            HandlerDirectionUnavailableError: If the tag has no handler for ``direction``
        """
        direction = Direction(direction)
        pair = self.get(tag)
        handler = pair.import_fn if direction is Direction.IMPORT else pair.export_fn
        if handler is None:
            raise HandlerDirectionUnavailableError(self.canonical(tag), direction.value)
        return handler

    def get(self, tag: str) -> HandlerPair:
        """Get the handler pair registered for a tag or alias."""
        with self._lock:
            canonical = self._aliases.get(tag.lower())
            if canonical is None:
                raise UnrecognizedFormatError(tag)
            return self._handlers[canonical]

    def canonical(self, tag: str) -> str:
        """Canonical tag for a tag or alias."""
        with self._lock:
            key = tag.lower()
            if key not in self._aliases:
                raise UnrecognizedFormatError(tag)
            return self._aliases[key]

    def supports(self, tag: str, direction: Union[Direction, str]) -> bool:
        """Check whether a tag has a handler for ``direction``."""
        try:
            self.lookup(tag, direction)
        except (UnrecognizedFormatError, HandlerDirectionUnavailableError):
            return False
        return True

    def is_multi_table(self, tag: str) -> bool:
        """Check whether export of a tag accepts several named tables."""
        return self.get(tag).multi_table

    def library(self, tag: str) -> Optional[str]:
        """Codec library registered for a tag."""
        return self.get(tag).library

    def tags(self) -> list[str]:
        """All registered canonical tags, in registration order."""
        with self._lock:
            return list(self._handlers)

    def __contains__(self, tag: object) -> bool:
        if not isinstance(tag, str):
            return False
        with self._lock:
            return tag.lower() in self._aliases

    def __len__(self) -> int:
        with self._lock:
            return len(self._handlers)


# Shared registry instance, created with the built-in formats on first use
_registry: Optional[FormatRegistry] = None
_registry_lock = threading.Lock()


def create_registry(builtins: bool = True) -> FormatRegistry:
    """Create a new registry, optionally with the built-in formats."""
    registry = FormatRegistry()
    if builtins:
        from tabio.formats import register_builtin_formats

        register_builtin_formats(registry)
    return registry


def get_registry() -> FormatRegistry:
    """Get the shared registry instance."""
    global _registry
    if _registry is None:
        with _registry_lock:
            if _registry is None:
                _registry = create_registry()
    return _registry


def reset_registry() -> None:
    """Drop the shared registry (mainly for testing)."""
    global _registry
    with _registry_lock:
        _registry = None


def register_format(
    tag: str,
    import_fn: Optional[ImportFn] = None,
    export_fn: Optional[ExportFn] = None,
    **kwargs: Any,
) -> None:
    """Register handlers for a format on the shared registry."""
    get_registry().register(tag, import_fn, export_fn, **kwargs)
