"""Error kinds and the exception raised throughout the package."""

from __future__ import annotations

from enum import Enum


class LinderaErrorKind(Enum):
    """The category of a failure."""

    ARGS = "Args"
    CONTENT = "Content"
    DECODE = "Decode"
    DESERIALIZE = "Deserialize"
    IO = "Io"
    PARSE = "Parse"
    SERIALIZE = "Serialize"
    COMPRESS = "Compress"
    DICTIONARY_NOT_FOUND = "DictionaryNotFound"
    DICTIONARY_LOAD_ERROR = "DictionaryLoadError"
    DICTIONARY_BUILD_ERROR = "DictionaryBuildError"
    DICTIONARY_KIND_ERROR = "DictionaryKindError"
    DICTIONARY_SOURCE_TYPE_ERROR = "DictionarySourceTypeError"
    MODE_ERROR = "ModeError"

    def with_error(self, source: BaseException | str) -> "LinderaError":
        """Wrap ``source`` in a :class:`LinderaError` of this kind."""
        return LinderaError(self, source)


class _ContextError(Exception):
    """A message layered on top of an underlying cause."""

    def __init__(self, context: object, cause: BaseException | str) -> None:
        super().__init__(str(context))
        self.context = context
        self.cause = cause
        if isinstance(cause, BaseException):
            self.__cause__ = cause


class LinderaError(Exception):
    """An error carrying a :class:`LinderaErrorKind` and its source."""

    def __init__(self, kind: LinderaErrorKind, source: BaseException | str) -> None:
        self.kind = kind
        self.source = source
        super().__init__(f"LinderaError(kind={kind.value}, source={source})")
        if isinstance(source, BaseException):
            self.__cause__ = source

    def add_context(self, ctx: object) -> "LinderaError":
        """Return a new error of the same kind whose source is ``ctx`` over this source."""
        return LinderaError(self.kind, _ContextError(ctx, self.source))