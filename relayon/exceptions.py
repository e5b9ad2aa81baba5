"""Exception hierarchy for relayon.

All custom exceptions inherit from RelayonError base class.  Failures
raised by listeners are never wrapped in these types: they propagate as
they were raised, or inside an ``ExceptionGroup`` for concurrent dispatch.
"""


class RelayonError(Exception):
    """Base exception for all relayon errors.

    All custom exceptions in the relayon package inherit from this class,
    allowing users to catch all framework-specific errors with a single except clause.
    """


class OptionsError(RelayonError, ValueError):
    """Emitter options failed validation.

    Raised when:
    - Keyword overrides passed to ``Emitter`` fail pydantic validation
    - The ``[tool.relayon]`` table of a ``pyproject.toml`` holds unknown
      keys or values of the wrong type

    This wraps pydantic.ValidationError to provide a framework-specific exception type.
    """
