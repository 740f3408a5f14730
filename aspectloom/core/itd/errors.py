"""Contract violations raised while composing an ITD."""


class InvariantViolation(AssertionError):
    """An input or internal invariant of the composer does not hold.

    Raised synchronously during composition. It always indicates an
    upstream bug (a malformed IntroductionSpec or a misused resolver),
    never an environmental failure, so callers are not expected to
    recover from it.
    """


def require(condition: bool, message: str) -> None:
    """Raise InvariantViolation with ``message`` unless ``condition`` holds."""
    if not condition:
        raise InvariantViolation(message)
