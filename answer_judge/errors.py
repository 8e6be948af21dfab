class TransportError(Exception):
    """Remote call failed: unreachable, timed out, unauthorized, rate limited.

    Absorbed by the fallback ladder; counts as a circuit-breaker failure.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"TransportError: {self.message}"


class ContractViolation(Exception):
    """Remote judge answered, but the payload is not the required JSON shape.

    Absorbed by the fallback ladder; counts as a circuit-breaker failure.
    """

    def __init__(self, message: str, raw: str = "") -> None:
        self.message = message
        self.raw = raw
        super().__init__(message)

    def __str__(self) -> str:
        return f"ContractViolation: {self.message}"


class ValidationError(Exception):
    """Caller supplied an unscorable request (empty candidate, no reference).

    The only error that crosses the evaluator's public boundary.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"ValidationError: {self.message}"


class SignalFailure(Exception):
    """A single scoring signal could not be computed.

    Replaced by a zero-score placeholder inside the aggregator.
    """

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)

    def __str__(self) -> str:
        return f"SignalFailure: {self.message}"
