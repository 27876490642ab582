"""tswap error classes.

Every error is raised before any token leaves the pool, or, when raised by a
token collaborator mid-operation, unwinds the enclosing transaction.
"""


class TSwapError(Exception):
    """Base error for exchange operations."""

    pass


class ZeroAmount(TSwapError):
    """A quantity required to be positive was zero."""

    pass


class DeadlineExpired(TSwapError):
    """Operation submitted after the caller's deadline."""

    def __init__(self, deadline: int, now: int) -> None:
        super().__init__(f"Deadline {deadline} has passed (now={now})")
        self.deadline = deadline
        self.now = now


class DepositBelowMinimum(TSwapError):
    """Reference-token deposit under the pool's floor."""

    def __init__(self, minimum: int, amount: int) -> None:
        super().__init__(f"Deposit {amount} is below the minimum of {minimum}")
        self.minimum = minimum
        self.amount = amount


class SlippageExceeded(TSwapError):
    """A computed amount fell outside the caller's tolerance."""

    pass


class OutputTooLow(SlippageExceeded):
    """A computed output fell below the caller's minimum."""

    def __init__(self, amount: int, minimum: int) -> None:
        super().__init__(f"Output {amount} is below the minimum of {minimum}")
        self.amount = amount
        self.minimum = minimum


class InvalidToken(TSwapError):
    """Token is not tradeable in this context."""

    pass


class InsufficientLiquidity(TSwapError):
    """Requested output cannot be paid from the pool's reserves."""

    pass


class PoolAlreadyExists(TSwapError):
    """A pool for this token has already been created."""

    def __init__(self, token: str, pool: str) -> None:
        super().__init__(f"Pool already exists for {token}: {pool}")
        self.token = token
        self.pool = pool


class TokenError(TSwapError):
    """Base error raised by token collaborators."""

    pass


class InsufficientBalance(TokenError):
    """Account holds fewer tokens than the operation moves."""

    pass


class InsufficientAllowance(TokenError):
    """Spender is not authorized to move this many tokens."""

    pass
