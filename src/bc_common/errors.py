"""Unified error codes and custom exceptions.

Error code ranges:
  1xxx: Invalid argument
  2xxx: Pool lookup / phase
  3xxx: Reserve / capacity
  4xxx: Transfer
  5xxx: Admin
  9xxx: System (fatal)
"""


class AppError(Exception):
    """Base application error."""

    def __init__(
        self,
        code: int,
        message: str,
        http_status: int = 500,
    ) -> None:
        self.code = code
        self.message = message
        self.http_status = http_status
        super().__init__(message)


# --- 1xxx: Invalid argument ---

class InvalidArgumentError(AppError):
    def __init__(self, detail: str, code: int = 1001) -> None:
        super().__init__(code, f"Invalid argument: {detail}", 422)


class ZeroAmountError(InvalidArgumentError):
    def __init__(self, field: str) -> None:
        super().__init__(f"{field} must be greater than zero", code=1002)


class ZeroDenominatorError(InvalidArgumentError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"zero denominator in {detail}", code=1003)


class InputDomainError(InvalidArgumentError):
    def __init__(self, detail: str) -> None:
        super().__init__(f"outside supported domain: {detail}", code=1004)


class InvalidFeeRateError(InvalidArgumentError):
    def __init__(self, fee_bps: int, max_bps: int) -> None:
        super().__init__(f"fee rate {fee_bps} bps not in [0, {max_bps}]", code=1005)


class InvalidRecipientError(InvalidArgumentError):
    def __init__(self, address: str) -> None:
        super().__init__(f"invalid recipient address {address!r}", code=1006)


# --- 2xxx: Pool ---

class PoolNotFoundError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(2001, f"Pool not found: {pool_id}", 404)


class PoolListedError(AppError):
    def __init__(self, pool_id: str) -> None:
        super().__init__(2002, f"Pool already migrated to liquidity venue: {pool_id}", 409)


# --- 3xxx: Reserve ---

class ReserveCapReachedError(AppError):
    def __init__(self, pool_id: str, reserve_cap: int) -> None:
        super().__init__(3001, f"Pool {pool_id} reached reserve cap {reserve_cap}", 422)


class InsufficientReserveError(AppError):
    def __init__(self, required: int, available: int) -> None:
        super().__init__(
            3002,
            f"Insufficient reserve: required {required}, available {available}",
            422,
        )


# --- 4xxx: Transfer ---

class TransferFailedError(AppError):
    def __init__(self, asset: str, sender: str, recipient: str, amount: int) -> None:
        super().__init__(
            4001,
            f"Transfer of {amount} {asset} from {sender} to {recipient} failed",
            502,
        )


# --- 5xxx: Admin ---

class NotAuthorizedError(AppError):
    def __init__(self, caller: str) -> None:
        super().__init__(5001, f"Caller {caller} is not authorized", 403)


# --- 9xxx: System ---

class ReentrancyError(AppError):
    def __init__(self) -> None:
        super().__init__(9001, "Reentrant call into pool controller", 500)


class PrecisionFaultError(AppError):
    def __init__(self, detail: str) -> None:
        super().__init__(9002, f"Precision fault: {detail}", 500)
