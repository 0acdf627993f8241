from __future__ import annotations


class CandlesError(Exception):
    status_code = 500

    def __init__(self, detail: str, status_code: int | None = None) -> None:
        super().__init__(detail)
        self.detail = detail
        if status_code is not None:
            self.status_code = status_code


class InvalidAddress(CandlesError):
    status_code = 422

    def __init__(self, address: str) -> None:
        super().__init__(f'invalid address: {address!r}')
        self.address = address


class InvalidPoolFormat(CandlesError):
    status_code = 422


class UnsupportedChain(CandlesError):
    status_code = 422

    def __init__(self, chain: str) -> None:
        super().__init__(f'unsupported chain: {chain!r}')
        self.chain = chain


class UnsupportedTimeframe(CandlesError):
    status_code = 422

    def __init__(self, timeframe: str) -> None:
        super().__init__(f'unsupported timeframe: {timeframe!r}')
        self.timeframe = timeframe


class ConnectionNotFound(CandlesError):
    status_code = 404

    def __init__(self, connection: str) -> None:
        super().__init__(f'connection not found: {connection!r}')
        self.connection = connection


class RpcError(CandlesError):
    status_code = 502

    def __init__(
        self,
        detail: str,
        *,
        call: str | None = None,
        block_range: tuple[int, int] | None = None
    ) -> None:
        super().__init__(detail)
        self.call = call
        self.block_range = block_range


class InvalidBlockchainData(CandlesError):
    status_code = 422


class InsufficientBlockchainData(InvalidBlockchainData):
    """Raised after a complete scan when too few candle buckets were found.

    Callers can retry with a wider block range or a lower minimum.
    """

    def __init__(self, detail: str, *, achieved: int, required: int) -> None:
        super().__init__(detail)
        self.achieved = achieved
        self.required = required
