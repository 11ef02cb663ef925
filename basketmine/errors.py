class MiningError(Exception):
    """Base class for errors raised by basketmine."""


class InvalidParameterError(MiningError, ValueError):
    """Mining parameters failed validation."""


class BasketLimitError(MiningError):
    """More baskets were supplied than the configured ceiling allows."""

    def __init__(self, count, limit):
        super().__init__(f'{count} baskets exceeds the limit of {limit}')
        self.count = count
        self.limit = limit
