from collections.abc import Iterable, Iterator, Mapping
from dataclasses import dataclass
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from types import MappingProxyType

from domain.exceptions.currency import RateValidationError

COIN_EXPONENT = 8
FIAT_EXPONENT = 8
ONE_COIN = 10**COIN_EXPONENT


def round_half_up(value: Decimal, places: int = FIAT_EXPONENT) -> Decimal:
    return value.quantize(Decimal(1).scaleb(-places), rounding=ROUND_HALF_UP)


def to_smallest_units(value: Decimal, exponent: int = FIAT_EXPONENT) -> int:
    """Move the decimal point right by `exponent`, dropping any remaining fraction."""
    return int(value.scaleb(exponent))


def stable_code_hash(code: str) -> int:
    """Signed 32-bit polynomial hash, identical across processes and runs."""
    h = 0
    for char in code:
        h = (31 * h + ord(char)) & 0xFFFFFFFF
    return h - (1 << 32) if h & 0x80000000 else h


@dataclass(frozen=True)
class MarketQuote:
    """Price of the base asset in one quote asset, as reported by one market."""
    currency_code: str
    price: Decimal
    source: str


@dataclass(frozen=True)
class ExchangeRate:
    currency_code: str
    rate_coin: int
    rate_fiat: int
    source: str

    def __post_init__(self):
        if self.rate_coin <= 0 or self.rate_fiat <= 0:
            raise RateValidationError(
                f'Non-positive rate for {self.currency_code}: {self.rate_coin}/{self.rate_fiat}'
            )

    @classmethod
    def from_price(cls, currency_code: str, price: Decimal, source: str, places: int = FIAT_EXPONENT) -> 'ExchangeRate':
        """Build a rate for one whole coin, rounding `price` half-up at `places` decimals."""
        try:
            rounded = round_half_up(Decimal(price), places)
        except InvalidOperation as e:
            raise RateValidationError(f'Invalid price for {currency_code}: {price!r}') from e
        return cls(
            currency_code=currency_code,
            rate_coin=ONE_COIN,
            rate_fiat=to_smallest_units(rounded),
            source=source,
        )

    @property
    def price(self) -> Decimal:
        fiat = Decimal(self.rate_fiat).scaleb(-FIAT_EXPONENT)
        coin = Decimal(self.rate_coin).scaleb(-COIN_EXPONENT)
        return fiat / coin

    def coin_to_fiat(self, coin_units: int) -> int:
        return coin_units * self.rate_fiat // self.rate_coin

    def fiat_to_coin(self, fiat_units: int) -> int:
        return fiat_units * self.rate_coin // self.rate_fiat


class RateTable(Mapping[str, ExchangeRate]):
    """Read-only mapping of currency code to rate, ordered by code.

    When two rates share a code the one supplied last wins.
    """

    __slots__ = ('_rates',)

    def __init__(self, rates: Iterable[ExchangeRate] = ()):
        by_code: dict[str, ExchangeRate] = {}
        for rate in rates:
            by_code[rate.currency_code] = rate
        self._rates = MappingProxyType(dict(sorted(by_code.items())))

    def __getitem__(self, code: str) -> ExchangeRate:
        return self._rates[code]

    def __iter__(self) -> Iterator[str]:
        return iter(self._rates)

    def __len__(self) -> int:
        return len(self._rates)

    def __repr__(self):
        return f'<RateTable({", ".join(self._rates)})>'


@dataclass(frozen=True)
class RateRow:
    """Tabular view of one rate: id, currency_code, rate_coin, rate_fiat, source."""
    id: int
    currency_code: str
    rate_coin: int
    rate_fiat: int
    source: str

    @classmethod
    def from_exchange_rate(cls, rate: ExchangeRate) -> 'RateRow':
        return cls(
            id=stable_code_hash(rate.currency_code),
            currency_code=rate.currency_code,
            rate_coin=rate.rate_coin,
            rate_fiat=rate.rate_fiat,
            source=rate.source,
        )


@dataclass(frozen=True)
class QueryResult:
    rows: tuple[RateRow, ...]
    last_updated: datetime | None


@dataclass(frozen=True)
class RateSnapshot:
    """A published table together with the time of the refresh that produced it.

    `last_updated` is None for a table seeded from the persisted best guess.
    """
    table: RateTable
    last_updated: datetime | None
