from application.services.currency_service import CurrencyService, validate_currency_code
from application.services.rate_service import RateService
from domain.models.currency import ExchangeRate, QueryResult, RateRow, RateTable


class RateQueryService:
    """Answers exact, fuzzy and full-table queries against the current rate table."""

    def __init__(self, rate_service: RateService, currency_service: CurrencyService):
        self.rate_service = rate_service
        self.currency_service = currency_service

    async def query(
        self,
        exact_code: str | None = None,
        fuzzy: str | None = None,
        include_offline: bool = False,
    ) -> QueryResult:
        """
        Run one query. `exact_code` takes precedence over `fuzzy`; with neither,
        every rate is returned.

        Raises:
            RatesUnavailableError: no table has been populated yet
            InvalidCurrencyError: `exact_code` is not a plausible currency code
        """
        if exact_code is not None:
            exact_code = validate_currency_code(exact_code)

        snapshot = await self.rate_service.get_snapshot(include_offline=include_offline)

        if exact_code is not None:
            best = self.best(snapshot.table, exact_code)
            rates = [best] if best else []
        elif fuzzy is not None:
            rates = self.search(snapshot.table, fuzzy)
        else:
            rates = list(snapshot.table.values())

        return QueryResult(
            rows=tuple(RateRow.from_exchange_rate(rate) for rate in rates),
            last_updated=snapshot.last_updated,
        )

    def best(self, table: RateTable, code: str) -> ExchangeRate | None:
        return self.currency_service.best_exchange_rate(table, code)

    def search(self, table: RateTable, needle: str) -> list[ExchangeRate]:
        needle = needle.lower()
        return [
            rate
            for code, rate in table.items()
            if needle in code.lower() or needle in self.currency_service.currency_symbol(code).lower()
        ]
