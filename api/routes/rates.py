from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Path, Query, status

from api.dependencies import get_query_service, get_rate_service
from api.schemas import ExchangeRateRowResponse, ExchangeRatesResponse, HealthResponse
from application.services import RateQueryService, RateService

router = APIRouter(tags=['rates'])


@router.get(
	'/api/rates',
	response_model=ExchangeRatesResponse,
	status_code=status.HTTP_200_OK,
	summary='List exchange rates, optionally filtered by a code or symbol substring',
)
async def list_exchange_rates(
	service: Annotated[RateQueryService, Depends(get_query_service)],
	q: Annotated[str | None, Query(max_length=16, description='Case-insensitive code or symbol substring')] = None,
	offline: Annotated[bool, Query(description='Serve cached rates without refreshing')] = False,
) -> ExchangeRatesResponse:
	result = await service.query(fuzzy=q, include_offline=offline)
	return ExchangeRatesResponse(
		rates=[ExchangeRateRowResponse.from_row(row) for row in result.rows],
		last_updated=result.last_updated,
	)


@router.get(
	'/api/rates/{currency_code}',
	response_model=ExchangeRateRowResponse,
	status_code=status.HTTP_200_OK,
	summary='Best exchange rate for a currency, falling back to the configured defaults',
)
async def get_exchange_rate(
	currency_code: Annotated[
		str,
		Path(
			min_length=3,
			max_length=7,
		),
	],
	service: Annotated[RateQueryService, Depends(get_query_service)],
	offline: Annotated[bool, Query(description='Serve cached rates without refreshing')] = False,
) -> ExchangeRateRowResponse:
	result = await service.query(exact_code=currency_code, include_offline=offline)
	if not result.rows:
		raise HTTPException(
			status_code=status.HTTP_404_NOT_FOUND,
			detail=f'No exchange rate for {currency_code}',
		)
	return ExchangeRateRowResponse.from_row(result.rows[0])


@router.get(
	'/health',
	response_model=HealthResponse,
	status_code=status.HTTP_200_OK,
	summary='Freshness of the current rate table',
)
async def health(
	service: Annotated[RateService, Depends(get_rate_service)],
) -> HealthResponse:
	snapshot = service.snapshot
	if snapshot is None:
		return HealthResponse(status='unavailable', rate_count=0)
	return HealthResponse(
		status='stale' if service.is_stale() else 'healthy',
		rate_count=len(snapshot.table),
		last_updated=snapshot.last_updated,
	)
