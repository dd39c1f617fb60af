from datetime import datetime

from sqlalchemy import BigInteger, DateTime, String
from sqlalchemy.orm import DeclarativeBase, Mapped, mapped_column


class Base(DeclarativeBase):
	pass


class CachedExchangeRateDB(Base):
	__tablename__ = 'cached_exchange_rate'

	slot: Mapped[str] = mapped_column(String(20), primary_key=True)
	currency_code: Mapped[str] = mapped_column(String(7), nullable=False)
	rate_coin: Mapped[int] = mapped_column(BigInteger, nullable=False)
	rate_fiat: Mapped[int] = mapped_column(BigInteger, nullable=False)
	source: Mapped[str] = mapped_column(String(50), nullable=False)
	updated_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
