"""
Display-only currency conversion.

Ledger amounts are always stored and balanced in the group's currency; this
module only converts figures for presentation. Rates are fetched with httpx,
cached per base currency, and fall back to the last known (or built-in)
rates when the rate provider is unreachable.
"""
import logging
import time
from decimal import Context, Decimal, ROUND_HALF_UP
from typing import Dict
import httpx
from splitpal.core.config import settings
from splitpal.core.exceptions import ValidationError
from splitpal.core.utils import MAX_AMOUNT, to_decimal
from splitpal.schemas.currency import ConversionOut, CurrencyInfo

logger = logging.getLogger(__name__)

SUPPORTED_CURRENCIES: Dict[str, CurrencyInfo] = {
    "INR": CurrencyInfo(name="Indian Rupee", symbol="₹", decimals=2),
    "USD": CurrencyInfo(name="US Dollar", symbol="$", decimals=2),
    "EUR": CurrencyInfo(name="Euro", symbol="€", decimals=2),
    "GBP": CurrencyInfo(name="British Pound", symbol="£", decimals=2),
    "JPY": CurrencyInfo(name="Japanese Yen", symbol="¥", decimals=0),
    "CAD": CurrencyInfo(name="Canadian Dollar", symbol="C$", decimals=2),
    "AUD": CurrencyInfo(name="Australian Dollar", symbol="A$", decimals=2),
    "CHF": CurrencyInfo(name="Swiss Franc", symbol="CHF", decimals=2),
    "CNY": CurrencyInfo(name="Chinese Yuan", symbol="¥", decimals=2),
    "SGD": CurrencyInfo(name="Singapore Dollar", symbol="S$", decimals=2),
}

DEFAULT_RATES: Dict[str, Dict[str, str]] = {
    "INR": {"USD": "0.012", "EUR": "0.011", "GBP": "0.0095", "JPY": "1.8", "CAD": "0.016",
            "AUD": "0.018", "CHF": "0.011", "CNY": "0.086", "SGD": "0.016"},
    "USD": {"INR": "83.5", "EUR": "0.92", "GBP": "0.79", "JPY": "150", "CAD": "1.35",
            "AUD": "1.52", "CHF": "0.91", "CNY": "7.2", "SGD": "1.34"},
    "EUR": {"INR": "90.8", "USD": "1.09", "GBP": "0.86", "JPY": "163", "CAD": "1.47",
            "AUD": "1.65", "CHF": "0.99", "CNY": "7.84", "SGD": "1.46"},
}


def ensure_supported(code: str) -> str:
    code = (code or "").upper()
    if code not in SUPPORTED_CURRENCIES:
        raise ValidationError("currency", f"Unsupported currency '{code}'")
    return code


def format_amount(amount, code: str) -> str:
    info = SUPPORTED_CURRENCIES.get((code or "").upper())
    if not info:
        return f"{amount}"

    value = to_decimal(amount)
    exp = Decimal(1).scaleb(-info.decimals)
    # wide enough for every integer digit plus the currency's decimals
    ctx = Context(prec=max(28, value.adjusted() + info.decimals + 2))
    return f"{info.symbol}{value.quantize(exp, rounding=ROUND_HALF_UP, context=ctx)}"


class CurrencyService:
    def __init__(
        self,
        base_url: str = settings.EXCHANGE_RATE_URL,
        ttl: int = settings.CURRENCY_CACHE_TTL,
        timeout: float = settings.HTTP_TIMEOUT,
        transport: httpx.AsyncBaseTransport | None = None,
    ):
        self.base_url = base_url
        self.ttl = ttl
        self.timeout = timeout
        self.transport = transport

        self._rates: Dict[str, Dict[str, Decimal]] = {
            base: {code: Decimal(rate) for code, rate in rates.items()}
            for base, rates in DEFAULT_RATES.items()
        }
        # built-in rates count as stale, so the first lookup tries the network
        self._last_fetch: Dict[str, float] = {}

    async def refresh_rates(self, base: str) -> bool:
        try:
            async with httpx.AsyncClient(timeout=self.timeout, transport=self.transport) as client:
                res = await client.get(f"{self.base_url}{base}")
                res.raise_for_status()
                rates = res.json().get("rates")
        except (httpx.HTTPError, ValueError) as e:
            # keep serving cached or default rates
            logger.warning("Exchange rate fetch for %s failed: %s", base, e)
            return False

        if not rates:
            logger.warning("Exchange rate response for %s had no rates", base)
            return False

        self._rates[base] = {code: to_decimal(rate) for code, rate in rates.items()}
        self._last_fetch[base] = time.time()
        logger.info("Updated exchange rates for %s", base)
        return True

    async def get_exchange_rate(self, from_currency: str, to_currency: str) -> Decimal:
        from_currency = ensure_supported(from_currency)
        to_currency = ensure_supported(to_currency)

        if from_currency == to_currency:
            return Decimal("1")

        last = self._last_fetch.get(from_currency)
        if last is None or time.time() - last > self.ttl:
            await self.refresh_rates(from_currency)

        rate = self._rates.get(from_currency, {}).get(to_currency)
        if rate:
            return rate

        reverse = self._rates.get(to_currency, {}).get(from_currency)
        if reverse:
            return Decimal("1") / reverse

        logger.warning("No rate known for %s -> %s, using 1", from_currency, to_currency)
        return Decimal("1")

    async def convert(self, amount, from_currency: str, to_currency: str) -> ConversionOut:
        amount = to_decimal(amount)
        if abs(amount) > MAX_AMOUNT:
            raise ValidationError("amount", f"Amount must not exceed {MAX_AMOUNT}")

        rate = await self.get_exchange_rate(from_currency, to_currency)
        to_currency = to_currency.upper()

        exp = Decimal(1).scaleb(-SUPPORTED_CURRENCIES[to_currency].decimals)
        converted = (amount * rate).quantize(exp, rounding=ROUND_HALF_UP)

        return ConversionOut(
            original_amount=amount,
            converted_amount=converted,
            exchange_rate=rate,
            from_currency=from_currency.upper(),
            to_currency=to_currency,
            formatted=format_amount(converted, to_currency),
        )


currency_service = CurrencyService()


def get_currency_service() -> CurrencyService:
    return currency_service
