"""
Official exchange rates from the National Bank of Ukraine.

Used to prefill the exchange rate of a new income entry. The NBU publishes
one rate per currency per day, so successful lookups are kept in a bounded
cache keyed by source, base currency, currency and date. Lookups never
raise: on any network or parsing problem the failure is logged and None is
returned, and the caller falls back to a user-supplied rate.
"""

from __future__ import annotations

from collections import OrderedDict
from datetime import date
from decimal import Decimal, InvalidOperation
from typing import Optional, Tuple, Union
import logging

import httpx

from earn_tracker.utils.period import parse_iso_date

logger = logging.getLogger(__name__)

DEFAULT_API_URL = 'https://bank.gov.ua/NBUStatService/v1/statdirectory/exchange'
DEFAULT_BASE_CURRENCY = 'UAH'
DEFAULT_TIMEOUT = 5.0

CACHE_SIZE = 512

_cache: "OrderedDict[Tuple[str, str, str, date], Decimal]" = OrderedDict()


def clear_cache() -> None:
    _cache.clear()


def _fetch_rate(currency: str, on_date: date, api_url: str, timeout: float) -> Optional[Decimal]:
    params = {'valcode': currency, 'date': on_date.strftime('%Y%m%d'), 'json': ''}
    try:
        resp = httpx.get(api_url, params=params, timeout=timeout)
        resp.raise_for_status()
        data = resp.json()
    except (httpx.HTTPError, ValueError) as exc:
        logger.warning("NBU rate lookup for %s on %s failed: %s", currency, on_date, exc)
        return None

    if not isinstance(data, list) or not data:
        logger.warning("NBU returned no rate for %s on %s", currency, on_date)
        return None

    try:
        rate = Decimal(str(data[0]['rate']))
    except (KeyError, TypeError, InvalidOperation) as exc:
        logger.warning("Unexpected NBU payload for %s on %s: %s", currency, on_date, exc)
        return None

    if rate <= 0:
        logger.warning("NBU returned a non-positive rate %s for %s on %s", rate, currency, on_date)
        return None
    return rate


def get_currency_rate(currency: str, on_date: Union[str, date],
                      api_url: str = DEFAULT_API_URL,
                      base_currency: str = DEFAULT_BASE_CURRENCY,
                      timeout: float = DEFAULT_TIMEOUT) -> Optional[Decimal]:
    """
    Units of the base currency per 1 unit of ``currency`` on ``on_date``.

    Args:
        currency: ISO 4217 code, e.g. 'USD'
        on_date: the rate date (``YYYY-MM-DD`` or date)

    Returns:
        The rate as a Decimal, 1 for the base currency itself, or None when
        no rate could be obtained.

    Raises:
        InvalidPeriod: ``on_date`` is not a valid calendar date
    """
    currency = (currency or '').strip().upper()
    if not currency:
        return None
    if currency == base_currency.upper():
        return Decimal('1')

    on_date = parse_iso_date(on_date)
    key = (api_url, base_currency.upper(), currency, on_date)
    if key in _cache:
        _cache.move_to_end(key)
        return _cache[key]

    rate = _fetch_rate(currency, on_date, api_url, timeout)
    if rate is not None:
        logger.info("Fetched NBU rate %s for %s on %s", rate, currency, on_date)
        _cache[key] = rate
        if len(_cache) > CACHE_SIZE:
            _cache.popitem(last=False)
    return rate
