from datetime import timedelta

import httpx

from storefront_service.api.http_app import Services
from storefront_service.application.checkout import CheckoutService
from storefront_service.application.delivery import DeliveryService
from storefront_service.application.exchange_rate import ExchangeRateCache, PriceConverter
from storefront_service.application.ports import KeyValueStore, RateSourcePort
from storefront_service.application.reconciliation import OrderPaymentReconciler
from storefront_service.config import Settings
from storefront_service.infrastructure.external_api import ExternalApiClient
from storefront_service.infrastructure.mercadopago import MercadoPagoClient
from storefront_service.infrastructure.rate_source import HttpRateSource, ManualRateSource


def build_rate_source(config: Settings, http_client: httpx.AsyncClient) -> RateSourcePort:
    if config.exchange_rate_source_url:
        return HttpRateSource(http_client, config.exchange_rate_source_url)
    return ManualRateSource(config.usd_exchange_rate)


def build_exchange_rate_cache(
    config: Settings,
    http_client: httpx.AsyncClient,
    store: KeyValueStore,
) -> ExchangeRateCache:
    return ExchangeRateCache(
        source=build_rate_source(config, http_client),
        store=store,
        default_rate=config.usd_exchange_rate,
        ttl=timedelta(seconds=config.exchange_rate_cache_ttl_seconds),
    )


def build_services(config: Settings, http_client: httpx.AsyncClient, store: KeyValueStore) -> Services:
    mercadopago = MercadoPagoClient(
        http_client,
        access_token=config.mercadopago_access_token,
        api_base=config.mercadopago_api_base,
    )
    external_api = ExternalApiClient(http_client, api_base=config.api_base)

    return Services(
        delivery=DeliveryService(external_api),
        reconciler=OrderPaymentReconciler(provider=mercadopago, order_system=external_api),
        checkout=CheckoutService(
            mercadopago,
            public_base_url=config.public_base_url,
            currency=config.mercadopago_currency,
            statement_descriptor=config.mercadopago_statement_descriptor,
        ),
        price_converter=PriceConverter(build_exchange_rate_cache(config, http_client, store)),
        published_rate=ManualRateSource(config.usd_exchange_rate),
    )
