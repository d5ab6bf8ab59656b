"""Dependency injection container for the sitemap crawler."""
from dependency_injector import containers, providers
import requests

from sitemapcrawl import config as env
from sitemapcrawl.services.content_extractor import HtmlContentExtractor
from sitemapcrawl.services.crawler import SitemapCrawler
from sitemapcrawl.services.document_assembler import DocumentAssembler
from sitemapcrawl.services.fetcher import HttpServiceFetcher
from sitemapcrawl.services.http_service import HttpService
from sitemapcrawl.services.sitemap_service import SitemapService


# Environment variables used by the container (read via `sitemapcrawl.config` helpers).
#
# USER_AGENT (str, default: "sitemap-crawler/0.1")
#   User-Agent header for sitemap and page requests.
#
# HTTP_TIMEOUT (float seconds, default: 30)
#   requests timeout for page fetches (connect and each read).
#
# FETCH_DEADLINE (float seconds, default: 60)
#   Upper bound on one whole page fetch; expiry is a retryable failure. 0 disables.
#
# SITEMAP_TIMEOUT (float seconds, default: 15)
#   requests timeout for sitemap documents.
#
# RATE_LIMIT_INTERVAL (float seconds, default: 1.0)
#   Window the --rate-limit budget applies to.
ENV = {
    "USER_AGENT": env.get_str_env("USER_AGENT", "sitemap-crawler/0.1"),
    "HTTP_TIMEOUT": env.get_float_env("HTTP_TIMEOUT", 30.0),
    "FETCH_DEADLINE": env.get_float_env("FETCH_DEADLINE", 60.0),
    "SITEMAP_TIMEOUT": env.get_float_env("SITEMAP_TIMEOUT", 15.0),
    "RATE_LIMIT_INTERVAL": env.get_float_env("RATE_LIMIT_INTERVAL", 1.0),
}


class Container(containers.DeclarativeContainer):
    """Dependency injection container for the sitemap crawler."""

    config = providers.Configuration(default=ENV)

    http_service = providers.Singleton(
        HttpService,
        user_agent=config.USER_AGENT.as_(str),
        http_client=providers.Object(requests.get),
        timeout=config.HTTP_TIMEOUT.as_(float),
    )

    page_fetcher = providers.Singleton(
        HttpServiceFetcher,
        http_service=http_service,
        deadline=config.FETCH_DEADLINE.as_(float),
    )

    sitemap_service = providers.Singleton(
        SitemapService,
        http_service=http_service,
        timeout=config.SITEMAP_TIMEOUT.as_(float),
    )

    content_extractor = providers.Singleton(
        HtmlContentExtractor
    )

    document_assembler = providers.Singleton(
        DocumentAssembler
    )

    crawler = providers.Factory(
        SitemapCrawler,
        sitemap_service=sitemap_service,
        fetcher=page_fetcher,
        extractor=content_extractor,
        assembler=document_assembler,
        rate_interval=config.RATE_LIMIT_INTERVAL.as_(float),
    )
