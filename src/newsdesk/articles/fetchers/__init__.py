"""External news source fetchers."""

from newsdesk.articles.fetchers.base import Fetcher
from newsdesk.articles.fetchers.naver import NaverNewsFetcher
from newsdesk.articles.fetchers.rss import RssFetcher
from newsdesk.config import CollectionSettings


def build_fetchers(settings: CollectionSettings) -> list[Fetcher]:
    """One fetcher per configured feed, plus Naver when credentials are set."""

    fetchers: list[Fetcher] = [
        RssFetcher(source_name, feed_url, timeout_seconds=settings.request_timeout_seconds)
        for source_name, feed_url in settings.rss_feeds
    ]
    if settings.naver_enabled:
        fetchers.append(
            NaverNewsFetcher(
                settings.naver_client_id,
                settings.naver_client_secret,
                max_items=settings.naver_max_items,
                timeout_seconds=settings.request_timeout_seconds,
            ),
        )
    return fetchers


__all__ = ["Fetcher", "NaverNewsFetcher", "RssFetcher", "build_fetchers"]
