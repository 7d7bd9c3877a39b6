"""This module contains decorators for the DirectusClient package."""

import inspect
import logging
from functools import wraps

from directusclient.exceptions import DirectusClientClosed

logger = logging.getLogger(__name__)


def use_client_session(func):
    """
    Decorator that hands an httpx session to a DirectusClient instance method.

    The shared client opened by the context manager is used when there is one.
    Otherwise a temporary client is opened for the duration of the call. The
    session is passed as the first argument after ``self`` rather than stored on
    the instance, so concurrent calls never share or close each other's
    temporary clients.

    Sync methods receive an ``httpx.Client``, async methods an ``httpx.AsyncClient``.
    """

    @wraps(func)
    def wrapper(self, *args, **kwargs):
        if self.is_closed:
            raise DirectusClientClosed()
        httpx_client = getattr(self, "httpx_client", None)
        if httpx_client is not None and not httpx_client.is_closed:
            return func(self, httpx_client, *args, **kwargs)
        logger.debug("No open httpx.Client, using a temporary one for %s", func.__name__)
        with self.get_directus_http_client() as temp_client:
            return func(self, temp_client, *args, **kwargs)

    @wraps(func)
    async def async_wrapper(self, *args, **kwargs):
        if self.is_closed:
            raise DirectusClientClosed()
        async_httpx_client = getattr(self, "async_httpx_client", None)
        if async_httpx_client is not None and not async_httpx_client.is_closed:
            return await func(self, async_httpx_client, *args, **kwargs)
        logger.debug("No open httpx.AsyncClient, using a temporary one for %s", func.__name__)
        async with self.get_directus_http_client_async() as temp_client:
            return await func(self, temp_client, *args, **kwargs)

    if inspect.iscoroutinefunction(func):
        return async_wrapper
    else:
        return wrapper
