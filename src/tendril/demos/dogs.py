"""Dog CEO API client.

Blocking ``requests`` calls run in a worker thread via ``asyncio.to_thread``
so resource computations can await them without stalling the event loop.
"""

from __future__ import annotations

import asyncio
import itertools
import logging
from collections.abc import Mapping

import requests

from tendril._errors import TendrilError

logger = logging.getLogger("tendril.demos.dogs")

API_ROOT = "https://dog.ceo/api"
BREEDS_URL = f"{API_ROOT}/breeds/list/all"
REQUEST_TIMEOUT = 10


class DogApiError(TendrilError):
    """The Dog API answered with something other than a success payload."""


def _get_message(url: str) -> object:
    response = requests.get(url, timeout=REQUEST_TIMEOUT)
    response.raise_for_status()
    payload = response.json()
    if not isinstance(payload, dict) or payload.get("status") != "success":
        raise DogApiError(f"Unexpected response from {url}")
    return payload["message"]


def image_url(breed: str) -> str:
    return f"{API_ROOT}/breed/{breed}/images/random"


async def fetch_breeds() -> dict[str, list[str]]:
    """Fetch every breed and its sub-breeds."""
    message = await asyncio.to_thread(_get_message, BREEDS_URL)
    if not isinstance(message, dict):
        raise DogApiError("Breed list is not a mapping")
    logger.debug("Fetched %d breeds", len(message))
    return message


async def fetch_breed_image(breed: str) -> str:
    """Fetch the URL of a random picture of *breed*."""
    message = await asyncio.to_thread(_get_message, image_url(breed))
    if not isinstance(message, str):
        raise DogApiError(f"Image for {breed!r} is not a URL")
    return message


def take_breeds(breeds: Mapping[str, list[str]], limit: int = 20) -> dict[str, list[str]]:
    """First *limit* breeds in the order the API listed them."""
    return dict(itertools.islice(breeds.items(), limit))
