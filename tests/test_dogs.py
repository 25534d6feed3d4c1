"""Tests for the Dog API client used by the dog demo."""

import pytest

pytest.importorskip("requests")

import requests

from tendril.demos import dogs


class FakeResponse:
    def __init__(self, payload, status_code=200):
        self._payload = payload
        self.status_code = status_code

    def raise_for_status(self):
        if self.status_code >= 400:
            raise requests.HTTPError(f"{self.status_code} error")

    def json(self):
        return self._payload


@pytest.fixture
def fake_get(monkeypatch):
    calls = []
    responses = {}

    def get(url, timeout=None):
        calls.append((url, timeout))
        return responses[url]

    monkeypatch.setattr(dogs.requests, "get", get)
    get.calls = calls
    get.responses = responses
    return get


class TestTakeBreeds:
    def test_keeps_first_twenty_in_order(self):
        breeds = {f"b{i:02d}": [] for i in range(25)}
        taken = dogs.take_breeds(breeds)
        assert list(taken) == [f"b{i:02d}" for i in range(20)]

    def test_fewer_than_limit(self):
        assert dogs.take_breeds({"shiba": [], "akita": []}) == {"shiba": [], "akita": []}

    def test_custom_limit(self):
        assert list(dogs.take_breeds({"a": [], "b": [], "c": []}, limit=2)) == ["a", "b"]


class TestFetch:
    @pytest.mark.asyncio
    async def test_fetch_breeds(self, fake_get):
        fake_get.responses[dogs.BREEDS_URL] = FakeResponse(
            {"status": "success", "message": {"shiba": [], "hound": ["afghan"]}}
        )
        breeds = await dogs.fetch_breeds()
        assert breeds == {"shiba": [], "hound": ["afghan"]}
        assert fake_get.calls == [(dogs.BREEDS_URL, dogs.REQUEST_TIMEOUT)]

    @pytest.mark.asyncio
    async def test_fetch_breed_image(self, fake_get):
        url = dogs.image_url("akita")
        fake_get.responses[url] = FakeResponse(
            {"status": "success", "message": "https://images.dog.ceo/breeds/akita/1.jpg"}
        )
        assert await dogs.fetch_breed_image("akita") == "https://images.dog.ceo/breeds/akita/1.jpg"
        assert url == "https://dog.ceo/api/breed/akita/images/random"

    @pytest.mark.asyncio
    async def test_error_status_raises(self, fake_get):
        fake_get.responses[dogs.image_url("nope")] = FakeResponse(
            {"status": "error", "message": "Breed not found"}, status_code=404
        )
        with pytest.raises(requests.HTTPError):
            await dogs.fetch_breed_image("nope")

    @pytest.mark.asyncio
    async def test_unsuccessful_payload_raises(self, fake_get):
        fake_get.responses[dogs.BREEDS_URL] = FakeResponse({"status": "error", "message": "down"})
        with pytest.raises(dogs.DogApiError):
            await dogs.fetch_breeds()

    @pytest.mark.asyncio
    async def test_wrong_shape_raises(self, fake_get):
        fake_get.responses[dogs.BREEDS_URL] = FakeResponse({"status": "success", "message": ["shiba"]})
        with pytest.raises(dogs.DogApiError, match="not a mapping"):
            await dogs.fetch_breeds()
