"""Unit tests for the Plex / Sonarr / Radarr / Overseerr API clients."""

import json

import httpx
import pytest

from thinkarr.infrastructure.external.overseerr import OverseerrClient, media_status_label
from thinkarr.infrastructure.external.plex import PlexClient
from thinkarr.infrastructure.external.radarr import RadarrClient
from thinkarr.infrastructure.external.sonarr import SonarrClient
from thinkarr.shared.exceptions import ExternalServiceError


class RecordingTransport(httpx.MockTransport):
    """MockTransport that keeps every request it served."""

    def __init__(self, responder) -> None:
        self.requests: list[httpx.Request] = []

        def handler(request: httpx.Request) -> httpx.Response:
            self.requests.append(request)
            return responder(request)

        super().__init__(handler)


def json_transport(payload, status_code: int = 200) -> RecordingTransport:
    return RecordingTransport(lambda request: httpx.Response(status_code, json=payload))


class TestPlexClient:
    async def test_search_flattens_hubs(self) -> None:
        transport = json_transport(
            {
                "MediaContainer": {
                    "Hub": [
                        {
                            "type": "movie",
                            "Metadata": [
                                {
                                    "title": "Inception",
                                    "year": 2010,
                                    "key": "/library/metadata/1",
                                    "summary": "x" * 500,
                                    "rating": 8.8,
                                }
                            ],
                        },
                        {"type": "show", "Metadata": [{"title": "Dark", "type": "show"}]},
                        {"type": "artist"},
                    ]
                }
            }
        )
        plex = PlexClient("http://plex.test:32400/", "plex-token", transport=transport)

        results = await plex.search_library("inception")

        assert [(r.title, r.type) for r in results] == [("Inception", "movie"), ("Dark", "show")]
        assert len(results[0].summary) == 200

        request = transport.requests[0]
        assert request.url.path == "/hubs/search"
        assert request.url.params["query"] == "inception"
        assert request.headers["X-Plex-Token"] == "plex-token"
        await plex.close()

    async def test_availability(self) -> None:
        plex = PlexClient(
            "http://plex.test",
            "t",
            transport=json_transport({"MediaContainer": {"size": 0}}),
        )

        result = await plex.check_availability("Nothing")

        assert result.available is False
        assert result.results == []
        await plex.close()

    async def test_on_deck(self) -> None:
        transport = json_transport(
            {"MediaContainer": {"Metadata": [{"title": "Severance", "type": "episode"}]}}
        )
        plex = PlexClient("http://plex.test", "t", transport=transport)

        items = await plex.get_on_deck()

        assert items[0].title == "Severance"
        assert transport.requests[0].url.path == "/library/onDeck"
        await plex.close()


class TestSonarrClient:
    async def test_search_series(self) -> None:
        transport = json_transport(
            [{"title": f"Show {i}", "tvdbId": i, "seasonCount": 2} for i in range(15)]
        )
        sonarr = SonarrClient("http://sonarr.test", "sonarr-key", transport=transport)

        series = await sonarr.search_series("show")

        assert len(series) == 10
        assert series[0].tvdb_id == 0
        request = transport.requests[0]
        assert request.url.path == "/api/v3/series/lookup"
        assert request.headers["X-Api-Key"] == "sonarr-key"
        await sonarr.close()

    async def test_calendar_window(self) -> None:
        transport = json_transport(
            [
                {
                    "title": "Pilot",
                    "seasonNumber": 1,
                    "episodeNumber": 1,
                    "airDateUtc": "2026-10-20T01:00:00Z",
                    "hasFile": False,
                    "series": {"title": "Foundation"},
                },
                {"title": "Orphan"},
            ]
        )
        sonarr = SonarrClient("http://sonarr.test", "k", transport=transport)

        entries = await sonarr.get_calendar(days=3)

        assert entries[0].series_title == "Foundation"
        assert entries[1].series_title == "Unknown"
        params = transport.requests[0].url.params
        assert params["includeSeries"] == "true"
        assert params["start"] < params["end"]
        await sonarr.close()

    async def test_http_error_is_not_retried(self) -> None:
        transport = json_transport({"message": "Unauthorized"}, status_code=401)
        sonarr = SonarrClient("http://sonarr.test", "bad", transport=transport)

        with pytest.raises(ExternalServiceError, match="Sonarr API error: HTTP 401"):
            await sonarr.get_queue()

        assert len(transport.requests) == 1
        await sonarr.close()


class TestRadarrClient:
    async def test_queue(self) -> None:
        transport = json_transport(
            {
                "records": [
                    {
                        "movie": {"title": "Dune"},
                        "status": "downloading",
                        "timeleft": "00:10:00",
                        "size": 1000.0,
                        "sizeleft": 250.0,
                    }
                ]
            }
        )
        radarr = RadarrClient("http://radarr.test", "k", transport=transport)

        [item] = await radarr.get_queue()

        assert item.movie_title == "Dune"
        assert item.time_left == "00:10:00"
        assert transport.requests[0].url.path == "/api/v3/queue"
        await radarr.close()

    async def test_transport_errors_are_retried(self) -> None:
        def refuse(request: httpx.Request) -> httpx.Response:
            raise httpx.ConnectError("connection refused", request=request)

        transport = RecordingTransport(refuse)
        radarr = RadarrClient("http://radarr.test", "k", transport=transport)

        with pytest.raises(ExternalServiceError, match="Radarr unreachable"):
            await radarr.list_movies()

        assert len(transport.requests) == 3
        await radarr.close()


class TestOverseerrClient:
    async def test_search_labels(self) -> None:
        transport = json_transport(
            {
                "results": [
                    {"id": 1, "mediaType": "movie", "title": "Alien", "mediaInfo": {"status": 5}},
                    {"id": 2, "mediaType": "tv", "name": "Andor", "firstAirDate": "2022-09-21"},
                ]
            }
        )
        overseerr = OverseerrClient("http://overseerr.test", "k", transport=transport)

        results = await overseerr.search("a")

        assert [(r.title, r.media_status) for r in results] == [
            ("Alien", "Available"),
            ("Andor", "Unknown"),
        ]
        assert results[1].release_date == "2022-09-21"
        await overseerr.close()

    async def test_request_tv_with_seasons(self) -> None:
        transport = json_transport({"id": 99})
        overseerr = OverseerrClient("http://overseerr.test", "k", transport=transport)

        outcome = await overseerr.request_tv(12345, [1, 2])

        assert outcome.success
        request = transport.requests[0]
        assert request.method == "POST"
        assert request.url.path == "/api/v1/request"
        assert json.loads(request.content) == {
            "mediaType": "tv",
            "mediaId": 12345,
            "seasons": [1, 2],
        }
        await overseerr.close()

    async def test_rejected_request_is_an_outcome(self) -> None:
        transport = json_transport({"message": "Already requested"}, status_code=409)
        overseerr = OverseerrClient("http://overseerr.test", "k", transport=transport)

        outcome = await overseerr.request_movie(603)

        assert outcome.success is False
        assert "HTTP 409" in outcome.message
        await overseerr.close()

    def test_status_labels(self) -> None:
        assert media_status_label(None) == "Unknown"
        assert media_status_label({"status": 3}) == "Processing"
        assert media_status_label({"status": 42}) == "Not Requested"
