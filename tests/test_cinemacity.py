"""Test the Cinema City feed client."""

import httpx
import pytest
from matheque.core.errors import ScrapeMarkerMissing, TransientNetworkError
from matheque.ingestion.cinemacity import CinemaCityClient, FeedFilm

FEED_URL = "https://feed.test/now-playing"

FEED = {
    "body": {
        "posters": [
            {
                "code": "HO00001234",
                "featureTitle": "Dune: Part Two",
                "url": "https://cinema.test/films/dune-part-two/4567",
                "posterSrc": "https://img.test/dune.jpg",
                "attributes": ["2d", "imax"],
            },
            {
                "code": 5678,
                "featureTitle": "Wonka",
                "url": "https://cinema.test/films/wonka/5678",
            },
        ]
    }
}

PAGE = """
<html><head><script>
    var featureCode = "HO00001234";
    var featureName = "Dune: Partea a doua";
</script></head><body></body></html>
"""


def make_client(handler):
    return CinemaCityClient(FEED_URL, client=httpx.Client(transport=httpx.MockTransport(handler)))


def test_fetch_films_parses_posters():
    client = make_client(lambda request: httpx.Response(200, json=FEED))

    films = client.fetch_films()

    assert films == [
        FeedFilm(
            id="HO00001234",
            name="Dune: Part Two",
            link="https://cinema.test/films/dune-part-two/4567",
            poster_link="https://img.test/dune.jpg",
        ),
        FeedFilm(id="5678", name="Wonka", link="https://cinema.test/films/wonka/5678", poster_link=None),
    ]


def test_fetch_films_empty_feed():
    client = make_client(lambda request: httpx.Response(200, json={"body": {"posters": []}}))

    assert client.fetch_films() == []


@pytest.mark.parametrize(
    "response",
    [
        httpx.Response(200, text="<html>maintenance</html>"),
        httpx.Response(200, json={"body": {}}),
        httpx.Response(200, json={"body": {"posters": [{"code": "HO1"}]}}),
        httpx.Response(503, text="Service Unavailable"),
    ],
)
def test_fetch_films_bad_feed_is_transient(response):
    """Malformed payloads and error statuses abort the pass as transient errors."""
    client = make_client(lambda request: response)

    with pytest.raises(TransientNetworkError):
        client.fetch_films()


def test_fetch_films_connection_error():
    def refuse(request):
        raise httpx.ConnectError("connection refused", request=request)

    with pytest.raises(TransientNetworkError):
        make_client(refuse).fetch_films()


def test_fetch_localized_title():
    client = make_client(lambda request: httpx.Response(200, text=PAGE))

    assert client.fetch_localized_title("https://cinema.test/films/dune-part-two/4567") == "Dune: Partea a doua"


def test_fetch_localized_title_marker_missing():
    """A page without the featureName variable can't be scraped."""
    link = "https://cinema.test/films/dune-part-two/4567"
    client = make_client(lambda request: httpx.Response(200, text="<html><body>Dune</body></html>"))

    with pytest.raises(ScrapeMarkerMissing) as exc_info:
        client.fetch_localized_title(link)

    assert exc_info.value.url == link
