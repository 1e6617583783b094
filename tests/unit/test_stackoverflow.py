"""Unit tests for the Stack Overflow tag client and skill parser."""
import httpx
import pytest

from catalog_sync.exceptions import AcquisitionError
from catalog_sync.schemas.tech_skill import StackOverflowTag
from catalog_sync.services.stackoverflow_client import StackOverflowTagsClient
from catalog_sync.services.stackoverflow_parser import (
    normalize_slug,
    format_display_name,
    should_skip_tag,
    get_keywords,
    parse_tags,
)

API_URL = "https://api.stackexchange.test/2.3/tags"


def _tags(*names):
    return [StackOverflowTag(name=name, count=1000 - i) for i, name in enumerate(names)]


@pytest.mark.parametrize("name, slug", [
    ("c#", "csharp"),
    ("c++", "cpp"),
    (".net", "dotnet"),
    ("node.js", "nodejs"),
    ("vb.net", "vbnet"),
    ("ruby-on-rails", "ruby-on-rails"),
    ("Spring Boot", "spring-boot"),
])
def test_normalize_slug(name, slug) -> None:
    assert normalize_slug(name) == slug


def test_format_display_name() -> None:
    assert format_display_name("reactjs") == "React"
    assert format_display_name("spring-boot") == "Spring Boot"
    assert format_display_name("jestjs") == "Jest.js"


def test_should_skip_generic_and_versioned_tags() -> None:
    assert should_skip_tag("arrays")
    assert should_skip_tag("python-3.x")
    assert should_skip_tag("angular-8")
    assert not should_skip_tag("docker")
    assert not should_skip_tag("unreal-engine4")


def test_get_keywords_splits_tag_words() -> None:
    assert get_keywords("spring-boot") == ["spring", "boot"]


def test_parse_tags_skips_languages_generic_and_duplicates() -> None:
    """Languages, generic tags and repeated slugs are left out; popularity order is kept."""
    tags = _tags("javascript", "reactjs", "arrays", "docker", "Docker", "python-3.x", "some-library")

    skills, seen = parse_tags(tags)

    assert [s.slug for s in skills] == ["reactjs", "docker", "some-library"]
    assert seen == {"reactjs", "docker", "some-library"}


def test_parse_tags_enriches_from_lookup_tables() -> None:
    skills, _ = parse_tags(_tags("machine-learning", "docker", "some-library"))
    by_slug = {s.slug: s for s in skills}

    assert by_slug["machine-learning"].name_pt_br == "Aprendizado de Máquina"
    assert by_slug["machine-learning"].niche_slug == "machine-learning"
    assert by_slug["docker"].type == "TOOL"
    assert by_slug["docker"].color == "#2496ED"
    assert by_slug["some-library"].type == "OTHER"
    assert by_slug["some-library"].name_pt_br == "Some Library"
    assert by_slug["some-library"].color is None


def test_parse_tags_threads_seen_slugs_without_mutating_input() -> None:
    """Slugs seen by an earlier batch are skipped and the caller's set is untouched."""
    previous = {"docker"}

    skills, seen = parse_tags(_tags("docker", "kubernetes"), previous)

    assert [s.slug for s in skills] == ["kubernetes"]
    assert seen == {"docker", "kubernetes"}
    assert previous == {"docker"}


def _paged_transport(pages, failing_page=None, requests=None):
    def handler(request: httpx.Request) -> httpx.Response:
        page = int(request.url.params["page"])
        if requests is not None:
            requests.append(request)
        if page == failing_page:
            return httpx.Response(502, json={"error": "bad gateway"})
        items, has_more = pages[page - 1]
        return httpx.Response(200, json={"items": items, "has_more": has_more})

    return httpx.MockTransport(handler)


async def test_fetch_tags_pages_until_has_more_is_false() -> None:
    requests = []
    transport = _paged_transport(
        [
            ([{"name": "docker", "count": 10}], True),
            ([{"name": "kubernetes", "count": 5}], False),
        ],
        requests=requests,
    )
    client = StackOverflowTagsClient(API_URL, max_pages=10, transport=transport, page_delay=0)

    tags = await client.fetch_tags()

    assert [t.name for t in tags] == ["docker", "kubernetes"]
    assert len(requests) == 2
    assert requests[0].url.params["pagesize"] == "100"
    assert requests[0].url.params["sort"] == "popular"
    assert requests[0].url.params["site"] == "stackoverflow"


async def test_fetch_tags_stops_at_max_pages() -> None:
    pages = [([{"name": f"tag-{i}", "count": i}], True) for i in range(5)]
    client = StackOverflowTagsClient(API_URL, max_pages=2, transport=_paged_transport(pages), page_delay=0)

    tags = await client.fetch_tags()

    assert len(tags) == 2


async def test_fetch_tags_keeps_earlier_pages_on_http_error() -> None:
    """A non-2xx page ends pagination without failing the fetch."""
    pages = [([{"name": "docker", "count": 10}], True), ([], True)]
    client = StackOverflowTagsClient(
        API_URL, transport=_paged_transport(pages, failing_page=2), page_delay=0
    )

    tags = await client.fetch_tags()

    assert [t.name for t in tags] == ["docker"]


async def test_fetch_tags_wraps_network_errors() -> None:
    def handler(request):
        raise httpx.ConnectError("unreachable", request=request)

    client = StackOverflowTagsClient(API_URL, transport=httpx.MockTransport(handler), page_delay=0)

    with pytest.raises(AcquisitionError):
        await client.fetch_tags()
