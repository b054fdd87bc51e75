"""Bundled collaborators: Custom Search client, Gemini assessor and dry-run publisher."""

from types import SimpleNamespace

import httpx
import pytest

from kgflow.adapters import DryRunPublisher, GeminiTextAssessor, GoogleSearchClient
from kgflow.adapters.search import CUSTOM_SEARCH_ENDPOINT, source_domain
from kgflow.core.exceptions import SearchError
from kgflow.core.models import DataOrigin, TargetEnvironment
from kgflow.core.types import CandidateEntity, Fact, PublishOptions

pytestmark = pytest.mark.unit


def search_client(handler) -> GoogleSearchClient:
    return GoogleSearchClient("api-key", "engine-id", transport=httpx.MockTransport(handler))


class TestGoogleSearchClient:
    @pytest.mark.asyncio
    async def test_parses_items(self):
        seen = {}

        def handler(request: httpx.Request) -> httpx.Response:
            seen["url"] = request.url
            return httpx.Response(
                200,
                json={
                    "items": [
                        {
                            "link": "https://www.ri.gov/licenses/1",
                            "title": "License",
                            "snippet": "Brightside Dental",
                        },
                        {"link": "https://no-snippet.example", "title": "Missing"},
                    ]
                },
            )

        refs = await search_client(handler).search('"Brightside Dental"', 25)

        assert [r.source_domain for r in refs] == ["ri.gov"]
        params = seen["url"].params
        assert str(seen["url"]).startswith(CUSTOM_SEARCH_ENDPOINT)
        assert params["cx"] == "engine-id"
        assert params["q"] == '"Brightside Dental"'
        assert params["num"] == "10"

    @pytest.mark.asyncio
    async def test_no_items(self):
        refs = await search_client(lambda _req: httpx.Response(200, json={})).search("q", 5)
        assert refs == []

    @pytest.mark.asyncio
    async def test_http_error_mapped(self):
        client = search_client(lambda _req: httpx.Response(429, json={"error": {}}))
        with pytest.raises(SearchError, match="HTTP error 429"):
            await client.search("q", 5)

    @pytest.mark.asyncio
    async def test_transport_error_mapped(self):
        def handler(request):
            raise httpx.ConnectError("refused", request=request)

        with pytest.raises(SearchError):
            await search_client(handler).search("q", 5)

    def test_source_domain(self):
        assert source_domain("https://www.yelp.com/biz/x") == "yelp.com"


class _FakeModels:
    def __init__(self, text):
        self.text = text
        self.calls = []

    async def generate_content(self, **kwargs):
        self.calls.append(kwargs)
        return SimpleNamespace(text=self.text)


class TestGeminiTextAssessor:
    @pytest.mark.asyncio
    async def test_returns_response_text(self):
        models = _FakeModels('{"meetsNotability": false}')
        client = SimpleNamespace(aio=SimpleNamespace(models=models))
        assessor = GeminiTextAssessor(client=client, model="gemini-2.0-flash")

        text = await assessor.assess("prompt")

        assert text == '{"meetsNotability": false}'
        assert models.calls[0]["model"] == "gemini-2.0-flash"
        assert models.calls[0]["contents"] == "prompt"
        assert models.calls[0]["config"].response_mime_type == "application/json"

    @pytest.mark.asyncio
    async def test_empty_response(self):
        client = SimpleNamespace(aio=SimpleNamespace(models=_FakeModels(None)))
        assert await GeminiTextAssessor(client=client).assess("p") == ""

    def test_requires_key_or_client(self):
        with pytest.raises(ValueError):
            GeminiTextAssessor()


class TestDryRunPublisher:
    @pytest.mark.asyncio
    async def test_reports_without_writing(self):
        entity = CandidateEntity(
            labels={"en": "Acme"},
            descriptions={},
            facts=(Fact("P856", "https://acme.example", "url", DataOrigin.SUBJECT),),
        )
        publisher = DryRunPublisher()
        outcome = await publisher.publish(
            entity, PublishOptions(target_environment=TargetEnvironment.PRODUCTION)
        )
        assert outcome.succeeded
        assert outcome.target == "wikidata.org"
        assert outcome.external_id is None
        assert outcome.properties_published == 1
        assert len(publisher.published) == 1
