import os
import sys
from unittest.mock import Mock, patch

import httpx
import pytest
from openai import APIConnectionError, APIStatusError

sys.path.insert(0, os.path.abspath(os.path.join(os.path.dirname(__file__), "..")))

from ingest.schemas import RawCitation
from ingest.settings import Settings
from scrapers.event_query import (
    EventQueryError,
    OpenAIEventQueryClient,
    build_prompt,
    extract_citations,
    get_openai_client,
)


def annotation(url, title, kind="url_citation"):
    return Mock(type=kind, url=url, title=title)


def fake_response(text, annotations):
    content = Mock(annotations=annotations)
    message = Mock(type="message", content=[content])
    search_call = Mock(type="web_search_call")
    return Mock(output_text=text, output=[search_call, message])


def status_error(code):
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    response = httpx.Response(code, request=request)
    return APIStatusError("error", response=response, body=None)


def test_build_prompt_mentions_town_and_markers():
    prompt = build_prompt(Settings(town="Lexington, MA", nearby="Bedford", days_ahead=30))
    assert "Lexington, MA" in prompt
    assert "Lexington Public Library" in prompt
    assert "Bedford" in prompt
    assert "next 30 days" in prompt
    assert "||EVENT_START||" in prompt and "||EVENT_END||" in prompt


def test_extract_citations_reads_url_annotations():
    resp = fake_response(
        "text",
        [
            annotation("https://a.example", "A"),
            annotation("https://ignored.example", "File", kind="file_citation"),
            annotation("https://b.example", None),
        ],
    )
    assert extract_citations(resp) == [
        RawCitation(uri="https://a.example", title="A"),
        RawCitation(uri="https://b.example", title=None),
    ]


def test_query_returns_text_and_citations():
    openai_client = Mock()
    openai_client.responses.create.return_value = fake_response(
        "||EVENT_START||...", [annotation("https://a.example", "A")]
    )
    client = OpenAIEventQueryClient(model="gpt-test", client=openai_client)

    result = client.query("find events")

    assert result.text == "||EVENT_START||..."
    assert result.citations == [RawCitation(uri="https://a.example", title="A")]
    kwargs = openai_client.responses.create.call_args.kwargs
    assert kwargs["model"] == "gpt-test"
    assert kwargs["input"] == "find events"
    assert kwargs["tools"] == [{"type": "web_search_preview"}]


def test_query_handles_missing_text():
    openai_client = Mock()
    openai_client.responses.create.return_value = Mock(output_text=None, output=[])
    result = OpenAIEventQueryClient(client=openai_client).query("find events")
    assert result.text == ""
    assert result.citations == []


@pytest.mark.parametrize("code", [429, 500])
def test_status_errors_become_query_errors(code):
    openai_client = Mock()
    openai_client.responses.create.side_effect = status_error(code)
    with pytest.raises(EventQueryError, match=str(code)):
        OpenAIEventQueryClient(client=openai_client).query("find events")


def test_connection_errors_become_query_errors():
    openai_client = Mock()
    request = httpx.Request("POST", "https://api.openai.com/v1/responses")
    openai_client.responses.create.side_effect = APIConnectionError(request=request)
    with pytest.raises(EventQueryError):
        OpenAIEventQueryClient(client=openai_client).query("find events")


def test_missing_api_key_is_a_query_error(tmp_path):
    with patch.dict(os.environ, {"OPENAI_API_KEY": ""}), \
            patch("scrapers.event_query.os.path.expanduser", return_value=str(tmp_path / "missing")):
        with pytest.raises(EventQueryError):
            get_openai_client()
