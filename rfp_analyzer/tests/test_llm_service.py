"""
Tests: provider failure classification and the LLM call wrappers, with
get_llm() replaced by a stub chat model.
"""

import pytest
from langchain_core.messages import AIMessage

from rfp_analyzer import errors
from rfp_analyzer.config import Settings
from rfp_analyzer.models.enums import RemoteErrorKind
from rfp_analyzer.models.schemas import RemoteFailure
from rfp_analyzer.services import llm_service
from rfp_analyzer.services.llm_service import (
    classify_llm_exception,
    error_from_failure,
    llm_structured_call,
    llm_text_call,
)
from rfp_analyzer.services.remote_extractor import RfpDataExtraction


class ProviderError(Exception):
    def __init__(self, message, status_code=None):
        super().__init__(message)
        self.status_code = status_code


class StubChat:
    def __init__(self, reply=None, error=None, structured=None):
        self.reply = reply
        self.error = error
        self.structured = structured
        self.messages = None

    def invoke(self, messages):
        self.messages = messages
        if self.error:
            raise self.error
        return self.reply

    def with_structured_output(self, schema, include_raw=False):
        assert include_raw is True
        stub = StubChat(reply=self.structured, error=self.error)
        return stub


@pytest.fixture
def use_llm(monkeypatch):
    def install(llm):
        monkeypatch.setattr(llm_service, "get_llm", lambda: llm)
        return llm
    return install


class TestClassification:
    @pytest.mark.parametrize(
        "status, kind",
        [
            (429, RemoteErrorKind.THROTTLED),
            (402, RemoteErrorKind.QUOTA_EXHAUSTED),
            (500, RemoteErrorKind.FAILED),
            (None, RemoteErrorKind.FAILED),
        ],
    )
    def test_status_codes(self, status, kind):
        failure = classify_llm_exception(ProviderError("boom", status))
        assert failure.error == kind
        assert failure.status_code == status

    def test_status_from_response_attribute(self):
        exc = Exception("boom")
        exc.response = type("Response", (), {"status_code": 429})()
        assert classify_llm_exception(exc).error == RemoteErrorKind.THROTTLED

    def test_error_messages(self):
        throttled = error_from_failure(RemoteFailure(error=RemoteErrorKind.THROTTLED))
        assert isinstance(throttled, errors.RemoteThrottled)
        assert throttled.retryable is True
        assert throttled.message == "Rate limits exceeded, please try again later."

        quota = error_from_failure(RemoteFailure(error=RemoteErrorKind.QUOTA_EXHAUSTED))
        assert isinstance(quota, errors.RemoteQuotaExhausted)
        assert quota.status_code == 402

        failed = error_from_failure(RemoteFailure(error=RemoteErrorKind.FAILED, status_code=503))
        assert isinstance(failed, errors.RemoteFailure)
        assert failed.message == "AI processing failed: 503"

        malformed = error_from_failure(RemoteFailure(error=RemoteErrorKind.MALFORMED))
        assert isinstance(malformed, errors.RemoteMalformed)


class TestTextCall:
    def test_returns_content(self, use_llm):
        llm = use_llm(StubChat(reply=AIMessage(content="Draft", response_metadata={"finish_reason": "stop"})))
        assert llm_text_call("system", "user") == "Draft"
        assert llm.messages == [("system", "system"), ("human", "user")]

    def test_empty_content_is_malformed(self, use_llm):
        use_llm(StubChat(reply=AIMessage(content="  ")))
        with pytest.raises(errors.RemoteMalformed):
            llm_text_call("system", "user")

    def test_provider_error_is_classified(self, use_llm):
        use_llm(StubChat(error=ProviderError("slow down", 429)))
        with pytest.raises(errors.RemoteThrottled):
            llm_text_call("system", "user")


class TestStructuredCall:
    def test_parsed(self, use_llm):
        parsed = RfpDataExtraction(title="Bridge maintenance")
        use_llm(StubChat(structured={"parsed": parsed, "raw": AIMessage(content=""), "parsing_error": None}))
        assert llm_structured_call("system", "user", RfpDataExtraction) == (parsed, "")

    def test_prose_reply(self, use_llm):
        use_llm(StubChat(structured={
            "parsed": None,
            "raw": AIMessage(content='{"title": "Bridge"}'),
            "parsing_error": ValueError("no tool call"),
        }))
        assert llm_structured_call("system", "user", RfpDataExtraction) == (None, '{"title": "Bridge"}')

    def test_provider_error_propagates(self, use_llm):
        use_llm(StubChat(error=ProviderError("slow down", 429)))
        with pytest.raises(ProviderError):
            llm_structured_call("system", "user", RfpDataExtraction)


def test_missing_api_key(monkeypatch):
    monkeypatch.setattr(llm_service, "_llm_instance", None)
    monkeypatch.setattr(llm_service, "get_settings", lambda: Settings(groq_api_key=""))
    with pytest.raises(errors.ConfigurationError, match="GROQ_API_KEY"):
        llm_service.get_llm()
