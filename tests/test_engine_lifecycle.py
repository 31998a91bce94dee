"""
Integration tests for the LocalizationEngine lifecycle.

Runs every entry point end to end against a fake provider sitting behind
a real requests.Session:
- Object, text, batch text and chat localization
- HTML extraction and re-application
- Locale recognition
- Cancellation and error propagation
- The command-line front-end
"""

import json
import os
import threading
from unittest.mock import MagicMock, patch

import pytest
from bs4 import BeautifulSoup

from lingo_engine import (
    BatchLocalizationParams,
    CancellationError,
    CancellationToken,
    ChatMessage,
    EngineConfig,
    LocalizationEngine,
    LocalizationParams,
    ProviderRequestError,
    ValidationError,
)

from helpers import FakeProvider, make_response, make_session


# =============================================================================
# Test Fixtures
# =============================================================================

def uppercase_handler(url, body):
    return make_response(payload={"data": {k: v.upper() for k, v in body["data"].items()}})


def echo_handler(url, body):
    return make_response(payload={"data": dict(body["data"])})


@pytest.fixture
def provider():
    return FakeProvider()


@pytest.fixture
def engine(provider):
    engine = LocalizationEngine(api_key="test-key", session=make_session(provider))
    yield engine
    engine.close()


@pytest.fixture
def params():
    return LocalizationParams(source_locale="en", target_locale="es")


PAGE = """<!DOCTYPE html>
<html lang="en">
<head>
  <title>Greetings</title>
  <meta name="description" content="Friendly page">
</head>
<body>
  <h1>  Hello, world!  </h1>
  <p>Welcome <em>home</em></p>
  <img src="a.png" alt="A picture">
  <script>var greeting = "Hello";</script>
</body>
</html>
"""


# =============================================================================
# Construction
# =============================================================================

class TestEngineConstruction:
    """Tests for engine configuration handling."""

    def test_keyword_options(self):
        engine = LocalizationEngine(api_key="key", batch_size=5)
        assert engine.config.batch_size == 5
        assert engine.config.api_url == "https://engine.lingo.dev"

    def test_mapping_config_with_camel_case(self):
        engine = LocalizationEngine({"apiKey": "key", "idealBatchItemSize": 100})
        assert engine.config.ideal_batch_item_size == 100

    def test_config_object(self):
        config = EngineConfig(api_key="key")
        assert LocalizationEngine(config).config is config

    def test_config_object_and_options_conflict(self):
        with pytest.raises(ValidationError):
            LocalizationEngine(EngineConfig(api_key="key"), batch_size=3)

    def test_invalid_config(self):
        with pytest.raises(ValidationError):
            LocalizationEngine(api_key="key", batch_size=500)
        with pytest.raises(ValidationError):
            LocalizationEngine()

    def test_context_manager_closes_session(self, provider):
        session = make_session(provider)
        session.close = MagicMock()
        with LocalizationEngine(api_key="key", session=session):
            pass
        session.close.assert_called_once()


# =============================================================================
# Object and Text
# =============================================================================

class TestObjectAndText:
    """Tests for object and text localization."""

    def test_localize_object(self, engine, provider, params):
        result = engine.localize_object({"greeting": "Hello", "farewell": "Bye"}, params)

        assert result == {"greeting": "[es] Hello", "farewell": "[es] Bye"}
        assert len(provider.localize_calls) == 1
        body = provider.localize_calls[0]
        assert body["locale"] == {"source": "en", "target": "es"}
        assert body["params"]["fast"] is False
        assert body["reference"] is None

    def test_params_as_mapping(self, engine, provider):
        engine.localize_object(
            {"a": "b"}, {"sourceLocale": None, "targetLocale": "de", "fast": True}
        )
        body = provider.localize_calls[0]
        assert body["locale"] == {"source": None, "target": "de"}
        assert body["params"]["fast"] is True

    def test_reference_is_forwarded(self, engine, provider):
        reference = {"fr": {"greeting": "Bonjour"}}
        engine.localize_object(
            {"greeting": "Hello"},
            LocalizationParams(source_locale="en", target_locale="es", reference=reference),
        )
        assert provider.localize_calls[0]["reference"] == reference

    def test_chunks_share_workflow_and_report_progress(self, provider):
        engine = LocalizationEngine(api_key="key", batch_size=1, session=make_session(provider))
        progress = []

        engine.localize_object(
            {"a": "1", "b": "2", "c": "3", "d": "4"},
            LocalizationParams(source_locale="en", target_locale="es"),
            progress_callback=lambda pct, src, out: progress.append(pct),
        )

        assert progress == [25, 50, 75, 100]
        workflow_ids = {body["params"]["workflowId"] for body in provider.localize_calls}
        assert len(workflow_ids) == 1

    def test_localize_text(self, engine, provider, params):
        assert engine.localize_text("Hello", params) == "[es] Hello"
        assert provider.localize_calls[0]["data"] == {"text": "Hello"}

    def test_localize_text_missing_result(self, params):
        provider = FakeProvider(handler=lambda url, body: make_response(payload={"data": {}}))
        engine = LocalizationEngine(api_key="key", session=make_session(provider))
        assert engine.localize_text("Hello", params) == ""

    def test_validation_happens_before_network(self, engine, provider, params):
        with pytest.raises(ValidationError):
            engine.localize_object("not a mapping", params)
        with pytest.raises(ValidationError):
            engine.localize_text(42, params)
        with pytest.raises(ValidationError):
            engine.localize_text("Hello", {"sourceLocale": "en"})
        assert provider.calls == []

    def test_provider_error_propagates(self, params):
        provider = FakeProvider(
            handler=lambda url, body: make_response(400, text="bad", reason="Bad Request")
        )
        engine = LocalizationEngine(api_key="key", session=make_session(provider))

        with pytest.raises(ProviderRequestError, match="Invalid request: Bad Request"):
            engine.localize_text("Hello", params)

    def test_cancelled_token(self, engine, provider, params):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(CancellationError, match="Localization was aborted"):
            engine.localize_object({"a": "b"}, params, cancel_token=token)
        assert provider.calls == []


# =============================================================================
# Batch Text
# =============================================================================

class TestBatchLocalizeText:
    """Tests for concurrent fan-out to several targets."""

    def test_results_follow_target_order(self, engine, provider):
        result = engine.batch_localize_text(
            "Hello",
            BatchLocalizationParams(source_locale="en", target_locales=["es", "fr", "de"]),
        )

        assert result == ["[es] Hello", "[fr] Hello", "[de] Hello"]
        targets = sorted(body["locale"]["target"] for body in provider.localize_calls)
        assert targets == ["de", "es", "fr"]

    def test_each_target_has_its_own_workflow(self, engine, provider):
        engine.batch_localize_text(
            "Hello", {"sourceLocale": "en", "targetLocales": ["es", "fr"]}
        )
        workflow_ids = {body["params"]["workflowId"] for body in provider.localize_calls}
        assert len(workflow_ids) == 2

    def test_empty_targets(self, engine, provider):
        assert engine.batch_localize_text("Hello", {"targetLocales": []}) == []
        assert provider.calls == []

    def test_failure_is_reraised(self):
        def handler(url, body):
            if body["locale"]["target"] == "fr":
                return make_response(500, text="fr is unavailable", reason="Server Error")
            return echo_handler(url, body)

        engine = LocalizationEngine(api_key="key", session=make_session(FakeProvider(handler)))

        with pytest.raises(ProviderRequestError, match="fr is unavailable"):
            engine.batch_localize_text(
                "Hello",
                BatchLocalizationParams(source_locale="en", target_locales=["es", "fr"]),
            )

    def test_pre_cancelled_token(self, engine, provider):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(CancellationError):
            engine.batch_localize_text(
                "Hello",
                BatchLocalizationParams(source_locale="en", target_locales=["es", "fr"]),
                cancel_token=token,
            )
        assert provider.calls == []

    def test_cancel_while_requests_are_in_flight(self):
        token = CancellationToken()
        in_flight = threading.Barrier(3)
        release = threading.Event()

        def handler(url, body):
            in_flight.wait(timeout=5)
            release.wait(timeout=5)
            return echo_handler(url, body)

        def cancel_when_both_started():
            in_flight.wait(timeout=5)
            token.cancel()
            release.set()

        provider = FakeProvider(handler)
        engine = LocalizationEngine(api_key="key", session=make_session(provider))
        canceller = threading.Thread(target=cancel_when_both_started)
        canceller.start()

        with pytest.raises(CancellationError, match="Localization was aborted"):
            engine.batch_localize_text(
                "Hello",
                BatchLocalizationParams(source_locale="en", target_locales=["es", "fr"]),
                cancel_token=token,
            )
        canceller.join(timeout=5)

        assert len(provider.localize_calls) == 2

    def test_string_target_locales_rejected(self, engine, provider):
        with pytest.raises(ValidationError):
            engine.batch_localize_text("Hi", {"sourceLocale": "en", "targetLocales": "es"})
        assert provider.calls == []

    def test_caller_token_is_not_cancelled_by_failure(self):
        engine = LocalizationEngine(
            api_key="key",
            session=make_session(FakeProvider(
                lambda url, body: make_response(503, text="down", reason="Unavailable")
            )),
        )
        token = CancellationToken()

        with pytest.raises(ProviderRequestError):
            engine.batch_localize_text(
                "Hello",
                BatchLocalizationParams(source_locale="en", target_locales=["es", "fr"]),
                cancel_token=token,
            )
        assert not token.is_cancelled


# =============================================================================
# Chat
# =============================================================================

class TestLocalizeChat:
    """Tests for chat transcript localization."""

    def test_names_are_preserved_and_never_sent(self, engine, provider, params):
        chat = [
            {"name": "Alice", "text": "Hi there"},
            ChatMessage(name="Bob", text="Good morning"),
        ]

        result = engine.localize_chat(chat, params)

        assert result == [
            ChatMessage(name="Alice", text="[es] Hi there"),
            ChatMessage(name="Bob", text="[es] Good morning"),
        ]
        sent = provider.localize_calls[0]["data"]
        assert sent == {"chat_0": "Hi there", "chat_1": "Good morning"}
        assert "Alice" not in json.dumps(provider.calls)

    def test_missing_messages_are_dropped(self, params):
        def handler(url, body):
            return make_response(payload={"data": {"chat_1": "Adios"}})

        engine = LocalizationEngine(api_key="key", session=make_session(FakeProvider(handler)))
        result = engine.localize_chat(
            [{"name": "A", "text": "Hello"}, {"name": "B", "text": "Bye"}], params
        )
        assert result == [ChatMessage(name="B", text="Adios")]

    def test_empty_chat(self, engine, provider, params):
        assert engine.localize_chat([], params) == []
        assert provider.calls == []


# =============================================================================
# HTML
# =============================================================================

class TestLocalizeHtml:
    """Tests for HTML document localization."""

    def test_end_to_end(self, params):
        provider = FakeProvider(uppercase_handler)
        engine = LocalizationEngine(api_key="key", session=make_session(provider))

        result = engine.localize_html(PAGE, params)

        assert '<html lang="es">' in result
        assert "<title>GREETINGS</title>" in result
        assert 'content="FRIENDLY PAGE"' in result
        assert "<h1>  HELLO, WORLD!  </h1>" in result
        assert "<p>WELCOME <em>HOME</em></p>" in result
        assert 'alt="A PICTURE"' in result
        assert 'var greeting = "Hello";' in result

        sent = provider.localize_calls[0]["data"]
        assert sent["head/1#content"] == "Friendly page"
        assert sent["body/0/0"] == "Hello, world!"
        assert all("var greeting" not in value for value in sent.values())

    def test_identity_round_trip(self, params):
        engine = LocalizationEngine(
            api_key="key", session=make_session(FakeProvider(echo_handler))
        )

        result = engine.localize_html(PAGE, params)

        expected = BeautifulSoup(PAGE, "lxml")
        expected.html["lang"] = "es"
        assert result == str(expected)

    def test_unknown_keys_from_provider_are_ignored(self, params):
        def handler(url, body):
            data = {k: v.upper() for k, v in body["data"].items()}
            data["body/99/0"] = "ghost"
            data["not-a-path"] = "ghost"
            return make_response(payload={"data": data})

        engine = LocalizationEngine(api_key="key", session=make_session(FakeProvider(handler)))
        result = engine.localize_html(PAGE, params)

        assert "ghost" not in result
        assert "HELLO, WORLD!" in result

    def test_cancelled_before_parse(self, engine, provider, params):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(CancellationError):
            engine.localize_html(PAGE, params, cancel_token=token)
        assert provider.calls == []


# =============================================================================
# Locale Recognition
# =============================================================================

class TestRecognizeLocale:
    """Tests for locale recognition."""

    def test_recognize(self):
        provider = FakeProvider(locale="fr")
        engine = LocalizationEngine(api_key="key", session=make_session(provider))

        assert engine.recognize_locale("Bonjour tout le monde") == "fr"
        assert provider.urls == ["https://engine.lingo.dev/recognize"]
        assert provider.calls == [{"text": "Bonjour tout le monde"}]

    def test_recognize_cancelled(self, engine, provider):
        token = CancellationToken()
        token.cancel()

        with pytest.raises(CancellationError, match="Locale recognition was aborted"):
            engine.recognize_locale("Hello", cancel_token=token)
        assert provider.calls == []

    def test_recognize_missing_locale(self):
        provider = FakeProvider(handler=lambda url, body: make_response(payload={}))
        engine = LocalizationEngine(api_key="key", session=make_session(provider))

        with pytest.raises(ProviderRequestError):
            engine.recognize_locale("Hello")


# =============================================================================
# Command Line
# =============================================================================

class TestCommandLine:
    """Tests for the lingo-engine CLI."""

    @pytest.fixture(autouse=True)
    def environment(self, tmp_path, monkeypatch):
        monkeypatch.chdir(tmp_path)
        for key in list(os.environ):
            if key.startswith("LINGO_"):
                monkeypatch.delenv(key)
        monkeypatch.setenv("LINGO_API_KEY", "cli-key")
        with patch("lingo_engine.app.setup_logging"):
            yield

    def _patch_engine(self, provider):
        engine = LocalizationEngine(api_key="cli-key", session=make_session(provider))
        return patch("lingo_engine.app.create_engine", return_value=engine)

    def test_text_command(self, provider, capsys):
        from lingo_engine.app import main

        with self._patch_engine(provider):
            exit_code = main(["text", "Hello", "-t", "es", "-s", "en"])

        assert exit_code == 0
        assert capsys.readouterr().out == "[es] Hello\n"

    def test_text_command_with_several_targets(self, provider, tmp_path):
        from lingo_engine.app import main

        output = tmp_path / "out.json"
        with self._patch_engine(provider):
            exit_code = main(["text", "Hello", "-t", "es", "-t", "fr", "-o", str(output)])

        assert exit_code == 0
        assert json.loads(output.read_text(encoding="utf-8")) == {
            "es": "[es] Hello",
            "fr": "[fr] Hello",
        }

    def test_object_command(self, provider, tmp_path, capsys):
        from lingo_engine.app import main

        source = tmp_path / "strings.json"
        source.write_text(json.dumps({"title": "Home"}), encoding="utf-8")

        with self._patch_engine(provider):
            exit_code = main(["object", str(source), "-t", "de"])

        assert exit_code == 0
        assert json.loads(capsys.readouterr().out) == {"title": "[de] Home"}

    def test_html_command_writes_file(self, tmp_path):
        from lingo_engine.app import main

        source = tmp_path / "page.html"
        source.write_text(PAGE, encoding="utf-8")
        output = tmp_path / "page.es.html"

        with self._patch_engine(FakeProvider(uppercase_handler)):
            exit_code = main(["html", str(source), "-t", "es", "-o", str(output)])

        assert exit_code == 0
        assert "HELLO, WORLD!" in output.read_text(encoding="utf-8")

    def test_recognize_command(self, capsys):
        from lingo_engine.app import main

        with self._patch_engine(FakeProvider(locale="it")):
            exit_code = main(["recognize", "Ciao"])

        assert exit_code == 0
        assert capsys.readouterr().out == "it\n"

    def test_provider_failure_exit_code(self):
        from lingo_engine.app import main

        provider = FakeProvider(
            lambda url, body: make_response(500, text="boom", reason="Server Error")
        )
        with self._patch_engine(provider):
            assert main(["text", "Hello", "-t", "es"]) == 1

    def test_missing_api_key(self, monkeypatch):
        from lingo_engine.app import main

        monkeypatch.delenv("LINGO_API_KEY")
        assert main(["text", "Hello", "-t", "es"]) == 1

    def test_no_command_prints_help(self, capsys):
        from lingo_engine.app import main

        assert main([]) == 0
        assert "lingo-engine" in capsys.readouterr().out
