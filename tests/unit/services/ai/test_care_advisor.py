from unittest.mock import MagicMock

import pytest

from app.services.ai.care_advisor import SIMULATED_SUGGESTION, CareAdvisorService, parse_suggestion
from app.services.ai.llm_backends import LLMResponse, create_backend


def _backend(text=None, error=None):
    backend = MagicMock()
    backend.name = "openai"
    backend.is_available = True
    if error is not None:
        backend.generate.side_effect = error
    else:
        backend.generate.return_value = LLMResponse(text=text, model="test-model")
    return backend


def test_get_advice_parses_backend_reply():
    backend = _backend(
        '{"wateringFrequencyDays": 10, "lightNeeds": "Low light", '
        '"careTip": "Let the soil dry out.", "scientificName": "Zamioculcas zamiifolia"}'
    )

    suggestion = CareAdvisorService(backend).get_advice("ZZ plant")

    assert suggestion.watering_frequency_days == 10
    assert suggestion.light_needs == "Low light"
    assert suggestion.scientific_name == "Zamioculcas zamiifolia"
    assert suggestion.source == "llm"
    kwargs = backend.generate.call_args.kwargs
    assert "ZZ plant" in kwargs["user_prompt"]
    assert kwargs["json_mode"] is True


def test_get_advice_returns_none_when_backend_fails():
    assert CareAdvisorService(_backend(error=TimeoutError("slow"))).get_advice("Monstera") is None


def test_get_advice_returns_none_on_unusable_reply():
    assert CareAdvisorService(_backend("I think you should water it")).get_advice("Monstera") is None


def test_blank_species_never_calls_backend():
    backend = _backend("{}")

    assert CareAdvisorService(backend).get_advice("   ") is None
    backend.generate.assert_not_called()


def test_without_backend_advice_is_none_or_simulated():
    assert CareAdvisorService(None).get_advice("Monstera") is None
    assert CareAdvisorService(None, simulate=True).get_advice("Monstera") is SIMULATED_SUGGESTION
    assert SIMULATED_SUGGESTION.to_dict()["wateringFrequencyDays"] == 7
    assert CareAdvisorService(None).provider_name == "none"


def test_parse_suggestion_strips_markdown_fences():
    text = '```json\n{"wateringFrequencyDays": "6.6", "lightNeeds": "Bright", "careTip": "Mist weekly."}\n```'

    suggestion = parse_suggestion(text)

    assert suggestion.watering_frequency_days == 7
    assert suggestion.scientific_name is None


@pytest.mark.parametrize(
    "text",
    [
        '{"lightNeeds": "Bright", "careTip": "x"}',
        '{"wateringFrequencyDays": 0, "lightNeeds": "Bright", "careTip": "x"}',
        '{"wateringFrequencyDays": 3, "lightNeeds": "", "careTip": "x"}',
        "[1, 2, 3]",
        "",
    ],
)
def test_parse_suggestion_rejects_incomplete_replies(text):
    assert parse_suggestion(text) is None


def test_create_backend_none_and_unknown():
    assert create_backend("none") is None
    assert create_backend("") is None
    assert create_backend("mystery-llm", api_key="k") is None


def test_create_backend_without_key_is_disabled():
    assert create_backend("openai", api_key="") is None
    assert create_backend("anthropic", api_key="") is None
