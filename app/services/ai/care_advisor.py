"""
Care Advisor
============
Suggests a watering interval, light needs and a care tip for a species.

Advice is a convenience for the add-plant form: it never raises. When the
backend is missing, errors out or answers with something unusable,
:meth:`CareAdvisorService.get_advice` returns ``None`` and the caller keeps
whatever the user typed.

With ``simulate=True`` and no backend configured, a fixed placeholder
suggestion is returned so the form can still be exercised offline.
"""

from __future__ import annotations

import json
import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any, Dict, Optional

if TYPE_CHECKING:
    from app.services.ai.llm_backends import LLMBackend

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class CareSuggestion:
    watering_frequency_days: int
    light_needs: str
    care_tip: str
    scientific_name: Optional[str] = None
    source: str = "llm"

    def to_dict(self) -> Dict[str, Any]:
        return {
            "wateringFrequencyDays": self.watering_frequency_days,
            "lightNeeds": self.light_needs,
            "careTip": self.care_tip,
            "scientificName": self.scientific_name,
            "source": self.source,
        }


SIMULATED_SUGGESTION = CareSuggestion(
    watering_frequency_days=7,
    light_needs="Bright indirect light",
    care_tip=(
        "This is a simulated tip because no AI provider is configured. "
        "Ensure soil is dry between waterings."
    ),
    scientific_name="Simulatis Plantus",
    source="simulated",
)

_SYSTEM_PROMPT = """\
You are a houseplant care expert. Given a plant species or common name, \
reply with a JSON object:
{
  "wateringFrequencyDays": <whole number of days between waterings>,
  "lightNeeds": "<short phrase, e.g. 'Low light' or 'Direct sun'>",
  "careTip": "<one helpful sentence>",
  "scientificName": "<Latin name if known>"
}
Respond ONLY with valid JSON. No markdown fences."""


class CareAdvisorService:
    """Species care lookup over an optional :class:`LLMBackend`."""

    def __init__(self, backend: "LLMBackend" | None = None, *, simulate: bool = False) -> None:
        self._backend = backend
        self._simulate = simulate

    @property
    def is_available(self) -> bool:
        return self._backend is not None and self._backend.is_available

    @property
    def provider_name(self) -> str:
        return self._backend.name if self._backend is not None else "none"

    def get_advice(self, species: str) -> Optional[CareSuggestion]:
        species = (species or "").strip()
        if not species:
            return None

        if not self.is_available:
            if self._simulate:
                logger.info("No AI provider configured; returning simulated care advice for %s", species)
                return SIMULATED_SUGGESTION
            return None

        try:
            response = self._backend.generate(  # type: ignore[union-attr]
                system_prompt=_SYSTEM_PROMPT,
                user_prompt=f'Provide care instructions for a houseplant named "{species}".',
                json_mode=True,
            )
        except Exception as exc:
            logger.error("Care advice lookup failed for %s: %s", species, exc, exc_info=True)
            return None
        return parse_suggestion(response.text)


def parse_suggestion(text: str) -> Optional[CareSuggestion]:
    """Parse a model reply into a :class:`CareSuggestion`; ``None`` if unusable."""
    cleaned = (text or "").strip()
    if cleaned.startswith("```"):
        lines = [ln for ln in cleaned.split("\n") if not ln.strip().startswith("```")]
        cleaned = "\n".join(lines).strip()

    try:
        data = json.loads(cleaned)
    except json.JSONDecodeError:
        logger.warning("Care advice was not valid JSON")
        return None
    if not isinstance(data, dict):
        return None

    try:
        days = int(round(float(data["wateringFrequencyDays"])))
        light = str(data["lightNeeds"]).strip()
        tip = str(data["careTip"]).strip()
    except (KeyError, TypeError, ValueError):
        logger.warning("Care advice missing required fields: %s", sorted(data))
        return None
    if days < 1 or not light or not tip:
        return None

    scientific = data.get("scientificName")
    return CareSuggestion(
        watering_frequency_days=days,
        light_needs=light,
        care_tip=tip,
        scientific_name=str(scientific).strip() if scientific else None,
    )
