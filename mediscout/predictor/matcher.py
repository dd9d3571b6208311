"""
Simulated AI symptom matcher.

Scores free-text symptoms against the fixed condition vocabulary using
keyword overlap plus a handful of hand-coded boosts. There is no model;
the artificial delay only imitates a remote inference call.
"""

from __future__ import annotations

import asyncio
import logging
import re

import knowledge
from mediscout.models import Prediction

logger = logging.getLogger(__name__)

DEFAULT_DELAY_SECONDS = 1.5

GENERAL_CHECKUP = "General Checkup"
FEBRILE_ILLNESS = "Febrile Illness (Suspected Vector-borne)"
ACUTE_RESPIRATORY_INFECTION = "Acute Respiratory Infection (ARI)"

NO_IMAGE_ANALYSIS = "No image submitted for analysis."

PARENTHETICAL = re.compile(r"\(.*?\)")
IMAGE_EXTENSION = re.compile(r"\.(jpeg|jpg|png)$", re.IGNORECASE)


def condition_keywords(label: str) -> list[str]:
    """Lower-cased words of a label with parenthetical qualifiers removed."""
    return PARENTHETICAL.sub("", label.lower()).split(" ")


class SymptomMatcher:
    """
    Keyword-scoring stand-in for a predictive model.

    Deterministic for a given input; never raises.
    """

    def __init__(
        self,
        delay_seconds: float = DEFAULT_DELAY_SECONDS,
        vocabulary: list[str] | None = None,
        advice: dict[str, str] | None = None,
    ):
        self.delay_seconds = delay_seconds
        self.vocabulary = vocabulary if vocabulary is not None else knowledge.known_diseases()
        self.advice = advice if advice is not None else knowledge.advice_texts()

    async def predict(
        self,
        symptoms_text: str,
        has_image: bool = False,
        image_name: str | None = None,
    ) -> Prediction:
        """Score the symptoms after the simulated inference delay."""
        if self.delay_seconds > 0:
            await asyncio.sleep(self.delay_seconds)
        return self.score(symptoms_text, has_image=has_image, image_name=image_name)

    def score_condition(self, label: str, text: str, image_matches: bool) -> int:
        """Keyword hits plus boosts for one condition label. `text` is lower-cased."""
        score = sum(
            1 for keyword in condition_keywords(label)
            if len(keyword) > 2 and keyword in text
        )

        if "fever" in text and ("Febrile" in label or "Dengue" in label):
            score += 2
        if "cough" in text and ("TB" in label or "Respiratory" in label):
            score += 2
        if ("diarrhea" in text or "loose motion" in text) and "Diarrheal" in label:
            score += 2
        if ("rash" in text or image_matches) and "Dengue" in label:
            score += 1
        return score

    def score(
        self,
        symptoms_text: str,
        has_image: bool = False,
        image_name: str | None = None,
    ) -> Prediction:
        text = (symptoms_text or "").lower()
        image_matches = bool(has_image and image_name and IMAGE_EXTENSION.search(image_name))

        predicted = GENERAL_CHECKUP
        best_score = 0
        for label in self.vocabulary:
            score = self.score_condition(label, text, image_matches)
            # Strict comparison: the first label reaching a score keeps it
            if score > best_score:
                best_score = score
                predicted = label

        if best_score < 1:
            if "fever" in text:
                predicted = FEBRILE_ILLNESS
            elif "cough" in text:
                predicted = ACUTE_RESPIRATORY_INFECTION

        # Confidence reflects the pre-fallback score
        confidence = round(min(0.95, best_score * 0.15 + 0.4), 2)

        if has_image:
            short_label = predicted.split("(")[0].strip()
            image_analysis = (
                f"Simulated analysis of {image_name or 'uploaded image'}: "
                f"Possible signs consistent with {short_label}."
            )
        else:
            image_analysis = NO_IMAGE_ANALYSIS

        logger.debug("Matched %r to %s (score %d)", text[:40], predicted, best_score)
        return Prediction(
            prediction=predicted,
            advice=self.advice.get(predicted, self.advice["Default"]),
            confidence=confidence,
            image_analysis=image_analysis,
        )
