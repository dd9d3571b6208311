"""
MediScout knowledge base.

Contains the fixed epidemiological assumptions behind the synthetic cohort:
- City and gender vocabularies
- The condition label vocabulary shared by the generator and the matcher
- Per-family prevalence rates
- Canned advice text for the simulated AI
"""

from __future__ import annotations

from pathlib import Path

import yaml

KNOWLEDGE_DIR = Path(__file__).parent

_conditions_cache: dict | None = None


def load_conditions(knowledge_dir: Path | None = None) -> dict:
    """Load conditions.yaml, with caching for the default location."""
    global _conditions_cache

    if knowledge_dir is None and _conditions_cache is not None:
        return _conditions_cache

    conditions_path = (knowledge_dir or KNOWLEDGE_DIR) / "conditions" / "conditions.yaml"
    with open(conditions_path, "r", encoding="utf-8") as f:
        data = yaml.safe_load(f) or {}

    if knowledge_dir is None:
        _conditions_cache = data
    return data


def locations() -> list[str]:
    return list(load_conditions()["locations"])


def genders() -> list[str]:
    return list(load_conditions()["genders"])


def known_diseases() -> list[str]:
    """The fixed condition vocabulary, in scoring order."""
    return list(load_conditions()["known_diseases"])


def family_assumptions(name: str) -> dict:
    return dict(load_conditions()["families"][name])


def advice_texts() -> dict[str, str]:
    return dict(load_conditions()["advice"])
