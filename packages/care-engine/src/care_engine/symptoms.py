from __future__ import annotations

from collections.abc import Iterable, Mapping, Sequence

from care_engine.models import Provider

MAX_MATCHED_PROVIDERS = 6

# Keys are matched as substrings of the lower-cased query, tags as substrings
# of the lower-cased provider specialization.
DEFAULT_SYMPTOM_KEYWORDS: Mapping[str, frozenset[str]] = {
    "chest pain": frozenset({"cardio"}),
    "heart": frozenset({"cardio"}),
    "palpitation": frozenset({"cardio"}),
    "blood pressure": frozenset({"cardio", "general"}),
    "skin": frozenset({"dermato"}),
    "rash": frozenset({"dermato"}),
    "acne": frozenset({"dermato"}),
    "itch": frozenset({"dermato"}),
    "eczema": frozenset({"dermato"}),
    "headache": frozenset({"neuro", "general"}),
    "migraine": frozenset({"neuro"}),
    "seizure": frozenset({"neuro"}),
    "dizz": frozenset({"neuro"}),
    "numb": frozenset({"neuro"}),
    "fever": frozenset({"general", "internal"}),
    "cold": frozenset({"general"}),
    "fatigue": frozenset({"general", "internal"}),
    "cough": frozenset({"pulmo", "general"}),
    "breath": frozenset({"pulmo", "cardio"}),
    "asthma": frozenset({"pulmo"}),
    "wheez": frozenset({"pulmo"}),
    "stomach": frozenset({"gastro"}),
    "abdominal": frozenset({"gastro"}),
    "diarrhea": frozenset({"gastro"}),
    "nausea": frozenset({"gastro"}),
    "vomit": frozenset({"gastro"}),
    "constipation": frozenset({"gastro"}),
    "bone": frozenset({"ortho"}),
    "joint": frozenset({"ortho", "rheumat"}),
    "fracture": frozenset({"ortho"}),
    "back pain": frozenset({"ortho"}),
    "knee": frozenset({"ortho"}),
    "sprain": frozenset({"ortho"}),
    "child": frozenset({"pediatric", "paediatric"}),
    "baby": frozenset({"pediatric", "paediatric"}),
    "infant": frozenset({"pediatric", "paediatric"}),
    "eye": frozenset({"ophthalm"}),
    "vision": frozenset({"ophthalm"}),
    "earache": frozenset({"otolaryng"}),
    "ear pain": frozenset({"otolaryng"}),
    "hearing": frozenset({"otolaryng"}),
    "throat": frozenset({"otolaryng"}),
    "sinus": frozenset({"otolaryng"}),
    "anxiety": frozenset({"psych"}),
    "depress": frozenset({"psych"}),
    "insomnia": frozenset({"psych", "neuro"}),
    "stress": frozenset({"psych"}),
    "pregnan": frozenset({"gyn", "obstet"}),
    "menstrua": frozenset({"gyn"}),
    "period": frozenset({"gyn"}),
    "tooth": frozenset({"dentist", "dental"}),
    "gum": frozenset({"dentist", "dental"}),
    "urin": frozenset({"urolog", "nephro"}),
    "kidney": frozenset({"nephro", "urolog"}),
    "diabetes": frozenset({"endocrin"}),
    "thyroid": frozenset({"endocrin"}),
    "sugar": frozenset({"endocrin"}),
}


class SymptomClassifier:
    """Narrows a provider list to the specialists relevant to a symptom text.

    When no keyword matches, every provider stays a candidate: an unknown
    complaint falls back to the most experienced providers overall rather
    than to an empty list.
    """

    def __init__(
        self,
        keywords: Mapping[str, Iterable[str]] | None = None,
        limit: int = MAX_MATCHED_PROVIDERS,
    ) -> None:
        if limit < 0:
            raise ValueError("limit must be >= 0")
        table = DEFAULT_SYMPTOM_KEYWORDS if keywords is None else keywords
        self._keywords = {
            keyword.lower(): frozenset(tag.lower() for tag in tags)
            for keyword, tags in table.items()
            if keyword.strip()
        }
        self._limit = limit

    def candidate_specialties(self, text: str) -> frozenset[str]:
        lowered = text.lower()
        tags: set[str] = set()
        for keyword, specialties in self._keywords.items():
            if keyword in lowered:
                tags.update(specialties)
        return frozenset(tags)

    def classify(self, text: str, providers: Sequence[Provider]) -> list[Provider]:
        if not text or not text.strip():
            return []
        candidates = self.candidate_specialties(text)
        if candidates:
            matched = [provider for provider in providers if _has_any_tag(provider, candidates)]
        else:
            matched = list(providers)
        ranked = sorted(matched, key=lambda provider: -(provider.experience_years or 0))
        return ranked[: self._limit]


def _has_any_tag(provider: Provider, tags: frozenset[str]) -> bool:
    specialization = (provider.specialization or "").lower()
    return any(tag in specialization for tag in tags)


def classify_symptoms(
    text: str,
    providers: Sequence[Provider],
    keywords: Mapping[str, Iterable[str]] | None = None,
) -> list[Provider]:
    return SymptomClassifier(keywords=keywords).classify(text, providers)
