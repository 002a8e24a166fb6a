"""Preset languages, models, and segmentation descriptions.

The `custom` language entry and the target placeholder are sentinels: a run may
not start while either is still selected.
"""

from __future__ import annotations

from dataclasses import dataclass

from .datatypes import SegmentationStrategy


CUSTOM_LANGUAGE_SENTINEL = "custom"
TARGET_LANGUAGE_PLACEHOLDER = "Choose target language"


@dataclass(frozen=True, slots=True)
class LanguageOption:
    """Selectable language preset."""

    code: str
    name: str


@dataclass(frozen=True, slots=True)
class ModelOption:
    """Selectable provider model preset."""

    id: str
    name: str


LANGUAGES: tuple[LanguageOption, ...] = (
    LanguageOption("English", "English"),
    LanguageOption("Spanish", "Spanish"),
    LanguageOption("French", "French"),
    LanguageOption("German", "German"),
    LanguageOption("Italian", "Italian"),
    LanguageOption("Portuguese", "Portuguese"),
    LanguageOption("Chinese (Simplified)", "Chinese (Simplified)"),
    LanguageOption("Japanese", "Japanese"),
    LanguageOption("Korean", "Korean"),
    LanguageOption("Russian", "Russian"),
    LanguageOption("Arabic", "Arabic"),
    LanguageOption("Hindi", "Hindi"),
    LanguageOption("Czech", "Czech"),
    LanguageOption("Polish", "Polish"),
    LanguageOption(CUSTOM_LANGUAGE_SENTINEL, "Other / Custom"),
)

MODELS: tuple[ModelOption, ...] = (
    ModelOption("gemini-3-flash-preview", "Gemini 3 Flash (Fast)"),
    ModelOption("gemini-3-pro-preview", "Gemini 3 Pro (High Quality)"),
)

DEFAULT_MODEL_ID = MODELS[0].id

SEGMENTATION_DESCRIPTIONS: dict[SegmentationStrategy, str] = {
    SegmentationStrategy.NONE: "Whole document in one request.",
    SegmentationStrategy.PARAGRAPHS: "Best for articles and essays. Preserves flow.",
    SegmentationStrategy.SENTENCES: "Granular precision. Good for complex syntax.",
    SegmentationStrategy.LINES: "Best for poetry, lyrics, or lists.",
    SegmentationStrategy.SMART: "Groups sentences (~500 chars) to balance context and speed.",
}


def is_preset_language(value: str) -> bool:
    """Return whether `value` names a preset language other than the custom entry."""

    return any(
        option.code == value and option.code != CUSTOM_LANGUAGE_SENTINEL for option in LANGUAGES
    )


def is_unresolved_language(value: str | None) -> bool:
    """Return whether a language selection is blank or still a sentinel."""

    if value is None:
        return True
    normalized = value.strip()
    if not normalized:
        return True
    lowered = normalized.lower()
    return lowered in {CUSTOM_LANGUAGE_SENTINEL, TARGET_LANGUAGE_PLACEHOLDER.lower()}
