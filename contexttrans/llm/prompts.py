"""Prompt template library for provider calls.

Responsibilities:
- Build the exact prompt text for translate, back-translate, and evaluate calls.
- Keep prompts deterministic so the translate prompt can be stored for inspection.
"""

from __future__ import annotations


class PromptLibrary:
    """Build prompt strings for the three pipeline call kinds."""

    def translate_prompt(
        self,
        *,
        segment_text: str,
        full_document: str,
        translation_so_far: str,
        source_lang: str,
        target_lang: str,
        custom_instructions: str | None = None,
    ) -> str:
        """Return the translate prompt for one segment.

        When the segment is the whole trimmed document, a plain prompt is used;
        otherwise the prompt carries the full document and any prior output.
        """

        instructions = (custom_instructions or "").strip()
        if segment_text.strip() == full_document.strip():
            return self._plain_translate_prompt(
                text=segment_text,
                source_lang=source_lang,
                target_lang=target_lang,
                custom_instructions=instructions,
            )

        sections = [
            "You are an expert translator specializing in maintaining context, tone, and nuance.",
        ]
        if instructions:
            sections.append(f"Additional style and tone instructions:\n{instructions}")
        sections.append(
            f"Task: Translate only the segment marked \"Segment to Translate\" from "
            f"{source_lang} to {target_lang}.\n"
            "Rules:\n"
            "1. Use the full document below to understand meaning, terminology, and tone.\n"
            "2. Translate only the segment; do not translate any other part of the document.\n"
            "3. Do not add conversational filler, notes, or explanations. "
            "Output only the translated text."
        )
        sections.append(f'Full Document Context:\n"""\n{full_document}\n"""')
        if translation_so_far:
            sections.append(
                "Translation So Far (your earlier output for the preceding segments; keep "
                "terminology, names, and style consistent with it):\n"
                f'"""\n{translation_so_far}\n"""'
            )
        sections.append(f'Segment to Translate:\n"""\n{segment_text}\n"""')
        return "\n\n".join(sections)

    @staticmethod
    def _plain_translate_prompt(
        *,
        text: str,
        source_lang: str,
        target_lang: str,
        custom_instructions: str,
    ) -> str:
        """Return the whole-document translate prompt."""

        sections = [f"Translate the following text from {source_lang} to {target_lang}."]
        if custom_instructions:
            sections.append(f"Style and tone instructions:\n{custom_instructions}")
        sections.append(
            "Output only the translation, with no commentary, notes, or explanations."
        )
        sections.append(f'Text:\n"""\n{text}\n"""')
        return "\n\n".join(sections)

    def back_translate_prompt(
        self,
        *,
        translated_text: str,
        source_lang: str,
        target_lang: str,
    ) -> str:
        """Return a literal back-translation prompt used for verification."""

        return (
            "You are an impartial verification assistant.\n\n"
            f"Task: Translate the following text from {target_lang} back to {source_lang} "
            "literally and accurately. The result is used to check whether the original "
            "meaning was preserved.\n\n"
            "Rules:\n"
            "1. Translate strictly what is written.\n"
            "2. Do not improve, polish, or embellish the text; if the input is awkward, "
            "the back-translation must reflect that.\n"
            "3. Output only the back-translated text.\n\n"
            f'Text to Back-Translate:\n"""\n{translated_text}\n"""'
        )

    def evaluate_prompt(
        self,
        *,
        original: str,
        translated: str,
        back_translated: str,
        source_lang: str,
        target_lang: str,
        full_document: str,
    ) -> str:
        """Return a quality-audit prompt comparing original, translation, and back-translation."""

        return (
            "You are a meticulous translation quality auditor.\n\n"
            f"Task: Audit the {target_lang} translation of a {source_lang} segment. Use the "
            "back-translation and the full document for reference.\n\n"
            "Look for:\n"
            "- ambiguity introduced by the translation\n"
            "- drift in meaning between the original and the translation\n"
            "- poor or unidiomatic word choice\n"
            "- anything likely to confuse a reader of the translation\n\n"
            "Output a concise bullet list of findings. If there are no issues, state that "
            "the translation is accurate. Do not re-translate the segment.\n\n"
            f'Full Document (reference):\n"""\n{full_document}\n"""\n\n'
            f'Original ({source_lang}):\n"""\n{original}\n"""\n\n'
            f'Translation ({target_lang}):\n"""\n{translated}\n"""\n\n'
            f'Back-Translation ({source_lang}):\n"""\n{back_translated}\n"""'
        )
