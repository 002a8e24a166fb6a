"""Configuration model and loaders for contexttrans.

Responsibilities:
- Define the immutable per-run configuration consumed by the pipeline.
- Validate language selection and model identifiers before a run starts.
- Provide loader entry points for YAML- and environment-based configuration.

Key types:
- `RunConfiguration`: validated, immutable settings for one pipeline run.
- `TranslatorConfig`: editable settings assembled from files, env, and CLI flags.
- `ConfigLoader`: static construction helpers for `TranslatorConfig`.
"""

from __future__ import annotations

from dataclasses import dataclass, field
import os
from pathlib import Path
from typing import Any, Mapping

import yaml

from .errors import ConfigurationError
from .models.catalog import (
    CUSTOM_LANGUAGE_SENTINEL,
    DEFAULT_MODEL_ID,
    TARGET_LANGUAGE_PLACEHOLDER,
    is_unresolved_language,
)
from .models.datatypes import SegmentationStrategy
from .parsing import normalize_optional_string, parse_positive_int, parse_required_boolean
from .pipeline_costs import DEFAULT_QUOTA_TOKEN_CEILING


_DEFAULT_SOURCE_LANG = "English"


@dataclass(frozen=True, slots=True)
class RunConfiguration:
    """Immutable settings for one pipeline run.

    Attributes:
        source_lang: Source language name.
        target_lang: Target language name; never a sentinel once validated.
        segmentation_strategy: Strategy used to split the document.
        translation_model_id: Model used for the translate stage.
        verification_model_id: Model used for back-translation and evaluation.
        custom_instructions: Optional style or tone instructions.
        enable_evaluation: Whether to run the quality-audit stage.
        credential: Optional caller API key; its presence removes the quota ceiling.
    """

    source_lang: str
    target_lang: str
    segmentation_strategy: SegmentationStrategy = SegmentationStrategy.NONE
    translation_model_id: str = DEFAULT_MODEL_ID
    verification_model_id: str = DEFAULT_MODEL_ID
    custom_instructions: str | None = None
    enable_evaluation: bool = False
    credential: str | None = field(default=None, repr=False)

    @property
    def has_credential(self) -> bool:
        """Return whether a non-blank caller credential is present."""

        return normalize_optional_string(self.credential) is not None

    def validate(self) -> None:
        """Validate run configuration values before pipeline execution.

        Raises:
            ConfigurationError: If a language is unresolved or a model id is blank.
        """

        if is_unresolved_language(self.source_lang):
            raise ConfigurationError(
                "Source language is not set.",
                hint=(
                    f"Pass `--source-lang <language>`; `{CUSTOM_LANGUAGE_SENTINEL}` "
                    "must be replaced by a language name."
                ),
            )
        if is_unresolved_language(self.target_lang):
            raise ConfigurationError(
                "Target language is not set.",
                hint=(
                    f"Pass `--target-lang <language>`; `{TARGET_LANGUAGE_PLACEHOLDER}` and "
                    f"`{CUSTOM_LANGUAGE_SENTINEL}` are not languages."
                ),
            )
        if normalize_optional_string(self.translation_model_id) is None:
            raise ConfigurationError("`translation_model_id` must be a non-empty string.")
        if normalize_optional_string(self.verification_model_id) is None:
            raise ConfigurationError("`verification_model_id` must be a non-empty string.")


@dataclass(slots=True)
class TranslatorConfig:
    """Editable settings assembled before building a `RunConfiguration`.

    Attributes:
        source_lang: Source language name.
        target_lang: Target language name, blank until chosen.
        segmentation_strategy: Strategy name or member.
        translation_model_id: Translate-stage model identifier.
        verification_model_id: Verification-stage model identifier.
        custom_instructions: Optional style instructions.
        enable_evaluation: Whether the quality-audit stage runs.
        credential: Optional caller API key.
        quota_token_ceiling: Contextual-token ceiling for runs without a credential.
    """

    source_lang: str = _DEFAULT_SOURCE_LANG
    target_lang: str = ""
    segmentation_strategy: SegmentationStrategy = SegmentationStrategy.NONE
    translation_model_id: str = DEFAULT_MODEL_ID
    verification_model_id: str = DEFAULT_MODEL_ID
    custom_instructions: str | None = None
    enable_evaluation: bool = False
    credential: str | None = field(default=None, repr=False)
    quota_token_ceiling: int = DEFAULT_QUOTA_TOKEN_CEILING

    def to_run_configuration(self) -> RunConfiguration:
        """Build and validate the immutable run configuration.

        Raises:
            ConfigurationError: If any value is invalid.
        """

        try:
            strategy = SegmentationStrategy.parse(self.segmentation_strategy)
        except ValueError as exc:
            raise ConfigurationError(str(exc)) from exc
        if self.quota_token_ceiling <= 0:
            raise ConfigurationError("`quota_token_ceiling` must be a positive integer.")

        run_config = RunConfiguration(
            source_lang=(self.source_lang or "").strip(),
            target_lang=(self.target_lang or "").strip(),
            segmentation_strategy=strategy,
            translation_model_id=(self.translation_model_id or "").strip(),
            verification_model_id=(self.verification_model_id or "").strip(),
            custom_instructions=normalize_optional_string(self.custom_instructions),
            enable_evaluation=self.enable_evaluation,
            credential=normalize_optional_string(self.credential),
        )
        run_config.validate()
        return run_config


class ConfigLoader:
    """Factory methods for creating `TranslatorConfig` from external sources."""

    _SUPPORTED_KEYS = frozenset(
        {
            "source_lang",
            "target_lang",
            "segmentation_strategy",
            "translation_model_id",
            "verification_model_id",
            "custom_instructions",
            "enable_evaluation",
            "credential",
            "quota_token_ceiling",
        }
    )
    _ENV_KEYS = {
        "source_lang": "CONTEXTTRANS_SOURCE_LANG",
        "target_lang": "CONTEXTTRANS_TARGET_LANG",
        "segmentation_strategy": "CONTEXTTRANS_SEGMENTATION",
        "translation_model_id": "CONTEXTTRANS_TRANSLATION_MODEL",
        "verification_model_id": "CONTEXTTRANS_VERIFICATION_MODEL",
        "custom_instructions": "CONTEXTTRANS_CUSTOM_INSTRUCTIONS",
        "enable_evaluation": "CONTEXTTRANS_ENABLE_EVALUATION",
        "quota_token_ceiling": "CONTEXTTRANS_QUOTA_TOKEN_CEILING",
        "credential": "GEMINI_API_KEY",
    }

    @staticmethod
    def from_yaml(path: Path) -> TranslatorConfig:
        """Create config from a YAML file.

        Raises:
            FileNotFoundError: If `path` does not exist.
            ValueError: If the payload is malformed or contains unknown keys.
        """

        raw_text = path.read_text(encoding="utf-8")
        try:
            payload = yaml.safe_load(raw_text)
        except yaml.YAMLError as exc:
            raise ValueError(f"YAML config `{path}` is not valid YAML: {exc}") from exc

        if payload is None:
            payload = {}
        if not isinstance(payload, Mapping):
            raise ValueError(f"YAML config `{path}` must contain a top-level mapping/object.")
        return ConfigLoader.from_mapping(payload, source_label=f"YAML `{path}`")

    @staticmethod
    def from_env(
        env: Mapping[str, str] | None = None,
        base: TranslatorConfig | None = None,
    ) -> TranslatorConfig:
        """Create config from environment variables layered over `base`."""

        env_map: Mapping[str, str] = os.environ if env is None else env
        payload: dict[str, Any] = {}
        for key, env_key in ConfigLoader._ENV_KEYS.items():
            value = normalize_optional_string(env_map.get(env_key))
            if value is not None:
                payload[key] = value
        return ConfigLoader.from_mapping(payload, source_label="environment", base=base)

    @staticmethod
    def from_mapping(
        payload: Mapping[str, Any],
        source_label: str,
        base: TranslatorConfig | None = None,
    ) -> TranslatorConfig:
        """Build config from a normalized mapping payload, keeping `base` values for gaps."""

        unknown = sorted(str(key) for key in payload.keys() if key not in ConfigLoader._SUPPORTED_KEYS)
        if unknown:
            raise ValueError(f"{source_label} contains unsupported key(s): {', '.join(unknown)}")

        config = TranslatorConfig() if base is None else TranslatorConfig(
            source_lang=base.source_lang,
            target_lang=base.target_lang,
            segmentation_strategy=base.segmentation_strategy,
            translation_model_id=base.translation_model_id,
            verification_model_id=base.verification_model_id,
            custom_instructions=base.custom_instructions,
            enable_evaluation=base.enable_evaluation,
            credential=base.credential,
            quota_token_ceiling=base.quota_token_ceiling,
        )

        for key in (
            "source_lang",
            "target_lang",
            "translation_model_id",
            "verification_model_id",
            "custom_instructions",
            "credential",
        ):
            if key in payload:
                value = normalize_optional_string(payload[key])
                if value is not None:
                    setattr(config, key, value)

        if "segmentation_strategy" in payload:
            try:
                config.segmentation_strategy = SegmentationStrategy.parse(
                    payload["segmentation_strategy"]
                )
            except ValueError as exc:
                raise ValueError(f"{source_label}: {exc}") from exc
        if "enable_evaluation" in payload:
            config.enable_evaluation = parse_required_boolean(
                payload["enable_evaluation"], "enable_evaluation"
            )
        if "quota_token_ceiling" in payload:
            config.quota_token_ceiling = parse_positive_int(
                payload["quota_token_ceiling"], "quota_token_ceiling"
            )
        return config
