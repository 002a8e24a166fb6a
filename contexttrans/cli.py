"""Command-line interface for contexttrans.

Responsibilities:
- Expose user-facing commands for translation runs, estimates, and segmentation previews.
- Convert CLI arguments, YAML config, and environment values into a `RunConfiguration`.

Key public functions:
- `app`: Typer application instance.
- `main`: invoke the Typer application.
"""

from __future__ import annotations

import os
from pathlib import Path
import signal
from typing import Annotated

import typer

from .cli_rendering import (
    SegmentProgressPrinter,
    echo_cost_estimate,
    echo_run_summary,
    echo_segment_list,
    exit_with_command_error,
)
from .cli_runtime import resolve_credential
from .config import ConfigLoader, RunConfiguration, TranslatorConfig
from .credentials import create_credential_store
from .errors import PipelineStageError
from .io.storage import ResultStore, read_document
from .llm.gemini_client import GeminiClient
from .llm.translator import SegmentTranslator
from .llm.retry import RetryingInvoker
from .models.catalog import MODELS, SEGMENTATION_DESCRIPTIONS, is_preset_language
from .models.datatypes import Segment, SegmentationStrategy
from .pipeline.orchestrator import TranslationPipeline
from .pipeline_costs import CostEstimator, is_within_quota
from .telemetry.logger import RunLogger
from .text.segmenter import Segmenter

app = typer.Typer(
    name="contexttrans",
    no_args_is_help=True,
    help="Context-preserving document translation with back-translation checks.",
)

_SERVICE_KEY_ENV = "CONTEXTTRANS_SERVICE_API_KEY"
_STRATEGY_HELP = "Segmentation strategy. " + " ".join(
    f"`{strategy.value}`: {description}" for strategy, description in SEGMENTATION_DESCRIPTIONS.items()
)
_MODEL_PRESETS = ", ".join(f"`{model.id}`" for model in MODELS)


def _load_yaml_config(config_path: Path | None) -> TranslatorConfig | None:
    """Load a YAML config file when requested and map failures to stage errors."""

    if config_path is None:
        return None

    try:
        return ConfigLoader.from_yaml(config_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Config file not found: `{config_path}`.",
            hint="Provide an existing path via `--config <path.yaml>`.",
        ) from exc
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid config file `{config_path}`: {exc}",
            hint="Fix config schema/values and rerun.",
        ) from exc


def _read_input(input_path: Path) -> str:
    """Read the source document and map failures to stage errors."""

    try:
        return read_document(input_path)
    except FileNotFoundError as exc:
        raise PipelineStageError(
            stage="input",
            detail=f"Input file not found: `{input_path}`.",
            hint="Pass the path of an existing UTF-8 text file.",
        ) from exc
    except UnicodeDecodeError as exc:
        raise PipelineStageError(
            stage="input",
            detail=f"Input file `{input_path}` is not valid UTF-8.",
        ) from exc


def _parse_strategy(value: str) -> SegmentationStrategy:
    """Parse a strategy option into a stage-aware error on failure."""

    try:
        return SegmentationStrategy.parse(value)
    except ValueError as exc:
        raise PipelineStageError(stage="config", detail=str(exc)) from exc


def _resolve_translator_config(
    config_file: Path | None,
    source_lang: str | None,
    target_lang: str | None,
    segmentation: str | None,
    translation_model: str | None,
    verification_model: str | None,
    instructions: str | None,
    evaluate: bool | None,
) -> TranslatorConfig:
    """Layer defaults, YAML config, environment, and explicit CLI overrides."""

    base = _load_yaml_config(config_file) or TranslatorConfig()
    try:
        config = ConfigLoader.from_env(base=base)
    except ValueError as exc:
        raise PipelineStageError(
            stage="config",
            detail=f"Invalid environment configuration: {exc}",
        ) from exc

    if source_lang is not None:
        config.source_lang = source_lang
    if target_lang is not None:
        config.target_lang = target_lang
    if segmentation is not None:
        config.segmentation_strategy = _parse_strategy(segmentation)
    if translation_model is not None:
        config.translation_model_id = translation_model
    if verification_model is not None:
        config.verification_model_id = verification_model
    if instructions is not None:
        config.custom_instructions = instructions
    if evaluate is not None:
        config.enable_evaluation = evaluate
    return config


def build_pipeline(
    quota_token_ceiling: int,
    run_logger: RunLogger | None = None,
) -> TranslationPipeline:
    """Wire the Gemini provider, retry invoker, translator, and orchestrator."""

    provider = GeminiClient(default_api_key=os.environ.get(_SERVICE_KEY_ENV))
    translator = SegmentTranslator(
        provider=provider,
        invoker=RetryingInvoker(run_logger=run_logger),
    )
    return TranslationPipeline(
        translator=translator,
        run_logger=run_logger,
        quota_token_ceiling=quota_token_ceiling,
    )


def _run_with_interrupt_cancellation(
    pipeline: TranslationPipeline,
    document: str,
    run_config: RunConfiguration,
) -> tuple[Segment, ...]:
    """Run the pipeline, turning Ctrl+C into cooperative cancellation."""

    def _request_cancel(_signum: int, _frame: object) -> None:
        typer.secho(
            "Cancellation requested; finishing the current segment.",
            fg=typer.colors.YELLOW,
            err=True,
        )
        pipeline.cancel()

    previous_handler = signal.signal(signal.SIGINT, _request_cancel)
    try:
        return pipeline.run(document, run_config)
    finally:
        signal.signal(signal.SIGINT, previous_handler)


@app.command("translate")
def translate_command(
    input_path: Annotated[Path, typer.Argument(help="Path to a UTF-8 text document.")],
    out: Annotated[Path, typer.Option("--out", help="Output directory.")] = Path("out"),
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file with run defaults."),
    ] = None,
    source_lang: Annotated[
        str | None, typer.Option("--source-lang", help="Source language name.")
    ] = None,
    target_lang: Annotated[
        str | None, typer.Option("--target-lang", help="Target language name.")
    ] = None,
    segmentation: Annotated[
        str | None, typer.Option("--segmentation", help=_STRATEGY_HELP)
    ] = None,
    translation_model: Annotated[
        str | None,
        typer.Option(
            "--translation-model",
            help=f"Model id for the translate stage (presets: {_MODEL_PRESETS}).",
        ),
    ] = None,
    verification_model: Annotated[
        str | None,
        typer.Option(
            "--verification-model",
            help=f"Model id for back-translation and evaluation (presets: {_MODEL_PRESETS}).",
        ),
    ] = None,
    instructions: Annotated[
        str | None,
        typer.Option("--instructions", help="Optional style or tone instructions."),
    ] = None,
    evaluate: Annotated[
        bool | None,
        typer.Option("--evaluate/--no-evaluate", help="Run the quality-audit stage."),
    ] = None,
    api_key: Annotated[
        str | None,
        typer.Option(
            "--api-key",
            help="Your Gemini API key. Prefer `--prompt-api-key` to avoid shell history.",
        ),
    ] = None,
    prompt_api_key: Annotated[
        bool,
        typer.Option("--prompt-api-key", help="Prompt for API key with hidden input."),
    ] = False,
    store_api_key: Annotated[
        bool,
        typer.Option(
            "--store-api-key/--no-store-api-key",
            help="Persist a CLI-entered API key to secure credential storage.",
        ),
    ] = True,
) -> None:
    """Translate a document segment by segment with back-translation checks."""

    try:
        translator_config = _resolve_translator_config(
            config_file=config_file,
            source_lang=source_lang,
            target_lang=target_lang,
            segmentation=segmentation,
            translation_model=translation_model,
            verification_model=verification_model,
            instructions=instructions,
            evaluate=evaluate,
        )
        translator_config.credential = resolve_credential(
            api_key=api_key,
            prompt_api_key=prompt_api_key,
            store_api_key=store_api_key,
            fallback_credential=translator_config.credential,
            credential_store_factory=create_credential_store,
        )
        run_config = translator_config.to_run_configuration()
        document = _read_input(input_path)
        if not is_preset_language(run_config.target_lang):
            typer.echo(
                f"Note: `{run_config.target_lang}` is not a preset language; "
                "it is passed to the model as written."
            )

        pipeline = build_pipeline(
            quota_token_ceiling=translator_config.quota_token_ceiling,
            run_logger=RunLogger(),
        )
        segment_count = len(Segmenter().split(document, run_config.segmentation_strategy))
        pipeline.subscribe(SegmentProgressPrinter("translate", segment_count))
        segments = _run_with_interrupt_cancellation(pipeline, document, run_config)

        usage = pipeline.usage_summary()
        paths = ResultStore(out).save_run(
            segments,
            metadata={
                "source_lang": run_config.source_lang,
                "target_lang": run_config.target_lang,
                "segmentation_strategy": run_config.segmentation_strategy.value,
                "translation_model_id": run_config.translation_model_id,
                "verification_model_id": run_config.verification_model_id,
                "enable_evaluation": run_config.enable_evaluation,
                "usage": usage,
            },
        )
    except Exception as exc:
        exit_with_command_error("translate", exc)

    echo_run_summary(segments, usage)
    typer.echo(f"Segments JSON: {paths.json_path}")
    typer.echo(f"Segments CSV: {paths.csv_path}")
    typer.echo(f"Translation text: {paths.text_path}")


@app.command("estimate")
def estimate_command(
    input_path: Annotated[Path, typer.Argument(help="Path to a UTF-8 text document.")],
    segmentation: Annotated[
        str, typer.Option("--segmentation", help=_STRATEGY_HELP)
    ] = SegmentationStrategy.NONE.value,
    config_file: Annotated[
        Path | None,
        typer.Option("--config", help="Path to YAML config file (for the quota ceiling)."),
    ] = None,
) -> None:
    """Estimate token cost and report whether a keyless run is permitted."""

    try:
        config = _load_yaml_config(config_file) or TranslatorConfig()
        strategy = _parse_strategy(segmentation)
        document = _read_input(input_path)
        estimate = CostEstimator().estimate(document, strategy)
    except Exception as exc:
        exit_with_command_error("estimate", exc)

    echo_cost_estimate(
        estimate,
        within_quota=is_within_quota(
            estimate,
            has_credential=False,
            ceiling_tokens=config.quota_token_ceiling,
        ),
        ceiling_tokens=config.quota_token_ceiling,
    )


@app.command("segment")
def segment_command(
    input_path: Annotated[Path, typer.Argument(help="Path to a UTF-8 text document.")],
    segmentation: Annotated[
        str, typer.Option("--segmentation", help=_STRATEGY_HELP)
    ] = SegmentationStrategy.PARAGRAPHS.value,
) -> None:
    """Print the segments a strategy produces, without calling the provider."""

    try:
        strategy = _parse_strategy(segmentation)
        chunks = Segmenter().split(_read_input(input_path), strategy)
    except Exception as exc:
        exit_with_command_error("segment", exc)

    echo_segment_list(chunks)
    typer.echo(f"Total segments: {len(chunks)}")


@app.command("credentials")
def credentials_command(
    set_key: Annotated[
        bool,
        typer.Option("--set", help="Prompt for a Gemini API key and store it securely."),
    ] = False,
    clear: Annotated[
        bool,
        typer.Option("--clear", help="Remove the stored API key."),
    ] = False,
) -> None:
    """Show, set, or clear the stored bring-your-own API key."""

    try:
        store = create_credential_store()
        if set_key and clear:
            raise PipelineStageError(
                stage="credentials",
                detail="Use either `--set` or `--clear`, not both.",
            )
        if set_key:
            entered = typer.prompt("Gemini API key", hide_input=True)
            store.set_api_key(entered)
            typer.echo("Stored API key in secure credential storage.")
            return
        if clear:
            removed = store.clear_api_key()
            typer.echo("Removed stored API key." if removed else "No stored API key found.")
            return
        present = store.get_api_key() is not None
        typer.echo(f"Stored API key: {'present' if present else 'not set'}")
    except Exception as exc:
        exit_with_command_error("credentials", exc)


def main() -> None:
    """Run the contexttrans command-line application."""

    app()
