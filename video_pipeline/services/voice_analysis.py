"""Batched creator voice analysis over many transcripts."""
from datetime import datetime
from typing import Any, Dict, List, Optional

from video_pipeline.config.templates import PromptTemplateEngine, get_template_engine
from video_pipeline.core.config import settings
from video_pipeline.core.exceptions import BatchAnalysisError, PipelineBaseException, ValidationError
from video_pipeline.models.analysis import (
    BatchAnalysisMeta, BatchAnalysisResponse, CombinedAnalysis,
    StyleSignature, TemplateItem, TemplateSet
)
from video_pipeline.services.gemini_provider import GeminiProvider
from video_pipeline.utils.json_extraction import parse_json_with_fallback
from video_pipeline.utils.logging import CorrelatedLogger, MetricsLogger
from video_pipeline.utils.response_helpers import ResponseHelper

PROMPT_NAME = "voice_analysis"
TEMPLATE_CATEGORIES = ("hooks", "bridges", "ctas", "nuggets")
STYLE_LISTS = ("power_words", "filler_phrases", "transition_phrases")
DEFAULT_TONE = "Varied"


def chunk(items: List[Any], size: int) -> List[List[Any]]:
    """Split items into consecutive groups of at most size."""
    return [items[i:i + size] for i in range(0, len(items), size)]


def _int_or_none(value: Any) -> Optional[int]:
    if isinstance(value, bool):
        return None
    try:
        return int(value)
    except (TypeError, ValueError):
        return None


def _index_shift(raws: List[Any], key: str, batch_size: int) -> int:
    """1 when a list numbers its items from 0 (0 present, all within 0..batch_size-1), else 0."""
    values = [_int_or_none(raw.get(key)) for raw in raws if isinstance(raw, dict)]
    values = [v for v in values if v is not None]
    if 0 in values and all(0 <= v < batch_size for v in values):
        return 1
    return 0


def _local_index(value: Any, position: int, batch_size: int, shift: int = 0) -> int:
    """1-based index inside a batch, always within 1..batch_size."""
    index = _int_or_none(value)
    if index is not None:
        index += shift
    if index is None or not 1 <= index <= batch_size:
        return max(1, min(position, batch_size))
    return index


def _string_list(value: Any) -> List[str]:
    if not isinstance(value, list):
        return []
    return [item for item in value if isinstance(item, str)]


def _creator_label(creator: Optional[Dict[str, Any]]) -> Optional[str]:
    if not creator:
        return None
    name = creator.get("name")
    handle = creator.get("handle")
    if name and handle:
        return f"{name} (@{str(handle).lstrip('@')})"
    if handle:
        return f"@{str(handle).lstrip('@')}"
    return str(name) if name else None


class VoiceAnalysisBatcher:
    """Chunks transcripts, analyzes each batch with one provider call, and merges the results."""

    def __init__(
        self,
        provider: Optional[GeminiProvider] = None,
        template_engine: Optional[PromptTemplateEngine] = None,
        batch_size: Optional[int] = None,
    ):
        self.provider = provider or GeminiProvider()
        self.template_engine = template_engine or get_template_engine()
        self.batch_size = batch_size or settings.voice_analysis_batch_size
        self.metrics = MetricsLogger()

    async def analyze_batch(
        self,
        transcripts: List[str],
        creator: Optional[Dict[str, Any]] = None,
        batch_size: Optional[int] = None,
        model: Optional[str] = None,
        temperature: Optional[float] = None,
        max_tokens: Optional[int] = None,
        request_id: Optional[str] = None
    ) -> BatchAnalysisResponse:
        """
        Analyze transcripts in sequential fixed-size batches and merge the results.

        Args:
            transcripts: Transcript texts, in order
            creator: Optional creator info ({name, handle})
            batch_size: Transcripts per provider call (defaults to the configured size)
            model: Generation model name
            temperature: Sampling temperature
            max_tokens: Output token limit per batch
            request_id: Request correlation ID for logging

        Raises:
            ValidationError: transcripts is empty or batch_size is not positive
            BatchAnalysisError: any batch failed; names the 1-based batch index
        """
        if not isinstance(transcripts, list) or not transcripts:
            raise ValidationError("transcripts array is required and must not be empty")

        size = self.batch_size if batch_size is None else batch_size
        if size < 1:
            raise ValidationError("batchSize must be a positive integer", {"reason": f"got {size}"})

        request_id = request_id or ResponseHelper.generate_request_id()
        logger = CorrelatedLogger(__name__, request_id)
        start_time = datetime.now()

        model = model or settings.gemini_model
        temperature = settings.voice_analysis_temperature if temperature is None else temperature
        max_tokens = max_tokens or settings.voice_analysis_max_tokens

        batches = chunk(transcripts, size)
        logger.info(f"Processing {len(transcripts)} transcripts in {len(batches)} batches of {size}")

        results = []
        for index, batch in enumerate(batches, start=1):
            try:
                results.append(await self._analyze_one(
                    batch, index, len(batches), creator, model, temperature, max_tokens, logger
                ))
            except BatchAnalysisError as e:
                logger.error(e.message)
                self.metrics.log_batch_analysis_metrics(
                    request_id, len(transcripts), len(batches), False,
                    self._elapsed_ms(start_time), failed_batch=e.batch_index
                )
                raise

        combined = self.merge_batch_results(results, [len(batch) for batch in batches])
        processing_time = self._elapsed_ms(start_time)

        logger.info(
            f"Generated {len(combined.templates.hooks)} hooks, {len(combined.templates.bridges)} bridges, "
            f"{len(combined.templates.ctas)} CTAs, {len(combined.templates.nuggets)} nuggets"
        )
        self.metrics.log_batch_analysis_metrics(
            request_id, len(transcripts), len(batches), True, processing_time
        )

        return BatchAnalysisResponse(
            request_id=request_id,
            creator=creator or {},
            analysis=combined,
            meta=BatchAnalysisMeta(
                total_transcripts=len(transcripts),
                batches_processed=len(batches),
                batch_size=size,
                model=model,
                temperature=temperature,
                max_tokens=max_tokens,
                processing_time_ms=processing_time,
            ),
        )

    def build_prompt(self, batch: List[str], creator: Optional[Dict[str, Any]] = None) -> str:
        """Render the analysis prompt for one batch."""
        return self.template_engine.render_prompt(
            PROMPT_NAME,
            transcripts=[text or "" for text in batch],
            creator=_creator_label(creator),
        )

    async def _analyze_one(
        self,
        batch: List[str],
        index: int,
        total: int,
        creator: Optional[Dict[str, Any]],
        model: str,
        temperature: float,
        max_tokens: int,
        logger: CorrelatedLogger
    ) -> Dict[str, Any]:
        logger.info(f"Analyzing batch {index}/{total} ({len(batch)} transcripts)")

        try:
            text = await self.provider.generate_text(
                self.build_prompt(batch, creator),
                model=model,
                system_instruction=self.template_engine.get_system_role(PROMPT_NAME),
                temperature=temperature,
                max_tokens=max_tokens,
                json_output=True,
            )
        except PipelineBaseException as e:
            raise BatchAnalysisError(index, total, e.message)

        parsed = parse_json_with_fallback(text)
        if not isinstance(parsed, dict):
            raise BatchAnalysisError(index, total, f"Failed to parse JSON content for batch {index}")
        return parsed

    @staticmethod
    def merge_batch_results(results: List[Dict[str, Any]], batch_sizes: List[int]) -> CombinedAnalysis:
        """
        Merge per-batch results in order.

        Template ``sourceIndex`` and transcript ``index`` values are rebased by the
        number of transcripts consumed by earlier batches. A list numbered from 0
        is shifted to 1-based first. A local index outside ``1..batch_size`` is
        replaced by the item's position (capped at the batch size), so rebased
        indexes stay inside their own batch's range.

        Style lists keep the first occurrence of each exact string.
        ``avgWordsPerSentence`` is a running ``(previous + value) / 2``. Tone
        comes from the first batch that supplies one.
        """
        templates = TemplateSet()
        style = StyleSignature(tone=DEFAULT_TONE)
        transcripts: List[Dict[str, Any]] = []
        seen = {name: set() for name in STYLE_LISTS}

        offset = 0
        for result, batch_size in zip(results, batch_sizes):
            raw_templates = result.get("templates") if isinstance(result.get("templates"), dict) else {}
            for category in TEMPLATE_CATEGORIES:
                items = raw_templates.get(category)
                items = items if isinstance(items, list) else []
                shift = _index_shift(items, "sourceIndex", batch_size)
                for position, raw in enumerate(items, start=1):
                    item = VoiceAnalysisBatcher._template_item(raw, offset, position, batch_size, shift)
                    if item is not None:
                        getattr(templates, category).append(item)

            raw_transcripts = result.get("transcripts")
            raw_transcripts = raw_transcripts if isinstance(raw_transcripts, list) else []
            shift = _index_shift(raw_transcripts, "index", batch_size)
            for position, raw in enumerate(raw_transcripts, start=1):
                if isinstance(raw, dict):
                    local = _local_index(raw.get("index"), position, batch_size, shift)
                    transcripts.append({**raw, "index": offset + local})

            raw_style = result.get("styleSignature") if isinstance(result.get("styleSignature"), dict) else {}
            batch_style = StyleSignature(
                power_words=_string_list(raw_style.get("powerWords")),
                filler_phrases=_string_list(raw_style.get("fillerPhrases")),
                transition_phrases=_string_list(raw_style.get("transitionPhrases")),
            )
            for name in STYLE_LISTS:
                merged = getattr(style, name)
                for phrase in getattr(batch_style, name):
                    if phrase not in seen[name]:
                        seen[name].add(phrase)
                        merged.append(phrase)

            avg = raw_style.get("avgWordsPerSentence")
            if isinstance(avg, (int, float)) and not isinstance(avg, bool):
                current = style.avg_words_per_sentence
                style.avg_words_per_sentence = avg if current is None else (current + avg) / 2

            tone = raw_style.get("tone")
            if isinstance(tone, str) and tone.strip() and style.tone == DEFAULT_TONE:
                style.tone = tone

            offset += batch_size

        return CombinedAnalysis(templates=templates, style_signature=style, transcripts=transcripts)

    @staticmethod
    def _template_item(
        raw: Any, offset: int, position: int, batch_size: int, shift: int = 0
    ) -> Optional[TemplateItem]:
        if isinstance(raw, str):
            return TemplateItem(pattern=raw, source_index=offset + _local_index(None, position, batch_size))
        if not isinstance(raw, dict):
            return None

        extra = {k: v for k, v in raw.items() if k not in ("pattern", "variables", "sourceIndex", "source_index", "structure")}
        structure = raw.get("structure")
        return TemplateItem(
            pattern=str(raw.get("pattern") or ""),
            variables=_string_list(raw.get("variables")),
            source_index=offset + _local_index(raw.get("sourceIndex"), position, batch_size, shift),
            structure=structure if isinstance(structure, str) else None,
            **extra,
        )

    @staticmethod
    def _elapsed_ms(start_time: datetime) -> int:
        return int((datetime.now() - start_time).total_seconds() * 1000)
