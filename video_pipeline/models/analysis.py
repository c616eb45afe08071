"""Voice analysis data models. JSON keys are camelCase."""
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ConfigDict, Field


class TemplateItem(BaseModel):
    """A reusable pattern extracted from one transcript."""
    model_config = ConfigDict(populate_by_name=True, extra="allow")

    pattern: str = ""
    variables: List[str] = Field(default_factory=list)
    source_index: Optional[int] = Field(None, alias="sourceIndex", description="1-based transcript index")
    structure: Optional[str] = Field(None, description="Nugget delivery structure")


class TemplateSet(BaseModel):
    """Templates grouped by script section."""
    hooks: List[TemplateItem] = Field(default_factory=list)
    bridges: List[TemplateItem] = Field(default_factory=list)
    ctas: List[TemplateItem] = Field(default_factory=list)
    nuggets: List[TemplateItem] = Field(default_factory=list)


class StyleSignature(BaseModel):
    """Creator style markers."""
    model_config = ConfigDict(populate_by_name=True)

    power_words: List[str] = Field(default_factory=list, alias="powerWords")
    filler_phrases: List[str] = Field(default_factory=list, alias="fillerPhrases")
    transition_phrases: List[str] = Field(default_factory=list, alias="transitionPhrases")
    avg_words_per_sentence: Optional[float] = Field(None, alias="avgWordsPerSentence")
    tone: str = "Varied"


class CombinedAnalysis(BaseModel):
    """Analysis merged across every batch."""
    templates: TemplateSet = Field(default_factory=TemplateSet)
    style_signature: StyleSignature = Field(default_factory=StyleSignature, alias="styleSignature")
    transcripts: List[Dict[str, Any]] = Field(default_factory=list, description="Per-transcript section breakdowns")

    model_config = ConfigDict(populate_by_name=True)


class BatchAnalysisMeta(BaseModel):
    """Parameters and counts for one analyze-batch call."""
    model_config = ConfigDict(populate_by_name=True)

    total_transcripts: int = Field(..., alias="totalTranscripts")
    batches_processed: int = Field(..., alias="batchesProcessed")
    batch_size: int = Field(..., alias="batchSize")
    model: str
    temperature: float
    max_tokens: int = Field(..., alias="maxTokens")
    processing_time_ms: Optional[int] = Field(None, alias="processingTimeMs")


class BatchAnalysisResponse(BaseModel):
    """Result of a successful analyze-batch call."""
    model_config = ConfigDict(populate_by_name=True)

    success: bool = True
    request_id: str = Field(..., alias="requestId")
    creator: Dict[str, Any] = Field(default_factory=dict)
    analysis: CombinedAnalysis
    meta: BatchAnalysisMeta

    def to_payload(self) -> Dict[str, Any]:
        return self.model_dump(by_alias=True, exclude_none=True)
