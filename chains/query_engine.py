from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, ValidationError

from chains.output_parsing import parse_json_payload
from chains.prompts import QA_TEMPLATE, STRUCTURED_SYSTEM, SYSTEM_BASE, format_context
from common.errors import ProcessingError
from common.logger import get_logger
from models.embeddings import EmbeddingProvider
from models.llm import GenerativeProvider
from retrieval.exact_retriever import ExactRetriever, ScoredChunk

log = get_logger(__name__)

NO_RELEVANT_INFO_ANSWER = (
    "I could not find any relevant information in the knowledge base to answer your question."
)


@dataclass(frozen=True)
class QueryAnswer:
    answer: str
    sources: List[Dict[str, Any]]


class StructuredAnswer(BaseModel):
    answer: str
    sufficient_context: bool


def _format_sources(scored: List[ScoredChunk]) -> List[Dict[str, Any]]:
    return [
        {
            "source": s.chunk.document_path,
            "document_id": s.chunk.document_id,
            "chunk_id": s.chunk.id,
            "similarity": s.similarity,
            "snippet": s.chunk.text[:300],
        }
        for s in scored
    ]


class QueryEngine:
    """
    Answers questions from the knowledge base:
      1) embeds the question
      2) ranks every stored chunk by cosine similarity, keeps the top k
      3) asks the generative model to answer strictly from those chunks
    """

    def __init__(
        self,
        retriever: ExactRetriever,
        embedder: EmbeddingProvider,
        llm: GenerativeProvider,
    ):
        self.retriever = retriever
        self.embedder = embedder
        self.llm = llm

    def find_relevant_chunks(self, question: str, k: Optional[int] = None) -> List[ScoredChunk]:
        if not question or not question.strip():
            raise ProcessingError("Question cannot be empty")
        log.info("Answering question: '%s'", question)
        question_embedding = self.embedder.embed(question)
        return self.retriever.retrieve(question_embedding, k=k)

    def build_prompt(self, question: str, scored: List[ScoredChunk]) -> str:
        context = format_context(s.chunk.text for s in scored)
        return QA_TEMPLATE.format(context=context, question=question)

    def ask(self, question: str, k: Optional[int] = None) -> QueryAnswer:
        scored = self.find_relevant_chunks(question, k=k)
        if not scored:
            return QueryAnswer(answer=NO_RELEVANT_INFO_ANSWER, sources=[])

        answer = self.llm.complete(SYSTEM_BASE, self.build_prompt(question, scored))
        return QueryAnswer(answer=answer, sources=_format_sources(scored))

    def answer_question(self, question: str, k: Optional[int] = None) -> str:
        return self.ask(question, k=k).answer

    def ask_structured(self, question: str, k: Optional[int] = None) -> StructuredAnswer:
        """
        Same retrieval as ask(), but the model must reply with a JSON object
        {"answer": ..., "sufficient_context": ...}. Anything else is a ProcessingError.
        """
        scored = self.find_relevant_chunks(question, k=k)
        if not scored:
            return StructuredAnswer(answer=NO_RELEVANT_INFO_ANSWER, sufficient_context=False)

        raw = self.llm.complete(STRUCTURED_SYSTEM, self.build_prompt(question, scored))
        data = parse_json_payload(raw)
        if not isinstance(data, dict):
            raise ProcessingError("Model output JSON is not an object.")
        try:
            return StructuredAnswer(**data)
        except ValidationError as e:
            raise ProcessingError(f"Model output JSON has the wrong shape: {e}") from e
