from __future__ import annotations

import argparse
from pathlib import Path

from chains.query_engine import QueryEngine
from common.config import DEFAULT_CONFIG_PATH, load_config
from common.errors import KnowledgeEngineError
from common.logger import get_logger
from models.embeddings import load_embedding_provider
from models.llm import load_generative_provider
from retrieval.exact_retriever import ExactRetriever
from vectorstore.sqlite_store import ContentStore

log = get_logger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Ask a question against the knowledge base."
    )
    parser.add_argument("question", type=str, help="Your question")
    parser.add_argument(
        "--config", type=str, default=str(DEFAULT_CONFIG_PATH), help="YAML config file"
    )
    parser.add_argument(
        "--k", type=int, default=None, help="Number of chunks to use (default: retrieval.k)"
    )
    parser.add_argument(
        "--json",
        action="store_true",
        help="Ask for a structured JSON answer (answer + sufficient_context)",
    )
    parser.add_argument(
        "--show-sources", action="store_true", help="Print the chunks used as context"
    )
    args = parser.parse_args(argv)
    if args.k is not None and args.k <= 0:
        parser.error("--k must be positive")

    try:
        config = load_config(Path(args.config))
        embedder = load_embedding_provider(config.embeddings, config.ollama_base_url)
        llm = load_generative_provider(config.llm_qa, config.ollama_base_url)

        with ContentStore(config.app.database_url) as store:
            engine = QueryEngine(
                retriever=ExactRetriever(store, k=config.retrieval.k),
                embedder=embedder,
                llm=llm,
            )
            if args.json:
                structured = engine.ask_structured(args.question, k=args.k)
                print(structured.model_dump_json(indent=2))
                return
            result = engine.ask(args.question, k=args.k)
    except KnowledgeEngineError as e:
        log.error("Query failed [%s]: %s", e.kind.value, e)
        raise SystemExit(1)

    print("\n=== ANSWER ===\n")
    print(result.answer)

    if args.show_sources and result.sources:
        print("\n=== SOURCES ===\n")
        for s in result.sources:
            print(f"- {s['source']} [chunk {s['chunk_id']}] similarity={s['similarity']:.3f}")
            print(f"  snippet: {s['snippet']}\n")


if __name__ == "__main__":
    main()
