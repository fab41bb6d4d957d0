from __future__ import annotations

import argparse
from pathlib import Path

from common.config import DEFAULT_CONFIG_PATH, load_config
from common.errors import KnowledgeEngineError
from common.logger import get_logger
from ingestion.ingest_pipeline import ingest_folder
from models.embeddings import load_embedding_provider
from vectorstore.sqlite_store import ContentStore

log = get_logger(__name__)


def main(argv=None):
    parser = argparse.ArgumentParser(
        description="Ingest new or changed documents from a folder into the knowledge base."
    )
    parser.add_argument(
        "input_dir",
        type=str,
        nargs="?",
        default=None,
        help="Folder with PDF/TXT/MD files (default: app.data_dir)",
    )
    parser.add_argument(
        "--config", type=str, default=str(DEFAULT_CONFIG_PATH), help="YAML config file"
    )
    parser.add_argument(
        "--no-progress", action="store_true", help="Disable the embedding progress bar"
    )
    args = parser.parse_args(argv)

    try:
        config = load_config(Path(args.config))
        if args.no_progress:
            config.app.show_progress = False
        input_dir = Path(args.input_dir) if args.input_dir else config.app.data_dir

        embedder = load_embedding_provider(config.embeddings, config.ollama_base_url)
        with ContentStore(config.app.database_url) as store:
            report = ingest_folder(input_dir, config, store, embedder)
    except KnowledgeEngineError as e:
        log.error("Ingestion failed [%s]: %s", e.kind.value, e)
        raise SystemExit(1)

    print(
        f"Processed {report.documents_processed} documents "
        f"({report.new} new, {report.modified} modified, {report.unchanged} unchanged, "
        f"{report.skipped} skipped); indexed {report.chunks_indexed} chunks."
    )


if __name__ == "__main__":
    main()
