from langchain_core.prompts import PromptTemplate

SYSTEM_BASE = """You are a helpful AI assistant. Answer the user's question based ONLY on the context provided.
If the context does not contain the answer, state that you cannot answer from the given information."""

CONTEXT_DELIMITER = "\n\n---\n\n"

QA_TEMPLATE = PromptTemplate(
    input_variables=["context", "question"],
    template=(
        "CONTEXT:\n"
        "---\n"
        "{context}\n"
        "---\n\n"
        "QUESTION: {question}\n\n"
        "ANSWER:"
    ),
)

STRUCTURED_SYSTEM = (
    SYSTEM_BASE
    + "\nRespond with a single JSON object and nothing else, in the form:\n"
    '{"answer": "<string>", "sufficient_context": <true|false>}\n'
    "Set sufficient_context to false when the context does not support an answer."
)


def format_context(texts) -> str:
    """Number each chunk and separate them so the model can tell them apart."""
    return CONTEXT_DELIMITER.join(
        f"[Chunk {i}]\n{t.strip()}" for i, t in enumerate(texts, start=1)
    )
