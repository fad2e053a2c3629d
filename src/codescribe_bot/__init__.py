"""
CodeScribe Bot (Linear agent + GitHub + Bedrock Claude)

Where: long-running FastAPI process (Linear agent webhook target).
What:  Route @mention comments to commands, fetch tracker/repo data, call the LLM, post reply.
Why:   Lightweight engineering assistant with short-term chat memory and issue analytics.
"""

__all__ = [
    "analytics",
    "commands",
    "config",
    "context_cache",
    "github",
    "handler",
    "intake",
    "linear",
    "llm",
    "logutil",
    "memory",
    "models",
    "prompts",
    "server",
]
