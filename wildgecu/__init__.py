"""Cron-scheduled LLM prompts, agent file and command tools, prompt assembly and a daemon chat client."""

__version__ = "0.1.0"
__all__ = ["__version__"]