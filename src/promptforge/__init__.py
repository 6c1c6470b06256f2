"""PromptForge - Prompt-enhanced AI image generation with a local gallery."""

__version__ = "0.1.0"

from promptforge.core.config import PromptForgeConfig
from promptforge.core.pipeline import GenerationPipeline

__all__ = [
    "GenerationPipeline",
    "PromptForgeConfig",
]
