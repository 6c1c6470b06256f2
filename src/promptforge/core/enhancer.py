"""Prompt enhancement through a chat completion backend.

The enhancer asks a language model to rewrite a short user prompt into a
richer description before it is sent to the image backend.  Enhancement is
best-effort: whenever the completion fails or looks degenerate, the original
prompt is used unchanged and the pipeline carries on.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from promptforge.providers.base import ChatCompletionClient

logger = logging.getLogger(__name__)

ENHANCEMENT_TEMPLATE = """\
You are an expert at creating detailed, artistic image prompts for AI image generation.
Enhance the following prompt to be more descriptive, vivid, and artistic while maintaining the original intent.
Add details about style, mood, lighting, composition, and artistic elements.
Return only the enhanced prompt.

Original prompt: {prompt}

Enhanced prompt:"""


class PromptEnhancer:
    """Rewrite prompts with a chat completion backend.

    Args:
        chat_client: Backend used to complete the enhancement template.
        template: Instruction template with a ``{prompt}`` placeholder.
    """

    def __init__(self, chat_client: ChatCompletionClient, template: str = ENHANCEMENT_TEMPLATE) -> None:
        self.chat_client = chat_client
        self.template = template

    def build_instruction(self, prompt: str) -> str:
        return self.template.format(prompt=prompt)

    def enhance(self, original_prompt: str) -> str:
        """Return an enhanced version of *original_prompt*.

        The completion is accepted only if, once trimmed, it is non-empty and
        strictly longer than the original prompt.  Any failure falls back to
        the original prompt; this method never raises.
        """
        provider = self.chat_client.provider_name

        try:
            completion = self.chat_client.complete(self.build_instruction(original_prompt))
        except Exception as e:
            logger.warning(f"Prompt enhancement failed with {provider}, using original prompt: {e}")
            return original_prompt

        enhanced = (completion or "").strip()
        if enhanced and len(enhanced) > len(original_prompt):
            logger.info(f"Prompt enhanced using {provider}")
            return enhanced

        logger.warning("Prompt enhancement returned invalid result, using original")
        return original_prompt
