"""
LLM Client Abstraction
Single entry point for all AI calls in BuildSheet.
Primary: Gemini Flash (chat, sourcing lookups)
Fallback: Groq LLaMA 3.3 70B
Reasoning: Gemini Pro (audits, assembly plans, fabrication briefs)
Images: litellm image generation, returned as base64 data URLs
"""
import asyncio
import json
import logging
import re
from typing import List, Optional

import litellm
from pydantic import ValidationError

from buildsheet import config
from buildsheet.models.commands import ParsedReply
from buildsheet.models.drafting_schema import (
    AssemblyPlan,
    BOMEntry,
    ChatMessage,
    LocalSupplier,
    ShoppingOption,
)
from buildsheet.services import prompts
from buildsheet.services.catalog import Catalog
from buildsheet.services.command_parser import CommandParser

logger = logging.getLogger("buildsheet-llm")

# Suppress litellm verbose logging
litellm.suppress_debug_info = True


class AssistantError(RuntimeError):
    """Every provider failed for a call whose result the caller cannot do without."""


async def complete(
    messages: list,
    model: Optional[str] = None,
    temperature: float = config.STRUCTURED_TEMPERATURE,
    json_mode: bool = False,
    max_tokens: int = 4096,
) -> str:
    """
    Call the requested (or primary) model. Falls back to the fallback model
    on rate limit or error. Returns the response content string.
    """
    primary = model or config.LLM_PRIMARY_MODEL
    kwargs = {
        "messages": messages,
        "temperature": temperature,
        "max_tokens": max_tokens,
    }
    if json_mode:
        kwargs["response_format"] = {"type": "json_object"}

    try:
        response = await litellm.acompletion(model=primary, **kwargs)
        return response.choices[0].message.content or ""
    except litellm.RateLimitError:
        logger.warning(f"{primary} rate limit hit — falling back to {config.LLM_FALLBACK_MODEL}")
    except litellm.AuthenticationError:
        logger.warning(f"{primary} auth error — falling back to {config.LLM_FALLBACK_MODEL}")
    except Exception as e:
        logger.warning(f"{primary} error ({type(e).__name__}: {e}) — falling back to {config.LLM_FALLBACK_MODEL}")

    try:
        fallback_kwargs = {k: v for k, v in kwargs.items() if k != "response_format"}
        if json_mode:
            fallback_kwargs["messages"] = [
                {"role": "system", "content": "You must respond with valid JSON only."}
            ] + list(fallback_kwargs["messages"])
        response = await litellm.acompletion(model=config.LLM_FALLBACK_MODEL, **fallback_kwargs)
        return response.choices[0].message.content or ""
    except Exception as e:
        logger.error(f"Both LLMs failed. Fallback error: {e}")
        raise AssistantError(f"All LLM providers failed. Last error: {e}") from e


def extract_json(text: Optional[str]):
    """First JSON object/array in a reply, tolerating code fences and prose. None if absent or malformed."""
    if not text:
        return None
    cleaned = re.sub(r"```(?:json)?", "", text).strip()
    try:
        return json.loads(cleaned)
    except ValueError:
        pass
    m = re.search(r"(\[.*\]|\{.*\})", cleaned, re.DOTALL)
    if not m:
        return None
    try:
        return json.loads(m.group(1))
    except ValueError:
        return None


def _user_content(text: str, image: Optional[str] = None):
    if not image:
        return text
    return [
        {"type": "text", "text": text},
        {"type": "image_url", "image_url": {"url": image}},
    ]


class AssistantClient:
    """
    The external design assistant. ``ask``, ``verify`` and
    ``generate_fabrication_brief`` raise ``AssistantError`` when every
    provider failed; the lookup and generation helpers return None instead.
    """

    def __init__(self, catalog: Optional[Catalog] = None, parser: Optional[CommandParser] = None):
        self.catalog = catalog or Catalog()
        self.parser = parser or CommandParser()
        self._system_instruction = prompts.architect_instruction(self.catalog.search(""))

    async def ask(self, prompt: str, history: List[ChatMessage], image: Optional[str] = None) -> str:
        messages = [{"role": "system", "content": self._system_instruction}]
        messages += [{"role": m.role, "content": m.content} for m in history if not m.is_error]
        messages.append({"role": "user", "content": _user_content(prompt, image)})
        reply = await complete(messages, temperature=config.CHAT_TEMPERATURE)
        return reply or config.FALLBACK_REASONING

    async def find_sources(self, query: str) -> Optional[List[ShoppingOption]]:
        try:
            reply = await complete([{"role": "user", "content": prompts.sourcing_prompt(query)}])
        except AssistantError as e:
            logger.warning(f"Sourcing lookup failed for {query!r}: {e}")
            return None
        data = extract_json(reply)
        if isinstance(data, dict):
            data = data.get("results") or data.get("items") or []
        if not isinstance(data, list):
            return None
        options = []
        for item in data:
            if not isinstance(item, dict):
                continue
            try:
                options.append(ShoppingOption(
                    title=str(item.get("title") or ""),
                    url=str(item.get("url") or ""),
                    source=str(item.get("source") or ""),
                    price=str(item["price"]) if item.get("price") is not None else None,
                ))
            except ValidationError:
                logger.debug(f"Skipping malformed shopping option: {item!r}")
        return options

    async def find_local_suppliers(self, query: str) -> Optional[List[LocalSupplier]]:
        try:
            reply = await complete([{"role": "user", "content": prompts.local_supplier_prompt(query)}])
        except AssistantError as e:
            logger.warning(f"Local supplier lookup failed for {query!r}: {e}")
            return None
        data = extract_json(reply)
        if not isinstance(data, list):
            return None
        suppliers = []
        for item in data:
            if isinstance(item, dict) and item.get("name"):
                suppliers.append(LocalSupplier(
                    name=str(item["name"]),
                    address=str(item.get("address") or ""),
                    url=str(item.get("url") or ""),
                ))
        return suppliers[:config.MAX_LOCAL_SUPPLIERS]

    async def verify(
        self,
        bom: List[BOMEntry],
        requirements: str,
        previous_audit: Optional[str] = None,
    ) -> ParsedReply:
        prompt = prompts.audit_prompt(bom, requirements, previous_audit)
        reply = await complete(
            [{"role": "user", "content": prompt}],
            model=config.LLM_REASONING_MODEL,
            temperature=config.STRUCTURED_TEMPERATURE,
        )
        return self.parser.parse(reply)

    async def plan_assembly(
        self,
        bom: List[BOMEntry],
        previous_plan: Optional[AssemblyPlan] = None,
    ) -> Optional[AssemblyPlan]:
        try:
            reply = await complete(
                [{"role": "user", "content": prompts.assembly_prompt(bom, previous_plan)}],
                model=config.LLM_REASONING_MODEL,
                json_mode=True,
            )
        except AssistantError as e:
            logger.warning(f"Assembly plan generation failed: {e}")
            return None
        data = extract_json(reply)
        if not isinstance(data, dict):
            logger.warning("Assembly plan reply was not a JSON object")
            return None
        try:
            return AssemblyPlan.model_validate(data)
        except ValidationError as e:
            logger.warning(f"Assembly plan failed validation: {e.error_count()} error(s)")
            return None

    async def _describe_reference(self, image: str) -> Optional[str]:
        try:
            return await complete([{
                "role": "user",
                "content": _user_content("Describe this object's form, materials and colours in two sentences.", image),
            }])
        except AssistantError:
            return None

    async def generate_image(self, description: str, reference_image: Optional[str] = None) -> Optional[str]:
        prompt = prompts.concept_image_prompt(description)
        if reference_image:
            reference = await self._describe_reference(reference_image)
            if reference:
                prompt += f"\nMatch the reference object: {reference}"
        return await self._image(prompt)

    async def _image(self, prompt: str) -> Optional[str]:
        try:
            response = await litellm.aimage_generation(prompt=prompt, model=config.LLM_IMAGE_MODEL, n=1)
        except Exception as e:
            logger.warning(f"Image generation failed ({type(e).__name__}: {e})")
            return None
        data = getattr(response, "data", None) or []
        if not data:
            return None
        first = data[0]
        b64 = getattr(first, "b64_json", None)
        if b64:
            return f"data:image/png;base64,{b64}"
        return getattr(first, "url", None)

    async def generate_fabrication_brief(self, part_name: str, context: str) -> str:
        text_task = complete(
            [{"role": "user", "content": prompts.fabrication_prompt(part_name, context)}],
            model=config.LLM_REASONING_MODEL,
        )
        image_task = self._image(prompts.blueprint_image_prompt(part_name, context))
        markdown, blueprint = await asyncio.gather(text_task, image_task)
        markdown = markdown or "Brief generation failed."
        if blueprint:
            markdown = f"![Technical Blueprint]({blueprint})\n\n{markdown}"
        return markdown
