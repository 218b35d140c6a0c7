"""
Reference planning loop over an OpenAI-compatible chat-completions API.

The planner is an external collaborator: anything with an async
``run(task, registry) -> str`` can replace it. This implementation sends the
registry's tool schemas to the model, executes the tool calls it gets back
through the registry, and stops when the model answers without tool calls.
"""

import asyncio
import json
import logging
import time
from typing import Any, Dict, List, Optional, Protocol

import aiohttp

from webpilot.config import PlannerConfig
from webpilot.exceptions import PlannerError
from webpilot.registry import ToolRegistry

logger = logging.getLogger(__name__)

RETRYABLE_STATUS_CODES = (408, 429, 500, 502, 503, 504, 529)

DEFAULT_INSTRUCTIONS = """
You are an expert web automation agent that performs precise website interactions.

IMPORTANT: Use fill_form_fields to fill all form fields in one operation to minimize API calls.

CORE WORKFLOW:
1. OPEN_BROWSER -> OPEN_URL -> ANALYZE -> ACT -> VERIFY -> CONTINUE
2. Always start with open_browser, then open_url to the target website, then take_screenshot
3. After navigation, take a single screenshot to analyze the page
4. Use fill_form_fields to fill multiple fields at once
5. After filling the form take a screenshot, click the action button, then call close_browser
6. Only take additional screenshots when absolutely necessary for verification
7. Close the browser when the task is completed or has failed

ACTION PRINCIPLES:
- Use find_and_click for buttons and interactive elements
- Use fill_form_fields for all form inputs in one go when possible
- Scroll only when needed to reveal hidden elements
- Tool results are plain text; read them to decide the next step
""".strip()


class Planner(Protocol):
    """Anything that can drive the tools to complete a task."""

    async def run(self, task: str, registry: ToolRegistry) -> str:
        ...


class ChatCompletionsPlanner:
    """Tool-calling loop against an OpenAI-compatible /chat/completions endpoint."""

    def __init__(
        self,
        config: Optional[PlannerConfig] = None,
        instructions: str = DEFAULT_INSTRUCTIONS,
    ) -> None:
        """
        Args:
            config: Model, endpoint and loop limits. Defaults to PlannerConfig.from_env().
            instructions: System prompt sent before the task.
        """
        self.config = config or PlannerConfig.from_env()
        self.instructions = instructions
        self._session = None

    def get_headers(self) -> Dict[str, str]:
        if not self.config.api_key:
            raise PlannerError(
                "No API key configured. Set GOOGLE_API_KEY (or OPENAI_API_KEY).",
                provider=self.config.base_url,
            )
        return {
            "Authorization": f"Bearer {self.config.api_key}",
            "Content-Type": "application/json",
        }

    def get_endpoint_url(self) -> str:
        return self.config.base_url.rstrip("/") + "/chat/completions"

    def format_request_payload(self, messages: List[Dict[str, Any]], tools: List[Dict[str, Any]]) -> Dict[str, Any]:
        payload: Dict[str, Any] = {
            "model": self.config.model,
            "messages": messages,
            "temperature": self.config.temperature,
        }
        if tools:
            payload["tools"] = tools
            payload["tool_choice"] = "auto"
        return payload

    async def _ensure_session(self):
        """Create the aiohttp session on first use."""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession()
        return self._session

    async def _complete(self, messages: List[Dict[str, Any]], tools: List[Dict[str, Any]]) -> Dict[str, Any]:
        """
        Send one chat-completions request, retrying transient failures.

        Retries 408/429/5xx responses and connection errors with exponential
        backoff; anything else raises PlannerError immediately.
        """
        headers = self.get_headers()
        payload = self.format_request_payload(messages, tools)
        url = self.get_endpoint_url()
        max_retries = self.config.max_retries
        base_delay = 1.0

        for attempt in range(max_retries + 1):
            session = await self._ensure_session()
            try:
                async with session.post(
                    url,
                    headers=headers,
                    json=payload,
                    timeout=aiohttp.ClientTimeout(total=self.config.request_timeout),
                ) as response:
                    if response.status in RETRYABLE_STATUS_CODES and attempt < max_retries:
                        delay = base_delay * (2 ** attempt)
                        logger.warning(
                            f"Status {response.status} from {self.config.model}. "
                            f"Retry {attempt + 1}/{max_retries} after {delay:.1f}s"
                        )
                        await asyncio.sleep(delay)
                        continue

                    if response.status >= 400:
                        body = await response.text()
                        raise PlannerError(
                            f"Chat completion request failed with status {response.status}: {body[:500]}",
                            status_code=response.status,
                            provider=url,
                        )
                    return await response.json()
            except (aiohttp.ClientError, asyncio.TimeoutError) as e:
                if attempt < max_retries:
                    delay = base_delay * (2 ** attempt)
                    logger.warning(f"Network error: {e}. Retry {attempt + 1}/{max_retries} after {delay:.1f}s")
                    await asyncio.sleep(delay)
                    continue
                raise PlannerError(f"Chat completion request failed: {e}", provider=url) from e

        raise PlannerError(f"Chat completion request failed after {max_retries} retries", provider=url)

    async def run(self, task: str, registry: ToolRegistry) -> str:
        """
        Drive the tools until the model produces a final answer.

        Args:
            task: Natural-language instruction.
            registry: Tools available to the model.

        Returns:
            The model's final text answer.

        Raises:
            PlannerError: On API failures, malformed replies or when max_steps is exhausted.
        """
        messages: List[Dict[str, Any]] = [
            {"role": "system", "content": self.instructions},
            {"role": "user", "content": task},
        ]
        tools = registry.schemas()

        for step in range(1, self.config.max_steps + 1):
            step_start = time.time()
            response = await self._complete(messages, tools)
            try:
                message = response["choices"][0]["message"]
            except (KeyError, IndexError, TypeError) as e:
                raise PlannerError(
                    f"Malformed chat completion response: {json.dumps(response)[:300]}",
                    provider=self.config.base_url,
                ) from e

            content = message.get("content") or ""
            tool_calls = message.get("tool_calls") or []

            assistant_message: Dict[str, Any] = {"role": "assistant", "content": content}
            if tool_calls:
                assistant_message["tool_calls"] = tool_calls
            messages.append(assistant_message)

            if not tool_calls:
                logger.info(f"Planner finished after {step} step(s)")
                return content

            for index, call in enumerate(tool_calls):
                function = call.get("function") or {}
                name = function.get("name", "")
                result = await registry.call(name, function.get("arguments"))
                messages.append({
                    "role": "tool",
                    "tool_call_id": call.get("id") or f"call_{step}_{index}",
                    "content": result.to_content(),
                })

            logger.debug(f"Step {step} ran {len(tool_calls)} tool call(s) in {time.time() - step_start:.2f}s")

        raise PlannerError(
            f"Max steps ({self.config.max_steps}) reached without a final answer",
            context={"max_steps": self.config.max_steps},
        )

    async def cleanup(self) -> None:
        """Close the aiohttp session."""
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
