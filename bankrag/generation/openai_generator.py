"""OpenAI chat completions generator."""

from openai import OpenAI, OpenAIError

from bankrag.config import config
from bankrag.exceptions import GenerationError
from bankrag.generation.base import Generator, error_answer

logger = config.get_logger(__name__)


class OpenAIGenerator(Generator):
    """Generates answers with the OpenAI Chat Completions API."""

    provider = "openai"

    def __init__(
        self,
        api_key: str | None = None,
        model: str | None = None,
        temperature: float | None = None,
        max_tokens: int | None = None,
        timeout: float | None = None,
    ) -> None:
        """Initialize the OpenAI client.

        Args:
            api_key: OpenAI API key. If None, reads OPENAI_API_KEY.
            model: Chat model name. If None, uses config.OPENAI_CHAT_MODEL.
            temperature: Sampling temperature. If None, uses config.LLM_TEMPERATURE.
            max_tokens: Completion limit. If None, uses config.LLM_MAX_TOKENS.
            timeout: Request timeout in seconds. If None, uses
                config.REQUEST_TIMEOUT.
        """
        self.client = OpenAI(
            api_key=api_key or config.get_openai_api_key(),
            base_url=config.OPENAI_BASE_URL,
            timeout=timeout if timeout is not None else config.REQUEST_TIMEOUT,
        )
        self.model = model or config.OPENAI_CHAT_MODEL
        self.temperature = (
            temperature if temperature is not None else config.LLM_TEMPERATURE
        )
        self.max_tokens = max_tokens or config.LLM_MAX_TOKENS

    def close(self) -> None:
        self.client.close()

    def generate(self, system_prompt: str, user_query: str, context: str) -> str:
        """Ask the chat model to answer the query from the context.

        Returns:
            The model's answer, or an error-marked string on failure.
        """
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system_prompt},
                    {
                        "role": "user",
                        "content": f"Context:\n{context}\n\nQuestion: {user_query}",
                    },
                ],
                temperature=self.temperature,
                max_tokens=self.max_tokens,
            )
            if not response.choices:
                msg = "Empty response from OpenAI"
                raise GenerationError(msg)
            answer = response.choices[0].message.content
            if not answer:
                msg = "Empty response from OpenAI"
                raise GenerationError(msg)
        except (OpenAIError, GenerationError) as exc:
            logger.exception("OpenAI generation failed")
            return error_answer(str(exc))
        else:
            return answer.strip()
