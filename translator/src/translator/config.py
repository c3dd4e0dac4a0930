from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    model_config = {"env_prefix": "", "env_file": ".env", "env_file_encoding": "utf-8"}

    # Telegram
    telegram_bot_token: str
    admin_user_id: int | None = None

    # Webhook
    webhook_url: str = ""                            # empty -> long polling
    webhook_secret: str = ""
    host: str = "0.0.0.0"
    port: int = 3000

    # Logging
    log_level: str = "warning"
    log_json: bool = True

    # Whitelist
    whitelist_path: str = "whitelist.json"

    # DeepL
    deepl_auth_key: str = ""
    deepl_api_url: str = "https://api-free.deepl.com/v2/translate"

    # LLM
    openai_api_key: str = ""
    llm_model: str = "gpt-3.5-turbo"
    llm_temperature: float = 0.2
    llm_api_base: str | None = None
    llm_timeout: float = 60.0                        # seconds
    use_context: bool = False                        # feed reply-target text to the LLM
