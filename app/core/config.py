import os
from pathlib import Path
from dotenv import load_dotenv

# Load environment variables
DOTENV_PATH = (Path(__file__).resolve().parent.parent.parent / ".env")
load_dotenv(dotenv_path=DOTENV_PATH, override=False)


def _env(name: str, default: str = "") -> str:
    return os.getenv(name, default).strip()


def _pem(name: str) -> str:
    # Secrets stores often flatten PEM newlines into literal "\n"
    return _env(name).replace("\\n", "\n")


class Settings:
    """
    Process-wide, read-only gateway configuration.
    Read from the environment when instantiated.
    """

    def __init__(self):
        # Completion service (Azure OpenAI)
        self.AZURE_OPENAI_ENDPOINT: str = _env("AZURE_OPENAI_ENDPOINT").rstrip("/")
        self.AZURE_OPENAI_API_KEY: str = _env("AZURE_OPENAI_API_KEY")
        self.AZURE_OPENAI_DEPLOYMENT_NAME: str = _env("AZURE_OPENAI_DEPLOYMENT_NAME", "gpt-4o")
        self.AZURE_OPENAI_API_VERSION: str = _env("AZURE_OPENAI_API_VERSION", "2024-02-01")
        self.LLM_TIMEOUT_SECONDS: float = float(_env("LLM_TIMEOUT_SECONDS", "30"))
        self.LLM_MAX_ATTEMPTS: int = int(_env("LLM_MAX_ATTEMPTS", "3"))

        # Warehouse (Snowflake)
        self.SNOWFLAKE_ACCOUNT: str = _env("SNOWFLAKE_ACCOUNT")
        self.SNOWFLAKE_USER: str = _env("SNOWFLAKE_USER")
        self.SNOWFLAKE_PRIVATE_KEY: str = _pem("SNOWFLAKE_PRIVATE_KEY")
        self.SNOWFLAKE_PUBLIC_KEY: str = _pem("SNOWFLAKE_PUBLIC_KEY")
        self.SNOWFLAKE_PASSWORD: str = _env("SNOWFLAKE_PASSWORD")
        self.SNOWFLAKE_WAREHOUSE: str = _env("SNOWFLAKE_WAREHOUSE", "COMPUTE_WH")
        self.SNOWFLAKE_DATABASE: str = _env("SNOWFLAKE_DATABASE", "FINANCIAL_DEMO")
        self.SNOWFLAKE_SCHEMA: str = _env("SNOWFLAKE_SCHEMA", "PUBLIC")
        self.SNOWFLAKE_ROLE: str = _env("SNOWFLAKE_ROLE")
        self.SNOWFLAKE_HOST: str = _env("SNOWFLAKE_HOST").rstrip("/")
        self.SNOWFLAKE_POLL_INTERVAL_SECONDS: float = float(_env("SNOWFLAKE_POLL_INTERVAL_SECONDS", "1.0"))
        self.SNOWFLAKE_POLL_MAX_ATTEMPTS: int = int(_env("SNOWFLAKE_POLL_MAX_ATTEMPTS", "30"))
        self.SNOWFLAKE_STATEMENT_TIMEOUT: int = int(_env("SNOWFLAKE_STATEMENT_TIMEOUT", "60"))

        # Query policy
        self.DEFAULT_ROW_LIMIT: int = int(_env("DEFAULT_ROW_LIMIT", "100"))

        # App Configuration
        self.APP_TITLE: str = "NL→Warehouse Query Gateway"
        self.LOG_LEVEL: str = _env("LOG_LEVEL", "INFO").upper()
        self.CORS_ALLOW_ORIGIN: str = _env("CORS_ALLOW_ORIGIN", "*")

    @property
    def has_completion_service(self) -> bool:
        return bool(self.AZURE_OPENAI_ENDPOINT and self.AZURE_OPENAI_API_KEY)

    @property
    def has_keypair_auth(self) -> bool:
        return bool(self.SNOWFLAKE_ACCOUNT and self.SNOWFLAKE_USER and self.SNOWFLAKE_PRIVATE_KEY)

    @property
    def has_password_auth(self) -> bool:
        return bool(self.SNOWFLAKE_ACCOUNT and self.SNOWFLAKE_USER and self.SNOWFLAKE_PASSWORD)

    @property
    def snowflake_base_url(self) -> str:
        if self.SNOWFLAKE_HOST:
            return self.SNOWFLAKE_HOST
        return f"https://{self.SNOWFLAKE_ACCOUNT}.snowflakecomputing.com"

    def __repr__(self) -> str:
        return (
            f"Settings(completion_service={self.has_completion_service}, "
            f"keypair_auth={self.has_keypair_auth}, password_auth={self.has_password_auth})"
        )


settings = Settings()
