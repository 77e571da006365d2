"""Configuration settings for the Lead Research Agent."""

from pathlib import Path
from typing import Optional

from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    """Application settings loaded from environment variables."""

    # Paths
    base_dir: Path = Path(__file__).parent.parent
    data_dir: Path = base_dir / "data"
    db_path: Path = data_dir / "lead_research.db"
    output_dir: Path = data_dir / "output"
    icp_path: Path = base_dir / "icp.json"
    enrichment_csv_path: Path = data_dir / "enrichment.csv"

    # API Keys
    anthropic_api_key: str = ""

    # LLM Settings
    llm_model: str = "claude-sonnet-4-20250514"
    llm_max_tokens: int = 2048
    llm_timeout: float = 60.0  # seconds, applied by the SDK client

    # Scoring Settings
    min_icp_score: float = 0.3
    enhance_scores: bool = False

    # Worker Settings
    worker_interval_minutes: Optional[int] = None  # None runs once and exits

    # Outreach
    sender_name: str = "Hikru"

    @property
    def database_url(self) -> str:
        return f"sqlite:///{self.db_path}"

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"


settings = Settings()

# Ensure data directory exists
settings.data_dir.mkdir(parents=True, exist_ok=True)
