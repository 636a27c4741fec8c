"""festivalscope configuration: upstream gateway, paging and logging settings."""

from pydantic import model_validator
from pydantic_settings import BaseSettings


class Settings(BaseSettings):
    # Festival gateway (TourAPI proxy)
    festival_api_url: str = "http://localhost:8080/api"
    festival_list_lang: str = "kor"
    festival_detail_lang: str = "eng"
    festival_page_size: int = 12
    festival_event_start_date: str = "20240701"
    http_timeout: float = 15.0

    @model_validator(mode="after")
    def _normalize_api_url(self) -> "Settings":
        """Strip whitespace, trailing slashes and a '/v1' suffix.

        The gateway's versioned base URL is often pasted in, but festival
        endpoints are served from the unversioned '/api' root.
        """
        url = self.festival_api_url.strip().rstrip("/")
        if url.endswith("/v1"):
            url = url[: -len("/v1")]
        self.festival_api_url = url
        return self

    # Browser behaviour
    detail_concurrency: int = 0  # 0 = unbounded
    featured_count: int = 5
    delegate_region_upstream: bool = False

    # MLflow
    mlflow_tracking_uri: str = "sqlite:///mlruns/mlflow.db"
    mlflow_experiment_name: str = "festivalscope"

    # Logging
    log_json: bool = False
    log_level: str = "INFO"

    model_config = {"env_file": ".env", "extra": "ignore"}


settings = Settings()
