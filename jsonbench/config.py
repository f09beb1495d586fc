"""
Configuration settings for the JSON storage benchmark.

Uses Pydantic Settings to load environment variables for database connections,
logging, and the benchmark run parameters (fixture directory, insertion passes,
timed iterations). Settings are read once at startup and treated as immutable.
"""
from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import Literal, Optional

from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    # Database
    db_host: str = Field("localhost", alias="DB_HOST")
    db_port: int = Field(5432, alias="DB_PORT")
    db_user: str = Field("postgres", alias="DB_USER")
    db_password: str = Field("postgres", alias="DB_PASSWORD")
    db_name: str = Field("postgres", alias="DB_NAME")
    db_schema: str = Field("public", alias="DB_SCHEMA")
    db_pool_min_size: int = Field(1, ge=1, alias="DB_POOL_MIN_SIZE")
    db_pool_max_size: int = Field(4, ge=1, alias="DB_POOL_MAX_SIZE")

    # Application
    log_level: str = Field("INFO", alias="LOG_LEVEL")
    json_logs: bool = Field(False, alias="JSON_LOGS")

    # Benchmark run parameters
    data_dir: Path = Field(Path("data"), alias="DATA_DIR")
    data_insert_loop_count: int = Field(10, gt=0, alias="DATA_INSERT_LOOP_COUNT")
    test_iteration_count: int = Field(100, gt=0, alias="TEST_ITERATION_COUNT")
    startup_delay_seconds: float = Field(10.0, ge=0, alias="STARTUP_DELAY_SECONDS")
    partial_write_sentinel: str = Field("__jsonbench_sentinel__", alias="PARTIAL_WRITE_SENTINEL")
    max_sampling_attempts: int = Field(10, gt=0, alias="MAX_SAMPLING_ATTEMPTS")
    random_seed: Optional[int] = Field(None, alias="RANDOM_SEED")
    failure_policy: Literal["strict", "tolerant"] = Field("strict", alias="FAILURE_POLICY")
    benchmark_backend: str = Field("postgres", alias="BENCHMARK_BACKEND")

    # Output
    results_dir: Path = Field(Path("results"), alias="RESULTS_DIR")
    persist_results: bool = Field(True, alias="PERSIST_RESULTS")

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Retrieve a cached instance of Settings to avoid repeated env parsing.
    """
    return Settings()


__all__ = ["Settings", "get_settings"]
