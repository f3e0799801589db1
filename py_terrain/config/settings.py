from pathlib import Path
from dotenv import dotenv_values
from pydantic import Field
from pydantic_settings import BaseSettings

import os

# Load .env for local runs only where values are missing from the environment
BASE_DIR = Path(__file__).resolve().parent.parent.parent
env_file = BASE_DIR / ".env"

if env_file.exists():
    file_env = dotenv_values(env_file)
    missing_keys = {k: v for k, v in file_env.items() if k not in os.environ and v is not None}
    for k, v in missing_keys.items():
        os.environ[k] = v


class Settings(BaseSettings):
    """Generation settings pulled from environment variables."""

    # Logging Configuration
    log_level: str = Field(default="INFO", description="Logging level")
    log_format: str = Field(default="json", description="Logging format (console or json)")

    # Map Generation Configuration
    default_map_width: int = Field(default=1200, description="Default map width")
    default_map_height: int = Field(default=1000, description="Default map height")
    default_cells_desired: int = Field(default=10000, description="Default number of grid cells")
    max_map_width: int = Field(default=4000, description="Max allowed map width")
    max_map_height: int = Field(default=4000, description="Max allowed map height")
    max_cells_desired: int = Field(default=100000, description="Max allowed number of grid cells")

    # Hydrology Configuration
    max_depression_iterations: int = Field(default=250, gt=0, description="Depression resolution iteration bound")
    lake_elevation_limit: float = Field(default=20, description="Max depth of lakes in deep depressions")
    min_river_flux: float = Field(default=30, description="Flux needed to form a river")

    class Config:
        env_file = ".env"
        env_file_encoding = "utf-8"
        extra = "ignore"


# Instantiate singleton settings object
settings = Settings()
