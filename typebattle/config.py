"""
Configuration management
"""
import logging
import os
from pathlib import Path
from typing import Literal, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict

# Load environment variables
load_dotenv()

logger = logging.getLogger(__name__)


def _optional_int(name: str) -> Optional[int]:
    raw = os.getenv(name, "").strip()
    if not raw:
        return None
    return int(raw)


class Settings(BaseModel):
    """Battle engine settings"""

    # World level feeds the drop-rate formula when the caller does not pass one
    world_level: int = int(os.getenv("TYPEBATTLE_WORLD_LEVEL", "1"))

    # Fixed seed for the default random source (None = OS entropy)
    rng_seed: Optional[int] = _optional_int("TYPEBATTLE_RNG_SEED")

    # Skill catalog
    skill_data_path: str = os.getenv(
        "TYPEBATTLE_SKILL_DATA",
        str(Path(__file__).resolve().parent / "data" / "skills.json"),
    )
    basic_attack_skill_id: str = os.getenv("TYPEBATTLE_BASIC_ATTACK", "basic_attack")

    log_level: Literal["DEBUG", "INFO", "WARNING", "ERROR"] = os.getenv(
        "TYPEBATTLE_LOG_LEVEL", "INFO"
    ).upper()

    model_config = ConfigDict(case_sensitive=False)


# Global settings instance
settings = Settings()


def validate_config() -> bool:
    """
    Check that the configuration is usable

    Returns:
        bool: whether the configuration is valid
    """
    if settings.world_level < 0:
        logger.warning("TYPEBATTLE_WORLD_LEVEL must be >= 0, got %s", settings.world_level)
        return False

    if not Path(settings.skill_data_path).exists():
        logger.warning("Skill data file not found: %s", settings.skill_data_path)
        return False

    return True
