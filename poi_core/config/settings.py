# poi_core/config/settings.py

import logging
import re
from typing import FrozenSet, Optional

import coloredlogs
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# ANSI color codes
RED = "\033[91m"
YELLOW = "\033[93m"
RESET = "\033[0m"

# Epoch keys such as "subnet=3 epoch=42" and lifecycle words get highlighted
EPOCH_KEY_REGEX = re.compile(r"(\bsubnet=\d+ epoch=\d+\b)")
LIFECYCLE_REGEX = re.compile(r"(\b(?:Finalized|Rejected)\b)")


class HighlightFormatter(coloredlogs.ColoredFormatter):
    """Custom formatter to highlight lifecycle words and subnet/epoch keys."""

    def format(self, record):
        formatted_message = super().format(record)
        try:
            formatted_message = LIFECYCLE_REGEX.sub(
                lambda m: f"{RED}{m.group(1)}{RESET}", formatted_message
            )
            formatted_message = EPOCH_KEY_REGEX.sub(
                lambda m: f"{YELLOW}{m.group(1)}{RESET}", formatted_message
            )
        except re.error as format_err:
            # Log the formatting error itself using the root logger to avoid loops
            logging.getLogger().exception(f"Error in HighlightFormatter: {format_err}")
        return formatted_message


def _split_identities(value: str) -> FrozenSet[str]:
    return frozenset(part.strip() for part in value.split(",") if part.strip())


class Settings(BaseSettings):
    """
    Quản lý cấu hình tập trung cho dự án, load từ biến môi trường hoặc file .env.
    Bao gồm các tham số của module đồng thuận, API và logging.
    """

    model_config = SettingsConfigDict(
        extra="ignore",
        env_file=".env",
        env_file_encoding="utf-8",
        env_prefix="POI_",
    )

    LOG_LEVEL: str = Field(
        default="INFO",
        description="Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)",
    )

    # --- API ---
    API_HOST: str = Field(default="127.0.0.1", description="Host for the FastAPI server")
    API_PORT: int = Field(default=8001, description="Port for the FastAPI server")

    # --- Cấu hình Đồng thuận (Consensus) ---
    CONSENSUS_MAX_SUBMISSIONS_PER_EPOCH: Optional[int] = Field(
        default=100,
        ge=1,
        description="Maximum weight submissions accepted per (subnet, epoch). Unset for no cap.",
    )
    CONSENSUS_CLIP_SIGMA: float = Field(
        default=2.0,
        gt=0.0,
        description="Outlier clipping band, in population standard deviations around the mean.",
    )
    CONSENSUS_ALIGNMENT_SCALE: int = Field(
        default=10_000,
        gt=0,
        description="Upper bound of the weight scale; perfect alignment scores this value.",
    )
    CONSENSUS_DEFAULT_STAKE_WEIGHT: int = Field(
        default=1000,
        ge=0,
        description="Stake weight used by the flat stake provider when no stake table is given.",
    )

    # --- Stake weighting (W = direct + numerator/denominator * delegated) ---
    STAKE_DELEGATION_NUMERATOR: int = Field(default=18, ge=0)
    STAKE_DELEGATION_DENOMINATOR: int = Field(default=100, gt=0)

    # --- Collaborator allow-lists (comma separated, empty = unrestricted) ---
    FINALIZER_AUTHORITIES: str = Field(
        default="",
        description="Identities allowed to finalize epochs.",
    )
    GOVERNOR_AUTHORITIES: str = Field(
        default="",
        description="Identities allowed to patch consensus parameters.",
    )

    METRICS_ENABLED: bool = Field(default=True, description="Expose Prometheus metrics")

    @field_validator("LOG_LEVEL", mode="before")
    def validate_log_level(cls, value: Optional[str]):
        if value is None:
            return "INFO"
        normalized = str(value).upper().strip()
        if normalized not in ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]:
            return "INFO"
        return normalized

    @property
    def finalizer_authorities(self) -> FrozenSet[str]:
        return _split_identities(self.FINALIZER_AUTHORITIES)

    @property
    def governor_authorities(self) -> FrozenSet[str]:
        return _split_identities(self.GOVERNOR_AUTHORITIES)


# --- Tạo một instance để sử dụng trong toàn bộ ứng dụng ---
settings = Settings()  # type: ignore

# --- CẤU HÌNH LOGGING (CHỈ MỘT LẦN TẠI ĐÂY) ---
LOG_LEVEL_CONFIG = getattr(logging, settings.LOG_LEVEL, logging.INFO)

DEFAULT_LEVEL_STYLES = {
    "debug": {"color": "green"},
    "info": {"color": "cyan"},
    "warning": {"color": "yellow"},
    "error": {"color": "red"},
    "critical": {"bold": True, "color": "red"},
}
DEFAULT_FIELD_STYLES = {
    "asctime": {"color": "magenta"},
    "levelname": {"bold": True, "color": "blue"},
    "name": {"color": "white"},
}
DEFAULT_FMT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"

highlight_formatter = HighlightFormatter(
    fmt=DEFAULT_FMT,
    level_styles=DEFAULT_LEVEL_STYLES,
    field_styles=DEFAULT_FIELD_STYLES,
)

coloredlogs.install(
    level=LOG_LEVEL_CONFIG,
    formatter=highlight_formatter,
    reconfigure=True,
)

logger = logging.getLogger(__name__)
logger.debug(
    f"Settings loaded. Log level set to {logging.getLevelName(LOG_LEVEL_CONFIG)}."
)
