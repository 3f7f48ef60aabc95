"""
Settings for the admissions report tool.

Everything is read from environment variables when ``Config`` is created;
``reload_config()`` picks up changes made after import (tests use it).

    from config import get_config

    cfg = get_config()
    cfg.api_url        # API_URL, trailing slash removed
    cfg.program_codes  # PROGRAM_CODES, comma separated
"""

import os
from dataclasses import asdict, dataclass, field


# Canonical program order of the admission campaign
DEFAULT_PROGRAM_CODES = ("ПМ", "ИВТ", "ИТСС", "ИБ")


def _parse_codes(raw: str) -> tuple[str, ...]:
    """Split a comma separated PROGRAM_CODES value, dropping blanks."""
    return tuple(code.strip() for code in raw.split(",") if code.strip())


def _env(name: str, default: str) -> str:
    return os.environ.get(name, default)


def _env_int(name: str, default: int) -> int:
    return int(os.environ.get(name, str(default)))


@dataclass
class Config:
    """Runtime settings; every field has an environment variable override."""

    # Dashboard data API
    api_url: str = "http://localhost:3000"
    api_timeout: int = 30  # seconds per request
    api_page_size: int = 200  # candidates per page when walking the list

    # PDF output
    report_dir: str = "reports"
    font_path: str = "fonts/Roboto-Regular.ttf"  # path or URL of a TTF with Cyrillic
    font_name: str = "Roboto"
    font_timeout: int = 10
    program_codes: tuple = field(default_factory=lambda: DEFAULT_PROGRAM_CODES)

    # Gradio panel
    web_ui_host: str = "127.0.0.1"
    web_ui_port: int = 7860

    log_level: str = "INFO"

    def __post_init__(self):
        self.api_url = _env("API_URL", self.api_url).rstrip("/")
        self.api_timeout = _env_int("API_TIMEOUT", self.api_timeout)
        self.api_page_size = _env_int("API_PAGE_SIZE", self.api_page_size)

        self.report_dir = _env("REPORT_DIR", self.report_dir)
        self.font_path = _env("REPORT_FONT", self.font_path)
        self.font_name = _env("REPORT_FONT_NAME", self.font_name)
        self.font_timeout = _env_int("FONT_TIMEOUT", self.font_timeout)
        self.program_codes = _parse_codes(_env("PROGRAM_CODES", "")) or DEFAULT_PROGRAM_CODES

        self.web_ui_host = _env("WEB_UI_HOST", self.web_ui_host)
        self.web_ui_port = _env_int("WEB_UI_PORT", self.web_ui_port)

        self.log_level = _env("LOG_LEVEL", self.log_level)

    def validate(self) -> list[str]:
        """Problems with the current settings, one message each (empty if none)."""
        problems = []
        if not self.api_url.startswith(("http://", "https://")):
            problems.append(f"API_URL must be an http(s) URL, got {self.api_url!r}")
        if self.api_timeout < 1:
            problems.append(f"API_TIMEOUT must be at least 1 second, got {self.api_timeout}")
        if self.api_page_size < 1:
            problems.append(f"API_PAGE_SIZE must be at least 1, got {self.api_page_size}")
        if len(set(self.program_codes)) != len(self.program_codes):
            problems.append(f"PROGRAM_CODES contains duplicates: {', '.join(self.program_codes)}")
        return problems

    def to_dict(self) -> dict:
        data = asdict(self)
        data["program_codes"] = list(self.program_codes)
        return data


config = Config()


def get_config() -> Config:
    return config


def reload_config() -> Config:
    """Re-read the environment and replace the shared instance."""
    global config
    config = Config()
    return config
