"""
Configuration management using Pydantic models loaded from YAML.
"""

from datetime import time
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, field_validator, model_validator

from .domain.models import Professional, ScheduleConstraints, parse_time_of_day


class DefaultsConfig(BaseModel):
    """Default settings for availability lookups."""
    service_duration_minutes: int = 30
    slot_step_minutes: Optional[int] = None  # None: step equals service duration

    @field_validator("service_duration_minutes")
    @classmethod
    def validate_duration(cls, value: int) -> int:
        """Ensure service duration is positive."""
        if value <= 0:
            raise ValueError("service_duration_minutes must be greater than zero")
        return value

    @field_validator("slot_step_minutes")
    @classmethod
    def validate_step(cls, value: Optional[int]) -> Optional[int]:
        """Ensure a configured step is positive."""
        if value is not None and value <= 0:
            raise ValueError("slot_step_minutes must be greater than zero")
        return value


class ProfessionalConfig(BaseModel):
    """Professional and their working calendar."""
    id: int
    name: str
    work_start_time: Optional[time] = None
    work_end_time: Optional[time] = None
    lunch_start_time: Optional[time] = None
    lunch_end_time: Optional[time] = None

    @field_validator(
        "work_start_time",
        "work_end_time",
        "lunch_start_time",
        "lunch_end_time",
        mode="before",
    )
    @classmethod
    def parse_time(cls, value):
        """Accept ``HH:MM`` strings as written in YAML."""
        # YAML 1.1 reads an unquoted 12:30 as the base-60 integer 750
        if isinstance(value, int) and not isinstance(value, bool) and 0 <= value < 24 * 60:
            return time(hour=value // 60, minute=value % 60)
        return parse_time_of_day(value)

    @model_validator(mode="after")
    def validate_hours_order(self) -> "ProfessionalConfig":
        """Ensure working hours and lunch break are consistent."""
        work_start, work_end = self.work_start_time, self.work_end_time
        lunch_start, lunch_end = self.lunch_start_time, self.lunch_end_time

        if work_start is not None and work_end is not None and work_end <= work_start:
            raise ValueError(f"{self.name}: work_end_time must be later than work_start_time")
        if lunch_start is not None and lunch_end is not None:
            if lunch_end <= lunch_start:
                raise ValueError(f"{self.name}: lunch_end_time must be later than lunch_start_time")
            if work_start is not None and work_end is not None:
                if lunch_start < work_start or lunch_end > work_end:
                    raise ValueError(f"{self.name}: lunch break must lie within working hours")
        return self

    def to_professional(self) -> Professional:
        """Convert to the domain model."""
        return Professional(
            id=self.id,
            name=self.name,
            schedule=ScheduleConstraints(
                work_start=self.work_start_time,
                work_end=self.work_end_time,
                lunch_start=self.lunch_start_time,
                lunch_end=self.lunch_end_time,
            ),
        )


class AppConfig(BaseModel):
    """Application configuration."""
    api_base_url: str = "http://localhost:3000"
    api_token: Optional[str] = None
    request_timeout_seconds: float = 30
    timezone: str = "America/Sao_Paulo"
    defaults: DefaultsConfig = Field(default_factory=DefaultsConfig)
    professionals: List[ProfessionalConfig] = Field(default_factory=list)

    @field_validator("request_timeout_seconds")
    @classmethod
    def validate_timeout(cls, value: float) -> float:
        if value <= 0:
            raise ValueError("request_timeout_seconds must be greater than zero")
        return value

    @field_validator("professionals")
    @classmethod
    def validate_professionals(cls, value: List[ProfessionalConfig]) -> List[ProfessionalConfig]:
        """Ensure professional ids and names are unique."""
        seen_ids: set[int] = set()
        seen_names: set[str] = set()
        for professional in value:
            name_key = professional.name.lower()
            if professional.id in seen_ids:
                raise ValueError(f"Duplicate professional id detected: {professional.id}")
            if name_key in seen_names:
                raise ValueError(f"Duplicate professional name detected: {professional.name}")
            seen_ids.add(professional.id)
            seen_names.add(name_key)
        return value

    @classmethod
    def load_from_yaml(cls, config_path: Path) -> "AppConfig":
        """
        Load configuration from YAML file.

        Args:
            config_path: Path to the YAML config file

        Returns:
            AppConfig instance

        Raises:
            FileNotFoundError: If config file doesn't exist
            ValueError: If config is invalid
        """
        if not config_path.exists():
            raise FileNotFoundError(
                f"Config file not found: {config_path}\n"
                f"Please create a config.yaml file. See config.example.yaml for reference."
            )

        try:
            with open(config_path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except yaml.YAMLError as exc:
            raise ValueError(f"Invalid YAML in {config_path}: {exc}") from exc

        if not isinstance(data, dict):
            raise ValueError("Config file must contain a mapping at the root level.")

        return cls(**data)

    def find_professional(self, identifier: str) -> ProfessionalConfig | None:
        """Find a professional by id or by name (case insensitive)."""
        identifier = identifier.strip()
        for professional in self.professionals:
            if identifier.isdigit() and professional.id == int(identifier):
                return professional
            if professional.name.lower() == identifier.lower():
                return professional
        return None

    def resolve_professional(self, identifier: str) -> Professional:
        """
        Resolve a professional identifier (id or name) to the domain model.

        Raises:
            ValueError: If identifier cannot be resolved
        """
        professional = self.find_professional(identifier)
        if professional is None:
            raise ValueError(
                f"Unknown professional: '{identifier}'. "
                f"Use a configured name or id."
            )
        return professional.to_professional()


def get_default_config_path() -> Path:
    """Get the default configuration file path."""
    # Look for config.yaml in current directory
    current_dir = Path.cwd()
    config_path = current_dir / "config.yaml"

    if not config_path.exists():
        # Try in the project root (parent of the package)
        project_root = Path(__file__).parent.parent
        config_path = project_root / "config.yaml"

    return config_path
