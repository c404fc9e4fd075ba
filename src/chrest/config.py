"""
Model configuration.

Parameters default to the classic CHREST values. They can be overridden in
code or read from the environment (optionally via a .env file).
"""

import os
from dataclasses import dataclass, fields, replace
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

from chrest.exceptions import ConfigurationError


@dataclass
class ChrestConfig:
    """
    Tunable parameters of a Chrest model.

    Attributes:
        add_link_time: Time to create an action link (ms)
        discrimination_time: Time to create a new node (ms)
        familiarisation_time: Time to extend an image by one item (ms)
        rho: Probability that a permitted learning step takes place
        visual_stm_size: Capacity of visual STM
        verbal_stm_size: Capacity of verbal STM
        action_stm_size: Capacity of action STM
        field_of_view: Squares visible either side of a fixation
        random_seed: Optional seed for reproducibility
    """

    add_link_time: int = 10000
    discrimination_time: int = 10000
    familiarisation_time: int = 2000
    rho: float = 1.0
    visual_stm_size: int = 4
    verbal_stm_size: int = 2
    action_stm_size: int = 4
    field_of_view: int = 2
    random_seed: Optional[int] = None

    def validate(self) -> "ChrestConfig":
        """
        Check parameter ranges.

        Returns:
            ChrestConfig: self, for chaining

        Raises:
            ConfigurationError: If any parameter is out of range
        """
        for name in ("add_link_time", "discrimination_time", "familiarisation_time"):
            if getattr(self, name) < 0:
                raise ConfigurationError(f"{name} must be non-negative, got {getattr(self, name)}")
        for name in ("visual_stm_size", "verbal_stm_size", "action_stm_size"):
            if getattr(self, name) < 1:
                raise ConfigurationError(f"{name} must be at least 1, got {getattr(self, name)}")
        if not 0.0 <= self.rho <= 1.0:
            raise ConfigurationError(f"rho must lie in [0, 1], got {self.rho}")
        if self.field_of_view < 0:
            raise ConfigurationError(f"field_of_view must be non-negative, got {self.field_of_view}")
        return self

    def with_overrides(self, **overrides) -> "ChrestConfig":
        return replace(self, **overrides).validate()

    @classmethod
    def from_env(cls, dotenv_path: Optional[Union[str, Path]] = None,
                 prefix: str = "CHREST_") -> "ChrestConfig":
        """
        Build a configuration from environment variables.

        Each field is read from PREFIX + FIELD_NAME (upper case), e.g.
        CHREST_DISCRIMINATION_TIME. Unset variables keep their default.

        Args:
            dotenv_path: Optional .env file to load first
            prefix: Environment variable prefix

        Returns:
            ChrestConfig: Validated configuration
        """
        load_dotenv(dotenv_path=dotenv_path)

        values = {}
        for f in fields(cls):
            raw = os.getenv(prefix + f.name.upper())
            if raw is None or raw == "":
                continue
            if f.name == "rho":
                values[f.name] = float(raw)
            elif f.name == "random_seed":
                values[f.name] = None if raw.lower() == "none" else int(raw)
            else:
                values[f.name] = int(raw)

        return cls(**values).validate()
