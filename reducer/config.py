"""
Reduce task settings, read from the environment.
"""

import os
import logging
from dataclasses import dataclass
from enum import Enum


class MissingInputPolicy(Enum):
    """What to do when an intermediate partition file cannot be opened"""
    SKIP = 'skip'
    FAIL = 'fail'


class OutputMode(Enum):
    """How the output artifact is opened"""
    APPEND = 'append'
    TRUNCATE = 'truncate'
    ATOMIC = 'atomic'


def _parse_enum(enum_cls, name: str, raw: str):
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        choices = ', '.join(member.value for member in enum_cls)
        raise ValueError(f"{name} must be one of: {choices} (got {raw!r})") from None


@dataclass
class ReduceSettings:
    intermediate_dir: str = None
    missing_input: MissingInputPolicy = MissingInputPolicy.SKIP
    output_mode: OutputMode = OutputMode.APPEND
    log_level: str = 'INFO'

    @classmethod
    def from_env(cls, environ=None) -> 'ReduceSettings':
        """
        Build settings from environment variables

        Args:
            environ: Mapping to read instead of os.environ

        Returns:
            ReduceSettings with defaults for unset variables

        Raises:
            ValueError: If a policy or mode variable holds an unknown value
        """
        env = os.environ if environ is None else environ
        return cls(
            intermediate_dir=env.get('MAPREDUCE_INTERMEDIATE_DIR') or None,
            missing_input=_parse_enum(MissingInputPolicy, 'MAPREDUCE_MISSING_INPUT',
                                      env.get('MAPREDUCE_MISSING_INPUT', 'skip')),
            output_mode=_parse_enum(OutputMode, 'MAPREDUCE_OUTPUT_MODE',
                                    env.get('MAPREDUCE_OUTPUT_MODE', 'append')),
            log_level=env.get('MAPREDUCE_LOG_LEVEL', 'INFO').upper(),
        )


def setup_logging(level: str = None):
    """Configure root logging for a process that runs reduce tasks."""
    if level is None:
        level = ReduceSettings.from_env().log_level
    logging.basicConfig(
        level=getattr(logging, level.upper(), logging.INFO),
        format='%(asctime)s - %(name)s - %(levelname)s - %(message)s'
    )
