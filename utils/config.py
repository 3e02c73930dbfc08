from __future__ import annotations
import dataclasses
from typing import Dict

@dataclasses.dataclass
class LLM:
    model: str = "gpt-4o"
    temperature: float = 0.3
    max_tokens: int | None = None

@dataclasses.dataclass
class Agent:
    max_iterations: int = 4
    tool_timeout: float = 15.0
    start_url: str = "https://example.com"

@dataclasses.dataclass
class LoggingRotation:
    enabled: bool = True
    max_bytes: int = 10_000_000
    backup_count: int = 5

@dataclasses.dataclass
class LoggingFile:
    enabled: bool = False
    level: str = "DEBUG"
    path: str = "logs/page_agent.log"
    rotation: LoggingRotation = dataclasses.field(default_factory=LoggingRotation)

@dataclasses.dataclass
class Logging:
    level: str = "INFO"
    file: LoggingFile = dataclasses.field(default_factory=LoggingFile)
    libraries: Dict[str, str] = dataclasses.field(default_factory=dict)

@dataclasses.dataclass
class Config:
    llm: LLM = dataclasses.field(default_factory=LLM)
    agent: Agent = dataclasses.field(default_factory=Agent)
    logging: Logging = dataclasses.field(default_factory=Logging)
