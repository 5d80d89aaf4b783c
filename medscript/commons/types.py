from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from pydantic import BaseModel

from medscript.parsers.base import Diagnostic
from medscript.parsers.models import Document


class AppCfg(BaseModel):
    name: str = "MedScript"
    log_level: str = "INFO"


class PathsCfg(BaseModel):
    logs_root: Optional[str] = None


class OutputCfg(BaseModel):
    include_extras: bool = False
    show_tokens: bool = False


class Settings(BaseModel):
    app: AppCfg = AppCfg()
    paths: PathsCfg = PathsCfg()
    output: OutputCfg = OutputCfg()

    @classmethod
    def from_dict(cls, data: Optional[Dict[str, Any]]) -> "Settings":
        return cls.model_validate(data or {})


@dataclass
class CompileResult:
    """Everything one translation produces; diagnostics are syntax first, then semantic."""

    document: Document
    syntax: List[Diagnostic] = field(default_factory=list)
    semantic: List[Diagnostic] = field(default_factory=list)
    json_text: str = ""

    @property
    def diagnostics(self) -> List[Diagnostic]:
        return [*self.syntax, *self.semantic]

    @property
    def errors(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if d.is_error]

    @property
    def warnings(self) -> List[Diagnostic]:
        return [d for d in self.diagnostics if not d.is_error]
