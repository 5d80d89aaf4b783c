from pathlib import Path
from typing import Any, List, Union

import yaml

from medscript.commons.logger import logger
from medscript.commons.types import CompileResult, Settings
from medscript.helpers.emitter import JsonEmitter
from medscript.parsers.base import Token
from medscript.parsers.lexer import tokenize
from medscript.parsers.parser import parse
from medscript.validation.validators import SemanticAnalyzer

DEFAULT_SETTINGS = Path(__file__).resolve().parent.parent / "configs" / "settings.yaml"


def load_settings(config_path_or_obj: Any = None) -> Settings:
    """Settings from a YAML path, an already-loaded dict, a Settings, or defaults."""
    if isinstance(config_path_or_obj, Settings):
        return config_path_or_obj
    if isinstance(config_path_or_obj, (str, Path)):
        with open(config_path_or_obj, "r", encoding="utf-8") as f:
            return Settings.from_dict(yaml.safe_load(f))
    if isinstance(config_path_or_obj, dict):
        return Settings.from_dict(config_path_or_obj)
    return Settings()


class MedScriptEngine:
    """Facade over the pipeline: text -> tokens -> Document -> diagnostics -> JSON.

    One engine may compile any number of documents; every call builds its own
    lexer, parser and Document.
    """

    def __init__(self, config_path_or_obj: Any = None):
        self.settings = load_settings(config_path_or_obj)
        self.analyzer = SemanticAnalyzer()
        self.emitter = JsonEmitter(include_extras=self.settings.output.include_extras)

    def tokens(self, text: str) -> List[Token]:
        return list(tokenize(text))

    def compile(self, text: str) -> CompileResult:
        parsed = parse(tokenize(text))
        semantic = self.analyzer.analyze(parsed.document)
        result = CompileResult(
            document=parsed.document,
            syntax=parsed.diagnostics,
            semantic=semantic,
            json_text=self.emitter.to_json(parsed.document),
        )
        logger.info(
            f"Compiled {len(result.document.medications)} medication(s): "
            f"{len(result.errors)} error(s), {len(result.warnings)} warning(s)"
        )
        return result

    def to_json(self, text: str) -> str:
        return self.compile(text).json_text


def compile_text(text: str, settings: Union[Settings, dict, str, None] = None) -> CompileResult:
    return MedScriptEngine(settings).compile(text)
