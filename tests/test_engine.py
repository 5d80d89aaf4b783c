"""
Pipeline scenarios through the MedScriptEngine facade: tokens, syntax
diagnostics, semantic diagnostics and the JSON rendering together.
"""

import json

import pytest
from pydantic import ValidationError

from medscript.commons.engine import MedScriptEngine, compile_text, load_settings
from medscript.parsers.base import Severity, TokenKind

PATIENT = "patient Nimal age 22 weight 58 kg\nallergy penicillin\nrx:\n"

SCENARIO_A = PATIENT + "Tab PCM 500mg po tds 5d after_food\n"
SCENARIO_B = PATIENT + "Cap Amox 250mg po bd 7d\n"
SCENARIO_C = PATIENT + "Oint Hydrocortisone 1% iv bd 5d\n"
SCENARIO_D = PATIENT + "Tab PCM 1500mg po od 5d\n"
SCENARIO_E = PATIENT + "Tab PCM 500 po tds 5d\nCap Amox 250mg po bd 7d\n"


def make_engine(cfg=None):
    return MedScriptEngine(cfg or {})


def test_scenario_a_clean():
    res = make_engine().compile(SCENARIO_A)
    assert res.errors == []
    assert res.diagnostics == []
    med = json.loads(res.json_text)["medications"][0]
    assert med["shortName"] == "PCM"
    assert med["name"] == "Paracetamol"
    assert med["dose"] == "500mg"
    assert med["frequency"] == "three times daily"
    assert med["duration"] == "5 days"
    assert med["food"] == "after food"


def test_scenario_b_allergy_conflict():
    res = make_engine().compile(SCENARIO_B)
    assert res.syntax == []
    assert [d.message for d in res.errors] == [
        "Allergy conflict: patient allergy 'penicillin' conflicts with Amox"
    ]


def test_scenario_c_route_violation():
    res = make_engine().compile(SCENARIO_C)
    assert [d.message for d in res.errors] == ["Invalid route 'iv' for Oint Hydrocortisone"]


def test_scenario_d_dose_limit():
    res = make_engine().compile(SCENARIO_D)
    assert res.errors == []
    assert len(res.warnings) == 1
    assert "1500" in res.warnings[0].message


def test_scenario_e_missing_unit():
    res = make_engine().compile(SCENARIO_E)
    assert [d.message for d in res.syntax] == ["Expected unit after dose number (mg/ml/g/...)"]
    meds = json.loads(res.json_text)["medications"]
    assert [m["dose"] for m in meds] == ["500", "250mg"]
    assert meds[0]["frequency"] == "three times daily"
    # the second medication still reaches semantic analysis
    assert any("conflicts with Amox" in d.message for d in res.semantic)


def test_no_rx_section_still_renders():
    res = compile_text("patient Nimal\nnotes: call back")
    assert any("rx:" in d.message for d in res.errors)
    data = json.loads(res.json_text)
    assert data["medications"] == []
    assert data["notes"] == ["call back"]


def test_syntax_diagnostics_come_before_semantic():
    res = make_engine().compile("hello\nrx: Tab PCM 500mg po tds 5d")
    assert [d.severity for d in res.diagnostics] == [Severity.ERROR, Severity.WARNING]
    assert res.diagnostics[0].message.startswith("Unexpected token")
    assert res.diagnostics[1].message.startswith("Patient name is missing")


def test_tokens_end_with_eof():
    toks = make_engine().tokens(SCENARIO_A)
    assert toks[0].kind is TokenKind.SECTION_PATIENT
    assert toks[-1].kind is TokenKind.EOF


def test_include_extras_from_settings():
    engine = make_engine({"output": {"include_extras": True}})
    med = json.loads(engine.to_json("rx: Tab PCM 500mg po tds 5d urgent"))["medications"][0]
    assert med["extras"] == {"urgent": "true"}


def test_settings_from_yaml(tmp_path):
    cfg = tmp_path / "settings.yaml"
    cfg.write_text("app:\n  log_level: DEBUG\noutput:\n  show_tokens: true\n", encoding="utf-8")
    settings = load_settings(str(cfg))
    assert settings.app.log_level == "DEBUG"
    assert settings.output.show_tokens is True
    assert settings.output.include_extras is False
    assert settings.paths.logs_root is None


def test_default_settings_file_loads():
    from medscript.commons.engine import DEFAULT_SETTINGS

    settings = load_settings(DEFAULT_SETTINGS)
    assert settings.app.name == "MedScript"


def test_invalid_settings_raise():
    with pytest.raises(ValidationError):
        MedScriptEngine({"output": {"include_extras": "maybe"}})


def test_engine_is_reusable_across_documents():
    engine = make_engine()
    first = engine.compile(SCENARIO_A)
    engine.compile(SCENARIO_C)
    assert engine.compile(SCENARIO_A).json_text == first.json_text
