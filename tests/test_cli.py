"""
CLI Tests

Commands run through main() with temporary files; the interactive walkthrough
is driven by scripted input.
"""

import io
import json

import pytest

from atg_intake.catalog.models import Questionnaire
from atg_intake.cli import main, run_interactive
from atg_intake.flow.wizard import QuestionnaireWizard, Screen

SCORP_ANSWERS = {"q1-structure": "llc", "q1-accountant": "yes", "q1-revenue": 60000}


def write_json(tmp_path, name, data):
    path = tmp_path / name
    path.write_text(json.dumps(data), encoding="utf-8")
    return str(path)


def make_questionnaire():
    return Questionnaire.model_validate({
        "welcome": {"title": "Welcome", "introduction": ["Hello."]},
        "sections": [
            {"id": "s1", "title": "Basics", "questions": [
                {"id": "a", "text": "Own a business?", "type": "yes-no"},
                {"id": "b", "text": "Revenue", "type": "numeric",
                 "validation": {"min": 0, "required": True},
                 "conditional_on": {"question_id": "a", "value": "yes"}},
            ]},
            {"id": "s2", "title": "Structure", "questions": [
                {"id": "c", "text": "Structure", "type": "single-choice",
                 "options": [{"value": "x", "label": "X"}, {"value": "y", "label": "Y"}]},
            ]},
        ],
        "results": [{
            "id": "r1",
            "title": "Owner strategy",
            "content": "Use **this** strategy.",
            "conditions": [{
                "question_id": "a", "operator": "equals", "value": "yes",
                "sub_conditions": [{"question_id": "b", "operator": "greaterThan", "value": 10}],
            }],
        }],
        "thank_you": {"title": "Thanks"},
    })


def scripted(*answers):
    remaining = iter(answers)
    return lambda prompt: next(remaining)


class TestEvaluateCommand:

    def test_prints_matches(self, tmp_path, capsys):
        path = write_json(tmp_path, "answers.json", SCORP_ANSWERS)
        assert main(["evaluate", path]) == 0
        output = json.loads(capsys.readouterr().out)
        assert [r["id"] for r in output["results"]] == ["result-scorp-55k"]
        assert output["evaluation_hash"].startswith("sha256:")
        assert "trace" not in output

    def test_explain_and_pdf(self, tmp_path, capsys):
        path = write_json(tmp_path, "answers.json", SCORP_ANSWERS)
        pdf_path = tmp_path / "results.pdf"
        assert main(["evaluate", path, "--explain", "--pdf", str(pdf_path)]) == 0
        output = json.loads(capsys.readouterr().out)
        assert len(output["trace"]) == 9
        assert pdf_path.read_bytes().startswith(b"%PDF")

    def test_prune_hidden(self, tmp_path, capsys):
        path = write_json(tmp_path, "answers.json", {"q2-own-home": "no", "q2-documentation": "yes"})
        assert main(["evaluate", path, "--prune-hidden"]) == 0
        output = json.loads(capsys.readouterr().out)
        assert output["pruned_question_ids"] == ["q2-documentation"]

    @pytest.mark.parametrize("data", [["llc"], {"q1-structure": ["llc"]}, {"q1-accountant": True}])
    def test_rejects_bad_answers_file(self, tmp_path, data):
        path = write_json(tmp_path, "answers.json", data)
        assert main(["evaluate", path]) == 2

    def test_missing_answers_file(self, tmp_path):
        assert main(["evaluate", str(tmp_path / "missing.json")]) == 2


class TestValidateCatalogCommand:

    def test_packaged_catalog_is_valid(self, capsys):
        assert main(["validate-catalog"]) == 0
        assert "questionnaire_v1: 0 error(s)" in capsys.readouterr().out

    def test_errors_give_exit_code_1(self, tmp_path, capsys):
        document = make_questionnaire().model_dump(mode="json")
        document["sections"][1]["questions"][0]["options"] = []
        assert main(["validate-catalog", write_json(tmp_path, "q.json", document)]) == 1
        assert "CHOICE_WITHOUT_OPTIONS" in capsys.readouterr().out

    def test_unreadable_catalog(self, tmp_path):
        assert main(["validate-catalog", str(tmp_path / "missing.json")]) == 2

    def test_undecodable_catalog(self, tmp_path, capsys):
        path = tmp_path / "q.json"
        path.write_bytes(b"\xff\xfe\x00")
        assert main(["validate-catalog", str(path)]) == 2
        assert "could not be read" in capsys.readouterr().err


class TestInteractiveRun:

    def test_walkthrough(self):
        wizard = QuestionnaireWizard(make_questionnaire())
        out = io.StringIO()
        input_fn = scripted(
            "J", "jane@example.com", "5551234567",          # rejected name
            "Jane Doe", "jane@example.com", "5551234567",
            "",                                              # begin
            "maybe", "yes",                                  # a
            "", "$20",                                       # b is required
            "",                                              # continue
            "",                                              # c skipped
            "",                                              # continue -> results
            "n",                                             # no review
        )

        results = run_interactive(wizard, input_fn=input_fn, out=out)

        assert [r.id for r in results] == ["r1"]
        assert wizard.screen == Screen.RESULTS
        assert wizard.answers == {"a": "yes", "b": 20}
        assert wizard.contact.name == "Jane Doe"
        text = out.getvalue()
        assert "Name must be at least 2 characters" in text
        assert "Answer must be yes or no" in text
        assert "This question is required." in text
        assert "Use this strategy." in text

    def test_review_keeps_answers(self):
        wizard = QuestionnaireWizard(make_questionnaire())
        input_fn = scripted(
            "Jane Doe", "jane@example.com", "5551234567", "",
            "yes", "20", "", "1", "",
            "y",                                             # review
            "", "", "", "2", "",                             # keep a and b, change c
            "n",
        )

        run_interactive(wizard, input_fn=input_fn, out=io.StringIO())

        assert wizard.answers == {"a": "yes", "b": 20, "c": "y"}

    def test_back_to_previous_section(self):
        wizard = QuestionnaireWizard(make_questionnaire())
        input_fn = scripted(
            "Jane Doe", "jane@example.com", "5551234567", "",
            "no", "",
            "", "b",                                         # back from s2
            "", "",                                          # s1 again, keep a
            "", "",                                          # s2, finish
            "n",
        )

        results = run_interactive(wizard, input_fn=input_fn, out=io.StringIO())

        assert results == []
        assert wizard.answers == {"a": "no"}


# Run tests
if __name__ == "__main__":
    pytest.main([__file__, "-v"])
