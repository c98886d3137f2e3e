"""
ATG Intake CLI

Commands:
    atg-intake evaluate ANSWERS.json   - Strategies that apply to saved answers
    atg-intake validate-catalog [PATH] - Check a questionnaire document
    atg-intake run                     - Walk through the questionnaire in the terminal

Exit codes: 0 ok, 1 catalog validation errors, 2 unusable input.
"""

import argparse
import json
import logging
import sys
from pathlib import Path
from typing import Callable, List, Optional, TextIO

from pydantic import ValidationError

from atg_intake import __version__
from atg_intake.catalog.loader import CatalogError, get_questionnaire, load_questionnaire, validate_questionnaire
from atg_intake.catalog.models import Question, QuestionType, Questionnaire
from atg_intake.conditions.evaluate import evaluate_results, evaluate_with_trace, evaluation_hash
from atg_intake.conditions.models import Answers, ResultDefinition
from atg_intake.config import get_settings
from atg_intake.contacts.client import ContactSyncClient, ContactSyncError
from atg_intake.contacts.models import ContactInfo
from atg_intake.export.markup import strip_inline
from atg_intake.export.pdf import ExportError, ResultsPDFExporter
from atg_intake.flow.answers import AnswerValidationError
from atg_intake.flow.visibility import prune_hidden_answers
from atg_intake.flow.wizard import QuestionnaireWizard, Screen

logger = logging.getLogger("atg_intake.cli")

CONTACT_TAGS = ["tax-planning-questionnaire", "lead", "cli"]


# =============================================================================
# HELPERS
# =============================================================================

def _catalog(path: Optional[str]) -> Questionnaire:
    return load_questionnaire(path) if path else get_questionnaire()


def read_answers(path: str) -> Answers:
    """
    Read an answers JSON object (question id -> answer).

    Raises:
        ValueError: not a JSON object of string/number answers
    """
    with open(path, "r", encoding="utf-8") as f:
        raw = json.load(f)

    if not isinstance(raw, dict):
        raise ValueError("Answers file must contain a JSON object")
    for question_id, value in raw.items():
        if isinstance(value, bool) or not isinstance(value, (str, int, float)):
            raise ValueError(f"Answer for '{question_id}' must be a string or number")
    return raw


def write_pdf(
    path: str,
    results: List[ResultDefinition],
    questionnaire: Questionnaire,
    contact: Optional[ContactInfo] = None,
) -> None:
    exporter = ResultsPDFExporter(branding=get_settings().branding)
    pdf = exporter.generate_pdf(results, questionnaire.thank_you, contact=contact)
    Path(path).write_bytes(pdf)
    logger.info(f"Wrote {len(pdf)} bytes to {path}")


# =============================================================================
# COMMANDS
# =============================================================================

def cmd_evaluate(args: argparse.Namespace) -> int:
    questionnaire = _catalog(args.catalog)
    try:
        submitted = read_answers(args.answers)
    except (OSError, ValueError) as e:
        print(f"Cannot read answers: {e}", file=sys.stderr)
        return 2

    prune = args.prune_hidden or get_settings().prune_hidden_answers
    answers = prune_hidden_answers(questionnaire.sections, submitted) if prune else dict(submitted)
    matched = evaluate_results(answers, questionnaire.results)

    output = {
        "questionnaire_version": questionnaire.version,
        "matched_count": len(matched),
        "results": [{"id": r.id, "title": r.title} for r in matched],
        "evaluation_hash": evaluation_hash(answers, matched),
        "pruned_question_ids": sorted(set(submitted) - set(answers)),
    }
    if args.explain:
        output["trace"] = [t.model_dump() for t in evaluate_with_trace(answers, questionnaire.results)]
    print(json.dumps(output, indent=2))

    if args.pdf:
        write_pdf(args.pdf, matched, questionnaire)
    return 0


def cmd_validate_catalog(args: argparse.Namespace) -> int:
    questionnaire = load_questionnaire(args.path)
    issues = validate_questionnaire(questionnaire)

    for issue in issues:
        print(f"{issue.severity.upper():7} {issue.code} [{issue.field}] {issue.message}")

    errors = sum(1 for i in issues if i.severity == "error")
    print(f"{questionnaire.version}: {errors} error(s), {len(issues) - errors} warning(s)")
    return 1 if errors else 0


def cmd_run(args: argparse.Namespace) -> int:
    questionnaire = _catalog(args.catalog)
    wizard = QuestionnaireWizard(
        questionnaire,
        prune_hidden=args.prune_hidden or get_settings().prune_hidden_answers,
    )
    results = run_interactive(wizard)

    if args.sync and wizard.contact is not None:
        try:
            ContactSyncClient().sync_contact(wizard.contact, tags=CONTACT_TAGS)
            print("Contact details sent.")
        except ContactSyncError as e:
            print(f"Contact sync failed: {e}", file=sys.stderr)

    if args.pdf:
        write_pdf(args.pdf, results, questionnaire, contact=wizard.contact)
        print(f"Results saved to {args.pdf}")
    return 0


# =============================================================================
# INTERACTIVE WALKTHROUGH
# =============================================================================

def _prompt_for(question: Question, current) -> str:
    prompt = question.text
    if question.type == QuestionType.YES_NO:
        prompt += " (yes/no)"
    elif question.type == QuestionType.NUMERIC and question.validation is not None:
        low, high = question.validation.min, question.validation.max
        if low is not None and high is not None:
            prompt += f" ({low:g}-{high:g})"
    if current is not None and current != "":
        prompt += f" [{current}]"
    if question.required:
        prompt += " *"
    return prompt + ": "


def ask_contact(input_fn: Callable[[str], str], out: TextIO) -> ContactInfo:
    """Prompt until the contact details validate."""
    while True:
        name = input_fn("Full name: ")
        email = input_fn("Email: ")
        phone = input_fn("Phone: ")
        try:
            return ContactInfo(name=name, email=email, phone=phone)
        except ValidationError as e:
            for error in e.errors():
                print(f"  {error['msg'].removeprefix('Value error, ')}", file=out)


def ask_question(
    wizard: QuestionnaireWizard,
    question: Question,
    input_fn: Callable[[str], str],
    out: TextIO,
) -> None:
    """Prompt until the answer is accepted. Enter keeps the current answer."""
    if question.options:
        for n, option in enumerate(question.options, start=1):
            print(f"  {n}. {option.label}", file=out)

    current = wizard.answers.get(question.id)
    while True:
        raw = input_fn(_prompt_for(question, current)).strip()
        if raw == "":
            if current is not None and current != "":
                return
            if not question.required:
                return
            print("  This question is required.", file=out)
            continue
        try:
            wizard.answer(question.id, raw)
            return
        except AnswerValidationError as e:
            print(f"  {e.message}", file=out)


def ask_section(wizard: QuestionnaireWizard, input_fn: Callable[[str], str], out: TextIO) -> None:
    # Visibility is recomputed after every answer; newly revealed follow-ups
    # are asked in flow order.
    asked = set()
    while True:
        pending = [q for q in wizard.visible_questions() if q.id not in asked]
        if not pending:
            return
        question = pending[0]
        asked.add(question.id)
        ask_question(wizard, question, input_fn, out)


def print_results(results: List[ResultDefinition], out: TextIO) -> None:
    if not results:
        print("\nNo specific strategies matched your answers.", file=out)
        return
    print(f"\n{len(results)} strategies apply to you:\n", file=out)
    for result in results:
        print(f"== {result.title} ==", file=out)
        print(strip_inline(result.content), file=out)
        print("", file=out)


def run_interactive(
    wizard: QuestionnaireWizard,
    input_fn: Callable[[str], str] = input,
    out: TextIO = sys.stdout,
) -> List[ResultDefinition]:
    """
    Drive the wizard from the terminal.

    Returns:
        Matched results once the client stops reviewing
    """
    questionnaire = wizard.questionnaire
    branding = get_settings().branding
    print(f"{branding.firm_name}\n{branding.product_title}\n", file=out)

    wizard.submit_contact(ask_contact(input_fn, out))

    welcome = questionnaire.welcome
    print(f"\n{welcome.title}\n", file=out)
    for paragraph in welcome.introduction:
        print(paragraph, file=out)
    for area in welcome.areas:
        print(f"  - {area}", file=out)
    if welcome.disclaimer:
        print(f"\n{welcome.disclaimer}", file=out)
    input_fn("\nPress Enter to begin. ")
    wizard.start()

    while True:
        progress = wizard.progress()
        print(
            f"\n[{progress.current}/{progress.total} - {progress.percentage:.0f}%] {progress.section_title}",
            file=out,
        )
        if wizard.current_section.description:
            print(wizard.current_section.description, file=out)
        ask_section(wizard, input_fn, out)

        choice = input_fn("Enter to continue, 'b' to go back: ").strip().lower()
        if choice == "b":
            wizard.previous_section()
            continue
        if wizard.next_section() != Screen.RESULTS:
            continue

        results = wizard.results()
        print_results(results, out)
        if input_fn("Review your answers? (y/N): ").strip().lower() not in ("y", "yes"):
            return results
        wizard.review()


# =============================================================================
# ENTRY POINT
# =============================================================================

def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="atg-intake",
        description="ATG tax planning questionnaire tools",
    )
    parser.add_argument("--version", action="version", version=f"%(prog)s {__version__}")
    sub = parser.add_subparsers(dest="command", required=True)

    evaluate = sub.add_parser("evaluate", help="Evaluate saved answers against the result rules")
    evaluate.add_argument("answers", help="JSON file mapping question id to answer")
    evaluate.add_argument("--catalog", help="Questionnaire JSON (defaults to the configured one)")
    evaluate.add_argument("--prune-hidden", action="store_true", help="Ignore answers to hidden questions")
    evaluate.add_argument("--explain", action="store_true", help="Include the per-result trace")
    evaluate.add_argument("--pdf", metavar="OUT", help="Also write the results PDF")
    evaluate.set_defaults(func=cmd_evaluate)

    validate = sub.add_parser("validate-catalog", help="Check a questionnaire document")
    validate.add_argument("path", nargs="?", help="Questionnaire JSON (defaults to the packaged one)")
    validate.set_defaults(func=cmd_validate_catalog)

    run = sub.add_parser("run", help="Interactive walkthrough")
    run.add_argument("--catalog", help="Questionnaire JSON (defaults to the configured one)")
    run.add_argument("--prune-hidden", action="store_true", help="Ignore answers to hidden questions")
    run.add_argument("--pdf", metavar="OUT", help="Write the results PDF when done")
    run.add_argument("--sync", action="store_true", help="Send contact details to the CRM")
    run.set_defaults(func=cmd_run)

    return parser


def main(argv: Optional[List[str]] = None) -> int:
    args = build_parser().parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, get_settings().log_level, logging.INFO),
        format='%(asctime)s - %(levelname)s - %(message)s'
    )

    try:
        return args.func(args)
    except CatalogError as e:
        print(f"Catalog error: {e}", file=sys.stderr)
        for issue in e.issues:
            print(f"  {issue.code}: {issue.message}", file=sys.stderr)
        return 2
    except ExportError as e:
        print(f"PDF export failed: {e}", file=sys.stderr)
        return 2
    except KeyboardInterrupt:
        print("", file=sys.stderr)
        return 130
