"""
Command-line interface for batch change requests.
"""
from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path
from typing import Optional

from .. import __version__
from ..config import load_config
from ..editor import ConlangEditor
from ..exceptions import ConfigError, ConlangEditorError
from ..models import RuleKind, ValidationSeverity
from ..orthography import interpret
from .executor import execute_change_request
from .parser import ParseError, load_change_request
from .schema import BatchResult, ValidationResult
from .validator import validate_change_request


def main(argv: Optional[list] = None) -> int:
    """Main entry point for conlang-batch CLI."""
    parser = create_parser()
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(levelname)s %(name)s: %(message)s",
    )

    if not hasattr(args, "func"):
        parser.print_help()
        return 1

    return args.func(args)


def create_parser() -> argparse.ArgumentParser:
    """Create the argument parser."""
    parser = argparse.ArgumentParser(
        prog="conlang-batch",
        description="Batch change request tool for constructed-language projects",
    )
    parser.add_argument(
        "--version",
        action="version",
        version=f"%(prog)s (conlang-editor {__version__})",
    )
    parser.add_argument(
        "--verbose", "-v",
        action="store_true",
        help="Log debug output to stderr",
    )
    parser.add_argument(
        "--config",
        type=Path,
        help="YAML engine configuration file",
    )

    subparsers = parser.add_subparsers(title="commands", dest="command")

    # validate command
    validate_parser = subparsers.add_parser(
        "validate",
        help="Validate a change request file",
    )
    validate_parser.add_argument(
        "file",
        type=Path,
        help="YAML file containing change request",
    )
    validate_parser.add_argument(
        "--project",
        type=Path,
        help="Also check language and part-of-speech references against this project",
    )
    validate_parser.set_defaults(func=cmd_validate)

    # apply command
    apply_parser = subparsers.add_parser(
        "apply",
        help="Apply changes from a request file",
    )
    apply_parser.add_argument(
        "file",
        type=Path,
        help="YAML file containing change request",
    )
    apply_parser.add_argument(
        "--project",
        type=Path,
        required=True,
        help="Project file (.json, .yaml or .yml)",
    )
    apply_parser.add_argument(
        "--output", "-o",
        type=Path,
        help="Write the result here instead of over the project file",
    )
    apply_parser.add_argument(
        "--create",
        action="store_true",
        help="Start an empty project if the project file does not exist",
    )
    apply_parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Simulate execution without making changes",
    )
    apply_parser.add_argument(
        "--atomic",
        action="store_true",
        help="Stop at the first failure and discard every change",
    )
    apply_parser.add_argument(
        "--yes", "-y",
        action="store_true",
        help="Skip confirmation prompt",
    )
    apply_parser.set_defaults(func=cmd_apply)

    # show command
    show_parser = subparsers.add_parser(
        "show",
        help="Show the languages of a project, or one language in detail",
    )
    show_parser.add_argument(
        "--project",
        type=Path,
        required=True,
        help="Project file",
    )
    show_parser.add_argument(
        "--language", "-l",
        type=str,
        help="Language index or name",
    )
    show_parser.set_defaults(func=cmd_show)

    # check command
    check_parser = subparsers.add_parser(
        "check",
        help="Check a project for consistency problems",
    )
    check_parser.add_argument(
        "--project",
        type=Path,
        required=True,
        help="Project file",
    )
    check_parser.set_defaults(func=cmd_check)

    # interpret command
    interpret_parser = subparsers.add_parser(
        "interpret",
        help="Turn {digraph} and \\diacritic commands into glyphs",
    )
    interpret_parser.add_argument(
        "text",
        type=str,
        help="Text to interpret",
    )
    interpret_parser.set_defaults(func=cmd_interpret)

    return parser


def _load_project(path: Path, args: argparse.Namespace, create: bool = False) -> Optional[ConlangEditor]:
    """Load a project, printing the problem and returning None on failure."""
    try:
        config = load_config(args.config)
    except ConfigError as e:
        print(f"\n  [CONFIG ERROR] {e}")
        return None

    if create and not path.exists():
        print(f"  Project: {path} (new)")
        return ConlangEditor(config=config)

    try:
        editor = ConlangEditor.load(path, config=config)
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
        return None
    except ConlangEditorError as e:
        print(f"\n  [LOAD ERROR] {e}")
        return None

    print(f"  Project: {path}")
    return editor


def _load_request(path: Path):
    try:
        return load_change_request(path)
    except ParseError as e:
        print(f"\n  [PARSE ERROR] {e}")
        if e.line:
            print(f"               Line: {e.line}")
    except FileNotFoundError as e:
        print(f"\n  [ERROR] {e}")
    return None


def cmd_validate(args: argparse.Namespace) -> int:
    """Handle validate command."""
    print(f"\nValidating {args.file}...")

    request = _load_request(args.file)
    if request is None:
        return 1

    editor = None
    if args.project:
        editor = _load_project(args.project, args)
        if editor is None:
            return 1

    if request.language is not None:
        print(f"  Language: {request.language}")
    print(f"  Changes: {len(request.changes)}")
    if request.session_name:
        print(f"  Session: {request.session_name}")

    result = validate_change_request(request, editor)

    print("\nValidation Results:")
    _print_validation_result(result)

    if result.is_valid:
        print("\nValidation passed!")
        return 0
    else:
        print(f"\nFound {result.error_count} error(s), {result.warning_count} warning(s)")
        return 1


def cmd_apply(args: argparse.Namespace) -> int:
    """Handle apply command."""
    print(f"\nLoading {args.file}...")

    request = _load_request(args.file)
    if request is None:
        return 1

    editor = _load_project(args.project, args, create=args.create)
    if editor is None:
        return 1

    print(f"  Changes: {len(request.changes)}")
    if request.session_name:
        print(f"  Session: \"{request.session_name}\"")

    # Validate first
    print("\nValidating...")
    validation = validate_change_request(request, editor)

    if not validation.is_valid:
        print("\nValidation failed:")
        _print_validation_result(validation)
        print(f"\nFound {validation.error_count} error(s). Fix errors before applying.")
        return 1

    if validation.warning_count > 0:
        print("\nWarnings:")
        _print_validation_result(validation, warnings_only=True)

    destination = args.output or args.project

    # Confirm unless --yes or --dry-run
    if args.dry_run:
        print("\n[DRY RUN] Simulating execution...")
    elif not args.yes:
        response = input(f"\nApply {len(request.changes)} changes to {destination}? [y/N] ")
        if response.lower() not in ("y", "yes"):
            print("Aborted.")
            return 1

    # Execute
    print(f"\n{'Simulating' if args.dry_run else 'Applying'} changes...")
    result = execute_change_request(
        request,
        editor,
        dry_run=args.dry_run,
        atomic=args.atomic,
    )

    _print_batch_result(result)

    if not args.dry_run and not result.rolled_back and result.success_count > 0:
        try:
            editor.save(destination)
        except ConlangEditorError as e:
            print(f"\n  [SAVE ERROR] {e}")
            return 1
        print(f"\nSaved {destination}")

    if result.failure_count > 0:
        return 1
    return 0


def cmd_show(args: argparse.Namespace) -> int:
    """Handle show command."""
    editor = _load_project(args.project, args)
    if editor is None:
        return 1

    if args.language is None:
        languages = editor.list_languages()
        if not languages:
            print("No languages.")
            return 0

        print(f"\n{'Idx':<5} {'Name':<24} {'Ancestor':<10} {'Words':<7} {'Rules'}")
        print("-" * 60)
        for idx, language in languages:
            ancestor = "-" if language.ancestor is None else str(language.ancestor)
            rules = (
                len(language.surface_rules)
                + len(language.phonetic_rules)
                + len(language.sound_changes.rules)
            )
            words = sum(1 for _ in language.words())
            print(f"{idx:<5} {language.name[:24]:<24} {ancestor:<10} {words:<7} {rules}")

        pos = editor.list_pos()
        if pos:
            print("\nParts of speech:")
            for idx, item in pos:
                print(f"  {idx}: {item.name} ({item.abbr})")
        return 0

    lang = _resolve_language(editor, args.language)
    if lang is None:
        print(f"Language {args.language} not found.")
        return 1

    language = editor.get_language(lang)
    print(f"\nLanguage {lang}: {language.name}")
    if language.ancestor is not None:
        chain = " <- ".join(str(i) for i in [lang] + editor.ancestry(lang))
        print(f"  Ancestry: {chain}")

    categories = editor.list_categories(lang)
    if categories:
        print("\nCategories:")
        for key, graphemes in categories:
            print(f"  {key} = {' '.join(graphemes)}")

    for kind in (RuleKind.SURFACE, RuleKind.PHONETIC):
        rules = editor.list_rules(lang, kind)
        if rules:
            print(f"\n{kind.value.capitalize()} rules:")
            for idx, rule in rules:
                print(f"  {idx}: {rule}")

    changes = editor.list_sound_changes(lang)
    if changes:
        print("\nSound changes:")
        for idx, change in changes:
            print(f"  {idx}: {change}")

    words = editor.list_words(lang)
    if words:
        print(f"\nWords ({len(words)}):")
        for idx, word in words:
            origin = ""
            if word.ancestors:
                origin = "  < " + ", ".join(str(c) for c in word.ancestors)
            print(f"  {idx}: {word.surface} [{word.phonetic}] '{word.gloss}'{origin}")

    return 0


def cmd_check(args: argparse.Namespace) -> int:
    """Handle check command."""
    editor = _load_project(args.project, args)
    if editor is None:
        return 1

    results = editor.validate()
    if not results:
        print("\nNo problems found.")
        return 0

    print()
    for r in results:
        label = "ERROR" if r.severity == ValidationSeverity.ERROR else "WARN"
        print(f"  [{label}] {r.rule_id} {r.entity_type} {r.entity_id}: {r.message}")

    errors = sum(1 for r in results if r.severity == ValidationSeverity.ERROR)
    print(f"\nFound {errors} error(s), {len(results) - errors} warning(s)")
    return 1 if errors else 0


def cmd_interpret(args: argparse.Namespace) -> int:
    """Handle interpret command."""
    print(interpret(args.text))
    return 0


def _resolve_language(editor: ConlangEditor, ref: str) -> Optional[int]:
    if ref.isdigit():
        idx = int(ref)
        return idx if editor.languages.is_live(idx) else None
    return editor.find_language(ref)


def _print_validation_result(
    result: ValidationResult,
    errors_only: bool = False,
    warnings_only: bool = False,
) -> None:
    """Print validation errors and warnings."""
    if not warnings_only:
        for error in result.errors:
            line_info = f" (line {error.line_number})" if error.line_number else ""
            print(f"  [ERROR] Change #{error.index + 1} ({error.operation}): {error.message}{line_info}")
            if error.field:
                print(f"          Field: {error.field}")

    if not errors_only:
        for warning in result.warnings:
            line_info = f" (line {warning.line_number})" if warning.line_number else ""
            print(f"  [WARN]  Change #{warning.index + 1} ({warning.operation}): {warning.message}{line_info}")


def _print_batch_result(result: BatchResult) -> None:
    """Print batch execution result."""
    print()
    for change in result.changes:
        idx = change.index + 1
        status = "OK" if change.success else "FAILED"
        line_info = f" (line {change.line_number})" if change.line_number else ""
        print(f"  [{idx}/{result.total_count}] {change.operation}: {status}{line_info}")
        if change.message:
            print(f"         {change.message}")

    print(f"\nResults:")
    print(f"  Total:   {result.total_count}")
    print(f"  Success: {result.success_count}")
    print(f"  Failed:  {result.failure_count}")
    print(f"  Skipped: {result.skipped_count}")
    print(f"  Time:    {result.duration_seconds:.2f}s")

    if result.rolled_back:
        print("\nRolled back; the project was not changed.")


if __name__ == "__main__":
    sys.exit(main())
