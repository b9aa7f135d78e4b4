"""
YAML change requests for conlang-editor projects.

A request lists edits in order: new languages, words, categories, sound
changes, and the derive and morph steps that carry words down a family
tree. Each change is checked against the project before it runs, and a
failing change can abort and roll back the whole request.

Example request (``evolve.yaml``)::

    language: Daughter
    session:
      name: Intervocalic voicing
    changes:
      - operation: add_category
        key: C
        content: ptk
      - operation: add_category
        key: D
        content: bdg
      - operation: add_sound_change
        target: C
        replacement: D
        environment: A_A
      - operation: derive
        ancestor: Proto
      - operation: morph

Example usage:
    from pathlib import Path

    from conlang_editor import ConlangEditor
    from conlang_editor.batch import (
        load_change_request,
        validate_change_request,
        execute_change_request,
    )

    editor = ConlangEditor.load("family.json")
    request = load_change_request(Path("evolve.yaml"))

    validation = validate_change_request(request, editor)
    for error in validation.errors:
        print(f"line {error.line_number}: {error.message}")

    if validation.is_valid:
        result = execute_change_request(request, editor, atomic=True)
        if not result.rolled_back:
            editor.save("family.json")
"""


from .schema import (
    # Enums and constants
    OperationType as OperationType,
    REQUIRED_FIELDS as REQUIRED_FIELDS,
    OPTIONAL_FIELDS as OPTIONAL_FIELDS,
    # Data classes
    Change as Change,
    ChangeRequest as ChangeRequest,
    ValidationError as ValidationError,
    ValidationWarning as ValidationWarning,
    ValidationResult as ValidationResult,
    ChangeResult as ChangeResult,
    BatchResult as BatchResult,
)

from .parser import (
    load_change_request as load_change_request,
    ParseError as ParseError,
)

from .validator import (
    validate_change_request as validate_change_request,
)

from .executor import (
    execute_change_request as execute_change_request,
)

__all__ = [
    # Enums and constants
    "OperationType",
    "REQUIRED_FIELDS",
    "OPTIONAL_FIELDS",
    # Data classes
    "Change",
    "ChangeRequest",
    "ValidationError",
    "ValidationWarning",
    "ValidationResult",
    "ChangeResult",
    "BatchResult",
    # Functions
    "load_change_request",
    "validate_change_request",
    "execute_change_request",
    # Exceptions
    "ParseError",
]
