__version__ = "0.1.0"

from .editor import (
    ConlangEditor as ConlangEditor,
    Preview as Preview,
    parse_coordinate as parse_coordinate,
)

from .models import (
    Coordinate as Coordinate,
    PartOfSpeech as PartOfSpeech,
    Replace as Replace,
    RuleKind as RuleKind,
    SoundChange as SoundChange,
    ValidationResult as ValidationResult,
    ValidationSeverity as ValidationSeverity,
    Word as Word,
)

from .compiler import (
    CategoryTable as CategoryTable,
    SoundChangeSet as SoundChangeSet,
    compile_sound_change as compile_sound_change,
)

from .substitution import (
    Limits as Limits,
    Substitution as Substitution,
    apply_pipeline as apply_pipeline,
)

from .language import (
    Language as Language,
    Pipelines as Pipelines,
)

from .lineage import (
    DerivationReport as DerivationReport,
    derive_vocabulary as derive_vocabulary,
    labor as labor,
)

from .slots import SlotList as SlotList

from .config import (
    EngineConfig as EngineConfig,
    load_config as load_config,
)

from .orthography import interpret as interpret

from .exceptions import (
    ConlangEditorError as ConlangEditorError,
    ConfigError as ConfigError,
    DataImportError as DataImportError,
    DeriveFromSelfError as DeriveFromSelfError,
    ExportError as ExportError,
    GhostWordError as GhostWordError,
    IndexOutOfRangeError as IndexOutOfRangeError,
    InvalidElementError as InvalidElementError,
    InvalidEnvironmentError as InvalidEnvironmentError,
    InvalidTargetError as InvalidTargetError,
    NonTerminatingRuleError as NonTerminatingRuleError,
    PatternError as PatternError,
    ValidationError as ValidationError,
)

__all__ = [
    # Editor
    "ConlangEditor",
    "Preview",
    "parse_coordinate",
    # Models
    "Coordinate",
    "PartOfSpeech",
    "Replace",
    "RuleKind",
    "SoundChange",
    "ValidationResult",
    "ValidationSeverity",
    "Word",
    # Rule compiler and pipelines
    "CategoryTable",
    "SoundChangeSet",
    "compile_sound_change",
    "Limits",
    "Substitution",
    "apply_pipeline",
    "Language",
    "Pipelines",
    # Lineage
    "DerivationReport",
    "derive_vocabulary",
    "labor",
    "SlotList",
    # Configuration
    "EngineConfig",
    "load_config",
    # Orthography
    "interpret",
    # Exceptions
    "ConlangEditorError",
    "ConfigError",
    "DataImportError",
    "DeriveFromSelfError",
    "ExportError",
    "GhostWordError",
    "IndexOutOfRangeError",
    "InvalidElementError",
    "InvalidEnvironmentError",
    "InvalidTargetError",
    "NonTerminatingRuleError",
    "PatternError",
    "ValidationError",
]
