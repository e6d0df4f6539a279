"""Knowledge-base workflows: steering, init, generate and update."""

from knowmap_core.knowledge.delta_spec import (
    DeltaEntry,
    DeltaSpecResult,
    identify_affected_modules,
    parse_delta_spec,
)
from knowmap_core.knowledge.documents import GeneratedFile, ModuleSummary, infer_file_description
from knowmap_core.knowledge.generate import KnowledgeResult, run_knowledge_generate
from knowmap_core.knowledge.init import KnowledgeInitResult, run_knowledge_init
from knowmap_core.knowledge.steering import SteeringResult, run_steering
from knowmap_core.knowledge.update import (
    KnowledgeUpdateOptions,
    KnowledgeUpdater,
    KnowledgeUpdateResult,
    ModuleFailure,
)

__all__ = [
    "DeltaEntry",
    "DeltaSpecResult",
    "GeneratedFile",
    "KnowledgeInitResult",
    "KnowledgeResult",
    "KnowledgeUpdateOptions",
    "KnowledgeUpdateResult",
    "KnowledgeUpdater",
    "ModuleFailure",
    "ModuleSummary",
    "SteeringResult",
    "identify_affected_modules",
    "infer_file_description",
    "parse_delta_spec",
    "run_knowledge_generate",
    "run_knowledge_init",
    "run_steering",
]
