"""Runtime checks for optional third-party dependencies."""

import importlib
import logging
from dataclasses import dataclass, field
from typing import List, Sequence, Tuple

from ..errors import MissingDependencyError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ImportRequirement:
    """
    A distribution that must be importable and expose some names.

    Attributes:
        name: Distribution name as installed with pip
        module: Import path of the module to load
        exports: Attribute names the module must provide
    """
    name: str
    module: str
    exports: Tuple[str, ...] = field(default_factory=tuple)


def is_available(requirement: ImportRequirement) -> bool:
    try:
        module = importlib.import_module(requirement.module)
    except ImportError:
        return False
    return all(hasattr(module, export) for export in requirement.exports)


def check_dependencies(requirements: Sequence[ImportRequirement], usage_reason: str) -> None:
    """
    Ensure every requirement is importable.

    All requirements are checked before raising so the error lists every
    missing distribution at once.

    Raises:
        MissingDependencyError: If one or more requirements are missing
    """
    missing: List[str] = []
    for requirement in requirements:
        if requirement.name not in missing and not is_available(requirement):
            missing.append(requirement.name)

    if missing:
        logger.error(f"Missing dependencies for {usage_reason}: {', '.join(missing)}")
        raise MissingDependencyError(usage_reason, missing)
