from __future__ import annotations

from functools import cache
from typing import TYPE_CHECKING, Any

import structlog

if TYPE_CHECKING:
    from types import ModuleType

log = structlog.get_logger(__name__)


@cache
def _chem() -> ModuleType:
    """Import RDKit once, on first use, with its parse-error spam silenced."""
    from rdkit import Chem, RDLogger  # noqa: PLC0415

    RDLogger.DisableLog("rdApp.*")
    return Chem


class RdkitSmilesValidator:
    """SmilesValidator backed by RDKit.

    Structures read from figures are frequently slightly wrong (unclosed rings,
    bad valences); those are reported as invalid rather than raised.
    """

    def _parse(self, smiles: str) -> Any:  # noqa: ANN401
        mol = _chem().MolFromSmiles(smiles)
        if mol is None:
            log.debug("rdkit.unparseable_smiles", smiles=smiles)
        return mol

    def validate(self, smiles: str) -> bool:
        return self._parse(smiles) is not None

    def canonicalize(self, smiles: str) -> str | None:
        mol = self._parse(smiles)
        if mol is None:
            return None
        return _chem().MolToSmiles(mol)
