"""Tests for the RDKit-backed SMILES validator."""

from __future__ import annotations

import pytest

from infrastructure.chemistry.rdkit_smiles_validator import RdkitSmilesValidator


class TestRdkitSmilesValidator:
    """Test RdkitSmilesValidator."""

    @pytest.mark.parametrize("smiles", ["CCO", "c1ccccc1", "CC(=O)O"])
    def test_valid_smiles(self, smiles: str) -> None:
        assert RdkitSmilesValidator().validate(smiles) is True

    def test_invalid_smiles(self) -> None:
        validator = RdkitSmilesValidator()

        assert validator.validate("C1CC") is False
        assert validator.canonicalize("C1CC") is None

    def test_canonical_form_is_stable(self) -> None:
        validator = RdkitSmilesValidator()

        assert validator.canonicalize("OCC") == validator.canonicalize("CCO") == "CCO"
