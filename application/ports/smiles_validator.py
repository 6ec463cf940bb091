from typing import Protocol


class SmilesValidator(Protocol):
    """Port for checking SMILES strings read out of figures.

    Called once per resolved structure; the result is informational, so an
    invalid SMILES is still stored alongside ``is_smiles_valid=False``.
    """

    def validate(self, smiles: str) -> bool:
        """Return True if the SMILES string parses into a molecule."""
        ...

    def canonicalize(self, smiles: str) -> str | None:
        """Return the canonical SMILES for the given input, or None if invalid."""
        ...
