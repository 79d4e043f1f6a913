"""Container-based test orchestration for TYPO3 extensions."""
