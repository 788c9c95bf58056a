"""Documentation assistant and chat transcript."""
