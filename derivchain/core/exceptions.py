class DerivationChainError(Exception): ...


class RetrievalFailure(DerivationChainError):
    """A remote fetch failed, was interrupted, or returned an inconsistent result."""
