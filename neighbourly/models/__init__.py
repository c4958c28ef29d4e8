from neighbourly.models.claim import Claim

__all__ = ["Claim"]
