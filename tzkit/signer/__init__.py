from .base import SignResult, Signer
from .memory import InMemorySigner, fundraiser_seed
from .noop import NoopSigner

__all__ = ["Signer", "SignResult", "NoopSigner", "InMemorySigner", "fundraiser_seed"]
