from reqchain.chain.async_chain import AsyncChain
from reqchain.chain.base import BaseChain
from reqchain.chain.sync_chain import Chain

__all__ = ["AsyncChain", "BaseChain", "Chain"]
