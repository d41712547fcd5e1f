from __future__ import annotations

import logging
from typing import List, Optional

from clausecraft import pipeline
from clausecraft.config import Settings
from clausecraft.llm_gateway import LLMGateway
from clausecraft.prompts import ensure_within_limit
from clausecraft.schemas import AnalysisResult, ChatExchange, GeneratedContract
from clausecraft.store import MemStore

log = logging.getLogger("clausecraft.service")


class ContractService:
    """
    Ties the pipelines to the store. One instance per app, held on app.state.
    """

    def __init__(self, gateway: LLMGateway, store: MemStore, settings: Settings):
        self.gateway = gateway
        self.store = store
        self.settings = settings

    async def analyze(self, content: str) -> AnalysisResult:
        """
        Analyze contract text. Raises ContractTooLong before any model call;
        otherwise always returns a usable result.
        """
        estimated = ensure_within_limit(content, self.settings.max_contract_tokens)
        log.info("analyze: chars=%d est_tokens=%d", len(content), estimated)
        return await pipeline.run(
            pipeline.ANALYSIS,
            self.gateway,
            content,
            temperature=self.settings.llm_temperature,
        )

    async def generate(
        self,
        contract_type: str,
        party_a: str,
        party_b: str,
        terms: Optional[str] = None,
        owner_id: Optional[int] = None,
    ) -> GeneratedContract:
        parameters = {"partyA": party_a, "partyB": party_b, "terms": terms}
        content = await pipeline.run(
            pipeline.GENERATION,
            self.gateway,
            contract_type,
            parameters,
            temperature=self.settings.llm_temperature,
        )
        return self.store.append_contract(owner_id, contract_type, content)

    async def chat(self, owner_id: int, message: str) -> ChatExchange:
        # Earlier exchanges are deliberately not fed back into the prompt.
        answer = await pipeline.run(
            pipeline.CHAT,
            self.gateway,
            message,
            temperature=self.settings.llm_temperature,
        )
        return self.store.append_chat_exchange(owner_id, message, answer)

    def history(self, owner_id: int) -> List[ChatExchange]:
        return self.store.list_chat_history(owner_id)
