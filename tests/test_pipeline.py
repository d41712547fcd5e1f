import asyncio

import pytest

from clausecraft import pipeline
from clausecraft.errors import ContractTooLong, GatewayError, InvalidGenerationFormat, NormalizationError
from clausecraft.service import ContractService


def run(coro):
    return asyncio.run(coro)


def test_analysis_uses_fixed_budget_and_temperature(gateway, analysis_json):
    gateway.replies = [analysis_json]
    result = run(pipeline.run(pipeline.ANALYSIS, gateway, "Contract body"))

    assert result.overallRisk == "high"
    assert len(gateway.calls) == 1
    assert gateway.calls[0]["max_tokens"] == 2000
    assert gateway.calls[0]["temperature"] == 0.7
    assert "Contract body" in gateway.calls[0]["prompt"]


@pytest.mark.parametrize("reply", [
    "The model refused to answer.",
    '{"summary": broken',
    GatewayError("HTTP 503"),
])
def test_analysis_falls_back_instead_of_raising(gateway, reply):
    gateway.replies = [reply]
    result = run(pipeline.run(pipeline.ANALYSIS, gateway, "Some contract"))

    assert result.overallRisk == "medium"
    assert result.summary
    assert result.risks[0].clauseText == "Some contract"
    assert len(gateway.calls) == 1


def test_generation_propagates_format_error(gateway):
    gateway.replies = ['{"title": "NDA"}']
    with pytest.raises(InvalidGenerationFormat):
        run(pipeline.run(pipeline.GENERATION, gateway, "nda", {"partyA": "A", "partyB": "B"}))


def test_generation_propagates_gateway_error(gateway):
    gateway.replies = [GatewayError("timeout")]
    with pytest.raises(GatewayError):
        run(pipeline.run(pipeline.GENERATION, gateway, "nda", {"partyA": "A", "partyB": "B"}))


def test_chat_uses_smaller_budget(gateway):
    gateway.replies = ["A lease is a contract for the use of property."]
    answer = run(pipeline.run(pipeline.CHAT, gateway, "What is a lease?"))

    assert answer.startswith("A lease")
    assert gateway.calls[0]["max_tokens"] == 1000


def test_chat_propagates_empty_answer(gateway):
    gateway.replies = ["```"]
    with pytest.raises(NormalizationError):
        run(pipeline.run(pipeline.CHAT, gateway, "Hello?"))


class TestContractService:
    @pytest.fixture
    def service(self, gateway, store, settings):
        return ContractService(gateway=gateway, store=store, settings=settings)

    def test_too_long_contract_never_reaches_gateway(self, service, gateway):
        with pytest.raises(ContractTooLong):
            run(service.analyze("a" * (30_000 * 4 + 1)))
        assert gateway.calls == []

    def test_limit_follows_settings(self, gateway, store, settings):
        settings.max_contract_tokens = 10
        service = ContractService(gateway=gateway, store=store, settings=settings)
        with pytest.raises(ContractTooLong):
            run(service.analyze("a" * 41))
        assert gateway.calls == []

    def test_generate_persists_new_row_each_time(self, service, gateway, store):
        gateway.replies = ['{"content": "First draft"}', '{"content": "Second draft"}']
        first = run(service.generate("nda", "Acme", "Beta", owner_id=7))
        second = run(service.generate("nda", "Acme", "Beta", owner_id=7))

        assert first.id != second.id
        assert first.version == second.version == 1
        assert store.get_contract(first.id).content == "First draft"
        assert store.get_contract(second.id).content == "Second draft"

    def test_generate_failure_persists_nothing(self, service, gateway, store):
        gateway.replies = ['{"nothing": true}']
        with pytest.raises(InvalidGenerationFormat):
            run(service.generate("nda", "Acme", "Beta"))
        assert store.get_contract(1) is None

    def test_chat_does_not_replay_history(self, service, gateway):
        gateway.replies = ["First answer", "Second answer"]
        run(service.chat(1, "First question"))
        run(service.chat(1, "Second question"))

        assert "First question" not in gateway.calls[1]["prompt"]
        assert [e.answer for e in service.history(1)] == ["First answer", "Second answer"]
