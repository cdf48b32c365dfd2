import pytest

from conftest import ATHENS, BABYLON, SOURCE, FakeRpc, make_context
from tzkit.constants import SIGNATURE_STUB
from tzkit.operations.estimate import Estimate
from tzkit.operations.estimator import RpcEstimateProvider

DEST = "tz1DestinationFakeFakeFakeFakeFake"


def _simulated(kind, gas, storage, internal=()):
    return {
        "contents": [
            {
                "kind": kind,
                "metadata": {
                    "operation_result": {"status": "applied", "consumed_gas": gas, "paid_storage_size_diff": storage},
                    "internal_operation_results": [{"result": r} for r in internal],
                },
            }
        ]
    }


@pytest.mark.asyncio
async def test_transfer_sums_internal_results_and_adds_default_storage():
    rpc = FakeRpc(forged="00" * 150)
    rpc.run_response = _simulated(
        "transaction", "10100", "0", internal=[{"consumed_gas": "500", "paid_storage_size_diff": "20"}]
    )
    est = await RpcEstimateProvider(make_context(rpc)).transfer(to=DEST, amount=2)

    assert est == Estimate(10600, 320, 150)
    assert est.gas_limit == 10700
    assert est.storage_limit == 320
    assert est.suggested_fee_mutez == 1420


@pytest.mark.asyncio
async def test_internal_results_count_without_an_own_result():
    rpc = FakeRpc(forged="00" * 150)
    rpc.run_response = {
        "contents": [
            {
                "kind": "transaction",
                "metadata": {
                    "internal_operation_results": [
                        {"result": {"consumed_gas": "500", "paid_storage_size_diff": "20"}},
                        {"kind": "transaction"},
                    ]
                },
            }
        ]
    }
    est = await RpcEstimateProvider(make_context(rpc)).transfer(to=DEST, amount=2)

    assert est == Estimate(500, 320, 150)


@pytest.mark.asyncio
async def test_simulation_uses_placeholders_and_stub_signature_after_babylon():
    rpc = FakeRpc(protocol=BABYLON)
    await RpcEstimateProvider(make_context(rpc)).transfer(to=DEST, amount=2)

    [sent] = rpc.called("run_operation")
    assert sent["chain_id"] == rpc.chain_id
    operation = sent["operation"]
    assert operation["signature"] == SIGNATURE_STUB
    content = operation["contents"][0]
    assert (content["fee"], content["gas_limit"], content["storage_limit"]) == ("30000", "800000", "60000")
    assert content["source"] == SOURCE
    assert rpc.called("inject_operation") == []
    assert rpc.called("preapply_operations") == []


@pytest.mark.asyncio
async def test_simulation_is_unwrapped_before_babylon():
    rpc = FakeRpc(protocol=ATHENS)
    await RpcEstimateProvider(make_context(rpc)).transfer(to=DEST, amount=2)

    [sent] = rpc.called("run_operation")
    assert "chain_id" not in sent
    assert sent["signature"] == SIGNATURE_STUB
    assert rpc.called("get_chain_id") == []


@pytest.mark.asyncio
async def test_delegation_gas_has_a_floor():
    rpc = FakeRpc(consumed_gas="0")
    est = await RpcEstimateProvider(make_context(rpc)).set_delegate(delegate="tz1Baker")
    assert est.gas_limit == 10700
    assert est.storage_limit == 0


@pytest.mark.asyncio
async def test_register_delegate_points_at_signer():
    rpc = FakeRpc()
    await RpcEstimateProvider(make_context(rpc)).register_delegate()
    [sent] = rpc.called("run_operation")
    content = sent["operation"]["contents"][0]
    assert content["kind"] == "delegation"
    assert content["delegate"] == content["source"] == SOURCE


@pytest.mark.asyncio
async def test_originate_adds_origination_burn():
    rpc = FakeRpc(consumed_gas="11000", paid_storage="40")
    code = [
        {"prim": "parameter", "args": [{"prim": "unit"}]},
        {"prim": "storage", "args": [{"prim": "unit"}]},
        {"prim": "code", "args": [[]]},
    ]
    est = await RpcEstimateProvider(make_context(rpc)).originate(code=code, init={"prim": "Unit"})
    assert est.storage_limit == 40 + 257
    assert est.gas_limit == 11100


@pytest.mark.asyncio
async def test_identical_inputs_give_identical_estimates():
    rpc = FakeRpc()
    provider = RpcEstimateProvider(make_context(rpc))
    first = await provider.transfer(to=DEST, amount=1)
    second = await provider.transfer(to=DEST, amount=1)
    assert first == second
    assert first.to_dict() == second.to_dict()


@pytest.mark.asyncio
async def test_record_and_keywords_are_exclusive():
    from tzkit.operations.builders import TransferParams

    provider = RpcEstimateProvider(make_context())
    with pytest.raises(TypeError):
        await provider.transfer(TransferParams(to=DEST, amount=1), amount=2)
