"""Unit tests for the bundled ABIs and the eth-abi codec wrapper."""

from __future__ import annotations

import pytest
from eth_abi import decode, encode

from ntdbank.chain.abi import (
    abi_type,
    decode_function_result,
    encode_function_call,
    find_function,
    function_signature,
    label_outputs,
    load_abi,
)
from ntdbank.errors import RemoteCallError, ValidationError
from ntdbank.units import BYTES32, coerce_argument, render_value

ALICE = "0xf39Fd6e51aad88F6F4ce6aB8827279cffFb92266"
MINTER_ROLE = "0x9f2df0fed2c77648de5860a4cc508cd0818c85b8b8a1ab4ceeef8d981c8956a6"


@pytest.fixture()
def token_abi() -> list[dict]:
    return load_abi("NTDToken")


@pytest.fixture()
def deposit_abi() -> list[dict]:
    return load_abi("DepositProduct")


class TestLoadAbi:
    @pytest.mark.parametrize("name", ["NTDToken", "CreditCardProduct", "DepositProduct"])
    def test_bundled_abis_load(self, name: str) -> None:
        abi = load_abi(name)
        assert abi
        assert all(entry["type"] == "function" for entry in abi)

    def test_unknown_abi(self) -> None:
        with pytest.raises(FileNotFoundError):
            load_abi("Nope")


class TestEncode:
    def test_balance_of_selector(self, token_abi: list[dict]) -> None:
        calldata = encode_function_call(token_abi, "balanceOf", [ALICE])
        assert calldata.startswith("0x70a08231")
        assert calldata.endswith(ALICE[2:].lower())
        assert len(calldata) == 2 + 8 + 64

    def test_transfer_selector(self, token_abi: list[dict]) -> None:
        calldata = encode_function_call(token_abi, "transfer", [ALICE, 1])
        assert calldata.startswith("0xa9059cbb")

    def test_grant_role_selector(self, token_abi: list[dict]) -> None:
        calldata = encode_function_call(token_abi, "grantRole", [b"\x00" * 32, ALICE])
        assert calldata.startswith("0x2f2ff15d")

    def test_no_args(self, token_abi: list[dict]) -> None:
        assert encode_function_call(token_abi, "name", []) == "0x06fdde03"

    def test_unknown_function(self, token_abi: list[dict]) -> None:
        with pytest.raises(ValidationError, match="not found"):
            encode_function_call(token_abi, "rugPull", [])

    def test_wrong_arity(self, token_abi: list[dict]) -> None:
        with pytest.raises(ValidationError, match="takes 1 argument"):
            encode_function_call(token_abi, "balanceOf", [])

    def test_unencodable_argument(self, token_abi: list[dict]) -> None:
        with pytest.raises(ValidationError, match="Cannot encode"):
            encode_function_call(token_abi, "balanceOf", ["not-an-address"])

    def test_tuple_signature(self, deposit_abi: list[dict]) -> None:
        func = find_function(deposit_abi, "getUserDeposits")
        assert function_signature(func) == "getUserDeposits(address)"
        assert abi_type(func["outputs"][0]) == "(uint256,uint256,uint256,uint256,bool)[]"


class TestDecode:
    def test_single_output(self, token_abi: list[dict]) -> None:
        data = "0x" + encode(["string"], ["New Taiwan Dollar"]).hex()
        assert decode_function_result(token_abi, "name", data) == "New Taiwan Dollar"

    def test_address_output(self, deposit_abi: list[dict]) -> None:
        data = "0x" + encode(["address"], [ALICE]).hex()
        assert decode_function_result(deposit_abi, "bankAdmin", data).lower() == ALICE.lower()

    def test_struct_array_is_labelled(self, deposit_abi: list[dict]) -> None:
        data = "0x" + encode(
            ["(uint256,uint256,uint256,uint256,bool)[]"],
            [[(10**18, 1_700_000_000, 2_592_000, 150, False)]],
        ).hex()
        deposits = decode_function_result(deposit_abi, "getUserDeposits", data)
        assert deposits == [
            {
                "amount": 10**18,
                "startTime": 1_700_000_000,
                "period": 2_592_000,
                "interestRate": 150,
                "withdrawn": False,
            }
        ]

    def test_multiple_outputs(self, deposit_abi: list[dict]) -> None:
        data = "0x" + encode(["address[]", "uint256[]"], [[ALICE], [3]]).hex()
        users, ids = decode_function_result(deposit_abi, "getAllActiveDeposits", data)
        assert [u.lower() for u in users] == [ALICE.lower()]
        assert ids == (3,)
        labelled = label_outputs(deposit_abi, "getAllActiveDeposits", (users, ids))
        assert list(labelled) == ["users", "depositIds"]
        assert labelled["depositIds"] == (3,)

    def test_label_outputs_leaves_single_output(self, token_abi: list[dict]) -> None:
        assert label_outputs(token_abi, "decimals", 18) == 18

    def test_no_outputs(self, token_abi: list[dict]) -> None:
        assert decode_function_result(token_abi, "pause", "0x") is None

    def test_empty_return_data(self, token_abi: list[dict]) -> None:
        with pytest.raises(RemoteCallError, match="Cannot decode"):
            decode_function_result(token_abi, "totalSupply", "0x")


class TestRoundTrip:
    def test_role_and_account_survive_calldata(self, token_abi: list[dict]) -> None:
        role = coerce_argument(BYTES32, "0x" + MINTER_ROLE[2:].upper())
        calldata = encode_function_call(token_abi, "hasRole", [role, ALICE])

        decoded_role, decoded_account = decode(["bytes32", "address"], bytes.fromhex(calldata[10:]))

        assert render_value(decoded_role) == MINTER_ROLE
        assert decoded_account.lower() == ALICE.lower()

    def test_role_result_rendered_as_hex(self, token_abi: list[dict]) -> None:
        data = "0x" + encode(["bytes32"], [bytes.fromhex(MINTER_ROLE[2:])]).hex()
        value = decode_function_result(token_abi, "MINTER_ROLE", data)
        assert render_value(value) == MINTER_ROLE
