# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import json
import logging
from typing import Any, Dict, List, Optional, Sequence, Tuple

import httpx

from .account import BaseAccount
from .coins import Coins, CoinsInput
from .metadata import Metadata
from .numeric import Numeric
from .staking import Delegation, StakingPool, UnbondingDelegation, Validator


class ClientConfig:
    """Common configuration for clients, particularly for estimating fees and submitting transactions"""

    chain_id: str = "dimension_37-1"
    gas_prices: CoinsInput = "850000000000axpla"
    gas_adjustment: Optional[Numeric] = None
    fee_denoms: Sequence[str] = ("axpla",)
    is_classic: bool = False
    http2: bool = False
    request_timeout: float = 60.0


class LCDClient:
    """A wrapper around the REST API (LCD) of a Cosmos SDK node"""

    client: httpx.AsyncClient
    client_config: ClientConfig
    base_url: str

    def __init__(
        self,
        base_url: str,
        client_config: ClientConfig = ClientConfig(),
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        from .tx_api import TxAPI

        self.base_url = base_url.rstrip("/")
        # Default limits
        limits = httpx.Limits()
        # Do not set a pool timeout, since the idea is that jobs will wait as long as progress is
        # being made.
        timeout = httpx.Timeout(client_config.request_timeout, pool=None)
        # Default headers
        headers = {Metadata.XPLA_HEADER: Metadata.get_xpla_header_val()}
        self.client = httpx.AsyncClient(
            http2=client_config.http2,
            limits=limits,
            timeout=timeout,
            headers=headers,
            transport=transport,
        )
        self.client_config = client_config
        self.auth = AuthAPI(self)
        self.bank = BankAPI(self)
        self.staking = StakingAPI(self)
        self.tendermint = TendermintAPI(self)
        self.tx = TxAPI(self)

    @property
    def config(self) -> ClientConfig:
        return self.client_config

    async def close(self):
        await self.client.aclose()

    async def get(self, endpoint: str, params: Optional[Dict[str, Any]] = None) -> Any:
        """GETs endpoint and returns the decoded JSON body, raising on any error status."""
        response = await self._get(endpoint, params)
        if response.status_code >= 400:
            raise error_from_response(response)
        return _json(response)

    async def get_raw(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> Any:
        """
        GETs endpoint and returns the decoded JSON body whatever the status, so callers can
        inspect error payloads the node embeds in its responses.
        """
        response = await self._get(endpoint, params)
        return _json(response)

    async def post(self, endpoint: str, data: Optional[Dict[str, Any]] = None) -> Any:
        response = await self._post(endpoint, data=data)
        if response.status_code >= 400:
            raise error_from_response(response)
        return _json(response)

    async def _post(
        self,
        endpoint: str,
        params: Optional[Dict[str, Any]] = None,
        headers: Optional[Dict[str, Any]] = None,
        data: Optional[Dict[str, Any]] = None,
    ) -> httpx.Response:
        # format params:
        params = {} if params is None else params
        params = {key: val for key, val in params.items() if val is not None}
        logging.debug(f"POST {endpoint}")
        return await self.client.post(
            url=self._url(endpoint),
            params=params,
            headers=headers,
            json=data,
        )

    async def _get(
        self, endpoint: str, params: Optional[Dict[str, Any]] = None
    ) -> httpx.Response:
        # format params:
        params = {} if params is None else params
        params = {key: val for key, val in params.items() if val is not None}
        logging.debug(f"GET {endpoint}")
        return await self.client.get(
            url=self._url(endpoint),
            params=params,
        )

    def _url(self, endpoint: str) -> str:
        return f"{self.base_url}/{endpoint.lstrip('/')}"


class AuthAPI:
    lcd: LCDClient

    def __init__(self, lcd: LCDClient):
        self.lcd = lcd

    async def account_info(self, address: str) -> BaseAccount:
        """
        Fetch the account number, sequence number and public key of an address. Accounts that never
        signed a transaction have no public key yet.
        """
        try:
            data = await self.lcd.get(f"/cosmos/auth/v1beta1/accounts/{address}")
        except ValidationError:
            raise
        except ApiError as error:
            if error.status_code == 404 or is_not_found(error.payload):
                raise AccountNotFound(f"{address}", address)
            raise
        return BaseAccount.from_data(data["account"])


Pagination = Optional[Dict[str, Any]]


class BankAPI:
    lcd: LCDClient

    def __init__(self, lcd: LCDClient):
        self.lcd = lcd

    async def balance(
        self, address: str, params: Optional[Dict[str, Any]] = None
    ) -> Tuple[Coins, Pagination]:
        """Every balance of an address, with the pagination the node reports."""
        data = await self.lcd.get(f"/cosmos/bank/v1beta1/balances/{address}", params)
        return (Coins.from_data(data.get("balances")), data.get("pagination"))

    async def total(
        self, params: Optional[Dict[str, Any]] = None
    ) -> Tuple[Coins, Pagination]:
        """The total supply of every denomination."""
        data = await self.lcd.get("/cosmos/bank/v1beta1/supply", params)
        return (Coins.from_data(data.get("supply")), data.get("pagination"))

    async def parameters(self) -> Dict[str, Any]:
        data = await self.lcd.get("/cosmos/bank/v1beta1/params")
        return data["params"]


class StakingAPI:
    lcd: LCDClient

    def __init__(self, lcd: LCDClient):
        self.lcd = lcd

    async def delegations(
        self,
        delegator: Optional[str] = None,
        validator: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[Delegation], Pagination]:
        """
        Delegations of a delegator, to a validator, or the single delegation between the two when
        both are given.
        """
        if delegator is not None and validator is not None:
            data = await self.lcd.get(
                f"/cosmos/staking/v1beta1/validators/{validator}/delegations/{delegator}",
                params,
            )
            return ([Delegation.from_data(data["delegation_response"])], None)
        if delegator is not None:
            endpoint = f"/cosmos/staking/v1beta1/delegations/{delegator}"
        elif validator is not None:
            endpoint = f"/cosmos/staking/v1beta1/validators/{validator}/delegations"
        else:
            raise ValueError("Either a delegator or a validator is required")
        data = await self.lcd.get(endpoint, params)
        return (
            [Delegation.from_data(item) for item in data.get("delegation_responses") or []],
            data.get("pagination"),
        )

    async def unbonding_delegations(
        self,
        delegator: Optional[str] = None,
        validator: Optional[str] = None,
        params: Optional[Dict[str, Any]] = None,
    ) -> Tuple[List[UnbondingDelegation], Pagination]:
        if delegator is not None and validator is not None:
            data = await self.lcd.get(
                f"/cosmos/staking/v1beta1/validators/{validator}/delegations/{delegator}/unbonding_delegation",
                params,
            )
            return ([UnbondingDelegation.from_data(data["unbond"])], None)
        if delegator is not None:
            endpoint = f"/cosmos/staking/v1beta1/delegators/{delegator}/unbonding_delegations"
        elif validator is not None:
            endpoint = f"/cosmos/staking/v1beta1/validators/{validator}/unbonding_delegations"
        else:
            raise ValueError("Either a delegator or a validator is required")
        data = await self.lcd.get(endpoint, params)
        return (
            [
                UnbondingDelegation.from_data(item)
                for item in data.get("unbonding_responses") or []
            ],
            data.get("pagination"),
        )

    async def validators(
        self, params: Optional[Dict[str, Any]] = None
    ) -> Tuple[List[Validator], Pagination]:
        data = await self.lcd.get("/cosmos/staking/v1beta1/validators", params)
        return (
            [Validator.from_data(item) for item in data.get("validators") or []],
            data.get("pagination"),
        )

    async def validator(self, validator: str) -> Validator:
        data = await self.lcd.get(f"/cosmos/staking/v1beta1/validators/{validator}")
        return Validator.from_data(data["validator"])

    async def pool(self) -> StakingPool:
        """Bonded and unbonded token totals, in the staking module's bond denomination."""
        parameters = await self.parameters()
        data = await self.lcd.get("/cosmos/staking/v1beta1/pool")
        return StakingPool.from_data(data["pool"], parameters["bond_denom"])

    async def parameters(self) -> Dict[str, Any]:
        """Staking parameters; unbonding_time is converted to seconds."""
        data = await self.lcd.get("/cosmos/staking/v1beta1/params")
        parameters = dict(data["params"])
        parameters["unbonding_time"] = _seconds(parameters["unbonding_time"])
        for key in ("max_validators", "max_entries", "historical_entries"):
            parameters[key] = int(parameters[key])
        return parameters

    async def validators_with_voting_power(self) -> Dict[str, Dict[str, Any]]:
        """
        Bonded validators keyed by operator address, each with its voting power and proposer
        priority from the latest validator set.
        """
        (validators, _) = await self.validators(
            {"status": "BOND_STATUS_BONDED", "pagination.limit": "1000"}
        )
        validator_set = await self.lcd.tendermint.validator_set()

        by_consensus_key = {
            entry["pub_key"]["key"]: entry for entry in validator_set["validators"]
        }
        result = {}
        for validator in validators:
            entry = by_consensus_key.get(validator.consensus_pubkey.get("key"))
            if entry is None:
                continue
            result[validator.operator_address] = {
                "validator_info": validator,
                "voting_power": int(entry["voting_power"]),
                "proposer_priority": int(entry["proposer_priority"]),
            }
        return result


class TendermintAPI:
    lcd: LCDClient

    def __init__(self, lcd: LCDClient):
        self.lcd = lcd

    async def block_info(self, height: Optional[int] = None) -> Dict[str, Any]:
        """Fetch a block by height, or the latest block if height is None."""
        block = "latest" if height is None else str(height)
        return await self.lcd.get(f"/cosmos/base/tendermint/v1beta1/blocks/{block}")

    async def validator_set(
        self, height: Optional[int] = None, params: Optional[Dict[str, Any]] = None
    ) -> Dict[str, Any]:
        """The consensus validator set at height, or at the latest block if height is None."""
        block = "latest" if height is None else str(height)
        return await self.lcd.get(
            f"/cosmos/base/tendermint/v1beta1/validatorsets/{block}",
            {"pagination.limit": "1000"} if params is None else params,
        )


def _json(response: httpx.Response) -> Any:
    try:
        return response.json()
    except json.JSONDecodeError:
        raise ApiError(response.text, response.status_code)


def _seconds(duration: str) -> int:
    """Durations arrive as strings such as "1814400s"."""
    return int(float(duration.rstrip("s")))


def is_not_found(payload: Any) -> bool:
    """Cosmos SDK nodes answer missing objects with gRPC code 5 (NotFound)."""
    if not isinstance(payload, dict):
        return False
    if payload.get("code") in (5, "5"):
        return True
    return "not found" in str(payload.get("message", "")).lower()


def error_from_response(response: httpx.Response) -> ApiError:
    try:
        payload = response.json()
    except json.JSONDecodeError:
        payload = None
    message = response.text
    if isinstance(payload, dict) and "message" in payload:
        message = payload["message"]
    if response.status_code == 400:
        return ValidationError(message, response.status_code, payload)
    return ApiError(message, response.status_code, payload)


class ApiError(Exception):
    """The API returned a non-success status code, e.g., >= 400"""

    status_code: int
    payload: Any

    def __init__(self, message: str, status_code: int, payload: Any = None):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.status_code = status_code
        self.payload = payload


class ValidationError(ApiError):
    """The node refused the request itself, e.g., a malformed address"""


class AccountNotFound(Exception):
    """The account was not found"""

    account: str

    def __init__(self, message: str, account: str):
        # Call the base class constructor with the parameters it needs
        super().__init__(message)
        self.account = account


class ApiResponseError(Exception):
    """The response matched neither the success nor the error shape of the endpoint"""

    payload: Any

    def __init__(self, message: str, payload: Any):
        super().__init__(message)
        self.payload = payload


import unittest

from .coins import Coin


class Test(unittest.IsolatedAsyncioTestCase):
    address = "xpla1x46rqay4d3cssq8gxxvqz8xt6nwlz4td20k38v"

    def lcd(self, handler) -> LCDClient:
        return LCDClient("https://lcd.example/", transport=httpx.MockTransport(handler))

    async def test_account_info(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(
                200,
                json={
                    "account": {
                        "@type": "/cosmos.auth.v1beta1.BaseAccount",
                        "address": self.address,
                        "pub_key": None,
                        "account_number": "4",
                        "sequence": "17",
                    }
                },
            )

        lcd = self.lcd(handler)
        account = await lcd.auth.account_info(self.address)
        await lcd.close()
        self.assertEqual(account.get_sequence_number(), 17)
        self.assertEqual(
            requests[0].url.path, f"/cosmos/auth/v1beta1/accounts/{self.address}"
        )
        self.assertIn(Metadata.XPLA_HEADER, requests[0].headers)

    async def test_account_not_found(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                404, json={"code": 5, "message": "account not found", "details": []}
            )

        lcd = self.lcd(handler)
        with self.assertRaises(AccountNotFound) as context:
            await lcd.auth.account_info(self.address)
        self.assertEqual(context.exception.account, self.address)

    async def test_malformed_address(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(
                400,
                json={"code": 3, "message": "decoding bech32 failed", "details": []},
            )

        lcd = self.lcd(handler)
        with self.assertRaises(ValidationError) as context:
            await lcd.auth.account_info("xpla1nope")
        self.assertEqual(context.exception.status_code, 400)
        self.assertEqual(str(context.exception), "decoding bech32 failed")

    async def test_get_raw_keeps_error_payload(self):
        payload = {"code": 5, "message": "tx not found", "details": []}

        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(404, json=payload)

        lcd = self.lcd(handler)
        self.assertEqual(await lcd.get_raw("/cosmos/tx/v1beta1/txs/ABC"), payload)
        with self.assertRaises(ApiError):
            await lcd.get("/cosmos/tx/v1beta1/txs/ABC")

    async def test_get_drops_none_params(self):
        requests = []

        def handler(request: httpx.Request) -> httpx.Response:
            requests.append(request)
            return httpx.Response(200, json={})

        lcd = self.lcd(handler)
        await lcd.get("cosmos/tx/v1beta1/txs", {"limit": 10, "offset": None})
        self.assertEqual(str(requests[0].url), "https://lcd.example/cosmos/tx/v1beta1/txs?limit=10")

    async def test_block_info(self):
        paths = []

        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json={"block": {"data": {"txs": []}}})

        lcd = self.lcd(handler)
        await lcd.tendermint.block_info()
        await lcd.tendermint.block_info(100)
        self.assertEqual(
            paths,
            [
                "/cosmos/base/tendermint/v1beta1/blocks/latest",
                "/cosmos/base/tendermint/v1beta1/blocks/100",
            ],
        )

    async def test_non_json_response(self):
        def handler(request: httpx.Request) -> httpx.Response:
            return httpx.Response(502, text="Bad Gateway")

        lcd = self.lcd(handler)
        with self.assertRaises(ApiError) as context:
            await lcd.get_raw("/cosmos/tx/v1beta1/txs/ABC")
        self.assertEqual(context.exception.status_code, 502)

    def routes(self, responses: Dict[str, Any], paths: List[str]):
        def handler(request: httpx.Request) -> httpx.Response:
            paths.append(request.url.path)
            return httpx.Response(200, json=responses[request.url.path])

        return self.lcd(handler)

    async def test_bank(self):
        paths: List[str] = []
        lcd = self.routes(
            {
                f"/cosmos/bank/v1beta1/balances/{self.address}": {
                    "balances": [
                        {"denom": "axpla", "amount": "1000"},
                        {"denom": "ibc/ABC", "amount": "5"},
                    ],
                    "pagination": {"next_key": None, "total": "2"},
                },
                "/cosmos/bank/v1beta1/supply": {
                    "supply": [{"denom": "axpla", "amount": "99"}],
                    "pagination": None,
                },
                "/cosmos/bank/v1beta1/params": {
                    "params": {"send_enabled": [], "default_send_enabled": True}
                },
            },
            paths,
        )
        (balance, pagination) = await lcd.bank.balance(self.address)
        self.assertEqual(balance, Coins({"axpla": 1000, "ibc/ABC": 5}))
        self.assertEqual(pagination["total"], "2")
        (supply, _) = await lcd.bank.total()
        self.assertEqual(supply, Coins("99axpla"))
        self.assertTrue((await lcd.bank.parameters())["default_send_enabled"])
        await lcd.close()

    async def test_staking_delegations(self):
        validator = "xplavaloper1gtw2uxdkdt3tvq790ckjz8jm8qgwkdw3uptstn"
        response = {
            "delegation": {
                "delegator_address": self.address,
                "validator_address": validator,
                "shares": "10.000000000000000000",
            },
            "balance": {"denom": "axpla", "amount": "10"},
        }
        paths: List[str] = []
        lcd = self.routes(
            {
                f"/cosmos/staking/v1beta1/validators/{validator}/delegations/{self.address}": {
                    "delegation_response": response
                },
                f"/cosmos/staking/v1beta1/delegations/{self.address}": {
                    "delegation_responses": [response],
                    "pagination": {"total": "1"},
                },
                f"/cosmos/staking/v1beta1/validators/{validator}/delegations": {
                    "delegation_responses": [response, response],
                    "pagination": {"total": "2"},
                },
            },
            paths,
        )
        (both, _) = await lcd.staking.delegations(self.address, validator)
        (by_delegator, _) = await lcd.staking.delegations(self.address)
        (by_validator, pagination) = await lcd.staking.delegations(validator=validator)
        self.assertEqual(both, by_delegator)
        self.assertEqual(both[0].balance.amount, 10)
        self.assertEqual(len(by_validator), 2)
        self.assertEqual(pagination["total"], "2")
        with self.assertRaises(ValueError):
            await lcd.staking.delegations()
        with self.assertRaises(ValueError):
            await lcd.staking.unbonding_delegations()
        self.assertEqual(len(paths), 3)
        await lcd.close()

    async def test_staking_pool_and_validators(self):
        consensus_key = "nVwYoS2Oa3Zc6hNvkPdB9KGSmPD6QG4MbgSxuxl/Kic="
        validator = {
            "operator_address": "xplavaloper1a",
            "consensus_pubkey": {"@type": "/cosmos.crypto.ed25519.PubKey", "key": consensus_key},
            "jailed": False,
            "status": "BOND_STATUS_BONDED",
            "tokens": "500",
            "delegator_shares": "500.000000000000000000",
            "description": {"moniker": "node0"},
            "unbonding_height": "0",
            "unbonding_time": "1970-01-01T00:00:00Z",
            "commission": {},
            "min_self_delegation": "1",
        }
        paths: List[str] = []
        lcd = self.routes(
            {
                "/cosmos/staking/v1beta1/params": {
                    "params": {
                        "unbonding_time": "1814400s",
                        "max_validators": 100,
                        "max_entries": 7,
                        "historical_entries": 10000,
                        "bond_denom": "axpla",
                    }
                },
                "/cosmos/staking/v1beta1/pool": {
                    "pool": {"bonded_tokens": "500", "not_bonded_tokens": "3"}
                },
                "/cosmos/staking/v1beta1/validators": {
                    "validators": [validator],
                    "pagination": {"total": "1"},
                },
                "/cosmos/base/tendermint/v1beta1/validatorsets/latest": {
                    "block_height": "10",
                    "validators": [
                        {
                            "address": "xplavalcons1a",
                            "pub_key": {"@type": "/cosmos.crypto.ed25519.PubKey", "key": consensus_key},
                            "voting_power": "500",
                            "proposer_priority": "-20",
                        }
                    ],
                },
            },
            paths,
        )
        parameters = await lcd.staking.parameters()
        self.assertEqual(parameters["unbonding_time"], 1814400)
        self.assertEqual(parameters["max_validators"], 100)

        pool = await lcd.staking.pool()
        self.assertEqual(pool.bonded_tokens, Coin("axpla", 500))
        self.assertEqual(pool.not_bonded_tokens, Coin("axpla", 3))

        (validators, _) = await lcd.staking.validators()
        self.assertEqual(validators[0].tokens, 500)

        with_power = await lcd.staking.validators_with_voting_power()
        self.assertEqual(with_power["xplavaloper1a"]["voting_power"], 500)
        self.assertEqual(with_power["xplavaloper1a"]["proposer_priority"], -20)
        self.assertEqual(with_power["xplavaloper1a"]["validator_info"], validators[0])
        await lcd.close()

    def test_config_instances_do_not_share_fee_denoms(self):
        with self.assertRaises(AttributeError):
            ClientConfig().fee_denoms.append("uatom")  # type: ignore
        first = ClientConfig()
        first.fee_denoms = ["uatom"]
        self.assertEqual(ClientConfig().fee_denoms, ("axpla",))
        self.assertEqual(ClientConfig.fee_denoms, ("axpla",))


if __name__ == "__main__":
    unittest.main()
