# Copyright © XPLA SDK Contributors
# SPDX-License-Identifier: Apache-2.0

from __future__ import annotations

import asyncio
import base64
import hashlib
import logging
import typing
from typing import Any, Dict, List, Optional, Sequence, Tuple, Union

from .async_client import ApiError, ApiResponseError, is_not_found
from .broadcast_result import (
    AsyncTxBroadcastResult,
    BlockTxBroadcastResult,
    SyncTxBroadcastResult,
    TxError,
    WaitTxBroadcastResult,
    is_tx_error,
)
from .coins import Coins, CoinsInput
from .evm import skips_message_handling
from .msg import b64encode
from .numeric import Numeric, ceil_int, parse_uint64, to_decimal
from .polling import RetriesExhausted, RetryPolicy, retry_with_fixed_interval
from .tx import AuthInfo, Fee, SignerData, SignerOptions, Tx, TxBody
from .tx_info import TxInfo

if typing.TYPE_CHECKING:
    from .async_client import LCDClient

# Seconds between two lookups of a transaction that is not indexed yet
POLL_INTERVAL = 0.5

DEFAULT_GAS_ADJUSTMENT = 2.0


def hash_to_hex(tx_bytes: str) -> str:
    """SHA-256 of base64 encoded transaction bytes, as upper case hex like the node reports it."""
    return hashlib.sha256(base64.b64decode(tx_bytes)).hexdigest().upper()


class CreateTxOptions:
    """
    Inputs for building a transaction. Fields left as None fall back to the client configuration
    or, for the fee, to a simulated estimate.
    """

    msgs: List[Any]
    fee: Optional[Fee]
    memo: Optional[str]
    gas: Optional[Union[str, int]]
    gas_prices: Optional[CoinsInput]
    gas_adjustment: Optional[Numeric]
    fee_denoms: Optional[List[str]]
    timeout_height: Optional[int]

    def __init__(
        self,
        msgs: List[Any],
        fee: Optional[Fee] = None,
        memo: Optional[str] = None,
        gas: Optional[Union[str, int]] = None,
        gas_prices: Optional[CoinsInput] = None,
        gas_adjustment: Optional[Numeric] = None,
        fee_denoms: Optional[List[str]] = None,
        timeout_height: Optional[int] = None,
    ):
        self.msgs = msgs
        self.fee = fee
        self.memo = memo
        self.gas = gas
        self.gas_prices = gas_prices
        self.gas_adjustment = gas_adjustment
        self.fee_denoms = fee_denoms
        self.timeout_height = timeout_height


class TxSearchResult:
    txs: List[TxInfo]
    pagination: Optional[Dict[str, Any]]

    def __init__(self, txs: List[TxInfo], pagination: Optional[Dict[str, Any]]):
        self.txs = txs
        self.pagination = pagination


class TxAPI:
    """Builds, estimates, encodes, broadcasts and looks up transactions."""

    lcd: LCDClient
    sleep: typing.Callable[[float], typing.Awaitable[None]]

    def __init__(self, lcd: LCDClient):
        self.lcd = lcd
        self.sleep = asyncio.sleep

    @property
    def is_classic(self) -> bool:
        return self.lcd.client_config.is_classic

    #
    # Lookups
    #

    async def tx_info(
        self, tx_hash: str, params: Optional[Dict[str, Any]] = None
    ) -> TxInfo:
        """
        Looks up a transaction by hash. Raises TxNotFound while the node has not indexed it and
        ApiResponseError for any other answer that is not a transaction.
        """
        data = await self.lcd.get_raw(f"/cosmos/tx/v1beta1/txs/{tx_hash}", params)
        if isinstance(data, dict) and "tx_response" in data:
            return TxInfo.from_data(data["tx_response"], self.is_classic)
        if isinstance(data, dict) and "code" in data and is_not_found(data):
            raise TxNotFound(tx_hash, TxError.from_data(data))
        raise ApiResponseError(f"Unable to get the TxInfo of {tx_hash}", data)

    async def tx_hashes_by_height(self, height: Optional[int] = None) -> List[str]:
        """Hashes of the transactions in a block, or in the latest block if height is None."""
        block_info = await self.lcd.tendermint.block_info(height)
        txs = block_info["block"]["data"].get("txs") or []
        return [hash_to_hex(tx) for tx in txs]

    async def tx_infos_by_height(
        self, height: Optional[int] = None, timeout: float = 30.0
    ) -> List[TxInfo]:
        """
        Looks up every transaction of a block. The block may not be indexed yet, so the first
        transaction is polled for up to timeout seconds before the rest are read one by one.
        """
        tx_hashes = await self.tx_hashes_by_height(height)
        if len(tx_hashes) == 0:
            return []

        tx_infos = [await self._wait_for_tx_info(tx_hashes[0], timeout)]
        for tx_hash in tx_hashes[1:]:
            tx_infos.append(await self.tx_info(tx_hash))
        return tx_infos

    async def search(
        self,
        events: Optional[Sequence[Tuple[str, str]]] = None,
        query: Optional[str] = None,
        **params: Any,
    ) -> TxSearchResult:
        """
        Searches transactions by event attributes, e.g., events=[("message.sender", address)].
        Conditions are sent both as repeated "events" parameters and as a single AND-joined
        "query", which newer nodes expect; an explicit query takes precedence. Any other
        parameter, e.g., **{"pagination.limit": "10"}, is passed through.
        """
        conditions = []
        for (key, value) in events or []:
            if key == "tx.height":
                conditions.append(f"{key}={value}")
            else:
                conditions.append(f"{key}='{value}'")

        search_params: Dict[str, Any] = {}
        if conditions:
            search_params["events"] = conditions
        if query is not None:
            search_params["query"] = query
        elif conditions:
            search_params["query"] = " AND ".join(conditions)
        search_params.update(params)

        data = await self.lcd.get("/cosmos/tx/v1beta1/txs", search_params)
        return TxSearchResult(
            [
                TxInfo.from_data(tx_response, self.is_classic)
                for tx_response in data.get("tx_responses") or []
            ],
            data.get("pagination"),
        )

    #
    # Building
    #

    async def create(self, signers: List[SignerOptions], options: CreateTxOptions) -> Tx:
        """
        Builds an unsigned transaction. Sequence numbers and public keys the caller did not supply
        are read from the chain, and the fee is estimated unless options.fee is set.
        """
        signer_datas: List[SignerData] = []
        for signer in signers:
            sequence_number = signer.sequence_number
            public_key = signer.public_key

            if sequence_number is None or public_key is None:
                account = await self.lcd.auth.account_info(signer.address)
                if sequence_number is None:
                    sequence_number = account.get_sequence_number()
                if public_key is None:
                    public_key = account.get_public_key()

            signer_datas.append(SignerData(sequence_number, public_key))

        fee = options.fee
        if fee is None:
            fee = await self.estimate_fee(signer_datas, options)

        msgs = [] if skips_message_handling(options.msgs) else options.msgs
        return Tx(
            TxBody(msgs, options.memo or "", options.timeout_height or 0),
            AuthInfo([], fee),
            [],
        )

    async def estimate_fee(
        self, signers: List[SignerData], options: CreateTxOptions
    ) -> Fee:
        """
        Estimates the fee of a transaction by simulating it within the node. The amount is the gas
        price times the estimated gas, rounded up per denomination.
        """
        config = self.lcd.client_config
        gas_prices = (
            options.gas_prices if options.gas_prices is not None else config.gas_prices
        )
        gas_adjustment = (
            options.gas_adjustment
            if options.gas_adjustment is not None
            else config.gas_adjustment
        )
        fee_denoms = (
            options.fee_denoms if options.fee_denoms is not None else config.fee_denoms
        )

        gas_prices_coins: Optional[Coins] = None
        if gas_prices:
            gas_prices_coins = Coins(gas_prices)
            if fee_denoms:
                filtered = gas_prices_coins.filter(lambda coin: coin.denom in fee_denoms)
                # Never filter away every price.
                if len(filtered) > 0:
                    gas_prices_coins = filtered

        if skips_message_handling(options.msgs):
            return Fee(0, "0axpla")

        tx = Tx(TxBody(options.msgs, options.memo or ""), AuthInfo([], Fee(0, Coins())), [])
        tx.append_empty_signatures(signers)

        gas = options.gas
        if not gas or gas == "auto" or gas == "0":
            gas_limit = await self.estimate_gas(tx, gas_adjustment)
        else:
            gas_limit = parse_uint64(gas, "gas")

        if gas_prices_coins:
            amount: CoinsInput = gas_prices_coins.mul(gas_limit).to_int_ceil_coins()
        else:
            amount = "0axpla"
        return Fee(gas_limit, amount)

    async def estimate_gas(
        self,
        tx: Tx,
        gas_adjustment: Optional[Numeric] = None,
        signers: Optional[List[SignerData]] = None,
    ) -> int:
        """
        Simulates tx and returns the gas used scaled by gas_adjustment, rounded up. An unsigned tx
        needs signers so placeholder signatures can be attached.
        """
        if gas_adjustment is None:
            gas_adjustment = self.lcd.client_config.gas_adjustment
        if gas_adjustment is None:
            gas_adjustment = DEFAULT_GAS_ADJUSTMENT

        sim_tx = tx
        if len(tx.signatures) == 0:
            if not signers:
                raise ValueError("cannot append signature")
            sim_tx = Tx(tx.body, AuthInfo([], Fee(0, Coins())), [])
            sim_tx.append_empty_signatures(signers)

        logging.debug(f"Simulating tx with {len(sim_tx.body.messages)} messages")
        try:
            data = await self.lcd.post(
                "/cosmos/tx/v1beta1/simulate", {"tx_bytes": self.encode(sim_tx)}
            )
        except ApiError as error:
            if isinstance(error.payload, dict) and "code" in error.payload:
                raise ChainRejectionError(
                    TxError.from_data(error.payload), error.status_code
                ) from error
            raise

        try:
            gas_used = parse_uint64(data["gas_info"]["gas_used"], "gas_used")
        except (KeyError, TypeError):
            raise ApiResponseError("Unexpected simulate response", data)
        return ceil_int(to_decimal(gas_adjustment) * gas_used)

    #
    # Encoding
    #

    def encode(self, tx: Tx) -> str:
        """Encode a transaction to base64-encoded protobuf"""
        return b64encode(tx.to_bytes(self.is_classic))

    def decode(self, encoded_tx: str) -> Tx:
        """Decode a transaction from base64-encoded protobuf"""
        return Tx.from_bytes(base64.b64decode(encoded_tx), self.is_classic)

    def hash(self, tx: Tx) -> str:
        return hash_to_hex(self.encode(tx))

    #
    # Broadcasting
    #

    async def broadcast(self, tx: Tx, timeout: float = 60.0) -> WaitTxBroadcastResult:
        """
        Submits tx in sync mode and then polls for it until it is included in a block or timeout
        seconds pass. A submission the node rejects is returned as an error result right away.
        """
        sync_result = SyncTxBroadcastResult.from_data(
            await self._broadcast(tx, "BROADCAST_MODE_SYNC")
        )
        if is_tx_error(sync_result):
            logging.info(
                f"Transaction {sync_result.txhash} rejected with code {sync_result.code}"
            )
            return WaitTxBroadcastResult.rejected(sync_result)

        tx_info = await self._wait_for_tx_info(sync_result.txhash, timeout)
        logging.info(f"Transaction {tx_info.txhash} included at height {tx_info.height}")
        return WaitTxBroadcastResult.from_tx_info(tx_info)

    async def broadcast_block(self, tx: Tx) -> BlockTxBroadcastResult:
        """Broadcast the transaction using the "block" mode, waiting for its inclusion in the blockchain."""
        return BlockTxBroadcastResult.from_data(
            await self._broadcast(tx, "BROADCAST_MODE_BLOCK")
        )

    async def broadcast_sync(self, tx: Tx) -> SyncTxBroadcastResult:
        """Broadcast the transaction using the "sync" mode, returning after CheckTx() is performed."""
        return SyncTxBroadcastResult.from_data(
            await self._broadcast(tx, "BROADCAST_MODE_SYNC")
        )

    async def broadcast_async(self, tx: Tx) -> AsyncTxBroadcastResult:
        """Broadcast the transaction using the "async" mode, returns immediately (transaction might fail)."""
        return AsyncTxBroadcastResult.from_data(
            await self._broadcast(tx, "BROADCAST_MODE_ASYNC")
        )

    async def _broadcast(self, tx: Tx, mode: str) -> Dict[str, Any]:
        logging.debug(f"Broadcasting tx with {mode}")
        data = await self.lcd.post(
            "/cosmos/tx/v1beta1/txs", {"tx_bytes": self.encode(tx), "mode": mode}
        )
        if not isinstance(data, dict) or "tx_response" not in data:
            raise ApiResponseError("Unexpected broadcast response", data)
        return data["tx_response"]

    async def _wait_for_tx_info(self, tx_hash: str, timeout: float) -> TxInfo:
        policy = RetryPolicy.from_timeout(timeout, POLL_INTERVAL)
        try:
            return await retry_with_fixed_interval(
                lambda: self.tx_info(tx_hash), policy, (TxNotFound,), self.sleep
            )
        except RetriesExhausted as error:
            logging.warning(
                f"Transaction {tx_hash} not found after {error.attempts} attempts"
            )
            raise ConfirmationTimeoutError(tx_hash, timeout) from error


class ChainRejectionError(ApiError):
    """The node rejected a transaction it was asked to simulate"""

    tx_error: TxError

    def __init__(self, tx_error: TxError, status_code: int):
        super().__init__(str(tx_error), status_code, None)
        self.tx_error = tx_error


class TxNotFound(Exception):
    """The node has not indexed the transaction (yet)"""

    tx_hash: str
    tx_error: TxError

    def __init__(self, tx_hash: str, tx_error: TxError):
        super().__init__(f"{tx_hash}: {tx_error.message}")
        self.tx_hash = tx_hash
        self.tx_error = tx_error


class ConfirmationTimeoutError(Exception):
    """The transaction was submitted but did not show up in a block in time"""

    tx_hash: str
    timeout: float

    def __init__(self, tx_hash: str, timeout: float):
        super().__init__(
            f"Transaction was not included in a block before timeout of {timeout}s"
        )
        self.tx_hash = tx_hash
        self.timeout = timeout


import json
import unittest
import unittest.mock

import httpx

from .async_client import ClientConfig, LCDClient
from .bank import MsgSend
from .evm import EvmMessage
from .msgs import UnknownMsg
from .public_key import SimplePublicKey
from .tx_info import TxLog

NOT_FOUND = {
    "code": 5,
    "message": "rpc error: code = NotFound desc = tx not found: key not found",
    "details": [],
}


class FakeNode:
    """Answers LCD requests from canned responses, keyed by method and path."""

    def __init__(self):
        self.routes: Dict[Tuple[str, str], List[httpx.Response]] = {}
        self.requests: List[httpx.Request] = []

    def add(self, method: str, path: str, *responses: httpx.Response):
        self.routes.setdefault((method, path), []).extend(responses)

    def calls(self, method: str, path: str) -> List[httpx.Request]:
        return [r for r in self.requests if r.method == method and r.url.path == path]

    def handler(self, request: httpx.Request) -> httpx.Response:
        self.requests.append(request)
        responses = self.routes[(request.method, request.url.path)]
        # The last response repeats once the others are used up.
        return responses.pop(0) if len(responses) > 1 else responses[0]


class Test(unittest.IsolatedAsyncioTestCase):
    sender = "xpla1y4umfuqfg76t8mfcff6zzx7elvy93jtp4xcdvw"
    key = "AjszqFJDRAYbEjZMuiD+ChqzbUSGq/RRu3zr0R6iJB5b"

    async def asyncSetUp(self):
        self.node = FakeNode()
        config = ClientConfig()
        config.gas_prices = "0.15axpla"
        config.gas_adjustment = 1
        self.lcd = LCDClient(
            "https://lcd.example", config, httpx.MockTransport(self.node.handler)
        )
        self.sleep = unittest.mock.AsyncMock()
        self.lcd.tx.sleep = self.sleep

    async def asyncTearDown(self):
        await self.lcd.close()

    def send(self) -> MsgSend:
        return MsgSend(self.sender, self.sender, "1axpla")

    def signed_tx(self) -> Tx:
        tx = Tx(TxBody([self.send()], "memo"), AuthInfo([], Fee(1000, "150axpla")), [])
        tx.append_empty_signatures([SignerData(3, SimplePublicKey(self.key))])
        return tx

    def tx_response(self, txhash: str, code: int = 0) -> Dict[str, Any]:
        tx_data = self.signed_tx().to_data()
        tx_data["@type"] = "/cosmos.tx.v1beta1.Tx"
        return {
            "height": "120",
            "txhash": txhash,
            "codespace": "",
            "code": code,
            "raw_log": "",
            "logs": [{"msg_index": 0, "log": "", "events": []}],
            "gas_wanted": "1000",
            "gas_used": "800",
            "tx": tx_data,
            "timestamp": "2023-06-01T00:00:00Z",
        }

    def sync_response(self, code: int = 0) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "tx_response": {
                    "height": "0",
                    "txhash": "ABC",
                    "codespace": "sdk" if code else "",
                    "code": code,
                    "raw_log": "insufficient fees" if code else "[]",
                }
            },
        )

    def simulate_response(self, gas_used: str = "1000") -> httpx.Response:
        return httpx.Response(
            200, json={"gas_info": {"gas_wanted": "0", "gas_used": gas_used}, "result": {}}
        )

    def account_response(self) -> httpx.Response:
        return httpx.Response(
            200,
            json={
                "account": {
                    "@type": "/cosmos.auth.v1beta1.BaseAccount",
                    "address": self.sender,
                    "pub_key": {"@type": "/cosmos.crypto.secp256k1.PubKey", "key": self.key},
                    "account_number": "1",
                    "sequence": "42",
                }
            },
        )

    #
    # Builder
    #

    async def test_create_reads_missing_signer_data(self):
        self.node.add("GET", f"/cosmos/auth/v1beta1/accounts/{self.sender}", self.account_response())
        self.node.add("POST", "/cosmos/tx/v1beta1/simulate", self.simulate_response())

        tx = await self.lcd.tx.create(
            [SignerOptions(self.sender)], CreateTxOptions([self.send()], memo="hi")
        )
        self.assertEqual(tx.body.messages, [self.send()])
        self.assertEqual(tx.body.memo, "hi")
        self.assertEqual(tx.auth_info.fee, Fee(1000, "150axpla"))
        self.assertEqual(tx.signatures, [])

        simulated = self.lcd.tx.decode(
            json.loads(self.node.requests[-1].content)["tx_bytes"]
        )
        self.assertEqual(simulated.auth_info.signer_infos[0].sequence, 42)
        self.assertEqual(
            simulated.auth_info.signer_infos[0].public_key, SimplePublicKey(self.key)
        )
        self.assertEqual(simulated.signatures, [""])

    async def test_create_with_known_signer_and_fee(self):
        fee = Fee(200000, "1axpla")
        tx = await self.lcd.tx.create(
            [SignerOptions(self.sender, 7, SimplePublicKey(self.key))],
            CreateTxOptions([self.send()], fee=fee, timeout_height=99),
        )
        self.assertEqual(self.node.requests, [])
        self.assertEqual(tx.auth_info.fee, fee)
        self.assertEqual(tx.body.timeout_height, 99)

    async def test_create_evm(self):
        tx = await self.lcd.tx.create(
            [SignerOptions(self.sender, 7, SimplePublicKey(self.key))],
            CreateTxOptions(
                [EvmMessage("0x01", "0x02"), self.send()], memo="evm", timeout_height=5
            ),
        )
        self.assertEqual(tx.body.messages, [])
        self.assertEqual(tx.body.memo, "evm")
        self.assertEqual(tx.body.timeout_height, 5)
        self.assertEqual(tx.auth_info.fee, Fee(0, "0axpla"))
        self.assertEqual(self.node.requests, [])

    #
    # Estimator
    #

    async def test_estimate_fee_rounds_up(self):
        self.node.add("POST", "/cosmos/tx/v1beta1/simulate", self.simulate_response("1000"))
        fee = await self.lcd.tx.estimate_fee(
            [SignerData(1)], CreateTxOptions([self.send()])
        )
        self.assertEqual(fee.gas_limit, 1000)
        self.assertEqual(fee.amount, Coins({"axpla": 150}))

        self.node.routes.clear()
        self.node.add("POST", "/cosmos/tx/v1beta1/simulate", self.simulate_response("1001"))
        fee = await self.lcd.tx.estimate_fee(
            [SignerData(1)], CreateTxOptions([self.send()])
        )
        self.assertEqual(fee.amount, Coins({"axpla": 151}))

    async def test_estimate_fee_gas_adjustment(self):
        self.node.add("POST", "/cosmos/tx/v1beta1/simulate", self.simulate_response("1000"))
        fee = await self.lcd.tx.estimate_fee(
            [SignerData(1)], CreateTxOptions([self.send()], gas_adjustment="1.5")
        )
        self.assertEqual(fee.gas_limit, 1500)

    async def test_estimate_fee_empty_msgs_skips_simulate(self):
        fee = await self.lcd.tx.estimate_fee([SignerData(1)], CreateTxOptions([]))
        self.assertEqual(fee, Fee(0, "0axpla"))
        self.assertEqual(self.node.calls("POST", "/cosmos/tx/v1beta1/simulate"), [])

    async def test_estimate_fee_explicit_gas(self):
        fee = await self.lcd.tx.estimate_fee(
            [SignerData(1)], CreateTxOptions([self.send()], gas="5000")
        )
        self.assertEqual(fee, Fee(5000, "750axpla"))
        self.assertEqual(self.node.requests, [])

    async def test_fee_denoms(self):
        options = CreateTxOptions(
            [self.send()], gas="1000", gas_prices="0.15axpla,0.2uatom", fee_denoms=["uatom"]
        )
        fee = await self.lcd.tx.estimate_fee([SignerData(1)], options)
        self.assertEqual(fee.amount, Coins({"uatom": 200}))

        options.fee_denoms = ["uluna"]
        fee = await self.lcd.tx.estimate_fee([SignerData(1)], options)
        self.assertEqual(fee.amount, Coins({"axpla": 150, "uatom": 200}))

    async def test_estimate_gas_needs_signers(self):
        tx = Tx(TxBody([self.send()]), AuthInfo([], Fee(0, None)), [])
        with self.assertRaises(ValueError):
            await self.lcd.tx.estimate_gas(tx)
        self.assertEqual(self.node.requests, [])

    async def test_estimate_gas_default_adjustment(self):
        self.lcd.client_config.gas_adjustment = None
        self.node.add("POST", "/cosmos/tx/v1beta1/simulate", self.simulate_response("1000"))
        self.assertEqual(await self.lcd.tx.estimate_gas(self.signed_tx()), 2000)

    async def test_simulate_rejection(self):
        self.node.add(
            "POST",
            "/cosmos/tx/v1beta1/simulate",
            httpx.Response(
                400,
                json={"code": 13, "message": "insufficient fee", "codespace": "sdk"},
            ),
        )
        with self.assertRaises(ChainRejectionError) as context:
            await self.lcd.tx.estimate_gas(self.signed_tx())
        self.assertEqual(context.exception.tx_error.code, 13)
        self.assertTrue(is_tx_error(context.exception.tx_error))

    #
    # Broadcast
    #

    async def test_broadcast(self):
        self.node.add("POST", "/cosmos/tx/v1beta1/txs", self.sync_response())
        self.node.add(
            "GET",
            "/cosmos/tx/v1beta1/txs/ABC",
            httpx.Response(404, json=NOT_FOUND),
            httpx.Response(404, json=NOT_FOUND),
            httpx.Response(200, json={"tx_response": self.tx_response("ABC")}),
        )

        result = await self.lcd.tx.broadcast(self.signed_tx())
        self.assertFalse(is_tx_error(result))
        self.assertEqual(result.height, 120)
        self.assertEqual(result.gas_used, 800)
        self.assertEqual(result.logs, [TxLog(0, "", [])])
        self.assertEqual(len(self.node.calls("GET", "/cosmos/tx/v1beta1/txs/ABC")), 3)
        self.assertEqual(self.sleep.await_args_list, [unittest.mock.call(POLL_INTERVAL)] * 2)

        body = json.loads(self.node.calls("POST", "/cosmos/tx/v1beta1/txs")[0].content)
        self.assertEqual(body["mode"], "BROADCAST_MODE_SYNC")
        self.assertEqual(self.lcd.tx.decode(body["tx_bytes"]), self.signed_tx())

    async def test_broadcast_rejected_does_not_poll(self):
        self.node.add("POST", "/cosmos/tx/v1beta1/txs", self.sync_response(code=13))

        result = await self.lcd.tx.broadcast(self.signed_tx())
        self.assertTrue(is_tx_error(result))
        self.assertEqual(result.code, 13)
        self.assertEqual(result.raw_log, "insufficient fees")
        self.assertEqual(result.logs, [])
        self.assertEqual(self.node.calls("GET", "/cosmos/tx/v1beta1/txs/ABC"), [])
        self.sleep.assert_not_awaited()

    async def test_broadcast_timeout(self):
        self.node.add("POST", "/cosmos/tx/v1beta1/txs", self.sync_response())
        self.node.add("GET", "/cosmos/tx/v1beta1/txs/ABC", httpx.Response(404, json=NOT_FOUND))

        with self.assertRaises(ConfirmationTimeoutError) as context:
            await self.lcd.tx.broadcast(self.signed_tx(), timeout=0.001)
        self.assertEqual(context.exception.tx_hash, "ABC")
        self.assertEqual(len(self.node.calls("GET", "/cosmos/tx/v1beta1/txs/ABC")), 1)
        self.sleep.assert_not_awaited()

    async def test_broadcast_timeout_attempts(self):
        self.node.add("POST", "/cosmos/tx/v1beta1/txs", self.sync_response())
        self.node.add("GET", "/cosmos/tx/v1beta1/txs/ABC", httpx.Response(404, json=NOT_FOUND))

        with self.assertRaises(ConfirmationTimeoutError):
            await self.lcd.tx.broadcast(self.signed_tx(), timeout=2.0)
        self.assertEqual(len(self.node.calls("GET", "/cosmos/tx/v1beta1/txs/ABC")), 4)
        self.assertEqual(self.sleep.await_count, 3)

    async def test_broadcast_ambiguous_response_is_fatal(self):
        self.node.add("POST", "/cosmos/tx/v1beta1/txs", self.sync_response())
        self.node.add("GET", "/cosmos/tx/v1beta1/txs/ABC", httpx.Response(200, json={"foo": 1}))

        with self.assertRaises(ApiResponseError):
            await self.lcd.tx.broadcast(self.signed_tx())
        self.assertEqual(len(self.node.calls("GET", "/cosmos/tx/v1beta1/txs/ABC")), 1)

    async def test_broadcast_modes(self):
        self.node.add(
            "POST",
            "/cosmos/tx/v1beta1/txs",
            httpx.Response(200, json={"tx_response": {"height": "0", "txhash": "ABC"}}),
        )
        result = await self.lcd.tx.broadcast_async(self.signed_tx())
        self.assertEqual(result, AsyncTxBroadcastResult(0, "ABC"))
        body = json.loads(self.node.requests[-1].content)
        self.assertEqual(body["mode"], "BROADCAST_MODE_ASYNC")

        result = await self.lcd.tx.broadcast_sync(self.signed_tx())
        self.assertIsNone(result.code)
        self.assertEqual(json.loads(self.node.requests[-1].content)["mode"], "BROADCAST_MODE_SYNC")

        self.node.routes.clear()
        self.node.add(
            "POST",
            "/cosmos/tx/v1beta1/txs",
            httpx.Response(200, json={"tx_response": self.tx_response("ABC", code=5)}),
        )
        result = await self.lcd.tx.broadcast_block(self.signed_tx())
        self.assertTrue(is_tx_error(result))
        self.assertEqual(result.logs, [])
        self.assertEqual(json.loads(self.node.requests[-1].content)["mode"], "BROADCAST_MODE_BLOCK")

    #
    # Lookups
    #

    async def test_tx_info_errors(self):
        self.node.add("GET", "/cosmos/tx/v1beta1/txs/A", httpx.Response(404, json=NOT_FOUND))
        self.node.add(
            "GET",
            "/cosmos/tx/v1beta1/txs/B",
            httpx.Response(500, json={"code": 13, "message": "internal", "details": []}),
        )
        with self.assertRaises(TxNotFound):
            await self.lcd.tx.tx_info("A")
        with self.assertRaises(ApiResponseError):
            await self.lcd.tx.tx_info("B")

    async def test_tx_hashes_by_height(self):
        self.node.add(
            "GET",
            "/cosmos/base/tendermint/v1beta1/blocks/10",
            httpx.Response(200, json={"block": {"data": {"txs": ["AQID"]}}}),
        )
        self.node.add(
            "GET",
            "/cosmos/base/tendermint/v1beta1/blocks/latest",
            httpx.Response(200, json={"block": {"data": {"txs": None}}}),
        )
        self.assertEqual(
            await self.lcd.tx.tx_hashes_by_height(10),
            [hashlib.sha256(b"\x01\x02\x03").hexdigest().upper()],
        )
        self.assertEqual(await self.lcd.tx.tx_hashes_by_height(), [])
        self.assertEqual(await self.lcd.tx.tx_infos_by_height(), [])

    async def test_tx_infos_by_height(self):
        first = b64encode(b"first")
        second = b64encode(b"second")
        first_hash = hash_to_hex(first)
        second_hash = hash_to_hex(second)
        self.node.add(
            "GET",
            "/cosmos/base/tendermint/v1beta1/blocks/7",
            httpx.Response(200, json={"block": {"data": {"txs": [first, second]}}}),
        )
        self.node.add(
            "GET",
            f"/cosmos/tx/v1beta1/txs/{first_hash}",
            httpx.Response(404, json=NOT_FOUND),
            httpx.Response(200, json={"tx_response": self.tx_response(first_hash)}),
        )
        self.node.add(
            "GET",
            f"/cosmos/tx/v1beta1/txs/{second_hash}",
            httpx.Response(200, json={"tx_response": self.tx_response(second_hash)}),
        )

        infos = await self.lcd.tx.tx_infos_by_height(7)
        self.assertEqual([info.txhash for info in infos], [first_hash, second_hash])
        self.assertEqual(self.sleep.await_count, 1)

    async def test_tx_infos_by_height_later_failure(self):
        first = b64encode(b"first")
        second = b64encode(b"second")
        self.node.add(
            "GET",
            "/cosmos/base/tendermint/v1beta1/blocks/latest",
            httpx.Response(200, json={"block": {"data": {"txs": [first, second]}}}),
        )
        self.node.add(
            "GET",
            f"/cosmos/tx/v1beta1/txs/{hash_to_hex(first)}",
            httpx.Response(200, json={"tx_response": self.tx_response("X")}),
        )
        self.node.add(
            "GET",
            f"/cosmos/tx/v1beta1/txs/{hash_to_hex(second)}",
            httpx.Response(404, json=NOT_FOUND),
        )
        with self.assertRaises(TxNotFound):
            await self.lcd.tx.tx_infos_by_height()

    async def test_search(self):
        self.node.add(
            "GET",
            "/cosmos/tx/v1beta1/txs",
            httpx.Response(
                200,
                json={
                    "txs": [],
                    "tx_responses": [self.tx_response("ABC")],
                    "pagination": {"next_key": None, "total": "1"},
                },
            ),
        )
        result = await self.lcd.tx.search(
            [("message.sender", self.sender), ("tx.height", "120")],
            **{"pagination.limit": "10"},
        )
        self.assertEqual(result.txs[0].txhash, "ABC")
        self.assertEqual(result.pagination["total"], "1")

        params = self.node.requests[-1].url.params
        self.assertEqual(
            params.get_list("events"),
            [f"message.sender='{self.sender}'", "tx.height=120"],
        )
        self.assertEqual(
            params["query"], f"message.sender='{self.sender}' AND tx.height=120"
        )
        self.assertEqual(params["pagination.limit"], "10")

        await self.lcd.tx.search([("tx.height", "1")], query="tx.height>0")
        self.assertEqual(self.node.requests[-1].url.params["query"], "tx.height>0")

    async def test_search_keeps_unregistered_messages(self):
        vote = {
            "@type": "/cosmos.gov.v1beta1.MsgVote",
            "proposal_id": "4",
            "voter": self.sender,
            "option": "VOTE_OPTION_YES",
        }
        response = self.tx_response("VOTE")
        response["tx"]["body"]["messages"] = [vote, self.send().to_data()]
        self.node.add(
            "GET",
            "/cosmos/tx/v1beta1/txs",
            httpx.Response(200, json={"tx_responses": [response], "pagination": None}),
        )

        result = await self.lcd.tx.search([("message.sender", self.sender)])
        messages = result.txs[0].tx.body.messages
        self.assertIsInstance(messages[0], UnknownMsg)
        self.assertEqual(messages[0].to_data(), vote)
        self.assertEqual(messages[1], self.send())

    #
    # Encoding
    #

    async def test_encode_decode_hash(self):
        tx = self.signed_tx()
        encoded = self.lcd.tx.encode(tx)
        self.assertEqual(self.lcd.tx.decode(encoded), tx)
        self.assertEqual(
            self.lcd.tx.hash(tx),
            hashlib.sha256(tx.to_bytes()).hexdigest().upper(),
        )


if __name__ == "__main__":
    unittest.main()
