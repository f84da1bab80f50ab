from __future__ import annotations

import base64
import itertools
import json
import logging
from typing import Any, Dict, List, Optional

import httpx

from domain.errors import ContractCallError

from .transactions import SignedTransaction, encode_args


logger = logging.getLogger(__name__)


def _describe_error(error: Any) -> str:
    if not isinstance(error, dict):
        return str(error)
    cause = error.get("cause") or {}
    name = cause.get("name") or error.get("name")
    if not name:
        return json.dumps(error)
    detail = error.get("data") or error.get("message") or ""
    return f"{name}: {detail}" if detail else name


def _decode_json_bytes(raw: bytes) -> Any:
    if not raw:
        return None
    return json.loads(raw.decode("utf-8"))


class JsonRpcProvider:
    """
    Thin client for a NEAR node's JSON-RPC endpoint.

    HTTP and connection failures are raised by httpx as they are. Errors
    reported by the node (including contract panics) become
    `ContractCallError` with the node's error object attached.
    """

    def __init__(
        self,
        node_url: str,
        client: Optional[httpx.AsyncClient] = None,
        timeout: float = 30.0,
    ) -> None:
        self.node_url = node_url
        self._owns_client = client is None
        self._client = client or httpx.AsyncClient(timeout=timeout)
        self._ids = itertools.count(1)

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def send_json_rpc(self, method: str, params: Any) -> Any:
        payload = {
            "jsonrpc": "2.0",
            "id": next(self._ids),
            "method": method,
            "params": params,
        }
        logger.debug("rpc %s %s", method, params)
        response = await self._client.post(self.node_url, json=payload)
        response.raise_for_status()
        body = response.json()

        if body.get("error"):
            raise ContractCallError(_describe_error(body["error"]), body["error"])

        result = body.get("result")
        # Older nodes report query failures inside the result object.
        if isinstance(result, dict) and result.get("error"):
            raise ContractCallError(str(result["error"]), result)
        return result

    async def query(self, **params: Any) -> Dict[str, Any]:
        return await self.send_json_rpc("query", params)

    async def view_account(self, account_id: str) -> Dict[str, Any]:
        return await self.query(
            request_type="view_account",
            finality="final",
            account_id=account_id,
        )

    async def view_access_key(self, account_id: str, public_key: str) -> Dict[str, Any]:
        return await self.query(
            request_type="view_access_key",
            finality="final",
            account_id=account_id,
            public_key=public_key,
        )

    async def view_access_key_list(self, account_id: str) -> List[Dict[str, Any]]:
        result = await self.query(
            request_type="view_access_key_list",
            finality="final",
            account_id=account_id,
        )
        return list(result.get("keys", []))

    async def call_function(
        self,
        contract_id: str,
        method_name: str,
        args: Dict[str, Any],
    ) -> Any:
        result = await self.query(
            request_type="call_function",
            finality="optimistic",
            account_id=contract_id,
            method_name=method_name,
            args_base64=base64.b64encode(encode_args(args)).decode("ascii"),
        )
        return _decode_json_bytes(bytes(result.get("result", [])))

    async def protocol_config(self) -> Dict[str, Any]:
        return await self.send_json_rpc("EXPERIMENTAL_protocol_config", {"finality": "final"})

    async def final_block_hash(self) -> str:
        block = await self.send_json_rpc("block", {"finality": "final"})
        return block["header"]["hash"]

    async def send_transaction(self, signed: SignedTransaction) -> Any:
        """Broadcast and wait for the outcome; returns the decoded return value."""

        encoded = base64.b64encode(signed.serialize()).decode("ascii")
        outcome = await self.send_json_rpc("broadcast_tx_commit", [encoded])
        status = outcome.get("status", {})
        if isinstance(status, dict) and "Failure" in status:
            raise ContractCallError(
                f"Transaction failed: {_describe_error(status['Failure'])}",
                status["Failure"],
            )
        value = status.get("SuccessValue") if isinstance(status, dict) else None
        if not value:
            return None
        return _decode_json_bytes(base64.b64decode(value))
