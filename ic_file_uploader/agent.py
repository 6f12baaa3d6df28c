"""Chunk writer that talks to a replica through ic-py (or a PocketIC instance)."""

from __future__ import annotations

import os
from typing import TYPE_CHECKING, Any, Callable, Optional

from .config import DEFAULT_REPLICA_URL, PROXY_ENV_VARS

if TYPE_CHECKING:
    from ic.agent import Agent


def clear_proxy_env() -> None:
    """Avoid proxies interfering with local replica calls."""
    for proxy_var in PROXY_ENV_VARS:
        os.environ.pop(proxy_var, None)


def configure_httpx_timeout(timeout_s: float) -> None:
    """Force a longer timeout for httpx calls used by ic.client."""
    import ic.client as ic_client
    import httpx

    def wrap(fn: Callable[..., httpx.Response]) -> Callable[..., httpx.Response]:
        def inner(*args: Any, **kwargs: Any) -> httpx.Response:
            kwargs.setdefault("timeout", timeout_s)
            return fn(*args, **kwargs)

        return inner

    ic_client.httpx.post = wrap(httpx.post)
    ic_client.httpx.get = wrap(httpx.get)


def make_agent(
    replica_url: str = DEFAULT_REPLICA_URL,
    identity_pem: Optional[str] = None,
    http_timeout: Optional[float] = None,
) -> Agent:
    """
    Build an ic-py Agent for *replica_url*.

    Uses an anonymous identity unless PEM text is given (for instance the
    contents of ``~/.config/dfx/identity/default/identity.pem``).
    """
    from ic.agent import Agent
    from ic.client import Client
    from ic.identity import Identity

    clear_proxy_env()
    if http_timeout is not None:
        configure_httpx_timeout(http_timeout)

    identity = Identity.from_pem(identity_pem) if identity_pem else Identity()
    return Agent(identity, Client(url=replica_url))


def encode_chunk_args(data: bytes, index: Optional[int] = None) -> bytes:
    """Candid-encode ``(vec nat8)`` or ``(nat, vec nat8)`` for an upload method."""
    from ic.candid import encode, Types

    args = []
    if index is not None:
        args.append({"type": Types.Nat, "value": index})
    args.append({"type": Types.Vec(Types.Nat8), "value": list(data)})
    return encode(args)


class AgentChunkWriter:
    """
    Upload chunks as update calls on *canister_id*.

    Args:
        client: ic-py Agent or PocketIC instance
        canister_id: str or Principal
        method_name: Update method receiving the chunk
        indexed: Prefix the chunk with its index as a ``nat`` argument
    """

    def __init__(self, client, canister_id, method_name: str, indexed: bool = False):
        self.client = client
        self.canister_id = canister_id
        self.method_name = method_name
        self.indexed = indexed

    def __call__(self, index: int, data: bytes):
        payload = encode_chunk_args(data, index if self.indexed else None)

        # Support both Agent and PocketIC
        if hasattr(self.client, "update_call"):
            from ic.principal import Principal

            cid = self.canister_id
            if not isinstance(cid, Principal):
                cid = Principal.from_str(str(cid))
            return self.client.update_call(cid, self.method_name, payload)
        return self.client.update_raw(self.canister_id, self.method_name, payload)
