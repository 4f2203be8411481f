#!/usr/bin/env python3
"""Demo: spawn a process, message it, and read the result back.

Prerequisites
─────────────
1. A wallet key file (raw 32-byte ed25519 key). Create one with:
     python -c "from aoclient import Identity; Identity.create('wallet.key')"
2. Environment variables set:
     AO_WALLET     – path to the wallet key

Optional env:
     AO_CU_URL     – defaults to https://cu.ao-testnet.xyz
     AO_MU_URL     – defaults to https://mu.ao-testnet.xyz

Usage:
    python scripts/demo_ao.py <module_id> [lua expression]
"""

from __future__ import annotations

import logging
import sys

from aoclient import AOClient, ComputationError, Message, Tag


def main() -> None:
    if len(sys.argv) < 2:
        sys.exit(__doc__)
    module = sys.argv[1]
    expression = sys.argv[2] if len(sys.argv) > 2 else "1 + 1"

    logging.basicConfig(level=logging.INFO)
    client = AOClient.from_env()

    print(f"CU               = {client.cu_url}")
    print(f"MU               = {client.mu_url}")
    print(f"Owner            = {client.signer.owner}")
    print()

    print("--- spawn ---")
    process_id = client.spawn(module, tags=[Tag("Name", "aoclient-demo")])
    print(f"process          = {process_id}")

    print("--- send_message ---")
    message_id = client.send_message(process_id, expression, [Tag("Action", "Eval")])
    print(f"message          = {message_id}")

    print("--- load_result ---")
    try:
        result = client.load_result(process_id, message_id)
        print(f"gas_used         = {result.gas_used}")
        print(f"output           = {result.outputs}")
    except ComputationError as e:
        print(f"computation error: {e.error}")

    print("--- dry_run ---")
    dry = client.dry_run(
        Message(target=process_id, owner=client.signer.owner, data=expression,
                tags=[Tag("Action", "Eval")])
    )
    print(f"output           = {dry.outputs}")


if __name__ == "__main__":
    main()
